from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog

from twtfeed import logging_conf


@pytest.fixture
def fresh_logging(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(logging_conf, "_LOGGING_INITIALISED", False)
    yield
    for name in ("twtfeed", "httpx"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.propagate = True
    structlog.reset_defaults()


def test_configure_logging_writes_json_file(fresh_logging, tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"
    logger = logging_conf.configure_logging(log_dir=log_dir)

    logger.info("record_appended", twtfile="x.txt")
    for handler in logging.getLogger("twtfeed").handlers:
        handler.flush()

    lines = (log_dir / "twtfeed.log").read_text(encoding="utf-8").splitlines()
    payload = json.loads(lines[-1])
    assert payload["event"] == "record_appended"
    assert payload["twtfile"] == "x.txt"


def test_configure_logging_runs_once(fresh_logging, tmp_path: Path) -> None:
    logging_conf.configure_logging(log_dir=tmp_path / "first")
    logging_conf.configure_logging(log_dir=tmp_path / "second")
    assert (tmp_path / "first").exists()
    assert not (tmp_path / "second").exists()


def test_console_level_follows_verbose(fresh_logging) -> None:
    logging_conf.configure_logging(verbose=True)
    handlers = logging.getLogger("twtfeed").handlers
    assert [handler.level for handler in handlers] == [logging.DEBUG]
