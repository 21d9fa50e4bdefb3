"""Pytest configuration providing shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from twtfeed.config import ConfigLocator, ConfigRepository


class RecordingLogger:
    """Stand-in for a structlog bound logger that remembers every event."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def bind(self, **_kwargs: Any) -> "RecordingLogger":
        return self

    def _log(self, level: str, event: str, **kwargs: Any) -> None:
        self.events.append((level, event, kwargs))

    def debug(self, event: str, **kwargs: Any) -> None:
        self._log("debug", event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._log("info", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._log("warning", event, **kwargs)

    def named(self, event: str, level: str | None = None) -> list[dict[str, Any]]:
        return [
            kwargs
            for lvl, name, kwargs in self.events
            if name == event and (level is None or lvl == level)
        ]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("TWTFEED_HOME", str(home))
    return home


@pytest.fixture
def make_repository(config_home: Path, tmp_path: Path) -> Callable[..., ConfigRepository]:
    def _builder(
        following: dict[str, str] | None = None,
        overrides: dict[str, Any] | None = None,
        **settings: Any,
    ) -> ConfigRepository:
        base: dict[str, Any] = {
            "nick": "me",
            "twturl": "http://me.example/twtxt.txt",
            "twtfile": str(tmp_path / "twtxt.txt"),
            "use_pager": False,
        }
        base.update(settings)
        locator = ConfigLocator()
        locator.config_file.parent.mkdir(parents=True, exist_ok=True)
        locator.config_file.write_text(
            yaml.safe_dump({"twtxt": base, "following": following or {}}),
            encoding="utf-8",
        )
        return ConfigRepository(locator, overrides=overrides)

    return _builder
