"""Logging configuration built around structlog."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

import structlog

_LOGGING_INITIALISED = False

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.add_log_level,
]


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return the application logger.

    Warnings (failed sources, rewritten urls) go to stderr; with ``log_dir``
    every INFO event is also appended as JSON to ``twtfeed.log``.
    """

    global _LOGGING_INITIALISED
    if not _LOGGING_INITIALISED:
        console_level = "DEBUG" if verbose else "WARNING"
        handlers: dict[str, dict] = {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "level": console_level,
                "formatter": "console",
            },
        }
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            handlers["file"] = {
                "class": "logging.FileHandler",
                "level": "INFO",
                "filename": str(log_dir / "twtfeed.log"),
                "encoding": "utf-8",
                "formatter": "json",
            }
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "console": {
                        "()": structlog.stdlib.ProcessorFormatter,
                        "processor": structlog.dev.ConsoleRenderer(colors=False),
                        "foreign_pre_chain": _SHARED_PROCESSORS,
                    },
                    "json": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    },
                },
                "handlers": handlers,
                "loggers": {
                    "twtfeed": {
                        "handlers": list(handlers),
                        "level": "DEBUG" if verbose else "INFO",
                        "propagate": False,
                    },
                    "httpx": {"handlers": ["console"], "level": "WARNING", "propagate": False},
                },
            }
        )

        structlog.configure(
            processors=[
                *_SHARED_PROCESSORS,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("twtfeed")


__all__ = ["configure_logging"]
