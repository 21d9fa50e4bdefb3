"""Exception types raised across twtfeed."""

from __future__ import annotations


class TwtfeedError(Exception):
    """Base exception for twtfeed errors."""


class ConfigurationError(TwtfeedError):
    """Configuration file is missing, unreadable or holds invalid values."""


class SourceFetchError(TwtfeedError):
    """A followed source could not be retrieved."""

    def __init__(self, message: str, kind: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class PublishHookError(TwtfeedError):
    """A pre or post tweet hook exited with a non-zero status."""

    def __init__(self, hook: str, command: str, returncode: int, appended: bool) -> None:
        super().__init__(f"Can't call {hook} {command} (exit status {returncode}).")
        self.hook = hook
        self.command = command
        self.returncode = returncode
        self.appended = appended


__all__ = ["ConfigurationError", "PublishHookError", "SourceFetchError", "TwtfeedError"]
