"""Pydantic models describing the twtfeed configuration document."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

_DURATION_PATTERN = re.compile(r"(?P<value>\d+)(?P<unit>[smhdw])", re.IGNORECASE)
_DURATION_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


class SortOrder(str, Enum):
    """Timeline ordering."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


def parse_duration(value: str) -> timedelta:
    """Parse compact durations such as ``90m``, ``12h`` or ``1d12h``."""

    text = value.strip().lower()
    total = timedelta()
    index = 0
    for match in _DURATION_PATTERN.finditer(text):
        if match.start() != index:
            raise ValueError(f"Unsupported duration: {value}")
        unit = _DURATION_UNITS[match.group("unit").lower()]
        total += timedelta(**{unit: int(match.group("value"))})
        index = match.end()
    if not text or index != len(text) or total <= timedelta():
        raise ValueError(f"Unsupported duration: {value}")
    return total


def parse_time_bound(value: Any, reference: datetime | None = None) -> datetime | None:
    """Return a UTC datetime from an ISO-8601 string or a duration before ``reference``."""

    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        candidate = value
    else:
        text = str(value).strip()
        normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
        try:
            candidate = datetime.fromisoformat(normalized)
        except ValueError:
            candidate = None
    try:
        if candidate is None:
            reference = reference or datetime.now(timezone.utc)
            return reference - parse_duration(text)
        if candidate.tzinfo is None:
            return candidate.replace(tzinfo=timezone.utc)
        return candidate.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError(f"Time bound out of range: {value}") from exc


class TwtxtSettings(BaseModel):
    """Options of the ``twtxt`` section."""

    nick: str | None = None
    twtfile: Path = Field(default=Path("~/twtxt.txt"), validate_default=True)
    twturl: str | None = None
    sorting: SortOrder = SortOrder.DESCENDING
    limit_timeline: int = 20
    time_format: str = "%Y-%m-%d %H:%M"
    timeout: float = 5.0
    use_cache: bool = True
    use_pager: bool = False
    rewrite_urls: bool = True
    embed_names: bool = True
    disclose_identity: bool = False
    since: datetime | None = None
    until: datetime | None = None
    pre_tweet_hook: str | None = None
    post_tweet_hook: str | None = None

    @field_validator("twtfile", mode="before")
    @classmethod
    def _expand_twtfile(cls, value: Any) -> Path:
        return Path(str(value)).expanduser()

    @field_validator("since", "until", mode="before")
    @classmethod
    def _coerce_bound(cls, value: Any) -> datetime | None:
        return parse_time_bound(value)

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value

    @model_validator(mode="after")
    def _validate_window(self) -> "TwtxtSettings":
        if self.since and self.until and self.until < self.since:
            raise ValueError("until must not be earlier than since")
        return self


class ClientConfig(BaseModel):
    """Whole configuration document: settings plus the follow list."""

    twtxt: TwtxtSettings = Field(default_factory=TwtxtSettings)
    following: dict[str, str] = Field(default_factory=dict)

    @field_validator("twtxt", "following", mode="before")
    @classmethod
    def _empty_section(cls, value: Any) -> Any:
        # An empty YAML section loads as None.
        return {} if value is None else value

    def known_identities(self) -> dict[str, str]:
        """Return followed nicks plus the local nick when it has a URL."""

        if self.twtxt.nick and self.twtxt.twturl:
            return {self.twtxt.nick: self.twtxt.twturl, **self.following}
        return dict(self.following)


__all__ = [
    "ClientConfig",
    "SortOrder",
    "TwtxtSettings",
    "parse_duration",
    "parse_time_bound",
]
