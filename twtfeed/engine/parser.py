"""twtfile parsing: one ``timestamp<TAB>text`` record per line."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

logger = structlog.get_logger("twtfeed.parser")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 style timestamp and normalise it to UTC.

    Accepts a trailing ``Z``, fractional seconds and a space instead of ``T``.
    Naive values are taken as UTC.
    """

    text = value.strip()
    if not text:
        raise ValueError("empty timestamp")
    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    candidate = datetime.fromisoformat(normalized)
    if candidate.tzinfo is None:
        return candidate.replace(tzinfo=timezone.utc)
    try:
        return candidate.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range: {value}") from exc


@dataclass(frozen=True, slots=True)
class Record:
    """A single tweet attributed to ``author``."""

    author: str
    timestamp: datetime
    text: str
    raw_timestamp: str = field(default="", compare=False, repr=False)

    @classmethod
    def create(cls, author: str, text: str, now: datetime | None = None) -> "Record":
        """Build a local record stamped with the current time."""

        stamp = (now or datetime.now(timezone.utc)).astimezone().replace(microsecond=0)
        return cls(
            author=author,
            timestamp=stamp.astimezone(timezone.utc),
            text=text,
            raw_timestamp=stamp.isoformat(timespec="seconds"),
        )

    def to_string(self) -> str:
        stamp = self.raw_timestamp or self.timestamp.isoformat(timespec="seconds")
        return f"{stamp}\t{self.text}"

    def strftime(self, time_format: str) -> str:
        try:
            local = self.timestamp.astimezone()
        except (OverflowError, OSError):
            # Near datetime.min/max the local offset can leave the supported range.
            local = self.timestamp
        return local.strftime(time_format)


def parse_line(author: str, line: str) -> Record | None:
    """Return the record for ``line`` or ``None`` when it is malformed."""

    stamp, sep, text = line.partition("\t")
    if not sep:
        return None
    try:
        timestamp = parse_timestamp(stamp)
    except ValueError:
        return None
    return Record(author=author, timestamp=timestamp, text=text, raw_timestamp=stamp)


def parse_twtfile(author: str, text: str) -> list[Record]:
    records: list[Record] = []
    skipped = 0
    for line in text.split("\n"):
        line = line.rstrip("\r")
        if not line:
            continue
        record = parse_line(author, line)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.debug("malformed_lines_skipped", source=author, count=skipped)
    return records


__all__ = ["Record", "parse_line", "parse_timestamp", "parse_twtfile"]
