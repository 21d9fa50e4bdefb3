"""Time window filtering, ordering and limiting of merged records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from ..config import SortOrder
from .parser import Record

BEGINNING_OF_TIME = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class TimeWindow:
    """Concrete UTC-normalised window; both bounds are inclusive."""

    since: datetime
    until: datetime

    def __post_init__(self) -> None:
        self.since = self._normalise(self.since)
        self.until = self._normalise(self.until)

    @staticmethod
    def _normalise(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @classmethod
    def resolve(
        cls, since: datetime | None = None, until: datetime | None = None
    ) -> "TimeWindow":
        return cls(
            since=since or BEGINNING_OF_TIME,
            until=until or datetime.now(timezone.utc),
        )

    def __contains__(self, record: Record) -> bool:
        return self.since <= record.timestamp <= self.until


def filter_records(
    records: Iterable[Record],
    since: datetime | None = None,
    until: datetime | None = None,
    order: SortOrder = SortOrder.DESCENDING,
    limit: int | None = None,
) -> list[Record]:
    """Keep records inside ``[since, until]``, sort them and cut to ``limit``.

    Sorting is stable in both directions, so records sharing a timestamp keep
    their arrival order. ``limit=None`` disables truncation, ``limit <= 0``
    yields nothing.
    """

    window = TimeWindow.resolve(since, until)
    kept = [record for record in records if record in window]
    kept.sort(key=lambda record: record.timestamp, reverse=order is SortOrder.DESCENDING)
    if limit is None:
        return kept
    if limit <= 0:
        return []
    return kept[:limit]


__all__ = ["BEGINNING_OF_TIME", "TimeWindow", "filter_records"]
