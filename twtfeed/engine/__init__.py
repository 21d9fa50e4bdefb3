"""Engine components: fetch → parse → merge → filter."""

from .cache import CacheEntry, FeedCache
from .fetcher import ConditionalFetcher, FetchOutcome, FetchStatus
from .mentions import MentionTransformer
from .parser import Record, parse_twtfile
from .publisher import LocalRecordSink
from .thread_pool import ThreadPoolManager
from .timeline import TimeWindow, filter_records

__all__ = [
    "CacheEntry",
    "ConditionalFetcher",
    "FeedCache",
    "FetchOutcome",
    "FetchStatus",
    "LocalRecordSink",
    "MentionTransformer",
    "Record",
    "ThreadPoolManager",
    "TimeWindow",
    "filter_records",
    "parse_twtfile",
]
