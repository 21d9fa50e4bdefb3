"""Timeline aggregation: concurrent conditional fetches merged with the local twtfile."""

from __future__ import annotations

import os
from dataclasses import dataclass

import httpx
import structlog

from .config import ClientConfig, ConfigRepository
from .engine import (
    CacheEntry,
    ConditionalFetcher,
    FeedCache,
    FetchOutcome,
    LocalRecordSink,
    Record,
    ThreadPoolManager,
    filter_records,
    parse_twtfile,
)
from .infra import SQLiteManager


@dataclass(frozen=True, slots=True)
class SourceJob:
    """Immutable snapshot handed to a fetch task."""

    nick: str
    url: str
    cached: CacheEntry | None = None


class TimelineAggregator:
    """Owns the follow list and the cache for the duration of one collection.

    Fetch tasks only read their ``SourceJob``; every mutation of the follow
    list or the cache happens on the calling thread after all tasks finished.
    """

    def __init__(
        self,
        config_repository: ConfigRepository,
        thread_pool: ThreadPoolManager | None = None,
        storage: SQLiteManager | None = None,
        transport: httpx.BaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config_repository = config_repository
        self.thread_pool = thread_pool or ThreadPoolManager()
        self.storage = storage or SQLiteManager()
        self.transport = transport
        self.logger = logger or structlog.get_logger("twtfeed").bind(component="aggregator")

    # ------------------------------------------------------------------
    def timeline(self, config: ClientConfig | None = None, selector: str | None = None) -> list[Record]:
        """Collect and apply the configured window, ordering and limit."""

        config = config or self.config_repository.load()
        settings = config.twtxt
        records = self.collect(config, selector)
        return filter_records(
            records,
            since=settings.since,
            until=settings.until,
            order=settings.sorting,
            limit=settings.limit_timeline,
        )

    def collect(self, config: ClientConfig | None = None, selector: str | None = None) -> list[Record]:
        """Return remote and local records in arrival order.

        A ``selector`` that is not followed yields no remote records.
        ``config.following`` is updated in place when a source moved.
        """

        config = config or self.config_repository.load()
        settings = config.twtxt
        following = config.following
        if selector is None:
            sources = dict(following)
        elif selector in following:
            sources = {selector: following[selector]}
        else:
            sources = {}

        cache = self._open_cache() if settings.use_cache else None
        jobs = [
            SourceJob(nick=nick, url=url, cached=cache.get(url) if cache else None)
            for nick, url in sources.items()
        ]
        with ConditionalFetcher(settings, transport=self.transport, logger=self.logger) as fetcher:
            outcomes = self.thread_pool.fan_out(
                lambda job: fetcher.fetch(job.url, job.cached), jobs
            )

        records: list[Record] = []
        rewritten = False
        for job, outcome in zip(jobs, outcomes):
            if outcome.moved_to and settings.rewrite_urls:
                self.logger.warning(
                    "url_rewritten",
                    source=job.nick,
                    old_url=job.url,
                    new_url=outcome.moved_to,
                )
                following[job.nick] = outcome.moved_to
                rewritten = True
            body = self._usable_body(job, outcome)
            if body is None:
                continue
            if cache is not None and outcome.cacheable:
                cache.set(following[job.nick], outcome.last_modified, body)
            records.extend(parse_twtfile(job.nick, body))

        sink = LocalRecordSink(settings.twtfile)
        if sink.exists():
            author = settings.nick or os.environ.get("USER") or "me"
            records.extend(parse_twtfile(author, sink.read()))

        if rewritten:
            self.config_repository.sync_following(following)
        if cache is not None:
            removed = cache.clean(following.values())
            if removed:
                self.logger.debug("cache_cleaned", removed=len(removed))
        return records

    # ------------------------------------------------------------------
    def _usable_body(self, job: SourceJob, outcome: FetchOutcome) -> str | None:
        if not outcome.ok:
            error = outcome.error
            self.logger.warning(
                "fetch_failed",
                source=job.nick,
                url=job.url,
                kind=error.kind if error else None,
                status_code=outcome.status_code,
                reason=str(error) if error else "unknown error",
            )
            return None
        if not outcome.body:
            self.logger.warning(
                "empty_body", source=job.nick, url=job.url, status=outcome.status.value
            )
            return None
        return outcome.body

    def close(self) -> None:
        self.storage.close_all()

    def _open_cache(self) -> FeedCache:
        return FeedCache(self.storage, self.config_repository.locator.cache_path())


__all__ = ["SourceJob", "TimelineAggregator"]
