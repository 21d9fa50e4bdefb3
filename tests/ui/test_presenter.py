from __future__ import annotations

from datetime import datetime, timezone

import httpx
from rich.console import Console

from twtfeed.engine import MentionTransformer, Record
from twtfeed.engine.parser import parse_timestamp
from twtfeed.orchestrator import TimelineAggregator
from twtfeed.ui import display, render

FORMAT = "%Y-%m-%d %H:%M"


def _local(stamp: str) -> str:
    return parse_timestamp(stamp).astimezone().strftime(FORMAT)


def test_render_formats_time_author_and_text() -> None:
    record = Record("alice", datetime(2020, 1, 1, tzinfo=timezone.utc), "plain text")
    assert render([record], FORMAT) == [f"{_local('2020-01-01T00:00:00Z')} alice: plain text"]


def test_render_collapses_known_mentions() -> None:
    transformer = MentionTransformer(lambda: {"bob": "http://b/feed.txt"})
    record = Record("alice", datetime(2020, 1, 1, tzinfo=timezone.utc), "hi @<http://b/feed.txt>")
    assert render([record], "%H:%M", transformer)[0].endswith("alice: hi @bob")
    assert render([record], "%H:%M")[0].endswith("alice: hi @<http://b/feed.txt>")


def test_display_writes_lines_without_markup() -> None:
    console = Console(record=True, width=200, color_system=None)
    display(["[bold]not markup[/bold] @<http://x/>", "second"], console=console)
    assert console.export_text().splitlines() == [
        "[bold]not markup[/bold] @<http://x/>",
        "second",
    ]


def test_end_to_end_timeline_rendering(make_repository, recording_logger) -> None:
    repository = make_repository(
        following={"alice": "http://a/feed.txt", "bob": "http://b/feed.txt"},
        use_cache=False,
        embed_names=False,
    )

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "a":
            return httpx.Response(200, text="2020-01-01T00:00:00Z\tHello @<http://b/feed.txt>")
        return httpx.Response(404)

    aggregator = TimelineAggregator(
        repository, transport=httpx.MockTransport(handler), logger=recording_logger
    )
    config = repository.load()
    records = aggregator.timeline(config)

    lines = render(records, FORMAT, MentionTransformer(config.known_identities))
    assert lines == [f"{_local('2020-01-01T00:00:00Z')} alice: Hello @bob"]

    raw = render(records, FORMAT)
    assert raw == [f"{_local('2020-01-01T00:00:00Z')} alice: Hello @<http://b/feed.txt>"]
