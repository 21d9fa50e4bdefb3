"""Conditional HTTP fetching of twtfiles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import httpx
import structlog

from ..config import TwtxtSettings
from ..errors import SourceFetchError
from ..infra import build_user_agent
from .cache import CacheEntry

MAX_REDIRECTS = 5
HTTP_OK = 200
HTTP_MOVED_PERMANENTLY = 301
HTTP_NOT_MODIFIED = 304


def _is_header_safe(value: str | None) -> bool:
    # Values that do not encode as ASCII cannot be sent back in a request header.
    return bool(value) and value.isascii()


class FetchStatus(str, Enum):
    FRESH = "fresh"
    NOT_MODIFIED = "not_modified"
    FAILED = "failed"


@dataclass(slots=True)
class FetchOutcome:
    """Result of one conditional GET.

    ``moved_to`` is set independently of ``status`` when the first hop of the
    redirect chain was a permanent redirect to another url.
    """

    url: str
    status: FetchStatus
    body: str = ""
    status_code: int | None = None
    last_modified: str | None = None
    moved_to: str | None = None
    error: SourceFetchError | None = None

    @property
    def ok(self) -> bool:
        return self.status is not FetchStatus.FAILED

    @property
    def cacheable(self) -> bool:
        return (
            self.status is FetchStatus.FRESH
            and self.status_code == HTTP_OK
            and _is_header_safe(self.last_modified)
            and bool(self.body)
        )


class ConditionalFetcher:
    """Issue ``If-Modified-Since`` GETs and classify the responses."""

    def __init__(
        self,
        settings: TwtxtSettings,
        transport: httpx.BaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or structlog.get_logger("twtfeed.fetcher")
        # trust_env picks up HTTP(S)_PROXY / NO_PROXY from the environment.
        self._client = httpx.Client(
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            timeout=settings.timeout,
            headers={"User-Agent": build_user_agent(settings)},
            transport=transport,
            trust_env=True,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ConditionalFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch(self, url: str, cached: CacheEntry | None = None) -> FetchOutcome:
        headers = {}
        if cached is not None and _is_header_safe(cached.last_modified):
            headers["If-Modified-Since"] = cached.last_modified
        try:
            response = self._client.get(url, headers=headers)
        except httpx.TimeoutException as exc:
            return self._failure(url, "timeout", f"Connection error: timed out ({exc})")
        except httpx.TooManyRedirects as exc:
            return self._failure(url, "redirect", f"Connection error: {exc}")
        except Exception as exc:  # noqa: BLE001
            return self._failure(url, "connection", f"Connection error: {exc}")

        if response.status_code >= 400:
            return self._failure(
                url,
                "http",
                f"{response.status_code} response: {response.reason_phrase}",
                status_code=response.status_code,
            )

        moved_to = self._moved_to(url, response)

        if response.status_code == HTTP_NOT_MODIFIED:
            self.logger.debug("not_modified", url=url)
            return FetchOutcome(
                url=url,
                status=FetchStatus.NOT_MODIFIED,
                body=cached.body if cached is not None else "",
                status_code=response.status_code,
                last_modified=cached.last_modified if cached is not None else None,
                moved_to=moved_to,
            )

        return FetchOutcome(
            url=url,
            status=FetchStatus.FRESH,
            body=response.text,
            status_code=response.status_code,
            last_modified=response.headers.get("Last-Modified"),
            moved_to=moved_to,
        )

    # ------------------------------------------------------------------
    @staticmethod
    def _moved_to(url: str, response: httpx.Response) -> str | None:
        if not response.history:
            return None
        first = response.history[0]
        location = first.headers.get("Location")
        if first.status_code != HTTP_MOVED_PERMANENTLY or not location:
            return None
        target = str(first.url.join(location))
        return target if target != url else None

    def _failure(
        self, url: str, kind: str, message: str, status_code: int | None = None
    ) -> FetchOutcome:
        error = SourceFetchError(message, kind=kind, status_code=status_code)
        self.logger.debug("fetch_error", url=url, kind=kind, error=message)
        return FetchOutcome(
            url=url,
            status=FetchStatus.FAILED,
            status_code=status_code,
            error=error,
        )


__all__ = ["ConditionalFetcher", "FetchOutcome", "FetchStatus", "MAX_REDIRECTS"]
