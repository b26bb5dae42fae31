"""Load-once cache of the published profile feed."""

import asyncio
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any, Optional, Protocol

import structlog

from book.models import PageContent

logger = structlog.get_logger()

PageFetcher = Callable[[], Awaitable[list[PageContent]]]


class LoadStatus(StrEnum):
    """Lifecycle of a PageDataCache."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class FeedSource(Protocol):
    """Anything that can list the raw profile feed (e.g. ProfileWallClient)."""

    async def list_profiles(self) -> list[dict[str, Any]]:
        ...


def feed_fetcher(source: FeedSource) -> PageFetcher:
    """Adapt a feed source into the fetch function a cache expects."""

    async def fetch() -> list[PageContent]:
        entries = await source.list_profiles()
        return [PageContent.from_feed(entry) for entry in entries]

    return fetch


class PageDataCache:
    """Fetches the profile list once and memoizes it.

    Concurrent ``load()`` calls share one in-flight fetch. A failed fetch is
    terminal for this instance: the cache reports ``ERROR`` with an empty
    page list, which callers must treat as "done, no data". A fresh cache
    (e.g. on the next mount) is the only way to try again.
    """

    def __init__(self, fetch: PageFetcher) -> None:
        self._fetch = fetch
        self._task: Optional[asyncio.Task[list[PageContent]]] = None
        self.status = LoadStatus.IDLE
        self.pages: list[PageContent] = []
        self.error: Exception | None = None

    @property
    def is_loaded(self) -> bool:
        """True once the fetch has finished, successfully or not."""
        return self.status in (LoadStatus.READY, LoadStatus.ERROR)

    @property
    def has_error(self) -> bool:
        return self.status is LoadStatus.ERROR

    @property
    def content_page_count(self) -> int:
        return len(self.pages)

    @property
    def back_cover_index(self) -> int:
        return len(self.pages) + 1

    async def load(self) -> list[PageContent]:
        """Return the page list, fetching it on first use."""
        if self.is_loaded:
            return self.pages

        if self._task is None:
            self.status = LoadStatus.LOADING
            self._task = asyncio.ensure_future(self._run())

        # A cancelled caller must not cancel the fetch other callers share.
        return await asyncio.shield(self._task)

    async def _run(self) -> list[PageContent]:
        try:
            pages = await self._fetch()
        except Exception as e:
            logger.error("page_data_fetch_failed", error=str(e), error_type=type(e).__name__)
            self.error = e
            self.pages = []
            self.status = LoadStatus.ERROR
            return self.pages

        self.pages = list(pages)
        self.status = LoadStatus.READY
        logger.info("page_data_loaded", page_count=len(self.pages))
        return self.pages
