"""Artifact downloads from the source feed."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from feedmigrator.domain.types import DownloadResult

from .client import FeedSession

if TYPE_CHECKING:
    from types import TracebackType

    from feedmigrator.adapters.http_resilience import ClientFactory
    from feedmigrator.config.feeds import FeedConfig

log = getLogger(__name__)


@dataclass(slots=True)
class HttpContentDownloader:
    """Fetch package bytes with the source feed's credentials.

    Never raises for transport problems: they come back as a result whose
    ``status`` is ``None``. Used as a context manager, every download shares one
    event loop and one session, so rate limiting and caching span the whole run.
    """

    feed: FeedConfig
    client_factory: ClientFactory | None = None
    _runner: asyncio.Runner | None = field(default=None, init=False, repr=False)
    _session: FeedSession | None = field(default=None, init=False, repr=False)

    def __enter__(self) -> HttpContentDownloader:
        self._runner = asyncio.Runner()
        self._session = FeedSession(self.feed, client_factory=self.client_factory)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        runner, session = self._runner, self._session
        self._runner = self._session = None
        if runner is None or session is None:
            return
        try:
            runner.run(session.__aexit__(exc_type, exc, tb))
        finally:
            runner.close()

    def __call__(self, location: str) -> DownloadResult:
        if self._runner is None or self._session is None:
            return asyncio.run(self.download_async(location))
        return self._runner.run(self.download_async(location, session=self._session))

    async def download_async(
        self,
        location: str,
        *,
        session: FeedSession | None = None,
    ) -> DownloadResult:
        if session is None:
            async with FeedSession(self.feed, client_factory=self.client_factory) as owned:
                return await self._fetch(owned, location)
        return await self._fetch(session, location)

    async def _fetch(self, session: FeedSession, location: str) -> DownloadResult:
        try:
            response = await session.get(location)
        except httpx.HTTPError as exc:
            log.debug("Download of %s failed", location, exc_info=True)
            return DownloadResult(status=None, error=f"{type(exc).__name__}: {exc}")

        if response.is_success:
            return DownloadResult(status=response.status_code, content=response.content)
        return DownloadResult(
            status=response.status_code,
            error=f"HTTP {response.status_code} {response.reason_phrase}".rstrip(),
        )
