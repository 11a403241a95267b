"""Service index lookup."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .client import FeedSession
from .errors import FeedRequestError, UnreachableFeedError
from .schema import ServiceIndex

if TYPE_CHECKING:
    from feedmigrator.adapters.http_resilience import ClientFactory
    from feedmigrator.config.feeds import FeedConfig

log = getLogger(__name__)


@dataclass(slots=True)
class ServiceIndexResolver:
    """Fetch a feed's service index.

    A single failed fetch raises :class:`UnreachableFeedError`; only the
    transport's own transient-error retries happen below this call.
    """

    feed: FeedConfig
    client_factory: ClientFactory | None = None

    def __call__(self) -> ServiceIndex:
        return asyncio.run(self.resolve_async())

    async def resolve_async(self, session: FeedSession | None = None) -> ServiceIndex:
        if session is None:
            async with FeedSession(self.feed, client_factory=self.client_factory) as owned:
                return await self._fetch(owned)
        return await self._fetch(session)

    async def _fetch(self, session: FeedSession) -> ServiceIndex:
        url = self.feed.index_url
        try:
            payload = await session.get_json(url)
        except FeedRequestError as exc:
            raise UnreachableFeedError(f"Service index {url} is unreachable: {exc}", url=url) from exc

        try:
            index = ServiceIndex.model_validate(payload)
        except ValidationError as exc:
            raise UnreachableFeedError(f"Service index {url} is malformed: {exc}", url=url) from exc

        log.debug("Service index %s declares %d resources", url, len(index.resources))
        return index
