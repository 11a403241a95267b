"""Paged enumeration of a feed's packages through its search service."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from feedmigrator.config.feeds import DEFAULT_PAGE_SIZE
from feedmigrator.domain.types import PackageReference

from .client import FeedSession
from .errors import FeedPaginationError, FeedRequestError
from .schema import SearchResponse

if TYPE_CHECKING:
    from feedmigrator.adapters.http_resilience import ClientFactory
    from feedmigrator.config.feeds import FeedConfig

    from .client import QueryParams

log = getLogger(__name__)

SEM_VER_LEVEL: Final[str] = "2.0.0"


@dataclass(slots=True)
class PackageLister:
    feed: FeedConfig
    client_factory: ClientFactory | None = None
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError("Page size must be positive")

    def __call__(
        self,
        search_endpoint: str,
        *,
        max_results: int | None = None,
    ) -> list[PackageReference]:
        return asyncio.run(self.list_async(search_endpoint, max_results=max_results))

    async def list_async(
        self,
        search_endpoint: str,
        *,
        max_results: int | None = None,
        session: FeedSession | None = None,
    ) -> list[PackageReference]:
        if session is None:
            async with FeedSession(self.feed, client_factory=self.client_factory) as owned:
                return await self._collect(owned, search_endpoint, max_results)
        return await self._collect(session, search_endpoint, max_results)

    async def _collect(
        self,
        session: FeedSession,
        search_endpoint: str,
        max_results: int | None,
    ) -> list[PackageReference]:
        references: list[PackageReference] = []
        offset = 0

        while True:
            page = await self._request_page(session, search_endpoint, offset=offset)
            if not page.data:
                break

            for result in page.data:
                versions = [entry.version for entry in result.versions]
                if not versions and result.version:
                    versions = [result.version]
                references.extend(
                    PackageReference(identity=result.id, version=version) for version in versions
                )

            if max_results is not None and len(references) >= max_results:
                log.info("Reached the %d result cap at offset %d", max_results, offset)
                return references[:max_results]
            offset += self.page_size

        log.info(
            "Listed %d package versions from %s",
            len(references),
            self.feed.index_url,
        )
        return references

    async def _request_page(
        self,
        session: FeedSession,
        search_endpoint: str,
        *,
        offset: int,
    ) -> SearchResponse:
        params: QueryParams = {
            "prerelease": "true",
            "semVerLevel": SEM_VER_LEVEL,
            "skip": offset,
            "take": self.page_size,
        }
        log.debug("Requesting search page at offset %d from %s", offset, search_endpoint)
        try:
            payload = await session.get_json(search_endpoint, params=params)
            return SearchResponse.model_validate(payload)
        except FeedRequestError as exc:
            raise FeedPaginationError(
                f"Search page at offset {offset} failed: {exc}",
                url=search_endpoint,
                status=exc.status,
                offset=offset,
            ) from exc
        except ValidationError as exc:
            raise FeedPaginationError(
                f"Search page at offset {offset} is malformed: {exc}",
                url=search_endpoint,
                offset=offset,
            ) from exc
