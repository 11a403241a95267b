"""Flatten registration trees into catalog entries.

Every fetch goes through a :class:`ResourceVisitSet` created for the current
resolution run. A location is claimed before it is fetched, so a resource shared
by several parents (or reachable through a cycle) is fetched once and skipped
afterwards. Traversal is depth-first over an explicit stack.
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, TypeAlias

from pydantic import ValidationError

from feedmigrator.domain.types import CatalogEntry, PackageReference

from .client import FeedSession
from .errors import UnexpectedResourceError
from .schema import (
    CatalogLeaf,
    ClosedCatalogPage,
    OpenCatalogPage,
    RegistrationPage,
    parse_registration_document,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from feedmigrator.adapters.http_resilience import ClientFactory
    from feedmigrator.config.feeds import FeedConfig

log = getLogger(__name__)

WorkItem: TypeAlias = str | RegistrationPage | OpenCatalogPage | ClosedCatalogPage | CatalogLeaf


class ResourceVisitSet:
    """Locations already fetched during one resolution run."""

    __slots__ = ("_locations", "duplicate_hits")

    def __init__(self) -> None:
        self._locations: set[str] = set()
        self.duplicate_hits = 0

    def claim(self, location: str) -> bool:
        """Mark ``location`` as visited; ``False`` if it already was.

        Contains no ``await``, so the check and insert cannot interleave with
        another coroutine.
        """

        if location in self._locations:
            self.duplicate_hits += 1
            return False
        self._locations.add(location)
        return True

    def __contains__(self, location: object) -> bool:
        return location in self._locations

    def __len__(self) -> int:
        return len(self._locations)


def registration_url(registration_base: str, identity: str) -> str:
    return f"{registration_base.rstrip('/')}/{identity.lower()}/index.json"


@dataclass(slots=True)
class CatalogWalker:
    feed: FeedConfig
    client_factory: ClientFactory | None = None

    def __call__(
        self,
        registration_base: str,
        identities: Iterable[str],
        *,
        max_entries: int | None = None,
    ) -> list[CatalogEntry]:
        return asyncio.run(
            self.resolve_async(registration_base, identities, max_entries=max_entries)
        )

    async def resolve_async(
        self,
        registration_base: str,
        identities: Iterable[str],
        *,
        max_entries: int | None = None,
        session: FeedSession | None = None,
    ) -> list[CatalogEntry]:
        """Resolve every distinct identity under one fresh visit set."""

        if session is None:
            async with FeedSession(self.feed, client_factory=self.client_factory) as owned:
                return await self._resolve(owned, registration_base, identities, max_entries)
        return await self._resolve(session, registration_base, identities, max_entries)

    async def _resolve(
        self,
        session: FeedSession,
        registration_base: str,
        identities: Iterable[str],
        max_entries: int | None,
    ) -> list[CatalogEntry]:
        visits = ResourceVisitSet()
        entries: list[CatalogEntry] = []
        distinct = list(dict.fromkeys(identities))

        for identity in distinct:
            root = registration_url(registration_base, identity)
            async with aclosing(self.walk(session, root, visits)) as stream:
                async for entry in stream:
                    entries.append(entry)
                    if max_entries is not None and len(entries) >= max_entries:
                        log.info("Reached the %d catalog entry cap at %s", max_entries, identity)
                        return entries

        log.info(
            "Resolved %d catalog entries for %d packages (%d resources fetched, %d skipped)",
            len(entries),
            len(distinct),
            len(visits),
            visits.duplicate_hits,
        )
        return entries

    async def walk(
        self,
        session: FeedSession,
        root_location: str,
        visits: ResourceVisitSet,
    ) -> AsyncIterator[CatalogEntry]:
        """Yield the leaves reachable from ``root_location``, depth-first."""

        pending: list[WorkItem] = [root_location]
        while pending:
            node = pending.pop()

            if isinstance(node, CatalogLeaf):
                yield _catalog_entry(node)
            elif isinstance(node, RegistrationPage | OpenCatalogPage):
                pending.extend(reversed(node.items))
            elif isinstance(node, ClosedCatalogPage | str):
                location = node if isinstance(node, str) else node.location
                if not visits.claim(location):
                    log.info("Skipping already visited resource %s", location)
                    continue
                pending.append(await self._fetch(session, location))
            else:
                raise UnexpectedResourceError(f"Unhandled registration node {node!r}")

    async def _fetch(
        self,
        session: FeedSession,
        location: str,
    ) -> RegistrationPage | OpenCatalogPage | ClosedCatalogPage | CatalogLeaf:
        log.debug("Fetching registration resource %s", location)
        payload = await session.get_json(location)
        try:
            return parse_registration_document(payload)
        except ValidationError as exc:
            raise UnexpectedResourceError(
                f"Unrecognised registration document at {location}: {exc}",
                url=location,
            ) from exc


def _catalog_entry(leaf: CatalogLeaf) -> CatalogEntry:
    location = leaf.content_location
    if location is None:
        raise UnexpectedResourceError(f"Package leaf {leaf.location} has no content location")
    details = leaf.catalog_entry
    return CatalogEntry(
        reference=PackageReference(identity=details.id, version=details.version),
        content_location=location,
    )
