"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from feedmigrator.adapters.nuget import (
    CatalogWalker,
    FeedSession,
    HttpContentDownloader,
    PackageLister,
    ServiceIndexResolver,
)
from feedmigrator.adapters.publisher import CommandLinePublisher
from feedmigrator.config.errors import MissingConfigurationError
from feedmigrator.domain.migration import MigrationDriver
from feedmigrator.domain.reconciliation import find_missing_entries
from feedmigrator.domain.reporting import MigrationReport, summarize_outcomes, write_report

if TYPE_CHECKING:
    from feedmigrator.adapters.http_resilience import ClientFactory
    from feedmigrator.config.feeds import MigrationConfig
    from feedmigrator.domain.ports import Publisher
    from feedmigrator.domain.types import CatalogEntry

log = getLogger(__name__)


def resolve_missing_entries(
    config: MigrationConfig,
    *,
    client_factory: ClientFactory | None = None,
) -> list[CatalogEntry]:
    """List both feeds, resolve the source catalog and return what the destination lacks."""

    return asyncio.run(_resolve_missing_async(config, client_factory))


async def _resolve_missing_async(
    config: MigrationConfig,
    client_factory: ClientFactory | None,
) -> list[CatalogEntry]:
    async with (
        FeedSession(config.source, client_factory=client_factory) as source,
        FeedSession(config.destination, client_factory=client_factory) as destination,
    ):
        source_index = await ServiceIndexResolver(config.source).resolve_async(source)
        destination_index = await ServiceIndexResolver(config.destination).resolve_async(
            destination
        )
        registration_base = source_index.registration_base()
        source_search = source_index.search_endpoint()
        destination_search = destination_index.search_endpoint()

        source_refs = await PackageLister(config.source, page_size=config.page_size).list_async(
            source_search,
            max_results=config.max_packages,
            session=source,
        )
        destination_refs = await PackageLister(
            config.destination, page_size=config.page_size
        ).list_async(destination_search, session=destination)
        log.info(
            "Source lists %d package versions, destination lists %d",
            len(source_refs),
            len(destination_refs),
        )

        entries = await CatalogWalker(config.source).resolve_async(
            registration_base,
            (reference.identity for reference in source_refs),
            max_entries=config.max_entries,
            session=source,
        )

    missing = find_missing_entries(entries, destination_refs)
    log.info("%d of %d source entries are missing from the destination", len(missing), len(entries))
    return missing


def migrate_feed(
    config: MigrationConfig,
    *,
    client_factory: ClientFactory | None = None,
    publisher: Publisher | None = None,
) -> MigrationReport:
    """Copy every package version the destination feed lacks from the source feed."""

    if publisher is None and not config.dry_run:
        if config.api_key is None:
            raise MissingConfigurationError("An API key is required to publish packages")
        command_line = CommandLinePublisher(
            api_key=config.api_key,
            command=config.publisher_command,
            timeout_seconds=config.publisher_timeout_seconds,
        )
        command_line.ensure_available()
        publisher = command_line

    log.info(
        "Starting migration: source=%s, destination=%s, dry_run=%s",
        config.source.index_url,
        config.destination.index_url,
        config.dry_run,
    )
    missing = resolve_missing_entries(config, client_factory=client_factory)

    if config.dry_run or publisher is None:
        for entry in missing:
            log.info("Would migrate %s from %s", entry, entry.content_location)
        report = MigrationReport(succeeded=0, failed=0, missing=missing, dry_run=True)
    else:
        with HttpContentDownloader(config.source, client_factory=client_factory) as downloader:
            driver = MigrationDriver(
                downloader=downloader,
                publisher=publisher,
                staging_path=config.staging_path,
            )
            outcomes = driver.run(missing, destination=config.publish_target)
        report = summarize_outcomes(outcomes, missing=missing)

    if config.report_path is not None:
        write_report(report, config.report_path)
    return report
