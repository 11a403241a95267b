"""Sequential download, stage and publish of missing catalog entries."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .ports import PublisherUnavailableError
from .types import MigrationOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from .ports import ContentDownloader, Publisher
    from .types import CatalogEntry

log = getLogger(__name__)


@dataclass(slots=True)
class MigrationDriver:
    """Push entries to the destination one at a time through a shared staging file.

    Item failures end up in that item's :class:`MigrationOutcome`; nothing an
    individual item does stops the remaining items. The staging file is removed
    once every entry has been processed.
    """

    downloader: ContentDownloader
    publisher: Publisher
    staging_path: Path

    def run(
        self,
        entries: Sequence[CatalogEntry],
        *,
        destination: str,
    ) -> list[MigrationOutcome]:
        outcomes: list[MigrationOutcome] = []
        total = len(entries)
        try:
            for position, entry in enumerate(entries, start=1):
                log.info("[%d/%d] Migrating %s", position, total, entry)
                outcomes.append(self.migrate_entry(entry, destination=destination))
        finally:
            self._remove_staging_file()
        return outcomes

    def migrate_entry(self, entry: CatalogEntry, *, destination: str) -> MigrationOutcome:
        download = self.downloader(entry.content_location)
        if not download.ok or download.content is None:
            log.warning(
                "Download of %s from %s failed with status %s%s",
                entry,
                entry.content_location,
                download.status if download.status is not None else "<no response>",
                f": {download.error}" if download.error else "",
            )
            return MigrationOutcome(entry=entry, http_status=download.status, error=download.error)

        try:
            self.staging_path.write_bytes(download.content)
        except OSError as exc:
            log.error("Could not stage %s at %s: %s", entry, self.staging_path, exc)
            return MigrationOutcome(entry=entry, http_status=download.status, error=str(exc))

        try:
            published = self.publisher.publish(self.staging_path, destination=destination)
        except PublisherUnavailableError as exc:
            log.error("Publisher could not be started for %s: %s", entry, exc)
            return MigrationOutcome(entry=entry, http_status=download.status, error=str(exc))

        if published.exit_status != 0:
            log.warning("Publisher exited with %s for %s", published.exit_status, entry)
        return MigrationOutcome(
            entry=entry,
            http_status=download.status,
            publisher_status=published.exit_status,
            stdout=published.stdout,
            stderr=published.stderr,
        )

    def _remove_staging_file(self) -> None:
        try:
            self.staging_path.unlink(missing_ok=True)
        except OSError as exc:
            log.warning("Could not remove staging file %s: %s", self.staging_path, exc)
