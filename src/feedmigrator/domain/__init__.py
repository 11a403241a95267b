"""Domain layer: catalog value types, reconciliation, migration and reporting."""

from __future__ import annotations

from .migration import MigrationDriver
from .ports import ContentDownloader, Publisher, PublisherUnavailableError
from .reconciliation import find_missing_entries, group_versions
from .reporting import MigrationReport, summarize_outcomes, write_report
from .types import (
    CatalogEntry,
    DownloadResult,
    MigrationOutcome,
    PackageReference,
    PublishResult,
)

__all__ = [
    "CatalogEntry",
    "ContentDownloader",
    "DownloadResult",
    "MigrationDriver",
    "MigrationOutcome",
    "MigrationReport",
    "PackageReference",
    "PublishResult",
    "Publisher",
    "PublisherUnavailableError",
    "find_missing_entries",
    "group_versions",
    "summarize_outcomes",
    "write_report",
]
