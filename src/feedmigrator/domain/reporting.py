"""Aggregation of migration outcomes into a run report."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from .types import CatalogEntry, MigrationOutcome

log = getLogger(__name__)


@dataclass(slots=True)
class MigrationReport:
    """Outcome of a migration run."""

    succeeded: int
    failed: int
    missing: list[CatalogEntry] = field(default_factory=list["CatalogEntry"])
    outcomes: list[MigrationOutcome] = field(default_factory=list["MigrationOutcome"])
    dry_run: bool = False

    @property
    def failures(self) -> list[MigrationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    def to_dict(self) -> dict[str, object]:
        return {
            "dry_run": self.dry_run,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "missing": [
                {
                    "id": entry.identity,
                    "version": entry.version,
                    "content": entry.content_location,
                }
                for entry in self.missing
            ],
            "outcomes": [
                {
                    "id": outcome.entry.identity,
                    "version": outcome.entry.version,
                    "content": outcome.content_location,
                    "http_status": outcome.http_status,
                    "publisher_status": outcome.publisher_status,
                    "succeeded": outcome.succeeded,
                    "stdout": outcome.stdout,
                    "stderr": outcome.stderr,
                    "error": outcome.error,
                }
                for outcome in self.outcomes
            ],
        }


def summarize_outcomes(
    outcomes: Iterable[MigrationOutcome],
    *,
    missing: Iterable[CatalogEntry] = (),
) -> MigrationReport:
    """Count successes (HTTP 200 and publisher exit 0) and failures. Never raises."""

    collected = list(outcomes)
    succeeded = sum(1 for outcome in collected if outcome.succeeded)
    report = MigrationReport(
        succeeded=succeeded,
        failed=len(collected) - succeeded,
        missing=list(missing),
        outcomes=collected,
    )

    for outcome in report.failures:
        log.warning(
            "Failed: %s (http=%s, publisher=%s)%s",
            outcome.entry,
            outcome.http_status,
            outcome.publisher_status if outcome.publish_attempted else "not attempted",
            f" {outcome.error}" if outcome.error else "",
        )
    log.info("Migration finished: succeeded=%d, failed=%d", report.succeeded, report.failed)
    return report


def write_report(report: MigrationReport, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
    log.info("Wrote migration report to %s", path)
    return path
