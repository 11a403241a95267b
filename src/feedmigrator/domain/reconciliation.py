"""Set difference between a source catalog and a destination package list."""

from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .types import CatalogEntry, PackageIdentity, PackageReference

log = getLogger(__name__)


def group_versions(
    references: Iterable[PackageReference],
) -> dict[PackageIdentity, set[str]]:
    """Index references as ``identity -> {version, ...}``."""

    grouped: defaultdict[PackageIdentity, set[str]] = defaultdict(set)
    for reference in references:
        grouped[reference.identity].add(reference.version)
    return dict(grouped)


def find_missing_entries(
    source: Iterable[CatalogEntry],
    destination: Iterable[PackageReference],
) -> list[CatalogEntry]:
    """Return the source entries whose (identity, version) the destination lacks.

    An identity absent from the destination keeps all of its source versions; a
    known identity keeps only the versions outside the destination's set.
    Source order is preserved.
    """

    present = group_versions(destination)
    missing: list[CatalogEntry] = []
    for entry in source:
        known_versions = present.get(entry.identity)
        if known_versions is not None and entry.version in known_versions:
            continue
        missing.append(entry)

    log.debug(
        "Reconciled against %d destination identities: %d entries missing",
        len(present),
        len(missing),
    )
    return missing
