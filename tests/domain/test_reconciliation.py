from __future__ import annotations

from feedmigrator.domain.reconciliation import find_missing_entries, group_versions
from feedmigrator.domain.types import CatalogEntry, PackageReference


def _entry(identity: str, version: str) -> CatalogEntry:
    return CatalogEntry(
        PackageReference(identity, version),
        f"https://source.test/content/{identity.lower()}/{version}.nupkg",
    )


def test_group_versions() -> None:
    grouped = group_versions(
        [PackageReference("A", "1.0"), PackageReference("A", "2.0"), PackageReference("B", "1.0")]
    )

    assert grouped == {"A": {"1.0", "2.0"}, "B": {"1.0"}}


def test_missing_versions_and_identities() -> None:
    source = [_entry("A", "1.0"), _entry("A", "2.0"), _entry("B", "1.0")]

    missing = find_missing_entries(source, [PackageReference("A", "1.0")])

    assert missing == [_entry("A", "2.0"), _entry("B", "1.0")]


def test_nothing_missing_when_destination_matches() -> None:
    source = [_entry("A", "1.0"), _entry("B", "1.0")]
    destination = [entry.reference for entry in source]

    assert find_missing_entries(source, destination) == []


def test_everything_missing_from_empty_destination() -> None:
    source = [_entry("B", "1.0"), _entry("A", "2.0"), _entry("A", "1.0")]

    assert find_missing_entries(source, []) == source


def test_comparison_is_case_sensitive() -> None:
    source = [_entry("A", "1.0.0-Beta"), _entry("a", "1.0")]

    missing = find_missing_entries(
        source,
        [PackageReference("A", "1.0.0-beta"), PackageReference("A", "1.0")],
    )

    assert missing == source
