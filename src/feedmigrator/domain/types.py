"""Value types shared by the catalog, reconciliation and migration stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, TypeAlias

PackageIdentity: TypeAlias = str
ContentLocation: TypeAlias = str

SUCCESS_HTTP_STATUS: Final[int] = 200
SUCCESS_EXIT_STATUS: Final[int] = 0


@dataclass(frozen=True, slots=True)
class PackageReference:
    """One version of one package; compared by exact, case-sensitive strings."""

    identity: PackageIdentity
    version: str

    def __str__(self) -> str:
        return f"{self.identity}@{self.version}"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """A source-feed package version together with where its bytes live."""

    reference: PackageReference
    content_location: ContentLocation

    @property
    def identity(self) -> PackageIdentity:
        return self.reference.identity

    @property
    def version(self) -> str:
        return self.reference.version

    def __str__(self) -> str:
        return str(self.reference)


@dataclass(frozen=True, slots=True)
class DownloadResult:
    """Result of fetching artifact bytes.

    ``status`` is ``None`` when the request never completed.
    """

    status: int | None
    content: bytes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300 and self.content is not None


@dataclass(frozen=True, slots=True)
class PublishResult:
    exit_status: int
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True, slots=True)
class MigrationOutcome:
    """Per-item record of a migration attempt.

    ``http_status`` is ``None`` when the download never completed and
    ``publisher_status`` is ``None`` when the publisher was not attempted or
    could not be started.
    """

    entry: CatalogEntry
    http_status: int | None
    publisher_status: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def content_location(self) -> ContentLocation:
        return self.entry.content_location

    @property
    def publish_attempted(self) -> bool:
        return self.publisher_status is not None

    @property
    def succeeded(self) -> bool:
        return (
            self.http_status == SUCCESS_HTTP_STATUS
            and self.publisher_status == SUCCESS_EXIT_STATUS
        )
