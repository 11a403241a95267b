"""Ports the migration stage uses to reach the outside world."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from .types import ContentLocation, DownloadResult, PublishResult


@runtime_checkable
class ContentDownloader(Protocol):
    """Callable port fetching artifact bytes from the source feed.

    Implementations report transport failures through
    ``DownloadResult.status is None`` instead of raising.
    """

    def __call__(self, location: ContentLocation) -> DownloadResult: ...


class PublisherUnavailableError(RuntimeError):
    """Raised when the publisher could not be started or did not finish for an item."""


@runtime_checkable
class Publisher(Protocol):
    """Uploads a staged artifact to the destination feed."""

    def publish(self, artifact: Path, *, destination: str) -> PublishResult: ...


__all__ = ["ContentDownloader", "Publisher", "PublisherUnavailableError"]
