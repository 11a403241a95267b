"""Feed-level failures. Any of these aborts resolution for the affected feed."""

from __future__ import annotations


class FeedError(RuntimeError):
    """Base class for feed-level failures."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class UnreachableFeedError(FeedError):
    """Raised when a feed's service index cannot be fetched or parsed."""


class ResourceNotFoundError(FeedError):
    """Raised when a service index does not declare a required resource type."""

    def __init__(self, resource_type: str, *, url: str | None = None) -> None:
        super().__init__(f"Service index does not declare a {resource_type} resource", url=url)
        self.resource_type = resource_type


class FeedRequestError(FeedError):
    """Raised when a feed request fails after transport-level retries."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message, url=url)
        self.status = status


class FeedPaginationError(FeedRequestError):
    """Raised when a search page cannot be fetched; distinct from running out of data."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status: int | None = None,
        offset: int,
    ) -> None:
        super().__init__(message, url=url, status=status)
        self.offset = offset


class UnexpectedResourceError(FeedError):
    """Raised when a fetched document does not have a recognised shape."""
