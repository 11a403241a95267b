"""Public interface for the NuGet V3 feed adapter."""

from __future__ import annotations

from .client import FeedSession
from .downloader import HttpContentDownloader
from .errors import (
    FeedError,
    FeedPaginationError,
    FeedRequestError,
    ResourceNotFoundError,
    UnexpectedResourceError,
    UnreachableFeedError,
)
from .lister import PackageLister
from .schema import ServiceIndex, parse_registration_document
from .service_index import ServiceIndexResolver
from .walker import CatalogWalker, ResourceVisitSet, registration_url

__all__ = [
    "CatalogWalker",
    "FeedError",
    "FeedPaginationError",
    "FeedRequestError",
    "FeedSession",
    "HttpContentDownloader",
    "PackageLister",
    "ResourceNotFoundError",
    "ResourceVisitSet",
    "ServiceIndex",
    "ServiceIndexResolver",
    "UnexpectedResourceError",
    "UnreachableFeedError",
    "parse_registration_document",
    "registration_url",
]
