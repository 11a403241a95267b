"""In-memory NuGet V3 feeds served through ``httpx.MockTransport``."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003

import httpx
from httpx_retries import RetryTransport

from feedmigrator.adapters.http_resilience import (
    ResilienceConfig,
    ResilientClient,
    RetryPolicy,
    build_retry,
)
from feedmigrator.config.feeds import FeedConfig, FeedCredentials
from feedmigrator.domain.types import PublishResult

REGISTRATION_ROOT_TAGS = ["catalog:CatalogRoot", "PackageRegistration", "catalog:Permalink"]


def leaf_payload(base: str, identity: str, version: str) -> dict[str, object]:
    lowered = identity.lower()
    content = f"{base}/content/{lowered}/{version}.nupkg"
    return {
        "@id": f"{base}/registration/{lowered}/{version}.json",
        "@type": "Package",
        "catalogEntry": {
            "@id": f"{base}/catalog/{lowered}.{version}.json",
            "@type": "PackageDetails",
            "id": identity,
            "version": version,
            "packageContent": content,
        },
        "packageContent": content,
        "registration": f"{base}/registration/{lowered}/index.json",
    }


def open_page(location: str, items: list[dict[str, object]]) -> dict[str, object]:
    return {"@id": location, "@type": "catalog:CatalogPage", "count": len(items), "items": items}


def closed_page(location: str) -> dict[str, object]:
    return {"@id": location, "@type": "catalog:CatalogPage", "count": 1}


def registration_root(location: str, items: list[dict[str, object]]) -> dict[str, object]:
    return {"@id": location, "@type": REGISTRATION_ROOT_TAGS, "count": len(items), "items": items}


@dataclass
class FakeFeed:
    host: str
    packages: dict[str, list[str]] = field(default_factory=dict)
    documents: dict[str, object] = field(default_factory=dict)
    statuses: dict[str, int] = field(default_factory=dict)
    broken: set[str] = field(default_factory=set)
    failures: dict[str, list[int]] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    @property
    def base(self) -> str:
        return f"https://{self.host}"

    @property
    def index_url(self) -> str:
        return f"{self.base}/v3/index.json"

    @property
    def search_url(self) -> str:
        return f"{self.base}/query"

    @property
    def registration_base(self) -> str:
        return f"{self.base}/registration/"

    def registration_url(self, identity: str) -> str:
        return f"{self.registration_base}{identity.lower()}/index.json"

    def content_url(self, identity: str, version: str) -> str:
        return f"{self.base}/content/{identity.lower()}/{version}.nupkg"

    def config(self, credentials: FeedCredentials | None = None) -> FeedConfig:
        return FeedConfig(index_url=self.index_url, credentials=credentials)

    def add(self, identity: str, version: str) -> None:
        versions = self.packages.setdefault(identity, [])
        if version not in versions:
            versions.append(version)

    def fetch_count(self, url: str) -> int:
        return sum(1 for request in self.requests if _without_query(request.url) == url)

    def search_offsets(self) -> list[int]:
        return [
            int(request.url.params["skip"])
            for request in self.requests
            if _without_query(request.url) == self.search_url
        ]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = _without_query(request.url)
        if url in self.broken:
            raise httpx.ConnectError("connection refused", request=request)
        if pending := self.failures.get(url):
            return httpx.Response(pending.pop(0))
        if url in self.statuses:
            return httpx.Response(self.statuses[url])
        if url in self.documents:
            return httpx.Response(200, json=self.documents[url])
        if url == self.index_url:
            return httpx.Response(200, json=self._service_index())
        if url == self.search_url:
            return httpx.Response(200, json=self._search(request.url.params))
        if url.startswith(self.registration_base) and url.endswith("/index.json"):
            return self._registration(url)
        if url.startswith(f"{self.base}/content/"):
            return self._content(url)
        return httpx.Response(404)

    def _service_index(self) -> dict[str, object]:
        return {
            "version": "3.0.0",
            "resources": [
                {"@id": f"{self.base}/autocomplete", "@type": "SearchAutocompleteService"},
                {"@id": self.search_url, "@type": "SearchQueryService/3.5.0"},
                {"@id": f"{self.base}/registration-legacy/", "@type": "RegistrationsBaseUrl"},
                {"@id": self.registration_base, "@type": "RegistrationsBaseUrl/3.6.0"},
            ],
        }

    def _search(self, params: httpx.QueryParams) -> dict[str, object]:
        skip = int(params["skip"])
        take = int(params["take"])
        identities = list(self.packages)
        page = identities[skip : skip + take]
        return {
            "totalHits": len(identities),
            "data": [
                {
                    "id": identity,
                    "version": self.packages[identity][-1],
                    "versions": [{"version": version} for version in self.packages[identity]],
                }
                for identity in page
            ],
        }

    def _identity_for(self, lowered: str) -> str | None:
        return next((name for name in self.packages if name.lower() == lowered), None)

    def _registration(self, url: str) -> httpx.Response:
        lowered = url.removeprefix(self.registration_base).removesuffix("/index.json")
        identity = self._identity_for(lowered)
        if identity is None:
            return httpx.Response(404)
        leaves = [leaf_payload(self.base, identity, version) for version in self.packages[identity]]
        page = open_page(f"{url}#page/0", leaves)
        return httpx.Response(200, json=registration_root(url, [page]))

    def _content(self, url: str) -> httpx.Response:
        lowered, filename = url.removeprefix(f"{self.base}/content/").split("/", 1)
        identity = self._identity_for(lowered)
        version = filename.removesuffix(".nupkg")
        if identity is None or version not in self.packages[identity]:
            return httpx.Response(404)
        return httpx.Response(200, content=f"{identity}@{version}".encode())


def _without_query(url: httpx.URL) -> str:
    return str(url).split("?", 1)[0]


def make_client_factory(
    *feeds: FakeFeed,
    retry: RetryPolicy | None = None,
) -> Callable[[ResilienceConfig], ResilientClient]:
    """Route requests to ``feeds`` by host; ``retry`` keeps a retry transport in front."""

    by_host = {feed.host: feed for feed in feeds}

    async def async_handler(request: httpx.Request) -> httpx.Response:
        feed = by_host.get(request.url.host)
        if feed is None:
            return httpx.Response(404)
        return feed.handle(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        transport: httpx.AsyncBaseTransport = httpx.MockTransport(async_handler)
        if retry is not None:
            transport = RetryTransport(transport=transport, retry=build_retry(retry))
        client._client = httpx.AsyncClient(transport=transport)  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


@dataclass
class FakePublisher:
    """Records pushes and, on success, adds the package to ``destination``."""

    destination: FakeFeed | None = None
    exit_status: int = 0
    calls: list[tuple[Path, bytes, str]] = field(default_factory=list)

    def publish(self, artifact: Path, *, destination: str) -> PublishResult:
        content = artifact.read_bytes()
        self.calls.append((artifact, content, destination))
        if self.destination is not None and self.exit_status == 0:
            identity, version = content.decode().split("@", 1)
            self.destination.add(identity, version)
        return PublishResult(exit_status=self.exit_status, stdout=f"pushed {artifact.name}")
