"""Shared HTTP plumbing for talking to a NuGet V3 feed."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from feedmigrator.adapters.http_resilience import ResilientClient

from .errors import FeedRequestError

if TYPE_CHECKING:
    from types import TracebackType

    from feedmigrator.adapters.http_resilience import ClientFactory
    from feedmigrator.config.feeds import FeedConfig, FeedCredentials
    from feedmigrator.config.http_resilience import ResilienceConfig

QueryParams = dict[str, str | int]


def default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def basic_auth(credentials: FeedCredentials | None) -> httpx.BasicAuth | None:
    if credentials is None:
        return None
    return httpx.BasicAuth(credentials.username, credentials.password)


class FeedSession:
    """An open client bound to one feed's credentials."""

    def __init__(self, feed: FeedConfig, *, client_factory: ClientFactory | None = None) -> None:
        self.feed = feed
        self._client = (client_factory or default_client_factory)(feed.resilience)
        self._auth = basic_auth(feed.credentials)

    async def __aenter__(self) -> FeedSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, params: QueryParams | None = None) -> httpx.Response:
        return await self._client.get(url, params=params, auth=self._auth)

    async def get_json(self, url: str, *, params: QueryParams | None = None) -> object:
        """GET ``url`` and decode JSON, raising :class:`FeedRequestError` on failure."""

        try:
            response = await self.get(url, params=params)
        except httpx.HTTPError as exc:
            raise FeedRequestError(f"Request to {url} failed: {exc}", url=url) from exc

        if response.is_error:
            raise FeedRequestError(
                f"Request to {url} returned HTTP {response.status_code}",
                url=url,
                status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise FeedRequestError(
                f"Response from {url} is not valid JSON",
                url=url,
                status=response.status_code,
            ) from exc
