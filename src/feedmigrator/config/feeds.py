"""Feed and migration run configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Literal

from .env import env_name, optional_env_pair, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from pathlib import Path

FeedRole = Literal["source", "destination"]

DEFAULT_PAGE_SIZE: Final[int] = 100
DEFAULT_TIMEOUT_SECONDS: Final[float] = 100.0
DEFAULT_PUBLISHER_COMMAND: Final[tuple[str, ...]] = ("dotnet", "nuget")
USER_AGENT: Final[str] = "feedmigrator"


@dataclass(frozen=True, slots=True)
class FeedCredentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"FeedCredentials(username={self.username!r}, password='***')"


@dataclass(frozen=True, slots=True)
class FeedConfig:
    """Where a feed lives and how to talk to it."""

    index_url: str
    credentials: FeedCredentials | None = None
    resilience: ResilienceConfig = field(
        default_factory=lambda: feed_resilience_config("feed")
    )


@dataclass(frozen=True, slots=True)
class MigrationConfig:
    """Holds everything a single migration run needs."""

    source: FeedConfig
    destination: FeedConfig
    staging_path: Path
    api_key: str | None = None
    push_source: str | None = None
    publisher_command: tuple[str, ...] = DEFAULT_PUBLISHER_COMMAND
    publisher_timeout_seconds: float | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    max_packages: int | None = None
    max_entries: int | None = None
    dry_run: bool = False
    report_path: Path | None = None

    @property
    def publish_target(self) -> str:
        return self.push_source or self.destination.index_url


def feed_resilience_config(
    name: str,
    *,
    ratelimit: RateLimit | None = None,
    cache: CacheConfig | None = None,
) -> ResilienceConfig:
    return ResilienceConfig(
        name=name,
        timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=4),
        ratelimit=ratelimit,
        cache=cache,
        default_headers={"User-Agent": USER_AGENT},
    )


def get_feed_credentials(role: FeedRole) -> FeedCredentials | None:
    prefix = role.upper()
    pair = optional_env_pair(env_name(f"{prefix}_USERNAME"), env_name(f"{prefix}_PASSWORD"))
    if pair is None:
        return None
    username, password = pair
    return FeedCredentials(username=username, password=password)


def get_feed_config(
    role: FeedRole,
    index_url: str,
    *,
    ratelimit: RateLimit | None = None,
    cache: CacheConfig | None = None,
) -> FeedConfig:
    return FeedConfig(
        index_url=index_url,
        credentials=get_feed_credentials(role),
        resilience=feed_resilience_config(role, ratelimit=ratelimit, cache=cache),
    )


def get_api_key() -> str:
    name = env_name("API_KEY")
    return require_env_vars((name,))[name]
