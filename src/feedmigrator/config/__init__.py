"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env, optional_env_pair, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, StagingLocationError
from .feeds import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_PUBLISHER_COMMAND,
    FeedConfig,
    FeedCredentials,
    MigrationConfig,
    feed_resilience_config,
    get_api_key,
    get_feed_config,
    get_feed_credentials,
)
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import StorageConfig, get_http_cache_path, get_storage_config, resolve_staging_path

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_PUBLISHER_COMMAND",
    "CacheConfig",
    "ConfigurationError",
    "FeedConfig",
    "FeedCredentials",
    "MigrationConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StagingLocationError",
    "StorageConfig",
    "configure_logging",
    "feed_resilience_config",
    "get_api_key",
    "get_feed_config",
    "get_feed_credentials",
    "get_http_cache_path",
    "get_storage_config",
    "optional_env",
    "optional_env_pair",
    "require_env_vars",
    "resolve_staging_path",
]
