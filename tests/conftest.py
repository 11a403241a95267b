from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.helpers.feeds import FakeFeed, make_client_factory

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from feedmigrator.adapters.http_resilience import ResilienceConfig, ResilientClient


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for suffix in (
        "SOURCE_USERNAME",
        "SOURCE_PASSWORD",
        "DESTINATION_USERNAME",
        "DESTINATION_PASSWORD",
        "API_KEY",
        "STAGING_PATH",
    ):
        monkeypatch.delenv(f"FEEDMIGRATOR_{suffix}", raising=False)
    monkeypatch.setenv("FEEDMIGRATOR_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def source_feed() -> FakeFeed:
    return FakeFeed(host="source.test")


@pytest.fixture
def destination_feed() -> FakeFeed:
    return FakeFeed(host="destination.test")


@pytest.fixture
def client_factory(
    source_feed: FakeFeed,
    destination_feed: FakeFeed,
) -> Callable[[ResilienceConfig], ResilientClient]:
    return make_client_factory(source_feed, destination_feed)
