"""Shared test fixtures for amarr test suite."""

from __future__ import annotations

from typing import Any

import pytest
from fake_backends import FakeIndexer

from amarr.domain.entities import (
    TorznabCaps,
    TorznabCategory,
    TorznabFeed,
    TorznabItem,
    TorznabSearchMode,
)
from amarr.infrastructure.indexers import IndexerRegistry

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def torznab_caps() -> TorznabCaps:
    """Caps as an aMule-style indexer would advertise them."""
    return TorznabCaps(
        server_title="amarr (amule)",
        server_version="1.0",
        search=TorznabSearchMode(supported_params=("q",)),
        tv_search=TorznabSearchMode(supported_params=("q", "season", "ep")),
        movie_search=TorznabSearchMode(supported_params=("q",)),
        categories=(
            TorznabCategory(
                id=5000,
                name="TV",
                subcategories=(TorznabCategory(id=5040, name="TV/HD"),),
            ),
            TorznabCategory(id=2000, name="Movies"),
        ),
    )


@pytest.fixture()
def torznab_item() -> TorznabItem:
    return TorznabItem(
        title="Show.S03E05.720p.mkv",
        download_url="ed2k://|file|Show.S03E05.720p.mkv|734003200|0123456789ABCDEF0123456789ABCDEF|/",
        size=734003200,
        category=5000,
        seeders=12,
        peers=3,
    )


@pytest.fixture()
def torznab_feed(torznab_item: TorznabItem) -> TorznabFeed:
    return TorznabFeed(title="amarr (amule)", items=(torznab_item,))


# ---------------------------------------------------------------------------
# Indexer fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_indexer(torznab_caps: TorznabCaps, torznab_feed: TorznabFeed) -> FakeIndexer:
    return FakeIndexer(caps=torznab_caps, feed=torznab_feed)


@pytest.fixture()
def indexer_registry(fake_indexer: FakeIndexer) -> IndexerRegistry:
    """Registry with both routed indexers pointing at fakes."""
    indexers: dict[str, Any] = {
        "amule": fake_indexer,
        "ddunlimitednet": FakeIndexer(caps=TorznabCaps(server_title="ddunlimitednet")),
    }
    return IndexerRegistry(indexers, default_name="amule")
