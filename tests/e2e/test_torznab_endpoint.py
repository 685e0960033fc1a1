"""End-to-end tests for Torznab API endpoints.

Tests the full request-response cycle through:
    HTTP Request -> FastAPI Router -> Use Case -> Presenter -> XML Response

Indexers are faked at the **port** level so that real parameter handling,
use cases, presenter, and failure mapping are exercised.
"""

from __future__ import annotations

from xml.etree import ElementTree as ET

import pytest
from fake_backends import FakeIndexer, SyncFakeIndexer
from fastapi import FastAPI
from fastapi.testclient import TestClient

from amarr.domain.entities import (
    IndexerError,
    ThrottledError,
    TorznabCaps,
    TorznabFeed,
    TorznabItem,
    UnauthorizedError,
)
from amarr.infrastructure.config import AppConfig
from amarr.infrastructure.indexers import IndexerRegistry
from amarr.interfaces.app import create_app

pytestmark = pytest.mark.e2e

_TORZNAB_NS = "http://torznab.com/schemas/2015/feed"
_DECLARATION = b"<?xml version='1.0' encoding='utf-8'?>"
_ROUTES = ["/api", "/indexer/amule/api", "/indexer/ddunlimitednet/api"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_app(
    *,
    amule: FakeIndexer | None = None,
    ddunlimitednet: FakeIndexer | None = None,
    default_name: str = "amule",
) -> FastAPI:
    indexers = {}
    if amule is not None:
        indexers["amule"] = amule
    if ddunlimitednet is not None:
        indexers["ddunlimitednet"] = ddunlimitednet
    registry = IndexerRegistry(indexers, default_name=default_name)
    return create_app(AppConfig(environment="test"), indexers=registry)


def _client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


def _both(indexer: FakeIndexer) -> FastAPI:
    return _make_app(amule=indexer, ddunlimitednet=indexer)


# ---------------------------------------------------------------------------
# Action dispatch
# ---------------------------------------------------------------------------


class TestActionDispatch:
    @pytest.mark.parametrize("path", _ROUTES)
    def test_missing_action_is_bad_request(self, path: str) -> None:
        indexer = FakeIndexer()
        resp = _client(_both(indexer)).get(path, params={"q": "show"})

        assert resp.status_code == 400
        assert resp.text == "Missing action"
        assert indexer.caps_calls == 0
        assert indexer.search_calls == []

    @pytest.mark.parametrize("t", ["search", "music", "book", "CAPS", ""])
    def test_unknown_action_is_bad_request(self, t: str) -> None:
        indexer = FakeIndexer()
        resp = _client(_both(indexer)).get("/indexer/amule/api", params={"t": t})

        assert resp.status_code == 400
        assert resp.text == f"Unknown action: {t}"
        assert indexer.caps_calls == 0
        assert indexer.search_calls == []


# ---------------------------------------------------------------------------
# Caps
# ---------------------------------------------------------------------------


class TestCaps:
    def test_caps_invokes_capabilities_once(
        self, fake_indexer: FakeIndexer, torznab_caps: TorznabCaps
    ) -> None:
        resp = _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api", params={"t": "caps"}
        )

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/xml")
        assert resp.content.startswith(_DECLARATION)
        assert fake_indexer.caps_calls == 1
        assert fake_indexer.search_calls == []

        root = ET.fromstring(resp.content)
        assert root.tag == "caps"
        assert root.find("server").get("title") == torznab_caps.server_title

    def test_repeated_action_uses_first(self, fake_indexer: FakeIndexer) -> None:
        resp = _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api?t=caps&t=movie&q=x"
        )
        assert resp.status_code == 200
        assert fake_indexer.caps_calls == 1
        assert fake_indexer.search_calls == []

    def test_caps_ignores_search_params(self, fake_indexer: FakeIndexer) -> None:
        resp = _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api", params={"t": "caps", "cat": "x"}
        )
        assert resp.status_code == 200
        assert fake_indexer.caps_calls == 1

    def test_caps_failure_is_internal_error(self) -> None:
        indexer = FakeIndexer(caps_error=ThrottledError())
        resp = _client(_make_app(amule=indexer)).get(
            "/indexer/amule/api", params={"t": "caps"}
        )
        assert resp.status_code == 500

    def test_sync_indexer(self) -> None:
        indexer = SyncFakeIndexer(caps=TorznabCaps(server_title="sync"))
        resp = _client(_make_app(amule=indexer)).get("/api", params={"t": "caps"})
        assert resp.status_code == 200
        assert ET.fromstring(resp.content).find("server").get("title") == "sync"


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearch:
    def test_tvsearch_normalizes_query(self, fake_indexer: FakeIndexer) -> None:
        resp = _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api",
            params={"t": "tvsearch", "q": "show", "season": "3", "episode": "5"},
        )

        assert resp.status_code == 200
        assert fake_indexer.search_calls == [("show 3x05", 0, 100, frozenset())]

    def test_tvsearch_without_season_episode(self, fake_indexer: FakeIndexer) -> None:
        _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api", params={"t": "tvsearch", "q": "show"}
        )
        assert fake_indexer.search_calls[0][0] == "show x00"

    def test_movie_ignores_season_episode(self, fake_indexer: FakeIndexer) -> None:
        _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api",
            params={"t": "movie", "q": "foo", "season": "3", "episode": "5"},
        )
        assert fake_indexer.search_calls[0][0] == "foo"

    def test_movie_without_query(self, fake_indexer: FakeIndexer) -> None:
        _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api", params={"t": "movie"}
        )
        assert fake_indexer.search_calls == [("", 0, 100, frozenset())]

    def test_pagination_and_categories_forwarded(self, fake_indexer: FakeIndexer) -> None:
        _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api",
            params={"t": "movie", "q": "foo", "offset": "50", "limit": "25", "cat": "1,2,3"},
        )
        assert fake_indexer.search_calls == [("foo", 50, 25, frozenset({1, 2, 3}))]

    def test_unparseable_pagination_uses_defaults(self, fake_indexer: FakeIndexer) -> None:
        _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api",
            params={"t": "movie", "q": "foo", "offset": "abc", "limit": "lots"},
        )
        assert fake_indexer.search_calls == [("foo", 0, 100, frozenset())]

    def test_out_of_range_pagination_uses_defaults(self, fake_indexer: FakeIndexer) -> None:
        _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api?t=movie&q=x&offset=-5&limit=0"
        )
        assert fake_indexer.search_calls == [("x", 0, 100, frozenset())]

    def test_repeated_params_use_first_value(self, fake_indexer: FakeIndexer) -> None:
        _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api?t=movie&q=first&q=second&limit=10&limit=20"
        )
        assert fake_indexer.search_calls == [("first", 0, 10, frozenset())]

    def test_malformed_category_is_bad_request(self, fake_indexer: FakeIndexer) -> None:
        resp = _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api", params={"t": "movie", "q": "foo", "cat": "1,x,3"}
        )
        assert resp.status_code == 400
        assert resp.text == "Invalid category: x"
        assert fake_indexer.search_calls == []

    def test_result_feed_is_encoded(
        self, fake_indexer: FakeIndexer, torznab_item: TorznabItem
    ) -> None:
        resp = _client(_make_app(amule=fake_indexer)).get(
            "/indexer/amule/api", params={"t": "tvsearch", "q": "show"}
        )

        assert resp.headers["content-type"].startswith("application/xml")
        assert resp.content.startswith(_DECLARATION)
        root = ET.fromstring(resp.content)
        items = root.findall("channel/item")
        assert len(items) == 1
        assert items[0].find("title").text == torznab_item.title
        assert items[0].find("enclosure").get("url") == torznab_item.download_url

    def test_empty_result_is_valid_feed(self) -> None:
        indexer = FakeIndexer(feed=TorznabFeed(title="nothing"))
        resp = _client(_make_app(amule=indexer)).get(
            "/indexer/amule/api", params={"t": "movie", "q": "zzz"}
        )
        assert resp.status_code == 200
        root = ET.fromstring(resp.content)
        assert root.findall("channel/item") == []


# ---------------------------------------------------------------------------
# Failure mapping
# ---------------------------------------------------------------------------


class _CustomThrottle(ThrottledError):
    pass


class TestFailureMapping:
    @pytest.mark.parametrize("t", ["tvsearch", "movie"])
    def test_throttled_maps_to_403(self, t: str) -> None:
        indexer = FakeIndexer(search_error=ThrottledError())
        resp = _client(_make_app(amule=indexer)).get(
            "/indexer/amule/api", params={"t": t, "q": "show"}
        )
        assert resp.status_code == 403
        assert resp.text == "You are being throttled. Retry in a few minutes."

    @pytest.mark.parametrize("t", ["tvsearch", "movie"])
    def test_unauthorized_maps_to_401(self, t: str) -> None:
        indexer = FakeIndexer(search_error=UnauthorizedError())
        resp = _client(_make_app(amule=indexer)).get(
            "/indexer/amule/api", params={"t": t, "q": "show"}
        )
        assert resp.status_code == 401
        assert resp.text == "Unauthorized, check your credentials."

    def test_throttled_subclass_maps_to_403(self) -> None:
        indexer = SyncFakeIndexer(search_error=_CustomThrottle("slow down"))
        resp = _client(_make_app(amule=indexer)).get(
            "/indexer/amule/api", params={"t": "movie", "q": "x"}
        )
        assert resp.status_code == 403

    def test_no_retry_on_throttle(self) -> None:
        indexer = FakeIndexer(search_error=ThrottledError())
        _client(_make_app(amule=indexer)).get(
            "/indexer/amule/api", params={"t": "movie", "q": "x"}
        )
        assert len(indexer.search_calls) == 1

    @pytest.mark.parametrize(
        "error", [RuntimeError("boom"), IndexerError("upstream changed")]
    )
    def test_unrecognized_failure_is_internal_error(self, error: Exception) -> None:
        indexer = FakeIndexer(search_error=error)
        resp = _client(_make_app(amule=indexer)).get(
            "/indexer/amule/api", params={"t": "movie", "q": "x"}
        )
        assert resp.status_code == 500
        assert not resp.content.startswith(_DECLARATION)

    def test_unhandled_failure_reraised_to_server(self) -> None:
        indexer = FakeIndexer(search_error=RuntimeError("boom"))
        client = TestClient(_make_app(amule=indexer))
        with pytest.raises(RuntimeError, match="boom"):
            client.get("/indexer/amule/api", params={"t": "movie", "q": "x"})


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


class TestRouting:
    def test_routes_select_their_indexer(self) -> None:
        amule = FakeIndexer(caps=TorznabCaps(server_title="amule"))
        ddu = FakeIndexer(caps=TorznabCaps(server_title="ddunlimitednet"))
        client = _client(_make_app(amule=amule, ddunlimitednet=ddu))

        amule_resp = client.get("/indexer/amule/api", params={"t": "caps"})
        ddu_resp = client.get("/indexer/ddunlimitednet/api", params={"t": "caps"})

        assert ET.fromstring(amule_resp.content).find("server").get("title") == "amule"
        assert ET.fromstring(ddu_resp.content).find("server").get("title") == "ddunlimitednet"
        assert amule.caps_calls == 1
        assert ddu.caps_calls == 1

    def test_legacy_route_uses_default_indexer(self) -> None:
        amule = FakeIndexer()
        ddu = FakeIndexer()
        client = _client(_make_app(amule=amule, ddunlimitednet=ddu))

        client.get("/api", params={"t": "movie", "q": "foo"})

        assert amule.search_calls == [("foo", 0, 100, frozenset())]
        assert ddu.search_calls == []

    def test_legacy_route_default_is_configurable(self) -> None:
        amule = FakeIndexer()
        ddu = FakeIndexer()
        client = _client(
            _make_app(amule=amule, ddunlimitednet=ddu, default_name="ddunlimitednet")
        )

        client.get("/api", params={"t": "movie", "q": "foo"})

        assert ddu.search_calls == [("foo", 0, 100, frozenset())]
        assert amule.search_calls == []

    def test_unconfigured_indexer_is_not_found(self) -> None:
        resp = _client(_make_app(amule=FakeIndexer())).get(
            "/indexer/ddunlimitednet/api", params={"t": "caps"}
        )
        assert resp.status_code == 404
        assert resp.text == "Indexer not configured: ddunlimitednet"

    def test_bad_request_checked_before_indexer_lookup(self) -> None:
        resp = _client(_make_app()).get("/indexer/amule/api")
        assert resp.status_code == 400

    def test_post_not_allowed(self) -> None:
        resp = _client(_make_app(amule=FakeIndexer())).post(
            "/indexer/amule/api", params={"t": "caps"}
        )
        assert resp.status_code == 405


# ---------------------------------------------------------------------------
# App wiring
# ---------------------------------------------------------------------------


class TestAppWiring:
    def test_healthz_lists_indexers(self, indexer_registry: IndexerRegistry) -> None:
        app = create_app(AppConfig(environment="test"), indexers=indexer_registry)
        resp = _client(app).get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "indexers": ["amule", "ddunlimitednet"]}

    def test_lifespan_builds_registry_from_config(self) -> None:
        config = AppConfig(
            environment="test",
            indexer_targets={"amule": "fake_backends:indexer"},
        )
        app = create_app(config)

        with TestClient(app) as client:
            resp = client.get("/indexer/amule/api", params={"t": "caps"})
            health = client.get("/healthz")

        assert resp.status_code == 200
        assert ET.fromstring(resp.content).find("server").get("title") == "instance"
        assert health.json()["indexers"] == ["amule"]

    def test_lifespan_keeps_injected_registry(self, indexer_registry: IndexerRegistry) -> None:
        config = AppConfig(
            environment="test",
            indexer_targets={"amule": "fake_backends:indexer"},
        )
        app = create_app(config, indexers=indexer_registry)

        with TestClient(app) as client:
            resp = client.get("/indexer/amule/api", params={"t": "caps"})

        assert ET.fromstring(resp.content).find("server").get("title") == "amarr (amule)"
