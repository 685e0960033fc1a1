"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from amarr.domain.ports import IndexerRegistryPort
from amarr.infrastructure.config import AppConfig
from amarr.interfaces.app_state import AppState
from amarr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(
    config: AppConfig, *, indexers: IndexerRegistryPort | None = None
) -> FastAPI:
    """Wire routes and state; indexers are loaded later, in lifespan().

    Passing ``indexers`` skips loading from ``config.indexer_targets``.
    """
    app = FastAPI(
        title=config.app_name,
        description="Torznab adapter for aMule and ddunlimited.net indexers",
        version="0.1.0",
        lifespan=lifespan,
    )

    state = AppState()
    state.config = config
    if indexers is not None:
        state.indexers = indexers
    app.state = state

    from amarr.interfaces.api.torznab import router as torznab_router

    app.include_router(torznab_router)

    @app.get("/healthz")
    async def healthz(request: Request) -> dict[str, str | list[str]]:
        registry = getattr(request.app.state, "indexers", None)
        names = registry.list_names() if registry is not None else []
        return {"status": "ok", "indexers": names}

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=request.url.query,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
            )

    return app
