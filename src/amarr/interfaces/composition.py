"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from amarr.infrastructure.indexers import IndexerRegistry
from amarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    state = cast(AppState, app.state)
    config = state.config

    # A registry injected before startup (tests, embedding) wins over config.
    if getattr(state, "indexers", None) is None:
        state.indexers = IndexerRegistry.from_targets(
            config.indexer_targets, default_name=config.default_indexer
        )

    log.info(
        "app_startup",
        app_name=config.app_name,
        environment=config.environment,
        indexers=state.indexers.list_names(),
        default_indexer=state.indexers.default_name,
    )
    try:
        yield
    finally:
        log.info("app_shutdown")
