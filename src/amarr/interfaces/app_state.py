"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from starlette.datastructures import State

from amarr.domain.ports import IndexerRegistryPort
from amarr.infrastructure.config import AppConfig


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan(). Read-only once serving.
    """

    # Configuration
    config: AppConfig

    # Domain Ports
    indexers: IndexerRegistryPort
