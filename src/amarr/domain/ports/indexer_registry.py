"""Port for resolving route identifiers to indexer backends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from amarr.domain.ports.indexer import IndexerPort


@runtime_checkable
class IndexerRegistryPort(Protocol):
    """Synchronous, read-only lookup of registered indexers."""

    @property
    def default_name(self) -> str: ...

    def list_names(self) -> list[str]: ...
    def get(self, name: str) -> IndexerPort: ...
