"""Static indexer registry, built once at startup."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from amarr.domain.entities import TorznabIndexerNotFound
from amarr.domain.ports import IndexerPort

from .loader import load_indexer

log = structlog.get_logger(__name__)


class IndexerRegistry:
    """Read-only mapping of route identifier -> indexer.

    Populated once; never mutated while serving requests.
    """

    def __init__(
        self, indexers: Mapping[str, IndexerPort], *, default_name: str
    ) -> None:
        self._indexers: dict[str, IndexerPort] = dict(indexers)
        self._default_name = default_name

    @classmethod
    def from_targets(
        cls, targets: Mapping[str, str], *, default_name: str
    ) -> IndexerRegistry:
        """Import every configured ``name -> "module:attr"`` target."""
        indexers = {name: load_indexer(name, target) for name, target in targets.items()}

        if default_name not in indexers:
            log.warning("default_indexer_not_configured", indexer=default_name)
        log.info("indexers_registered", count=len(indexers), names=sorted(indexers))
        return cls(indexers, default_name=default_name)

    @property
    def default_name(self) -> str:
        return self._default_name

    def list_names(self) -> list[str]:
        return sorted(self._indexers)

    def get(self, name: str) -> IndexerPort:
        try:
            return self._indexers[name]
        except KeyError:
            raise TorznabIndexerNotFound(name) from None
