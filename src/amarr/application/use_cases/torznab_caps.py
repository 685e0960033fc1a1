from __future__ import annotations

import structlog

from amarr.application.use_cases._invoke import call_indexer
from amarr.domain.entities import TorznabCaps
from amarr.domain.ports import IndexerPort

log = structlog.get_logger(__name__)


class TorznabCapsUseCase:
    def __init__(self, *, indexer: IndexerPort, indexer_name: str) -> None:
        self._indexer = indexer
        self._indexer_name = indexer_name

    async def execute(self) -> TorznabCaps:
        # Failures here are not mapped: they surface as internal errors.
        log.debug("torznab_caps_request", indexer=self._indexer_name)
        return await call_indexer(self._indexer.capabilities)
