"""Torznab search use case."""

from __future__ import annotations

import structlog

from amarr.application.use_cases._invoke import call_indexer
from amarr.domain.entities import TorznabBadRequest, TorznabFeed, TorznabQuery
from amarr.domain.ports import IndexerPort

log = structlog.get_logger(__name__)


class TorznabSearchUseCase:
    """Forwards a normalized Torznab search to one indexer backend.

    ``ThrottledError`` / ``UnauthorizedError`` raised by the indexer are
    propagated unchanged; the HTTP layer turns them into 403 / 401. No retries.
    """

    def __init__(self, *, indexer: IndexerPort, indexer_name: str) -> None:
        self.indexer: IndexerPort = indexer
        self.indexer_name = indexer_name

    async def execute(self, q: TorznabQuery) -> TorznabFeed:
        """Run the search.

        Args:
            q: Normalized TorznabQuery (tvsearch or movie).

        Returns:
            The indexer's feed, untouched.

        Raises:
            TorznabBadRequest: ``q`` is not a search action.
        """
        if not q.action.is_search:
            raise TorznabBadRequest(
                f"TorznabSearchUseCase does not handle action={q.action.value}"
            )

        log.debug(
            "torznab_search_request",
            indexer=self.indexer_name,
            action=q.action.value,
            query=q.query,
            offset=q.offset,
            limit=q.limit,
            categories=sorted(q.categories),
        )

        feed = await call_indexer(
            self.indexer.search, q.query, q.offset, q.limit, q.categories
        )

        log.info(
            "torznab_search_done",
            indexer=self.indexer_name,
            query=q.query,
            result_count=len(feed.items),
        )
        return feed
