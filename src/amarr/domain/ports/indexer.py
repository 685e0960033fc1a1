"""Port for indexer backends."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Protocol, runtime_checkable

from amarr.domain.entities import TorznabCaps, TorznabFeed


@runtime_checkable
class IndexerPort(Protocol):
    """Capability reporting + search against one upstream source.

    Both methods may be plain functions or coroutines. ``search`` signals
    upstream rate limiting with ``ThrottledError`` and rejected credentials
    with ``UnauthorizedError``; anything else is treated as an internal error.
    """

    def capabilities(self) -> TorznabCaps | Awaitable[TorznabCaps]: ...

    def search(
        self,
        query: str,
        offset: int,
        limit: int,
        categories: frozenset[int],
    ) -> TorznabFeed | Awaitable[TorznabFeed]: ...
