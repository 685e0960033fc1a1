"""Torznab request parameter handling.

Turns the raw query parameters of a Torznab request into a ``TorznabQuery``:
    - ``t`` selects the action (caps / tvsearch / movie)
    - ``q``, ``season``, ``episode`` are assembled into the indexer query
    - ``offset``, ``limit``, ``cat`` become pagination and category filter
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from amarr.domain.entities import (
    TorznabAction,
    TorznabInvalidAction,
    TorznabInvalidCategory,
    TorznabMissingAction,
    TorznabQuery,
)

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 100

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_ACTIONS: dict[str, TorznabAction] = {action.value: action for action in TorznabAction}


def parse_action(raw: str | None) -> TorznabAction:
    """Resolve the ``t`` parameter.

    Raises:
        TorznabMissingAction: ``t`` was not sent at all.
        TorznabInvalidAction: ``t`` is not one of caps/tvsearch/movie.
    """
    if raw is None:
        raise TorznabMissingAction()
    try:
        return _ACTIONS[raw]
    except KeyError:
        raise TorznabInvalidAction(raw) from None


def _parse_int(raw: str) -> int | None:
    # Strict 32-bit decimal: no whitespace, no underscores, no overflow.
    if not _INT_RE.fullmatch(raw):
        return None
    value = int(raw)
    if value < _INT32_MIN or value > _INT32_MAX:
        return None
    return value


def build_search_query(
    action: TorznabAction,
    q: str | None,
    season: str | None = None,
    episode: str | None = None,
) -> str:
    """Build the single query string sent to the indexer.

    Movie searches use ``q`` as-is. TV searches append ``<season>x<episode>``
    with the episode zero-padded to two digits, e.g. ``"show 3x05"``.
    Missing values count as empty strings, so ``q="show"`` alone gives
    ``"show x00"``.
    """
    query = q or ""
    if action is not TorznabAction.TV_SEARCH:
        return query

    season = season or ""
    episode = (episode or "").rjust(2, "0")
    return f"{query} {season}x{episode}"


def parse_offset(raw: str | None) -> int:
    """Non-negative offset; absent, unparseable or negative gives the default."""
    value = _parse_int(raw) if raw is not None else None
    return DEFAULT_OFFSET if value is None or value < 0 else value


def parse_limit(raw: str | None) -> int:
    """Positive limit; absent, unparseable or below 1 gives the default."""
    value = _parse_int(raw) if raw is not None else None
    return DEFAULT_LIMIT if value is None or value < 1 else value


def parse_categories(raw: str | None) -> frozenset[int]:
    """Parse a comma separated ``cat`` list.

    Absent means no filter. A single malformed token rejects the whole
    request with ``TorznabInvalidCategory``.
    """
    if raw is None:
        return frozenset()

    categories: set[int] = set()
    for token in raw.split(","):
        value = _parse_int(token)
        if value is None:
            raise TorznabInvalidCategory(token)
        categories.add(value)
    return frozenset(categories)


def build_torznab_query(
    action: TorznabAction, params: Mapping[str, str]
) -> TorznabQuery:
    """Assemble a ``TorznabQuery`` for a search action from raw parameters."""
    return TorznabQuery(
        action=action,
        query=build_search_query(
            action,
            params.get("q"),
            season=params.get("season"),
            episode=params.get("episode"),
        ),
        offset=parse_offset(params.get("offset")),
        limit=parse_limit(params.get("limit")),
        categories=parse_categories(params.get("cat")),
    )
