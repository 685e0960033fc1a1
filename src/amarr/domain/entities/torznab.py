from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TorznabAction(str, Enum):
    """Torznab actions served by this adapter (value = raw `t` parameter)."""

    CAPS = "caps"
    TV_SEARCH = "tvsearch"
    MOVIE_SEARCH = "movie"

    @property
    def is_search(self) -> bool:
        return self is not TorznabAction.CAPS


@dataclass(frozen=True)
class TorznabQuery:
    action: TorznabAction
    query: str  # Normalized query handed to the indexer, never None

    # Pagination
    offset: int = 0
    limit: int = 100

    # Category filter, empty = all categories
    categories: frozenset[int] = frozenset()


# --- Capabilities ---


@dataclass(frozen=True)
class TorznabCategory:
    id: int
    name: str
    subcategories: tuple[TorznabCategory, ...] = ()


@dataclass(frozen=True)
class TorznabSearchMode:
    available: bool = True
    supported_params: tuple[str, ...] = ("q",)


@dataclass(frozen=True)
class TorznabCaps:
    server_title: str
    server_version: str = "1.0"
    limits_max: int = 100
    limits_default: int = 100
    search: TorznabSearchMode = TorznabSearchMode()
    tv_search: TorznabSearchMode | None = None
    movie_search: TorznabSearchMode | None = None
    categories: tuple[TorznabCategory, ...] = ()


# --- Search results ---


@dataclass(frozen=True)
class TorznabItem:
    title: str
    download_url: str
    size: int = 0
    category: int | None = None
    guid: str | None = None  # Defaults to download_url when rendered
    seeders: int | None = None
    peers: int | None = None
    pub_date: str | None = None  # RFC 822 date string
    description: str | None = None
    info_hash: str | None = None
    # Additional torznab:attr name/value pairs, rendered in order
    attributes: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class TorznabFeed:
    title: str
    items: tuple[TorznabItem, ...] = ()
    description: str | None = None
    link: str | None = None
    offset: int = 0
    total: int | None = None  # Defaults to len(items) when rendered


# --- Errors ---


class TorznabError(Exception):
    """Base error for Torznab domain/usecases."""


class TorznabBadRequest(TorznabError):
    """Client-caused request shape error."""


class TorznabMissingAction(TorznabBadRequest):
    def __init__(self) -> None:
        super().__init__("Missing action")


class TorznabInvalidAction(TorznabBadRequest):
    def __init__(self, action: str) -> None:
        super().__init__(f"Unknown action: {action}")
        self.action = action


class TorznabInvalidCategory(TorznabBadRequest):
    def __init__(self, token: str) -> None:
        super().__init__(f"Invalid category: {token}")
        self.token = token


class TorznabIndexerNotFound(TorznabError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Indexer not configured: {name}")
        self.name = name


class IndexerError(Exception):
    """Base class for failures reported by an indexer backend."""


class ThrottledError(IndexerError):
    """The upstream source is rate limiting us."""


class UnauthorizedError(IndexerError):
    """The indexer credentials were rejected upstream."""


class IndexerLoadError(Exception):
    """Raised when a configured indexer cannot be imported or instantiated."""
