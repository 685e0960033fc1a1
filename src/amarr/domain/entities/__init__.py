from .torznab import (
    IndexerError,
    IndexerLoadError,
    ThrottledError,
    TorznabAction,
    TorznabBadRequest,
    TorznabCaps,
    TorznabCategory,
    TorznabError,
    TorznabFeed,
    TorznabIndexerNotFound,
    TorznabInvalidAction,
    TorznabInvalidCategory,
    TorznabItem,
    TorznabMissingAction,
    TorznabQuery,
    TorznabSearchMode,
    UnauthorizedError,
)

__all__ = [
    "IndexerError",
    "IndexerLoadError",
    "ThrottledError",
    "TorznabAction",
    "TorznabBadRequest",
    "TorznabCaps",
    "TorznabCategory",
    "TorznabError",
    "TorznabFeed",
    "TorznabIndexerNotFound",
    "TorznabInvalidAction",
    "TorznabInvalidCategory",
    "TorznabItem",
    "TorznabMissingAction",
    "TorznabQuery",
    "TorznabSearchMode",
    "UnauthorizedError",
]
