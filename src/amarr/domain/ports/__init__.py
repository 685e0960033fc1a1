from .indexer import IndexerPort
from .indexer_registry import IndexerRegistryPort

__all__ = [
    "IndexerPort",
    "IndexerRegistryPort",
]
