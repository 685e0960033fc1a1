from .loader import load_indexer
from .registry import IndexerRegistry

__all__ = ["IndexerRegistry", "load_indexer"]
