from __future__ import annotations

import importlib
import inspect
import traceback
from typing import Any

import structlog

from amarr.domain.entities import IndexerLoadError
from amarr.domain.ports import IndexerPort

log = structlog.get_logger(__name__)


def _split_target(target: str) -> tuple[str, str]:
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise IndexerLoadError(
            f"Indexer target must look like 'package.module:attribute', got {target!r}"
        )
    return module_name, attr_path


def _resolve_attr(obj: Any, attr_path: str, target: str) -> Any:
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise IndexerLoadError(f"{target!r}: no attribute {part!r}") from e
    return obj


def load_indexer(name: str, target: str) -> IndexerPort:
    """Import ``target`` and return the indexer it points to.

    ``target`` is ``"package.module:attribute"``. The attribute is either an
    indexer instance or a zero-argument factory (class or function) returning one.
    """
    try:
        module_name, attr_path = _split_target(target)
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            tb = traceback.format_exc()
            raise IndexerLoadError(f"Error while importing {module_name}:\n{tb}") from e

        obj = _resolve_attr(module, attr_path, target)
        if inspect.isclass(obj) or (
            callable(obj) and not hasattr(obj, "search")
        ):
            try:
                obj = obj()
            except Exception as e:
                raise IndexerLoadError(f"{target!r}: factory failed: {e}") from e

        if not hasattr(obj, "capabilities") or not hasattr(obj, "search"):
            raise IndexerLoadError(
                f"{target!r}: indexer must have 'capabilities' and 'search' methods"
            )

        log.info("indexer_loaded", indexer=name, target=target)
        return obj
    except IndexerLoadError as e:
        log.error(
            "indexer_load_failed",
            indexer=name,
            target=target,
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise
