"""Call an indexer method that may be sync or async."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, cast

T = TypeVar("T")


async def call_indexer(fn: Callable[..., T | Awaitable[T]], *args: Any) -> T:
    """Await coroutine methods directly; run blocking ones via to_thread."""
    if inspect.iscoroutinefunction(fn):
        return await cast(Callable[..., Awaitable[T]], fn)(*args)

    result = await asyncio.to_thread(fn, *args)
    if inspect.isawaitable(result):
        return await result
    return cast(T, result)
