"""
@file_name: async_helpers.py
@author: NetMind.AI
@date: 2026-03-03
@description: Small asyncio helpers for user callbacks that may be sync or async
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

T = TypeVar("T")
MaybeAwaitable = Union[Awaitable[T], T]


async def maybe_await(value: MaybeAwaitable[T]) -> T:
    """Await the value if it is awaitable, otherwise return it unchanged"""
    if inspect.isawaitable(value):
        return await value
    return value


async def call_maybe_async(
    func: Callable[..., Any],
    *args: Any,
    offload_sync: bool = False,
    **kwargs: Any,
) -> Any:
    """
    Call a sync or async callable

    Args:
        func: The callable
        *args: Positional arguments
        offload_sync: Run a sync callable in a worker thread instead of on the event loop
        **kwargs: Keyword arguments
    """
    if inspect.iscoroutinefunction(func):
        return await func(*args, **kwargs)
    if offload_sync:
        return await maybe_await(await asyncio.to_thread(func, *args, **kwargs))
    return await maybe_await(func(*args, **kwargs))


async def wait_with_budget(awaitable: Awaitable[T], remaining: Optional[float]) -> T:
    """
    Await with an optional time budget (seconds); raises asyncio.TimeoutError when exhausted

    A budget of None means unbounded.
    """
    if remaining is None:
        return await awaitable
    if remaining <= 0:
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        elif asyncio.isfuture(awaitable):
            awaitable.cancel()
        raise asyncio.TimeoutError()
    return await asyncio.wait_for(awaitable, timeout=remaining)
