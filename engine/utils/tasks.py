"""
Fire-and-forget background tasks. Failures go to the log, never to the caller.
"""

import asyncio
import logging
from typing import Awaitable, Optional, Set

logger = logging.getLogger(__name__)

# Strong references so pending tasks are not garbage-collected mid-flight.
_pending: Set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("[background] %s failed: %s: %s", task.get_name(), type(exc).__name__, exc)


def fire_and_forget(coro: Awaitable, name: Optional[str] = None) -> asyncio.Task:
    task = asyncio.ensure_future(coro)
    if name:
        task.set_name(name)
    _pending.add(task)
    task.add_done_callback(_on_done)
    return task


async def drain(timeout: float = 5.0) -> None:
    """Wait for outstanding background tasks (used at shutdown and in tests)."""
    if _pending:
        await asyncio.wait(list(_pending), timeout=timeout)
