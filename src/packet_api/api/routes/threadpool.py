from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from fastapi.concurrency import run_in_threadpool

T = TypeVar("T")

_NO_THREAD_MESSAGES = (
    "can't start new thread",
    "cannot start new thread",
    "threads are not supported",
    "threadless",
)


def _threads_unavailable(exc: RuntimeError) -> bool:
    message = str(exc).strip().lower()
    return any(marker in message for marker in _NO_THREAD_MESSAGES)


async def run_blocking(func: Callable[..., T], *args: object) -> T:
    """Run a blocking callable off the event loop.

    Runtimes without thread support (e.g. Python Workers) raise a
    RuntimeError from the threadpool; those fall back to a direct call.
    """
    try:
        return await run_in_threadpool(func, *args)
    except RuntimeError as exc:
        if not _threads_unavailable(exc):
            raise
    return func(*args)
