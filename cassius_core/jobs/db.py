# cassius_core/jobs/db.py
from __future__ import annotations

from typing import Any, Callable

from asgiref.sync import sync_to_async
from django.db import close_old_connections


def run_in_worker(func: Callable[[], Any]) -> Callable[[], Any]:
    """
    Async handler running `func` in its own worker thread.

    Outside a request cycle nothing recycles DB connections, so stale or broken
    ones are dropped before and after every run. Jobs do not share a thread,
    so a slow job never queues another one behind it.
    """

    def body():
        close_old_connections()
        try:
            return func()
        finally:
            close_old_connections()

    async def handler() -> None:
        await sync_to_async(body, thread_sensitive=False)()

    handler.__name__ = getattr(func, "__name__", "job")
    return handler
