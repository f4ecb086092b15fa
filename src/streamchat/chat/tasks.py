"""Background execution of assistant turns.

Generation runs as fire-and-forget asyncio tasks so a sender never waits
for the model. The runner keeps strong references to running tasks until
they finish and reports their failures to the log.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class TaskRunner:
    """Owns the background tasks of one process.

    Usage:
        tasks = TaskRunner()
        tasks.submit(orchestrator.generate_response(cid, mid), name="reply")
        await tasks.drain()
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        """Number of tasks not yet finished."""
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        """Schedule a coroutine on the running loop.

        Must be called from within a running event loop.
        """
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Background task %s cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background task %s failed: %s",
                task.get_name(), exc,
                exc_info=(type(exc), exc, exc.__traceback__)
            )

    async def drain(self) -> None:
        """Wait until every submitted task, including ones submitted meanwhile, finishes."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Cancel everything still running and wait for it to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
