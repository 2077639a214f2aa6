import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class BackgroundTaskRegistry:
    """Keeps strong references to fire-and-forget tasks until they finish."""

    def __init__(self):
        self._running_tasks: set[asyncio.Task] = set()

    def spawn(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> asyncio.Task:
        """
        Schedule an async function as background task.
        :param func: Async function to execute
        :param args: Positional arguments for func
        :param kwargs: Keyword arguments for func
        :return: The scheduled task
        """
        task = asyncio.create_task(self._execute_with_error_handling(func, *args, **kwargs))
        self._running_tasks.add(task)
        task.add_done_callback(self._running_tasks.discard)
        return task

    async def _execute_with_error_handling(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Execute async function with error handling and logging.
        :param func: Async function to execute
        :param args: Positional arguments
        :param kwargs: Keyword arguments
        :return: Function result or None on error
        """
        try:
            return await func(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("background_task_failed", task=func.__name__, error=str(e))
            return None

    async def shutdown(self) -> None:
        """Cancel all pending tasks and wait for them to unwind."""
        tasks = list(self._running_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("background_tasks_stopped", cancelled=len(tasks))

    @property
    def active_tasks_count(self) -> int:
        """Get count of currently running background tasks."""
        return len(self._running_tasks)
