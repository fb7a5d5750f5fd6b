"""Utilities for async operations."""

import asyncio
from functools import wraps
from typing import Any, Awaitable, Callable, Coroutine, Protocol, TypeVar, cast

F = TypeVar("F", bound=Callable[..., Awaitable[None]])


class Startable(Protocol):
    """A construct that must first be started before use."""

    def start(self, *args: Any, **kwargs: Any) -> Awaitable[None]:
        """Setup resources and start connections."""
        ...

    def close(self) -> Awaitable[None]:
        """Tear down resources and stop connections."""
        ...


def start(func: F) -> F:
    """Call close if pairing start call fails.

    Any resources that did successfully start will still have an opportunity to close cleanly.

    Args:
        func: Start function to wrap.
    """

    @wraps(func)
    async def wrapper(self: Startable, *args: Any, **kwargs: Any) -> None:
        try:
            await func(self, *args, **kwargs)
        except Exception:
            await self.close()
            raise

    return cast(F, wrapper)


async def stop_all(*funcs: Callable[..., Awaitable[None]]) -> None:
    """Call all stops in sequence and aggregate errors.

    A failure in one stop call will not block subsequent stop calls.

    Args:
        funcs: Stop functions to call in sequence.

    Raises:
        ExceptionGroup: If any stop function raises an exception.
    """
    exceptions = []
    for func in funcs:
        try:
            await func()
        except Exception as exception:
            exceptions.append(exception)

    if exceptions:
        raise ExceptionGroup("failed stop sequence", exceptions)


class _TaskPool:
    """Track background tasks so they can be cancelled together."""

    def __init__(self) -> None:
        """Setup empty pool."""
        self._tasks: set[asyncio.Task] = set()

    def __len__(self) -> int:
        """Number of tasks still running."""
        return len(self._tasks)

    def create(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Schedule a coroutine as a tracked task.

        Args:
            coro: Coroutine to run.

        Returns:
            The created task.
        """
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def cancel(self) -> None:
        """Cancel all tracked tasks and wait for them to finish."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)
