"""Cancellable, supersede-on-submit scheduling for refresh requests."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Run only the most recent submission, after it has been quiet for ``delay``.

    Each ``submit`` cancels the pending task. If a superseded task has already
    started its work and finishes anyway, its result is discarded.
    """

    def __init__(self, delay: float) -> None:
        self._delay = delay
        self._generation = 0
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(
        self,
        work: Callable[[], Awaitable[T]],
        on_result: Callable[[T], None],
        *,
        on_error: Callable[[Exception], None] | None = None,
        delay: float | None = None,
    ) -> asyncio.Task:
        """Schedule ``work``; callbacks only fire if nothing newer was submitted."""
        self.cancel()
        generation = self._generation
        wait = self._delay if delay is None else delay
        self._task = asyncio.create_task(self._run(generation, wait, work, on_result, on_error))
        return self._task

    def cancel(self) -> None:
        """Drop the pending submission (and any result it may still produce)."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the current submission, if any, to settle."""
        task = self._task
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(
        self,
        generation: int,
        delay: float,
        work: Callable[[], Awaitable[T]],
        on_result: Callable[[T], None],
        on_error: Callable[[Exception], None] | None,
    ) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            result = await work()
        except Exception as exc:
            logger.exception("Debounced task failed")
            if on_error is not None and generation == self._generation:
                on_error(exc)
            return

        if generation != self._generation:
            logger.debug("Discarding superseded result (generation %d)", generation)
            return
        on_result(result)
