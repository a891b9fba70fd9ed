"""Submission session: one in-flight extraction per operator, with ticker and timeout."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from src.extraction.exceptions import (
    ExtractionTimeoutError,
    SubmissionCancelledError,
    SubmissionInProgressError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIMEOUT_MESSAGE = (
    "Request timed out after 5 minutes. The transcript may be too long or the model "
    "is taking too long to respond. Try a shorter transcript or a faster model."
)


def timeout_message(timeout_seconds: float) -> str:
    if timeout_seconds == 300:
        return TIMEOUT_MESSAGE
    return (
        f"Request timed out after {timeout_seconds:g} seconds. The transcript may be too long "
        "or the model is taking too long to respond."
    )


@dataclass
class SubmissionSession:
    """Explicit session context for submissions.

    Holds the operator identity, the in-flight task handle and the elapsed-time
    ticker. ``on_tick`` receives elapsed seconds and is purely cosmetic.
    """

    user_id: Optional[str] = None
    timeout_seconds: float = 300.0
    tick_seconds: float = 1.0
    on_tick: Optional[Callable[[float], Any]] = None
    _task: Optional[asyncio.Task] = field(default=None, repr=False)
    _ticker: Optional[asyncio.Task] = field(default=None, repr=False)
    _started_at: Optional[float] = field(default=None, repr=False)
    _cancel_requested: bool = field(default=False, repr=False)

    @property
    def busy(self) -> bool:
        return self._task is not None

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    def cancel(self) -> bool:
        """Cancel the in-flight submission. Returns False when nothing is running."""
        if self._task is None or self._task.done():
            return False
        self._cancel_requested = True
        self._task.cancel()
        logger.info("Submission cancelled after %.1fs", self.elapsed)
        return True

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            if self.on_tick is not None:
                self.on_tick(self.elapsed)

    async def run(self, work: Awaitable[T]) -> T:
        """Await ``work`` under the session timeout.

        Raises SubmissionInProgressError if another submission is in flight,
        ExtractionTimeoutError when the timeout expires and
        SubmissionCancelledError after ``cancel()``. Partial results are dropped.
        """
        if self.busy:
            if asyncio.iscoroutine(work):
                work.close()
            raise SubmissionInProgressError("A submission is already in progress for this session")

        self._cancel_requested = False
        self._started_at = time.monotonic()
        self._task = asyncio.ensure_future(work)
        if self.on_tick is not None:
            self._ticker = asyncio.create_task(self._tick())
        try:
            return await asyncio.wait_for(self._task, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.warning("Submission timed out after %.0fs", self.timeout_seconds)
            raise ExtractionTimeoutError(timeout_message(self.timeout_seconds)) from e
        except asyncio.CancelledError:
            if self._cancel_requested:
                raise SubmissionCancelledError("Submission cancelled") from None
            raise
        finally:
            await self._teardown()

    async def _teardown(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            try:
                await self._ticker
            except asyncio.CancelledError:
                pass
            self._ticker = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
