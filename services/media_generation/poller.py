"""
Operation Poller

Drives a submitted long-running job to a terminal state:

    SUBMITTED -> POLLING -> DONE | ERROR

Each cycle sleeps for the poll interval, refreshes the operation, and
replaces the held snapshot with the response. The sleep function is
injectable so tests run without real waiting. Cancelling the surrounding
task stops the loop at its current await.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.errors import GenerationError, OperationTimeoutError
from .models import Operation

logger = logging.getLogger(__name__)

RefreshFn = Callable[[Operation], Awaitable[Operation]]
SleepFn = Callable[[float], Awaitable[None]]
ProgressFn = Callable[[str, int, str], None]

DEFAULT_POLL_INTERVAL = 10.0


class PollState(str, Enum):
    """Lifecycle of a polled operation."""
    SUBMITTED = "submitted"
    POLLING = "polling"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (PollState.DONE, PollState.ERROR)


def classify(operation: Operation) -> Optional[PollState]:
    """Terminal state of a snapshot, or None while the job is still running."""
    if operation.has_error or operation.error_message:
        return PollState.ERROR
    if operation.done:
        return PollState.DONE
    return None


class OperationPoller:
    """
    Polls one operation to completion. Not shared between calls.

    Usage:
        poller = OperationPoller(service.refresh_operation, interval=10, max_polls=90)
        final = await poller.run(operation)
        if poller.state is PollState.ERROR:
            ...
    """

    def __init__(
        self,
        refresh: RefreshFn,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: Optional[int] = None,
        sleep: SleepFn = asyncio.sleep,
        on_progress: Optional[ProgressFn] = None,
        request_id: str = "",
    ):
        if max_polls is not None and max_polls < 1:
            raise ValueError("max_polls must be positive or None")
        self.refresh = refresh
        self.interval = interval
        self.max_polls = max_polls
        self.sleep = sleep
        self.on_progress = on_progress
        self.request_id = request_id

        self.state = PollState.SUBMITTED
        self.polls = 0
        self.operation: Optional[Operation] = None

    def _emit_progress(self, percent: int, message: str):
        if self.on_progress:
            try:
                self.on_progress(self.request_id, percent, message)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    def _progress_percent(self) -> int:
        if self.max_polls:
            return min(20 + (self.polls * 70 // self.max_polls), 90)
        # Unbounded: creep toward 90 without ever claiming completion
        return min(20 + self.polls * 5, 90)

    async def run(self, operation: Operation) -> Operation:
        """
        Poll until the operation is terminal.

        Returns:
            The terminal snapshot (state is DONE or ERROR)

        Raises:
            OperationTimeoutError: If max_polls refreshes pass without a terminal state
            GenerationError: If a status refresh call fails
        """
        self.operation = operation
        self.state = PollState.SUBMITTED

        terminal = classify(operation)
        while terminal is None:
            if self.max_polls is not None and self.polls >= self.max_polls:
                raise OperationTimeoutError(
                    f"Operation {operation.name} did not complete within "
                    f"{self.max_polls} polls ({self.max_polls * self.interval:.0f}s)"
                )

            self.state = PollState.POLLING
            await self.sleep(self.interval)

            logger.info(f"Polling operation {operation.name} (poll {self.polls + 1})")
            try:
                operation = await self.refresh(operation)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Status refresh failed for {self.operation.name}: {e}")
                self.state = PollState.ERROR
                raise GenerationError(
                    f"Video status check failed: {e}", error_code="POLL_FAILED"
                ) from e

            self.polls += 1
            self.operation = operation
            terminal = classify(operation)
            self._emit_progress(self._progress_percent(), f"Processing (poll {self.polls})")

        self.state = terminal
        logger.info(f"Operation {operation.name} finished: {terminal.value} after {self.polls} polls")
        return operation
