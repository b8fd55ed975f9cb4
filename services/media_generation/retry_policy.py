"""
Retry Policy for video submission

A stale or missing billing-enabled key shows up on submission as
"Requested entity was not found". On that signature, and only that one,
the credential gate's selection flow runs once and the submission is
retried once. Everything else propagates unchanged.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_none

from core.credentials import CredentialGate
from core.errors import is_entity_not_found

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SubmissionRetryPolicy:
    """
    Bounded re-selection + resubmission around one logical submit call.

    Usage:
        policy = SubmissionRetryPolicy(gate)
        operation = await policy.run(lambda: service.submit_video(request, model))
    """

    def __init__(self, gate: CredentialGate, max_reselections: int = 1):
        if max_reselections < 0:
            raise ValueError("max_reselections cannot be negative")
        self.gate = gate
        self.max_reselections = max_reselections
        self.attempts = 0
        self.reselections = 0

    async def run(self, submit: Callable[[], Awaitable[T]]) -> T:
        """
        Call `submit`, re-selecting credentials before each permitted retry.

        Raises:
            Exception: The submit failure, unchanged, when it is not retryable
                or the retry budget is spent
        """
        self.attempts = 0
        self.reselections = 0

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(1 + self.max_reselections),
            retry=retry_if_exception(is_entity_not_found),
            wait=wait_none(),
            reraise=True,
        ):
            with attempt:
                if self.attempts > 0:
                    logger.warning("Entity not found on submission, re-selecting API key and retrying")
                    self.reselections += 1
                    await self.gate.prompt_credential_selection()
                self.attempts += 1
                return await submit()
