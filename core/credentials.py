"""
Credential Gate - privileged (billing-enabled) key selection

The gate owns the "is a paid key selected" state. The media orchestrators
never cache it: they ask before every privileged call and, when needed,
trigger the selection flow.

Usage:
    gate = SharedSelectionGate(EnvCredentialGate(selector=prompt_for_key_interactively))
    await ensure_privileged_credential(gate)
    key = gate.current_credential()
"""

import asyncio
import getpass
import logging
import os
from typing import Awaitable, Callable, Optional, Protocol

from .errors import CredentialError

logger = logging.getLogger(__name__)

KeySelector = Callable[[], Awaitable[Optional[str]]]

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


class CredentialGate(Protocol):
    """External collaborator that knows whether a paid key is selected."""

    async def has_privileged_credential(self) -> bool:
        ...

    async def prompt_credential_selection(self) -> None:
        ...

    def current_credential(self) -> Optional[str]:
        ...


class EnvCredentialGate:
    """
    Credential gate backed by environment variables.

    A key chosen through the selection flow overrides whatever the
    environment provides. Without a selector, "selection" re-reads the
    environment (useful when an outer process rotates the key).
    """

    def __init__(
        self,
        selector: Optional[KeySelector] = None,
        env_vars: tuple[str, ...] = API_KEY_ENV_VARS,
    ):
        self.selector = selector
        self.env_vars = env_vars
        self._selected: Optional[str] = None

    def _env_key(self) -> Optional[str]:
        for name in self.env_vars:
            value = os.getenv(name)
            if value:
                return value
        return None

    def current_credential(self) -> Optional[str]:
        return self._selected or self._env_key()

    async def has_privileged_credential(self) -> bool:
        return bool(self.current_credential())

    async def prompt_credential_selection(self) -> None:
        if self.selector is None:
            logger.info("No key selector configured, re-reading environment")
            self._selected = None
            return

        key = await self.selector()
        if key:
            self._selected = key.strip()
            logger.info("Privileged API key selected")
        else:
            logger.warning("Key selection aborted")


class SharedSelectionGate:
    """
    Wraps a gate so concurrent callers share one in-flight selection.

    Two generations racing on a stale key would otherwise each open their
    own selection prompt.
    """

    def __init__(self, inner: CredentialGate):
        self.inner = inner
        self._pending: Optional[asyncio.Task] = None
        self.selections_started = 0

    def current_credential(self) -> Optional[str]:
        return self.inner.current_credential()

    async def has_privileged_credential(self) -> bool:
        return await self.inner.has_privileged_credential()

    async def prompt_credential_selection(self) -> None:
        if self._pending is None or self._pending.done():
            self.selections_started += 1
            self._pending = asyncio.ensure_future(self.inner.prompt_credential_selection())
        # shield: one caller being cancelled must not abort the shared prompt
        await asyncio.shield(self._pending)


async def ensure_privileged_credential(gate: CredentialGate) -> None:
    """
    Make sure a privileged credential is selected.

    Gives the selection flow exactly one chance before failing.

    Raises:
        CredentialError: If no privileged credential is available afterwards
    """
    if await gate.has_privileged_credential():
        return

    logger.info("Privileged credential missing, opening key selection")
    await gate.prompt_credential_selection()

    if not await gate.has_privileged_credential():
        raise CredentialError("A billing-enabled API key is required for this operation")


async def prompt_for_key_interactively() -> Optional[str]:
    """Terminal key selector used by the CLI."""
    return await asyncio.to_thread(getpass.getpass, "Paste a billing-enabled Gemini API key: ")
