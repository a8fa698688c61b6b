"""
Credential Gate - key selection handshake for Veo

Veo needs a key tied to a paid project. When the host can show a key
selection surface, the gate makes sure a key is selected before a job is
spent, and re-opens the selector if the provider later reports the entity
as missing (expired or revoked key).

Usage:
    gate = CredentialGate(selector=TerminalKeySelector())
    await gate.ensure_credential()
    uri = await gate.run_video(lambda: poller.run(request))
"""

import asyncio
import getpass
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol, TypeVar, runtime_checkable

from core.config import Config, get_config
from core.errors import CredentialError

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXPIRED_ENTITY_MARKER = "Requested entity was not found"


@runtime_checkable
class CredentialSelector(Protocol):
    """Optional host capability for interactive key selection."""

    async def has_selected_key(self) -> bool: ...

    async def open_select_key(self) -> None: ...

    def current_key(self) -> Optional[str]: ...


class CredentialState(str, Enum):
    NONE = "none"
    UNVERIFIED = "unverified"  # dialog returned, no call has succeeded yet
    VERIFIED = "verified"
    EXPIRED = "expired"


class EnvironmentKeySelector:
    """Uses the configured key. There is no dialog to open."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()

    async def has_selected_key(self) -> bool:
        return bool(self.config.api.google_api_key)

    async def open_select_key(self) -> None:
        raise CredentialError(
            "No key selection surface available; set GEMINI_API_KEY",
            error_code="NO_SELECTOR",
        )

    def current_key(self) -> Optional[str]:
        return self.config.api.google_api_key or None


class TerminalKeySelector:
    """Prompts for a key on the terminal. An empty entry counts as cancel."""

    def __init__(self, prompt: str = "Gemini API key (paid project for Veo): "):
        self.prompt = prompt
        self._key: Optional[str] = None

    async def has_selected_key(self) -> bool:
        return bool(self._key)

    async def open_select_key(self) -> None:
        try:
            key = await asyncio.to_thread(getpass.getpass, self.prompt)
        except (EOFError, KeyboardInterrupt) as e:
            raise CredentialError("Key selection cancelled", error_code="SELECTION_CANCELLED") from e

        key = key.strip()
        if not key:
            raise CredentialError("Key selection cancelled", error_code="SELECTION_CANCELLED")
        self._key = key

    def current_key(self) -> Optional[str]:
        return self._key


def is_expired_credential_error(error: BaseException) -> bool:
    """Provider signals a stale key with NOT_FOUND on the operation."""
    if getattr(error, "code", None) == 404:
        return True
    return EXPIRED_ENTITY_MARKER in str(error)


class CredentialGate:
    """Guards the video feature behind a selected, working key."""

    def __init__(
        self,
        selector: Optional[CredentialSelector] = None,
        config: Optional[Config] = None,
    ):
        self.selector = selector
        self.config = config or get_config()
        self.state = CredentialState.NONE

    @property
    def has_selector(self) -> bool:
        return self.selector is not None

    def current_key(self) -> Optional[str]:
        if self.selector is None:
            return None
        return self.selector.current_key()

    async def _select(self):
        try:
            await self.selector.open_select_key()
        except CredentialError:
            raise
        except Exception as e:
            logger.error(f"Key selection failed: {e}")
            raise CredentialError(
                "Key selection failed or cancelled.", error_code="SELECTION_FAILED"
            ) from e
        self.state = CredentialState.UNVERIFIED
        logger.info("Key selected, unverified until the next provider call")

    async def ensure_credential(self):
        """Open the selector when no key is active. Raises CredentialError on failure."""
        if self.selector is None:
            return

        # Hosts may lag in reporting a fresh selection; trust the dialog result
        if self.state in (CredentialState.UNVERIFIED, CredentialState.VERIFIED):
            return

        if await self.selector.has_selected_key():
            self.state = CredentialState.UNVERIFIED
            return

        await self._select()

    def mark_verified(self):
        if self.state != CredentialState.VERIFIED:
            logger.info("Credential verified by successful provider call")
        self.state = CredentialState.VERIFIED

    async def _reselect_after_expiry(self) -> bool:
        """Best-effort re-prompt. Returns True when a new key was selected."""
        self.state = CredentialState.EXPIRED
        try:
            await self._select()
            return True
        except CredentialError as e:
            logger.warning(f"Re-selection after expiry failed: {e}")
            return False

    async def run_video(self, call: Callable[[], Awaitable[T]]) -> T:
        """
        Ensure a credential, then run the video call.

        With a selector, an expiry-class failure re-opens it and surfaces as
        CredentialError. Without one, provider errors propagate unchanged.
        The call is retried once only when `video.retry_after_reselect` is
        enabled and re-selection succeeded.
        """
        await self.ensure_credential()

        try:
            result = await call()
        except CredentialError:
            raise
        except Exception as e:
            if self.selector is None or not is_expired_credential_error(e):
                raise

            logger.warning(f"Credential looks expired: {e}")
            reselected = await self._reselect_after_expiry()

            if not (reselected and self.config.video.retry_after_reselect):
                raise CredentialError(
                    "Session expired. Please select API Key again.",
                    error_code="SESSION_EXPIRED",
                    feature="video",
                ) from e

            logger.info("Retrying video request once with the new key")
            result = await call()

        self.mark_verified()
        return result
