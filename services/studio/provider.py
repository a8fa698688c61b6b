"""
Gemini client factory.

The video flow may swap the active key mid-session (key selection dialog),
so clients are built per call from whatever key is current instead of being
cached once at import time.
"""

import logging
from typing import Callable, Optional

from google import genai

from core.config import Config, get_config
from core.errors import CredentialError

logger = logging.getLogger(__name__)

KeySource = Callable[[], Optional[str]]


class ProviderClientFactory:
    """Builds `genai.Client` instances for the currently active key."""

    def __init__(
        self,
        config: Optional[Config] = None,
        key_source: Optional[KeySource] = None,
    ):
        self.config = config or get_config()
        self._key_source = key_source

    def active_key(self) -> str:
        """Key selected through the host dialog, else the configured one."""
        key = self._key_source() if self._key_source else None
        return key or self.config.api.google_api_key

    def use_key_source(self, key_source: Optional[KeySource]):
        self._key_source = key_source

    def __call__(self) -> genai.Client:
        api_key = self.active_key()
        if not api_key:
            raise CredentialError(
                "No Gemini API key available (set GEMINI_API_KEY or select a key)",
                error_code="NO_API_KEY",
            )
        return genai.Client(api_key=api_key)
