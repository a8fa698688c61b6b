"""
Error types for CreatorStudio.

Every error is raised where it is detected and propagates unchanged to the
tool panel that started the operation. The panel reports it to the user.
"""

from typing import Optional


class StudioError(Exception):
    """Base class for all studio failures."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        feature: Optional[str] = None,
    ):
        self.error_code = error_code
        self.feature = feature
        super().__init__(message)


class ValidationError(StudioError):
    """Required input is missing or invalid. Nothing was sent to the provider."""


class DecodeError(StudioError):
    """Structured payload in the provider response is missing or malformed."""


class GenerationError(StudioError):
    """Provider answered but produced no usable artifact."""


class JobCancelledError(GenerationError):
    """Polling stopped because the caller cancelled it."""


class JobTimeoutError(StudioError, TimeoutError):
    """Video job did not finish within the configured wait budget."""

    def __init__(self, message: str, waited_seconds: float = 0.0, **kwargs):
        self.waited_seconds = waited_seconds
        super().__init__(message, **kwargs)


class TransportError(StudioError):
    """Fetching a binary result returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        self.status_code = status_code
        super().__init__(message, **kwargs)


class CredentialError(StudioError):
    """Key selection failed, was cancelled, or the session expired."""


class ResourceRevokedError(StudioError):
    """A media handle was used after it was revoked."""


class PanelBusyError(StudioError):
    """A panel already has an operation in flight."""
