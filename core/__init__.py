"""
CreatorStudio Core Components

Provides foundational infrastructure shared by every tool panel:
- Environment driven configuration
- Error hierarchy surfaced to the presentation layer
"""

from .config import Config, get_config, reload_config
from .errors import (
    CredentialError,
    DecodeError,
    GenerationError,
    JobCancelledError,
    JobTimeoutError,
    PanelBusyError,
    ResourceRevokedError,
    StudioError,
    TransportError,
    ValidationError,
)

__all__ = [
    "Config",
    "get_config",
    "reload_config",
    "StudioError",
    "ValidationError",
    "DecodeError",
    "GenerationError",
    "JobCancelledError",
    "JobTimeoutError",
    "TransportError",
    "CredentialError",
    "ResourceRevokedError",
    "PanelBusyError",
]
