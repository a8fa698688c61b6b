"""
Studio Services

Orchestration behind the creator tool panels:
- request_builder: user inputs to provider requests
- sync_invoker: single-shot metadata, image and speech calls
- credential_gate: key selection handshake for Veo
- media_store: revocable handles for generated media
- panels: presentation-facing panels and the StudioSession wiring
"""

from .credential_gate import (
    CredentialGate,
    CredentialSelector,
    CredentialState,
    EnvironmentKeySelector,
    TerminalKeySelector,
)
from .media_store import MediaHandle, MediaStore
from .panels import (
    TOOLS,
    StudioSession,
    ThumbnailPanel,
    ToolInfo,
    UploadPackPanel,
    VideoPanel,
    VoicePanel,
)
from .provider import ProviderClientFactory
from .request_builder import RequestBuilder
from .schemas import (
    AspectRatio,
    FeatureKind,
    GenerationRequest,
    InlineBinary,
    JobHandle,
    JobState,
    MediaResult,
    ReferenceMedia,
    Resolution,
    UploadPackResult,
    VoiceName,
)
from .sync_invoker import SyncInvoker

__all__ = [
    # Wiring and panels
    "StudioSession",
    "UploadPackPanel",
    "ThumbnailPanel",
    "VoicePanel",
    "VideoPanel",
    "TOOLS",
    "ToolInfo",
    # Components
    "RequestBuilder",
    "SyncInvoker",
    "CredentialGate",
    "CredentialSelector",
    "CredentialState",
    "EnvironmentKeySelector",
    "TerminalKeySelector",
    "MediaStore",
    "MediaHandle",
    "ProviderClientFactory",
    # Data model
    "FeatureKind",
    "VoiceName",
    "AspectRatio",
    "Resolution",
    "JobState",
    "ReferenceMedia",
    "InlineBinary",
    "GenerationRequest",
    "JobHandle",
    "UploadPackResult",
    "MediaResult",
]
