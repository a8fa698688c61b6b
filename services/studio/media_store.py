"""
Result Transport - provider results to revocable in-memory handles

Images arrive inline and become data URIs. Audio arrives as raw PCM and is
wrapped in a WAV container. Video arrives as a URI that needs the active key
appended and is downloaded with httpx. Each payload is registered under a
`studio-blob:` URI that the owning panel revokes when a newer result
replaces it or the panel closes.
"""

import base64
import io
import logging
import uuid
import wave
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx

from core.config import Config, get_config
from core.errors import ResourceRevokedError, TransportError

from .schemas import InlineBinary

logger = logging.getLogger(__name__)

BLOB_SCHEME = "studio-blob"

PCM_MIME_TYPES = ("audio/l16", "audio/pcm")
DEFAULT_PCM_RATE = 24000


@dataclass
class MediaHandle:
    """Locally addressable, revocable reference to a binary payload."""
    uri: str
    mime_type: str
    _data: Optional[bytes] = field(default=None, repr=False)
    source: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    revoked: bool = False

    @property
    def data(self) -> bytes:
        if self.revoked or self._data is None:
            raise ResourceRevokedError(f"Media handle {self.uri} was revoked", error_code="REVOKED")
        return self._data

    @property
    def size(self) -> int:
        return 0 if self._data is None else len(self._data)

    @property
    def data_uri(self) -> str:
        """Self-contained `data:` URI for the payload."""
        return to_data_uri(self.data, self.mime_type)

    def _release(self):
        self._data = None
        self.revoked = True


def to_data_uri(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _mime_params(mime_type: str) -> tuple[str, dict[str, str]]:
    base, *params = [p.strip() for p in mime_type.split(";")]
    parsed = {}
    for param in params:
        if "=" in param:
            key, value = param.split("=", 1)
            parsed[key.strip().lower()] = value.strip()
    return base.lower(), parsed


def pcm_to_wav(pcm: bytes, sample_rate: int = DEFAULT_PCM_RATE, channels: int = 1, sample_width: int = 2) -> bytes:
    """Wrap 16-bit little-endian PCM in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()


class MediaStore:
    """
    Registry of media handles for the presentation layer.

    Usage:
        store = MediaStore()
        handle = store.store_image(inline)
        render(handle.data_uri)
        store.revoke(handle)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or get_config()
        self._http_client = http_client
        self._owns_client = http_client is None
        self._handles: dict[str, MediaHandle] = {}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.transport.download_timeout_seconds
            )
        return self._http_client

    async def close(self):
        """Revoke everything and close the HTTP client."""
        self.revoke_all()
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def register(self, data: bytes, mime_type: str, source: Optional[str] = None) -> MediaHandle:
        handle = MediaHandle(
            uri=f"{BLOB_SCHEME}:{uuid.uuid4()}",
            mime_type=mime_type,
            _data=data,
            source=source,
        )
        self._handles[handle.uri] = handle
        logger.debug(f"Registered {handle.uri} ({mime_type}, {len(data)} bytes)")
        return handle

    def resolve(self, uri: str) -> MediaHandle:
        handle = self._handles.get(uri)
        if handle is None or handle.revoked:
            raise ResourceRevokedError(f"No live media for {uri}", error_code="REVOKED")
        return handle

    def revoke(self, handle: Optional[MediaHandle]):
        if handle is None or handle.revoked:
            return
        handle._release()
        self._handles.pop(handle.uri, None)
        logger.debug(f"Revoked {handle.uri}")

    def revoke_all(self):
        for handle in list(self._handles.values()):
            self.revoke(handle)

    @property
    def live_handles(self) -> list[MediaHandle]:
        return [h for h in self._handles.values() if not h.revoked]

    # Feature specific wrappers

    def store_image(self, image: InlineBinary) -> MediaHandle:
        return self.register(image.data, image.mime_type, source="inline")

    def store_audio(self, audio: InlineBinary) -> MediaHandle:
        base, params = _mime_params(audio.mime_type)
        if base not in PCM_MIME_TYPES:
            return self.register(audio.data, audio.mime_type, source="inline")

        try:
            rate = int(params.get("rate", DEFAULT_PCM_RATE))
        except ValueError:
            logger.warning(f"Bad PCM rate in '{audio.mime_type}', using {DEFAULT_PCM_RATE}")
            rate = DEFAULT_PCM_RATE

        return self.register(pcm_to_wav(audio.data, sample_rate=rate), "audio/wav", source="inline")

    async def store_video(self, uri: str, api_key: Optional[str]) -> MediaHandle:
        """Download a generated video and register it."""
        url = httpx.URL(uri)
        if api_key:
            url = url.copy_merge_params({"key": api_key})

        client = await self._get_client()
        response = await client.get(url, follow_redirects=True)

        if not response.is_success:
            logger.error(f"Video download failed: HTTP {response.status_code}")
            raise TransportError(
                "Failed to fetch video blob",
                status_code=response.status_code,
                error_code=f"HTTP_{response.status_code}",
                feature="video",
            )

        mime_type = response.headers.get("content-type", "video/mp4").split(";")[0] or "video/mp4"
        logger.info(f"Video downloaded: {len(response.content) / 1024 / 1024:.1f} MB")
        return self.register(response.content, mime_type, source=uri)
