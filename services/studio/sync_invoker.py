"""
Sync Invoker - single request/response provider calls

Covers upload-pack metadata, reference analysis, thumbnail images and
narration. Exactly one request per call and no retries: provider errors
propagate to the panel unchanged.
"""

import base64
import logging
from typing import Any, Callable, Optional

from google import genai
from pydantic import ValidationError as SchemaValidationError

from core.errors import DecodeError, GenerationError

from .request_builder import generation_config, request_contents
from .schemas import GenerationRequest, InlineBinary, UploadPackResult

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], genai.Client]


def _first_candidate_parts(response: Any) -> list:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def _inline_binary(part: Any, default_mime: str) -> Optional[InlineBinary]:
    inline = getattr(part, "inline_data", None)
    if inline is None or not getattr(inline, "data", None):
        return None

    data = inline.data
    # The SDK hands back bytes, raw REST payloads are base64 text
    if isinstance(data, str):
        data = base64.b64decode(data)

    return InlineBinary(data=data, mime_type=getattr(inline, "mime_type", None) or default_mime)


class SyncInvoker:
    """Issues blocking generate_content calls and extracts typed payloads."""

    def __init__(self, client_factory: ClientFactory):
        self._client_factory = client_factory

    async def _generate(self, request: GenerationRequest) -> Any:
        client = self._client_factory()
        logger.info(
            f"generate_content: feature={request.feature_kind.value}, "
            f"model={request.model}, request={request.request_id}"
        )
        return await client.aio.models.generate_content(
            model=request.model,
            contents=request_contents(request),
            config=generation_config(request),
        )

    async def generate_upload_pack(self, request: GenerationRequest) -> UploadPackResult:
        """Generate and validate a full upload pack. Never returns a partial pack."""
        response = await self._generate(request)

        text = getattr(response, "text", None)
        if not text:
            raise DecodeError("No response from AI", error_code="EMPTY_RESPONSE", feature="metadata")

        try:
            return UploadPackResult.model_validate_json(text)
        except SchemaValidationError as e:
            logger.error(f"Upload pack payload rejected: {e.error_count()} schema errors")
            raise DecodeError(
                f"Malformed upload pack from AI: {e.errors()[0]['msg']}",
                error_code="MALFORMED_RESPONSE",
                feature="metadata",
            ) from e

    async def analyze_reference(self, request: GenerationRequest) -> str:
        """Critique a reference thumbnail's style."""
        response = await self._generate(request)
        text = getattr(response, "text", None)
        if not text:
            logger.warning(f"Empty analysis for request {request.request_id}")
            return "Analysis failed"
        return text

    async def generate_image(self, request: GenerationRequest) -> InlineBinary:
        """Return the first inline image part of the response."""
        response = await self._generate(request)

        for part in _first_candidate_parts(response):
            image = _inline_binary(part, default_mime="image/png")
            if image is not None:
                return image

        raise GenerationError("Failed to generate image.", error_code="NO_IMAGE", feature="image")

    async def generate_speech(self, request: GenerationRequest) -> InlineBinary:
        """Return decoded audio bytes from the first response part."""
        response = await self._generate(request)

        parts = _first_candidate_parts(response)
        audio = _inline_binary(parts[0], default_mime="audio/L16;rate=24000") if parts else None
        if audio is None:
            raise GenerationError("No audio generated", error_code="NO_AUDIO", feature="speech")

        logger.info(f"Speech generated: {len(audio.data)} bytes ({audio.mime_type})")
        return audio
