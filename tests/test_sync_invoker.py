"""
Sync Invoker Tests

Covers:
1. Upload pack decoding (complete pack or DecodeError, never partial)
2. Reference analysis fallback text
3. First inline image extraction
4. Speech extraction and base64 decoding

Run with:
    python -m pytest tests/test_sync_invoker.py -v
"""

import base64
import json

import pytest

from conftest import content_response, inline_part, text_part
from core.errors import DecodeError, GenerationError
from services.studio.request_builder import RequestBuilder
from services.studio.schemas import ReferenceMedia
from services.studio.sync_invoker import SyncInvoker

VALID_PACK = {
    "titles": ["AI Automation Will Replace Your 9-5", "I Automated My Job", "Stop Doing This Manually"],
    "description": "Learn how AI automation saves hours every week.",
    "tags": ["ai automation", "productivity", "no code"],
    "hashtags": ["#ai", "#automation"],
    "pinnedComment": "What task would you automate first?",
    "thumbnailConcepts": [
        "Robot hand shaking human hand",
        "Clock melting over laptop",
        "Before/after desk split",
        "Shocked face with workflow arrows",
    ],
}


@pytest.fixture
def builder(config):
    return RequestBuilder(config)


@pytest.fixture
def invoker(client_factory):
    return SyncInvoker(client_factory)


class TestUploadPack:
    """Structured upload pack decoding."""

    @pytest.mark.asyncio
    async def test_scenario_ai_automation(self, invoker, builder, fake_client):
        """keywords='ai automation', script='' gives a complete pack."""
        fake_client.aio.models.generate_content.return_value = content_response(text=json.dumps(VALID_PACK))

        pack = await invoker.generate_upload_pack(builder.build_upload_pack("ai automation", ""))

        assert len(pack.titles) == 3
        assert len(pack.thumbnail_concepts) == 4
        assert pack.description
        assert pack.tags == ["ai automation", "productivity", "no code"]
        assert pack.hashtags == ["#ai", "#automation"]
        assert pack.pinned_comment == "What task would you automate first?"

        kwargs = fake_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_empty_response(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(text=None)

        with pytest.raises(DecodeError, match="No response from AI"):
            await invoker.generate_upload_pack(builder.build_upload_pack("ai automation"))

    @pytest.mark.asyncio
    async def test_malformed_json(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(text='{"titles": ["a", ')

        with pytest.raises(DecodeError):
            await invoker.generate_upload_pack(builder.build_upload_pack("ai automation"))

    @pytest.mark.asyncio
    async def test_missing_field_is_not_partial(self, invoker, builder, fake_client):
        payload = dict(VALID_PACK)
        del payload["pinnedComment"]
        fake_client.aio.models.generate_content.return_value = content_response(text=json.dumps(payload))

        with pytest.raises(DecodeError):
            await invoker.generate_upload_pack(builder.build_upload_pack("ai automation"))

    @pytest.mark.asyncio
    async def test_wrong_counts_rejected(self, invoker, builder, fake_client):
        """Two titles or five concepts are malformed, not partial."""
        for field, value in (("titles", ["one", "two"]), ("thumbnailConcepts", ["a", "b", "c", "d", "e"])):
            payload = dict(VALID_PACK, **{field: value})
            fake_client.aio.models.generate_content.return_value = content_response(text=json.dumps(payload))

            with pytest.raises(DecodeError):
                await invoker.generate_upload_pack(builder.build_upload_pack("ai automation"))

    def test_youtube_tag_budget(self):
        """Each tag is cut to 30 chars and the comma-joined list fits 500."""
        from services.studio.schemas import UploadPackResult

        pack = UploadPackResult.model_validate(dict(VALID_PACK, tags=[f"{i:02d}" + "x" * 40 for i in range(30)]))
        tags = pack.to_youtube_tags()

        assert all(len(tag) == 30 for tag in tags)
        assert len(",".join(tags)) <= 500
        assert len(tags) == 16

    def test_youtube_tags_cleaned(self):
        from services.studio.schemas import UploadPackResult

        pack = UploadPackResult.model_validate(
            dict(VALID_PACK, tags=["#AI", "ai", "  ", "No Code ", "#no code", "automation"])
        )
        assert pack.to_youtube_tags() == ["AI", "No Code", "automation"]


class TestThumbnailCalls:
    """Reference analysis and image extraction."""

    @pytest.mark.asyncio
    async def test_analysis_text(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(text="Bold red palette")
        reference = ReferenceMedia(data=b"img", mime_type="image/jpeg")

        analysis = await invoker.analyze_reference(builder.build_thumbnail_analysis(reference))
        assert analysis == "Bold red palette"

    @pytest.mark.asyncio
    async def test_analysis_fallback(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(text="")
        reference = ReferenceMedia(data=b"img", mime_type="image/jpeg")

        analysis = await invoker.analyze_reference(builder.build_thumbnail_analysis(reference))
        assert analysis == "Analysis failed"

    @pytest.mark.asyncio
    async def test_first_inline_image_wins(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(parts=[
            text_part("Here is your thumbnail"),
            inline_part(b"first-png", "image/png"),
            inline_part(b"second-png", "image/png"),
        ])

        image = await invoker.generate_image(builder.build_thumbnail("idea"))
        assert image.data == b"first-png"
        assert image.mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_no_image(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(parts=[text_part("sorry")])

        with pytest.raises(GenerationError, match="Failed to generate image"):
            await invoker.generate_image(builder.build_thumbnail("idea"))

    @pytest.mark.asyncio
    async def test_no_candidates(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(parts=None)

        with pytest.raises(GenerationError):
            await invoker.generate_image(builder.build_thumbnail("idea"))


class TestSpeech:
    """Narration extraction."""

    @pytest.mark.asyncio
    async def test_raw_bytes(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(parts=[
            inline_part(b"\x00\x01" * 10, "audio/L16;codec=pcm;rate=24000"),
        ])

        audio = await invoker.generate_speech(builder.build_speech("hello"))
        assert audio.data == b"\x00\x01" * 10
        assert audio.mime_type.startswith("audio/L16")

    @pytest.mark.asyncio
    async def test_base64_payload_decoded(self, invoker, builder, fake_client):
        encoded = base64.b64encode(b"pcm-bytes").decode("ascii")
        fake_client.aio.models.generate_content.return_value = content_response(parts=[
            inline_part(encoded, "audio/L16;rate=24000"),
        ])

        audio = await invoker.generate_speech(builder.build_speech("hello"))
        assert audio.data == b"pcm-bytes"

    @pytest.mark.asyncio
    async def test_missing_audio(self, invoker, builder, fake_client):
        fake_client.aio.models.generate_content.return_value = content_response(parts=[text_part("no")])

        with pytest.raises(GenerationError, match="No audio generated"):
            await invoker.generate_speech(builder.build_speech("hello"))

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, invoker, builder, fake_client):
        """No retry and no wrapping for provider failures."""
        fake_client.aio.models.generate_content.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(RuntimeError, match="quota exceeded"):
            await invoker.generate_speech(builder.build_speech("hello"))
        assert fake_client.aio.models.generate_content.await_count == 1
