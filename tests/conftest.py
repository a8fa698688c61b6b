"""
Shared fixtures: explicit config and a fake Gemini client.

The fake mirrors the parts of `genai.Client` the studio touches:
`client.aio.models.generate_content`, `client.aio.models.generate_videos`
and `client.aio.operations.get`.
"""

import os
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import APIConfig, Config, ModelConfig, TransportConfig, VideoConfig


def make_config(**video_overrides) -> Config:
    video = dict(poll_interval_seconds=5.0, max_wait_seconds=600.0, retry_after_reselect=False)
    video.update(video_overrides)
    return Config(
        api=APIConfig(google_api_key="env-key"),
        models=ModelConfig(
            text_model="gemini-2.5-flash",
            analysis_model="gemini-2.5-flash",
            image_model="gemini-3-pro-image-preview",
            speech_model="gemini-2.5-flash-preview-tts",
            video_model="veo-3.1-fast-generate-preview",
        ),
        video=VideoConfig(**video),
        transport=TransportConfig(),
    )


def inline_part(data, mime_type):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def text_part(text):
    return SimpleNamespace(inline_data=None, text=text)


def content_response(parts=None, text=None):
    candidates = [SimpleNamespace(content=SimpleNamespace(parts=parts))] if parts is not None else []
    return SimpleNamespace(text=text, candidates=candidates)


def video_operation(done, uri=None, error=None, name="operations/veo-123"):
    response = None
    if done and uri is not None:
        response = SimpleNamespace(generated_videos=[SimpleNamespace(video=SimpleNamespace(uri=uri))])
    elif done:
        response = SimpleNamespace(generated_videos=[])
    return SimpleNamespace(name=name, done=done, response=response, error=error)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def fake_client():
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    client.aio.models.generate_videos = AsyncMock()
    client.aio.operations.get = AsyncMock()
    return client


@pytest.fixture
def client_factory(fake_client):
    return MagicMock(return_value=fake_client)
