"""
Request Builder - user inputs to provider-ready requests

Pure transformation, no I/O. Validation happens here so that a bad form
never reaches the network.
"""

from typing import Optional, Union

from google.genai import types

from core.config import Config, get_config
from core.errors import ValidationError

from .schemas import (
    AspectRatio,
    FeatureKind,
    GenerationRequest,
    ReferenceMedia,
    Resolution,
    UploadPackResult,
    VoiceName,
)

THUMBNAIL_ASPECT_RATIO = "16:9"

ANALYSIS_INSTRUCTION = (
    "Analyze this YouTube thumbnail. Describe its color palette, emotion, "
    "composition, typography style, and why it is click-worthy. Keep it concise."
)


def upload_pack_prompt(keywords: str, script: Optional[str] = None) -> str:
    """Build the strategist instruction for an upload pack."""
    return f"""You are a world-class YouTube Strategist optimized for 2025 SEO.

Context:
Keywords: {keywords}
{f"Script/Context: {script}" if script else ""}

Task: Generate a complete metadata upload package.
1. Create 3 highly viral, click-driven titles.
2. Write an SEO-optimized description (200-300 words).
3. Generate a list of comma-separated tags (500 chars limit logic).
4. Generate relevant hashtags.
5. Write a high-CTR pinned comment to engage viewers.
6. Describe 4 visual concepts for high CTR thumbnails.
"""


def thumbnail_prompt(prompt_text: str, analysis: Optional[str] = None) -> str:
    """Fold a reference-style analysis into the user's thumbnail idea."""
    if not analysis:
        return prompt_text
    return (
        f"Create a YouTube thumbnail based on this style description: {analysis}. \n\n"
        f"Additional user requirement: {prompt_text}. \n\n"
        "Ensure high contrast, vibrant colors, and 2025 trending aesthetics."
    )


def _coerce(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Unsupported {label} '{value}' (expected one of: {allowed})",
            error_code="INVALID_OPTION",
        )


class RequestBuilder:
    """Builds one `GenerationRequest` per user action."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()

    def build_upload_pack(self, keywords: str, script: Optional[str] = None) -> GenerationRequest:
        if not keywords or not keywords.strip():
            raise ValidationError(
                "Keywords are required", error_code="MISSING_KEYWORDS", feature="metadata"
            )
        script = script.strip() if script else None
        return GenerationRequest(
            feature_kind=FeatureKind.METADATA,
            prompt_text=upload_pack_prompt(keywords.strip(), script),
            model=self.config.models.text_model,
            response_schema=UploadPackResult,
        )

    def build_thumbnail_analysis(self, reference: ReferenceMedia) -> GenerationRequest:
        if not reference.data:
            raise ValidationError(
                "Reference image is empty", error_code="EMPTY_REFERENCE", feature="image"
            )
        return GenerationRequest(
            feature_kind=FeatureKind.IMAGE,
            prompt_text=ANALYSIS_INSTRUCTION,
            model=self.config.models.analysis_model,
            reference_media=reference,
        )

    def build_thumbnail(self, prompt_text: str, analysis: Optional[str] = None) -> GenerationRequest:
        if not prompt_text or not prompt_text.strip():
            raise ValidationError(
                "Thumbnail idea is required", error_code="MISSING_PROMPT", feature="image"
            )
        return GenerationRequest(
            feature_kind=FeatureKind.IMAGE,
            prompt_text=thumbnail_prompt(prompt_text, analysis),
            model=self.config.models.image_model,
            aspect_ratio=AspectRatio(THUMBNAIL_ASPECT_RATIO),
            image_size=self.config.models.image_size,
        )

    def build_speech(
        self,
        text: str,
        voice: Union[VoiceName, str] = VoiceName.KORE,
    ) -> GenerationRequest:
        if not text or not text.strip():
            raise ValidationError(
                "Script text is required", error_code="MISSING_TEXT", feature="speech"
            )
        return GenerationRequest(
            feature_kind=FeatureKind.SPEECH,
            prompt_text=text,
            model=self.config.models.speech_model,
            voice=_coerce(VoiceName, voice, "voice"),
        )

    def build_video(
        self,
        prompt: str,
        aspect_ratio: Union[AspectRatio, str] = AspectRatio.LANDSCAPE,
        resolution: Union[Resolution, str] = Resolution.FULL_HD,
    ) -> GenerationRequest:
        if not prompt or not prompt.strip():
            raise ValidationError(
                "Video prompt is required", error_code="MISSING_PROMPT", feature="video"
            )
        return GenerationRequest(
            feature_kind=FeatureKind.VIDEO,
            prompt_text=prompt,
            model=self.config.models.video_model,
            aspect_ratio=_coerce(AspectRatio, aspect_ratio, "aspect ratio"),
            resolution=_coerce(Resolution, resolution, "resolution"),
        )


def request_contents(request: GenerationRequest) -> list[types.Content]:
    """Contents payload for a generate_content call."""
    parts = []
    if request.reference_media is not None:
        parts.append(request.reference_media.to_part())
    parts.append(types.Part.from_text(text=request.prompt_text))
    return [types.Content(role="user", parts=parts)]


def generation_config(
    request: GenerationRequest,
) -> Union[types.GenerateContentConfig, types.GenerateVideosConfig, None]:
    """Provider config object for a request, or None when defaults apply."""
    if request.feature_kind == FeatureKind.METADATA:
        return types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=request.response_schema,
        )

    if request.feature_kind == FeatureKind.IMAGE:
        if request.aspect_ratio is None:
            return None  # reference analysis, plain text answer
        return types.GenerateContentConfig(
            image_config=types.ImageConfig(
                aspect_ratio=request.aspect_ratio.value,
                image_size=request.image_size,
            ),
        )

    if request.feature_kind == FeatureKind.SPEECH:
        return types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=request.voice.value,
                    ),
                ),
            ),
        )

    return types.GenerateVideosConfig(
        number_of_videos=1,
        aspect_ratio=request.aspect_ratio.value,
        resolution=request.resolution.value,
    )
