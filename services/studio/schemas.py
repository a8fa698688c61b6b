"""
Data model for the studio tool panels.

Requests are frozen dataclasses built once per user action. Structured
provider output is a pydantic model, so one class both declares the
response schema and validates what comes back.
"""

import mimetypes
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from google.genai import types
from pydantic import BaseModel, ConfigDict, Field


class FeatureKind(str, Enum):
    """Which tool panel a request belongs to."""
    METADATA = "metadata"
    IMAGE = "image"
    SPEECH = "speech"
    VIDEO = "video"


class VoiceName(str, Enum):
    """Prebuilt narrator voices."""
    KORE = "Kore"
    PUCK = "Puck"
    FENRIR = "Fenrir"
    CHARON = "Charon"


class AspectRatio(str, Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class Resolution(str, Enum):
    HD = "720p"
    FULL_HD = "1080p"


class JobState(str, Enum):
    """Lifecycle of a long-running video job."""
    STARTED = "started"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class ReferenceMedia:
    """User supplied reference image for thumbnail analysis."""
    data: bytes
    mime_type: str

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ReferenceMedia":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(data=path.read_bytes(), mime_type=mime_type or "image/png")

    def to_part(self) -> types.Part:
        return types.Part.from_bytes(data=self.data, mime_type=self.mime_type)


@dataclass(frozen=True)
class InlineBinary:
    """Raw bytes lifted out of an inline-data response part."""
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class GenerationRequest:
    """Provider-ready request for one user action."""
    feature_kind: FeatureKind
    prompt_text: str
    model: str

    reference_media: Optional[ReferenceMedia] = None
    voice: Optional[VoiceName] = None
    aspect_ratio: Optional[AspectRatio] = None
    resolution: Optional[Resolution] = None
    image_size: Optional[str] = None
    response_schema: Optional[Any] = None

    # Request metadata
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class JobHandle:
    """Local view of a provider-side video operation."""
    provider_operation_id: str
    done: bool = False
    result_reference: Optional[str] = None
    state: JobState = JobState.STARTED

    # Latest SDK operation, re-fetched on every poll
    operation: Any = None
    request_id: Optional[str] = None
    polls: int = 0
    elapsed_seconds: float = 0.0


class UploadPackResult(BaseModel):
    """Complete YouTube upload package."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    titles: list[str] = Field(
        min_length=3, max_length=3,
        description="Three viral, click-driven titles",
    )
    description: str = Field(min_length=1, description="SEO description, 200-300 words")
    tags: list[str] = Field(description="Search tags")
    hashtags: list[str] = Field(description="Relevant hashtags")
    pinned_comment: str = Field(alias="pinnedComment", description="High-CTR pinned comment")
    thumbnail_concepts: list[str] = Field(
        alias="thumbnailConcepts",
        min_length=4, max_length=4,
        description="Four visual concepts for thumbnails",
    )

    def to_youtube_tags(self, max_tag_length: int = 30, max_total: int = 500) -> list[str]:
        """
        Tags ready for the YouTube upload form.

        Hash prefixes and case-insensitive duplicates are dropped. The list
        stops once the comma-joined length would pass `max_total`.
        """
        kept: list[str] = []
        seen: set[str] = set()
        used = 0
        for raw in self.tags:
            tag = raw.strip().lstrip("#").strip()[:max_tag_length].rstrip()
            if not tag or tag.lower() in seen:
                continue
            cost = len(tag) + (1 if kept else 0)
            if used + cost > max_total:
                break
            kept.append(tag)
            seen.add(tag.lower())
            used += cost
        return kept


@dataclass
class MediaResult:
    """Rendered media owned by a panel until superseded or closed."""
    handle: Any  # MediaHandle
    analysis_text: Optional[str] = None
