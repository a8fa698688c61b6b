"""
Configuration management for CreatorStudio.

Centralizes all configuration including:
- Provider API key
- Model selections per feature
- Video job polling budget
- Result download settings
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _google_api_key() -> str:
    return (
        os.getenv("GEMINI_API_KEY")
        or os.getenv("GOOGLE_API_KEY")
        or os.getenv("API_KEY", "")
    )


@dataclass
class APIConfig:
    """API configuration for the Gemini provider."""

    google_api_key: str = field(default_factory=_google_api_key)


@dataclass
class ModelConfig:
    """Model selection configuration."""

    # Structured metadata and reference analysis
    text_model: str = field(
        default_factory=lambda: os.getenv("STUDIO_TEXT_MODEL", "gemini-2.5-flash")
    )
    analysis_model: str = field(
        default_factory=lambda: os.getenv("STUDIO_ANALYSIS_MODEL", "gemini-2.5-flash")
    )

    # High quality thumbnails
    image_model: str = field(
        default_factory=lambda: os.getenv("STUDIO_IMAGE_MODEL", "gemini-3-pro-image-preview")
    )
    image_size: str = "1K"

    speech_model: str = field(
        default_factory=lambda: os.getenv("STUDIO_SPEECH_MODEL", "gemini-2.5-flash-preview-tts")
    )

    video_model: str = field(
        default_factory=lambda: os.getenv("STUDIO_VIDEO_MODEL", "veo-3.1-fast-generate-preview")
    )


@dataclass
class VideoConfig:
    """Polling configuration for long-running video jobs."""

    poll_interval_seconds: float = field(
        default_factory=lambda: float(os.getenv("VIDEO_POLL_INTERVAL", "5"))
    )
    max_wait_seconds: float = field(
        default_factory=lambda: float(os.getenv("VIDEO_MAX_WAIT", "600"))
    )

    # Resubmit once after a successful key re-selection
    retry_after_reselect: bool = field(
        default_factory=lambda: _env_flag("VIDEO_RETRY_AFTER_RESELECT")
    )


@dataclass
class TransportConfig:
    """Settings for fetching binary results."""

    download_timeout_seconds: float = 600.0  # Veo files can be large


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    video: VideoConfig = field(default_factory=VideoConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.api.google_api_key:
            issues.append("GEMINI_API_KEY not configured (or GOOGLE_API_KEY / API_KEY)")

        if self.video.poll_interval_seconds <= 0:
            issues.append("VIDEO_POLL_INTERVAL must be positive")

        if self.video.max_wait_seconds < self.video.poll_interval_seconds:
            issues.append("VIDEO_MAX_WAIT must be at least one poll interval")

        return issues


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()
    return _config
