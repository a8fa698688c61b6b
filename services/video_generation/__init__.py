"""
Video Generation Service

Runs Veo text-to-video jobs through the Gemini long-running operation API:
submit, poll on a fixed interval within a wait budget, resolve a video URI.
"""

from .poller import (
    AsyncJobPoller,
    CancellationToken,
    extract_video_uri,
)

__all__ = [
    "AsyncJobPoller",
    "CancellationToken",
    "extract_video_uri",
]
