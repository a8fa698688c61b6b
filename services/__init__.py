"""
CreatorStudio Services

Core services behind the creator tool panels:
- studio: request shaping, sync provider calls, key gate, media handles, panels
- video_generation: Veo long-running job poller
"""

from .studio import StudioSession, TOOLS

__all__ = [
    "StudioSession",
    "TOOLS",
]
