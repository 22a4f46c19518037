"""
Story Weaver – illustrated, narrated children's stories, one page at a time.

This top-level package exposes the core models; generation and navigation live in
``storyweaver.services`` and the HTTP API in ``storyweaver.api``.
"""

from .models import (
    Page,
    PageResponse,
    StartStoryRequest,
    StoryStateResponse,
    VoiceResponse,
)

__all__ = [
    "Page",
    "PageResponse",
    "StartStoryRequest",
    "StoryStateResponse",
    "VoiceResponse",
]
