from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from pydub import AudioSegment


# =============================================================================
# Story domain
# =============================================================================


@dataclass
class Page:
    """One unit of story progress: narrative text plus optional illustration and narration."""

    id: str
    text: str
    image: str | None = None  # data URI
    audio: AudioSegment | None = None


# =============================================================================
# API models
# =============================================================================


class StartStoryRequest(BaseModel):
    """Request model for starting a new story in a session."""

    premise: str = Field(..., description="What the story is about")
    voice: str | None = Field(None, description="Narrator voice ID (defaults to the configured voice)")


class VoiceResponse(BaseModel):
    """A selectable narrator voice."""

    id: str
    name: str
    description: str | None = None
    is_default: bool = False


class PageResponse(BaseModel):
    """Response model for a single story page."""

    id: str
    index: int
    text: str
    image: str | None = Field(None, description="Illustration as a data URI")
    image_pending: bool = Field(
        False, description="True while the illustration for this page is still being drawn"
    )
    has_audio: bool = False
    audio_duration_seconds: float | None = None


class StoryStateResponse(BaseModel):
    """Snapshot of a story session."""

    session_id: str
    started: bool
    is_loading: bool
    error_message: str | None = None
    voice: str | None = None
    current_index: int
    pages: list[PageResponse] = Field(default_factory=list)

    can_go_prev: bool = False
    can_go_next: bool = False
    can_replay: bool = False
