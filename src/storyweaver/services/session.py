"""In-memory story session state."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydub import AudioSegment

from storyweaver.models import Page, PageResponse, StoryStateResponse

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class StorySession:
    """State of one story, from premise entry to restart or critical failure.

    All page and index mutations go through the methods below so that subscribers
    (the playback side of the navigation controller) see every change.
    """

    def __init__(self, session_id: str) -> None:
        self.id = session_id
        self.pages: list[Page] = []
        self.current_index: int = 0
        self.chat_context: Any | None = None
        self.voice: str | None = None
        self.started: bool = False
        self.is_loading: bool = False
        self.error_message: str | None = None
        self._listeners: list[Callable[[StorySession], None]] = []

    def subscribe(self, listener: Callable[[StorySession], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    @property
    def current_page(self) -> Page | None:
        if 0 <= self.current_index < len(self.pages):
            return self.pages[self.current_index]
        return None

    @property
    def is_last_page(self) -> bool:
        return self.current_index >= len(self.pages) - 1

    def start(self, chat_context: Any, voice: str) -> None:
        """Bind a fresh chat context, replacing any previous one."""
        self.chat_context = chat_context
        self.voice = voice
        self.started = True

    def reset(self) -> None:
        """Return to premise entry. Pages are left as they are."""
        self.chat_context = None
        self.started = False

    def show_first_page(self, page: Page) -> None:
        self.pages = [page]
        self.current_index = 0
        self._notify()

    def append_page(self, page: Page) -> None:
        self.pages.append(page)
        self.current_index = len(self.pages) - 1
        self._notify()

    def move_to(self, index: int) -> None:
        if not 0 <= index < len(self.pages):
            raise IndexError(f"Page index {index} out of range for {len(self.pages)} pages")
        self.current_index = index
        self._notify()

    def update_page(
        self,
        page_id: str,
        *,
        image: str | None = _UNSET,
        audio: AudioSegment | None = _UNSET,
    ) -> bool:
        """Backfill fields of the page with *page_id*; False if it is no longer present."""
        for page in self.pages:
            if page.id == page_id:
                if image is not _UNSET:
                    page.image = image
                if audio is not _UNSET:
                    page.audio = audio
                self._notify()
                return True
        logger.info(f"Page {page_id} no longer in session {self.id}, dropping enhancement update")
        return False

    def find_page(self, page_id: str) -> Page | None:
        return next((p for p in self.pages if p.id == page_id), None)

    def to_response(self) -> StoryStateResponse:
        page = self.current_page
        return StoryStateResponse(
            session_id=self.id,
            started=self.started,
            is_loading=self.is_loading,
            error_message=self.error_message,
            voice=self.voice,
            current_index=self.current_index,
            pages=[
                PageResponse(
                    id=p.id,
                    index=i,
                    text=p.text,
                    image=p.image,
                    image_pending=p.image is None and self.is_loading and i == len(self.pages) - 1,
                    has_audio=p.audio is not None,
                    audio_duration_seconds=len(p.audio) / 1000 if p.audio is not None else None,
                )
                for i, p in enumerate(self.pages)
            ],
            can_go_prev=self.started and not self.is_loading and self.current_index > 0,
            can_go_next=self.started and not self.is_loading and page is not None,
            can_replay=self.started and page is not None and page.audio is not None,
        )
