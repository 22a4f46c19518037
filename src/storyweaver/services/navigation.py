"""Page navigation and narration playback for one session."""

from __future__ import annotations

import logging

from storyweaver.infrastructure.audio import AudioPlayer
from storyweaver.models import Page
from storyweaver.services.orchestrator import CONTINUE_INSTRUCTION, StoryOrchestrator
from storyweaver.services.session import StorySession

logger = logging.getLogger(__name__)


class NavigationController:
    """Moves between pages and keeps playback in step with the current page.

    Playback follows the session: whenever the current page, or the audio of the
    current page, changes, the previous stream is stopped and the new audio starts.
    """

    def __init__(
        self,
        session: StorySession,
        orchestrator: StoryOrchestrator,
        player: AudioPlayer | None = None,
    ):
        self.session = session
        self.orchestrator = orchestrator
        self.player = player
        self._played: tuple[str, int] | None = None
        self._closed = False
        session.subscribe(self._on_session_change)

    async def begin_story(self, premise: str, voice: str) -> Page | None:
        return await self.orchestrator.begin_story(self.session, premise, voice)

    async def go_to_next(self) -> Page | None:
        """Show the next page, generating it when the reader is on the last one.

        Returns the generated page, if a generation cycle ran and produced one.
        """
        session = self.session
        if session.is_loading or not session.started:
            return None
        if not session.is_last_page:
            session.move_to(session.current_index + 1)
            return None
        return await self.orchestrator.generate_page(session, CONTINUE_INSTRUCTION, is_first=False)

    def go_to_prev(self) -> None:
        session = self.session
        if session.is_loading or not session.started or session.current_index <= 0:
            return
        session.move_to(session.current_index - 1)

    def replay(self) -> bool:
        """Restart narration of the current page; False if it has none or playback failed."""
        page = self.session.current_page
        if self._closed or not self.session.started or page is None or page.audio is None:
            return False
        return self._play(page)

    def dismiss_error(self) -> None:
        self.session.error_message = None

    def close(self) -> None:
        """Stop playback for good; later session changes no longer reach the player."""
        self._closed = True
        if self.player is not None:
            self.player.stop()

    def _on_session_change(self, session: StorySession) -> None:
        if self._closed:
            return
        page = session.current_page
        if page is None:
            return
        if (page.id, id(page.audio)) == self._played:
            return
        self._play(page)

    def _play(self, page: Page) -> bool:
        if self.player is None:
            return False
        self._played = (page.id, id(page.audio))
        try:
            self.player.play(page.audio)
        except Exception as e:
            logger.error(f"Playback failed for page {page.id}: {e}", exc_info=True)
            return False
        return page.audio is not None
