"""Registry of live story sessions."""

from __future__ import annotations

import logging
from collections import OrderedDict
from uuid import uuid4

from storyweaver.infrastructure.audio import AudioOutput, AudioPlayer
from storyweaver.services.navigation import NavigationController
from storyweaver.services.orchestrator import StoryOrchestrator
from storyweaver.services.session import StorySession

logger = logging.getLogger(__name__)


class SessionStore:
    """Keeps one ``NavigationController`` per session, evicting the oldest past *max_sessions*."""

    def __init__(
        self,
        orchestrator: StoryOrchestrator,
        audio_output: AudioOutput | None = None,
        max_sessions: int = 100,
    ):
        self.orchestrator = orchestrator
        self.audio_output = audio_output
        self.max_sessions = max_sessions
        self._controllers: OrderedDict[str, NavigationController] = OrderedDict()

    def __len__(self) -> int:
        return len(self._controllers)

    def create(self) -> NavigationController:
        session = StorySession(uuid4().hex)
        player = AudioPlayer(self.audio_output) if self.audio_output is not None else None
        controller = NavigationController(session, self.orchestrator, player)
        self._controllers[session.id] = controller
        logger.info(f"Created session {session.id}")

        while len(self._controllers) > self.max_sessions:
            evicted_id, evicted = self._controllers.popitem(last=False)
            evicted.close()
            logger.info(f"Evicted session {evicted_id}")
        return controller

    def get(self, session_id: str) -> NavigationController | None:
        return self._controllers.get(session_id)

    def remove(self, session_id: str) -> bool:
        controller = self._controllers.pop(session_id, None)
        if controller is None:
            return False
        controller.close()
        logger.info(f"Removed session {session_id}")
        return True

    def close(self) -> None:
        for controller in self._controllers.values():
            controller.close()
        self._controllers.clear()
