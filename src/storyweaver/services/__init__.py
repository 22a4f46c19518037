"""Story generation, session state and navigation live here."""

from .illustrator import Illustrator
from .narrator import Narrator, build_provider
from .navigation import NavigationController
from .orchestrator import StoryOrchestrator
from .session import StorySession
from .store import SessionStore
from .storyteller import Storyteller

__all__ = [
    "Illustrator",
    "Narrator",
    "NavigationController",
    "SessionStore",
    "StoryOrchestrator",
    "StorySession",
    "Storyteller",
    "build_provider",
]
