"""Per-page generation workflow: critical text first, then optional illustration and narration."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol
from uuid import uuid4

from pydub import AudioSegment

from storyweaver.models import Page
from storyweaver.services.session import StorySession

logger = logging.getLogger(__name__)

KICKOFF_INSTRUCTION = "Let's begin!"
CONTINUE_INSTRUCTION = (
    "What magical thing happens next? Tell me the next part of the story. "
    "Keep it very short and simple."
)

STORYTELLER_FAILED = "Oops! The storyteller got writer's block. Please try starting a new story."
IMAGE_FAILED = "The magic paintbrush is out of ink, so we couldn't draw a picture."
AUDIO_FAILED = "The storyteller lost their voice and couldn't read this page aloud."


class StorytellerClient(Protocol):
    def create_context(self, premise: str): ...

    async def send_message(self, context, message: str) -> str: ...


class IllustratorClient(Protocol):
    async def generate_image(self, text: str) -> str: ...


class NarratorClient(Protocol):
    async def narrate(self, text: str, voice_id: str) -> AudioSegment: ...


class StoryOrchestrator:
    """Runs generation cycles against a ``StorySession``.

    ``narrator`` is None when there is no audio output; narration is then skipped
    without reporting an error.
    """

    def __init__(
        self,
        storyteller: StorytellerClient,
        illustrator: IllustratorClient,
        narrator: NarratorClient | None = None,
    ):
        self.storyteller = storyteller
        self.illustrator = illustrator
        self.narrator = narrator

    async def begin_story(self, session: StorySession, premise: str, voice: str) -> Page | None:
        """Start a new story about *premise* and generate its first page.

        Raises ValueError for a blank premise. A no-op while a cycle is running.
        """
        if not premise or not premise.strip():
            raise ValueError("Story premise must not be blank")
        if session.is_loading:
            logger.info(f"Session {session.id} is busy, ignoring new story request")
            return None

        premise = premise.strip()
        logger.info(f"Beginning story for session {session.id} with voice={voice}")
        session.start(self.storyteller.create_context(premise), voice)
        return await self.generate_page(session, KICKOFF_INSTRUCTION, is_first=True)

    async def generate_page(self, session: StorySession, instruction: str, is_first: bool = False) -> Page | None:
        """Run one generation cycle and return the new page, or None on critical failure."""
        session.is_loading = True
        session.error_message = None

        if session.chat_context is None:
            session.is_loading = False
            return None

        # 1. Story text (critical)
        try:
            text = await self.storyteller.send_message(session.chat_context, instruction)
        except Exception as e:
            logger.error(f"Story text generation failed: {e}", exc_info=True)
            session.error_message = STORYTELLER_FAILED
            session.reset()
            session.is_loading = False
            return None

        page = Page(id=uuid4().hex, text=text)
        if is_first:
            session.show_first_page(page)
        else:
            session.append_page(page)
        logger.info(f"Page {session.current_index + 1} ready for session {session.id} (id={page.id})")

        # 2. Illustration and narration (non-critical, concurrent)
        image_result, audio_result = await asyncio.gather(
            self.illustrator.generate_image(text),
            self._narrate(text, session.voice),
            return_exceptions=True,
        )

        errors: list[str] = []
        image: str | None = None
        audio: AudioSegment | None = None

        if isinstance(image_result, BaseException):
            logger.error("Image generation failed", exc_info=image_result)
            errors.append(IMAGE_FAILED)
        else:
            image = image_result

        if isinstance(audio_result, BaseException):
            logger.error("TTS generation failed", exc_info=audio_result)
            errors.append(AUDIO_FAILED)
        else:
            audio = audio_result

        session.update_page(page.id, image=image, audio=audio)

        # 3. Report
        if errors:
            session.error_message = " ".join(errors)
        session.is_loading = False
        return page

    async def _narrate(self, text: str, voice: str | None) -> AudioSegment | None:
        if self.narrator is None:
            return None
        return await self.narrator.narrate(text, voice)
