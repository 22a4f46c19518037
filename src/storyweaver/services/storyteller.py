"""Story text generation through a Gemini chat session."""

import logging

from google import genai
from google.genai import chats, types

logger = logging.getLogger(__name__)


class Storyteller:
    """Creates premise-bound chat contexts and asks them for the next page of text."""

    def __init__(self, client: genai.Client, model: str = "gemini-2.5-flash"):
        self.client = client
        self.model = model

    def create_context(self, premise: str) -> chats.AsyncChat:
        """Open a new chat whose system instruction embeds *premise*."""
        logger.info(f"Starting chat session with model={self.model}")
        return self.client.aio.chats.create(
            model=self.model,
            config=types.GenerateContentConfig(
                system_instruction=self._build_directive(premise),
            ),
        )

    async def send_message(self, context: chats.AsyncChat, message: str) -> str:
        """Send *message* on *context* and return the narrative reply.

        Raises ValueError when the model replies with no text.
        """
        response = await context.send_message(message)
        text = (response.text or "").strip()
        if not text:
            raise ValueError("Storyteller returned an empty page")
        return text

    @staticmethod
    def _build_directive(premise: str) -> str:
        return (
            "You are a wondrous storyteller for children aged 3 to 7. Your voice is warm and friendly. "
            f'Create a magical, happy story based on this idea: "{premise}". '
            "Every page you write should be very short, just one or two simple sentences. "
            "Use easy words. Always keep the story cheerful, gentle, and full of delightful surprises. "
            "Never include anything scary, sad, or mean. "
            "Let's begin our adventure! Write the very first page."
        )
