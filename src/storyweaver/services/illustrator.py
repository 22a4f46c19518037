"""Page illustrations through the Imagen image model."""

import base64
import logging

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


class Illustrator:
    """Draws one square storybook illustration per page."""

    def __init__(self, client: genai.Client, model: str = "imagen-4.0-generate-001"):
        self.client = client
        self.model = model
        self.mime_type = "image/jpeg"

    async def generate_image(self, text: str) -> str:
        """Illustrate *text* and return the image as a data URI."""
        response = await self.client.aio.models.generate_images(
            model=self.model,
            prompt=self._build_prompt(text),
            config=types.GenerateImagesConfig(
                number_of_images=1,
                aspect_ratio="1:1",
                output_mime_type=self.mime_type,
            ),
        )

        if not response.generated_images or not response.generated_images[0].image:
            raise RuntimeError("No image generated - response contained no images")
        image_bytes = response.generated_images[0].image.image_bytes
        if not image_bytes:
            raise RuntimeError("No image generated - image had no bytes")

        logger.debug(f"Illustration generated: {len(image_bytes)} bytes")
        return f"data:{self.mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"

    @staticmethod
    def _build_prompt(text: str) -> str:
        return (
            f"A vibrant, whimsical, and colorful children's book illustration of: {text}. "
            "Style: storybook, enchanting, friendly characters."
        )
