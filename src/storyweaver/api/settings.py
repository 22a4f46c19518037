import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables or `.env` file."""

    env: Literal["dev", "docker", "production"] = Field(
        default="dev",
        description="Runtime environment: dev (local), docker (docker-compose), or production",
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Credentials - the Google key is required at startup
    google_api_key: str = Field(..., description="Google AI API key")
    openai_api_key: str | None = None

    # Models
    text_model: str = Field(default="gemini-2.5-flash", description="Chat model for story text")
    image_model: str = Field(default="imagen-4.0-generate-001", description="Illustration model")
    tts_model: str = Field(default="gemini-2.5-flash-preview-tts", description="Gemini TTS model")

    # Narration
    tts_provider: Literal["gemini", "openai"] = Field(default="gemini", description="TTS provider")
    default_voice: str | None = Field(
        default=None, description="Default narrator voice (provider default when unset)"
    )
    audio_output: Literal["sounddevice", "none"] = Field(
        default="sounddevice",
        description="Where narration is played; 'none' disables narration entirely",
    )
    audio_device: str | None = Field(default=None, description="Output device name or index")

    max_sessions: int = Field(default=100, ge=1, description="Live sessions kept in memory")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("google_api_key", mode="after")
    @classmethod
    def require_google_api_key(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("GOOGLE_API_KEY must not be empty")
        return v


@lru_cache
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached instance of Settings."""
    s = Settings()
    logging.basicConfig(level=s.log_level)
    logger = logging.getLogger(__name__)

    # Log environment information
    logger.info("=" * 60)
    logger.info(f"Starting Story Weaver in {s.env.upper()} environment")
    logger.info("=" * 60)
    logger.info(f"Text model: {s.text_model}")
    logger.info(f"Image model: {s.image_model}")
    logger.info(f"TTS Provider: {s.tts_provider}")
    logger.info(f"Audio output: {s.audio_output}")
    logger.info("=" * 60)

    if s.tts_provider == "openai" and not s.openai_api_key:
        logger.warning("TTS_PROVIDER=openai but OPENAI_API_KEY is not set!")

    return s
