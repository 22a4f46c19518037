import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from google import genai

from storyweaver.infrastructure.audio import AudioUnavailableError, SoundDeviceOutput
from storyweaver.services import (
    Illustrator,
    Narrator,
    SessionStore,
    StoryOrchestrator,
    Storyteller,
    build_provider,
)

from .middleware import LoggingMiddleware
from .settings import Settings, get_settings
from .story import router as story_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _parse_device(device: str | None) -> int | str | None:
    if device is None:
        return None
    return int(device) if device.isdigit() else device


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the model clients and acquire the audio output for the process lifetime."""
    s: Settings = app.state.settings
    client = genai.Client(api_key=s.google_api_key)
    provider = build_provider(
        s.tts_provider, client=client, model=s.tts_model, openai_api_key=s.openai_api_key
    )

    audio_output = None
    if s.audio_output == "sounddevice":
        try:
            audio_output = SoundDeviceOutput(_parse_device(s.audio_device)).open()
        except AudioUnavailableError as e:
            logger.error(f"Startup failed: {e}")
            raise

    orchestrator = StoryOrchestrator(
        storyteller=Storyteller(client, model=s.text_model),
        illustrator=Illustrator(client, model=s.image_model),
        narrator=Narrator(provider) if audio_output is not None else None,
    )
    app.state.tts_provider = provider
    app.state.session_store = SessionStore(orchestrator, audio_output, max_sessions=s.max_sessions)
    logger.info("Story Weaver ready.")

    try:
        yield
    finally:
        app.state.session_store.close()
        if audio_output is not None:
            audio_output.close()


app = FastAPI(title="Story Weaver API", version="0.1.0", lifespan=lifespan)
app.state.settings = settings
app.add_middleware(LoggingMiddleware)

# CORS middleware (allow all for now; adjust in prod)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(story_router)


@app.get("/api/health", tags=["Utility"])
async def health() -> dict[str, str]:
    """Return basic service health status."""
    return {"status": "ok"}
