"""Story session API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from storyweaver.api.settings import Settings, get_settings
from storyweaver.infrastructure.audio import to_wav
from storyweaver.infrastructure.tts import TTSProvider
from storyweaver.infrastructure.voice_utils import get_voices, resolve_voice
from storyweaver.models import StartStoryRequest, StoryStateResponse, VoiceResponse
from storyweaver.services.navigation import NavigationController
from storyweaver.services.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Story"])


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_tts_provider(request: Request) -> TTSProvider:
    return request.app.state.tts_provider


def _get_controller(session_id: str, store: SessionStore) -> NavigationController:
    """Return the controller for *session_id* or raise HTTPException."""
    controller = store.get(session_id)
    if controller is None:
        logger.info("Session %s not found", session_id)
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return controller


@router.get("/voices", response_model=list[VoiceResponse])
async def list_voices(
    provider: TTSProvider = Depends(get_tts_provider),
    settings: Settings = Depends(get_settings),
) -> list[VoiceResponse]:
    """List the narrator voices of the active TTS provider."""
    default = settings.default_voice or provider.default_voice
    return [
        VoiceResponse(id=v.id, name=v.name, description=v.description, is_default=v.id == default)
        for v in get_voices(provider)
    ]


@router.post("/sessions", response_model=StoryStateResponse, status_code=201)
async def create_session(store: SessionStore = Depends(get_session_store)) -> StoryStateResponse:
    """Create an empty story session."""
    return store.create().session.to_response()


@router.get("/sessions/{session_id}", response_model=StoryStateResponse)
async def get_session(
    session_id: str, store: SessionStore = Depends(get_session_store)
) -> StoryStateResponse:
    return _get_controller(session_id, store).session.to_response()


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    """Stop playback and discard the session."""
    if not store.remove(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return Response(status_code=204)


@router.post("/sessions/{session_id}/story", response_model=StoryStateResponse)
async def start_story(
    session_id: str,
    request: StartStoryRequest,
    store: SessionStore = Depends(get_session_store),
    provider: TTSProvider = Depends(get_tts_provider),
    settings: Settings = Depends(get_settings),
) -> StoryStateResponse:
    """Start a new story and generate its first page."""
    controller = _get_controller(session_id, store)
    try:
        voice = resolve_voice(provider, request.voice or settings.default_voice)
        await controller.begin_story(request.premise, voice)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return controller.session.to_response()


@router.post("/sessions/{session_id}/next", response_model=StoryStateResponse)
async def next_page(session_id: str, store: SessionStore = Depends(get_session_store)) -> StoryStateResponse:
    """Go to the next page, writing a new one at the end of the story."""
    controller = _get_controller(session_id, store)
    await controller.go_to_next()
    return controller.session.to_response()


@router.post("/sessions/{session_id}/prev", response_model=StoryStateResponse)
async def prev_page(session_id: str, store: SessionStore = Depends(get_session_store)) -> StoryStateResponse:
    controller = _get_controller(session_id, store)
    controller.go_to_prev()
    return controller.session.to_response()


@router.post("/sessions/{session_id}/replay", response_model=StoryStateResponse)
async def replay(session_id: str, store: SessionStore = Depends(get_session_store)) -> StoryStateResponse:
    """Read the current page aloud again."""
    controller = _get_controller(session_id, store)
    controller.replay()
    return controller.session.to_response()


@router.delete("/sessions/{session_id}/error", response_model=StoryStateResponse)
async def dismiss_error(
    session_id: str, store: SessionStore = Depends(get_session_store)
) -> StoryStateResponse:
    controller = _get_controller(session_id, store)
    controller.dismiss_error()
    return controller.session.to_response()


@router.get("/sessions/{session_id}/pages/{page_id}/audio")
async def get_page_audio(
    session_id: str, page_id: str, store: SessionStore = Depends(get_session_store)
) -> Response:
    """Download the narration of a page as WAV."""
    controller = _get_controller(session_id, store)
    page = controller.session.find_page(page_id)
    if page is None:
        raise HTTPException(status_code=404, detail=f"Page {page_id} not found")
    if page.audio is None:
        raise HTTPException(status_code=404, detail="No narration available for this page")
    return Response(content=to_wav(page.audio), media_type="audio/wav")
