"""Tests for the story session HTTP API."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from storyweaver.api import main, story
from storyweaver.api.main import app
from storyweaver.infrastructure.audio import AudioUnavailableError
from storyweaver.infrastructure.tts import GeminiProvider
from storyweaver.services.orchestrator import (
    AUDIO_FAILED,
    IMAGE_FAILED,
    STORYTELLER_FAILED,
    StoryOrchestrator,
)
from storyweaver.services.store import SessionStore

from conftest import FakeAudioOutput, FakeIllustrator, FakeNarrator, FakeStoryteller


@pytest.fixture
def fakes():
    return {
        "storyteller": FakeStoryteller(replies=["Page one text.", "Page two text."]),
        "illustrator": FakeIllustrator(),
        "narrator": FakeNarrator(),
        "output": FakeAudioOutput(),
    }


@pytest.fixture
def store(fakes):
    orchestrator = StoryOrchestrator(fakes["storyteller"], fakes["illustrator"], fakes["narrator"])
    return SessionStore(orchestrator, fakes["output"], max_sessions=3)


@pytest.fixture
def client(store):
    provider = GeminiProvider(client=None)
    app.dependency_overrides[story.get_session_store] = lambda: store
    app.dependency_overrides[story.get_tts_provider] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


def _new_session(client) -> str:
    resp = client.post("/api/v1/sessions")
    assert resp.status_code == 201
    return resp.json()["session_id"]


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_list_voices(client):
    resp = client.get("/api/v1/voices")
    assert resp.status_code == 200
    voices = resp.json()
    assert [v["id"] for v in voices] == ["Kore", "Puck", "Charon", "Fenrir", "Zephyr"]
    assert [v["id"] for v in voices if v["is_default"]] == ["Kore"]


def test_new_session_is_empty(client):
    session_id = _new_session(client)

    data = client.get(f"/api/v1/sessions/{session_id}").json()
    assert data["started"] is False
    assert data["pages"] == []
    assert data["can_go_next"] is False
    assert data["can_replay"] is False


def test_unknown_session(client):
    assert client.get("/api/v1/sessions/nope").status_code == 404
    assert client.post("/api/v1/sessions/nope/next").status_code == 404


def test_start_story(client, fakes):
    session_id = _new_session(client)

    resp = client.post(
        f"/api/v1/sessions/{session_id}/story",
        json={"premise": "a dragon who loves baking", "voice": "Kore"},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["started"] is True
    assert data["voice"] == "Kore"
    assert data["current_index"] == 0
    assert data["is_loading"] is False
    assert data["error_message"] is None
    [page] = data["pages"]
    assert page["text"] == "Page one text."
    assert page["image"].startswith("data:image/jpeg;base64,")
    assert page["has_audio"] is True
    assert page["audio_duration_seconds"] == pytest.approx(0.5)
    assert data["can_replay"] is True
    assert fakes["storyteller"].contexts == [{"premise": "a dragon who loves baking"}]


def test_start_story_uses_default_voice(client, fakes):
    session_id = _new_session(client)

    data = client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a sleepy owl"}).json()

    assert data["voice"] == "Kore"
    assert fakes["narrator"].requests[0][1] == "Kore"


@pytest.mark.parametrize("body", [{"premise": "   "}, {"premise": "a dragon", "voice": "Nobody"}])
def test_start_story_validation(client, body):
    session_id = _new_session(client)

    resp = client.post(f"/api/v1/sessions/{session_id}/story", json=body)

    assert resp.status_code == 400
    assert client.get(f"/api/v1/sessions/{session_id}").json()["started"] is False


def test_next_prev_and_replay(client, fakes):
    session_id = _new_session(client)
    client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a dragon"})

    data = client.post(f"/api/v1/sessions/{session_id}/next").json()
    assert data["current_index"] == 1
    assert [p["text"] for p in data["pages"]] == ["Page one text.", "Page two text."]

    data = client.post(f"/api/v1/sessions/{session_id}/prev").json()
    assert data["current_index"] == 0
    assert data["can_go_prev"] is False

    handles = len(fakes["output"].handles)
    data = client.post(f"/api/v1/sessions/{session_id}/replay").json()
    assert data["current_index"] == 0
    assert len(fakes["output"].handles) == handles + 1
    assert len(fakes["output"].active()) == 1


def test_enhancement_errors_are_reported_and_dismissed(client, fakes):
    fakes["illustrator"].fail = True
    fakes["narrator"].fail = True
    session_id = _new_session(client)

    data = client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a dragon"}).json()

    assert data["error_message"] == f"{IMAGE_FAILED} {AUDIO_FAILED}"
    assert data["pages"][0]["image"] is None
    assert data["pages"][0]["has_audio"] is False

    data = client.delete(f"/api/v1/sessions/{session_id}/error").json()
    assert data["error_message"] is None


def test_storyteller_failure_returns_to_premise_entry(client, fakes):
    fakes["storyteller"].fail = True
    session_id = _new_session(client)

    data = client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a dragon"}).json()

    assert data["started"] is False
    assert data["pages"] == []
    assert data["error_message"] == STORYTELLER_FAILED


def test_page_audio_download(client):
    session_id = _new_session(client)
    data = client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a dragon"}).json()
    page_id = data["pages"][0]["id"]

    resp = client.get(f"/api/v1/sessions/{session_id}/pages/{page_id}/audio")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "audio/wav"
    assert resp.content[:4] == b"RIFF"
    assert client.get(f"/api/v1/sessions/{session_id}/pages/missing/audio").status_code == 404


def test_page_audio_missing(client, fakes):
    fakes["narrator"].fail = True
    session_id = _new_session(client)
    data = client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a dragon"}).json()
    page_id = data["pages"][0]["id"]

    assert client.get(f"/api/v1/sessions/{session_id}/pages/{page_id}/audio").status_code == 404


def test_delete_session_stops_playback(client, fakes):
    session_id = _new_session(client)
    client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a dragon"})
    assert len(fakes["output"].active()) == 1

    assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 204

    assert fakes["output"].active() == []
    assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404


def test_oldest_session_is_evicted(client, store):
    first = _new_session(client)
    for _ in range(3):
        _new_session(client)

    assert len(store) == 3
    assert client.get(f"/api/v1/sessions/{first}").status_code == 404


def test_startup_fails_without_audio_device(monkeypatch):
    settings = main.settings.model_copy(update={"audio_output": "sounddevice"})
    monkeypatch.setattr(main.app.state, "settings", settings)

    with patch.object(main, "genai"), patch.object(
        main.SoundDeviceOutput, "open", side_effect=AudioUnavailableError("no output device")
    ):
        with pytest.raises(AudioUnavailableError):
            with TestClient(main.app):
                pass


def test_startup_with_audio_disabled_skips_narration(monkeypatch):
    settings = main.settings.model_copy(update={"audio_output": "none"})
    monkeypatch.setattr(main.app.state, "settings", settings)

    with patch.object(main, "genai"):
        with TestClient(main.app) as client:
            store = main.app.state.session_store
            assert client.get("/api/health").status_code == 200

    assert store.audio_output is None
    assert store.orchestrator.narrator is None


def test_navigation_after_storyteller_failure_is_ignored(client, fakes):
    session_id = _new_session(client)
    client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a dragon"})
    client.post(f"/api/v1/sessions/{session_id}/next")
    fakes["storyteller"].fail = True
    data = client.post(f"/api/v1/sessions/{session_id}/next").json()
    assert data["started"] is False
    assert data["can_go_prev"] is False
    assert data["can_replay"] is False
    handles = len(fakes["output"].handles)

    data = client.post(f"/api/v1/sessions/{session_id}/prev").json()

    assert data["current_index"] == 1
    assert len(fakes["output"].handles) == handles


def test_replay_survives_playback_failure(client, fakes):
    session_id = _new_session(client)
    client.post(f"/api/v1/sessions/{session_id}/story", json={"premise": "a dragon"})
    handle = fakes["output"].handles[-1]

    with patch.object(type(handle), "start", side_effect=RuntimeError("device busy")):
        resp = client.post(f"/api/v1/sessions/{session_id}/replay")

    assert resp.status_code == 200
    assert fakes["output"].active() == []
