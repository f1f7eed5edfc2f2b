"""
Tests for project audio: narration synthesis and generated music.
"""

import json
from pathlib import Path
from uuid import uuid4

import httpx
import pytest

from studio.config import settings
from studio.crud.project import project_crud
from studio.exceptions import GenerationError, NotFoundError, ValidationError
from studio.models import MusicSource, NarrationSource
import studio.services.tts_service as tts_module
from studio.services.audio_service import AudioService
from studio.services.music_service import MUSIC_STYLES, MusicService, resolve_music_prompt
from studio.services.tts_service import TTSService, sanitize_text_for_tts
from tests.factories import make_project
from tests.fakes import FakeStorage


class FakeCommunicate:
    spoken = []

    def __init__(self, text, voice, rate="+0%", pitch="+0Hz"):
        self.text = text
        self.voice = voice
        FakeCommunicate.spoken.append((text, voice))

    async def stream(self):
        yield {"type": "WordBoundary", "offset": 0}
        yield {"type": "audio", "data": b"\xff\xfb" * 100}


@pytest.fixture(autouse=True)
def fake_edge_tts(monkeypatch):
    FakeCommunicate.spoken = []
    monkeypatch.setattr(tts_module.edge_tts, "Communicate", FakeCommunicate)


def test_sanitize_strips_emoji_and_spells_ampersands():
    assert sanitize_text_for_tts("Fire 🔥 &  brimstone\n\n") == "Fire and brimstone"
    assert sanitize_text_for_tts("") == ""


@pytest.mark.asyncio
async def test_narration_written_locally_without_storage():
    project_id = uuid4()

    url = await TTSService(storage=FakeStorage()).generate_narration(project_id, "In the beginning")

    assert url.startswith(f"/static/audio/{project_id}/narration_")
    path = Path(settings.static_dir) / url.removeprefix("/static/")
    assert path.read_bytes() == b"\xff\xfb" * 100
    assert FakeCommunicate.spoken == [("In the beginning", settings.tts_default_voice)]


@pytest.mark.asyncio
async def test_narration_stored_in_bucket_when_configured():
    storage = FakeStorage(configured=True)
    project_id = uuid4()

    url = await TTSService(storage=storage).generate_narration(project_id, "Let there be light", "en-GB-RyanNeural")

    (key,) = storage.objects
    assert url == f"s3://test-bucket/{key}"
    assert key.startswith(f"projects/{project_id}/audio/")
    assert storage.objects[key][1] == "audio/mpeg"


@pytest.mark.asyncio
async def test_empty_narration_text_is_rejected():
    with pytest.raises(ValueError):
        await TTSService(storage=FakeStorage()).synthesize("🔥🔥")


@pytest.mark.asyncio
async def test_set_audio_upserts_tracks(session):
    project = await make_project(session)
    service = AudioService(tts=TTSService(storage=FakeStorage()))

    await service.set_audio(session, project.id, narration_url="https://cdn.test/n.mp3")
    audio = await service.set_audio(
        session, project.id, music_url="https://cdn.test/m.mp3", music_source=MusicSource.GENERATED
    )

    assert audio.narration_url == "https://cdn.test/n.mp3"
    assert audio.narration_source == NarrationSource.UPLOAD
    assert audio.music_source == MusicSource.GENERATED


@pytest.mark.asyncio
async def test_set_audio_requires_a_track(session):
    project = await make_project(session)

    with pytest.raises(ValidationError):
        await AudioService().set_audio(session, project.id)
    with pytest.raises(NotFoundError):
        await AudioService().set_audio(session, uuid4(), narration_url="https://cdn.test/n.mp3")


@pytest.mark.asyncio
async def test_generated_narration_is_attached_as_tts(session):
    project = await make_project(session)
    service = AudioService(tts=TTSService(storage=FakeStorage()))

    audio = await service.generate_narration(session, project.id, "And God said")

    assert audio.narration_source == NarrationSource.TTS
    assert audio.narration_url.startswith("/static/audio/")


# ============================================================================
# Music
# ============================================================================


class SoundGenerationStub:
    def __init__(self, response=None):
        self.response = response or httpx.Response(200, content=b"ID3" + b"\x00" * 200)
        self.requests = []

    def handler(self, request):
        self.requests.append(request)
        return self.response

    def service(self, storage):
        return MusicService(
            api_key="xi-key",
            base_url="https://elevenlabs.test/v1",
            storage=storage,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.mark.asyncio
async def test_generated_music_from_style_is_stored_and_attached(session):
    project = await make_project(session)
    storage = FakeStorage(configured=True)
    stub = SoundGenerationStub()
    service = AudioService(tts=TTSService(storage=storage), music=stub.service(storage))

    audio = await service.generate_music(session, project.id, style="epic_battle", duration=20)

    (request,) = stub.requests
    assert str(request.url) == "https://elevenlabs.test/v1/sound-generation"
    assert request.headers["xi-api-key"] == "xi-key"
    assert json.loads(request.content) == {
        "text": MUSIC_STYLES["EPIC_BATTLE"],
        "duration_seconds": 20,
    }
    (key,) = storage.objects
    assert key.startswith(f"projects/{project.id}/audio/music_") and key.endswith(".mp3")
    assert storage.objects[key][1] == "audio/mpeg"
    assert audio.music_url == f"s3://test-bucket/{key}"
    assert audio.music_source == MusicSource.GENERATED


@pytest.mark.asyncio
async def test_custom_music_prompt_wins_over_style(session):
    project = await make_project(session)
    stub = SoundGenerationStub()
    service = AudioService(music=stub.service(FakeStorage()))

    audio = await service.generate_music(
        session, project.id, style="AMBIENT_TENSION", prompt="desert wind and a lone oud"
    )

    body = json.loads(stub.requests[0].content)
    assert body == {"text": "desert wind and a lone oud", "duration_seconds": settings.music_default_duration}
    assert audio.music_url.startswith(f"/static/audio/{project.id}/music_")


@pytest.mark.asyncio
async def test_music_provider_error_is_a_generation_error(session):
    project = await make_project(session)
    stub = SoundGenerationStub(httpx.Response(422, json={"detail": {"message": "duration too long"}}))
    service = AudioService(music=stub.service(FakeStorage()))

    with pytest.raises(GenerationError, match="duration too long"):
        await service.generate_music(session, project.id, style="CINEMATIC_ORCHESTRAL")
    assert await project_crud.get_audio(session, project.id) is None


@pytest.mark.asyncio
async def test_music_needs_a_style_or_prompt(session):
    project = await make_project(session)
    service = AudioService(music=SoundGenerationStub().service(FakeStorage()))

    with pytest.raises(ValidationError):
        await service.generate_music(session, project.id, style="  ")


def test_unknown_style_is_used_as_prompt():
    assert resolve_music_prompt(style="Peaceful_Meditative") == MUSIC_STYLES["PEACEFUL_MEDITATIVE"]
    assert resolve_music_prompt(style="low drones") == "low drones"
