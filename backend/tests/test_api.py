"""
End-to-end tests through the HTTP layer.
"""

import xml.etree.ElementTree as ET
from uuid import uuid4

import httpx
import pytest

from studio.database import get_session
from studio.main import app
from studio.services.audio_service import audio_service
from studio.services.image_generation_service import image_generation_service
from studio.services.music_service import MusicService
from studio.services.providers.minimax import MinimaxClient
from studio.services.script_service import script_service
from studio.services.video_generation_service import video_generation_service
from tests.fakes import FakeImageService, FakeScriptParser

API = "/api/v1"

SCRIPT = {
    "scenes": [
        {
            "title": "The Red Sea",
            "location": "Shoreline",
            "shots": [
                {"description": "Waves pulled apart into walls", "cameraMovement": "PUSH_IN", "mood": "DIVINE", "duration": 4},
                {"description": "Crowd walking the dry seabed", "duration": 2.5},
            ],
        }
    ]
}


def minimax_handler(request):
    if request.method == "POST":
        return httpx.Response(200, json={"task_id": "task-42"})
    return httpx.Response(200, json={"status": "Processing"})


@pytest.fixture
async def client(session_maker, monkeypatch, image_client, storage):
    async def override_session():
        async with session_maker() as session:
            yield session

    minimax = MinimaxClient(
        "key", "https://minimax.test/v1", transport=httpx.MockTransport(minimax_handler)
    )
    monkeypatch.setattr(image_generation_service, "images", image_client)
    monkeypatch.setattr(image_generation_service, "storage", storage)
    monkeypatch.setattr(video_generation_service, "_providers", lambda provider: minimax)
    monkeypatch.setattr(video_generation_service, "storage", storage)
    monkeypatch.setattr(script_service, "parser", FakeScriptParser(SCRIPT))

    app.dependency_overrides[get_session] = override_session
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()


async def create_project_with_shots(client, title="Exodus"):
    response = await client.post(f"{API}/projects", json={"title": title})
    assert response.status_code == 201
    project = response.json()

    response = await client.post(
        f"{API}/projects/{project['id']}/script", json={"script_text": "EXT. SHORELINE - DAWN"}
    )
    assert response.status_code == 200

    response = await client.get(f"{API}/projects/{project['id']}/shots")
    return project, response.json()


# ============================================================================
# Projects and shots
# ============================================================================


@pytest.mark.asyncio
async def test_project_lifecycle(client):
    project, shots = await create_project_with_shots(client)

    assert [s["shot_index"] for s in shots] == [0, 1]

    detail = (await client.get(f"{API}/projects/{project['id']}")).json()
    assert detail["status"] == "IN_PROGRESS"
    assert [s["title"] for s in detail["scenes"]] == ["The Red Sea"]

    listing = (await client.get(f"{API}/projects", params={"status": "IN_PROGRESS"})).json()
    assert listing["total"] == 1

    response = await client.delete(f"{API}/projects/{project['id']}")
    assert response.status_code == 204
    assert (await client.get(f"{API}/projects/{project['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_shot_update_validation_is_a_bad_request(client):
    _, shots = await create_project_with_shots(client)

    response = await client.patch(f"{API}/shots/{shots[0]['id']}", json={"duration": 90})

    assert response.status_code in (400, 422)


@pytest.mark.asyncio
async def test_unknown_shot_is_404(client):
    response = await client.get(f"{API}/shots/{uuid4()}")

    assert response.status_code == 404


# ============================================================================
# Generation flow
# ============================================================================


@pytest.mark.asyncio
async def test_generate_select_animate_and_export(client):
    project, shots = await create_project_with_shots(client, title="Red Sea & Beyond")
    shot_id = shots[0]["id"]

    batch = (await client.post(f"{API}/images/generate", json={"shot_id": shot_id})).json()
    assert batch["generated"] == 2
    assert [i["selected"] for i in batch["images"]].count(True) == 1

    chosen = next(i for i in batch["images"] if not i["selected"])
    response = await client.post(
        f"{API}/images/select", json={"shot_id": shot_id, "image_id": chosen["id"]}
    )
    assert response.json()["selected"] is True

    video = (
        await client.post(
            f"{API}/videos/generate", json={"shot_id": shot_id, "image_id": chosen["id"]}
        )
    ).json()
    assert video["status"] == "PROCESSING"
    assert video["provider_task_id"] == "task-42"

    status = (await client.get(f"{API}/projects/{project['id']}/videos/status")).json()
    assert status["in_flight"] == 1

    done = (
        await client.post(
            f"{API}/videos/{video['id']}/status",
            json={"status": "COMPLETED", "video_url": "https://cdn.test/red-sea.mp4"},
        )
    ).json()
    assert done["status"] == "COMPLETED"
    assert done["selected"] is True

    response = await client.get(f"{API}/projects/{project['id']}/export/premiere")
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="Red_Sea___Beyond.xml"'
    root = ET.fromstring(response.content)
    clips = root.findall("./project/children/sequence/media/video/track/clipitem")
    assert [(c.findtext("start"), c.findtext("end")) for c in clips] == [("0", "120")]
    assert root.findtext("./project/children/sequence/duration") == "195"

    edl = (await client.get(f"{API}/projects/{project['id']}/export/edl")).text
    assert edl.startswith("TITLE: Red Sea & Beyond")


@pytest.mark.asyncio
async def test_failed_image_batch_is_bad_gateway(client, monkeypatch):
    _, shots = await create_project_with_shots(client)
    monkeypatch.setattr(image_generation_service, "images", FakeImageService(failures={0, 1}))

    response = await client.post(f"{API}/images/generate", json={"shot_id": shots[0]["id"]})

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_selecting_incomplete_video_is_rejected(client):
    _, shots = await create_project_with_shots(client)
    shot_id = shots[0]["id"]
    batch = (await client.post(f"{API}/images/generate", json={"shot_id": shot_id})).json()
    video = (
        await client.post(
            f"{API}/videos/generate",
            json={"shot_id": shot_id, "image_id": batch["images"][0]["id"]},
        )
    ).json()

    response = await client.post(
        f"{API}/videos/select", json={"shot_id": shot_id, "video_id": video["id"]}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_export_unknown_project_is_404(client):
    response = await client.get(f"{API}/projects/{uuid4()}/export/premiere")

    assert response.status_code == 404


# ============================================================================
# Misc
# ============================================================================


@pytest.mark.asyncio
async def test_health_reports_components(client):
    body = (await client.get(f"{API}/health")).json()

    assert body["status"] == "healthy"
    assert body["storage"] == "disabled"
    assert body["video_poller"] == "idle"


@pytest.mark.asyncio
async def test_media_proxy_requires_storage(client):
    response = await client.get(f"{API}/media/projects/p/images/a.png")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_generate_music_attaches_track(client, monkeypatch, storage):
    project, _ = await create_project_with_shots(client)
    music = MusicService(
        api_key="xi-key",
        base_url="https://elevenlabs.test/v1",
        storage=storage,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"ID3" * 50)),
    )
    monkeypatch.setattr(audio_service, "music", music)

    response = await client.post(
        f"{API}/projects/{project['id']}/audio/music", json={"style": "DRAMATIC_STRINGS", "duration": 15}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["music_source"] == "GENERATED"
    assert body["music_url"].startswith(f"/static/audio/{project['id']}/music_")
    styles = (await client.get(f"{API}/music/styles")).json()
    assert "CINEMATIC_ORCHESTRAL" in styles


@pytest.mark.asyncio
async def test_character_library_feeds_image_prompts(client, image_client):
    _, shots = await create_project_with_shots(client)

    response = await client.post(
        f"{API}/characters", json={"name": "Moses", "description": "white beard, wooden staff"}
    )
    assert response.status_code == 201
    character = response.json()
    variation_id = character["variations"][0]["id"]
    assert character["variations"][0]["label"] == "Adult"

    response = await client.post(
        f"{API}/characters/{character['id']}/variations",
        json={"type": "CUSTOM", "custom_label": "At the burning bush"},
    )
    assert response.status_code == 201
    assert response.json()["label"] == "At the burning bush"

    image = (
        await client.post(
            f"{API}/characters/variations/{variation_id}/images",
            json={"image_url": "https://refs.example.com/moses.png"},
        )
    ).json()
    assert image["is_primary"] is True

    await client.post(
        f"{API}/images/generate",
        json={"shot_id": shots[0]["id"], "count": 1, "character_variation_ids": [variation_id]},
    )
    assert "Moses: white beard, wooden staff" in image_client.prompts[0]

    listing = (await client.get(f"{API}/characters")).json()
    assert [c["name"] for c in listing] == ["Moses"]
    assert (await client.delete(f"{API}/characters/{character['id']}")).status_code == 204
    assert (await client.get(f"{API}/characters/{character['id']}")).status_code == 404
