"""
Tests for the image-to-video provider adapters.

Provider HTTP is served by httpx.MockTransport.
"""

import json

import httpx
import pytest

from studio.exceptions import ProviderPollError, ProviderSubmitError
from studio.models import MotionType, VideoProvider, VideoStatus
from studio.services.providers.base import VideoJobRequest
from studio.services.providers.minimax import MINIMAX_MOTION_PHRASES, MinimaxClient
from studio.services.providers.registry import get_video_provider
from studio.services.providers.runway import RUNWAY_MOTION_PHRASES, RunwayClient


def minimax(handler, api_key="key"):
    return MinimaxClient(
        api_key, "https://minimax.test/v1", transport=httpx.MockTransport(handler)
    )


def runway(handler, api_key="key"):
    return RunwayClient(
        api_key, "https://runway.test/v1", transport=httpx.MockTransport(handler)
    )


def status_handler(body):
    def handler(request):
        return httpx.Response(200, json=body)
    return handler


# ============================================================================
# Status mapping
# ============================================================================


@pytest.mark.parametrize(
    "native,expected",
    [
        ("Queueing", VideoStatus.PENDING),
        ("Preparing", VideoStatus.PENDING),
        ("Processing", VideoStatus.PROCESSING),
        ("processing", VideoStatus.PROCESSING),
        ("Success", VideoStatus.COMPLETED),
        ("completed", VideoStatus.COMPLETED),
        ("Fail", VideoStatus.FAILED),
        ("error", VideoStatus.FAILED),
    ],
)
def test_minimax_status_mapping(native, expected):
    assert minimax(status_handler({})).map_status(native) == expected


@pytest.mark.parametrize(
    "native,expected",
    [
        ("PENDING", VideoStatus.PENDING),
        ("THROTTLED", VideoStatus.PROCESSING),
        ("RUNNING", VideoStatus.PROCESSING),
        ("SUCCEEDED", VideoStatus.COMPLETED),
        ("FAILED", VideoStatus.FAILED),
        ("CANCELLED", VideoStatus.FAILED),
    ],
)
def test_runway_status_mapping(native, expected):
    assert runway(status_handler({})).map_status(native) == expected


@pytest.mark.parametrize("native", ["Rendering", "SOMETHING_NEW", "", None])
def test_unknown_status_maps_to_pending(native):
    assert minimax(status_handler({})).map_status(native) == VideoStatus.PENDING
    assert runway(status_handler({})).map_status(native) == VideoStatus.PENDING


@pytest.mark.asyncio
async def test_repeated_polls_do_not_flap():
    client = minimax(status_handler({"status": "Processing"}))

    first = await client.poll("t1")
    second = await client.poll("t1")

    assert first.status == second.status == VideoStatus.PROCESSING


# ============================================================================
# Prompts
# ============================================================================


def test_build_prompt_appends_provider_motion_phrase():
    client = minimax(status_handler({}))
    prompt = client.build_prompt("A storm over the sea", MotionType.SUBTLE)
    assert prompt == f"A storm over the sea, {MINIMAX_MOTION_PHRASES[MotionType.SUBTLE]}"


def test_motion_phrases_differ_between_providers():
    assert (
        minimax(status_handler({})).motion_phrase(MotionType.ZOOM_IN)
        != runway(status_handler({})).motion_phrase(MotionType.ZOOM_IN)
    )
    assert runway(status_handler({})).motion_phrase(MotionType.ZOOM_IN) == RUNWAY_MOTION_PHRASES[MotionType.ZOOM_IN]


def test_custom_prompt_is_used_verbatim():
    client = runway(status_handler({}))
    assert client.build_prompt("ignored", MotionType.PAN_LEFT, "my own prompt") == "my own prompt"


# ============================================================================
# Submit
# ============================================================================


@pytest.mark.asyncio
async def test_minimax_submit_sends_normalized_request():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"task_id": "t1"})

    task_id = await minimax(handler).submit(
        VideoJobRequest(
            image_url="https://images.example.com/a.png",
            prompt="a prompt",
            motion_type=MotionType.SUBTLE,
        )
    )

    assert task_id == "t1"
    assert seen["path"] == "/v1/video/generate"
    assert seen["auth"] == "Bearer key"
    assert seen["body"]["image_url"] == "https://images.example.com/a.png"
    assert seen["body"]["motion_strength"] == 0.2


@pytest.mark.asyncio
async def test_runway_submit_uses_its_own_field_names():
    seen = {}

    def handler(request):
        seen["version"] = request.headers["X-Runway-Version"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "rw-42"})

    task_id = await runway(handler).submit(
        VideoJobRequest(image_url="https://images.example.com/a.png", prompt="p", duration=5)
    )

    assert task_id == "rw-42"
    assert seen["version"] == "2024-09-13"
    assert seen["body"]["promptImage"] == "https://images.example.com/a.png"
    assert seen["body"]["promptText"] == "p"
    assert seen["body"]["duration"] == 5


@pytest.mark.asyncio
async def test_submit_rejection_raises_with_provider_message():
    def handler(request):
        return httpx.Response(422, json={"message": "image too small"})

    with pytest.raises(ProviderSubmitError, match="image too small"):
        await minimax(handler).submit(VideoJobRequest(image_url="u", prompt="p"))


@pytest.mark.asyncio
async def test_submit_without_task_id_raises():
    with pytest.raises(ProviderSubmitError):
        await minimax(status_handler({"ok": True})).submit(
            VideoJobRequest(image_url="u", prompt="p")
        )


@pytest.mark.asyncio
async def test_submit_without_api_key_raises():
    with pytest.raises(ProviderSubmitError):
        await minimax(status_handler({"task_id": "t1"}), api_key="").submit(
            VideoJobRequest(image_url="u", prompt="p")
        )


# ============================================================================
# Poll
# ============================================================================


@pytest.mark.asyncio
async def test_minimax_poll_success_returns_media_url():
    client = minimax(status_handler({"status": "Success", "video_url": "https://cdn.test/v.mp4"}))

    job = await client.poll("t1")

    assert job.status == VideoStatus.COMPLETED
    assert job.video_url == "https://cdn.test/v.mp4"
    assert job.native_status == "Success"


@pytest.mark.asyncio
async def test_runway_poll_reads_output_and_failure():
    done = await runway(status_handler({"status": "SUCCEEDED", "output": ["https://cdn.test/r.mp4"]})).poll("x")
    failed = await runway(status_handler({"status": "FAILED", "failure": "content policy"})).poll("x")
    running = await runway(status_handler({"status": "RUNNING", "progress": 0.42})).poll("x")

    assert done.video_url == "https://cdn.test/r.mp4"
    assert failed.status == VideoStatus.FAILED
    assert failed.error == "content policy"
    assert running.progress == 42


@pytest.mark.asyncio
async def test_poll_transport_error_is_a_poll_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderPollError):
        await minimax(handler).poll("t1")


@pytest.mark.asyncio
async def test_poll_server_error_is_a_poll_error_not_a_failure():
    def handler(request):
        return httpx.Response(503)

    with pytest.raises(ProviderPollError):
        await runway(handler).poll("t1")


def test_registry_builds_and_caches_clients_per_provider():
    minimax_client = get_video_provider(VideoProvider.MINIMAX)

    assert isinstance(minimax_client, MinimaxClient)
    assert isinstance(get_video_provider("RUNWAY"), RunwayClient)
    assert get_video_provider(VideoProvider.MINIMAX) is minimax_client
