"""
Runway Gen-3 image-to-video adapter (secondary provider).
"""
import random
from typing import Any, Dict, Optional

from studio.models.enums import MotionType, VideoProvider, VideoStatus
from studio.services.providers.base import (
    VideoJobRequest,
    VideoJobStatus,
    VideoProviderClient,
)

# Kept in the same key order as the Minimax table.
RUNWAY_MOTION_PHRASES = {
    MotionType.SUBTLE: "very subtle ambient movement, gentle atmospheric motion, cinematic stillness with minimal movement",
    MotionType.PAN_LEFT: "camera panning smoothly to the left, cinematic pan shot, horizontal camera movement",
    MotionType.PAN_RIGHT: "camera panning smoothly to the right, cinematic pan shot, horizontal camera movement",
    MotionType.ZOOM_IN: "camera slowly zooming in, dramatic zoom focus, cinematic zoom movement toward subject",
    MotionType.ZOOM_OUT: "camera slowly zooming out, revealing wider scene, epic pullback shot",
    MotionType.PUSH_IN: "camera pushing forward dramatically, dolly in movement, approaching subject",
    MotionType.HAND_HELD: "subtle handheld camera movement, organic motion, documentary style camera shake",
    MotionType.CUSTOM: "cinematic camera movement",
}

RUNWAY_STATUS_MAP = {
    "PENDING": VideoStatus.PENDING,
    "THROTTLED": VideoStatus.PROCESSING,
    "RUNNING": VideoStatus.PROCESSING,
    "SUCCEEDED": VideoStatus.COMPLETED,
    "FAILED": VideoStatus.FAILED,
    "CANCELLED": VideoStatus.FAILED,
}


class RunwayClient(VideoProviderClient):
    provider = VideoProvider.RUNWAY
    motion_phrases = RUNWAY_MOTION_PHRASES
    status_map = RUNWAY_STATUS_MAP
    submit_path = "/image_to_video"

    def __init__(
        self,
        *args,
        model: str = "gen3a_turbo",
        api_version: str = "2024-09-13",
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.model = model
        self.api_version = api_version

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["X-Runway-Version"] = self.api_version
        return headers

    def normalize_status_key(self, native: str) -> str:
        return native.strip().upper()

    def status_path(self, task_id: str) -> str:
        return f"/tasks/{task_id}"

    def build_submit_payload(self, request: VideoJobRequest) -> Dict[str, Any]:
        return {
            "model": self.model,
            "promptImage": request.image_url,
            "promptText": request.prompt,
            "duration": request.duration,
            "watermark": False,
            "seed": random.randint(0, 999_999),
        }

    def extract_task_id(self, data: Dict[str, Any]) -> Optional[str]:
        task_id = data.get("id")
        return str(task_id) if task_id else None

    def parse_status(self, task_id: str, data: Dict[str, Any]) -> VideoJobStatus:
        native = data.get("status")
        output = data.get("output") or []
        artifacts = data.get("artifacts") or []
        video_url = output[0] if output else None
        if not video_url and artifacts:
            video_url = artifacts[0].get("url")

        progress = data.get("progress")
        return VideoJobStatus(
            task_id=task_id,
            status=self.map_status(native),
            video_url=video_url,
            error=data.get("failure") or data.get("failureCode"),
            progress=round(progress * 100) if progress is not None else None,
            native_status=native,
        )
