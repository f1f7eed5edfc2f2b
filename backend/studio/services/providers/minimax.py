"""
Minimax image-to-video adapter (primary provider).
"""
from typing import Any, Dict, Optional

from studio.models.enums import MotionType, VideoProvider, VideoStatus
from studio.services.providers.base import (
    VideoJobRequest,
    VideoJobStatus,
    VideoProviderClient,
)

MINIMAX_MOTION_PHRASES = {
    MotionType.SUBTLE: "very subtle movement, barely perceptible motion, cinematic stillness",
    MotionType.PAN_LEFT: "smooth pan left camera movement, cinematic pan",
    MotionType.PAN_RIGHT: "smooth pan right camera movement, cinematic pan",
    MotionType.ZOOM_IN: "slow zoom in, dramatic focus, cinematic zoom",
    MotionType.ZOOM_OUT: "slow zoom out, revealing epic scale, cinematic pullback",
    MotionType.PUSH_IN: "dramatic push in, dolly forward, cinematic approach",
    MotionType.HAND_HELD: "subtle handheld movement, organic camera shake, documentary feel",
    MotionType.CUSTOM: "cinematic camera movement",
}

MINIMAX_MOTION_STRENGTH = {
    MotionType.SUBTLE: 0.2,
    MotionType.PAN_LEFT: 0.5,
    MotionType.PAN_RIGHT: 0.5,
    MotionType.ZOOM_IN: 0.4,
    MotionType.ZOOM_OUT: 0.4,
    MotionType.PUSH_IN: 0.5,
    MotionType.HAND_HELD: 0.3,
    MotionType.CUSTOM: 0.4,
}

# Keys are lower-cased; Minimax has reported both "Success" and "success".
MINIMAX_STATUS_MAP = {
    "queueing": VideoStatus.PENDING,
    "queued": VideoStatus.PENDING,
    "preparing": VideoStatus.PENDING,
    "pending": VideoStatus.PENDING,
    "processing": VideoStatus.PROCESSING,
    "running": VideoStatus.PROCESSING,
    "success": VideoStatus.COMPLETED,
    "completed": VideoStatus.COMPLETED,
    "fail": VideoStatus.FAILED,
    "failed": VideoStatus.FAILED,
    "error": VideoStatus.FAILED,
}


class MinimaxClient(VideoProviderClient):
    provider = VideoProvider.MINIMAX
    motion_phrases = MINIMAX_MOTION_PHRASES
    status_map = MINIMAX_STATUS_MAP
    submit_path = "/video/generate"

    def __init__(self, *args, model: str = "video-01", **kwargs):
        super().__init__(*args, **kwargs)
        self.model = model

    def motion_strength(self, motion_type: MotionType) -> float:
        return MINIMAX_MOTION_STRENGTH.get(motion_type, MINIMAX_MOTION_STRENGTH[MotionType.SUBTLE])

    def normalize_status_key(self, native: str) -> str:
        return native.strip().lower()

    def status_path(self, task_id: str) -> str:
        return f"/video/status/{task_id}"

    def build_submit_payload(self, request: VideoJobRequest) -> Dict[str, Any]:
        return {
            "model": self.model,
            "image_url": request.image_url,
            "prompt": request.prompt,
            "motion_strength": self.motion_strength(request.motion_type),
        }

    def extract_task_id(self, data: Dict[str, Any]) -> Optional[str]:
        task_id = data.get("task_id") or data.get("id")
        return str(task_id) if task_id else None

    def parse_status(self, task_id: str, data: Dict[str, Any]) -> VideoJobStatus:
        native = data.get("status")
        return VideoJobStatus(
            task_id=task_id,
            status=self.map_status(native),
            video_url=data.get("video_url") or data.get("output_url"),
            error=data.get("error_message"),
            native_status=native,
        )
