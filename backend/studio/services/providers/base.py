"""
Shared contract for image-to-video providers.

Each provider speaks its own request fields and status vocabulary; adapters
translate both to the types below so the orchestrator never sees them.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from studio.exceptions import ProviderPollError, ProviderSubmitError
from studio.models.enums import MotionType, VideoProvider, VideoStatus
from studio.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class VideoJobRequest:
    """Normalized submit-video-job request."""
    image_url: str
    prompt: str
    motion_type: MotionType = MotionType.SUBTLE
    duration: int = 5


@dataclass
class VideoJobStatus:
    """Normalized poll-video-job result."""
    task_id: str
    status: VideoStatus
    video_url: Optional[str] = None
    error: Optional[str] = None
    progress: Optional[int] = None
    native_status: Optional[str] = None


class VideoProviderClient(ABC):
    """
    Adapter for one image-to-video back end.

    Subclasses supply the motion phrase table, the native status table and
    the two HTTP calls. Status lookup falls back to PENDING so a renamed or
    new provider state never surfaces as a failure.
    """

    provider: VideoProvider
    motion_phrases: Mapping[MotionType, str]
    status_map: Mapping[str, VideoStatus]

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _require_key(self, error_cls) -> None:
        if not self.api_key:
            raise error_cls(self.provider.value, f"{self.provider.value} API key is not configured")

    # --- prompts ---

    def motion_phrase(self, motion_type: MotionType) -> str:
        return self.motion_phrases.get(motion_type, self.motion_phrases[MotionType.SUBTLE])

    def build_prompt(
        self,
        description: str,
        motion_type: MotionType,
        custom_prompt: Optional[str] = None,
    ) -> str:
        """Custom prompt verbatim, else '<description>, <motion phrase>'."""
        if custom_prompt:
            return custom_prompt
        return f"{description}, {self.motion_phrase(motion_type)}"

    # --- status ---

    def normalize_status_key(self, native: str) -> str:
        return native

    def map_status(self, native: Optional[str]) -> VideoStatus:
        if not native:
            return VideoStatus.PENDING
        return self.status_map.get(self.normalize_status_key(native), VideoStatus.PENDING)

    # --- HTTP ---

    async def submit(self, request: VideoJobRequest) -> str:
        """Start a job and return the provider task id."""
        self._require_key(ProviderSubmitError)
        payload = self.build_submit_payload(request)

        try:
            async with self._client() as client:
                response = await client.post(self.submit_path, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            message = self._error_message(e.response) or f"{self.provider.value} API error: {e.response.status_code}"
            logger.warning("Video submit rejected", provider=self.provider.value, status_code=e.response.status_code)
            raise ProviderSubmitError(self.provider.value, message) from e
        except httpx.HTTPError as e:
            raise ProviderSubmitError(self.provider.value, f"{self.provider.value} request failed: {e}") from e

        task_id = self.extract_task_id(data)
        if not task_id:
            raise ProviderSubmitError(self.provider.value, f"{self.provider.value} returned no task id")

        logger.info("Video job submitted", provider=self.provider.value, task_id=task_id)
        return task_id

    async def poll(self, task_id: str) -> VideoJobStatus:
        """Fetch the current state of a job; unreachable provider -> ProviderPollError."""
        self._require_key(ProviderPollError)

        try:
            async with self._client() as client:
                response = await client.get(self.status_path(task_id))
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderPollError(
                self.provider.value,
                f"{self.provider.value} status error: {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise ProviderPollError(self.provider.value, f"{self.provider.value} unreachable: {e}") from e

        return self.parse_status(task_id, data)

    def _error_message(self, response: httpx.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            for key in ("message", "error", "error_message"):
                if isinstance(body.get(key), str):
                    return body[key]
        return None

    # --- provider specifics ---

    submit_path: str

    @abstractmethod
    def status_path(self, task_id: str) -> str:
        ...

    @abstractmethod
    def build_submit_payload(self, request: VideoJobRequest) -> Dict[str, Any]:
        ...

    @abstractmethod
    def extract_task_id(self, data: Dict[str, Any]) -> Optional[str]:
        ...

    @abstractmethod
    def parse_status(self, task_id: str, data: Dict[str, Any]) -> VideoJobStatus:
        ...
