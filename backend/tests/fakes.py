"""
In-memory stand-ins for external collaborators.
"""

from typing import Dict, Iterable, List, Optional, Tuple

import httpx

from studio.exceptions import ValidationError
from studio.models import AspectRatio, ParsedScript
from studio.services.image_service import GeneratedImage
from studio.services.storage_service import StorageService


class FakeImageService:
    """Image provider whose Nth call fails when N is in `failures`."""

    def __init__(self, failures: Iterable[int] = ()):
        self.failures = set(failures)
        self.prompts: List[str] = []

    async def generate(
        self, prompt: str, aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE
    ) -> GeneratedImage:
        call = len(self.prompts)
        self.prompts.append(prompt)
        if call in self.failures:
            raise RuntimeError(f"image provider failed on call {call}")
        return GeneratedImage(url=f"https://images.example.com/{call}.png", model="fake-image")


class FakeStorage(StorageService):
    """
    Bucket kept in a dict; downloads go through an httpx MockTransport.
    """

    def __init__(self, configured: bool = False, download_status: int = 200):
        super().__init__(bucket="test-bucket", transport=httpx.MockTransport(self._handle))
        self.configured = configured
        self.download_status = download_status
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.downloads: List[str] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.downloads.append(str(request.url))
        if self.download_status != 200:
            return httpx.Response(self.download_status)
        return httpx.Response(
            200, content=b"media-bytes", headers={"content-type": "application/octet-stream"}
        )

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        self.objects[key] = (data, content_type)
        return f"s3://{self.bucket}/{key}"

    async def get(self, key: str) -> Tuple[bytes, str]:
        return self.objects[key]

    async def delete(self, key: str) -> None:
        self.objects.pop(key, None)

    async def presigned_url(self, key: str, expires_in: Optional[int] = None) -> str:
        return f"https://signed.example.com/{key}"


class FakeScriptParser:
    def __init__(self, script: Optional[dict] = None):
        self.script = script or {"scenes": []}
        self.calls: List[str] = []

    async def parse(self, raw_text: str) -> ParsedScript:
        self.calls.append(raw_text)
        parsed = ParsedScript.model_validate(self.script)
        if not parsed.scenes:
            raise ValidationError("Script parser found no scenes")
        return parsed
