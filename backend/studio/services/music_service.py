"""
Background music generation through the ElevenLabs sound-generation API.
"""
import time
from pathlib import Path
from typing import Dict, Optional
from uuid import UUID

import httpx

from studio.config import settings
from studio.exceptions import GenerationError
from studio.services.storage_service import StorageService, storage_service
from studio.utils.logging import get_logger

logger = get_logger(__name__)

# Preset prompts selectable by name
MUSIC_STYLES: Dict[str, str] = {
    "CINEMATIC_ORCHESTRAL": "epic orchestral soundtrack, biblical, cinematic, dramatic strings and brass",
    "AMBIENT_TENSION": "ambient tension, suspenseful, mysterious, dark atmospheric pads",
    "EPIC_BATTLE": "epic battle music, intense percussion, dramatic brass, war drums",
    "PEACEFUL_MEDITATIVE": "peaceful meditation music, soft piano, gentle strings, contemplative",
    "DRAMATIC_STRINGS": "dramatic string orchestra, emotional, sweeping violins, cinematic",
}


def resolve_music_prompt(style: Optional[str] = None, prompt: Optional[str] = None) -> str:
    """A custom prompt wins; a known style name expands to its preset."""
    text = (prompt or "").strip() or (style or "").strip()
    if not text:
        raise ValueError("Provide a music style or a prompt")
    return MUSIC_STYLES.get(text.upper(), text)


class MusicService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        storage: Optional[StorageService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.elevenlabs_api_key
        self.base_url = (base_url or settings.elevenlabs_api_base).rstrip("/")
        self.storage = storage or storage_service
        self.output_dir = Path(settings.static_dir) / "audio"
        self._transport = transport

    async def compose(self, prompt: str, duration: int) -> bytes:
        """Return MP3 bytes for a text prompt."""
        if not self.api_key:
            raise GenerationError("ElevenLabs API key is not configured")

        logger.debug("Generating music", prompt_preview=prompt[:50], duration=duration)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=settings.provider_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/sound-generation",
                    headers={"xi-api-key": self.api_key},
                    json={"text": prompt, "duration_seconds": duration},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GenerationError(
                self._error_message(e.response) or f"ElevenLabs API error: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"ElevenLabs request failed: {e}") from e

        if not response.content:
            raise GenerationError("ElevenLabs returned no audio")
        return response.content

    @staticmethod
    def _error_message(response: httpx.Response) -> Optional[str]:
        try:
            detail = response.json().get("detail")
        except ValueError:
            return None
        if isinstance(detail, dict):
            return detail.get("message")
        return detail if isinstance(detail, str) else None

    async def generate_music(self, project_id: UUID, prompt: str, duration: int) -> str:
        """
        Generate a music bed for a project and store it.

        Returns an s3:// reference when storage is configured, otherwise a
        /static URL under the local audio directory.
        """
        audio = await self.compose(prompt, duration)
        filename = f"music_{int(time.time() * 1000)}.mp3"

        if self.storage.is_configured:
            key = f"projects/{project_id}/audio/{filename}"
            return await self.storage.put(key, audio, "audio/mpeg")

        project_dir = self.output_dir / str(project_id)
        project_dir.mkdir(parents=True, exist_ok=True)
        output_path = project_dir / filename
        output_path.write_bytes(audio)

        logger.info("Music generated", project_id=str(project_id), size=len(audio))
        relative_path = output_path.relative_to(Path(settings.static_dir))
        return "/static/" + str(relative_path).replace("\\", "/")


# Singleton instance
music_service = MusicService()
