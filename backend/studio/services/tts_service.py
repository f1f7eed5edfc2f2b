"""
Narration text-to-speech using edge-tts.
"""
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import UUID

import edge_tts

from studio.config import settings
from studio.services.storage_service import StorageService, storage_service
from studio.utils.logging import get_logger

logger = get_logger(__name__)


def sanitize_text_for_tts(text: str) -> str:
    """
    Strip characters that make edge-tts produce corrupted audio.

    Emojis and control characters are dropped, whitespace collapsed and
    SSML-significant characters replaced.
    """
    if not text:
        return ""

    text = re.sub(r"[^\w\s.,!?;:&'\"()\-À-ɏ]", "", text, flags=re.UNICODE)
    text = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", text)
    text = re.sub(r"\s+", " ", text)
    return text.replace("&", "and").strip()


class TTSService:
    """Synthesize narration and store it where the timeline can find it."""

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or storage_service
        self.output_dir = Path(settings.static_dir) / "audio"

    async def get_voices(self) -> List[Dict[str, Any]]:
        """List available voices in a frontend-friendly shape."""
        try:
            voices = await edge_tts.list_voices()
        except Exception as e:
            logger.error("Failed to get voices", error=str(e))
            return []
        return [
            {
                "voice_id": v["ShortName"],
                "name": v["FriendlyName"],
                "gender": v["Gender"],
                "locale": v["Locale"],
            }
            for v in voices
        ]

    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        rate: str = "+0%",
        pitch: str = "+0Hz",
    ) -> bytes:
        """Return MP3 bytes for the given text."""
        clean_text = sanitize_text_for_tts(text)
        if not clean_text:
            raise ValueError("Narration text is empty")

        voice_id = voice_id or settings.tts_default_voice
        logger.debug("Generating TTS audio", voice_id=voice_id, text_preview=clean_text[:50])

        communicate = edge_tts.Communicate(clean_text, voice_id, rate=rate, pitch=pitch)
        audio = bytearray()
        async for chunk in communicate.stream():
            if chunk["type"] == "audio":
                audio.extend(chunk["data"])

        if not audio:
            raise RuntimeError(f"No audio returned for voice {voice_id}")
        return bytes(audio)

    async def generate_narration(
        self,
        project_id: UUID,
        text: str,
        voice_id: Optional[str] = None,
        rate: str = "+0%",
        pitch: str = "+0Hz",
    ) -> str:
        """
        Synthesize narration for a project and store it.

        Returns an s3:// reference when storage is configured, otherwise a
        /static URL under the local audio directory.
        """
        audio = await self.synthesize(text, voice_id, rate=rate, pitch=pitch)
        filename = f"narration_{int(time.time() * 1000)}.mp3"

        if self.storage.is_configured:
            key = f"projects/{project_id}/audio/{filename}"
            return await self.storage.put(key, audio, "audio/mpeg")

        project_dir = self.output_dir / str(project_id)
        project_dir.mkdir(parents=True, exist_ok=True)
        output_path = project_dir / filename
        output_path.write_bytes(audio)

        if output_path.stat().st_size < 100:
            logger.warning("Generated audio file is suspiciously small", path=str(output_path))

        relative_path = output_path.relative_to(Path(settings.static_dir))
        return "/static/" + str(relative_path).replace("\\", "/")


# Singleton instance
tts_service = TTSService()
