"""
Image generation service using the OpenAI Images API.
"""

from dataclasses import dataclass
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from studio.config import settings
from studio.models.enums import AspectRatio
from studio.utils.logging import get_logger

logger = get_logger(__name__)

# gpt-image models accept 1536x1024 / 1024x1536; dall-e-3 wants 1792x1024 / 1024x1792
GPT_IMAGE_SIZES = {
    AspectRatio.LANDSCAPE: "1536x1024",
    AspectRatio.PORTRAIT: "1024x1536",
}
DALLE_SIZES = {
    AspectRatio.LANDSCAPE: "1792x1024",
    AspectRatio.PORTRAIT: "1024x1792",
}


@dataclass
class GeneratedImage:
    url: str
    model: str
    revised_prompt: Optional[str] = None


class ImageService:
    """Generate single images, walking the configured model chain on failure."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        models: Optional[List[str]] = None,
    ):
        self._client = client
        self.models = models or list(settings.image_models)

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.provider_timeout_seconds,
            )
        return self._client

    def _request_kwargs(self, model: str, prompt: str, aspect_ratio: AspectRatio) -> dict:
        if model.startswith("dall-e"):
            return {
                "model": model,
                "prompt": prompt,
                "n": 1,
                "size": DALLE_SIZES[aspect_ratio],
                "quality": "hd",
                "style": "natural",
            }
        return {
            "model": model,
            "prompt": prompt,
            "n": 1,
            "size": GPT_IMAGE_SIZES[aspect_ratio],
            "quality": settings.image_quality,
        }

    async def generate(
        self, prompt: str, aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE
    ) -> GeneratedImage:
        """
        Generate one image.

        Returns a URL, or a data URI when the model answers with base64.
        Raises the last model's error when every model fails.
        """
        last_error: Optional[Exception] = None

        for model in self.models:
            try:
                response = await self.client.images.generate(
                    **self._request_kwargs(model, prompt, aspect_ratio)
                )
                if not response.data:
                    raise ValueError(f"No image data returned from {model}")

                image = response.data[0]
                if image.b64_json:
                    url = f"data:image/png;base64,{image.b64_json}"
                elif image.url:
                    url = image.url
                else:
                    raise ValueError(f"No image URL returned from {model}")

                logger.info("Image generated", model=model)
                return GeneratedImage(
                    url=url, model=model, revised_prompt=image.revised_prompt
                )

            except (OpenAIError, ValueError) as e:
                last_error = e
                logger.warning("Image model failed, trying next", model=model, error=str(e))

        raise last_error or ValueError("No image models configured")


# Singleton instance
image_service = ImageService()
