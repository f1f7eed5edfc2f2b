"""
Provider lookup.

Clients are built from settings on first use and cached per provider.
"""
from typing import Dict, Optional

import httpx

from studio.config import settings
from studio.models.enums import VideoProvider
from studio.services.providers.base import VideoProviderClient
from studio.services.providers.minimax import MinimaxClient
from studio.services.providers.runway import RunwayClient

_clients: Dict[VideoProvider, VideoProviderClient] = {}


def build_video_provider(
    provider: VideoProvider,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> VideoProviderClient:
    """Construct a provider client from settings."""
    if provider == VideoProvider.MINIMAX:
        return MinimaxClient(
            settings.minimax_api_key,
            settings.minimax_api_base,
            timeout=settings.provider_timeout_seconds,
            transport=transport,
            model=settings.minimax_model,
        )
    if provider == VideoProvider.RUNWAY:
        return RunwayClient(
            settings.runway_api_key,
            settings.runway_api_base,
            timeout=settings.provider_timeout_seconds,
            transport=transport,
            model=settings.runway_model,
            api_version=settings.runway_api_version,
        )
    raise ValueError(f"Unsupported video provider: {provider}")


def get_video_provider(provider: VideoProvider) -> VideoProviderClient:
    """Get the shared client for a provider."""
    provider = VideoProvider(provider)
    if provider not in _clients:
        _clients[provider] = build_video_provider(provider)
    return _clients[provider]

