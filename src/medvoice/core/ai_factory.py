"""
AI client factory.

Centralizes creation of the AI client and gateway from settings. Nothing here
is cached: callers that want a shared instance hold on to it themselves.
"""

from __future__ import annotations

from typing import Optional

from .ai_client import AzureAIClient
from .config import Settings, get_settings


def get_ai_client(settings: Optional[Settings] = None) -> AzureAIClient:
    """Build an AI client configured from ``settings.ai``."""
    settings = settings or get_settings()
    return AzureAIClient(settings.ai)


def get_ai_gateway(settings: Optional[Settings] = None):
    """Build the retrying AI gateway on top of a fresh client."""
    from ..adapters.external.llm_gateway import OpenAIGateway

    settings = settings or get_settings()
    return OpenAIGateway(get_ai_client(settings), settings.ai)


__all__ = ["get_ai_client", "get_ai_gateway", "AzureAIClient"]
