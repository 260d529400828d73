"""
Azure OpenAI client wrapper for the generative AI service.

This class is intentionally minimal: it owns the SDK client and issues chat
completions. Model-tier selection, retries, telemetry and output decoding are
handled by the AI gateway adapter.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from openai import AsyncAzureOpenAI

from .config import AISettings
from .exceptions import ConfigurationError


class AzureAIClient:
    """
    Thin wrapper around AsyncAzureOpenAI chat completions.
    """

    def __init__(
        self,
        settings: AISettings,
        *,
        client: Optional[AsyncAzureOpenAI] = None,
    ) -> None:
        """
        Initialize AzureAIClient.

        Args:
            settings: AI settings (endpoint, key, deployments, sampling).
            client: Pre-built SDK client; built from settings when omitted.
        """
        self._settings = settings

        if client is None:
            if not settings.endpoint or not settings.api_key:
                raise ConfigurationError(
                    "AI endpoint and API key must be configured. "
                    "Set AI_ENDPOINT and AI_API_KEY."
                )
            client = AsyncAzureOpenAI(
                api_key=settings.api_key,
                api_version=settings.api_version,
                # Azure SDK does not expect a trailing slash
                azure_endpoint=settings.endpoint.rstrip("/"),
                timeout=settings.timeout_seconds,
                # Retries are owned by the gateway
                max_retries=0,
            )
        self._client = client

    @property
    def settings(self) -> AISettings:
        return self._settings

    async def chat(
        self,
        messages: Sequence[Dict[str, Any]],
        *,
        model: str,
        json_mode: bool = False,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ):
        """
        Issue one chat completion.

        Args:
            messages: OpenAI chat messages (content may be a list of parts).
            model: Deployment name.
            json_mode: Request a JSON object response.
            temperature: Sampling temperature; settings default when omitted.
            max_tokens: Response token cap; settings default when omitted.
            **kwargs: Passed directly to the SDK.
        """
        if json_mode:
            kwargs.setdefault("response_format", {"type": "json_object"})
        return await self._client.chat.completions.create(
            model=model,
            messages=list(messages),
            temperature=self._settings.temperature if temperature is None else temperature,
            max_tokens=self._settings.max_tokens if max_tokens is None else max_tokens,
            **kwargs,
        )


__all__ = ["AzureAIClient"]
