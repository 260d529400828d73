"""
Centralized AI gateway with retry, telemetry and prompt version tracking.

This module provides the one implementation of the ``AIGateway`` contract:
- Converts text/inline parts into chat-completion content items
- Picks a deployment per model tier (audio requests use the audio deployment)
- Retries rate-limit failures with exponential backoff; everything else fails fast
- Traces every attempt and logs scenario, prompt version and latency
"""

import asyncio
import base64
import logging
import re
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import openai

from ...application.ports.services.ai_gateway import AIGateway, InlinePart, Part, TextPart
from ...core.ai_client import AzureAIClient
from ...core.config import AISettings
from ...core.exceptions import AIServiceError, InvalidAudioFormatError, RateLimitExceededError
from ...domain.enums.clinical import ModelTier
from ...observability.tracing import add_span_attribute, set_span_status, trace_operation
from .prompt_registry import prompt_version

logger = logging.getLogger(__name__)

_STATUS_429_RE = re.compile(r"\b429\b")

RATE_LIMIT_KEYWORDS = (
    "rate limit",
    "ratelimit",
    "resource_exhausted",
    "resource exhausted",
    "too many requests",
    "quota",
)

_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
}


def is_rate_limit_error(error: BaseException) -> bool:
    """True for quota / rate-limit failures, the only retryable class."""
    if isinstance(error, openai.RateLimitError):
        return True
    if getattr(error, "status_code", None) == 429:
        return True
    error_str = str(error).lower()
    if _STATUS_429_RE.search(error_str):
        return True
    return any(keyword in error_str for keyword in RATE_LIMIT_KEYWORDS)


def _content_item(part: Part) -> Dict[str, Any]:
    if isinstance(part, TextPart):
        return {"type": "text", "text": part.text}

    mime_type = (part.mime_type or "").split(";")[0].strip().lower()
    encoded = base64.b64encode(part.data).decode("ascii")
    if mime_type in _AUDIO_FORMATS:
        return {
            "type": "input_audio",
            "input_audio": {"data": encoded, "format": _AUDIO_FORMATS[mime_type]},
        }
    if mime_type.startswith("image/"):
        return {
            "type": "image_url",
            "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
        }
    raise InvalidAudioFormatError(part.mime_type or "unknown", {"supported": sorted(_AUDIO_FORMATS)})


def build_messages(system_prompt: str, parts: Sequence[Part]) -> List[Dict[str, Any]]:
    """System message plus one user message carrying all parts in order."""
    messages: List[Dict[str, Any]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": [_content_item(part) for part in parts]})
    return messages


def _response_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None) or ""


class OpenAIGateway(AIGateway):
    """AI gateway backed by Azure OpenAI chat completions."""

    def __init__(
        self,
        client: AzureAIClient,
        settings: AISettings,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._settings = settings
        self._sleep = sleep

    def deployment_for(self, model_tier: ModelTier, has_audio: bool = False) -> str:
        if has_audio and self._settings.audio_deployment:
            return self._settings.audio_deployment
        if model_tier is ModelTier.DEEP:
            return self._settings.deep_deployment
        return self._settings.fast_deployment

    def backoff_delay(self, attempt: int) -> float:
        """Delay after failed ``attempt`` (1-based): base * 2**(attempt-1), capped."""
        delay = self._settings.base_delay_seconds * (2 ** (attempt - 1))
        return min(delay, self._settings.max_delay_seconds)

    async def generate(
        self,
        system_prompt: str,
        parts: Sequence[Part],
        *,
        json_mode: bool = False,
        model_tier: ModelTier = ModelTier.FAST,
        scenario: Optional[str] = None,
    ) -> str:
        messages = build_messages(system_prompt, parts)
        has_audio = any(
            isinstance(part, InlinePart) and part.mime_type.lower().startswith("audio/")
            for part in parts
        )
        deployment = self.deployment_for(model_tier, has_audio)
        scenario_name = str(getattr(scenario, "value", scenario) or "adhoc")
        version = prompt_version(scenario)
        max_attempts = self._settings.max_attempts
        last_error: Optional[BaseException] = None

        for attempt in range(1, max_attempts + 1):
            start_time = time.perf_counter()
            with trace_operation(
                "ai_generate",
                {
                    "ai.scenario": scenario_name,
                    "ai.prompt_version": version,
                    "ai.model": deployment,
                    "ai.tier": model_tier.value,
                    "ai.json_mode": json_mode,
                },
            ) as span:
                add_span_attribute(span, "ai.attempt", attempt)
                try:
                    response = await self._client.chat(
                        messages, model=deployment, json_mode=json_mode
                    )
                except Exception as e:
                    latency_ms = (time.perf_counter() - start_time) * 1000.0
                    add_span_attribute(span, "ai.latency_ms", latency_ms)
                    add_span_attribute(span, "ai.error", str(e)[:200])
                    set_span_status(span, success=False, error_message=str(e))

                    if not is_rate_limit_error(e):
                        logger.error(
                            f"AI call failed: scenario={scenario_name} version={version} "
                            f"attempt={attempt} error={type(e).__name__}: {e}"
                        )
                        raise AIServiceError(
                            str(e) or type(e).__name__,
                            {"scenario": scenario_name, "model": deployment, "attempt": attempt},
                        ) from e

                    last_error = e
                    logger.warning(
                        f"AI call rate limited: scenario={scenario_name} "
                        f"attempt={attempt}/{max_attempts} error={e}"
                    )
                else:
                    latency_ms = (time.perf_counter() - start_time) * 1000.0
                    text = _response_text(response)
                    add_span_attribute(span, "ai.latency_ms", latency_ms)
                    usage = getattr(response, "usage", None)
                    if usage is not None:
                        add_span_attribute(span, "ai.tokens", getattr(usage, "total_tokens", 0))
                    set_span_status(span, success=True)
                    logger.info(
                        f"AI call completed: scenario={scenario_name} version={version} "
                        f"model={deployment} attempt={attempt} latency_ms={latency_ms:.2f}"
                    )
                    return text

            if attempt < max_attempts:
                delay = self.backoff_delay(attempt)
                logger.info(f"Retrying {scenario_name} in {delay} seconds...")
                await self._sleep(delay)

        logger.error(
            f"AI call gave up after {max_attempts} rate-limited attempts: scenario={scenario_name}"
        )
        raise RateLimitExceededError(
            max_attempts,
            str(last_error),
            {"scenario": scenario_name, "model": deployment},
        ) from last_error


__all__ = ["OpenAIGateway", "build_messages", "is_rate_limit_error", "RATE_LIMIT_KEYWORDS"]
