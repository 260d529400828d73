"""
AI gateway interface: the single call contract every pipeline stage uses.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from ....core.utils.json_decode import best_effort_json
from ....domain.enums.clinical import ModelTier


@dataclass(frozen=True)
class TextPart:
    """Plain text content sent to the model."""

    text: str


@dataclass(frozen=True)
class InlinePart:
    """Binary content sent inline (audio or image) with its MIME type."""

    data: bytes
    mime_type: str


Part = Union[TextPart, InlinePart]


class AIGateway(ABC):
    """Abstract gateway to the generative AI service."""

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        parts: Sequence[Part],
        *,
        json_mode: bool = False,
        model_tier: ModelTier = ModelTier.FAST,
        scenario: Optional[str] = None,
    ) -> str:
        """
        Run one generation and return the raw text output.

        Args:
            system_prompt: Instruction text for the model
            parts: Ordered content parts (text and inline binary)
            json_mode: Ask the model for a JSON object response
            model_tier: FAST or DEEP model
            scenario: Prompt scenario name used for telemetry

        Returns:
            The model's text output (possibly empty)

        Raises:
            RateLimitExceededError: rate limiting persisted through all attempts
            AIServiceError: any other service failure
        """
        pass

    async def generate_json(
        self,
        system_prompt: str,
        parts: Sequence[Part],
        fallback: Any,
        *,
        model_tier: ModelTier = ModelTier.FAST,
        scenario: Optional[str] = None,
    ) -> Any:
        """JSON-mode generation decoded best-effort; ``fallback`` on malformed output."""
        raw = await self.generate(
            system_prompt,
            parts,
            json_mode=True,
            model_tier=model_tier,
            scenario=scenario,
        )
        return best_effort_json(raw, fallback)
