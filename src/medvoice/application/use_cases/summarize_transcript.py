"""Compact SOAP-style summary of a transcript."""

import logging

from ...adapters.external.prompt_registry import PromptScenario
from ...domain.enums.clinical import ModelTier
from ..ports.services.ai_gateway import AIGateway, TextPart
from ..prompts import SUMMARIZE_SYSTEM

logger = logging.getLogger(__name__)


class SummarizeTranscriptUseCase:
    def __init__(self, gateway: AIGateway):
        self._gateway = gateway

    async def execute(self, transcript: str, deep: bool = False) -> str:
        if not transcript or not transcript.strip():
            return ""
        summary = await self._gateway.generate(
            SUMMARIZE_SYSTEM,
            [TextPart(transcript)],
            model_tier=ModelTier.DEEP if deep else ModelTier.FAST,
            scenario=PromptScenario.SUMMARIZE,
        )
        summary = (summary or "").strip()
        logger.info(f"Summary completed: chars={len(summary)}")
        return summary
