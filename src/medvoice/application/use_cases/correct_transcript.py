"""Proof-read a transcript while keeping its speaker prefixes."""

import logging

from ...adapters.external.prompt_registry import PromptScenario
from ..ports.services.ai_gateway import AIGateway, TextPart
from ..prompts import CORRECT_TRANSCRIPT_SYSTEM

logger = logging.getLogger(__name__)


class CorrectTranscriptUseCase:
    def __init__(self, gateway: AIGateway):
        self._gateway = gateway

    async def execute(self, transcript: str) -> str:
        """Return the corrected transcript; the original when the model returns nothing."""
        if not transcript or not transcript.strip():
            return transcript
        corrected = await self._gateway.generate(
            CORRECT_TRANSCRIPT_SYSTEM,
            [TextPart(transcript)],
            scenario=PromptScenario.CORRECT_TRANSCRIPT,
        )
        corrected = (corrected or "").strip()
        if not corrected:
            logger.warning("Transcript correction returned empty output, keeping original")
            return transcript
        return corrected
