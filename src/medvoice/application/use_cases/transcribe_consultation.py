"""Transcribe consultation audio into diarized segments."""

import logging
from typing import Any

from ...adapters.external.prompt_registry import PromptScenario
from ...domain.entities.transcript import TranscriptionResult, render_transcript
from ...domain.enums.clinical import ModelTier
from ..dto.consultation_dto import AudioPayload
from ..ports.services.ai_gateway import AIGateway, InlinePart, TextPart
from ..prompts import TRANSCRIBE_SYSTEM
from ..utils.speaker_mapping import parse_segments

logger = logging.getLogger(__name__)


class TranscribeConsultationUseCase:
    """Use case for turning recorded audio into a speaker-labelled transcript."""

    def __init__(self, gateway: AIGateway):
        self._gateway = gateway

    async def execute(
        self, audio: AudioPayload, model_tier: ModelTier = ModelTier.FAST
    ) -> TranscriptionResult:
        """
        Send the audio inline with the diarization prompt.

        Malformed model output yields an empty transcript; gateway failures
        propagate to the caller.
        """
        raw: Any = await self._gateway.generate_json(
            TRANSCRIBE_SYSTEM,
            [
                InlinePart(data=audio.data, mime_type=audio.mime_type),
                TextPart("Přepiš tuto nahrávku konzultace."),
            ],
            {"segments": []},
            model_tier=model_tier,
            scenario=PromptScenario.TRANSCRIBE,
        )

        # Accept both {"segments": [...]} and a bare array
        items = raw.get("segments") if isinstance(raw, dict) else raw
        segments = parse_segments(items)
        text = render_transcript(segments)

        logger.info(
            f"Transcription completed: segments={len(segments)} chars={len(text)} "
            f"audio_bytes={audio.size_bytes}"
        )
        return TranscriptionResult(text=text, segments=segments)
