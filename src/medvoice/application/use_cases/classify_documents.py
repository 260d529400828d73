"""Suggest which document types a consultation calls for."""

import logging
from typing import Any, List, Optional, Tuple

from ...adapters.external.prompt_registry import PromptScenario
from ...domain.enums.clinical import BASELINE_REPORT_TYPE, ModelTier, ReportType
from ..ports.services.ai_gateway import AIGateway, TextPart
from ..prompts import DETECT_DOCUMENTS_SYSTEM

logger = logging.getLogger(__name__)


def _report_type(value: Any) -> Optional[ReportType]:
    """Match a type by wire value ("AMBULANTNI_ZAZNAM") or member name ("AMBULATORY_RECORD")."""
    if not isinstance(value, str):
        return None
    key = value.strip().upper()
    try:
        return ReportType(key)
    except ValueError:
        return ReportType.__members__.get(key)


def parse_candidate_types(raw: Any) -> Tuple[ReportType, ...]:
    """Recognized model suggestions in order, de-duplicated; the baseline type is appended when missing."""
    items = raw.get("intents") if isinstance(raw, dict) else raw
    candidates: List[ReportType] = []
    if isinstance(items, list):
        for item in items:
            report_type = _report_type(item)
            if report_type is None:
                logger.debug(f"Ignoring unknown document type suggestion {item!r}")
                continue
            if report_type not in candidates:
                candidates.append(report_type)
    if BASELINE_REPORT_TYPE not in candidates:
        candidates.append(BASELINE_REPORT_TYPE)
    return tuple(candidates)


class ClassifyDocumentsUseCase:
    """Use case for advisory document type detection."""

    def __init__(self, gateway: AIGateway):
        self._gateway = gateway

    async def execute(
        self, text: str, model_tier: ModelTier = ModelTier.FAST
    ) -> Tuple[ReportType, ...]:
        if not text or not text.strip():
            return (BASELINE_REPORT_TYPE,)

        raw = await self._gateway.generate_json(
            DETECT_DOCUMENTS_SYSTEM,
            [TextPart(text)],
            {"intents": [BASELINE_REPORT_TYPE.value]},
            model_tier=model_tier,
            scenario=PromptScenario.DETECT_DOCUMENTS,
        )
        candidates = parse_candidate_types(raw)
        logger.info(f"Document classification completed: {[t.value for t in candidates]}")
        return candidates
