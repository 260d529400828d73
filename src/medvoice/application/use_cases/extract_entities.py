"""Extract categorized clinical entities from a transcript."""

import logging
from typing import Any, List, Tuple

from ...adapters.external.prompt_registry import PromptScenario
from ...domain.entities.medical_entity import MedicalEntity
from ...domain.enums.clinical import EntityCategory, ModelTier, Provenance
from ..ports.services.ai_gateway import AIGateway, TextPart
from ..prompts import EXTRACT_ENTITIES_SYSTEM

logger = logging.getLogger(__name__)


def _category(value: Any) -> EntityCategory:
    if isinstance(value, str):
        try:
            return EntityCategory(value.strip().upper())
        except ValueError:
            pass
    return EntityCategory.OTHER


def parse_entities(raw: Any) -> Tuple[MedicalEntity, ...]:
    """Build AI-provenance entities from decoded model output, skipping empty text."""
    items = raw.get("entities") if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        return ()

    entities: List[MedicalEntity] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        entities.append(
            MedicalEntity(
                category=_category(item.get("category")),
                text=text.strip(),
                provenance=Provenance.AI,
            )
        )
    return tuple(entities)


class ExtractEntitiesUseCase:
    """Use case for mining DIAGNOSIS/MEDICATION/SYMPTOM/PII/OTHER entities."""

    def __init__(self, gateway: AIGateway):
        self._gateway = gateway

    async def execute(
        self, transcript: str, model_tier: ModelTier = ModelTier.FAST
    ) -> Tuple[MedicalEntity, ...]:
        if not transcript or not transcript.strip():
            return ()

        raw = await self._gateway.generate_json(
            EXTRACT_ENTITIES_SYSTEM,
            [TextPart(transcript)],
            {"entities": []},
            model_tier=model_tier,
            scenario=PromptScenario.EXTRACT_ENTITIES,
        )
        entities = parse_entities(raw)
        logger.info(f"Entity extraction completed: entities={len(entities)}")
        return entities
