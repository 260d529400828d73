"""Generate a structured clinical document of a chosen type."""

import json
import logging
from typing import Optional, Sequence

from ...adapters.external.prompt_registry import PromptScenario
from ...core.utils.string_utils import generate_id
from ...domain.documents import ProviderConfig, StructuredReport, build_document
from ...domain.entities.medical_entity import MedicalEntity
from ...domain.enums.clinical import ModelTier, ReportType
from ..ports.services.ai_gateway import AIGateway, TextPart
from ..prompts import generate_document_system
from ..schema_registry import schema_for

logger = logging.getLogger(__name__)


def serialize_entities(entities: Sequence[MedicalEntity]) -> str:
    """Entities as the JSON list embedded in the generation prompt."""
    return json.dumps(
        [
            {
                "category": entity.category.value,
                "text": entity.text,
                "provenance": entity.provenance.value,
            }
            for entity in entities
        ],
        ensure_ascii=False,
    )


def merge_provider(report: StructuredReport, provider: Optional[ProviderConfig]) -> StructuredReport:
    """Return a copy of ``report`` whose document carries the provider block."""
    if provider is None or report.data is None:
        return report
    data = report.data.model_copy(update={"poskytovatel": provider.to_poskytovatel()})
    return report.with_data(data)


class GenerateDocumentUseCase:
    """Use case for schema-driven document generation.

    Every call generates from scratch: nothing from a previous report of the
    same session is reused.
    """

    def __init__(self, gateway: AIGateway, provider: Optional[ProviderConfig] = None):
        self._gateway = gateway
        self._provider = provider

    async def execute(
        self,
        source_text: str,
        report_type: ReportType,
        entities: Sequence[MedicalEntity] = (),
        deep: bool = False,
    ) -> StructuredReport:
        schema = schema_for(report_type)
        system_prompt = generate_document_system(
            label=schema.label,
            doc_type=schema.report_type.value,
            entities_json=serialize_entities(entities),
            schema=schema.template,
        )

        raw = await self._gateway.generate_json(
            system_prompt,
            [TextPart(source_text)],
            {},
            model_tier=ModelTier.DEEP if deep else ModelTier.FAST,
            scenario=PromptScenario.GENERATE_DOCUMENT,
        )
        if not isinstance(raw, dict) or not raw:
            logger.warning(f"Document generation returned no usable data: type={schema.report_type.value}")

        report = StructuredReport(
            id=generate_id(),
            report_type=schema.report_type,
            data=build_document(schema.report_type, raw),
        )
        report = merge_provider(report, self._provider)
        logger.info(
            f"Document generated: type={report.report_type.value} id={report.id} "
            f"entities={len(entities)} deep={deep}"
        )
        return report
