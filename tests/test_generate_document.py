"""
Structured document generation.
"""

import json

import pytest

from medvoice.adapters.external.prompt_registry import PromptScenario
from medvoice.application.use_cases.generate_document import GenerateDocumentUseCase, merge_provider
from medvoice.domain.documents import AmbulatoryRecord, ProviderConfig, StructuredReport
from medvoice.domain.entities.medical_entity import MedicalEntity
from medvoice.domain.enums.clinical import EntityCategory, ModelTier, Provenance, ReportType

from conftest import TRANSCRIPT_TEXT

PROVIDER = ProviderConfig(name="MUDr. Petr Svoboda", registration_id="11223344", specialization_code="001")


@pytest.mark.asyncio
async def test_entities_are_embedded_in_the_prompt(gateway):
    entities = [
        MedicalEntity(EntityCategory.SYMPTOM, "bolest hlavy"),
        MedicalEntity(EntityCategory.MEDICATION, "Ibalgin 400 mg", Provenance.MANUAL),
    ]
    await GenerateDocumentUseCase(gateway).execute(TRANSCRIPT_TEXT, ReportType.AMBULATORY_RECORD, entities)

    call = gateway.calls_for(PromptScenario.GENERATE_DOCUMENT)[0]
    assert call["json_mode"] is True
    assert call["model_tier"] is ModelTier.FAST
    assert '"text": "Ibalgin 400 mg"' in call["system_prompt"]
    assert '"provenance": "MANUAL"' in call["system_prompt"]
    assert "AMBULANTNI_ZAZNAM" in call["system_prompt"]
    assert call["parts"][0].text == TRANSCRIPT_TEXT


@pytest.mark.asyncio
async def test_deep_generation_uses_deep_tier(gateway):
    await GenerateDocumentUseCase(gateway).execute(TRANSCRIPT_TEXT, ReportType.NURSING_RECORD, deep=True)
    assert gateway.calls_for(PromptScenario.GENERATE_DOCUMENT)[0]["model_tier"] is ModelTier.DEEP


@pytest.mark.asyncio
async def test_provider_is_merged_after_generation(gateway):
    # A model-supplied provider block is always replaced by the configured one
    gateway.script(
        PromptScenario.GENERATE_DOCUMENT,
        json.dumps({"subjektivni": "Kašel", "poskytovatel": {"nazev": "Vymyšlená ordinace"}}),
    )
    report = await GenerateDocumentUseCase(gateway, PROVIDER).execute(
        TRANSCRIPT_TEXT, ReportType.AMBULATORY_RECORD
    )

    assert isinstance(report.data, AmbulatoryRecord)
    assert report.data.subjektivni == "Kašel"
    assert report.data.poskytovatel.nazev == "MUDr. Petr Svoboda"
    assert report.data.poskytovatel.ico == "11223344"
    assert report.data.poskytovatel.odbornost == "001"


@pytest.mark.asyncio
async def test_malformed_output_gives_empty_document_of_requested_type(gateway):
    gateway.script(PromptScenario.GENERATE_DOCUMENT, "nelze")
    report = await GenerateDocumentUseCase(gateway).execute(TRANSCRIPT_TEXT, ReportType.VISIT_CONFIRMATION)

    assert report.report_type is ReportType.VISIT_CONFIRMATION
    assert report.data.doc_type == "POTVRZENI_VYSETRENI"
    assert report.data.datum_cas_navstevy == ""


@pytest.mark.asyncio
async def test_every_generation_gets_a_new_id(gateway):
    use_case = GenerateDocumentUseCase(gateway)
    first = await use_case.execute(TRANSCRIPT_TEXT, ReportType.AMBULATORY_RECORD)
    second = await use_case.execute(TRANSCRIPT_TEXT, ReportType.AMBULATORY_RECORD)
    assert first.id != second.id


def test_merge_provider_leaves_empty_report_alone():
    report = StructuredReport(id="x", report_type=ReportType.AMBULATORY_RECORD, data=None)
    assert merge_provider(report, PROVIDER) is report
