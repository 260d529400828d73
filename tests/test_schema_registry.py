"""
Document schemas: one per type, lenient model-output coercion, export view.
"""

import json

import pytest

from medvoice.application.schema_registry import DOCUMENT_SCHEMAS, schema_for
from medvoice.domain.documents import (
    AmbulatoryRecord,
    ConsultRequest,
    StructuredReport,
    build_document,
    flatten_fields,
)
from medvoice.domain.enums.clinical import ReportType


def test_every_report_type_has_exactly_one_schema():
    assert set(DOCUMENT_SCHEMAS) == set(ReportType)
    for report_type in ReportType:
        schema = schema_for(report_type)
        assert schema.report_type is report_type
        assert schema.model.model_fields["doc_type"].default == report_type.value


@pytest.mark.parametrize("report_type", list(ReportType))
def test_templates_are_valid_json_for_their_model(report_type):
    schema = schema_for(report_type)
    template = json.loads(schema.template)
    document = build_document(report_type, template)
    assert isinstance(document, schema.model)
    # Every template key is a real field of the model
    assert set(template) <= set(schema.model.model_fields)


def test_schema_lookup_accepts_wire_value():
    assert schema_for("KONZILIARNI_ZPRAVA").model is ConsultRequest


def test_build_document_coerces_noisy_values():
    document = build_document(
        ReportType.AMBULATORY_RECORD,
        {
            "subjektivni": None,
            "objektivni": ["klidný", "orientovaný"],
            "vitalni_funkce": {"tk": 120, "p": None},
            "diagnoza": {"kod": "J06.9", "nazev": "Akutní infekce HCD"},
            "plan": "Klid na lůžku",
            "unknown_field": "ignored",
        },
    )

    assert isinstance(document, AmbulatoryRecord)
    assert document.subjektivni == ""
    assert document.objektivni == "klidný, orientovaný"
    assert document.vitalni_funkce.tk == "120"
    assert document.vitalni_funkce.p == ""
    assert document.diagnoza[0].kod == "J06.9"
    assert document.plan.doporuceni == "Klid na lůžku"


def test_build_document_drops_only_the_bad_field():
    document = build_document(
        ReportType.AMBULATORY_RECORD,
        {"subjektivni": "Kašel", "diagnoza": 42},
    )
    assert document.subjektivni == "Kašel"
    assert document.diagnoza == ()


@pytest.mark.parametrize("raw", [None, "text", [1, 2], 3])
def test_build_document_non_dict_gives_empty_document(raw):
    document = build_document(ReportType.VISIT_CONFIRMATION, raw)
    assert document.doc_type == "POTVRZENI_VYSETRENI"
    assert document.ucel_vysetreni == ""


def test_report_data_is_a_tagged_union():
    report = StructuredReport.model_validate(
        {
            "id": "abc",
            "report_type": "KONZILIARNI_ZPRAVA",
            "data": {"doc_type": "KONZILIARNI_ZPRAVA", "cilova_odbornost": "neurologie"},
        }
    )
    assert isinstance(report.data, ConsultRequest)
    assert report.data.cilova_odbornost == "neurologie"


def test_flatten_fields_lists_dotted_paths():
    document = build_document(
        ReportType.AMBULATORY_RECORD,
        {"diagnoza": [{"kod": "R51", "nazev": "Bolest hlavy"}], "plan": {"medikace": [{"nazev": "Ibalgin"}]}},
    )
    fields = dict(flatten_fields(document))

    assert fields["diagnoza[0].kod"] == "R51"
    assert fields["plan.medikace[0].nazev"] == "Ibalgin"
    assert "doc_type" not in fields
    assert flatten_fields(None) == []
