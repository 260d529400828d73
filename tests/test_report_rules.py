"""
Per-type document validation rules.
"""

import pytest

from medvoice.application.validation.report_rules import REPORT_RULES, validate_report
from medvoice.domain.documents import Poskytovatel, StructuredReport, build_document
from medvoice.domain.enums.clinical import ReportType, ValidationSeverity

from conftest import AMBULATORY_DOCUMENT


def _report(report_type, data):
    return StructuredReport(id="r1", report_type=report_type, data=build_document(report_type, data))


def _severities(result):
    return {issue.field: issue.severity for issue in result.issues}


def test_rules_cover_every_type():
    assert set(REPORT_RULES) == set(ReportType)


def test_ambulatory_with_empty_plan_and_diagnosis():
    report = _report(
        ReportType.AMBULATORY_RECORD,
        {"subjektivni": "Bolest v krku", "objektivni": "Zarudlé tonzily", "diagnoza": [], "plan": {}},
    )
    result = validate_report(report)

    assert result.is_valid is False
    severities = _severities(result)
    assert severities["diagnoza"] is ValidationSeverity.ERROR
    assert severities["plan"] is ValidationSeverity.WARNING


def test_complete_ambulatory_record_is_valid():
    result = validate_report(_report(ReportType.AMBULATORY_RECORD, AMBULATORY_DOCUMENT))
    assert result.is_valid is True
    assert result.issues == ()


def test_ambulatory_item_level_findings():
    report = _report(
        ReportType.AMBULATORY_RECORD,
        {
            "subjektivni": "Kašel",
            "objektivni": "Dýchání sklípkové",
            "diagnoza": [{"kod": "J20.9", "nazev": "Bronchitida"}, {"nazev": "Rýma"}],
            "plan": {"medikace": [{"nazev": "ACC long", "davkovani": ""}]},
        },
    )
    severities = _severities(validate_report(report))

    assert severities == {
        "diagnoza[1].kod": ValidationSeverity.ERROR,
        "plan.medikace[0].davkovani": ValidationSeverity.WARNING,
    }


def test_validation_is_idempotent():
    report = _report(ReportType.AMBULATORY_RECORD, {"diagnoza": [], "plan": {}})
    assert validate_report(report) == validate_report(report)


def test_missing_data_is_an_error():
    result = validate_report(StructuredReport(id="r1", report_type=ReportType.NURSING_RECORD, data=None))
    assert not result.is_valid
    assert result.issues[0].field == "data"


def test_mismatched_document_type_is_an_error():
    data = build_document(ReportType.VISIT_CONFIRMATION, {"ucel_vysetreni": "kontrola"})
    result = validate_report(StructuredReport(id="r1", report_type=ReportType.NURSING_RECORD, data=data))
    assert [i.field for i in result.errors] == ["doc_type"]


def test_nursing_record_rules():
    severities = _severities(validate_report(_report(ReportType.NURSING_RECORD, {})))
    assert severities == {
        "subjektivni_potize": ValidationSeverity.ERROR,
        "vitalni_funkce": ValidationSeverity.WARNING,
        "provedene_vykony": ValidationSeverity.WARNING,
    }


def test_consult_request_rules():
    report = _report(
        ReportType.CONSULT_REQUEST,
        {"cilova_odbornost": "kardiologie", "duvod_konzilia": "Palpitace", "urgentnost": "hned"},
    )
    severities = _severities(validate_report(report))
    assert severities == {
        "poskytovatel.nazev": ValidationSeverity.ERROR,
        "urgentnost": ValidationSeverity.WARNING,
        "anamneza": ValidationSeverity.WARNING,
    }


def test_consult_request_with_sender_and_urgency_passes():
    data = build_document(
        ReportType.CONSULT_REQUEST,
        {
            "cilova_odbornost": "kardiologie",
            "duvod_konzilia": "Palpitace",
            "urgentnost": "Urgentni",
            "anamneza": "Hypertenze",
        },
    ).model_copy(update={"poskytovatel": Poskytovatel(nazev="MUDr. Dvořák")})
    result = validate_report(StructuredReport(id="r1", report_type=ReportType.CONSULT_REQUEST, data=data))
    assert result.issues == ()


@pytest.mark.parametrize("urgency", ["Rutinní", "URGENTNÍ", "cito."])
def test_consult_urgency_accepts_czech_spelling(urgency):
    data = build_document(
        ReportType.CONSULT_REQUEST,
        {"cilova_odbornost": "ORL", "duvod_konzilia": "Chronická sinusitida", "urgentnost": urgency},
    )
    result = validate_report(StructuredReport(id="r1", report_type=ReportType.CONSULT_REQUEST, data=data))
    assert "urgentnost" not in [i.field for i in result.issues]


def test_visit_confirmation_rules():
    result = validate_report(_report(ReportType.VISIT_CONFIRMATION, {"ucel_vysetreni": "preventivní prohlídka"}))
    assert [(i.field, i.severity) for i in result.issues] == [("datum_cas_navstevy", ValidationSeverity.ERROR)]


@pytest.mark.parametrize(
    "data, expected_errors",
    [
        ({"diagnoza_hlavni": "I10", "navrhovana_terapie": "Prestarium"}, []),
        ({"diagnoza_hlavni": "M54.5", "procedury": ["rehabilitace"]}, []),
        ({}, ["diagnoza_hlavni", "navrhovana_terapie"]),
    ],
)
def test_treatment_recommendation_rules(data, expected_errors):
    result = validate_report(_report(ReportType.TREATMENT_RECOMMENDATION, data))
    assert [i.field for i in result.errors] == expected_errors
    assert [i.field for i in result.warnings] == ["doporuceni_rezim"]
