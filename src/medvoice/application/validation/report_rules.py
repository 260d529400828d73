"""Per-document-type validation rules.

``validate_report`` is a pure function of the report: it never raises, never
mutates and returns the same issues for the same input. ERROR issues mark the
document as incomplete; WARNING issues are advisory.

The ``REPORT_RULES`` table is the only place rules are attached to types and
must cover every ``ReportType``.
"""

from typing import Any, Callable, Dict, Iterator, List, Tuple

from ...core.exceptions import ConfigurationError
from ...core.utils.string_utils import is_blank, normalize_label
from ...domain.documents import (
    AmbulatoryRecord,
    ConsultRequest,
    NursingRecord,
    StructuredReport,
    TreatmentRecommendation,
    VisitConfirmation,
)
from ...domain.entities.validation import ValidationIssue, ValidationResult
from ...domain.enums.clinical import ReportType, ValidationSeverity

Rule = Callable[[Any], Iterator[ValidationIssue]]

URGENCY_LEVELS = ("rutinni", "urgentni", "cito")


def _error(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, severity=ValidationSeverity.ERROR)


def _warning(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, severity=ValidationSeverity.WARNING)


# ---------------------------------------------------------------------------
# Ambulantní záznam
# ---------------------------------------------------------------------------


def _ambulatory_subjective(d: AmbulatoryRecord) -> Iterator[ValidationIssue]:
    if is_blank(d.subjektivni):
        yield _error("subjektivni", "Chybí subjektivní stížnosti pacienta.")


def _ambulatory_objective(d: AmbulatoryRecord) -> Iterator[ValidationIssue]:
    if is_blank(d.objektivni):
        yield _error("objektivni", "Chybí objektivní nález.")


def _ambulatory_diagnoses(d: AmbulatoryRecord) -> Iterator[ValidationIssue]:
    if not d.diagnoza:
        yield _error("diagnoza", "Není uvedena žádná diagnóza (MKN-10).")
        return
    for index, diagnosis in enumerate(d.diagnoza):
        if is_blank(diagnosis.kod):
            yield _error(f"diagnoza[{index}].kod", "Chybí kód diagnózy.")


def _ambulatory_plan(d: AmbulatoryRecord) -> Iterator[ValidationIssue]:
    if is_blank(d.plan.doporuceni) and not d.plan.medikace:
        yield _warning("plan", "Plán je prázdný (žádná medikace ani doporučení).")
    for index, medication in enumerate(d.plan.medikace):
        if is_blank(medication.davkovani):
            yield _warning(f"plan.medikace[{index}].davkovani", "Chybí dávkování léku.")


# ---------------------------------------------------------------------------
# Ošetřovatelský záznam
# ---------------------------------------------------------------------------


def _nursing_complaints(d: NursingRecord) -> Iterator[ValidationIssue]:
    if is_blank(d.subjektivni_potize):
        yield _error("subjektivni_potize", "Chybí záznam subjektivních potíží.")


def _nursing_vitals(d: NursingRecord) -> Iterator[ValidationIssue]:
    vitals = d.vitalni_funkce
    if is_blank(vitals.tk) and is_blank(vitals.p) and is_blank(vitals.tt):
        yield _warning("vitalni_funkce", "Nejsou vyplněny žádné vitální funkce.")


def _nursing_procedures(d: NursingRecord) -> Iterator[ValidationIssue]:
    if not any(not is_blank(item) for item in d.provedene_vykony):
        yield _warning("provedene_vykony", "Nejsou uvedeny žádné provedené ošetřovatelské výkony.")


# ---------------------------------------------------------------------------
# Konziliární zpráva
# ---------------------------------------------------------------------------


def _consult_target(d: ConsultRequest) -> Iterator[ValidationIssue]:
    if is_blank(d.cilova_odbornost):
        yield _error("cilova_odbornost", "Chybí cílová odbornost/lékař.")


def _consult_reason(d: ConsultRequest) -> Iterator[ValidationIssue]:
    if is_blank(d.duvod_konzilia):
        yield _error("duvod_konzilia", "Chybí důvod konzilia (položená otázka).")


def _consult_sender(d: ConsultRequest) -> Iterator[ValidationIssue]:
    if d.poskytovatel is None or is_blank(d.poskytovatel.nazev):
        yield _error("poskytovatel.nazev", "Chybí identifikace odesílajícího lékaře.")


def _consult_urgency(d: ConsultRequest) -> Iterator[ValidationIssue]:
    if normalize_label(d.urgentnost) not in URGENCY_LEVELS:
        yield _warning("urgentnost", "Urgentnost musí být rutinni, urgentni nebo cito.")


def _consult_history(d: ConsultRequest) -> Iterator[ValidationIssue]:
    if is_blank(d.anamneza):
        yield _warning("anamneza", "Chybí relevantní anamnéza pro konziliáře.")


# ---------------------------------------------------------------------------
# Potvrzení o vyšetření
# ---------------------------------------------------------------------------


def _confirmation_datetime(d: VisitConfirmation) -> Iterator[ValidationIssue]:
    if is_blank(d.datum_cas_navstevy):
        yield _error("datum_cas_navstevy", "Chybí datum a čas návštěvy.")


def _confirmation_purpose(d: VisitConfirmation) -> Iterator[ValidationIssue]:
    if is_blank(d.ucel_vysetreni):
        yield _error("ucel_vysetreni", "Chybí účel vyšetření.")


# ---------------------------------------------------------------------------
# Doporučení léčby
# ---------------------------------------------------------------------------


def _treatment_diagnosis(d: TreatmentRecommendation) -> Iterator[ValidationIssue]:
    if is_blank(d.diagnoza_hlavni):
        yield _error("diagnoza_hlavni", "Chybí hlavní diagnóza pro indikaci léčby.")


def _treatment_therapy(d: TreatmentRecommendation) -> Iterator[ValidationIssue]:
    has_procedures = any(not is_blank(item) for item in d.procedury)
    if is_blank(d.navrhovana_terapie) and not has_procedures:
        yield _error("navrhovana_terapie", "Musí být uvedena navrhovaná terapie nebo procedury.")


def _treatment_regime(d: TreatmentRecommendation) -> Iterator[ValidationIssue]:
    if is_blank(d.doporuceni_rezim):
        yield _warning("doporuceni_rezim", "Nejsou uvedena režimová opatření.")


REPORT_RULES: Dict[ReportType, Tuple[Rule, ...]] = {
    ReportType.AMBULATORY_RECORD: (
        _ambulatory_subjective,
        _ambulatory_objective,
        _ambulatory_diagnoses,
        _ambulatory_plan,
    ),
    ReportType.NURSING_RECORD: (
        _nursing_complaints,
        _nursing_vitals,
        _nursing_procedures,
    ),
    ReportType.CONSULT_REQUEST: (
        _consult_target,
        _consult_reason,
        _consult_sender,
        _consult_urgency,
        _consult_history,
    ),
    ReportType.VISIT_CONFIRMATION: (
        _confirmation_datetime,
        _confirmation_purpose,
    ),
    ReportType.TREATMENT_RECOMMENDATION: (
        _treatment_diagnosis,
        _treatment_therapy,
        _treatment_regime,
    ),
}

_missing = [t.value for t in ReportType if t not in REPORT_RULES]
if _missing:
    raise ConfigurationError(f"Validation rules missing for: {', '.join(_missing)}", {"missing": _missing})


def validate_report(report: StructuredReport) -> ValidationResult:
    """Run the rules registered for ``report.report_type``."""
    data = report.data
    if data is None:
        return ValidationResult(issues=(_error("data", "Dokument neobsahuje žádná data."),))

    if data.doc_type != report.report_type.value:
        return ValidationResult(
            issues=(
                _error(
                    "doc_type",
                    f"Obsah dokumentu ({data.doc_type}) neodpovídá typu {report.report_type.value}.",
                ),
            )
        )

    issues: List[ValidationIssue] = []
    for rule in REPORT_RULES[report.report_type]:
        issues.extend(rule(data))
    return ValidationResult(issues=tuple(issues))
