"""Canonical mapping from document type to its model and prompt schema template.

The registry must cover every ``ReportType`` exactly once; this is checked
when the module is imported so a new type without a schema fails at startup.
"""

from dataclasses import dataclass
from typing import Dict, Type

from pydantic import BaseModel

from ..core.exceptions import ConfigurationError
from ..domain.documents import DOCUMENT_MODELS
from ..domain.enums.clinical import ReportType


@dataclass(frozen=True)
class DocumentSchema:
    report_type: ReportType
    label: str
    model: Type[BaseModel]
    template: str


_TEMPLATES: Dict[ReportType, str] = {
    ReportType.AMBULATORY_RECORD: """{
  "subjektivni": "nynější onemocnění, potíže a anamnéza sdělené pacientem",
  "objektivni": "objektivní nález lékaře",
  "vitalni_funkce": {"tk": "120/80", "p": "72", "tt": "36.6", "spo2": "98", "hmotnost": "75"},
  "diagnoza": [{"kod": "MKN-10 kód", "nazev": "název diagnózy"}],
  "plan": {
    "doporuceni": "doporučení a režimová opatření",
    "medikace": [{"nazev": "název léku", "sila": "síla", "davkovani": "1-0-1"}],
    "kontrola": "termín kontroly"
  }
}""",
    ReportType.NURSING_RECORD: """{
  "subjektivni_potize": "potíže, se kterými pacient přichází",
  "vitalni_funkce": {"tk": "", "p": "", "tt": "", "spo2": "", "hmotnost": ""},
  "provedene_vykony": ["popis provedeného výkonu"],
  "poznamky": "další ošetřovatelské poznámky"
}""",
    ReportType.CONSULT_REQUEST: """{
  "cilova_odbornost": "odbornost, na kterou je pacient odesílán",
  "urgentnost": "rutinni | urgentni | cito",
  "duvod_konzilia": "konkrétní otázka nebo důvod konzilia",
  "anamneza": "stručná relevantní anamnéza a dosavadní léčba",
  "diagnoza_kod": "MKN-10 kód pracovní diagnózy"
}""",
    ReportType.VISIT_CONFIRMATION: """{
  "datum_cas_navstevy": "datum a čas návštěvy",
  "ucel_vysetreni": "účel vyšetření",
  "poznamka": "poznámka, např. doba pracovní neschopnosti se nevystavuje"
}""",
    ReportType.TREATMENT_RECOMMENDATION: """{
  "diagnoza_hlavni": "hlavní diagnóza s kódem MKN-10",
  "navrhovana_terapie": "navrhovaná farmakoterapie",
  "procedury": ["doporučená procedura nebo vyšetření"],
  "doporuceni_rezim": "režimová opatření"
}""",
}

_LABELS: Dict[ReportType, str] = {
    ReportType.AMBULATORY_RECORD: "Ambulantní záznam",
    ReportType.NURSING_RECORD: "Ošetřovatelský záznam",
    ReportType.CONSULT_REQUEST: "Konziliární zpráva",
    ReportType.VISIT_CONFIRMATION: "Potvrzení o vyšetření",
    ReportType.TREATMENT_RECOMMENDATION: "Doporučení léčby",
}


def _build_registry() -> Dict[ReportType, DocumentSchema]:
    for name, table in (("models", DOCUMENT_MODELS), ("templates", _TEMPLATES), ("labels", _LABELS)):
        missing = [t.value for t in ReportType if t not in table]
        if missing:
            raise ConfigurationError(
                f"Document schema {name} missing for: {', '.join(missing)}",
                {"missing": missing},
            )
    return {
        report_type: DocumentSchema(
            report_type=report_type,
            label=_LABELS[report_type],
            model=DOCUMENT_MODELS[report_type],
            template=_TEMPLATES[report_type],
        )
        for report_type in ReportType
    }


DOCUMENT_SCHEMAS: Dict[ReportType, DocumentSchema] = _build_registry()


def schema_for(report_type: ReportType) -> DocumentSchema:
    """Resolve the single schema registered for ``report_type``."""
    return DOCUMENT_SCHEMAS[ReportType(report_type)]
