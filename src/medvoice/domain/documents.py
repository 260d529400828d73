"""Structured clinical document models.

One pydantic model per ``ReportType``; each carries a ``doc_type`` literal
so ``DocumentData`` is a discriminated union. Field names follow the Czech
legislative forms the documents are exported to.

Model output is noisy, so every model is lenient: ``None`` becomes an empty
value, scalars are coerced to text and unknown keys are ignored. Use
``build_document`` to turn an arbitrary decoded payload into a model; it
never raises.
"""

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, model_validator

from .enums.clinical import ReportType


def _coerce_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "ano" if value else "ne"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(_coerce_text(item)) for item in value if item is not None)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return value


def _coerce_sequence(value: Any) -> Any:
    if value is None:
        return ()
    if isinstance(value, (str, dict)):
        return (value,) if value else ()
    return value


Text = Annotated[str, BeforeValidator(_coerce_text)]
TextList = Annotated[Tuple[Text, ...], BeforeValidator(_coerce_sequence)]


class _Section(BaseModel):
    """Base for documents and their nested sections."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _none_is_empty(cls, data: Any) -> Any:
        return {} if data is None else data


class Poskytovatel(_Section):
    """Healthcare provider block printed on every document."""

    nazev: Text = ""
    adresa: Text = ""
    ico: Text = ""
    icp: Text = ""
    odbornost: Text = ""
    kontakt: Text = ""


class ProviderConfig(BaseModel):
    """Provider record supplied by the host; merged into ``poskytovatel``."""

    name: str = ""
    address: str = ""
    registration_id: str = ""
    secondary_registration_id: str = ""
    specialization_code: str = ""
    contact: str = ""

    def to_poskytovatel(self) -> Poskytovatel:
        return Poskytovatel(
            nazev=self.name,
            adresa=self.address,
            ico=self.registration_id,
            icp=self.secondary_registration_id,
            odbornost=self.specialization_code,
            kontakt=self.contact,
        )


class VitalniFunkce(_Section):
    tk: Text = ""
    p: Text = ""
    tt: Text = ""
    spo2: Text = ""
    hmotnost: Text = ""


class Diagnoza(_Section):
    kod: Text = ""
    nazev: Text = ""

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, data: Any) -> Any:
        return {"nazev": data} if isinstance(data, str) else data


class Medikace(_Section):
    nazev: Text = ""
    sila: Text = ""
    davkovani: Text = ""

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, data: Any) -> Any:
        return {"nazev": data} if isinstance(data, str) else data


class Plan(_Section):
    doporuceni: Text = ""
    medikace: Annotated[Tuple[Medikace, ...], BeforeValidator(_coerce_sequence)] = ()
    kontrola: Text = ""

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, data: Any) -> Any:
        return {"doporuceni": data} if isinstance(data, str) else data


class AmbulatoryRecord(_Section):
    """Ambulantní záznam (SOAP-shaped outpatient record)."""

    doc_type: Literal["AMBULANTNI_ZAZNAM"] = "AMBULANTNI_ZAZNAM"
    subjektivni: Text = ""
    objektivni: Text = ""
    vitalni_funkce: VitalniFunkce = Field(default_factory=VitalniFunkce)
    diagnoza: Annotated[Tuple[Diagnoza, ...], BeforeValidator(_coerce_sequence)] = ()
    plan: Plan = Field(default_factory=Plan)
    poskytovatel: Optional[Poskytovatel] = None


class NursingRecord(_Section):
    """Ošetřovatelský záznam."""

    doc_type: Literal["OSETR_ZAZNAM"] = "OSETR_ZAZNAM"
    subjektivni_potize: Text = ""
    vitalni_funkce: VitalniFunkce = Field(default_factory=VitalniFunkce)
    provedene_vykony: TextList = ()
    poznamky: Text = ""
    poskytovatel: Optional[Poskytovatel] = None


class ConsultRequest(_Section):
    """Konziliární zpráva / žádanka."""

    doc_type: Literal["KONZILIARNI_ZPRAVA"] = "KONZILIARNI_ZPRAVA"
    cilova_odbornost: Text = ""
    urgentnost: Text = ""
    duvod_konzilia: Text = ""
    anamneza: Text = ""
    diagnoza_kod: Text = ""
    poskytovatel: Optional[Poskytovatel] = None


class VisitConfirmation(_Section):
    """Potvrzení o vyšetření."""

    doc_type: Literal["POTVRZENI_VYSETRENI"] = "POTVRZENI_VYSETRENI"
    datum_cas_navstevy: Text = ""
    ucel_vysetreni: Text = ""
    poznamka: Text = ""
    poskytovatel: Optional[Poskytovatel] = None


class TreatmentRecommendation(_Section):
    """Doporučení léčby."""

    doc_type: Literal["DOPORUCENI_LECBY"] = "DOPORUCENI_LECBY"
    diagnoza_hlavni: Text = ""
    navrhovana_terapie: Text = ""
    procedury: TextList = ()
    doporuceni_rezim: Text = ""
    poskytovatel: Optional[Poskytovatel] = None


DocumentData = Annotated[
    Union[
        AmbulatoryRecord,
        NursingRecord,
        ConsultRequest,
        VisitConfirmation,
        TreatmentRecommendation,
    ],
    Field(discriminator="doc_type"),
]

DOCUMENT_MODELS: Dict[ReportType, Type[_Section]] = {
    ReportType.AMBULATORY_RECORD: AmbulatoryRecord,
    ReportType.NURSING_RECORD: NursingRecord,
    ReportType.CONSULT_REQUEST: ConsultRequest,
    ReportType.VISIT_CONFIRMATION: VisitConfirmation,
    ReportType.TREATMENT_RECOMMENDATION: TreatmentRecommendation,
}


class StructuredReport(BaseModel):
    """A generated document. ``data`` is None when generation produced nothing usable."""

    model_config = ConfigDict(frozen=True)

    id: str
    report_type: ReportType
    data: Optional[DocumentData] = None

    def with_data(self, data: Optional[Any]) -> "StructuredReport":
        """Return a copy carrying ``data`` (same id and type)."""
        return StructuredReport(id=self.id, report_type=self.report_type, data=data)


def build_document(report_type: ReportType, raw: Any) -> Any:
    """Coerce a decoded model payload into the document model for ``report_type``.

    Non-dict payloads produce an empty document. Keys that fail validation are
    dropped one round at a time so a single bad field never discards the rest.
    """
    model = DOCUMENT_MODELS[report_type]
    payload: Dict[str, Any] = dict(raw) if isinstance(raw, dict) else {}
    payload["doc_type"] = report_type.value

    while True:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            bad_keys = {
                err["loc"][0]
                for err in e.errors()
                if err.get("loc") and err["loc"][0] in payload and err["loc"][0] != "doc_type"
            }
            if not bad_keys:
                return model()
            for key in bad_keys:
                payload.pop(key, None)


def flatten_fields(data: Optional[BaseModel]) -> List[Tuple[str, Any]]:
    """Enumerate ``(dotted.path, value)`` leaves of a document for export."""
    if data is None:
        return []
    fields: List[Tuple[str, Any]] = []

    def walk(prefix: str, value: Any) -> None:
        if isinstance(value, dict):
            for key, item in value.items():
                walk(f"{prefix}.{key}" if prefix else key, item)
        elif isinstance(value, list):
            for index, item in enumerate(value):
                walk(f"{prefix}[{index}]", item)
        else:
            fields.append((prefix, value))

    walk("", data.model_dump(mode="json", exclude={"doc_type"}))
    return fields
