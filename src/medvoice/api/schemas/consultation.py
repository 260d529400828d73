"""
Consultation request/response schemas.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ...application.dto.consultation_dto import AddEntity, EntityEdit, RemoveEntity, UpdateEntity
from ...domain.documents import ProviderConfig, StructuredReport, flatten_fields
from ...domain.entities.consultation import ProcessingResult
from ...domain.entities.medical_entity import MedicalEntity
from ...domain.entities.validation import ValidationResult
from ...domain.enums.clinical import EntityCategory, Provenance, ReportType, SessionStatus, ValidationSeverity


# ============================================================================
# REQUESTS
# ============================================================================


class CreateConsultationRequest(BaseModel):
    """Request schema for starting a consultation session."""

    provider: Optional[ProviderConfig] = Field(
        None, description="Provider record merged into documents (defaults from PROVIDER_* settings)"
    )


class EntityIn(BaseModel):
    category: EntityCategory = Field(..., description="Entity category")
    text: str = Field(..., min_length=1, description="Entity text")
    provenance: Provenance = Field(Provenance.MANUAL, description="AI or MANUAL")

    def to_entity(self) -> MedicalEntity:
        return MedicalEntity(category=self.category, text=self.text.strip(), provenance=self.provenance)


class RegenerateRequest(BaseModel):
    """Request schema for regenerating the document."""

    report_type: Optional[ReportType] = Field(None, description="Document type (defaults to the current one)")
    entities: Optional[List[EntityIn]] = Field(None, description="Replacement entity list")
    thorough: Optional[bool] = Field(None, description="Use the Deep model tier")


class EntityEditIn(BaseModel):
    """One entity edit: add, update or remove."""

    op: Literal["add", "update", "remove"] = Field(..., description="Edit operation")
    index: Optional[int] = Field(None, description="Target position (update/remove)")
    category: Optional[EntityCategory] = Field(None, description="Entity category")
    text: Optional[str] = Field(None, description="Entity text")

    @model_validator(mode="after")
    def _check_operation_fields(self) -> "EntityEditIn":
        if self.op == "add" and (self.category is None or not (self.text or "").strip()):
            raise ValueError("'add' requires category and text")
        if self.op in ("update", "remove") and self.index is None:
            raise ValueError(f"'{self.op}' requires index")
        return self

    def to_edit(self) -> EntityEdit:
        if self.op == "add":
            return AddEntity(category=self.category, text=self.text)
        if self.op == "update":
            return UpdateEntity(index=self.index, text=self.text, category=self.category)
        return RemoveEntity(index=self.index)


class UpdateEntitiesRequest(BaseModel):
    edits: List[EntityEditIn] = Field(..., min_length=1, description="Edits applied in order")


class UpdateReportRequest(BaseModel):
    """Clinician-edited document fields (same shape as ``report.data``)."""

    data: Dict[str, Any] = Field(..., description="Document fields")


class ValidateRequest(BaseModel):
    """Validate a draft instead of the stored document when ``data`` is given."""

    report_type: Optional[ReportType] = Field(None, description="Draft document type (defaults to the current one)")
    data: Optional[Dict[str, Any]] = Field(None, description="Draft document fields")


class UpdateTranscriptRequest(BaseModel):
    transcript: str = Field(..., description="Corrected transcript text")


class AssistantRequest(BaseModel):
    question: str = Field(..., min_length=1, description="Question about the consultation")


# ============================================================================
# RESPONSES
# ============================================================================


class SegmentOut(BaseModel):
    speaker: str
    text: str
    start: float
    end: float


class EntityOut(BaseModel):
    index: int
    category: EntityCategory
    text: str
    provenance: Provenance


class EntityIssueOut(BaseModel):
    index: int
    message: str
    severity: ValidationSeverity


class ValidationIssueOut(BaseModel):
    field: str
    message: str
    severity: ValidationSeverity


class ValidationOut(BaseModel):
    is_valid: bool
    issues: List[ValidationIssueOut] = Field(default_factory=list)


class ReportOut(BaseModel):
    id: str
    report_type: ReportType
    data: Optional[Dict[str, Any]] = Field(None, description="Document fields")
    fields: Dict[str, Any] = Field(default_factory=dict, description="Flattened dotted-path view for export")


class StageFailureOut(BaseModel):
    stage: str
    message: str
    is_quota: bool


class ConsultationOut(BaseModel):
    """Snapshot of a consultation session."""

    session_id: str
    status: SessionStatus
    transcript: str
    summary: str
    segments: List[SegmentOut] = Field(default_factory=list)
    segments_in_sync: bool = True
    entities: List[EntityOut] = Field(default_factory=list)
    entity_issues: List[EntityIssueOut] = Field(default_factory=list)
    candidate_types: List[ReportType] = Field(default_factory=list)
    report: Optional[ReportOut] = None
    validation: Optional[ValidationOut] = None
    error: Optional[StageFailureOut] = None


class AssistantResponse(BaseModel):
    question: str
    answer: str
    turns: int = Field(..., description="Number of turns in the current conversation")


# ============================================================================
# CONVERTERS
# ============================================================================


def to_validation_out(result: ValidationResult) -> ValidationOut:
    return ValidationOut(
        is_valid=result.is_valid,
        issues=[
            ValidationIssueOut(field=i.field, message=i.message, severity=i.severity)
            for i in result.issues
        ],
    )


def to_report_out(report: StructuredReport) -> ReportOut:
    data = report.data.model_dump(mode="json") if report.data is not None else None
    return ReportOut(
        id=report.id,
        report_type=report.report_type,
        data=data,
        fields=dict(flatten_fields(report.data)),
    )


def to_consultation_out(result: ProcessingResult) -> ConsultationOut:
    return ConsultationOut(
        session_id=result.session_id,
        status=result.status,
        transcript=result.transcript,
        summary=result.summary,
        segments=[
            SegmentOut(speaker=s.speaker.value, text=s.text, start=s.start, end=s.end)
            for s in result.segments
        ],
        segments_in_sync=result.segments_in_sync,
        entities=[
            EntityOut(index=i, category=e.category, text=e.text, provenance=e.provenance)
            for i, e in enumerate(result.entities)
        ],
        entity_issues=[
            EntityIssueOut(index=i.index, message=i.message, severity=i.severity)
            for i in result.entity_issues
        ],
        candidate_types=list(result.candidate_types),
        report=to_report_out(result.report) if result.report is not None else None,
        validation=to_validation_out(result.validation) if result.validation is not None else None,
        error=(
            StageFailureOut(stage=result.error.stage, message=result.error.message, is_quota=result.error.is_quota)
            if result.error is not None
            else None
        ),
    )
