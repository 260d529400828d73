"""Consultation session aggregate.

A session collects everything produced for one recorded consultation:
transcript, entities, candidate document types, the current report and its
validation. It is owned and mutated only by the consultation workflow;
collections are tuples and are replaced, never modified in place.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple

from ..documents import StructuredReport
from ..enums.clinical import ReportType, SessionStatus
from ..value_objects.consultation_id import ConsultationId
from .medical_entity import MedicalEntity
from .transcript import TranscriptSegment
from .validation import EntityIssue, ValidationResult


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StageFailure:
    """Why the session ended up in ERROR."""

    stage: str
    message: str
    is_quota: bool = False


@dataclass(frozen=True)
class ProcessingResult:
    """Immutable snapshot of a consultation session."""

    session_id: str
    status: SessionStatus
    transcript: str
    summary: str
    segments: Tuple[TranscriptSegment, ...]
    segments_in_sync: bool
    entities: Tuple[MedicalEntity, ...]
    candidate_types: Tuple[ReportType, ...]
    report: Optional[StructuredReport]
    validation: Optional[ValidationResult]
    entity_issues: Tuple[EntityIssue, ...]
    error: Optional[StageFailure]


@dataclass
class ConsultationSession:
    """Mutable aggregate root for one consultation."""

    id: ConsultationId = field(default_factory=ConsultationId.generate)
    status: SessionStatus = SessionStatus.IDLE
    transcript: str = ""
    summary: str = ""
    segments: Tuple[TranscriptSegment, ...] = ()
    # False once the transcript text was edited without re-timing segments
    segments_in_sync: bool = True
    entities: Tuple[MedicalEntity, ...] = ()
    candidate_types: Tuple[ReportType, ...] = ()
    report: Optional[StructuredReport] = None
    validation: Optional[ValidationResult] = None
    entity_issues: Tuple[EntityIssue, ...] = ()
    error: Optional[StageFailure] = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript.strip())

    def transition(self, status: SessionStatus) -> None:
        """Move to ``status``; leaving ERROR clears the recorded failure."""
        self.status = status
        if status is not SessionStatus.ERROR:
            self.error = None
        self.updated_at = _now()

    def fail(self, stage: str, message: str, is_quota: bool = False) -> None:
        self.status = SessionStatus.ERROR
        self.error = StageFailure(stage=stage, message=message, is_quota=is_quota)
        self.updated_at = _now()

    def snapshot(self) -> ProcessingResult:
        return ProcessingResult(
            session_id=str(self.id),
            status=self.status,
            transcript=self.transcript,
            summary=self.summary,
            segments=self.segments,
            segments_in_sync=self.segments_in_sync,
            entities=self.entities,
            candidate_types=self.candidate_types,
            report=self.report,
            validation=self.validation,
            entity_issues=self.entity_issues,
            error=self.error,
        )
