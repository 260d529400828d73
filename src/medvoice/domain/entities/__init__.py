"""
Domain entities package.
"""

from .consultation import ConsultationSession, ProcessingResult, StageFailure
from .medical_entity import MedicalEntity
from .transcript import TranscriptSegment, TranscriptionResult, render_transcript
from .validation import EntityIssue, ValidationIssue, ValidationResult

__all__ = [
    "ConsultationSession",
    "ProcessingResult",
    "StageFailure",
    "MedicalEntity",
    "TranscriptSegment",
    "TranscriptionResult",
    "render_transcript",
    "EntityIssue",
    "ValidationIssue",
    "ValidationResult",
]
