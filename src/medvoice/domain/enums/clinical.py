"""
Clinical vocabulary and workflow status enums.
"""

from enum import Enum


class Speaker(str, Enum):
    """Diarized speaker labels as they appear in the rendered transcript."""
    DOCTOR = "Lékař"
    PATIENT = "Pacient"
    NURSE = "Sestra"


class EntityCategory(str, Enum):
    """Categories of clinical entities mined from a transcript."""
    DIAGNOSIS = "DIAGNOSIS"
    MEDICATION = "MEDICATION"
    SYMPTOM = "SYMPTOM"
    PII = "PII"
    OTHER = "OTHER"


class Provenance(str, Enum):
    """Who produced an entity: the extraction stage or the clinician."""
    AI = "AI"
    MANUAL = "MANUAL"


class ReportType(str, Enum):
    """Closed set of structured document types."""
    AMBULATORY_RECORD = "AMBULANTNI_ZAZNAM"
    NURSING_RECORD = "OSETR_ZAZNAM"
    CONSULT_REQUEST = "KONZILIARNI_ZPRAVA"
    VISIT_CONFIRMATION = "POTVRZENI_VYSETRENI"
    TREATMENT_RECOMMENDATION = "DOPORUCENI_LECBY"


# Classification always includes this type.
BASELINE_REPORT_TYPE = ReportType.AMBULATORY_RECORD


class ValidationSeverity(str, Enum):
    """Severity of a validation or entity quality finding."""
    ERROR = "ERROR"      # marks the document as incomplete
    WARNING = "WARNING"  # advisory
    INFO = "INFO"


class ModelTier(str, Enum):
    """Capability/latency tier requested from the AI service."""
    FAST = "fast"
    DEEP = "deep"


class SessionStatus(str, Enum):
    """Consultation session lifecycle."""
    IDLE = "idle"
    PROCESSING_AUDIO = "processing_audio"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    REVIEW = "review"
    ERROR = "error"
