"""
API schemas package.
"""

# Common schemas
from .common import ApiResponse, ErrorResponse

# Consultation schemas
from .consultation import (
    AssistantRequest,
    AssistantResponse,
    ConsultationOut,
    CreateConsultationRequest,
    EntityEditIn,
    EntityIssueOut,
    EntityOut,
    RegenerateRequest,
    ReportOut,
    SegmentOut,
    StageFailureOut,
    UpdateEntitiesRequest,
    UpdateReportRequest,
    UpdateTranscriptRequest,
    ValidateRequest,
    ValidationIssueOut,
    ValidationOut,
    to_consultation_out,
    to_validation_out,
)

__all__ = [
    # Common
    "ApiResponse",
    "ErrorResponse",

    # Consultation
    "AssistantRequest",
    "AssistantResponse",
    "ConsultationOut",
    "CreateConsultationRequest",
    "EntityEditIn",
    "EntityIssueOut",
    "EntityOut",
    "RegenerateRequest",
    "ReportOut",
    "SegmentOut",
    "StageFailureOut",
    "UpdateEntitiesRequest",
    "UpdateReportRequest",
    "UpdateTranscriptRequest",
    "ValidateRequest",
    "ValidationIssueOut",
    "ValidationOut",
    "to_consultation_out",
    "to_validation_out",
]
