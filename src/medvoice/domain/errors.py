"""
Domain-specific error types for business rule violations.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class EntityIndexError(DomainError):
    """An entity edit referenced a position outside the current list."""

    def __init__(self, index: int, size: int) -> None:
        message = f"Entity index {index} out of range (entities: {size})"
        super().__init__(message, "ENTITY_INDEX_OUT_OF_RANGE", {"index": index, "size": size})


class NoTranscriptError(DomainError):
    """An operation needs a transcript but the session has none yet."""

    def __init__(self, operation: str) -> None:
        message = f"Cannot {operation}: the consultation has no transcript yet"
        super().__init__(message, "NO_TRANSCRIPT", {"operation": operation})


class NoReportError(DomainError):
    """An operation needs a generated report but the session has none."""

    def __init__(self, operation: str) -> None:
        message = f"Cannot {operation}: no document has been generated yet"
        super().__init__(message, "NO_REPORT", {"operation": operation})


class InvalidSessionStateError(DomainError):
    """The session is not in a state that allows the requested operation."""

    def __init__(self, operation: str, status: str) -> None:
        message = f"Cannot {operation} while the consultation is '{status}'"
        super().__init__(
            message, "INVALID_SESSION_STATE", {"operation": operation, "status": status}
        )


class ConsultationResetError(DomainError):
    """In-flight work was discarded because the session was reset."""

    def __init__(self, session_id: str) -> None:
        message = f"Consultation '{session_id}' was reset; results were discarded"
        super().__init__(message, "CONSULTATION_RESET", {"session_id": session_id})


class ConsultationNotFoundError(DomainError):
    """Consultation session not found."""

    def __init__(self, session_id: str) -> None:
        message = f"Consultation with ID '{session_id}' not found"
        super().__init__(message, "CONSULTATION_NOT_FOUND", {"session_id": session_id})
