"""
Exception handling for MedVoice.

This module provides custom exception classes for the infrastructure and
application layers following Clean Architecture principles. Business rule
violations live in ``medvoice.domain.errors``.
"""

from typing import Any, Dict, Optional


class MedVoiceException(Exception):
    """Base exception class for MedVoice."""

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


class ConfigurationError(MedVoiceException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "CONFIG_ERROR", details)


class ExternalServiceError(MedVoiceException):
    """Raised when there's an external service error."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "EXTERNAL_SERVICE_ERROR",
    ) -> None:
        self.service = service
        full_message = f"{service} service error: {message}"
        super().__init__(full_message, error_code, details)


class AIServiceError(ExternalServiceError):
    """Raised when a call to the generative AI service fails."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "AI_SERVICE_ERROR",
    ) -> None:
        super().__init__("AI", message, details, error_code)


class RateLimitExceededError(AIServiceError):
    """Raised when the AI service keeps rejecting calls for quota/rate reasons."""

    def __init__(self, attempts: int, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.attempts = attempts
        super().__init__(
            f"rate limit persisted after {attempts} attempts: {message}",
            {"attempts": attempts, **(details or {})},
            "RATE_LIMIT_EXCEEDED",
        )


class InvalidAudioFormatError(MedVoiceException):
    """Raised when audio format is invalid."""

    def __init__(self, format: str, details: Optional[Dict[str, Any]] = None) -> None:
        message = f"Invalid audio format: {format}"
        super().__init__(message, "INVALID_AUDIO_FORMAT", details)


class InvalidAudioPayloadError(MedVoiceException):
    """Raised when the audio payload is missing, empty or too large."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "INVALID_AUDIO_PAYLOAD", details)


class StageFailedError(MedVoiceException):
    """Raised by the consultation workflow when a pipeline stage fails.

    The session is left in the ERROR state; the original exception is kept on
    ``cause`` (and chained with ``raise ... from``).
    """

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        self.is_quota = isinstance(cause, RateLimitExceededError)
        message = getattr(cause, "message", None) or str(cause) or type(cause).__name__
        super().__init__(
            f"Stage '{stage}' failed: {message}",
            "STAGE_FAILED",
            {"stage": stage, "cause": type(cause).__name__, "is_quota": self.is_quota},
        )
