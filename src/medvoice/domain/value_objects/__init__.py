"""
Value objects package for domain layer.
"""

from .consultation_id import ConsultationId

__all__ = [
    "ConsultationId",
]
