"""
Consultation ID value object for type-safe session identification.
Format: CONS-<12 lowercase hex chars>
"""

import re
import uuid
from dataclasses import dataclass

_PATTERN = re.compile(r"^CONS-[0-9a-f]{12}$")


@dataclass(frozen=True)
class ConsultationId:
    """Immutable consultation identifier value object."""

    value: str

    def __post_init__(self) -> None:
        """Validate consultation ID format."""
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("Consultation ID cannot be empty")
        if not _PATTERN.match(self.value):
            raise ValueError("Consultation ID must follow format: CONS-<12 hex chars>")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> "ConsultationId":
        """Generate a new random consultation ID."""
        return cls(f"CONS-{uuid.uuid4().hex[:12]}")
