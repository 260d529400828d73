"""Validation findings for documents and entity lists."""

from dataclasses import dataclass
from typing import Tuple

from ..enums.clinical import ValidationSeverity


@dataclass(frozen=True)
class ValidationIssue:
    """A finding against one document field (dotted path, e.g. ``diagnoza[0].kod``)."""

    field: str
    message: str
    severity: ValidationSeverity


@dataclass(frozen=True)
class ValidationResult:
    issues: Tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        """True when no ERROR-severity issue is present."""
        return not any(issue.severity is ValidationSeverity.ERROR for issue in self.issues)

    @property
    def errors(self) -> Tuple[ValidationIssue, ...]:
        return tuple(i for i in self.issues if i.severity is ValidationSeverity.ERROR)

    @property
    def warnings(self) -> Tuple[ValidationIssue, ...]:
        return tuple(i for i in self.issues if i.severity is ValidationSeverity.WARNING)


@dataclass(frozen=True)
class EntityIssue:
    """Advisory quality finding against the entity at ``index``."""

    index: int
    message: str
    severity: ValidationSeverity
