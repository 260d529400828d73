"""Clinical entity mined from a transcript or entered by the clinician."""

from dataclasses import dataclass, replace
from typing import Optional

from ..enums.clinical import EntityCategory, Provenance


@dataclass(frozen=True)
class MedicalEntity:
    """A categorized fragment of clinical text.

    Provenance records whether the extraction stage or a clinician produced
    the current value; any edit re-stamps it as MANUAL.
    """

    category: EntityCategory
    text: str
    provenance: Provenance = Provenance.AI

    def __post_init__(self) -> None:
        if not isinstance(self.category, EntityCategory):
            raise ValueError(f"Unknown entity category: {self.category!r}")

    @property
    def is_manual(self) -> bool:
        return self.provenance is Provenance.MANUAL

    def edited(
        self, text: Optional[str] = None, category: Optional[EntityCategory] = None
    ) -> "MedicalEntity":
        """Return a clinician-edited copy."""
        return replace(
            self,
            text=self.text if text is None else text,
            category=self.category if category is None else category,
            provenance=Provenance.MANUAL,
        )
