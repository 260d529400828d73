"""
Entity reconciliation between AI extraction and clinician edits.

- Edits are applied to a copy; the input tuple is never modified
- Added and edited entities are stamped MANUAL, list order is insertion order
- The quality pass is advisory only (WARNING/INFO, never ERROR)
- Re-extraction keeps every MANUAL entity and replaces the AI ones
"""

import re
from typing import List, Sequence, Set, Tuple

from ...domain.entities.medical_entity import MedicalEntity
from ...domain.entities.validation import EntityIssue
from ...domain.enums.clinical import EntityCategory, Provenance, ValidationSeverity
from ...domain.errors import EntityIndexError
from ..dto.consultation_dto import AddEntity, EntityEdit, RemoveEntity, UpdateEntity

# Short clinical abbreviations that are meaningful on their own
SHORT_TEXT_ALLOWLIST = frozenset({"tk", "p", "df", "ox", "tt", "ekg", "crp"})
MIN_TEXT_LENGTH = 3

_SYMPTOM_WORDS = re.compile(r"\b(bolest|bolesti|kašel|únava|nevolnost|horečka)\b", re.IGNORECASE)
_COMPLAINT_VERBS = re.compile(r"\b(bolí|pálí|svědí)\b", re.IGNORECASE)


def _check_index(index: int, size: int) -> None:
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < size:
        raise EntityIndexError(index, size)


def apply_entity_edits(
    entities: Sequence[MedicalEntity], edits: Sequence[EntityEdit]
) -> Tuple[MedicalEntity, ...]:
    """
    Apply ``edits`` in order and return the new entity tuple.

    Indices refer to the list as it is when that edit is applied. An invalid
    index raises EntityIndexError and nothing is applied.
    """
    result: List[MedicalEntity] = list(entities)
    for edit in edits:
        if isinstance(edit, AddEntity):
            text = edit.text.strip()
            if not text:
                raise ValueError("Entity text must not be empty")
            result.append(
                MedicalEntity(
                    category=EntityCategory(edit.category),
                    text=text,
                    provenance=Provenance.MANUAL,
                )
            )
        elif isinstance(edit, UpdateEntity):
            _check_index(edit.index, len(result))
            text = None if edit.text is None else edit.text.strip()
            if text is not None and not text:
                raise ValueError("Entity text must not be empty")
            category = None if edit.category is None else EntityCategory(edit.category)
            result[edit.index] = result[edit.index].edited(text=text, category=category)
        elif isinstance(edit, RemoveEntity):
            _check_index(edit.index, len(result))
            del result[edit.index]
        else:
            raise TypeError(f"Unsupported entity edit: {type(edit).__name__}")
    return tuple(result)


def assess_entities(entities: Sequence[MedicalEntity]) -> Tuple[EntityIssue, ...]:
    """Advisory quality findings, each pointing at the entity index it concerns."""
    issues: List[EntityIssue] = []
    seen: Set[str] = set()

    for index, entity in enumerate(entities):
        text = entity.text.strip().lower()

        if len(text) < MIN_TEXT_LENGTH and text not in SHORT_TEXT_ALLOWLIST:
            issues.append(
                EntityIssue(index, "Text entity je příliš krátký a může být šumem.", ValidationSeverity.WARNING)
            )

        if text in seen:
            issues.append(EntityIssue(index, "Duplicitní záznam.", ValidationSeverity.INFO))
        seen.add(text)

        if entity.category is EntityCategory.MEDICATION and _SYMPTOM_WORDS.search(text):
            issues.append(
                EntityIssue(
                    index,
                    "Tento záznam vypadá spíše jako SYMPTOM než MEDIKACE.",
                    ValidationSeverity.WARNING,
                )
            )

        if entity.category is EntityCategory.DIAGNOSIS and _COMPLAINT_VERBS.search(text):
            issues.append(
                EntityIssue(
                    index,
                    "Záznam obsahuje sloveso potíží, pravděpodobně patří do SYMPTOMŮ.",
                    ValidationSeverity.WARNING,
                )
            )

    return tuple(issues)


def merge_extracted_entities(
    current: Sequence[MedicalEntity], extracted: Sequence[MedicalEntity]
) -> Tuple[MedicalEntity, ...]:
    """
    Combine a fresh extraction with the clinician's work.

    MANUAL entities stay verbatim and keep their relative order at the front;
    the new AI entities follow, minus any whose text a MANUAL entity already has.
    """
    manual = [entity for entity in current if entity.is_manual]
    manual_texts = {entity.text.strip().lower() for entity in manual}
    fresh = [
        entity
        for entity in extracted
        if entity.text.strip().lower() not in manual_texts
    ]
    return tuple(manual) + tuple(fresh)
