"""
Entity edits, quality findings and merging with fresh extraction.
"""

import pytest

from medvoice.application.dto.consultation_dto import AddEntity, RemoveEntity, UpdateEntity
from medvoice.application.utils.entity_reconciliation import (
    apply_entity_edits,
    assess_entities,
    merge_extracted_entities,
)
from medvoice.domain.entities.medical_entity import MedicalEntity
from medvoice.domain.enums.clinical import EntityCategory, Provenance, ValidationSeverity
from medvoice.domain.errors import EntityIndexError

AI_ENTITIES = (
    MedicalEntity(EntityCategory.SYMPTOM, "bolest hlavy"),
    MedicalEntity(EntityCategory.MEDICATION, "Paralen 500 mg"),
)


def test_medication_that_looks_like_a_symptom_is_a_warning():
    entities = (
        MedicalEntity(EntityCategory.SYMPTOM, "horečka"),
        MedicalEntity(EntityCategory.MEDICATION, "bolest"),
    )
    issues = assess_entities(entities)

    assert [(i.index, i.severity) for i in issues] == [(1, ValidationSeverity.WARNING)]
    assert all(i.severity is not ValidationSeverity.ERROR for i in issues)


def test_quality_findings():
    entities = (
        MedicalEntity(EntityCategory.OTHER, "x"),
        MedicalEntity(EntityCategory.OTHER, "TK"),
        MedicalEntity(EntityCategory.DIAGNOSIS, "bolí ho v krku"),
        MedicalEntity(EntityCategory.SYMPTOM, "kašel"),
        MedicalEntity(EntityCategory.SYMPTOM, "Kašel"),
    )
    issues = assess_entities(entities)

    assert [(i.index, i.severity) for i in issues] == [
        (0, ValidationSeverity.WARNING),
        (2, ValidationSeverity.WARNING),
        (4, ValidationSeverity.INFO),
    ]


def test_add_update_remove_stamp_manual_provenance():
    result = apply_entity_edits(
        AI_ENTITIES,
        [
            AddEntity(EntityCategory.DIAGNOSIS, " R51 Bolest hlavy "),
            UpdateEntity(index=1, text="Paralen 500 mg 1-0-1"),
            RemoveEntity(index=0),
        ],
    )

    assert result == (
        MedicalEntity(EntityCategory.MEDICATION, "Paralen 500 mg 1-0-1", Provenance.MANUAL),
        MedicalEntity(EntityCategory.DIAGNOSIS, "R51 Bolest hlavy", Provenance.MANUAL),
    )
    # Input is never modified
    assert AI_ENTITIES[1].provenance is Provenance.AI


def test_category_only_update_keeps_text():
    result = apply_entity_edits(AI_ENTITIES, [UpdateEntity(index=0, category=EntityCategory.DIAGNOSIS)])
    assert result[0] == MedicalEntity(EntityCategory.DIAGNOSIS, "bolest hlavy", Provenance.MANUAL)


@pytest.mark.parametrize("edit", [UpdateEntity(index=2, text="x"), RemoveEntity(index=-1), RemoveEntity(index=5)])
def test_out_of_range_index_raises(edit):
    with pytest.raises(EntityIndexError):
        apply_entity_edits(AI_ENTITIES, [edit])


def test_empty_text_is_rejected():
    with pytest.raises(ValueError):
        apply_entity_edits(AI_ENTITIES, [AddEntity(EntityCategory.SYMPTOM, "   ")])


def test_merge_keeps_manual_entities_first_and_verbatim():
    manual = MedicalEntity(EntityCategory.MEDICATION, "Ibalgin 400 mg", Provenance.MANUAL)
    current = (AI_ENTITIES[0], manual)
    extracted = (
        MedicalEntity(EntityCategory.MEDICATION, "ibalgin 400 mg"),
        MedicalEntity(EntityCategory.SYMPTOM, "závrať"),
    )

    merged = merge_extracted_entities(current, extracted)

    assert merged == (manual, MedicalEntity(EntityCategory.SYMPTOM, "závrať"))
