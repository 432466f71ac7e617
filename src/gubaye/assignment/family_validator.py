"""
Family tree validator.

Runs the submit-time checks over a family draft, in a fixed order where the
first failing rule wins:

1. Title, location, batch and all three leaders are set
2. Every grandparent unit has a title and at least one grandparent
3. Every family unit has a father and a mother (and no empty child slots)
4. No student occupies more than one slot
5. Children belong to the family batch unless other batches are allowed
6. Parental slots hold students of the matching gender

On success the draft is projected to the id-reference write model.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as SchemaValidationError

from gubaye.core.schemas.families import (
    ChildWrite,
    FamilyUnitWrite,
    FamilyWrite,
    GrandParentWrite,
    ParentWrite,
)

from .draft import FamilyDraft, ParentSlot, iter_slots, slot_occupant
from .pool import FamilyContext
from .registry import duplicate_occupants
from .results import Invalid, InvalidCode, Ok

REQUIRED_FIELDS_MESSAGE = "Please fill all required fields: Title, Location, Batch, and all Leaders"


def validate(
    draft: FamilyDraft, *, block_batch_mismatch: bool = True
) -> Ok[FamilyWrite] | Invalid:
    """Validate a family draft and project it for persistence.

    Args:
        draft: The in-progress family
        block_batch_mismatch: Reject out-of-batch children (True) or only
            report them as warnings on the Ok result (False)

    Returns:
        Ok(FamilyWrite) with any warnings, or Invalid with the first failure
    """
    for check in (
        _check_required_fields,
        _check_grand_parents,
        _check_family_units,
        _check_duplicates,
    ):
        failure = check(draft)
        if failure is not None:
            return failure

    mismatches = _batch_mismatches(draft)
    if mismatches and block_batch_mismatch:
        return Invalid(InvalidCode.BATCH_MISMATCH, mismatches[0])

    failure = _check_genders(draft)
    if failure is not None:
        return failure

    try:
        payload = project(draft)
    except SchemaValidationError as e:
        return Invalid(InvalidCode.MISSING_FIELD, _first_schema_error(e))

    return Ok(payload, warnings=tuple(mismatches))


def _check_required_fields(draft: FamilyDraft) -> Invalid | None:
    header = (draft.title.strip(), draft.location.strip(), draft.batch.strip())
    leaders = (draft.family_leader, draft.family_co_leader, draft.family_secretary)
    if not all(header) or any(leader is None for leader in leaders):
        return Invalid(InvalidCode.MISSING_FIELD, REQUIRED_FIELDS_MESSAGE)
    return None


def _check_grand_parents(draft: FamilyDraft) -> Invalid | None:
    for gp in draft.grand_parents:
        if not gp.title.strip():
            return Invalid(InvalidCode.GRAND_PARENT_TITLE, "Grand parent title is required")
        if gp.grand_father is None and gp.grand_mother is None:
            return Invalid(
                InvalidCode.GRAND_PARENT_MISSING,
                "At least one of grand father or grand mother is required",
            )
    return None


def _check_family_units(draft: FamilyDraft) -> Invalid | None:
    for gp in draft.grand_parents:
        for unit in gp.family_units:
            if unit.father.student is None:
                return Invalid(InvalidCode.PARENT_MISSING, "Father is required for all families")
            if unit.mother.student is None:
                return Invalid(InvalidCode.PARENT_MISSING, "Mother is required for all families")
            if any(child.student is None for child in unit.children):
                return Invalid(
                    InvalidCode.MISSING_FIELD,
                    "Select a student for every child or remove the empty child slot",
                )
    return None


def _check_duplicates(draft: FamilyDraft) -> Invalid | None:
    duplicates = duplicate_occupants(draft)
    if not duplicates:
        return None
    student_id, paths = next(iter(duplicates.items()))
    name = _student_name(slot_occupant(draft, paths[0])) or str(student_id)
    where = ", ".join(str(p) for p in paths)
    return Invalid(
        InvalidCode.DUPLICATE_STUDENT,
        f"{name} is assigned to more than one slot ({where})",
    )


def _batch_mismatches(draft: FamilyDraft) -> list[str]:
    context = FamilyContext.from_draft(draft)
    messages = []
    for gp in draft.grand_parents:
        for unit in gp.family_units:
            for child in unit.children:
                student = child.student
                if student is not None and not context.accepts_batch(student.batch):
                    messages.append(
                        f"{_student_name(student) or student.id} belongs to batch "
                        f"{student.batch or 'none'}, not the family batch {draft.batch}"
                    )
    return messages


def _check_genders(draft: FamilyDraft) -> Invalid | None:
    for path, student in iter_slots(draft):
        required = path.role.required_gender
        if student is not None and required is not None and student.gender != required:
            return Invalid(
                InvalidCode.GENDER_MISMATCH,
                f"{_student_name(student) or student.id} cannot be {path.role} "
                f"(requires {required})",
            )
    return None


def project(draft: FamilyDraft) -> FamilyWrite:
    """Reduce embedded students to id references (write model)."""

    def _parent(slot: ParentSlot) -> ParentWrite:
        return ParentWrite(
            student=slot.student.id,  # type: ignore[union-attr]
            phone=slot.phone,
            email=slot.email,
            occupation=slot.occupation,
        )

    return FamilyWrite(
        title=draft.title.strip(),
        location=draft.location.strip(),
        batch=draft.batch,
        allow_other_batches=draft.allow_other_batches,
        family_date=draft.family_date,
        family_leader=draft.family_leader.id,  # type: ignore[union-attr]
        family_co_leader=draft.family_co_leader.id,  # type: ignore[union-attr]
        family_secretary=draft.family_secretary.id,  # type: ignore[union-attr]
        grand_parents=[
            GrandParentWrite(
                title=gp.title.strip(),
                grand_father=gp.grand_father.id if gp.grand_father else None,
                grand_mother=gp.grand_mother.id if gp.grand_mother else None,
                families=[
                    FamilyUnitWrite(
                        father=_parent(unit.father),
                        mother=_parent(unit.mother),
                        children=[
                            ChildWrite(
                                student=child.student.id,  # type: ignore[union-attr]
                                relationship=child.relationship,
                                birth_order=child.birth_order,
                            )
                            for child in unit.children
                        ],
                    )
                    for unit in gp.family_units
                ],
            )
            for gp in draft.grand_parents
        ],
    )


def _student_name(student: Any) -> str:
    return getattr(student, "full_name", "") or ""


def _first_schema_error(error: SchemaValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first["msg"]
