"""
Role pool filter.

Builds the candidate list for one slot: all known students, minus the ones
already placed elsewhere in the draft, narrowed by gender for parental
roles and by batch for children.
"""

from __future__ import annotations

from collections.abc import Iterable, Set
from dataclasses import dataclass
from typing import TypeVar
from uuid import UUID

from .draft import FamilyDraft, SlotPath, StudentLike, slot_occupant
from .registry import compute_selected_ids
from .roles import SlotRole

S = TypeVar("S", bound=StudentLike)


@dataclass(frozen=True)
class FamilyContext:
    """Family-level settings that affect candidate pools."""

    batch: str = ""
    allow_other_batches: bool = False

    @classmethod
    def from_draft(cls, draft: FamilyDraft) -> FamilyContext:
        return cls(batch=draft.batch, allow_other_batches=draft.allow_other_batches)

    def accepts_batch(self, batch: str | None) -> bool:
        """Children must share the family batch unless other batches are allowed.

        An unset family batch places no restriction yet.
        """
        if self.allow_other_batches or not self.batch:
            return True
        return batch == self.batch


def filter_candidates(
    role: SlotRole | str,
    all_students: Iterable[S],
    selected_ids: Set[UUID],
    current_slot_student_id: UUID | None = None,
    family_context: FamilyContext | None = None,
) -> list[S]:
    """Candidates for a slot of the given role.

    The slot's current occupant survives the "already selected" exclusion so
    the existing choice stays visible; gender and batch rules still apply to
    everyone. Returns an empty list when nobody qualifies.
    """
    role = SlotRole(role)
    context = family_context or FamilyContext()
    required_gender = role.required_gender

    candidates: list[S] = []
    seen: set[UUID] = set()
    for student in all_students:
        if student.id in seen:
            continue
        if student.id != current_slot_student_id and student.id in selected_ids:
            continue
        if required_gender is not None and student.gender != required_gender:
            continue
        if role is SlotRole.CHILD and not context.accepts_batch(student.batch):
            continue
        seen.add(student.id)
        candidates.append(student)
    return candidates


def candidates_for_slot(
    draft: FamilyDraft, path: SlotPath, all_students: Iterable[S]
) -> list[S]:
    """Run the registry and the filter for one concrete slot of a draft."""
    occupant = slot_occupant(draft, path)
    return filter_candidates(
        path.role,
        all_students,
        compute_selected_ids(draft),
        occupant.id if occupant is not None else None,
        FamilyContext.from_draft(draft),
    )
