"""
Selection registry.

Computes which students are already committed to a slot somewhere in a
family draft. Pure and cheap: safe to recompute on every edit.
"""

from __future__ import annotations

from uuid import UUID

from .draft import FamilyDraft, SlotPath, iter_slots


def compute_selected_ids(draft: FamilyDraft) -> frozenset[UUID]:
    """Every non-null student id occupying any slot of the draft."""
    return frozenset(student.id for _, student in iter_slots(draft) if student is not None)


def slot_index(draft: FamilyDraft) -> dict[UUID, tuple[SlotPath, ...]]:
    """Map each placed student id to the slot path(s) holding it.

    A well-formed draft has exactly one path per id.
    """
    index: dict[UUID, tuple[SlotPath, ...]] = {}
    for path, student in iter_slots(draft):
        if student is not None:
            index[student.id] = (*index.get(student.id, ()), path)
    return index


def duplicate_occupants(draft: FamilyDraft) -> dict[UUID, tuple[SlotPath, ...]]:
    """Students placed in more than one slot, with every path they hold."""
    return {sid: paths for sid, paths in slot_index(draft).items() if len(paths) > 1}
