"""
Immutable family draft store.

A `FamilyDraft` is the in-memory, unsaved working copy of a family being
created or edited. Every reducer returns a new draft and leaves its input
untouched, so nested units never share mutable state.

Grandparent units, family units and children carry synthetic keys; a
`SlotPath` built from those keys addresses any single slot in the tree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Any, Protocol
from uuid import UUID, uuid4

from .roles import ChildRelationship, SlotRole


class DraftError(Exception):
    """Base error for draft reducer failures."""

    pass


class SlotNotFoundError(DraftError):
    """Raised when a key or slot path does not exist in the draft."""

    pass


class SlotConflictError(DraftError):
    """Raised when a student is already placed in another slot of the draft."""

    def __init__(self, student_id: UUID, occupied: SlotPath, requested: SlotPath):
        super().__init__(
            f"Student {student_id} already occupies {occupied}; cannot place in {requested}"
        )
        self.student_id = student_id
        self.occupied = occupied
        self.requested = requested


class StudentLike(Protocol):
    """Anything with the student attributes the engine reads (ORM rows included)."""

    id: UUID
    gender: str
    batch: str | None


@dataclass(frozen=True)
class StudentRef:
    """Lightweight student snapshot for drafts built outside a database session."""

    id: UUID
    first_name: str
    last_name: str
    gender: str
    batch: str | None = None
    middle_name: str | None = None
    giby_gubaye_id: str | None = None
    number_of_jobs: int = 0
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.middle_name, self.last_name) if p)


def new_key() -> str:
    return uuid4().hex[:12]


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SlotPath:
    """Address of one slot: a role plus the keys of the enclosing units."""

    role: SlotRole
    grand_parent: str | None = None
    family_unit: str | None = None
    child: str | None = None

    def __str__(self) -> str:
        parts = []
        if self.grand_parent is not None:
            parts.append(f"grandParents[{self.grand_parent}]")
        if self.family_unit is not None:
            parts.append(f"families[{self.family_unit}]")
        if self.child is not None:
            parts.append(f"children[{self.child}]")
        else:
            parts.append(str(self.role))
        return ".".join(parts)

    @classmethod
    def leader(cls) -> SlotPath:
        return cls(SlotRole.LEADER)

    @classmethod
    def co_leader(cls) -> SlotPath:
        return cls(SlotRole.CO_LEADER)

    @classmethod
    def secretary(cls) -> SlotPath:
        return cls(SlotRole.SECRETARY)

    @classmethod
    def grand_father(cls, gp: str) -> SlotPath:
        return cls(SlotRole.GRAND_FATHER, gp)

    @classmethod
    def grand_mother(cls, gp: str) -> SlotPath:
        return cls(SlotRole.GRAND_MOTHER, gp)

    @classmethod
    def father(cls, gp: str, unit: str) -> SlotPath:
        return cls(SlotRole.FATHER, gp, unit)

    @classmethod
    def mother(cls, gp: str, unit: str) -> SlotPath:
        return cls(SlotRole.MOTHER, gp, unit)

    @classmethod
    def child_of(cls, gp: str, unit: str, child: str) -> SlotPath:
        return cls(SlotRole.CHILD, gp, unit, child)


@dataclass(frozen=True)
class ParentSlot:
    """Father or mother of a family unit, with optional contact overrides."""

    student: StudentLike | None = None
    phone: str | None = None
    email: str | None = None
    occupation: str | None = None


@dataclass(frozen=True)
class ChildDraft:
    key: str
    student: StudentLike | None = None
    relationship: ChildRelationship = ChildRelationship.SON
    birth_order: int | None = None
    added_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class FamilyUnitDraft:
    key: str
    father: ParentSlot = field(default_factory=ParentSlot)
    mother: ParentSlot = field(default_factory=ParentSlot)
    children: tuple[ChildDraft, ...] = ()
    created_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class GrandParentDraft:
    key: str
    title: str = ""
    grand_father: StudentLike | None = None
    grand_mother: StudentLike | None = None
    family_units: tuple[FamilyUnitDraft, ...] = ()


@dataclass(frozen=True)
class FamilyDraft:
    title: str = ""
    location: str = ""
    batch: str = ""
    allow_other_batches: bool = False
    family_date: date | None = None
    family_leader: StudentLike | None = None
    family_co_leader: StudentLike | None = None
    family_secretary: StudentLike | None = None
    grand_parents: tuple[GrandParentDraft, ...] = ()

    def grand_parent(self, key: str) -> GrandParentDraft:
        for gp in self.grand_parents:
            if gp.key == key:
                return gp
        raise SlotNotFoundError(f"No grandparent unit with key {key!r}")

    def family_unit(self, gp_key: str, unit_key: str) -> FamilyUnitDraft:
        for unit in self.grand_parent(gp_key).family_units:
            if unit.key == unit_key:
                return unit
        raise SlotNotFoundError(f"No family unit with key {unit_key!r} under {gp_key!r}")


HEADER_FIELDS = frozenset({"title", "location", "batch", "allow_other_batches", "family_date"})

_LEADER_FIELDS = {
    SlotRole.LEADER: "family_leader",
    SlotRole.CO_LEADER: "family_co_leader",
    SlotRole.SECRETARY: "family_secretary",
}


# ============================================================================
# Slot traversal
# ============================================================================


def iter_slots(draft: FamilyDraft) -> Iterator[tuple[SlotPath, StudentLike | None]]:
    """Yield every slot in the draft with its occupant (None when unset)."""
    for role, attr in _LEADER_FIELDS.items():
        yield SlotPath(role), getattr(draft, attr)

    for gp in draft.grand_parents:
        yield SlotPath.grand_father(gp.key), gp.grand_father
        yield SlotPath.grand_mother(gp.key), gp.grand_mother
        for unit in gp.family_units:
            yield SlotPath.father(gp.key, unit.key), unit.father.student
            yield SlotPath.mother(gp.key, unit.key), unit.mother.student
            for child in unit.children:
                yield SlotPath.child_of(gp.key, unit.key, child.key), child.student


def slot_occupant(draft: FamilyDraft, path: SlotPath) -> StudentLike | None:
    """Return the student in one slot; raises SlotNotFoundError for bad paths."""
    if path.role.is_leadership:
        return getattr(draft, _LEADER_FIELDS[path.role])

    gp = draft.grand_parent(_require(path.grand_parent, path))
    if path.role is SlotRole.GRAND_FATHER:
        return gp.grand_father
    if path.role is SlotRole.GRAND_MOTHER:
        return gp.grand_mother

    unit = draft.family_unit(gp.key, _require(path.family_unit, path))
    if path.role is SlotRole.FATHER:
        return unit.father.student
    if path.role is SlotRole.MOTHER:
        return unit.mother.student

    child_key = _require(path.child, path)
    for child in unit.children:
        if child.key == child_key:
            return child.student
    raise SlotNotFoundError(f"No child with key {child_key!r} in {unit.key!r}")


def _require(key: str | None, path: SlotPath) -> str:
    if key is None:
        raise SlotNotFoundError(f"Incomplete slot path: {path}")
    return key


# ============================================================================
# Reducers
# ============================================================================


def with_header(draft: FamilyDraft, **changes: Any) -> FamilyDraft:
    """Update title/location/batch/allow_other_batches/family_date."""
    unknown = set(changes) - HEADER_FIELDS
    if unknown:
        raise DraftError(f"Not a header field: {', '.join(sorted(unknown))}")
    return replace(draft, **changes)


def add_grand_parent(draft: FamilyDraft, title: str = "", *, key: str | None = None) -> FamilyDraft:
    gp = GrandParentDraft(key=key or new_key(), title=title)
    return replace(draft, grand_parents=(*draft.grand_parents, gp))


def remove_grand_parent(draft: FamilyDraft, gp_key: str) -> FamilyDraft:
    draft.grand_parent(gp_key)
    return replace(draft, grand_parents=tuple(g for g in draft.grand_parents if g.key != gp_key))


def set_grand_parent_title(draft: FamilyDraft, gp_key: str, title: str) -> FamilyDraft:
    return _update_grand_parent(draft, gp_key, lambda gp: replace(gp, title=title))


def add_family_unit(draft: FamilyDraft, gp_key: str, *, key: str | None = None) -> FamilyDraft:
    unit = FamilyUnitDraft(key=key or new_key())
    return _update_grand_parent(
        draft, gp_key, lambda gp: replace(gp, family_units=(*gp.family_units, unit))
    )


def remove_family_unit(draft: FamilyDraft, gp_key: str, unit_key: str) -> FamilyDraft:
    draft.family_unit(gp_key, unit_key)
    return _update_grand_parent(
        draft,
        gp_key,
        lambda gp: replace(
            gp, family_units=tuple(u for u in gp.family_units if u.key != unit_key)
        ),
    )


def add_child(
    draft: FamilyDraft,
    gp_key: str,
    unit_key: str,
    *,
    key: str | None = None,
    relationship: ChildRelationship = ChildRelationship.SON,
) -> FamilyDraft:
    """Append an empty child slot; birth order defaults to the next position."""

    def _add(unit: FamilyUnitDraft) -> FamilyUnitDraft:
        child = ChildDraft(
            key=key or new_key(),
            relationship=relationship,
            birth_order=len(unit.children) + 1,
        )
        return replace(unit, children=(*unit.children, child))

    return _update_family_unit(draft, gp_key, unit_key, _add)


def remove_child(draft: FamilyDraft, gp_key: str, unit_key: str, child_key: str) -> FamilyDraft:
    def _remove(unit: FamilyUnitDraft) -> FamilyUnitDraft:
        if not any(c.key == child_key for c in unit.children):
            raise SlotNotFoundError(f"No child with key {child_key!r} in {unit_key!r}")
        return replace(unit, children=tuple(c for c in unit.children if c.key != child_key))

    return _update_family_unit(draft, gp_key, unit_key, _remove)


def set_child_details(
    draft: FamilyDraft,
    path: SlotPath,
    *,
    relationship: ChildRelationship | None = None,
    birth_order: int | None = None,
) -> FamilyDraft:
    if path.role is not SlotRole.CHILD:
        raise DraftError(f"{path} is not a child slot")
    changes: dict[str, Any] = {}
    if relationship is not None:
        changes["relationship"] = ChildRelationship(relationship)
    if birth_order is not None:
        changes["birth_order"] = birth_order
    return _update_child(draft, path, lambda c: replace(c, **changes))


def set_parent_contact(
    draft: FamilyDraft,
    path: SlotPath,
    *,
    phone: str | None = None,
    email: str | None = None,
    occupation: str | None = None,
) -> FamilyDraft:
    """Set the father/mother override fields carried into the saved family."""
    if path.role not in (SlotRole.FATHER, SlotRole.MOTHER):
        raise DraftError(f"{path} is not a parent slot")
    attr = "father" if path.role is SlotRole.FATHER else "mother"

    def _set(unit: FamilyUnitDraft) -> FamilyUnitDraft:
        slot = replace(getattr(unit, attr), phone=phone, email=email, occupation=occupation)
        return replace(unit, **{attr: slot})

    return _update_family_unit(
        draft, _require(path.grand_parent, path), _require(path.family_unit, path), _set
    )


def assign_slot(draft: FamilyDraft, path: SlotPath, student: StudentLike) -> FamilyDraft:
    """Place a student in a slot.

    Raises SlotConflictError if the student already occupies a different slot.
    Re-assigning a student to the slot they already hold is a no-op.
    """
    slot_occupant(draft, path)
    for other, occupant in iter_slots(draft):
        if occupant is not None and occupant.id == student.id and other != path:
            raise SlotConflictError(student.id, other, path)
    return _set_slot(draft, path, student)


def clear_slot(draft: FamilyDraft, path: SlotPath) -> FamilyDraft:
    slot_occupant(draft, path)
    return _set_slot(draft, path, None)


def _set_slot(draft: FamilyDraft, path: SlotPath, student: StudentLike | None) -> FamilyDraft:
    role = path.role
    if role.is_leadership:
        return replace(draft, **{_LEADER_FIELDS[role]: student})

    gp_key = _require(path.grand_parent, path)
    if role is SlotRole.GRAND_FATHER:
        return _update_grand_parent(draft, gp_key, lambda gp: replace(gp, grand_father=student))
    if role is SlotRole.GRAND_MOTHER:
        return _update_grand_parent(draft, gp_key, lambda gp: replace(gp, grand_mother=student))

    unit_key = _require(path.family_unit, path)
    if role is SlotRole.FATHER:
        return _update_family_unit(
            draft, gp_key, unit_key, lambda u: replace(u, father=replace(u.father, student=student))
        )
    if role is SlotRole.MOTHER:
        return _update_family_unit(
            draft, gp_key, unit_key, lambda u: replace(u, mother=replace(u.mother, student=student))
        )
    return _update_child(draft, path, lambda c: replace(c, student=student))


def _update_grand_parent(
    draft: FamilyDraft, gp_key: str, fn: Callable[[GrandParentDraft], GrandParentDraft]
) -> FamilyDraft:
    draft.grand_parent(gp_key)
    return replace(
        draft,
        grand_parents=tuple(fn(gp) if gp.key == gp_key else gp for gp in draft.grand_parents),
    )


def _update_family_unit(
    draft: FamilyDraft,
    gp_key: str,
    unit_key: str,
    fn: Callable[[FamilyUnitDraft], FamilyUnitDraft],
) -> FamilyDraft:
    draft.family_unit(gp_key, unit_key)
    return _update_grand_parent(
        draft,
        gp_key,
        lambda gp: replace(
            gp,
            family_units=tuple(fn(u) if u.key == unit_key else u for u in gp.family_units),
        ),
    )


def _update_child(
    draft: FamilyDraft, path: SlotPath, fn: Callable[[ChildDraft], ChildDraft]
) -> FamilyDraft:
    child_key = _require(path.child, path)

    def _apply(unit: FamilyUnitDraft) -> FamilyUnitDraft:
        if not any(c.key == child_key for c in unit.children):
            raise SlotNotFoundError(f"No child with key {child_key!r} in {unit.key!r}")
        return replace(
            unit, children=tuple(fn(c) if c.key == child_key else c for c in unit.children)
        )

    return _update_family_unit(
        draft, _require(path.grand_parent, path), _require(path.family_unit, path), _apply
    )


# ============================================================================
# Building drafts from stored or submitted data
# ============================================================================


def draft_from_family(family: Any) -> FamilyDraft:
    """Build a draft from a fully loaded Family ORM row (edit dialog opening)."""
    return FamilyDraft(
        title=family.title,
        location=family.location,
        batch=family.batch,
        allow_other_batches=family.allow_other_batches,
        family_date=family.family_date,
        family_leader=family.family_leader,
        family_co_leader=family.family_co_leader,
        family_secretary=family.family_secretary,
        grand_parents=tuple(
            GrandParentDraft(
                key=str(gp.id),
                title=gp.title,
                grand_father=gp.grand_father,
                grand_mother=gp.grand_mother,
                family_units=tuple(
                    FamilyUnitDraft(
                        key=str(unit.id),
                        father=ParentSlot(
                            unit.father,
                            unit.father_phone,
                            unit.father_email,
                            unit.father_occupation,
                        ),
                        mother=ParentSlot(
                            unit.mother,
                            unit.mother_phone,
                            unit.mother_email,
                            unit.mother_occupation,
                        ),
                        children=tuple(
                            ChildDraft(
                                key=str(child.id),
                                student=child.student,
                                relationship=ChildRelationship(child.relationship_type),
                                birth_order=child.birth_order,
                                added_at=child.added_at,
                            )
                            for child in unit.children
                        ),
                        created_at=unit.created_at,
                    )
                    for unit in gp.family_units
                ),
            )
            for gp in family.grand_parents
        ),
    )


def referenced_student_ids(payload: Any) -> set[UUID]:
    """Collect every student id an id-reference payload mentions."""
    ids = {
        payload.family_leader,
        payload.family_co_leader,
        payload.family_secretary,
    }
    for gp in payload.grand_parents:
        ids.update((gp.grand_father, gp.grand_mother))
        for unit in gp.families:
            ids.update((unit.father.student, unit.mother.student))
            ids.update(child.student for child in unit.children)
    ids.discard(None)
    return ids  # type: ignore[return-value]


def draft_from_payload(payload: Any, students: Mapping[UUID, StudentLike]) -> FamilyDraft:
    """Hydrate an id-reference payload into a draft.

    Ids missing from `students` raise KeyError; callers resolve all ids from
    `referenced_student_ids` first.
    """

    def _student(student_id: UUID | None) -> StudentLike | None:
        return None if student_id is None else students[student_id]

    def _parent(parent: Any) -> ParentSlot:
        return ParentSlot(
            student=_student(parent.student),
            phone=parent.phone,
            email=parent.email,
            occupation=parent.occupation,
        )

    grand_parents = []
    for gp in payload.grand_parents:
        units = []
        for unit in gp.families:
            children = tuple(
                ChildDraft(
                    key=new_key(),
                    student=_student(child.student),
                    relationship=ChildRelationship(child.relationship),
                    birth_order=child.birth_order if child.birth_order is not None else index,
                )
                for index, child in enumerate(unit.children, start=1)
            )
            units.append(
                FamilyUnitDraft(
                    key=new_key(),
                    father=_parent(unit.father),
                    mother=_parent(unit.mother),
                    children=children,
                )
            )
        grand_parents.append(
            GrandParentDraft(
                key=new_key(),
                title=gp.title,
                grand_father=_student(gp.grand_father),
                grand_mother=_student(gp.grand_mother),
                family_units=tuple(units),
            )
        )

    return FamilyDraft(
        title=payload.title,
        location=payload.location,
        batch=payload.batch,
        allow_other_batches=payload.allow_other_batches,
        family_date=payload.family_date,
        family_leader=_student(payload.family_leader),
        family_co_leader=_student(payload.family_co_leader),
        family_secretary=_student(payload.family_secretary),
        grand_parents=tuple(grand_parents),
    )
