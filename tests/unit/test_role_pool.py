"""
Unit Tests for the Role Pool Filter

Candidate lists per slot: already-selected exclusion, gender and batch rules.
"""

from uuid import uuid4

import pytest

from gubaye.assignment.draft import (
    FamilyDraft,
    SlotPath,
    StudentRef,
    add_child,
    add_family_unit,
    add_grand_parent,
    assign_slot,
)
from gubaye.assignment.pool import FamilyContext, candidates_for_slot, filter_candidates
from gubaye.assignment.roles import SlotRole


def _student(first_name: str, gender: str = "male", batch: str | None = "2023/2024") -> StudentRef:
    return StudentRef(
        id=uuid4(), first_name=first_name, last_name="Bekele", gender=gender, batch=batch
    )


@pytest.fixture
def students() -> list[StudentRef]:
    return [
        _student("Abel"),
        _student("Biruk", batch="2022/2023"),
        _student("Hana", "female"),
        _student("Meron", "female", batch="2022/2023"),
    ]


class TestGenderRules:
    @pytest.mark.parametrize("role", [SlotRole.GRAND_FATHER, SlotRole.FATHER])
    def test_male_roles(self, students, role):
        result = filter_candidates(role, students, frozenset())
        assert [s.first_name for s in result] == ["Abel", "Biruk"]

    @pytest.mark.parametrize("role", [SlotRole.GRAND_MOTHER, SlotRole.MOTHER])
    def test_female_roles(self, students, role):
        result = filter_candidates(role, students, frozenset())
        assert [s.first_name for s in result] == ["Hana", "Meron"]

    @pytest.mark.parametrize("role", [SlotRole.LEADER, SlotRole.CO_LEADER, SlotRole.SECRETARY])
    def test_leadership_roles_accept_any_gender(self, students, role):
        assert len(filter_candidates(role, students, frozenset())) == 4

    def test_role_accepts_plain_string(self, students):
        result = filter_candidates("mother", students, frozenset())
        assert {s.first_name for s in result} == {"Hana", "Meron"}


class TestSelectedExclusion:
    def test_selected_students_are_excluded(self, students):
        selected = frozenset({students[0].id})
        result = filter_candidates(SlotRole.LEADER, students, selected)
        assert students[0] not in result

    def test_current_occupant_is_retained(self, students):
        selected = frozenset({students[0].id})
        result = filter_candidates(
            SlotRole.LEADER, students, selected, current_slot_student_id=students[0].id
        )
        assert students[0] in result

    def test_current_occupant_still_subject_to_gender(self, students):
        hana = students[2]
        result = filter_candidates(
            SlotRole.FATHER, students, frozenset({hana.id}), current_slot_student_id=hana.id
        )
        assert hana not in result

    def test_duplicate_input_students_appear_once(self, students):
        result = filter_candidates(SlotRole.LEADER, [*students, students[0]], frozenset())
        assert len(result) == 4

    def test_empty_when_nobody_qualifies(self, students):
        selected = frozenset(s.id for s in students)
        assert filter_candidates(SlotRole.SECRETARY, students, selected) == []


class TestBatchRules:
    def test_child_pool_limited_to_family_batch(self, students):
        context = FamilyContext(batch="2023/2024", allow_other_batches=False)
        result = filter_candidates(SlotRole.CHILD, students, frozenset(), family_context=context)
        assert [s.first_name for s in result] == ["Abel", "Hana"]

    def test_allow_other_batches_lifts_restriction(self, students):
        context = FamilyContext(batch="2023/2024", allow_other_batches=True)
        result = filter_candidates(SlotRole.CHILD, students, frozenset(), family_context=context)
        assert len(result) == 4

    def test_unset_family_batch_places_no_restriction(self, students):
        result = filter_candidates(
            SlotRole.CHILD, students, frozenset(), family_context=FamilyContext()
        )
        assert len(result) == 4

    def test_batch_rule_does_not_apply_to_parents(self, students):
        context = FamilyContext(batch="2023/2024")
        result = filter_candidates(SlotRole.FATHER, students, frozenset(), family_context=context)
        assert [s.first_name for s in result] == ["Abel", "Biruk"]


def test_leader_excluded_from_co_leader_but_kept_on_own_slot(students):
    """A student chosen as leader disappears from co-leader but stays on leader."""
    leader = students[0]
    draft = assign_slot(FamilyDraft(), SlotPath.leader(), leader)

    co_leader_pool = candidates_for_slot(draft, SlotPath.co_leader(), students)
    leader_pool = candidates_for_slot(draft, SlotPath.leader(), students)

    assert leader not in co_leader_pool
    assert leader in leader_pool


def test_child_slot_uses_draft_batch(students):
    draft = FamilyDraft(batch="2023/2024")
    draft = add_grand_parent(draft, "Elders", key="gp")
    draft = add_family_unit(draft, "gp", key="u")
    draft = add_child(draft, "gp", "u", key="c")

    pool = candidates_for_slot(draft, SlotPath.child_of("gp", "u", "c"), students)

    # Biruk and Meron are from 2022/2023
    assert {s.first_name for s in pool} == {"Abel", "Hana"}
