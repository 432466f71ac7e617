"""
Unit Tests for the Family Draft Store

Reducers return new drafts and never place a student twice.
"""

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest

from gubaye.assignment.draft import (
    DraftError,
    FamilyDraft,
    SlotConflictError,
    SlotNotFoundError,
    SlotPath,
    StudentRef,
    add_child,
    add_family_unit,
    add_grand_parent,
    assign_slot,
    clear_slot,
    draft_from_family,
    draft_from_payload,
    referenced_student_ids,
    remove_child,
    remove_family_unit,
    remove_grand_parent,
    set_child_details,
    slot_occupant,
    with_header,
)
from gubaye.assignment.roles import ChildRelationship, SlotRole
from gubaye.core.schemas import FamilyDraftIn


def _student(first_name: str = "Dawit", gender: str = "male") -> StudentRef:
    return StudentRef(id=uuid4(), first_name=first_name, last_name="Alemu", gender=gender)


@pytest.fixture
def tree() -> FamilyDraft:
    draft = add_grand_parent(FamilyDraft(), "Elders", key="gp")
    return add_family_unit(draft, "gp", key="u")


class TestReducers:
    def test_reducers_do_not_mutate_input(self, tree):
        before = tree
        after = add_child(tree, "gp", "u", key="c")

        assert before.family_unit("gp", "u").children == ()
        assert len(after.family_unit("gp", "u").children) == 1

    def test_with_header_rejects_unknown_field(self):
        with pytest.raises(DraftError):
            with_header(FamilyDraft(), family_leader=_student())

    def test_add_child_defaults(self, tree):
        draft = add_child(tree, "gp", "u", key="c1")
        draft = add_child(draft, "gp", "u", key="c2")

        children = draft.family_unit("gp", "u").children
        assert [c.birth_order for c in children] == [1, 2]
        assert all(c.relationship is ChildRelationship.SON for c in children)
        assert all(c.student is None for c in children)

    def test_set_child_details(self, tree):
        draft = add_child(tree, "gp", "u", key="c")
        path = SlotPath.child_of("gp", "u", "c")

        draft = set_child_details(draft, path, relationship="daughter", birth_order=3)

        child = draft.family_unit("gp", "u").children[0]
        assert child.relationship is ChildRelationship.DAUGHTER
        assert child.birth_order == 3

    def test_remove_child(self, tree):
        draft = add_child(tree, "gp", "u", key="c")
        draft = remove_child(draft, "gp", "u", "c")
        assert draft.family_unit("gp", "u").children == ()

    def test_remove_family_unit_frees_its_students(self, tree):
        father = _student()
        draft = assign_slot(tree, SlotPath.father("gp", "u"), father)
        draft = remove_family_unit(draft, "gp", "u")

        # The student can now be placed elsewhere
        draft = assign_slot(draft, SlotPath.leader(), father)
        assert draft.family_leader is father

    def test_remove_grand_parent(self, tree):
        assert remove_grand_parent(tree, "gp").grand_parents == ()

    def test_unknown_keys_raise(self, tree):
        with pytest.raises(SlotNotFoundError):
            remove_grand_parent(tree, "missing")
        with pytest.raises(SlotNotFoundError):
            add_child(tree, "gp", "missing")
        with pytest.raises(SlotNotFoundError):
            remove_child(tree, "gp", "u", "missing")


class TestAssignSlot:
    def test_assign_and_read_back(self, tree):
        mother = _student("Sara", "female")
        path = SlotPath.mother("gp", "u")

        draft = assign_slot(tree, path, mother)

        assert slot_occupant(draft, path) is mother

    def test_conflict_when_student_already_placed(self, tree):
        student = _student()
        draft = assign_slot(tree, SlotPath.leader(), student)

        with pytest.raises(SlotConflictError) as exc_info:
            assign_slot(draft, SlotPath.father("gp", "u"), student)

        assert exc_info.value.student_id == student.id
        assert exc_info.value.occupied == SlotPath.leader()

    def test_reassigning_same_slot_is_allowed(self, tree):
        student = _student()
        draft = assign_slot(tree, SlotPath.leader(), student)
        assert assign_slot(draft, SlotPath.leader(), student).family_leader is student

    def test_clear_slot(self, tree):
        draft = assign_slot(tree, SlotPath.grand_father("gp"), _student())
        draft = clear_slot(draft, SlotPath.grand_father("gp"))
        assert draft.grand_parent("gp").grand_father is None

    def test_incomplete_path_raises(self, tree):
        with pytest.raises(SlotNotFoundError):
            assign_slot(tree, SlotPath(SlotRole.FATHER), _student())


class TestBuilders:
    def test_payload_round_trip_through_resolution(self):
        leader, father, mother, child = (
            _student("Dawit"),
            _student("Yonas"),
            _student("Sara", "female"),
            _student("Liya", "female"),
        )
        payload = FamilyDraftIn(
            title="Blue",
            location="Adama",
            batch="2023-2024",
            family_leader=leader.id,
            grand_parents=[
                {
                    "title": "Elders",
                    "families": [
                        {
                            "father": {"student": father.id},
                            "mother": {"student": mother.id},
                            "children": [{"student": child.id, "relationship": "daughter"}],
                        }
                    ],
                }
            ],
        )
        students = {s.id: s for s in (leader, father, mother, child)}

        assert referenced_student_ids(payload) == set(students)

        draft = draft_from_payload(payload, students)
        assert draft.batch == "2023/2024"
        assert draft.family_leader is leader
        unit = draft.grand_parents[0].family_units[0]
        assert unit.father.student is father
        assert unit.children[0].relationship is ChildRelationship.DAUGHTER
        assert unit.children[0].birth_order == 1

    def test_payload_with_unknown_id_raises_key_error(self):
        payload = FamilyDraftIn(family_leader=uuid4())
        with pytest.raises(KeyError):
            draft_from_payload(payload, {})

    def test_draft_from_family_uses_row_ids_as_keys(self):
        gp_id, unit_id, child_id = uuid4(), uuid4(), uuid4()
        father, mother, kid = _student(), _student("Sara", "female"), _student("Liya")
        now = datetime.now(UTC)
        family = SimpleNamespace(
            title="Blue",
            location="Adama",
            batch="2023/2024",
            allow_other_batches=False,
            family_date=None,
            family_leader=None,
            family_co_leader=None,
            family_secretary=None,
            grand_parents=[
                SimpleNamespace(
                    id=gp_id,
                    title="Elders",
                    grand_father=None,
                    grand_mother=None,
                    family_units=[
                        SimpleNamespace(
                            id=unit_id,
                            father=father,
                            father_phone="0911000000",
                            father_email=None,
                            father_occupation=None,
                            mother=mother,
                            mother_phone=None,
                            mother_email=None,
                            mother_occupation=None,
                            created_at=now,
                            children=[
                                SimpleNamespace(
                                    id=child_id,
                                    student=kid,
                                    relationship_type="son",
                                    birth_order=1,
                                    added_at=now,
                                )
                            ],
                        )
                    ],
                )
            ],
        )

        draft = draft_from_family(family)

        path = SlotPath.child_of(str(gp_id), str(unit_id), str(child_id))
        assert slot_occupant(draft, path) is kid
        assert draft.family_unit(str(gp_id), str(unit_id)).father.phone == "0911000000"
