"""
Unit Tests for Job Slot Uniqueness

Exclusive job types are unique within a sub-class.
"""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from gubaye.assignment.job_slots import (
    assigned_exclusive_types,
    check_type_change,
    is_type_available,
    type_options,
)
from gubaye.assignment.results import Invalid, InvalidCode, Ok
from gubaye.assignment.roles import JobType, SubClass


def _job(sub_class: str | None, job_type: str | None):
    return SimpleNamespace(id=uuid4(), sub_class=sub_class, type=job_type)


@pytest.fixture
def jobs():
    return [
        _job("Timhrt", "leader"),
        _job("Timhrt", "member"),
        _job("Timhrt", "member"),
        _job("Muya", "Secretary"),
        _job(None, "sub_leader"),
    ]


class TestAssignedExclusiveTypes:
    def test_only_exclusive_types_in_sub_class(self, jobs):
        assert assigned_exclusive_types(jobs, "Timhrt") == {JobType.LEADER}

    def test_other_sub_class_isolated(self, jobs):
        assert assigned_exclusive_types(jobs, "Muya") == {JobType.SECRETARY}

    @pytest.mark.parametrize("sub_class", [None, ""])
    def test_empty_sub_class_has_no_scope(self, jobs, sub_class):
        assert assigned_exclusive_types(jobs, sub_class) == frozenset()

    def test_excluded_job_keeps_its_type(self, jobs):
        assert assigned_exclusive_types(jobs, "Timhrt", exclude_job_id=jobs[0].id) == frozenset()

    def test_unknown_types_ignored(self):
        assert assigned_exclusive_types([_job("Timhrt", "captain")], "Timhrt") == frozenset()


class TestIsTypeAvailable:
    def test_member_always_available(self):
        assert is_type_available(JobType.MEMBER, {JobType.LEADER, JobType.SUB_LEADER})

    def test_taken_exclusive_type_unavailable(self):
        assert not is_type_available("leader", {JobType.LEADER})

    def test_free_exclusive_type_available(self):
        assert is_type_available("Secretary", {JobType.LEADER})

    def test_unknown_type_unavailable(self):
        assert not is_type_available("captain", set())


def test_type_options_disable_rather_than_hide(jobs):
    options = type_options(jobs, "Timhrt")

    assert [o.type for o in options] == list(JobType)
    assert {o.type: o.available for o in options} == {
        JobType.MEMBER: True,
        JobType.LEADER: False,
        JobType.SUB_LEADER: True,
        JobType.SECRETARY: True,
    }


class TestCheckTypeChange:
    def test_second_leader_in_sub_class_rejected(self, jobs):
        """Timhrt already has a leader, so another job cannot become leader."""
        candidate = jobs[1]

        result = check_type_change(jobs, candidate.id, "Timhrt", "leader")

        assert isinstance(result, Invalid)
        assert result.code == InvalidCode.TYPE_UNAVAILABLE

    def test_existing_leader_may_keep_type(self, jobs):
        result = check_type_change(jobs, jobs[0].id, "Timhrt", JobType.LEADER)
        assert result == Ok(JobType.LEADER)

    def test_member_always_allowed(self, jobs):
        assert isinstance(check_type_change(jobs, jobs[1].id, "Timhrt", "member"), Ok)

    def test_moving_to_free_sub_class(self, jobs):
        assert isinstance(check_type_change(jobs, jobs[1].id, "Mikikir", "leader"), Ok)

    def test_clearing_type(self, jobs):
        assert check_type_change(jobs, jobs[0].id, "Timhrt", None) == Ok(None)


class TestSubClassParsing:
    @pytest.mark.parametrize("raw", ["Timhrt", "timhrt", "  TIMHRT "])
    def test_case_and_whitespace_insensitive(self, raw):
        assert SubClass.parse(raw) is SubClass.TIMHRT

    def test_inner_whitespace_collapsed(self):
        assert SubClass.parse("family   leader") is SubClass.FAMILY_LEADER

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_means_no_sub_class(self, raw):
        assert SubClass.parse(raw) is None

    def test_unknown_rejected(self):
        with pytest.raises(ValueError, match="Unknown sub-class"):
            SubClass.parse("Choir")

    def test_parsed_value_scopes_exclusivity(self, jobs):
        """Near-duplicate spellings land in the same exclusivity group."""
        sub_class = SubClass.parse("timhrt")
        assert assigned_exclusive_types(jobs, sub_class) == {JobType.LEADER}
