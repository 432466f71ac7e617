"""
Unit Tests for the Job Count Guard
"""

from types import SimpleNamespace

import pytest

from gubaye.assignment.job_guard import (
    can_assign_new_job,
    check_job_assignment,
    eligible_students,
    remaining_job_slots,
)
from gubaye.assignment.results import Invalid, InvalidCode, Ok
from gubaye.config import settings


def _student(number_of_jobs: int | None):
    return SimpleNamespace(number_of_jobs=number_of_jobs)


@pytest.mark.parametrize("count,allowed", [(0, True), (2, True), (3, False), (5, False)])
def test_can_assign_new_job_default_cap(count, allowed):
    assert settings.MAX_JOBS_PER_STUDENT == 3
    assert can_assign_new_job(_student(count)) is allowed


def test_missing_count_treated_as_zero():
    assert can_assign_new_job(_student(None))
    assert remaining_job_slots(_student(None)) == 3


def test_custom_cap():
    assert can_assign_new_job(_student(3), cap=4)
    assert not can_assign_new_job(_student(1), cap=1)


def test_remaining_job_slots_never_negative():
    assert remaining_job_slots(_student(1)) == 2
    assert remaining_job_slots(_student(7)) == 0


def test_fourth_job_rejected():
    result = check_job_assignment(_student(3))

    assert isinstance(result, Invalid)
    assert result.code == InvalidCode.JOB_CAP_REACHED
    assert "3 of 3" in result.reason


def test_check_passes_student_through():
    student = _student(1)
    assert check_job_assignment(student) == Ok(student)


def test_eligible_students():
    students = [_student(0), _student(3), _student(2)]
    assert eligible_students(students) == [students[0], students[2]]
