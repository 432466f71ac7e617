"""
Job count guard.

A student may hold at most `MAX_JOBS_PER_STUDENT` concurrent jobs. The guard
only reads the student's stored count; keeping that count accurate is the
job endpoints' responsibility.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from gubaye.config import settings

from .results import Invalid, InvalidCode, Ok

S = TypeVar("S")


def _cap(cap: int | None) -> int:
    return settings.MAX_JOBS_PER_STUDENT if cap is None else cap


def can_assign_new_job(student: Any, cap: int | None = None) -> bool:
    """True while the student's job count is below the cap."""
    return (student.number_of_jobs or 0) < _cap(cap)


def remaining_job_slots(student: Any, cap: int | None = None) -> int:
    return max(0, _cap(cap) - (student.number_of_jobs or 0))


def check_job_assignment(student: S, cap: int | None = None) -> Ok[S] | Invalid:
    """Commit-time re-check before creating a job for `student`."""
    limit = _cap(cap)
    if not can_assign_new_job(student, limit):
        held = getattr(student, "number_of_jobs", 0)
        return Invalid(
            InvalidCode.JOB_CAP_REACHED, f"Student already holds {held} of {limit} allowed jobs"
        )
    return Ok(student)


def eligible_students(students: Iterable[S], cap: int | None = None) -> list[S]:
    """Students that may still be given a new job."""
    limit = _cap(cap)
    return [s for s in students if can_assign_new_job(s, limit)]
