"""
Job slot uniqueness.

Within one non-empty sub-class, each exclusive job type (leader, sub_leader,
Secretary) may be held by at most one job. `member` is never restricted.
"""

from __future__ import annotations

from collections.abc import Iterable, Set
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from .roles import EXCLUSIVE_JOB_TYPES, JOB_TYPE_LABELS, JobType
from .results import Invalid, InvalidCode, Ok


def _parse_type(value: Any) -> JobType | None:
    if value is None or value == "":
        return None
    try:
        return JobType(value)
    except ValueError:
        return None


def assigned_exclusive_types(
    jobs: Iterable[Any], sub_class: str | None, exclude_job_id: UUID | None = None
) -> frozenset[JobType]:
    """Exclusive types already taken in a sub-class.

    Args:
        jobs: Job records (anything with id, sub_class and type)
        sub_class: Sub-class being edited; empty means no exclusivity scope
        exclude_job_id: The job being edited, so it can keep its own type

    Returns:
        Taken exclusive types; never contains member
    """
    if not sub_class:
        return frozenset()

    taken = set()
    for job in jobs:
        if exclude_job_id is not None and job.id == exclude_job_id:
            continue
        if job.sub_class != sub_class:
            continue
        job_type = _parse_type(job.type)
        if job_type in EXCLUSIVE_JOB_TYPES:
            taken.add(job_type)
    return frozenset(taken)


def is_type_available(job_type: JobType | str, assigned: Set[JobType]) -> bool:
    """Member is always available; exclusive types only when not yet taken.

    Unknown type strings are never available.
    """
    parsed = _parse_type(job_type)
    if parsed is None:
        return False
    if not parsed.is_exclusive:
        return True
    return parsed not in assigned


@dataclass(frozen=True)
class TypeOption:
    type: JobType
    label: str
    available: bool


def type_options(
    jobs: Iterable[Any], sub_class: str | None, exclude_job_id: UUID | None = None
) -> list[TypeOption]:
    """Every job type in display order, flagged available or not.

    Unavailable options are meant to be shown disabled, not hidden.
    """
    assigned = assigned_exclusive_types(jobs, sub_class, exclude_job_id)
    return [
        TypeOption(type=job_type, label=label, available=is_type_available(job_type, assigned))
        for job_type, label in JOB_TYPE_LABELS.items()
    ]


def check_type_change(
    jobs: Iterable[Any],
    job_id: UUID,
    sub_class: str | None,
    job_type: JobType | str | None,
) -> Ok[JobType | None] | Invalid:
    """Check that a job may take `job_type` in `sub_class`."""
    parsed = _parse_type(job_type)
    if parsed is None:
        return Ok(None)

    assigned = assigned_exclusive_types(jobs, sub_class, exclude_job_id=job_id)
    if not is_type_available(parsed, assigned):
        return Invalid(
            InvalidCode.TYPE_UNAVAILABLE,
            f"Only one {parsed} allowed per sub-class; {sub_class} already has one",
        )
    return Ok(parsed)
