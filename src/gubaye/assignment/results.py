"""
Discriminated results returned by the assignment engine.

Core checks never raise on bad data; they return `Ok` or `Invalid` and let the
caller decide how to surface the failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class InvalidCode(StrEnum):
    MISSING_FIELD = "missing_field"
    GRAND_PARENT_TITLE = "grand_parent_title"
    GRAND_PARENT_MISSING = "grand_parent_missing"
    PARENT_MISSING = "parent_missing"
    DUPLICATE_STUDENT = "duplicate_student"
    BATCH_MISMATCH = "batch_mismatch"
    GENDER_MISMATCH = "gender_mismatch"
    UNKNOWN_STUDENT = "unknown_student"
    TYPE_UNAVAILABLE = "type_unavailable"
    JOB_CAP_REACHED = "job_cap_reached"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful check, optionally carrying a value and non-blocking warnings."""

    value: T
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Invalid:
    """Failed check with a human-readable reason and a machine code."""

    code: InvalidCode
    reason: str

    def as_detail(self) -> dict[str, str]:
        """Shape used for HTTP error bodies."""
        return {"code": str(self.code), "message": self.reason}

