"""
Assignment Engine

Decides which students may occupy which family and job slots.

The family validator lives in `gubaye.assignment.family_validator` and is
imported from there (it depends on the API schemas).
"""

from .draft import (
    DraftError,
    FamilyDraft,
    SlotConflictError,
    SlotNotFoundError,
    SlotPath,
    StudentRef,
)
from .job_guard import can_assign_new_job, check_job_assignment, eligible_students
from .job_slots import assigned_exclusive_types, check_type_change, is_type_available, type_options
from .pool import FamilyContext, candidates_for_slot, filter_candidates
from .registry import compute_selected_ids, duplicate_occupants, slot_index
from .results import Invalid, InvalidCode, Ok
from .roles import ChildRelationship, FamilyStatus, Gender, JobType, SlotRole, SubClass

__all__ = [
    "DraftError",
    "FamilyDraft",
    "SlotConflictError",
    "SlotNotFoundError",
    "SlotPath",
    "StudentRef",
    "can_assign_new_job",
    "check_job_assignment",
    "eligible_students",
    "assigned_exclusive_types",
    "check_type_change",
    "is_type_available",
    "type_options",
    "FamilyContext",
    "candidates_for_slot",
    "filter_candidates",
    "compute_selected_ids",
    "duplicate_occupants",
    "slot_index",
    "Invalid",
    "InvalidCode",
    "Ok",
    "ChildRelationship",
    "FamilyStatus",
    "Gender",
    "JobType",
    "SlotRole",
    "SubClass",
]
