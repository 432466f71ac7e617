"""
External Services

Clients for collaborators outside this service.
"""

from .auto_assign import (
    AssignmentOptions,
    AutoAssignClient,
    AutoAssignError,
    AutoAssignNotConfiguredError,
    count_available_students,
    eligible_families,
    placed_student_ids,
)

__all__ = [
    "AssignmentOptions",
    "AutoAssignClient",
    "AutoAssignError",
    "AutoAssignNotConfiguredError",
    "count_available_students",
    "eligible_families",
    "placed_student_ids",
]
