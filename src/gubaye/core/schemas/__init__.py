"""Pydantic schemas for API validation."""

from .common import Pagination, RequestModel
from .families import (
    AutoAssignRequest,
    AutoAssignResponse,
    BatchList,
    CandidateRequest,
    ChildIn,
    ChildWrite,
    FamilyDraftIn,
    FamilyListResponse,
    FamilySchema,
    FamilyStats,
    FamilyStatusUpdate,
    FamilyUnitIn,
    FamilyUnitWrite,
    FamilyWrite,
    GrandParentIn,
    GrandParentWrite,
    ParentIn,
    ParentWrite,
)
from .jobs import (
    CountBucket,
    JobAssign,
    JobListResponse,
    JobSchema,
    JobStats,
    JobTypeOption,
    JobUpdate,
)
from .students import StudentCreate, StudentListResponse, StudentSchema, StudentSummary

__all__ = [
    # Common
    "Pagination",
    "RequestModel",
    # Students
    "StudentCreate",
    "StudentSchema",
    "StudentSummary",
    "StudentListResponse",
    # Jobs
    "JobAssign",
    "JobUpdate",
    "JobSchema",
    "JobListResponse",
    "JobTypeOption",
    "JobStats",
    "CountBucket",
    # Families
    "ParentIn",
    "ChildIn",
    "FamilyUnitIn",
    "GrandParentIn",
    "FamilyDraftIn",
    "CandidateRequest",
    "ParentWrite",
    "ChildWrite",
    "FamilyUnitWrite",
    "GrandParentWrite",
    "FamilyWrite",
    "FamilySchema",
    "FamilyListResponse",
    "FamilyStatusUpdate",
    "FamilyStats",
    "BatchList",
    "AutoAssignRequest",
    "AutoAssignResponse",
]
