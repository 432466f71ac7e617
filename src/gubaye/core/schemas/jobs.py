"""
Job Schemas

Pydantic models for job assignment requests and responses.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gubaye.assignment.roles import JobType, SubClass

from .common import Pagination, RequestModel
from .students import StudentSummary


class JobAssign(RequestModel):
    """Create a job for a student; class and sub-class start empty."""

    student_id: UUID
    class_label: str = Field(default="", max_length=100)


class JobUpdate(RequestModel):
    """Set sub-class, type and background on an existing job.

    Only fields that are explicitly provided are changed.
    """

    sub_class: SubClass | None = None
    type: JobType | None = None
    background: str | None = None
    version: int | None = Field(None, description="Version read by the client (optional)")

    @field_validator("sub_class", mode="before")
    @classmethod
    def parse_sub_class(cls, v: object) -> object:
        return SubClass.parse(v) if isinstance(v, str) else v


class JobSchema(BaseModel):
    """Full job schema for responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student: StudentSummary
    class_label: str
    sub_class: SubClass | None
    type: JobType | None
    background: str | None
    version: int
    created_at: datetime
    updated_at: datetime


class JobListResponse(BaseModel):
    jobs: list[JobSchema]
    pagination: Pagination


class JobTypeOption(BaseModel):
    """One selectable job type; unavailable options are shown disabled."""

    type: JobType
    label: str
    available: bool


class CountBucket(BaseModel):
    key: str | None
    count: int


class JobStats(BaseModel):
    total_jobs: int
    assigned_with_sub_class: int
    without_sub_class: int
    sub_class_stats: list[CountBucket]
    type_stats: list[CountBucket]
