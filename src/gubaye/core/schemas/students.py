"""
Student Schemas

Pydantic models for API request/response validation.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gubaye.assignment.roles import Gender
from gubaye.core.validation import validate_batch_label, validate_email, validate_phone_number

from .common import Pagination


class StudentBase(BaseModel):
    """Base student schema with common fields."""

    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: str | None = Field(None, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    gender: Gender
    giby_gubaye_id: str | None = Field(None, max_length=50, description="Member ID")
    batch: str | None = Field(None, description="Batch label (e.g., '2023/2024')")
    university: str | None = Field(None, max_length=200)
    college: str | None = Field(None, max_length=200)
    department: str | None = Field(None, max_length=200)
    phone: str | None = None
    email: str | None = None
    photo: str | None = Field(None, max_length=500)


class StudentCreate(StudentBase):
    """Schema for creating a new student reference record."""

    @field_validator("batch")
    @classmethod
    def normalize_batch(cls, v: str | None) -> str | None:
        return validate_batch_label(v) or None

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v: str | None) -> str | None:
        return validate_phone_number(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return validate_email(v)


class StudentSummary(BaseModel):
    """Compact student reference embedded in family and job responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str
    middle_name: str | None = None
    last_name: str
    gender: Gender
    giby_gubaye_id: str | None = None
    batch: str | None = None
    display_name: str
    number_of_jobs: int = 0


class StudentSchema(StudentBase):
    """Full student schema for responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    display_name: str
    is_active: bool
    number_of_jobs: int
    created_at: datetime
    updated_at: datetime


class StudentListResponse(BaseModel):
    students: list[StudentSchema]
    pagination: Pagination
