"""
Family Schemas

Three shapes of the same tree:
- *In models: the draft as submitted by the builder (every slot optional)
- *Write models: the normalized id-reference projection that is persisted
- *Schema models: the hydrated read model returned to clients
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from gubaye.assignment.roles import ChildRelationship, FamilyStatus, SlotRole
from gubaye.core.validation import (
    normalize_text,
    validate_batch_label,
    validate_email,
    validate_phone_number,
)

from .common import Pagination, RequestModel
from .students import StudentSummary


class ContactOverrides(BaseModel):
    phone: str | None = None
    email: str | None = None
    occupation: str | None = Field(None, max_length=200)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v: str | None) -> str | None:
        return validate_phone_number(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return validate_email(v)


# ============================================================================
# Draft input (builder payload)
# ============================================================================


class ParentIn(ContactOverrides):
    student: UUID | None = None


class ChildIn(RequestModel):
    student: UUID | None = None
    relationship: ChildRelationship = ChildRelationship.SON
    birth_order: int | None = Field(None, ge=1)


class FamilyUnitIn(BaseModel):
    father: ParentIn = Field(default_factory=ParentIn)
    mother: ParentIn = Field(default_factory=ParentIn)
    children: list[ChildIn] = Field(default_factory=list)


class GrandParentIn(RequestModel):
    title: str = ""
    grand_father: UUID | None = None
    grand_mother: UUID | None = None
    families: list[FamilyUnitIn] = Field(default_factory=list)


class FamilyDraftIn(RequestModel):
    """Family as submitted by the builder; completeness is checked by the validator."""

    title: str = ""
    location: str = ""
    batch: str = ""
    allow_other_batches: bool = False
    family_date: date | None = None
    family_leader: UUID | None = None
    family_co_leader: UUID | None = None
    family_secretary: UUID | None = None
    grand_parents: list[GrandParentIn] = Field(default_factory=list)
    version: int | None = Field(None, description="Version read by the client (optional)")

    @field_validator("title", "location", mode="before")
    @classmethod
    def strip_text(cls, v: str | None) -> str:
        return normalize_text(v)

    @field_validator("batch", mode="before")
    @classmethod
    def normalize_batch(cls, v: str | None) -> str:
        return validate_batch_label(v)


class CandidateRequest(RequestModel):
    """Ask for the candidate pool of one slot given the current draft."""

    role: SlotRole
    draft: FamilyDraftIn = Field(default_factory=FamilyDraftIn)
    current_student_id: UUID | None = None


# ============================================================================
# Normalized write model
# ============================================================================


class ParentWrite(ContactOverrides):
    student: UUID


class ChildWrite(BaseModel):
    student: UUID
    relationship: ChildRelationship
    birth_order: int | None = None


class FamilyUnitWrite(BaseModel):
    father: ParentWrite
    mother: ParentWrite
    children: list[ChildWrite] = Field(default_factory=list)


class GrandParentWrite(BaseModel):
    title: str
    grand_father: UUID | None = None
    grand_mother: UUID | None = None
    families: list[FamilyUnitWrite] = Field(default_factory=list)


class FamilyWrite(BaseModel):
    """Family reduced to student-id references plus parent contact overrides."""

    title: str
    location: str
    batch: str
    allow_other_batches: bool
    family_date: date | None = None
    family_leader: UUID
    family_co_leader: UUID
    family_secretary: UUID
    grand_parents: list[GrandParentWrite] = Field(default_factory=list)


# ============================================================================
# Read model
# ============================================================================


class ParentSchema(BaseModel):
    student: StudentSummary
    phone: str | None = None
    email: str | None = None
    occupation: str | None = None


class ChildSchema(BaseModel):
    id: UUID
    student: StudentSummary
    relationship: ChildRelationship
    birth_order: int | None
    added_at: datetime


class FamilyUnitSchema(BaseModel):
    id: UUID
    father: ParentSchema
    mother: ParentSchema
    children: list[ChildSchema]
    created_at: datetime


class GrandParentSchema(BaseModel):
    id: UUID
    title: str
    grand_father: StudentSummary | None
    grand_mother: StudentSummary | None
    families: list[FamilyUnitSchema]


class FamilySchema(BaseModel):
    """Hydrated family returned to clients."""

    id: UUID
    title: str
    location: str
    batch: str
    allow_other_batches: bool
    family_date: date | None
    family_leader: StudentSummary
    family_co_leader: StudentSummary
    family_secretary: StudentSummary
    grand_parents: list[GrandParentSchema]
    status: FamilyStatus
    member_count: int
    created_by: str | None
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, family: Any) -> FamilySchema:
        """Build from a Family row with its whole tree loaded."""

        def _summary(student: Any) -> StudentSummary | None:
            return None if student is None else StudentSummary.model_validate(student)

        return cls(
            id=family.id,
            title=family.title,
            location=family.location,
            batch=family.batch,
            allow_other_batches=family.allow_other_batches,
            family_date=family.family_date,
            family_leader=_summary(family.family_leader),
            family_co_leader=_summary(family.family_co_leader),
            family_secretary=_summary(family.family_secretary),
            grand_parents=[
                GrandParentSchema(
                    id=gp.id,
                    title=gp.title,
                    grand_father=_summary(gp.grand_father),
                    grand_mother=_summary(gp.grand_mother),
                    families=[
                        FamilyUnitSchema(
                            id=unit.id,
                            father=ParentSchema(
                                student=_summary(unit.father),
                                phone=unit.father_phone,
                                email=unit.father_email,
                                occupation=unit.father_occupation,
                            ),
                            mother=ParentSchema(
                                student=_summary(unit.mother),
                                phone=unit.mother_phone,
                                email=unit.mother_email,
                                occupation=unit.mother_occupation,
                            ),
                            children=[
                                ChildSchema(
                                    id=child.id,
                                    student=_summary(child.student),
                                    relationship=child.relationship_type,
                                    birth_order=child.birth_order,
                                    added_at=child.added_at,
                                )
                                for child in unit.children
                            ],
                            created_at=unit.created_at,
                        )
                        for unit in gp.family_units
                    ],
                )
                for gp in family.grand_parents
            ],
            status=family.status,
            member_count=family.member_count,
            created_by=family.created_by,
            version=family.version,
            created_at=family.created_at,
            updated_at=family.updated_at,
        )


class FamilyListResponse(BaseModel):
    families: list[FamilySchema]
    pagination: Pagination


class FamilyStatusUpdate(BaseModel):
    status: FamilyStatus


class FamilyStats(BaseModel):
    total_families: int
    current_families: int
    finished_families: int
    total_members: int


class BatchList(BaseModel):
    batches: list[str]


class AutoAssignRequest(RequestModel):
    """Matching options plus optional narrowing of the families sent to the service."""

    target_batch: str | None = None
    family_ids: list[UUID] | None = None
    mode: Literal["homogeneous", "heterogeneous"] = "homogeneous"
    max_children_per_family: int = Field(10, ge=1, le=50)
    consider_gender_balance: bool = True
    consider_age: bool = True
    address_level: Literal["kebele", "wereda", "zone", "region"] = "kebele"

    @field_validator("target_batch")
    @classmethod
    def normalize_target_batch(cls, v: str | None) -> str | None:
        return validate_batch_label(v) or None


class AutoAssignResponse(BaseModel):
    refetch: bool
    eligible_families: int
    available_students: int
