"""
Family Models

Family → grandparent unit → family unit (father/mother couple) → children.
The tree is stored normalized across four tables; list order is kept in
`position` columns managed by `ordering_list`.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .students import Student

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, VersionMixin


class Family(Base, UUIDPrimaryKeyMixin, TimestampMixin, VersionMixin):
    """Top-level grouping with three leadership slots and a grandparent tree."""

    __tablename__ = "families"
    __table_args__ = (
        CheckConstraint("status IN ('current', 'finished')", name="check_family_status"),
        Index("idx_families_batch", "batch"),
        Index("idx_families_status", "status"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    batch: Mapped[str] = mapped_column(String(20), nullable=False)
    allow_other_batches: Mapped[bool] = mapped_column(default=False)
    family_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(10), default="current", nullable=False)
    created_by: Mapped[str | None] = mapped_column(
        String(200), nullable=True, comment="Admin who created the family"
    )

    # Leadership
    family_leader_id: Mapped[UUID] = mapped_column(ForeignKey("students.id"), nullable=False)
    family_co_leader_id: Mapped[UUID] = mapped_column(ForeignKey("students.id"), nullable=False)
    family_secretary_id: Mapped[UUID] = mapped_column(ForeignKey("students.id"), nullable=False)

    # Relationships
    family_leader: Mapped[Student] = relationship(foreign_keys=[family_leader_id])
    family_co_leader: Mapped[Student] = relationship(foreign_keys=[family_co_leader_id])
    family_secretary: Mapped[Student] = relationship(foreign_keys=[family_secretary_id])
    grand_parents: Mapped[list[GrandParentUnit]] = relationship(
        back_populates="family",
        cascade="all, delete-orphan",
        order_by="GrandParentUnit.position",
        collection_class=ordering_list("position"),
    )

    @property
    def member_count(self) -> int:
        """Leaders, grandparents present, both parents of every unit, and children."""
        total = 3
        for gp in self.grand_parents:
            total += (gp.grand_father_id is not None) + (gp.grand_mother_id is not None)
            for unit in gp.family_units:
                total += 2 + len(unit.children)
        return total


class GrandParentUnit(Base, UUIDPrimaryKeyMixin):
    """Titled sub-group of a family, anchored by a grandfather and/or grandmother."""

    __tablename__ = "family_grand_parents"
    __table_args__ = (Index("idx_grand_parents_family", "family_id"),)

    family_id: Mapped[UUID] = mapped_column(
        ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    grand_father_id: Mapped[UUID | None] = mapped_column(ForeignKey("students.id"), nullable=True)
    grand_mother_id: Mapped[UUID | None] = mapped_column(ForeignKey("students.id"), nullable=True)

    # Relationships
    family: Mapped[Family] = relationship(back_populates="grand_parents")
    grand_father: Mapped[Student | None] = relationship(foreign_keys=[grand_father_id])
    grand_mother: Mapped[Student | None] = relationship(foreign_keys=[grand_mother_id])
    family_units: Mapped[list[FamilyUnit]] = relationship(
        back_populates="grand_parent",
        cascade="all, delete-orphan",
        order_by="FamilyUnit.position",
        collection_class=ordering_list("position"),
    )


class FamilyUnit(Base, UUIDPrimaryKeyMixin):
    """A father and mother with their children."""

    __tablename__ = "family_units"
    __table_args__ = (Index("idx_family_units_grand_parent", "grand_parent_id"),)

    grand_parent_id: Mapped[UUID] = mapped_column(
        ForeignKey("family_grand_parents.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    father_id: Mapped[UUID] = mapped_column(ForeignKey("students.id"), nullable=False)
    father_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    father_email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    father_occupation: Mapped[str | None] = mapped_column(String(200), nullable=True)

    mother_id: Mapped[UUID] = mapped_column(ForeignKey("students.id"), nullable=False)
    mother_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    mother_email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    mother_occupation: Mapped[str | None] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    # Relationships
    grand_parent: Mapped[GrandParentUnit] = relationship(back_populates="family_units")
    father: Mapped[Student] = relationship(foreign_keys=[father_id])
    mother: Mapped[Student] = relationship(foreign_keys=[mother_id])
    children: Mapped[list[FamilyChild]] = relationship(
        back_populates="family_unit",
        cascade="all, delete-orphan",
        order_by="FamilyChild.position",
        collection_class=ordering_list("position"),
    )


class FamilyChild(Base, UUIDPrimaryKeyMixin):
    """A student placed as a child of a family unit."""

    __tablename__ = "family_children"
    __table_args__ = (
        CheckConstraint("relationship IN ('son', 'daughter')", name="check_child_relationship"),
        Index("idx_family_children_unit", "family_unit_id"),
        Index("idx_family_children_student", "student_id"),
    )

    family_unit_id: Mapped[UUID] = mapped_column(
        ForeignKey("family_units.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    student_id: Mapped[UUID] = mapped_column(ForeignKey("students.id"), nullable=False)
    relationship_type: Mapped[str] = mapped_column(
        "relationship", String(10), default="son", nullable=False
    )
    birth_order: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    # Relationships
    family_unit: Mapped[FamilyUnit] = relationship(back_populates="children")
    student: Mapped[Student] = relationship(foreign_keys=[student_id])
