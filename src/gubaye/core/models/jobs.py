"""
Job Models

Per-student job/role assignments scoped by class and sub-class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .students import Student

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, VersionMixin

# Rows holding an exclusive type inside a sub-class; at most one per (sub_class, type)
EXCLUSIVE_TYPE_PREDICATE = "sub_class IS NOT NULL AND type IN ('leader', 'sub_leader', 'Secretary')"


class Job(Base, UUIDPrimaryKeyMixin, TimestampMixin, VersionMixin):
    """One student's assignment to a class context.

    Exclusive types (leader, sub_leader, Secretary) are unique per sub-class.
    gubaye.assignment.job_slots checks this before a write and the partial
    unique index rejects whatever slips past a concurrent check.
    """

    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint(
            "type IS NULL OR type IN ('member', 'leader', 'sub_leader', 'Secretary')",
            name="check_job_type",
        ),
        CheckConstraint(
            "sub_class IS NULL OR sub_class IN "
            "('Timhrt', 'Mikikir', 'Aseltagn', 'Muya', 'Family Leader')",
            name="check_job_sub_class",
        ),
        Index("idx_jobs_student", "student_id"),
        Index("idx_jobs_sub_class", "sub_class"),
        Index(
            "uq_jobs_sub_class_exclusive_type",
            "sub_class",
            "type",
            unique=True,
            postgresql_where=text(EXCLUSIVE_TYPE_PREDICATE),
            sqlite_where=text(EXCLUSIVE_TYPE_PREDICATE),
        ),
    )

    student_id: Mapped[UUID] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    class_label: Mapped[str] = mapped_column(
        String(100), nullable=False, default="", comment="Class context (empty until set)"
    )
    sub_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    background: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    student: Mapped[Student] = relationship(back_populates="jobs")
