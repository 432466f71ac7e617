"""
Student Models

Student reference records. Read-only from the assignment engine's point of view;
only `number_of_jobs` is maintained by the job endpoints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .jobs import Job

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Student(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Members of the organization that can occupy family and job slots."""

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("gender IN ('male', 'female')", name="check_student_gender"),
        CheckConstraint("number_of_jobs >= 0", name="check_number_of_jobs_non_negative"),
        Index("idx_students_batch", "batch"),
        Index("idx_students_gender", "gender"),
    )

    # Identity
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    giby_gubaye_id: Mapped[str | None] = mapped_column(
        String(50), unique=True, nullable=True, comment="Organization-issued member ID"
    )

    # Academic context
    batch: Mapped[str | None] = mapped_column(
        String(20), nullable=True, comment="Batch label (e.g., '2023/2024')"
    )
    university: Mapped[str | None] = mapped_column(String(200), nullable=True)
    college: Mapped[str | None] = mapped_column(String(200), nullable=True)
    department: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Contact
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    photo: Mapped[str | None] = mapped_column(
        String(500), nullable=True, comment="Photo reference (path or URL)"
    )

    is_active: Mapped[bool] = mapped_column(default=True)
    number_of_jobs: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, comment="Concurrent job slots held"
    )

    # Relationships
    jobs: Mapped[list[Job]] = relationship(back_populates="student", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        """First, middle and last name joined by single spaces."""
        return " ".join(p for p in (self.first_name, self.middle_name, self.last_name) if p)

    @property
    def display_name(self) -> str:
        """Name as shown in selection lists: 'First Middle Last (ID) - Batch'."""
        label = self.full_name
        if self.giby_gubaye_id:
            label += f" ({self.giby_gubaye_id})"
        if self.batch:
            label += f" - {self.batch}"
        return label
