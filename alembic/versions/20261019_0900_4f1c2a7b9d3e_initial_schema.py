"""Initial schema: students, jobs and normalized family trees

Revision ID: 4f1c2a7b9d3e
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f1c2a7b9d3e"  # pragma: allowlist secret
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

EXCLUSIVE_TYPE_PREDICATE = "sub_class IS NOT NULL AND type IN ('leader', 'sub_leader', 'Secretary')"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
            comment="Creation timestamp (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
            comment="Last update timestamp (UTC)",
        ),
    ]


def _version() -> sa.Column:
    return sa.Column(
        "version", sa.Integer(), server_default="1", nullable=False, comment="Write counter"
    )


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID primary key"),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("middle_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("gender", sa.String(length=10), nullable=False),
        sa.Column(
            "giby_gubaye_id",
            sa.String(length=50),
            nullable=True,
            comment="Organization-issued member ID",
        ),
        sa.Column(
            "batch", sa.String(length=20), nullable=True, comment="Batch label (e.g., '2023/2024')"
        ),
        sa.Column("university", sa.String(length=200), nullable=True),
        sa.Column("college", sa.String(length=200), nullable=True),
        sa.Column("department", sa.String(length=200), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column(
            "photo", sa.String(length=500), nullable=True, comment="Photo reference (path or URL)"
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column(
            "number_of_jobs", sa.Integer(), nullable=False, comment="Concurrent job slots held"
        ),
        *_timestamps(),
        sa.CheckConstraint("gender IN ('male', 'female')", name="check_student_gender"),
        sa.CheckConstraint("number_of_jobs >= 0", name="check_number_of_jobs_non_negative"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("giby_gubaye_id"),
    )
    op.create_index("idx_students_batch", "students", ["batch"])
    op.create_index("idx_students_gender", "students", ["gender"])

    op.create_table(
        "jobs",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID primary key"),
        sa.Column("student_id", sa.UUID(), nullable=False),
        sa.Column(
            "class_label",
            sa.String(length=100),
            nullable=False,
            comment="Class context (empty until set)",
        ),
        sa.Column("sub_class", sa.String(length=100), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=True),
        sa.Column("background", sa.Text(), nullable=True),
        *_timestamps(),
        _version(),
        sa.CheckConstraint(
            "type IS NULL OR type IN ('member', 'leader', 'sub_leader', 'Secretary')",
            name="check_job_type",
        ),
        sa.CheckConstraint(
            "sub_class IS NULL OR sub_class IN "
            "('Timhrt', 'Mikikir', 'Aseltagn', 'Muya', 'Family Leader')",
            name="check_job_sub_class",
        ),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_jobs_student", "jobs", ["student_id"])
    op.create_index("idx_jobs_sub_class", "jobs", ["sub_class"])
    op.create_index(
        "uq_jobs_sub_class_exclusive_type",
        "jobs",
        ["sub_class", "type"],
        unique=True,
        postgresql_where=sa.text(EXCLUSIVE_TYPE_PREDICATE),
        sqlite_where=sa.text(EXCLUSIVE_TYPE_PREDICATE),
    )

    op.create_table(
        "families",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID primary key"),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("batch", sa.String(length=20), nullable=False),
        sa.Column("allow_other_batches", sa.Boolean(), nullable=False),
        sa.Column("family_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=10), nullable=False),
        sa.Column(
            "created_by",
            sa.String(length=200),
            nullable=True,
            comment="Admin who created the family",
        ),
        sa.Column("family_leader_id", sa.UUID(), nullable=False),
        sa.Column("family_co_leader_id", sa.UUID(), nullable=False),
        sa.Column("family_secretary_id", sa.UUID(), nullable=False),
        *_timestamps(),
        _version(),
        sa.CheckConstraint("status IN ('current', 'finished')", name="check_family_status"),
        sa.ForeignKeyConstraint(["family_leader_id"], ["students.id"]),
        sa.ForeignKeyConstraint(["family_co_leader_id"], ["students.id"]),
        sa.ForeignKeyConstraint(["family_secretary_id"], ["students.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_families_batch", "families", ["batch"])
    op.create_index("idx_families_status", "families", ["status"])

    op.create_table(
        "family_grand_parents",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID primary key"),
        sa.Column("family_id", sa.UUID(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("grand_father_id", sa.UUID(), nullable=True),
        sa.Column("grand_mother_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(["family_id"], ["families.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["grand_father_id"], ["students.id"]),
        sa.ForeignKeyConstraint(["grand_mother_id"], ["students.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_grand_parents_family", "family_grand_parents", ["family_id"])

    op.create_table(
        "family_units",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID primary key"),
        sa.Column("grand_parent_id", sa.UUID(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("father_id", sa.UUID(), nullable=False),
        sa.Column("father_phone", sa.String(length=20), nullable=True),
        sa.Column("father_email", sa.String(length=200), nullable=True),
        sa.Column("father_occupation", sa.String(length=200), nullable=True),
        sa.Column("mother_id", sa.UUID(), nullable=False),
        sa.Column("mother_phone", sa.String(length=20), nullable=True),
        sa.Column("mother_email", sa.String(length=200), nullable=True),
        sa.Column("mother_occupation", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["grand_parent_id"], ["family_grand_parents.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["father_id"], ["students.id"]),
        sa.ForeignKeyConstraint(["mother_id"], ["students.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_family_units_grand_parent", "family_units", ["grand_parent_id"])

    op.create_table(
        "family_children",
        sa.Column("id", sa.UUID(), nullable=False, comment="UUID primary key"),
        sa.Column("family_unit_id", sa.UUID(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.UUID(), nullable=False),
        sa.Column("relationship", sa.String(length=10), nullable=False),
        sa.Column("birth_order", sa.SmallInteger(), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "relationship IN ('son', 'daughter')", name="check_child_relationship"
        ),
        sa.ForeignKeyConstraint(["family_unit_id"], ["family_units.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_family_children_unit", "family_children", ["family_unit_id"])
    op.create_index("idx_family_children_student", "family_children", ["student_id"])


def downgrade() -> None:
    op.drop_index("idx_family_children_student", table_name="family_children")
    op.drop_index("idx_family_children_unit", table_name="family_children")
    op.drop_table("family_children")
    op.drop_index("idx_family_units_grand_parent", table_name="family_units")
    op.drop_table("family_units")
    op.drop_index("idx_grand_parents_family", table_name="family_grand_parents")
    op.drop_table("family_grand_parents")
    op.drop_index("idx_families_status", table_name="families")
    op.drop_index("idx_families_batch", table_name="families")
    op.drop_table("families")
    op.drop_index("uq_jobs_sub_class_exclusive_type", table_name="jobs")
    op.drop_index("idx_jobs_sub_class", table_name="jobs")
    op.drop_index("idx_jobs_student", table_name="jobs")
    op.drop_table("jobs")
    op.drop_index("idx_students_gender", table_name="students")
    op.drop_index("idx_students_batch", table_name="students")
    op.drop_table("students")
