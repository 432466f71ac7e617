"""
SQLAlchemy Base Model and Mixins

Provides base class and common mixins for all Gubaye models.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, event, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDPrimaryKeyMixin:
    """Mixin for UUID primary key."""

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4, comment="UUID primary key")


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps.

    All timestamps use UTC (timezone-aware).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
        comment="Last update timestamp (UTC)",
    )


class VersionMixin:
    """Mixin for an optimistic-concurrency token.

    Clients may echo the version they read; a stale version rejects the write.
    Writes that omit it stay last-write-wins.
    """

    version: Mapped[int] = mapped_column(
        Integer, default=1, server_default="1", nullable=False, comment="Write counter"
    )

    def is_stale(self, expected: int | None) -> bool:
        """Check a client-supplied version against the stored one."""
        return expected is not None and expected != self.version

    def bump_version(self) -> None:
        """Advance the version after a successful mutation."""
        self.version = (self.version or 0) + 1


# Event listeners to auto-generate UUIDs and timestamps for in-memory objects
@event.listens_for(UUIDPrimaryKeyMixin, "init", propagate=True)
def receive_init_uuid(target, args, kwargs):  # type: ignore[no-untyped-def]
    """Auto-generate UUID on instance creation if not provided."""
    if "id" not in kwargs:
        target.id = uuid4()


@event.listens_for(TimestampMixin, "init", propagate=True)
def receive_init_timestamps(target, args, kwargs):  # type: ignore[no-untyped-def]
    """Auto-generate timestamps on instance creation if not provided."""
    now = datetime.now(UTC)
    if "created_at" not in kwargs:
        target.created_at = now
    if "updated_at" not in kwargs:
        target.updated_at = now


@event.listens_for(VersionMixin, "init", propagate=True)
def receive_init_version(target, args, kwargs):  # type: ignore[no-untyped-def]
    """Start in-memory objects at version 1."""
    if "version" not in kwargs:
        target.version = 1
