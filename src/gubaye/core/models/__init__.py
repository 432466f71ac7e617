"""
Gubaye SQLAlchemy Models
"""

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, VersionMixin
from .families import Family, FamilyChild, FamilyUnit, GrandParentUnit
from .jobs import Job
from .students import Student

__all__ = [
    # Base
    "Base",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    "VersionMixin",
    # Students
    "Student",
    # Jobs
    "Job",
    # Families
    "Family",
    "GrandParentUnit",
    "FamilyUnit",
    "FamilyChild",
]
