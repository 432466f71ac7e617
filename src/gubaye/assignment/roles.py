"""
Closed role and type vocabularies for the assignment engine.

Every string the API or the database carries for a role, job type, sub-class,
gender, status or child relationship parses into one of these enums.
"""

from __future__ import annotations

from enum import StrEnum


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"


class SlotRole(StrEnum):
    """Slots a student can occupy inside one family draft."""

    LEADER = "leader"
    CO_LEADER = "coLeader"
    SECRETARY = "secretary"
    GRAND_FATHER = "grandFather"
    GRAND_MOTHER = "grandMother"
    FATHER = "father"
    MOTHER = "mother"
    CHILD = "child"

    @property
    def is_leadership(self) -> bool:
        return self in LEADERSHIP_ROLES

    @property
    def required_gender(self) -> Gender | None:
        """Gender a candidate must have for this slot, if any."""
        return ROLE_GENDER.get(self)


LEADERSHIP_ROLES = frozenset({SlotRole.LEADER, SlotRole.CO_LEADER, SlotRole.SECRETARY})

ROLE_GENDER: dict[SlotRole, Gender] = {
    SlotRole.GRAND_FATHER: Gender.MALE,
    SlotRole.FATHER: Gender.MALE,
    SlotRole.GRAND_MOTHER: Gender.FEMALE,
    SlotRole.MOTHER: Gender.FEMALE,
}


class JobType(StrEnum):
    MEMBER = "member"
    LEADER = "leader"
    SUB_LEADER = "sub_leader"
    SECRETARY = "Secretary"

    @property
    def is_exclusive(self) -> bool:
        """Exclusive types may be held by at most one job per sub-class."""
        return self is not JobType.MEMBER


EXCLUSIVE_JOB_TYPES = frozenset({JobType.LEADER, JobType.SUB_LEADER, JobType.SECRETARY})

# Display labels, in the order options are offered
JOB_TYPE_LABELS: dict[JobType, str] = {
    JobType.MEMBER: "Member",
    JobType.LEADER: "Leader",
    JobType.SUB_LEADER: "Sub Leader",
    JobType.SECRETARY: "Secretary",
}


class FamilyStatus(StrEnum):
    CURRENT = "current"
    FINISHED = "finished"


class ChildRelationship(StrEnum):
    SON = "son"
    DAUGHTER = "daughter"


class SubClass(StrEnum):
    """Sub-classes a job can be scoped to; exclusivity is checked per sub-class."""

    TIMHRT = "Timhrt"
    MIKIKIR = "Mikikir"
    ASELTAGN = "Aseltagn"
    MUYA = "Muya"
    FAMILY_LEADER = "Family Leader"

    @classmethod
    def parse(cls, value: str | None) -> SubClass | None:
        """Match free text to a sub-class, ignoring case and extra whitespace.

        Empty input means "no sub-class" and returns None.

        Raises:
            ValueError: If the text names no known sub-class
        """
        if value is None:
            return None
        cleaned = " ".join(value.split())
        if not cleaned:
            return None
        for member in cls:
            if member.value.casefold() == cleaned.casefold():
                return member
        options = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown sub-class {cleaned!r} (expected one of: {options})")
