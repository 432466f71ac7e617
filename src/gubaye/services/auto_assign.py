"""
Auto-Assign Children Client

The matching of unplaced students to family units is done by an external
service. This module decides which families are worth sending, counts the
students still available, and forwards both. The service's only answer that
matters here is success: callers re-fetch families afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import httpx

from gubaye.assignment.draft import draft_from_family
from gubaye.assignment.registry import compute_selected_ids
from gubaye.assignment.roles import FamilyStatus
from gubaye.config import settings

logger = logging.getLogger(__name__)


class AutoAssignError(Exception):
    """Auto-assign service error."""

    pass


class AutoAssignNotConfiguredError(AutoAssignError):
    """Raised when no service URL is configured."""

    pass


@dataclass(frozen=True)
class AssignmentOptions:
    """Matching preferences the service applies when placing children."""

    target_batch: str | None = None
    mode: str = "homogeneous"
    max_children_per_family: int = 10
    consider_gender_balance: bool = True
    consider_age: bool = True
    address_level: str = "kebele"

    def to_payload(self) -> dict[str, Any]:
        return {
            "targetBatch": self.target_batch,
            "mode": self.mode,
            "maxChildrenPerFamily": self.max_children_per_family,
            "considerGenderBalance": self.consider_gender_balance,
            "considerAge": self.consider_age,
            "addressLevel": self.address_level,
        }


def eligible_families(families: Iterable[Any]) -> list[Any]:
    """Current families with at least one unit where both parents are set."""
    return [
        family
        for family in families
        if family.status == FamilyStatus.CURRENT
        and any(
            unit.father_id is not None and unit.mother_id is not None
            for gp in family.grand_parents
            for unit in gp.family_units
        )
    ]


def placed_student_ids(families: Iterable[Any]) -> set[UUID]:
    """Every student holding any slot in the given (fully loaded) families."""
    placed: set[UUID] = set()
    for family in families:
        placed |= compute_selected_ids(draft_from_family(family))
    return placed


def count_available_students(
    students: Iterable[Any], families: Iterable[Any], batches: set[str] | None = None
) -> int:
    """Active students, optionally limited to `batches`, not placed in any current family."""
    placed = placed_student_ids(f for f in families if f.status == FamilyStatus.CURRENT)
    return sum(
        1
        for student in students
        if student.is_active
        and student.id not in placed
        and (batches is None or student.batch in batches)
    )


class AutoAssignClient:
    """Client for the auto-assign children service."""

    def __init__(self, *, base_url: str, api_token: str = "", timeout: float = 30.0):
        """Initialize auto-assign client.

        Args:
            base_url: Service base URL (empty means not configured)
            api_token: Bearer token sent with each request
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout
        self.endpoint = f"{self.base_url}/auto-assign-children"

    @classmethod
    def from_settings(cls) -> AutoAssignClient:
        """Create client from application settings."""
        return cls(
            base_url=settings.AUTO_ASSIGN_SERVICE_URL,
            api_token=settings.AUTO_ASSIGN_API_TOKEN,
            timeout=settings.AUTO_ASSIGN_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    async def request_assignment(
        self,
        *,
        family_ids: list[UUID],
        batches: list[str],
        available_students: int,
        options: AssignmentOptions | None = None,
    ) -> None:
        """Ask the service to place available students into the given families.

        Raises:
            AutoAssignNotConfiguredError: If no service URL is set
            AutoAssignError: If the request fails or the service rejects it
        """
        if not self.is_configured:
            raise AutoAssignNotConfiguredError("Auto-assign service URL is not configured")

        payload = {
            "familyIds": [str(fid) for fid in family_ids],
            "batches": batches,
            "availableStudents": available_students,
            **(options or AssignmentOptions()).to_payload(),
        }
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.endpoint, json=payload, headers=headers, timeout=self.timeout
                )

                if response.status_code >= 400:
                    message = _error_message(response)
                    logger.error(
                        f"Auto-assign service error: {response.status_code} - {message}",
                        extra={"families": len(family_ids)},
                    )
                    raise AutoAssignError(
                        f"Auto-assign service error ({response.status_code}): {message}"
                    )

                logger.info(
                    f"Auto-assign requested for {len(family_ids)} families",
                    extra={"available_students": available_students},
                )

        except AutoAssignError:
            raise
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling auto-assign service: {e}")
            raise AutoAssignError(f"HTTP error: {e}") from e


def _error_message(response: Any) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or "Unknown error"
    if isinstance(data, dict):
        return str(data.get("message") or data.get("detail") or "Unknown error")
    return "Unknown error"
