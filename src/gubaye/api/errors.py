"""
Mapping of engine results to HTTP errors.

- Invalid submissions (missing fields, duplicate students...) → 422
- Integrity conflicts (slot taken, cap reached, stale version) → 409
"""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import HTTPException, status

from gubaye.assignment.results import Invalid

logger = logging.getLogger(__name__)


def reject(result: Invalid, *, conflict: bool = False) -> NoReturn:
    """Raise the HTTP error for a failed engine check."""
    code = status.HTTP_409_CONFLICT if conflict else status.HTTP_422_UNPROCESSABLE_ENTITY
    logger.info(f"Rejected write ({result.code}): {result.reason}")
    raise HTTPException(status_code=code, detail=result.as_detail())


def not_found(entity: str, entity_id: object) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{entity} not found with ID: {entity_id}",
    )


def stale_version(entity: str, current: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "code": "stale_version",
            "message": f"{entity} was modified by someone else (now at version {current}); "
            "reload and re-apply your changes",
        },
    )
