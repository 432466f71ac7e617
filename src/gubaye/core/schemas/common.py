"""Shared schema pieces (request base, pagination)."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Request body accepting both camelCase (web client) and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(BaseModel):
    """Page metadata returned by list endpoints."""

    current_page: int
    total_pages: int
    total: int
    limit: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> "Pagination":
        total_pages = max(1, -(-total // limit))
        return cls(
            current_page=page,
            total_pages=total_pages,
            total=total,
            limit=limit,
            has_next=page < total_pages,
            has_prev=page > 1,
        )
