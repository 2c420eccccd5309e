"""Shared pagination schemas for list endpoints."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard paginated response: records + total + cursor info."""

    records: list[T]
    offset: int
    limit: int
    total_records: int
    has_more: bool

    @classmethod
    def from_page(cls, page: Any, item_schema: type[BaseModel]) -> "PaginatedResponse[T]":
        """Build from a services.pagination.Page, validating each ORM row through item_schema."""
        return cls(
            records=[item_schema.model_validate(r) for r in page.records],
            offset=page.offset,
            limit=page.limit,
            total_records=page.total_records,
            has_more=page.has_more,
        )
