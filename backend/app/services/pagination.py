"""Offset/limit paging for list endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    offset: int
    limit: int

    @classmethod
    def create(cls, offset: int, limit: int, max_limit: int) -> PageRequest:
        """Validate offset >= 0 and limit > 0; cap limit at max_limit to bound query cost."""
        if offset < 0:
            raise ValidationError("offset must be >= 0", code="INVALID_PAGINATION", details={"offset": offset})
        if limit <= 0:
            raise ValidationError("limit must be > 0", code="INVALID_PAGINATION", details={"limit": limit})
        return cls(offset=offset, limit=min(limit, max_limit))


@dataclass
class Page(Generic[T]):
    records: list[T]
    offset: int
    limit: int
    total_records: int

    @property
    def has_more(self) -> bool:
        return (self.offset + self.limit) < self.total_records


async def paginate(session: AsyncSession, stmt: Select[Any], page: PageRequest) -> Page[Any]:
    """
    Run stmt for one page plus a count over the unpaginated query.

    stmt must carry a deterministic ORDER BY. The count and the slice are two
    statements, so total_records can drift from the page under concurrent writes.
    """
    count_q = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await session.execute(count_q)).scalar() or 0
    r = await session.execute(stmt.offset(page.offset).limit(page.limit))
    records = list(r.scalars().all())
    return Page(records=records, offset=page.offset, limit=page.limit, total_records=total)
