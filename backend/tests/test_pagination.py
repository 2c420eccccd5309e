"""Pagination helper: request validation, limit cap, page sizes against a known record count."""

import pytest
from sqlalchemy import select

from app.core.exceptions import ValidationError
from app.models.category import Category
from app.services.pagination import Page, PageRequest, paginate


async def _seed_categories(session_maker, n: int) -> None:
    async with session_maker() as session:
        session.add_all([Category(name=f"cat-{i:02d}") for i in range(n)])
        await session.commit()


def test_page_request_rejects_negative_offset():
    with pytest.raises(ValidationError):
        PageRequest.create(offset=-1, limit=10, max_limit=100)


@pytest.mark.parametrize("limit", [0, -5])
def test_page_request_rejects_non_positive_limit(limit):
    with pytest.raises(ValidationError):
        PageRequest.create(offset=0, limit=limit, max_limit=100)


def test_page_request_caps_limit():
    assert PageRequest.create(offset=0, limit=1000, max_limit=100).limit == 100
    assert PageRequest.create(offset=5, limit=10, max_limit=100) == PageRequest(offset=5, limit=10)


def test_has_more():
    assert Page(records=[], offset=0, limit=10, total_records=25).has_more
    assert not Page(records=[], offset=20, limit=10, total_records=25).has_more


@pytest.mark.asyncio
async def test_first_and_last_page_of_25(session_maker):
    await _seed_categories(session_maker, 25)
    stmt = select(Category).order_by(Category.name.asc())
    async with session_maker() as session:
        first = await paginate(session, stmt, PageRequest.create(0, 10, 100))
        last = await paginate(session, stmt, PageRequest.create(20, 10, 100))
        beyond = await paginate(session, stmt, PageRequest.create(40, 10, 100))
    assert len(first.records) == 10
    assert first.total_records == 25
    assert [c.name for c in first.records][:2] == ["cat-00", "cat-01"]
    assert len(last.records) == 5
    assert last.total_records == 25
    assert [c.name for c in last.records][-1] == "cat-24"
    assert beyond.records == []
    assert beyond.total_records == 25


@pytest.mark.asyncio
async def test_pages_do_not_overlap(session_maker):
    await _seed_categories(session_maker, 25)
    stmt = select(Category).order_by(Category.name.asc())
    seen: list[str] = []
    async with session_maker() as session:
        for offset in range(0, 25, 10):
            page = await paginate(session, stmt, PageRequest.create(offset, 10, 100))
            assert len(page.records) <= page.limit
            seen.extend(c.id for c in page.records)
    assert len(seen) == len(set(seen)) == 25
