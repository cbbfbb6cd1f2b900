import inspect

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from querypage.composer import compose_page
from querypage.pagination import fetch_page_async
from querypage.query.sql import AsyncSelectQuery
from tests.integration.models import Author, Book


async def test_page_and_count(async_session: AsyncSession):
    result = compose_page(
        AsyncSelectQuery(select(Book), async_session),
        page=2,
        size=4,
        filter=Book.author_id == 1,
        sort_keys=[(Book.id, "asc")],
    )
    items = await result.paged_query.all()

    assert [b.id for b in items] == [15, 18, 21, 24]
    assert await result.count_total() == 8


async def test_count_total_returns_awaitable(async_session: AsyncSession):
    result = compose_page(AsyncSelectQuery(select(Book), async_session))
    pending = result.count_total()

    assert inspect.isawaitable(pending)
    assert await pending == 25


async def test_fetch_page_async_with_includes(async_session: AsyncSession):
    async_session.expunge_all()
    result = compose_page(
        AsyncSelectQuery(select(Author), async_session),
        size=2,
        includes=lambda q: q.options(selectinload(Author.books)),
        sort_keys=[(Author.name, "desc")],
        project=lambda a: (a.name, len(a.books)),
    )
    items, meta = await fetch_page_async(result)

    assert items == [("author-3", 8), ("author-2", 9)]
    assert meta.total == 3
    assert meta.pages == 2


async def test_column_projection(async_session: AsyncSession):
    result = compose_page(
        AsyncSelectQuery(select(Book), async_session),
        page=5,
        size=5,
        project=Book.title,
        sort_keys=[(Book.year, "desc"), (Book.title, "asc")],
    )
    assert await result.paged_query.all() == ["book-05", "book-10", "book-15", "book-20", "book-25"]
