"""Helpers that execute a composed page and its total count."""

from typing import Any

from querypage.composer import PagedResult
from querypage.schemas.common import PaginationMeta


def fetch_page(result: PagedResult) -> tuple[list[Any], PaginationMeta]:
    """Execute a composed page and count its filtered rows.

    The two round trips are independent; concurrent writes may make the
    total disagree with the page contents.

    Args:
        result: The output of ``compose_page``.

    Returns:
        A tuple of (list of results, pagination metadata).
    """
    items = list(result.paged_query)
    total = result.count_total()
    return items, PaginationMeta(total=total, page=result.page, page_size=result.size)


async def fetch_page_async(result: PagedResult) -> tuple[list[Any], PaginationMeta]:
    """Async counterpart of ``fetch_page`` for ``AsyncSelectQuery`` pages."""
    total = await result.count_total()
    items = await result.paged_query.all()
    return items, PaginationMeta(total=total, page=result.page, page_size=result.size)
