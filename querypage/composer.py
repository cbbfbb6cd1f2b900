"""Compose filtered, sorted, paged and projected lazy queries.

The pipeline order is fixed: eager-load, filter, sort, paginate, project.
The filtered query is built once and shared by the page and by the deferred
total count, so both always see the same filter and eager-load state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, NamedTuple, TypeVar

from querypage.config import PAGE_SIZE_DEFAULT
from querypage.errors import InvalidArgument, MissingRequiredArgument
from querypage.query.base import LazyQuery
from querypage.schemas.common import PageRequest, SortDirection, page_offset

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SortKey(NamedTuple):
    """A key selector paired with its sort direction."""

    key: Any
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def coerce(cls, value: Any) -> SortKey:
        """Build a SortKey from a SortKey, a ``(key, direction)`` pair or a bare key.

        Two-item lists count as pairs, so JSON-decoded sort keys keep their direction.
        """
        if isinstance(value, SortKey):
            key, direction = value
        elif isinstance(value, (tuple, list)):
            if len(value) != 2:
                raise InvalidArgument(f"Sort keys are (key, direction) pairs, got {len(value)} items")
            key, direction = value
        else:
            key, direction = value, SortDirection.ASC
        try:
            return cls(key, SortDirection(direction))
        except ValueError:
            raise InvalidArgument(f"Unknown sort direction: {direction!r}") from None

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """A page query plus a deferred count over the same filtered rows.

    ``count_total`` re-executes on every call; its result is never cached.
    For async queries it returns an awaitable.
    """

    paged_query: LazyQuery[T]
    count_total: Callable[[], Any]
    page: int
    size: int

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.size)


def _validate_page_argument(name: str, value: Any) -> int:
    if value is None:
        raise MissingRequiredArgument(name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"'{name}' must be an integer, got {type(value).__name__}")
    if value < 1:
        raise InvalidArgument(f"'{name}' must be >= 1, got {value}")
    return value


@dataclass(frozen=True)
class QueryComposer:
    """The composition directives for a single page request.

    Arguments are validated when the composer is created, before any query is
    touched. ``compose()`` may be called on any number of base queries.
    """

    page: int | None = 1
    size: int | None = PAGE_SIZE_DEFAULT
    filter: Any = None
    includes: Callable[[LazyQuery], LazyQuery | None] | None = None
    project: Any = None
    sort_keys: Sequence[Any] = field(default_factory=tuple)

    def __post_init__(self):
        _validate_page_argument("page", self.page)
        _validate_page_argument("size", self.size)
        object.__setattr__(self, "sort_keys", tuple(SortKey.coerce(k) for k in self.sort_keys or ()))

    @classmethod
    def from_request(cls, request: PageRequest, **directives: Any) -> QueryComposer:
        return cls(page=request.page, size=request.size, **directives)

    @property
    def skip_count(self) -> int:
        return page_offset(self.page, self.size)

    def compose(self, base_query: LazyQuery[T]) -> PagedResult:
        """Build the page query and its deferred total count.

        Args:
            base_query: The lazy query to page over.

        Returns:
            A PagedResult whose ``paged_query`` yields at most ``size`` rows and
            whose ``count_total`` counts every row passing the filter.
        """
        if base_query is None:
            raise MissingRequiredArgument("base_query")

        filtered = self._filter_and_include(base_query)
        paged = self._paginate(self._sort(filtered))
        if self.project is not None:
            paged = paged.select(self.project)

        logger.debug(
            "Composed page %d (size %d, skip %d): filtered=%s included=%s sort_keys=%d projected=%s",
            self.page,
            self.size,
            self.skip_count,
            self.filter is not None,
            self.includes is not None,
            len(self.sort_keys),
            self.project is not None,
        )

        def count_total():
            return filtered.count()

        return PagedResult(paged_query=paged, count_total=count_total, page=self.page, size=self.size)

    def _filter_and_include(self, query: LazyQuery[T]) -> LazyQuery[T]:
        if self.includes is not None:
            included = self.includes(query)
            # A directive with nothing to attach may return None.
            if included is not None:
                query = included
        if self.filter is not None:
            query = query.where(self.filter)
        return query

    def _sort(self, query: LazyQuery[T]) -> LazyQuery[T]:
        for position, sort_key in enumerate(self.sort_keys):
            if position == 0:
                query = query.order_by(sort_key.key, descending=sort_key.descending)
            else:
                query = query.then_by(sort_key.key, descending=sort_key.descending)
        return query

    def _paginate(self, query: LazyQuery[T]) -> LazyQuery[T]:
        if self.skip_count == 0:
            return query.take(self.size)
        return query.skip(self.skip_count).take(self.size)


def compose_page(
    base_query: LazyQuery[T],
    page: int | None = 1,
    size: int | None = PAGE_SIZE_DEFAULT,
    filter: Any = None,
    includes: Callable[[LazyQuery], LazyQuery | None] | None = None,
    project: Any = None,
    sort_keys: Sequence[Any] | None = None,
) -> PagedResult:
    """Filter, sort, page and project ``base_query``.

    Omitting ``page`` or ``size`` uses the defaults (1 and 12); passing
    ``None`` explicitly raises MissingRequiredArgument.

    Args:
        base_query: The lazy query to page over.
        page: 1-based page number.
        size: Maximum number of rows per page.
        filter: Predicate applied before paging and counting.
        includes: Eager-load directive, called with the base query.
        project: Projection applied to the paged rows only.
        sort_keys: ``(key, direction)`` pairs, primary key first.

    Returns:
        A PagedResult with the page query and a deferred ``count_total``.
    """
    composer = QueryComposer(
        page=page,
        size=size,
        filter=filter,
        includes=includes,
        project=project,
        sort_keys=sort_keys or (),
    )
    return composer.compose(base_query)
