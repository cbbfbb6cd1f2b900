"""Lazy queries over SQLAlchemy ``Select`` statements.

The statement is only compiled and executed when a terminal operation runs:
``all()`` (or iteration) for the rows, ``count()`` for the total. Counting
wraps the statement in a subquery::

    SELECT count(*) FROM (<statement>) AS anon_1

so filters, joins and eager-load options carried by the statement are honoured
without loading any rows.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any, TypeVar

from sqlalchemy import Select, asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session
from sqlalchemy.sql import ClauseElement

from querypage.errors import UnboundQueryError, UnsupportedComposition
from querypage.query.base import LazyQuery

T = TypeVar("T")

# How fetched rows are unpacked.
ENTITY = "entity"
SCALAR = "scalar"
ROWS = "rows"


def _is_sql_expression(obj: Any) -> bool:
    return isinstance(obj, ClauseElement) or hasattr(obj, "__clause_element__")


class _SelectQueryBase(LazyQuery[T]):
    def __init__(
        self,
        statement: Select,
        session: Any = None,
        *,
        offset: int = 0,
        limit: int | None = None,
        ordered: bool = False,
        shape: str = ENTITY,
        transform: Callable[[Any], Any] | None = None,
    ):
        self._statement = statement
        self.session = session
        self._offset = offset
        self._limit = limit
        self._ordered = ordered
        self._shape = shape
        self._transform = transform

    def _replace(self, **changes):
        state = {
            "statement": self._statement,
            "session": self.session,
            "offset": self._offset,
            "limit": self._limit,
            "ordered": self._ordered,
            "shape": self._shape,
            "transform": self._transform,
        }
        state.update(changes)
        return type(self)(**state)

    @property
    def is_paged(self) -> bool:
        return self._offset > 0 or self._limit is not None

    def _require_unpaged(self, operation: str) -> None:
        if self.is_paged:
            raise UnsupportedComposition(f"{operation}() cannot be applied after skip() or take()")

    def where(self, predicate: Any):
        self._require_unpaged("where")
        if self._transform is not None:
            raise UnsupportedComposition("where() cannot be applied after a Python projection")
        return self._replace(statement=self._statement.where(predicate))

    def order_by(self, key: Any, descending: bool = False):
        self._require_unpaged("order_by")
        ordering = desc(key) if descending else asc(key)
        return self._replace(statement=self._statement.order_by(None).order_by(ordering), ordered=True)

    def then_by(self, key: Any, descending: bool = False):
        if not self._ordered:
            raise UnsupportedComposition("then_by() requires a preceding order_by()")
        self._require_unpaged("then_by")
        ordering = desc(key) if descending else asc(key)
        return self._replace(statement=self._statement.order_by(ordering))

    def options(self, *options: Any):
        """Attach ORM loader options, e.g. ``selectinload(Author.books)``."""
        return self._replace(statement=self._statement.options(*options))

    def skip(self, count: int):
        count = self._check_count("skip", count)
        limit = None if self._limit is None else max(self._limit - count, 0)
        return self._replace(offset=self._offset + count, limit=limit)

    def take(self, count: int):
        count = self._check_count("take", count)
        limit = count if self._limit is None else min(self._limit, count)
        return self._replace(limit=limit)

    def select(self, projection: Any):
        """Project each row.

        SQL column expressions (or a sequence of them) replace the selected
        columns; a single column yields scalars, several yield rows. Any other
        callable is applied in Python to each fetched row.
        """
        columns: Sequence[Any] | None = None
        if _is_sql_expression(projection):
            columns = [projection]
        elif isinstance(projection, (list, tuple)) and projection and all(map(_is_sql_expression, projection)):
            columns = list(projection)

        if columns is not None:
            if self._transform is not None:
                raise UnsupportedComposition("Column projection cannot follow a Python projection")
            return self._replace(
                statement=self._statement.with_only_columns(*columns),
                shape=SCALAR if len(columns) == 1 else ROWS,
            )

        if not callable(projection):
            raise UnsupportedComposition(f"Cannot project with {type(projection).__name__}")
        previous = self._transform
        transform = projection if previous is None else (lambda row: projection(previous(row)))
        return self._replace(transform=transform)

    @property
    def statement(self) -> Select:
        """The statement with offset and limit applied."""
        statement = self._statement
        if self._offset:
            statement = statement.offset(self._offset)
        if self._limit is not None:
            statement = statement.limit(self._limit)
        return statement

    @property
    def count_statement(self) -> Select:
        return select(func.count()).select_from(self.statement.subquery())

    def _bound_session(self):
        if self.session is None:
            raise UnboundQueryError("Query is not bound to a session")
        return self.session

    def _unpack(self, result) -> list[Any]:
        if self._shape == ENTITY:
            rows = result.scalars().unique().all()
        elif self._shape == SCALAR:
            rows = result.scalars().all()
        else:
            rows = result.all()
        if self._transform is not None:
            return [self._transform(row) for row in rows]
        return list(rows)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(offset={self._offset}, limit={self._limit}, shape={self._shape!r})"


class SelectQuery(_SelectQueryBase[T]):
    """Lazy query over a ``Select`` executed on a synchronous ``Session``."""

    def __init__(self, statement: Select, session: Session | None = None, **state: Any):
        super().__init__(statement, session, **state)

    def all(self) -> list[T]:
        session = self._bound_session()
        return self._unpack(session.execute(self.statement))

    def count(self) -> int:
        session = self._bound_session()
        return session.execute(self.count_statement).scalar_one()

    def __iter__(self) -> Iterator[T]:
        return iter(self.all())


class AsyncSelectQuery(_SelectQueryBase[T]):
    """Lazy query over a ``Select`` executed on an ``AsyncSession``.

    ``all()`` and ``count()`` are coroutines.
    """

    def __init__(self, statement: Select, session: AsyncSession | None = None, **state: Any):
        super().__init__(statement, session, **state)

    async def all(self) -> list[T]:
        session = self._bound_session()
        return self._unpack(await session.execute(self.statement))

    async def count(self) -> int:
        session = self._bound_session()
        return (await session.execute(self.count_statement)).scalar_one()
