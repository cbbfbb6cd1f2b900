"""Abstract lazy query contract consumed by the composer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from querypage.errors import InvalidArgument

T = TypeVar("T")


class LazyQuery(ABC, Generic[T]):
    """A composable query that is only executed by a terminal operation.

    Every composition method returns a new query and leaves the receiver
    untouched, so a query can be shared as the basis of several derived
    queries. Enumeration and ``count()`` are the terminal operations; nothing
    else may reach the data source.
    """

    @abstractmethod
    def where(self, predicate: Any) -> LazyQuery[T]:
        """Keep only the elements matching ``predicate``."""

    @abstractmethod
    def order_by(self, key: Any, descending: bool = False) -> LazyQuery[T]:
        """Order by ``key``, replacing any previous ordering."""

    @abstractmethod
    def then_by(self, key: Any, descending: bool = False) -> LazyQuery[T]:
        """Add ``key`` as a tie-breaker to the current ordering.

        Raises:
            UnsupportedComposition: If the query has no ordering yet.
        """

    @abstractmethod
    def skip(self, count: int) -> LazyQuery[T]:
        """Bypass the first ``count`` elements."""

    @abstractmethod
    def take(self, count: int) -> LazyQuery[T]:
        """Keep at most ``count`` elements."""

    @abstractmethod
    def select(self, projection: Any) -> LazyQuery[Any]:
        """Map each element through ``projection``."""

    @abstractmethod
    def count(self) -> Any:
        """Execute a count of the elements this query yields."""

    @staticmethod
    def _check_count(name: str, count: int) -> int:
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidArgument(f"{name}() expects an integer, got {type(count).__name__}")
        if count < 0:
            raise InvalidArgument(f"{name}() expects a non-negative count, got {count}")
        return count
