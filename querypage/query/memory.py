"""Lazy queries over Python iterables."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from itertools import islice
from typing import Any, TypeVar

from querypage.errors import UnsupportedComposition
from querypage.query.base import LazyQuery

T = TypeVar("T")


@dataclass(frozen=True)
class _Stage:
    name: str
    arg: Any


class InMemoryQuery(LazyQuery[T]):
    """Lazy query over an iterable or a callable producing one.

    Pass a zero-argument callable when the source should be re-read on every
    evaluation (a live source). A plain list is iterated afresh each time, a
    one-shot iterator can only be evaluated once.

    Stages are recorded in call order and replayed when the query is
    enumerated or counted.
    """

    def __init__(self, source: Iterable[T] | Callable[[], Iterable[T]], stages: tuple[_Stage, ...] = ()):
        self._source = source
        self._stages = stages

    def _extend(self, name: str, arg: Any) -> InMemoryQuery:
        return InMemoryQuery(self._source, (*self._stages, _Stage(name, arg)))

    def where(self, predicate: Callable[[T], bool]) -> InMemoryQuery[T]:
        return self._extend("where", predicate)

    def order_by(self, key: Callable[[T], Any], descending: bool = False) -> InMemoryQuery[T]:
        # Orderings not yet consumed by skip() or take() are replaced.
        stages = list(self._stages)
        for index in range(len(stages) - 1, -1, -1):
            if stages[index].name in ("skip", "take"):
                break
            if stages[index].name == "order":
                del stages[index]
        return InMemoryQuery(self._source, (*stages, _Stage("order", ((key, descending),))))

    def then_by(self, key: Callable[[T], Any], descending: bool = False) -> InMemoryQuery[T]:
        # Filtering keeps the relative order, so the tie-breaker may reach back past where().
        for index in range(len(self._stages) - 1, -1, -1):
            stage = self._stages[index]
            if stage.name == "order":
                stages = list(self._stages)
                stages[index] = _Stage("order", (*stage.arg, (key, descending)))
                return InMemoryQuery(self._source, tuple(stages))
            if stage.name != "where":
                break
        raise UnsupportedComposition("then_by() requires a preceding order_by()")

    def skip(self, count: int) -> InMemoryQuery[T]:
        return self._extend("skip", self._check_count("skip", count))

    def take(self, count: int) -> InMemoryQuery[T]:
        return self._extend("take", self._check_count("take", count))

    def select(self, projection: Callable[[T], Any]) -> InMemoryQuery[Any]:
        return self._extend("select", projection)

    def count(self) -> int:
        return sum(1 for _ in self)

    def all(self) -> list[T]:
        return list(self)

    def __iter__(self) -> Iterator[T]:
        items: Iterable[Any] = self._source() if callable(self._source) else self._source
        for stage in self._stages:
            items = self._apply(stage, items)
        return iter(items)

    @staticmethod
    def _apply(stage: _Stage, items: Iterable[Any]) -> Iterable[Any]:
        if stage.name == "where":
            return filter(stage.arg, items)
        if stage.name == "select":
            return map(stage.arg, items)
        if stage.name == "skip":
            return islice(items, stage.arg, None)
        if stage.name == "take":
            return islice(items, stage.arg)
        # Python's sort is stable, so sorting by the least significant key
        # first leaves the primary key in control.
        ordered = list(items)
        for key, descending in reversed(stage.arg):
            ordered.sort(key=key, reverse=descending)
        return ordered

    def __repr__(self) -> str:
        return f"InMemoryQuery(stages={[s.name for s in self._stages]})"
