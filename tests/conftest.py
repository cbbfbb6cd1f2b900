from dataclasses import dataclass

import pytest


@dataclass(frozen=True)
class Row:
    id: int
    name: str
    group: str
    score: int


def make_rows(n: int = 25) -> list[Row]:
    return [Row(id=i, name=f"row-{i:02d}", group="abc"[i % 3], score=i % 4) for i in range(1, n + 1)]


@pytest.fixture
def rows() -> list[Row]:
    return make_rows()
