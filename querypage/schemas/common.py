import enum
import math

from pydantic import BaseModel, Field, computed_field

from querypage.config import PAGE_SIZE_DEFAULT


class SortDirection(enum.StrEnum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def _missing_(cls, value):
        # Accept "ASC", "Desc", ...
        if isinstance(value, str):
            return cls._value2member_map_.get(value.lower())
        return None


def page_offset(page: int, size: int) -> int:
    """Rows before a 1-based page of the given size."""
    return (page - 1) * size


class PageRequest(BaseModel):
    page: int = Field(1, ge=1)
    size: int = Field(PAGE_SIZE_DEFAULT, ge=1)

    model_config = {"frozen": True}

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.size)


class PaginationMeta(BaseModel):
    total: int
    page: int
    page_size: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pages(self) -> int:
        """Number of pages needed to hold ``total`` rows."""
        return math.ceil(self.total / self.page_size) if self.page_size else 0


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: dict | None = None
