"""
Data structures shared by persistence components.

- PagingParams: skip/take/total request for a page of results
- DataPage: a page of items with an optional total count
- FilterParams: free-form filter values a persistence turns into SQL
- IdGenerator: unique ids for items created without one
"""

import uuid
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from litepersist.config import ConfigParams

T = TypeVar("T")

# Partial updates are plain maps of column (or JSON field) to new value
AnyValueMap = dict[str, Any]


class PagingParams(BaseModel):
    """
    Paging request for queries that return DataPage.

    Attributes:
        skip: Number of items to skip (None means start from the beginning)
        take: Number of items to return (None means the component maximum)
        total: Whether to also count all matching items
    """

    model_config = ConfigDict(frozen=True)

    skip: int | None = Field(default=None, description="Items to skip")
    take: int | None = Field(default=None, description="Items to return")
    total: bool = Field(default=False, description="Count all matching items")

    def get_skip(self, min_skip: int) -> int:
        """Get skip clamped from below by ``min_skip``."""
        if self.skip is None or self.skip < min_skip:
            return min_skip
        return self.skip

    def get_take(self, max_take: int) -> int:
        """Get take clamped to ``[0, max_take]``, defaulting to ``max_take``."""
        if self.take is None:
            return max_take
        if self.take < 0:
            return 0
        return min(self.take, max_take)


class DataPage(BaseModel, Generic[T]):
    """
    A page of items returned by a paged query.

    Attributes:
        data: Items on this page
        total: Number of items matching the filter, when requested
    """

    data: list[T] = Field(default_factory=list)
    total: int | None = None


class FilterParams(ConfigParams):
    """Filter values keyed by name, e.g. FilterParams.from_tuples("key", "abc")."""


class IdGenerator:
    """Generates ids for items that do not carry one."""

    @staticmethod
    def next_long() -> str:
        """Generate a 32 character hex id."""
        return uuid.uuid4().hex