"""
Unit tests for shared data structures.

Tests cover:
- PagingParams clamping
- DataPage defaults and serialization
- IdGenerator format
"""

import pytest
from pydantic import ValidationError

from litepersist.data import DataPage, FilterParams, IdGenerator, PagingParams


class TestPagingParams:
    """Tests for PagingParams."""

    def test_defaults(self) -> None:
        paging = PagingParams()
        assert paging.skip is None
        assert paging.take is None
        assert paging.total is False

    def test_get_skip_uses_min_when_unset(self) -> None:
        assert PagingParams().get_skip(-1) == -1
        assert PagingParams().get_skip(0) == 0

    def test_get_skip_clamps_below_min(self) -> None:
        assert PagingParams(skip=-5).get_skip(0) == 0
        assert PagingParams(skip=10).get_skip(0) == 10

    def test_get_take_defaults_to_max(self) -> None:
        assert PagingParams().get_take(100) == 100

    def test_get_take_clamps(self) -> None:
        assert PagingParams(take=500).get_take(100) == 100
        assert PagingParams(take=-1).get_take(100) == 0
        assert PagingParams(take=20).get_take(100) == 20

    def test_is_frozen(self) -> None:
        paging = PagingParams(skip=1)
        with pytest.raises(ValidationError):
            paging.skip = 2  # type: ignore[misc]


class TestDataPage:
    """Tests for DataPage."""

    def test_defaults(self) -> None:
        page: DataPage[dict] = DataPage()
        assert page.data == []
        assert page.total is None

    def test_with_total(self) -> None:
        page = DataPage[dict](data=[{"id": "1"}], total=10)
        assert page.model_dump() == {"data": [{"id": "1"}], "total": 10}


class TestFilterParams:
    """Tests for FilterParams."""

    def test_from_tuples(self) -> None:
        filter = FilterParams.from_tuples("key", "abc", "ids", "1,2")
        assert filter.get_as_nullable_string("key") == "abc"
        assert filter.get_as_nullable_string("missing") is None


class TestIdGenerator:
    """Tests for IdGenerator."""

    def test_next_long_is_32_hex(self) -> None:
        value = IdGenerator.next_long()
        assert len(value) == 32
        int(value, 16)

    def test_next_long_is_unique(self) -> None:
        assert len({IdGenerator.next_long() for _ in range(100)}) == 100
