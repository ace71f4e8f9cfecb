"""Tests for spine_variants.core.result module."""

import pytest

from spine_variants.core.errors import DecodeError, Issue
from spine_variants.core.result import (
    Err,
    Ok,
    Result,
    partition_results,
    try_result_with,
)


class TestOk:
    """Test Ok class."""

    def test_create_ok(self):
        """Create Ok with value."""
        result = Ok(42)
        assert result.value == 42
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_unwrap_variants(self):
        assert Ok("hello").unwrap() == "hello"
        assert Ok(10).unwrap_or(99) == 10
        assert Ok(20).unwrap_or_else(lambda e: 99) == 20

    def test_map_chaining(self):
        """map can be chained."""
        result = Ok(3).map(lambda x: x * 2).map(lambda x: x + 1)
        assert result.unwrap() == 7

    def test_flat_map(self):
        """flat_map chains Result-returning functions."""
        def double_if_even(x: int) -> Result[int]:
            if x % 2 == 0:
                return Ok(x * 2)
            return Err(ValueError("Odd number"))

        assert Ok(4).flat_map(double_if_even).unwrap() == 8
        assert Ok(3).flat_map(double_if_even).is_err()

    def test_error_side_is_noop(self):
        assert Ok(42).map_err(lambda e: ValueError("new")).unwrap() == 42
        assert Ok(42).or_else(lambda e: Ok(99)).unwrap() == 42

    def test_to_dict(self):
        assert Ok(1).to_dict() == {"ok": True, "value": 1}


class TestErr:
    """Test Err class."""

    def test_unwrap_raises_carried_error(self):
        error = DecodeError.from_issues([Issue(path=("a",), message="bad")])
        with pytest.raises(DecodeError) as exc_info:
            Err(error).unwrap()
        assert exc_info.value is error

    def test_defaults(self):
        assert Err(ValueError("x")).unwrap_or(5) == 5
        assert Err(ValueError("x")).unwrap_or_else(lambda e: str(e)) == "x"

    def test_map_is_noop(self):
        assert Err(ValueError("x")).map(lambda v: v * 2).is_err()

    def test_map_err_and_or_else(self):
        result = Err(ValueError("x")).map_err(lambda e: KeyError(str(e)))
        assert isinstance(result.error, KeyError)
        assert Err(ValueError("x")).or_else(lambda e: Ok(0)).unwrap() == 0

    def test_to_dict_variant_error(self):
        error = DecodeError.from_issues([Issue(path=("a",), message="bad")])
        data = Err(error).to_dict()
        assert data["ok"] is False
        assert data["error"]["category"] == "DECODE"

    def test_to_dict_plain_exception(self):
        data = Err(ValueError("boom")).to_dict()
        assert data["error"] == {"error_type": "ValueError", "message": "boom"}


class TestHelpers:
    """Test try_result_with / partition_results."""

    def test_try_result_with_success(self):
        assert try_result_with(lambda: int("5")).unwrap() == 5

    def test_try_result_with_no_mapper(self):
        assert isinstance(try_result_with(lambda: int("x")).error, ValueError)

    def test_try_result_with_mapper(self):
        result = try_result_with(lambda: int("x"), lambda e: DecodeError(str(e)))
        assert isinstance(result.error, DecodeError)

    def test_partition_results(self):
        values, errors = partition_results([Ok(1), Err(ValueError("x")), Ok(2)])
        assert values == [1, 2]
        assert len(errors) == 1
