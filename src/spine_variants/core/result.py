"""
Result envelope for decode/encode outcomes.

Provides a typed Result[T] pattern that makes success/failure explicit: every
decode and encode in spine-variants returns ``Ok[T]`` or ``Err[T]`` instead of
raising. Callers that prefer exceptions call ``unwrap()``, which raises the
carried DecodeError/EncodeError.

Manifesto:
    - **Explicit over Implicit:** Rejected payloads are expected; they are
      values, not hidden exceptions
    - **All-or-nothing:** An Err never carries a partially decoded value
    - **Functional composition:** Chain descriptor steps with map/flat_map
      without nested try/except blocks

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T]                                │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[T]      │     Utilities           │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: Exc    │ • try_result_with()     │
        │ • map()         │ • map_err()     │ • partition_results()   │
        │ • flat_map()    │ • or_else()     │                         │
        │ • unwrap()      │ • unwrap_or()   │                         │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    >>> Ok(21).map(lambda x: x * 2).unwrap()
    42
    >>> Err(ValueError("bad")).unwrap_or(0)
    0

    Pattern matching:

    >>> match User.insert.decode(payload):
    ...     case Ok(record):
    ...         save(record)
    ...     case Err(error):
    ...         report(error.issues)

Tags:
    result-pattern, error-handling, functional-programming, spine-variants

Doc-Types:
    - API Reference
    - Result Pattern Guide
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from spine_variants.core.errors import VariantError


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    Examples:
        >>> ok = Ok(42)
        >>> ok.is_ok()
        True
        >>> Ok(10).flat_map(lambda x: Ok(x + 1)).unwrap()
        11
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def unwrap_or_else(self, f: Callable[[Exception], T]) -> T:
        """Get value or call f with error (always returns value for Ok)."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Chain to another Result-returning function."""
        return f(self.value)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        """Transform error if Err (no-op for Ok)."""
        return self

    def or_else(self, f: Callable[[Exception], Result[T]]) -> Result[T]:
        """Return self if Ok, otherwise call f with error."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result containing an error.

    Examples:
        >>> err = Err(ValueError("Invalid input"))
        >>> err.is_err()
        True
        >>> err.map(lambda x: x * 2).is_err()
        True
        >>> err.unwrap()
        Traceback (most recent call last):
        ...
        ValueError: Invalid input
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        """Get default since this is Err."""
        return default

    def unwrap_or_else(self, f: Callable[[Exception], T]) -> T:
        """Call f with error to get value."""
        return f(self.error)

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        """Transform the error."""
        return Err(f(self.error))

    def or_else(self, f: Callable[[Exception], Result[T]]) -> Result[T]:
        """Call f with error to try recovery."""
        return f(self.error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, VariantError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result_with(
    f: Callable[[], T],
    error_mapper: Callable[[Exception], Exception] | None = None,
) -> Result[T]:
    """
    Execute a function and map raised exceptions to a domain error.

    Examples:
        >>> from spine_variants.core.errors import DecodeError
        >>> result = try_result_with(lambda: int("x"), lambda e: DecodeError(str(e)))
        >>> type(result.error).__name__
        'DecodeError'
    """
    try:
        return Ok(f())
    except Exception as e:
        if error_mapper:
            return Err(error_mapper(e))
        return Err(e)


def partition_results(
    results: list[Result[T]],
) -> tuple[list[T], list[Exception]]:
    """
    Partition results into successes and failures.

    Examples:
        >>> values, errors = partition_results([Ok(1), Err(ValueError("x")), Ok(2)])
        >>> values
        [1, 2]
        >>> len(errors)
        1
    """
    values = []
    errors = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                errors.append(error)
    return values, errors


__all__ = [
    "Err",
    "Ok",
    "Result",
    "partition_results",
    "try_result_with",
]
