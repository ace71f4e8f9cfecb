"""
Structured error types for spine-variants.

Provides a small, typed hierarchy of errors that separates the three ways the
variant engine can fail: a malformed declaration, an external value that does
not decode, and a canonical value that cannot be encoded.

Manifesto:
    - **Definition errors fail fast:** A malformed struct or field is a
      programming mistake. It is raised at construction time and never wrapped
      in a Result.
    - **Decode errors are data:** A rejected payload is expected at runtime and
      is returned as ``Err(DecodeError)`` carrying every offending path.
    - **Encode errors are modeled:** Most encodes are total, but transforms
      with partial encode paths must still be able to report failure.
    - **Rich context:** Every error knows its struct, variant and field.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        VariantError                          │
        │          (category, context, cause, to_dict())               │
        ├──────────────────────────────────────────────────────────────┤
        │                                                              │
        │  DefinitionError             DecodeError       EncodeError   │
        │  (DEFINITION)                (DECODE)          (ENCODE)      │
        │       │                        │                  │          │
        │  UnknownVariantError        issues: tuple[Issue, ...]        │
        │  OutputKeyCollisionError                                     │
        │  EmptySchemaError                                            │
        │  UnreachableFieldError                                       │
        │  ReservedNameError                                           │
        └──────────────────────────────────────────────────────────────┘

Examples:
    Reporting a rejected payload:

    >>> error = DecodeError.from_issues(
    ...     [Issue(path=("email",), message="Expected a string")],
    ...     schema="User",
    ...     variant="insert",
    ... )
    >>> error.issues[0].path_str
    'email'
    >>> error.context.variant
    'insert'

    Re-rooting nested issues:

    >>> nested = DecodeError.from_issues([Issue(path=("city",), message="Required")])
    >>> nested.with_prefix("address").issues[0].path_str
    'address.city'

Guardrails:
    ❌ DON'T: Catch DefinitionError to keep a model running
    ✅ DO: Fix the declaration; the process should not start with it

    ❌ DON'T: Raise DecodeError from descriptor code
    ✅ DO: Return ``Err(DecodeError(...))`` so the record codec can collect issues

Tags:
    error-handling, exception-hierarchy, decode-errors, definition-errors,
    spine-variants

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Categories mirror the three failure stages of the engine plus the usual
    configuration and internal buckets.

    Examples:
        >>> ErrorCategory.DECODE.value
        'DECODE'
        >>> ErrorCategory("DEFINITION") is ErrorCategory.DEFINITION
        True

    Attributes:
        DEFINITION: Malformed struct/field declarations (construction time)
        DECODE: External value rejected by a descriptor
        ENCODE: Canonical value could not be represented
        CONFIG: Invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    DEFINITION = "DEFINITION"
    DECODE = "DECODE"
    ENCODE = "ENCODE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields for the metadata the engine always knows (struct name,
    variant, field), plus a free-form ``metadata`` dict.

    Examples:
        >>> ctx = ErrorContext(schema="User", variant="json")
        >>> ctx.to_dict()
        {'schema': 'User', 'variant': 'json'}

        >>> ctx = ErrorContext()
        >>> ctx.metadata["output_key"] = "full_name"
        >>> ctx.to_dict()
        {'output_key': 'full_name'}
    """

    schema: str | None = None
    variant: str | None = None
    field_name: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["schema", "variant", "field_name"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class VariantError(Exception):
    """
    Base exception for all spine-variants errors.

    Every error carries:
    - **category:** ErrorCategory enum for classification
    - **context:** ErrorContext with struct/variant/field metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` to give sensible defaults.

    Examples:
        >>> error = VariantError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = VariantError("Bad field").with_context(schema="User", field_name="email")
        >>> error.context.field_name
        'email'

        >>> VariantError("Oops", category=ErrorCategory.CONFIG).to_dict()["category"]
        'CONFIG'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> VariantError:
        """
        Add context to this error (fluent API).

        Usage:
            raise DefinitionError("Bad key").with_context(schema="User", variant="api")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DEFINITION ERRORS (construction time, never recoverable)
# =============================================================================


class DefinitionError(VariantError):
    """
    Malformed struct or field declaration.

    Raised while a model is being defined (normally at import time). These
    indicate a programming mistake and should abort startup.
    """

    default_category = ErrorCategory.DEFINITION


class UnknownVariantError(DefinitionError):
    """A variant name outside the declared variant set was referenced."""

    def __init__(self, variant: str, declared: Sequence[str], message: str | None = None):
        self.variant = variant
        self.declared = tuple(declared)
        super().__init__(
            message or f"Unknown variant {variant!r}; declared variants are {list(self.declared)}"
        )
        self.context.variant = variant


class OutputKeyCollisionError(DefinitionError):
    """Two fields map to the same output key within one variant."""

    def __init__(self, variant: str, key: str, fields: Sequence[str]):
        self.variant = variant
        self.key = key
        self.fields = tuple(fields)
        super().__init__(
            f"Output key {key!r} is used by fields {list(self.fields)} in variant {variant!r}"
        )
        self.context.variant = variant
        self.context.metadata["output_key"] = key


class EmptySchemaError(DefinitionError):
    """A struct has no fields visible in its default variant."""


class UnreachableFieldError(DefinitionError):
    """A field would not be present in any variant."""


class ReservedNameError(DefinitionError):
    """A field or variant name collides with an attribute of the synthesized entity."""


# =============================================================================
# DECODE / ENCODE ERRORS (runtime, returned in Results)
# =============================================================================


@dataclass(frozen=True)
class Issue:
    """
    One rejected value inside a decode or encode.

    ``path`` is a tuple of segments: strings for record keys, integers for
    array positions.

    Examples:
        >>> Issue(path=("tags", 1), message="Expected a string").path_str
        'tags[1]'
        >>> Issue(path=(), message="Expected a mapping").path_str
        '<root>'
    """

    path: tuple[str | int, ...]
    message: str
    value: Any = None

    @property
    def path_str(self) -> str:
        if not self.path:
            return "<root>"
        parts: list[str] = []
        for segment in self.path:
            if isinstance(segment, int):
                parts.append(f"[{segment}]")
            elif parts:
                parts.append(f".{segment}")
            else:
                parts.append(str(segment))
        return "".join(parts)

    def with_prefix(self, *segments: str | int) -> Issue:
        return replace(self, path=tuple(segments) + self.path)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"path": self.path_str, "message": self.message}
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class _IssueError(VariantError):
    """Shared behaviour for errors that carry a list of issues."""

    _verb = "Processing"

    def __init__(
        self,
        message: str,
        *,
        issues: Iterable[Issue] = (),
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.issues: tuple[Issue, ...] = tuple(issues)

    @classmethod
    def from_issues(
        cls,
        issues: Iterable[Issue],
        *,
        schema: str | None = None,
        variant: str | None = None,
        cause: Exception | None = None,
    ):
        issues = tuple(issues)
        summary = "; ".join(f"{i.path_str}: {i.message}" for i in issues[:3])
        if len(issues) > 3:
            summary += f"; ... ({len(issues) - 3} more)"
        label = schema or "value"
        if variant:
            label = f"{label} ({variant})"
        error = cls(
            f"{cls._verb} {label} failed: {summary}",
            issues=issues,
            context=ErrorContext(schema=schema, variant=variant),
            cause=cause,
        )
        return error

    def with_prefix(self, *segments: str | int):
        """Return a copy whose issues are re-rooted under ``segments``."""
        return type(self)(
            self.message,
            issues=[issue.with_prefix(*segments) for issue in self.issues],
            context=self.context,
            cause=self.cause,
        )

    @property
    def paths(self) -> list[str]:
        return [issue.path_str for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["issues"] = [issue.to_dict() for issue in self.issues]
        return result


class DecodeError(_IssueError):
    """
    An external value was rejected during decode.

    Never partial: when a DecodeError is produced, no value was constructed.
    """

    default_category = ErrorCategory.DECODE
    _verb = "Decoding"


class EncodeError(_IssueError):
    """A canonical value could not be represented in the target variant."""

    default_category = ErrorCategory.ENCODE
    _verb = "Encoding"


def is_definition_error(error: Exception) -> bool:
    """Check whether an exception is a construction-time definition error."""
    return isinstance(error, DefinitionError)


__all__ = [
    "DecodeError",
    "DefinitionError",
    "EmptySchemaError",
    "EncodeError",
    "ErrorCategory",
    "ErrorContext",
    "Issue",
    "OutputKeyCollisionError",
    "ReservedNameError",
    "UnknownVariantError",
    "UnreachableFieldError",
    "VariantError",
    "is_definition_error",
]
