"""pydantic-backed TypeDescriptor implementations.

The composition engine treats descriptors as opaque. This module supplies the
concrete ones the presets and examples are written with: primitive
descriptors that delegate validation to a ``pydantic.TypeAdapter``, and a
handful of combinators (refine, transform, optional, nullable, array, record,
union, auto-value) that compose them.

A descriptor has two sides. The *canonical* value is what application code
holds; the *external* value is what a given variant stores or sends.
``decode`` goes external -> canonical, ``encode`` goes back, ``validate``
checks a canonical value.

Examples:
    >>> Tags = String.transform(Array(String), *json_string_pair())
    >>> Tags.decode('["a","b"]').unwrap()
    ['a', 'b']
    >>> Tags.encode(["a", "b"]).unwrap()
    '["a","b"]'

    >>> Positive(Number).decode(-1).is_err()
    True

Tags:
    spine-variants, schema, descriptors, pydantic, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

import typing
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Annotated, Any

import pydantic
from pydantic import JsonValue, StringConstraints, TypeAdapter

from spine_variants.core.errors import DecodeError, EncodeError, Issue
from spine_variants.core.protocols import TypeDescriptor
from spine_variants.core.result import Err, Ok, Result
from spine_variants.core.settings import get_settings
from spine_variants.schema.transforms import ValueTransform, get_transform

_TRANSFORM_ERRORS = (ValueError, TypeError, KeyError, OverflowError)


def _decode_failure(message: str, value: Any = None, name: str | None = None) -> Err:
    return Err(DecodeError.from_issues([Issue(path=(), message=message, value=value)], schema=name))


def _encode_failure(message: str, value: Any = None, name: str | None = None) -> Err:
    return Err(EncodeError.from_issues([Issue(path=(), message=message, value=value)], schema=name))


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


class Descriptor:
    """Base class for the bundled descriptors.

    Subclasses implement ``validate``, ``decode`` and ``encode``. The
    combinator methods return new descriptors and never mutate ``self``.
    """

    name: str = "Descriptor"
    is_optional: bool = False
    lossy: bool = False
    auto: AutoValue | None = None

    def validate(self, value: Any) -> bool:
        raise NotImplementedError

    def decode(self, external: Any) -> Result[Any]:
        raise NotImplementedError

    def encode(self, value: Any) -> Result[Any]:
        raise NotImplementedError

    # ── Combinators ──────────────────────────────────────────────

    def refine(self, predicate: Callable[[Any], bool], message: str, name: str | None = None) -> Refined:
        """Add a check on the canonical value."""
        return Refined(self, predicate, message, name=name)

    def transform(
        self,
        target: TypeDescriptor,
        decode: Callable[[Any], Any],
        encode: Callable[[Any], Any],
        name: str | None = None,
    ) -> Transformed:
        """Convert between this descriptor's canonical value and ``target``'s external one."""
        return Transformed(self, target, decode, encode, name=name)

    def brand(self, name: str) -> Branded:
        """Give this descriptor a nominal name (``UserId``) without changing behaviour."""
        return Branded(self, name)

    def optional(self) -> OptionalKey:
        """The record key may be absent; an absent key decodes to ``None``."""
        return OptionalKey(self)

    def nullable(self) -> Nullable:
        """The record key is required but may hold ``None``."""
        return Nullable(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class AdapterDescriptor(Descriptor):
    """Descriptor whose external and canonical values coincide, validated by pydantic."""

    def __init__(self, tp: Any, name: str | None = None, *, strict: bool | None = None):
        self.type = tp
        self.name = name or _type_name(tp)
        self._adapter = TypeAdapter(tp)
        self._strict = strict

    def _strict_mode(self) -> bool:
        if self._strict is not None:
            return self._strict
        return get_settings().strict_types

    def decode(self, external: Any) -> Result[Any]:
        try:
            value = self._adapter.validate_python(external, strict=self._strict_mode())
        except pydantic.ValidationError as exc:
            issues = [
                Issue(path=tuple(error["loc"]), message=error["msg"], value=error.get("input"))
                for error in exc.errors()
            ]
            return Err(DecodeError.from_issues(issues, schema=self.name, cause=exc))
        return Ok(value)

    def validate(self, value: Any) -> bool:
        return self.decode(value).is_ok()

    def encode(self, value: Any) -> Result[Any]:
        if not self.validate(value):
            return _encode_failure(f"Expected {self.name}", value, self.name)
        return Ok(value)


class Refined(Descriptor):
    """A descriptor plus a predicate on the canonical value."""

    def __init__(self, base: TypeDescriptor, predicate: Callable[[Any], bool], message: str, name: str | None = None):
        self.base = base
        self.predicate = predicate
        self.message = message
        self.name = name or base.name

    @property
    def is_optional(self) -> bool:
        return getattr(self.base, "is_optional", False)

    def _check(self, value: Any) -> bool:
        if value is None and self.is_optional:
            return True
        try:
            return bool(self.predicate(value))
        except _TRANSFORM_ERRORS:
            return False

    def decode(self, external: Any) -> Result[Any]:
        result = self.base.decode(external)
        if result.is_err():
            return result
        if not self._check(result.value):
            return _decode_failure(self.message, result.value, self.name)
        return result

    def validate(self, value: Any) -> bool:
        return self.base.validate(value) and self._check(value)

    def encode(self, value: Any) -> Result[Any]:
        if not self._check(value):
            return _encode_failure(self.message, value, self.name)
        return self.base.encode(value)


class Branded(Descriptor):
    """Nominal wrapper; behaves exactly like ``base``."""

    def __init__(self, base: TypeDescriptor, name: str):
        self.base = base
        self.name = name

    @property
    def is_optional(self) -> bool:
        return getattr(self.base, "is_optional", False)

    def decode(self, external: Any) -> Result[Any]:
        return self.base.decode(external)

    def validate(self, value: Any) -> bool:
        return self.base.validate(value)

    def encode(self, value: Any) -> Result[Any]:
        return self.base.encode(value)


class Transformed(Descriptor):
    """
    Two descriptors joined by a conversion.

    decode: ``source.decode`` -> ``decode_fn`` -> ``target.decode``
    encode: ``target.encode`` -> ``encode_fn`` -> ``source.encode``

    The canonical value is ``target``'s; the external value is ``source``'s.
    """

    def __init__(
        self,
        source: TypeDescriptor,
        target: TypeDescriptor,
        decode: Callable[[Any], Any],
        encode: Callable[[Any], Any],
        name: str | None = None,
    ):
        self.source = source
        self.target = target
        self.decode_fn = decode
        self.encode_fn = encode
        self.name = name or f"{source.name} -> {target.name}"

    @classmethod
    def from_registry(
        cls,
        source: TypeDescriptor,
        target: TypeDescriptor,
        transform: str | ValueTransform,
        name: str | None = None,
    ) -> Transformed:
        """Build from a registered :class:`ValueTransform`."""
        if isinstance(transform, str):
            transform = get_transform(transform)
        descriptor = cls(source, target, transform.decode, transform.encode, name=name)
        descriptor.transform_name = transform.name
        return descriptor

    transform_name: str | None = None

    def decode(self, external: Any) -> Result[Any]:
        result = self.source.decode(external)
        if result.is_err():
            return result
        try:
            converted = self.decode_fn(result.value)
        except _TRANSFORM_ERRORS as exc:
            return _decode_failure(str(exc), result.value, self.name)
        return self.target.decode(converted)

    def validate(self, value: Any) -> bool:
        return self.target.validate(value)

    def encode(self, value: Any) -> Result[Any]:
        result = self.target.encode(value)
        if result.is_err():
            return result
        try:
            converted = self.encode_fn(result.value)
        except _TRANSFORM_ERRORS as exc:
            return _encode_failure(str(exc), result.value, self.name)
        return self.source.encode(converted)


class OptionalKey(Descriptor):
    """The key may be missing from a record. ``None`` stands for "absent"."""

    is_optional = True

    def __init__(self, inner: TypeDescriptor):
        self.inner = inner
        self.name = f"Optional[{inner.name}]"

    def decode(self, external: Any) -> Result[Any]:
        if external is None:
            return Ok(None)
        return self.inner.decode(external)

    def validate(self, value: Any) -> bool:
        return value is None or self.inner.validate(value)

    def encode(self, value: Any) -> Result[Any]:
        if value is None:
            return Ok(None)
        return self.inner.encode(value)


class Nullable(Descriptor):
    """The key is required; its value may be ``None``."""

    def __init__(self, inner: TypeDescriptor):
        self.inner = inner
        self.name = f"{inner.name} | None"

    def decode(self, external: Any) -> Result[Any]:
        if external is None:
            return Ok(None)
        return self.inner.decode(external)

    def validate(self, value: Any) -> bool:
        return value is None or self.inner.validate(value)

    def encode(self, value: Any) -> Result[Any]:
        if value is None:
            return Ok(None)
        return self.inner.encode(value)


class ArrayOf(Descriptor):
    """Homogeneous list; canonical value is a ``list``."""

    def __init__(self, item: TypeDescriptor):
        self.item = item
        self.name = f"Array[{item.name}]"

    def _each(self, values: Any, step: Callable[[Any], Result[Any]], error_cls: type) -> Result[Any]:
        if not isinstance(values, list | tuple):
            return Err(error_cls.from_issues([Issue(path=(), message="Expected an array", value=values)], schema=self.name))
        output: list[Any] = []
        issues: list[Issue] = []
        for index, item in enumerate(values):
            result = step(item)
            if result.is_err():
                issues.extend(prefixed_issues(result.error, index))
            else:
                output.append(result.value)
        if issues:
            return Err(error_cls.from_issues(issues, schema=self.name))
        return Ok(output)

    def decode(self, external: Any) -> Result[Any]:
        return self._each(external, self.item.decode, DecodeError)

    def validate(self, value: Any) -> bool:
        return isinstance(value, list | tuple) and all(self.item.validate(v) for v in value)

    def encode(self, value: Any) -> Result[Any]:
        return self._each(value, self.item.encode, EncodeError)


class RecordOf(Descriptor):
    """Mapping with uniform key and value descriptors; canonical value is a ``dict``."""

    def __init__(self, key: TypeDescriptor, value: TypeDescriptor):
        self.key = key
        self.value = value
        self.name = f"Record[{key.name}, {value.name}]"

    def _each(self, mapping: Any, key_step, value_step, error_cls: type) -> Result[Any]:
        if not isinstance(mapping, Mapping):
            return Err(error_cls.from_issues([Issue(path=(), message="Expected a mapping", value=mapping)], schema=self.name))
        output: dict[Any, Any] = {}
        issues: list[Issue] = []
        for raw_key, raw_value in mapping.items():
            key_result = key_step(raw_key)
            value_result = value_step(raw_value)
            if key_result.is_err():
                issues.extend(prefixed_issues(key_result.error, str(raw_key)))
            if value_result.is_err():
                issues.extend(prefixed_issues(value_result.error, str(raw_key)))
            if key_result.is_ok() and value_result.is_ok():
                output[key_result.value] = value_result.value
        if issues:
            return Err(error_cls.from_issues(issues, schema=self.name))
        return Ok(output)

    def decode(self, external: Any) -> Result[Any]:
        return self._each(external, self.key.decode, self.value.decode, DecodeError)

    def validate(self, value: Any) -> bool:
        return isinstance(value, Mapping) and all(
            self.key.validate(k) and self.value.validate(v) for k, v in value.items()
        )

    def encode(self, value: Any) -> Result[Any]:
        return self._each(value, self.key.encode, self.value.encode, EncodeError)


class UnionOf(Descriptor):
    """First member that accepts the value wins."""

    def __init__(self, *members: TypeDescriptor):
        if not members:
            raise ValueError("UnionOf requires at least one member")
        self.members = members
        self.name = " | ".join(m.name for m in members)

    def decode(self, external: Any) -> Result[Any]:
        for member in self.members:
            result = member.decode(external)
            if result.is_ok():
                return result
        return _decode_failure(f"Expected {self.name}", external, self.name)

    def validate(self, value: Any) -> bool:
        return any(member.validate(value) for member in self.members)

    def encode(self, value: Any) -> Result[Any]:
        for member in self.members:
            if member.validate(value):
                return member.encode(value)
        return _encode_failure(f"Expected {self.name}", value, self.name)


class AutoValue(Descriptor):
    """
    A value the engine computes instead of trusting the caller.

    ``mode="always"`` ignores any supplied value (auto-refreshed timestamps);
    ``mode="absent"`` generates only when the key is missing (app-generated
    identifiers). The record codec applies the policy; the descriptor itself
    decodes and encodes like ``inner``.
    """

    is_optional = True

    def __init__(self, inner: TypeDescriptor, factory: Callable[[], Any], mode: str = "always"):
        if mode not in ("always", "absent"):
            raise ValueError(f"AutoValue mode must be 'always' or 'absent', got {mode!r}")
        self.inner = inner
        self.factory = factory
        self.mode = mode
        self.name = f"Auto[{inner.name}]"

    @property
    def auto(self) -> AutoValue:
        return self

    @property
    def lossy(self) -> bool:
        return self.mode == "always"

    def generate(self) -> Any:
        return self.factory()

    def decode(self, external: Any) -> Result[Any]:
        return self.inner.decode(external)

    def validate(self, value: Any) -> bool:
        return self.inner.validate(value)

    def encode(self, value: Any) -> Result[Any]:
        return self.inner.encode(value)


def prefixed_issues(error: Exception, *prefix: str | int) -> list[Issue]:
    issues = getattr(error, "issues", None)
    if issues is None:
        issues = (Issue(path=(), message=str(error)),)
    return [issue.with_prefix(*prefix) for issue in issues]


# =============================================================================
# Coercion
# =============================================================================

_adapter_cache: dict[Any, AdapterDescriptor] = {}


def as_descriptor(obj: Any) -> TypeDescriptor:
    """Return ``obj`` if it is a descriptor, else wrap a Python type/annotation."""
    if isinstance(obj, TypeDescriptor):
        return obj
    try:
        cached = _adapter_cache.get(obj)
    except TypeError:
        return AdapterDescriptor(obj)
    if cached is None:
        cached = _adapter_cache.setdefault(obj, AdapterDescriptor(obj))
    return cached


def is_descriptor_like(obj: Any) -> bool:
    """True for descriptors and for plain types/annotations pydantic understands."""
    if isinstance(obj, TypeDescriptor):
        return True
    return isinstance(obj, type) or typing.get_origin(obj) is not None


# =============================================================================
# Ready-made descriptors
# =============================================================================

String = AdapterDescriptor(str, "String")
NonEmptyString = AdapterDescriptor(Annotated[str, StringConstraints(min_length=1)], "NonEmptyString")
Integer = AdapterDescriptor(int, "Integer")
Number = AdapterDescriptor(int | float, "Number")
Boolean = AdapterDescriptor(bool, "Boolean")
Json = AdapterDescriptor(JsonValue, "Json")
DateTimeSelf = AdapterDescriptor(datetime, "DateTime")
UuidSelf = AdapterDescriptor(uuid.UUID, "UUID")

BinaryFlag = AdapterDescriptor(typing.Literal[0, 1], "0 | 1").refine(
    lambda v: type(v) is int, "Expected integer 0 or 1", name="0 | 1"
)

DateTimeUtc = Transformed.from_registry(String, DateTimeSelf, "iso_datetime", name="DateTimeUtc")
DateTimeFromDate = Transformed.from_registry(DateTimeSelf, DateTimeSelf, "utc_datetime", name="DateTimeFromDate")
Uuid = Transformed.from_registry(String, UuidSelf, "uuid_string", name="Uuid")


def Literal(*values: Any) -> AdapterDescriptor:
    """One of a fixed set of values."""
    rendered = ", ".join(repr(v) for v in values)
    return AdapterDescriptor(typing.Literal[values], f"Literal[{rendered}]")


def Pattern(regex: str, name: str | None = None) -> AdapterDescriptor:
    """A string matching ``regex`` (checked by pydantic)."""
    return AdapterDescriptor(Annotated[str, StringConstraints(pattern=regex)], name or f"Pattern[{regex}]")


def Array(item: Any) -> ArrayOf:
    return ArrayOf(as_descriptor(item))


def Record(key: Any, value: Any) -> RecordOf:
    return RecordOf(as_descriptor(key), as_descriptor(value))


def Union(*members: Any) -> UnionOf:
    return UnionOf(*(as_descriptor(m) for m in members))


def Optional(inner: Any) -> OptionalKey:
    return OptionalKey(as_descriptor(inner))


def NullOr(inner: Any) -> Nullable:
    return Nullable(as_descriptor(inner))


def Positive(inner: Any = Number) -> Refined:
    return as_descriptor(inner).refine(lambda v: v > 0, "Expected a positive number")


def NonNegative(inner: Any = Number) -> Refined:
    return as_descriptor(inner).refine(lambda v: v >= 0, "Expected a non-negative number")


def json_string_pair() -> tuple[Callable[[Any], Any], Callable[[Any], Any]]:
    """The registered ``json_string`` decode/encode functions."""
    transform = get_transform("json_string")
    return transform.decode, transform.encode


__all__ = [
    "AdapterDescriptor",
    "Array",
    "ArrayOf",
    "AutoValue",
    "BinaryFlag",
    "Boolean",
    "Branded",
    "DateTimeFromDate",
    "DateTimeSelf",
    "DateTimeUtc",
    "Descriptor",
    "Integer",
    "Json",
    "Literal",
    "NonEmptyString",
    "NonNegative",
    "NullOr",
    "Nullable",
    "Number",
    "Optional",
    "OptionalKey",
    "Pattern",
    "Positive",
    "Record",
    "RecordOf",
    "Refined",
    "String",
    "Transformed",
    "Union",
    "UnionOf",
    "Uuid",
    "UuidSelf",
    "as_descriptor",
    "is_descriptor_like",
    "prefixed_issues",
    "json_string_pair",
]
