"""Per-field variant declarations.

A :class:`FieldSpec` is a closed, ordered list of ``(variant, descriptor,
output key)`` entries validated against a fixed variant set when it is built.
A variant with no entry means the field does not exist in that variant.

The helpers in this module are the sugar layered over that primitive:

* :func:`make_field`      -- explicit per-variant mapping
* :func:`field_only`      -- present only in the listed variants
* :func:`field_except`    -- present everywhere but the listed variants
* :func:`field_from_key`  -- present in the mapped variants, renamed per variant
* :func:`field_evolve`    -- change descriptors of an existing field in place

They take the declared variant set explicitly; :class:`VariantSchema` binds it.

Tags:
    spine-variants, schema, field-spec

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from spine_variants.core.errors import DefinitionError, UnknownVariantError, UnreachableFieldError
from spine_variants.core.protocols import TypeDescriptor
from spine_variants.schema.descriptors import as_descriptor


@dataclass(frozen=True)
class FromKey:
    """A descriptor published under a different key in one variant.

    Example:
        >>> Api.field({"database": FromKey("full_name", String), "api": String})
    """

    key: str
    descriptor: TypeDescriptor


@dataclass(frozen=True)
class FieldEntry:
    """One variant's view of a field."""

    variant: str
    descriptor: TypeDescriptor
    key: str | None = None

    def output_key(self, name: str) -> str:
        return self.key if self.key is not None else name


@dataclass(frozen=True)
class FieldSpec:
    """Presence, representation and output key of one field across variants."""

    variants: tuple[str, ...]
    entries: tuple[FieldEntry, ...]

    def __post_init__(self) -> None:
        declared = set(self.variants)
        seen: set[str] = set()
        for entry in self.entries:
            if entry.variant not in declared:
                raise UnknownVariantError(entry.variant, self.variants)
            if entry.variant in seen:
                raise DefinitionError(f"Variant {entry.variant!r} declared twice for one field")
            if entry.key is not None and not entry.key:
                raise DefinitionError(f"Empty output key for variant {entry.variant!r}")
            seen.add(entry.variant)
        if not self.entries:
            raise UnreachableFieldError("Field is not present in any variant")

    def get(self, variant: str) -> FieldEntry | None:
        for entry in self.entries:
            if entry.variant == variant:
                return entry
        return None

    def is_present(self, variant: str) -> bool:
        return self.get(variant) is not None

    @property
    def present_in(self) -> tuple[str, ...]:
        return tuple(entry.variant for entry in self.entries)

    def output_key(self, variant: str, name: str) -> str | None:
        entry = self.get(variant)
        return entry.output_key(name) if entry is not None else None

    def descriptor(self, variant: str) -> TypeDescriptor | None:
        entry = self.get(variant)
        return entry.descriptor if entry is not None else None


def _check_variants(declared: tuple[str, ...], requested: Iterable[str]) -> tuple[str, ...]:
    requested = tuple(requested)
    for variant in requested:
        if variant not in declared:
            raise UnknownVariantError(variant, declared)
    return requested


def _entry(variant: str, value: Any) -> FieldEntry:
    if isinstance(value, FromKey):
        return FieldEntry(variant, as_descriptor(value.descriptor), value.key)
    if isinstance(value, FieldEntry):
        return FieldEntry(variant, value.descriptor, value.key)
    return FieldEntry(variant, as_descriptor(value))


def make_field(declared: tuple[str, ...], mapping: Mapping[str, Any]) -> FieldSpec:
    """Field with an explicit descriptor (or :class:`FromKey`) per variant."""
    _check_variants(declared, mapping)
    # Entries follow declaration order of the variant set, not of the mapping.
    entries = tuple(_entry(v, mapping[v]) for v in declared if v in mapping)
    return FieldSpec(declared, entries)


def everywhere(declared: tuple[str, ...], descriptor: Any) -> FieldSpec:
    """Field present in every declared variant with one shared descriptor."""
    shared = as_descriptor(descriptor)
    return FieldSpec(declared, tuple(FieldEntry(v, shared) for v in declared))


def field_only(declared: tuple[str, ...], variants: Iterable[str]) -> Callable[[Any], FieldSpec]:
    """Present only in ``variants``; the same descriptor object in each."""
    selected = set(_check_variants(declared, variants))
    if not selected:
        raise UnreachableFieldError("field_only() needs at least one variant")

    def build(descriptor: Any) -> FieldSpec:
        shared = as_descriptor(descriptor)
        return FieldSpec(declared, tuple(FieldEntry(v, shared) for v in declared if v in selected))

    return build


def field_except(declared: tuple[str, ...], variants: Iterable[str]) -> Callable[[Any], FieldSpec]:
    """Present in every variant except ``variants``."""
    excluded = set(_check_variants(declared, variants))
    if excluded == set(declared):
        raise UnreachableFieldError(
            f"field_except({sorted(excluded)}) excludes every declared variant"
        )
    return field_only(declared, [v for v in declared if v not in excluded])


def field_from_key(declared: tuple[str, ...], keys: Mapping[str, str]) -> Callable[[Any], FieldSpec]:
    """Present in the variants named by ``keys``, published under the mapped key."""
    _check_variants(declared, keys)
    if not keys:
        raise UnreachableFieldError("field_from_key() needs at least one variant")

    def build(descriptor: Any) -> FieldSpec:
        shared = as_descriptor(descriptor)
        return FieldSpec(
            declared,
            tuple(FieldEntry(v, shared, keys[v]) for v in declared if v in keys),
        )

    return build


def field_evolve(
    declared: tuple[str, ...],
    spec: FieldSpec | Any,
    transforms: Mapping[str, Callable[[TypeDescriptor], Any]],
) -> FieldSpec:
    """
    Apply per-variant transforms to an existing field.

    Each transform receives the variant's current descriptor and returns a new
    descriptor, or a :class:`FromKey` to also rename it. Presence never
    changes: naming a variant the field is absent from is a DefinitionError.
    A bare descriptor is first promoted to a field present everywhere.
    """
    if not isinstance(spec, FieldSpec):
        spec = everywhere(declared, spec)
    _check_variants(declared, transforms)
    for variant in transforms:
        if not spec.is_present(variant):
            raise DefinitionError(
                f"field_evolve cannot add variant {variant!r}; the field is only present in {list(spec.present_in)}"
            ).with_context(variant=variant)

    entries = []
    for entry in spec.entries:
        transform = transforms.get(entry.variant)
        if transform is None:
            entries.append(entry)
            continue
        evolved = transform(entry.descriptor)
        if isinstance(evolved, FromKey):
            entries.append(FieldEntry(entry.variant, as_descriptor(evolved.descriptor), evolved.key))
        else:
            entries.append(FieldEntry(entry.variant, as_descriptor(evolved), entry.key))
    return FieldSpec(declared, tuple(entries))


__all__ = [
    "FieldEntry",
    "FieldSpec",
    "FromKey",
    "everywhere",
    "field_evolve",
    "field_except",
    "field_from_key",
    "field_only",
    "make_field",
]
