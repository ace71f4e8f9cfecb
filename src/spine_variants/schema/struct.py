"""Whole-record variant declarations.

A :class:`StructSpec` is the immutable value at the centre of the engine: a
fixed variant set, a default variant, and an ordered mapping from field name
to :class:`~spine_variants.schema.field.FieldSpec`. Every check that can be
made about a declaration is made here, once, when the struct is built:

* every field entry names a declared variant
* no two fields share an output key within one variant
* the default variant's schema is not empty

Composition (:meth:`StructSpec.extend`, :meth:`StructSpec.omit`) produces a
new StructSpec; an existing one is never mutated.

Tags:
    spine-variants, schema, struct-spec, definition

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from spine_variants.core.errors import (
    DefinitionError,
    EmptySchemaError,
    OutputKeyCollisionError,
    UnknownVariantError,
)
from spine_variants.core.logging import get_logger
from spine_variants.core.settings import get_settings
from spine_variants.schema.descriptors import is_descriptor_like
from spine_variants.schema.field import FieldEntry, FieldSpec, everywhere

if TYPE_CHECKING:
    from spine_variants.schema.extract import ExtractedSchema

logger = get_logger(__name__)


def check_variant_set(variants: tuple[str, ...], default: str) -> None:
    """Validate a variant set and its default (non-empty, unique, default a member)."""
    if not variants:
        raise DefinitionError("A variant set needs at least one variant")
    if len(set(variants)) != len(variants):
        raise DefinitionError(f"Duplicate variant names in {list(variants)}")
    for variant in variants:
        if not isinstance(variant, str) or not variant:
            raise DefinitionError(f"Variant names must be non-empty strings, got {variant!r}")
    if default not in variants:
        raise UnknownVariantError(
            default, variants, f"Default variant {default!r} is not one of {list(variants)}"
        )


@dataclass(frozen=True)
class StructSpec:
    """Immutable record declaration over a fixed set of variants."""

    name: str | None
    variants: tuple[str, ...]
    default: str
    items: tuple[tuple[str, FieldSpec], ...]

    _index: Mapping[str, FieldSpec] = field(init=False, repr=False, compare=False)
    _extractions: dict[str, ExtractedSchema] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        check_variant_set(self.variants, self.default)

        index: dict[str, FieldSpec] = {}
        for field_name, spec in self.items:
            if not isinstance(field_name, str) or not field_name:
                raise DefinitionError(f"Field names must be non-empty strings, got {field_name!r}")
            if field_name in index:
                raise DefinitionError(f"Field {field_name!r} declared twice").with_context(
                    schema=self.name, field_name=field_name
                )
            for entry in spec.entries:
                if entry.variant not in self.variants:
                    raise UnknownVariantError(entry.variant, self.variants).with_context(
                        schema=self.name, field_name=field_name
                    )
            index[field_name] = spec
        object.__setattr__(self, "_index", MappingProxyType(index))

        self._check_output_keys()
        if not any(spec.is_present(self.default) for spec in index.values()):
            raise EmptySchemaError(
                f"{self.label} has no fields in its default variant {self.default!r}"
            ).with_context(schema=self.name, variant=self.default)

        logger.debug(
            "struct_defined",
            struct=self.label,
            variants=list(self.variants),
            fields=len(index),
        )

        if get_settings().eager_extraction:
            for variant in self.variants:
                self.extract(variant)

    def _check_output_keys(self) -> None:
        for variant in self.variants:
            owners: dict[str, list[str]] = {}
            for field_name, spec in self.items:
                key = spec.output_key(variant, field_name)
                if key is not None:
                    owners.setdefault(key, []).append(field_name)
            for key, names in owners.items():
                if len(names) > 1:
                    raise OutputKeyCollisionError(variant, key, names).with_context(schema=self.name)

    # ── Accessors ────────────────────────────────────────────────

    @property
    def label(self) -> str:
        return self.name or "Struct"

    @property
    def fields(self) -> Mapping[str, FieldSpec]:
        """Read-only, ordered field name -> FieldSpec mapping."""
        return self._index

    def field_names(self) -> list[str]:
        return [name for name, _ in self.items]

    def extract(self, variant: str) -> ExtractedSchema:
        """Memoized projection onto ``variant`` (see :func:`~spine_variants.schema.extract.extract`)."""
        from spine_variants.schema.extract import extract

        return extract(self, variant)

    # ── Composition ──────────────────────────────────────────────

    def extend(self, mapping: Mapping[str, Any], name: str | None = None) -> StructSpec:
        """New struct with ``mapping`` added; an existing name keeps its position."""
        merged = dict(self.items)
        merged.update(normalize_fields(self.variants, mapping))
        return StructSpec(name or self.name, self.variants, self.default, tuple(merged.items()))

    def omit(self, *names: str, name: str | None = None) -> StructSpec:
        """New struct without ``names``."""
        missing = [n for n in names if n not in self._index]
        if missing:
            raise DefinitionError(f"Cannot omit unknown fields {missing} from {self.label}")
        kept = tuple((n, spec) for n, spec in self.items if n not in names)
        return StructSpec(name or self.name, self.variants, self.default, kept)


def _nested_field(declared: tuple[str, ...], name: str, nested: StructSpec) -> FieldSpec:
    if set(nested.variants) != set(declared):
        raise DefinitionError(
            f"Nested struct for field {name!r} is declared over {list(nested.variants)}, "
            f"expected {list(declared)}"
        )
    entries = []
    for variant in declared:
        schema = nested.extract(variant)
        # A nested struct with nothing to show in a variant is absent there.
        if schema.fields:
            entries.append(FieldEntry(variant, schema))
    return FieldSpec(declared, tuple(entries))


def normalize_field(declared: tuple[str, ...], name: str, value: Any) -> FieldSpec:
    """Turn a field-mapping value into a FieldSpec over ``declared``."""
    if isinstance(value, FieldSpec):
        return value
    if isinstance(value, StructSpec):
        return _nested_field(declared, name, value)
    if is_descriptor_like(value):
        return everywhere(declared, value)
    raise DefinitionError(
        f"Field {name!r}: expected a FieldSpec, StructSpec or descriptor, got {type(value).__name__}"
    ).with_context(field_name=name)


def normalize_fields(declared: tuple[str, ...], mapping: Mapping[str, Any]) -> dict[str, FieldSpec]:
    return {name: normalize_field(declared, name, value) for name, value in mapping.items()}


def build_struct(
    variants: tuple[str, ...],
    default: str,
    mapping: Mapping[str, Any],
    name: str | None = None,
) -> StructSpec:
    """Assemble a StructSpec from a field mapping under a variant context."""
    return StructSpec(name, variants, default, tuple(normalize_fields(variants, mapping).items()))


__all__ = [
    "StructSpec",
    "build_struct",
    "check_variant_set",
    "normalize_field",
    "normalize_fields",
]
