"""
VariantSchema: the builder bound to one variant set.

Every builder in :mod:`spine_variants.schema` needs the declared variant set.
A ``VariantSchema`` fixes it once and hands out bound versions::

    Api = VariantSchema(variants=("database", "api"), default="database")

    Person = Api.Class("Person")({
        "id": Integer,
        "full_name": Api.field_from_key({"database": "full_name", "api": "fullName"})(String),
        "password": Api.field_only("database")(String),
    })

Tags:
    spine-variants, schema, builder, factory

Doc-Types:
    api-reference, tutorial
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from spine_variants.core.protocols import TypeDescriptor
from spine_variants.schema import field as _field
from spine_variants.schema.entity import synthesize
from spine_variants.schema.extract import ExtractedSchema, extract
from spine_variants.schema.field import FieldSpec
from spine_variants.schema.struct import StructSpec, build_struct, check_variant_set


class VariantSchema:
    """Field, struct and entity builders over a fixed variant set."""

    def __init__(self, variants: Iterable[str], default: str, name: str | None = None):
        self.variants: tuple[str, ...] = tuple(variants)
        self.default = default
        self.name = name
        check_variant_set(self.variants, default)

    def __repr__(self) -> str:
        label = self.name or "VariantSchema"
        return f"{label}(variants={list(self.variants)}, default={self.default!r})"

    # ── Fields ───────────────────────────────────────────────────

    def field(self, mapping: Mapping[str, Any]) -> FieldSpec:
        """Explicit descriptor (or :class:`~spine_variants.schema.field.FromKey`) per variant."""
        return _field.make_field(self.variants, mapping)

    def field_only(self, *variants: str) -> Callable[[Any], FieldSpec]:
        return _field.field_only(self.variants, variants)

    def field_except(self, *variants: str) -> Callable[[Any], FieldSpec]:
        return _field.field_except(self.variants, variants)

    def field_from_key(self, keys: Mapping[str, str]) -> Callable[[Any], FieldSpec]:
        return _field.field_from_key(self.variants, keys)

    def field_evolve(
        self,
        spec: FieldSpec | Any,
        transforms: Mapping[str, Callable[[TypeDescriptor], Any]],
    ) -> FieldSpec:
        return _field.field_evolve(self.variants, spec, transforms)

    # ── Structs and entities ─────────────────────────────────────

    def struct(self, mapping: Mapping[str, Any], name: str | None = None) -> StructSpec:
        return build_struct(self.variants, self.default, mapping, name=name)

    def extract(self, struct: StructSpec, variant: str) -> ExtractedSchema:
        return extract(struct, variant)

    def entity(self, name: str, mapping: Mapping[str, Any] | StructSpec) -> type:
        """Build a struct from ``mapping`` (or take a ready StructSpec) and synthesize its entity."""
        if isinstance(mapping, StructSpec):
            struct = mapping
        else:
            struct = self.struct(mapping, name=name)
        return synthesize(name, struct)

    def Class(self, name: str) -> Callable[[Mapping[str, Any]], type]:  # noqa: N802
        """Curried form of :meth:`entity`: ``Model.Class("User")({...})``."""

        def build(mapping: Mapping[str, Any]) -> type:
            return self.entity(name, mapping)

        return build


__all__ = ["VariantSchema"]
