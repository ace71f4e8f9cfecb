"""
Entity synthesis: turn a StructSpec into runtime classes.

For the default variant a frozen, keyword-only dataclass is built and becomes
the nominal entity type (``User``). Every other variant gets its own record
dataclass (``UserInsert``, ``UserJsonCreate``) and an :class:`EntityVariant`
attached to the entity as a class attribute named after the variant::

    User = Model.Class("User")({...})

    user = User.decode({"id": 1, "name": "x"}).unwrap()   # default variant
    row = User.insert.decode(payload).unwrap()            # UserInsert
    body = User.json.encode(user).unwrap()                # dict keyed by output key

Instances validate their canonical values in ``__post_init__``; a bad value
raises :class:`~spine_variants.core.errors.DecodeError`.

Subclassing the entity adds behaviour; the default variant then decodes into
the subclass::

    class User(Model.Class("User")({...})):
        def greeting(self) -> str:
            return f"Hello, {self.name}"

Tags:
    spine-variants, schema, entity, dataclass, codegen

Doc-Types:
    api-reference
"""

from __future__ import annotations

import dataclasses
import keyword
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from spine_variants.core.errors import (
    DecodeError,
    DefinitionError,
    ReservedNameError,
    UnknownVariantError,
)
from spine_variants.core.logging import get_logger
from spine_variants.core.protocols import TypeDescriptor
from spine_variants.core.result import Err, Result
from spine_variants.schema.extract import ExtractedSchema
from spine_variants.schema.struct import StructSpec

logger = get_logger(__name__)

RESERVED_NAMES = frozenset({"struct", "fields", "variants", "variant", "decode", "encode", "schema"})


@dataclass(frozen=True)
class EntityVariant:
    """One variant of a synthesized entity: its schema, record type and codec."""

    variant: str
    schema: ExtractedSchema
    type: type

    @property
    def fields(self) -> Mapping[str, TypeDescriptor]:
        return self.schema.fields

    @property
    def lossy_fields(self) -> frozenset[str]:
        return self.schema.lossy_fields

    def decode(self, data: Any) -> Result[Any]:
        """Decode an external payload into an instance of :attr:`type`."""
        result = self.schema.decode(data)
        if result.is_err():
            return result
        try:
            return result.map(lambda values: self.type(**values))
        except DecodeError as exc:
            return Err(exc)

    def encode(self, value: Any) -> Result[dict[str, Any]]:
        return self.schema.encode(value)

    def validate(self, value: Any) -> bool:
        return self.schema.validate(value)

    def __call__(self, **values: Any) -> Any:
        return self.type(**values)

    def __repr__(self) -> str:
        return f"<EntityVariant {self.schema.name} -> {self.type.__name__}>"


def _class_name(entity: str, variant: str) -> str:
    parts = [p for p in re.split(r"[^0-9A-Za-z]+", variant) if p]
    return entity + "".join(p[0].upper() + p[1:] for p in parts)


def _check_names(name: str, struct: StructSpec) -> None:
    if not name.isidentifier():
        raise DefinitionError(f"Entity name {name!r} is not a valid identifier")
    variant_attrs = {v for v in struct.variants if v != struct.default}
    for variant in variant_attrs:
        if variant in RESERVED_NAMES:
            raise ReservedNameError(
                f"Variant name {variant!r} collides with an attribute of entity {name}"
            ).with_context(schema=name, variant=variant)
    for field_name in struct.field_names():
        if not field_name.isidentifier() or keyword.iskeyword(field_name) or field_name.startswith("_"):
            raise DefinitionError(
                f"Field name {field_name!r} of entity {name} is not usable as an attribute"
            ).with_context(schema=name, field_name=field_name)
        if field_name in RESERVED_NAMES or field_name in variant_attrs:
            raise ReservedNameError(
                f"Field name {field_name!r} collides with an attribute of entity {name}"
            ).with_context(schema=name, field_name=field_name)


def _post_init(entity: str, schema: ExtractedSchema) -> Callable[[Any], None]:
    def __post_init__(self: Any) -> None:
        issues = schema.check(self)
        if issues:
            raise DecodeError.from_issues(issues, schema=entity, variant=schema.variant)

    return __post_init__


def _record_fields(schema: ExtractedSchema) -> list[tuple[str, Any, Any]]:
    specs = []
    for entry in schema.entries:
        if entry.is_optional:
            specs.append((entry.name, Any, dataclasses.field(default=None)))
        else:
            specs.append((entry.name, Any, dataclasses.field()))
    return specs


def _make_record(cls_name: str, entity: str, schema: ExtractedSchema, namespace: dict[str, Any]) -> type:
    namespace = {"__post_init__": _post_init(entity, schema), "__variant__": schema.variant, **namespace}
    return dataclasses.make_dataclass(
        cls_name,
        _record_fields(schema),
        namespace=namespace,
        frozen=True,
        kw_only=True,
    )


def _entity_decode(cls: type, data: Any, variant: str | None = None) -> Result[Any]:
    return cls.variant(variant or cls.struct.default).decode(data)


def _entity_encode(cls: type, value: Any, variant: str | None = None) -> Result[dict[str, Any]]:
    return cls.variant(variant or cls.struct.default).encode(value)


def _entity_variant(cls: type, name: str) -> EntityVariant:
    try:
        return cls.variants[name]
    except KeyError:
        raise UnknownVariantError(name, cls.struct.variants).with_context(schema=cls.__name__) from None


def synthesize(name: str, struct: StructSpec) -> type:
    """
    Build the entity class for ``struct``.

    Raises:
        ReservedNameError: a field or variant name would shadow an entity attribute.
        DefinitionError: a field name is not a valid Python identifier.
    """
    _check_names(name, struct)

    default_schema = struct.extract(struct.default)
    entity = _make_record(
        name,
        name,
        default_schema,
        {
            "decode": classmethod(_entity_decode),
            "encode": classmethod(_entity_encode),
            "variant": classmethod(_entity_variant),
        },
    )

    variants: dict[str, EntityVariant] = {}
    for variant in struct.variants:
        schema = struct.extract(variant)
        if variant == struct.default:
            record_type = entity
        else:
            record_type = _make_record(_class_name(name, variant), name, schema, {})
        variants[variant] = EntityVariant(variant, schema, record_type)

    def __init_subclass__(cls: type, **kwargs: Any) -> None:
        # ``class User(Model.Class("User")({...})): ...`` decodes into ``User``
        super(entity, cls).__init_subclass__(**kwargs)
        rebound = dict(cls.variants)
        rebound[struct.default] = dataclasses.replace(rebound[struct.default], type=cls)
        cls.variants = MappingProxyType(rebound)

    entity.__init_subclass__ = classmethod(__init_subclass__)
    entity.struct = struct
    entity.fields = default_schema.fields
    entity.variants = MappingProxyType(variants)
    for variant, accessor in variants.items():
        if variant != struct.default:
            setattr(entity, variant, accessor)

    logger.debug("entity_synthesized", entity=name, variants=list(struct.variants))
    return entity


__all__ = ["RESERVED_NAMES", "EntityVariant", "synthesize"]
