"""
Model presets: field shapes for SQL-backed domain objects.

Manifesto:
    A table row is read, inserted, updated and served as JSON, and each of
    those contexts sees a slightly different record. ``Model`` fixes the six
    variants once and the presets below encode the recurring field shapes,
    so an entity declaration says *what* a column is and the variant
    layout follows.

Architecture::

    variant      storage-facing             JSON-facing
    ─────────    ───────────────────────    ─────────────────────────
    select   ●   read from the database     json        served to clients
    insert       written on create          jsonCreate  accepted on create
    update       written on update          jsonUpdate  accepted on update

    (● default variant: the entity class itself)

Presets:

    ===================  ======  ======  ======  ====  ==========  ==========
    preset               select  insert  update  json  jsonCreate  jsonUpdate
    ===================  ======  ======  ======  ====  ==========  ==========
    Generated            d       -       d       d     -           -
    GeneratedByApp       d       d       d       d     -           -
    Sensitive            d       d       d       -     -           -
    DateTimeInsert       iso     auto    iso     iso   -           -
    DateTimeUpdate       iso     -       auto    iso   -           -
    JsonFromString       str     str     str     d     d           d
    BooleanFromNumber    0/1     0/1     0/1     bool  bool        bool
    FieldOption          d|null  d|null  d|null  d?    d?          d?
    UuidV4Insert         uuid    auto?   uuid    uuid  -           -
    ===================  ======  ======  ======  ====  ==========  ==========

    ``auto`` always replaces a supplied value; ``auto?`` only fills a
    missing one.

Examples:
    >>> User = Model.Class("User")({
    ...     "id": Generated(Integer),
    ...     "name": String,
    ...     "password": Sensitive(String),
    ...     "tags": JsonFromString(Array(String)),
    ...     "active": BooleanFromNumber,
    ...     "created_at": DateTimeInsert,
    ...     "updated_at": DateTimeUpdate,
    ... })
    >>> sorted(User.insert.schema.keys())
    ['active', 'created_at', 'name', 'password', 'tags']

Tags:
    spine-variants, model, presets, sql, json

Doc-Types:
    api-reference, tutorial
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from spine_variants.core.settings import get_settings
from spine_variants.core.timestamps import truncate, utc_now
from spine_variants.schema.descriptors import (
    AutoValue,
    BinaryFlag,
    Boolean,
    DateTimeFromDate,
    DateTimeUtc,
    NullOr,
    Optional,
    String,
    Transformed,
    Uuid,
    as_descriptor,
)
from spine_variants.schema.field import FieldSpec
from spine_variants.schema.variant_schema import VariantSchema

STORAGE_VARIANTS = ("select", "insert", "update")
JSON_VARIANTS = ("json", "jsonCreate", "jsonUpdate")

Model = VariantSchema(
    variants=STORAGE_VARIANTS + JSON_VARIANTS,
    default="select",
    name="Model",
)


def now() -> datetime:
    """Clock for auto-managed timestamps, truncated to the configured precision."""
    return truncate(utc_now(), get_settings().timestamp_precision)


def Generated(descriptor: Any) -> FieldSpec:
    """Value supplied by the database; never part of an insert."""
    return Model.field_only("select", "update", "json")(descriptor)


def GeneratedByApp(descriptor: Any) -> FieldSpec:
    """Value supplied by the application on insert and never changed afterwards."""
    return Model.field_only("select", "insert", "update", "json")(descriptor)


def Sensitive(descriptor: Any) -> FieldSpec:
    """Stored, but never serialized to or accepted from JSON."""
    return Model.field_only(*STORAGE_VARIANTS)(descriptor)


def _timestamp_field(storage: Any, *, auto_in: str, absent_from: str | None) -> FieldSpec:
    auto = AutoValue(storage, now, mode="always")
    mapping: dict[str, Any] = {}
    for variant in ("select", "insert", "update"):
        if variant == auto_in:
            mapping[variant] = auto
        elif variant != absent_from:
            mapping[variant] = storage
    mapping["json"] = DateTimeUtc
    return Model.field(mapping)


DateTimeInsert = _timestamp_field(DateTimeUtc, auto_in="insert", absent_from=None)
DateTimeUpdate = _timestamp_field(DateTimeUtc, auto_in="update", absent_from="insert")
DateTimeInsertFromDate = _timestamp_field(DateTimeFromDate, auto_in="insert", absent_from=None)
DateTimeUpdateFromDate = _timestamp_field(DateTimeFromDate, auto_in="update", absent_from="insert")


def JsonFromString(inner: Any) -> FieldSpec:
    """JSON document stored as text; the JSON variants carry ``inner`` itself."""
    inner = as_descriptor(inner)
    stored = Transformed.from_registry(String, inner, "json_string", name=f"JsonFromString[{inner.name}]")
    return Model.field({
        **{variant: stored for variant in STORAGE_VARIANTS},
        **{variant: inner for variant in JSON_VARIANTS},
    })


_stored_flag = Transformed.from_registry(BinaryFlag, Boolean, "boolean_number", name="BooleanFromNumber")

BooleanFromNumber = Model.field({
    **{variant: _stored_flag for variant in STORAGE_VARIANTS},
    **{variant: Boolean for variant in JSON_VARIANTS},
})


def FieldOption(descriptor: Any) -> FieldSpec:
    """Nullable column; the JSON variants may omit the key or send ``null``."""
    descriptor = as_descriptor(descriptor)
    return Model.field({
        **{variant: NullOr(descriptor) for variant in STORAGE_VARIANTS},
        **{variant: Optional(descriptor) for variant in JSON_VARIANTS},
    })


def UuidV4Insert(descriptor: Any = Uuid) -> FieldSpec:
    """UUID primary key generated on insert when the caller does not supply one."""
    descriptor = as_descriptor(descriptor)
    return Model.field({
        "select": descriptor,
        "insert": AutoValue(descriptor, uuid.uuid4, mode="absent"),
        "update": descriptor,
        "json": descriptor,
    })


__all__ = [
    "JSON_VARIANTS",
    "STORAGE_VARIANTS",
    "BooleanFromNumber",
    "DateTimeInsert",
    "DateTimeInsertFromDate",
    "DateTimeUpdate",
    "DateTimeUpdateFromDate",
    "FieldOption",
    "Generated",
    "GeneratedByApp",
    "JsonFromString",
    "Model",
    "Sensitive",
    "UuidV4Insert",
    "now",
]
