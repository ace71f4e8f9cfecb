"""Model layer: the six SQL/JSON variants and their field presets.

The builders bound to ``Model`` are re-exported so a model module needs one
import::

    from spine_variants.model import Class, Generated, Sensitive, field_only

Tags:
    spine-variants, model, presets

Doc-Types:
    package-overview
"""

from spine_variants.model.presets import (
    JSON_VARIANTS,
    STORAGE_VARIANTS,
    BooleanFromNumber,
    DateTimeInsert,
    DateTimeInsertFromDate,
    DateTimeUpdate,
    DateTimeUpdateFromDate,
    FieldOption,
    Generated,
    GeneratedByApp,
    JsonFromString,
    Model,
    Sensitive,
    UuidV4Insert,
    now,
)

Class = Model.Class
entity = Model.entity
struct = Model.struct
extract = Model.extract
field = Model.field
field_only = Model.field_only
field_except = Model.field_except
field_from_key = Model.field_from_key
field_evolve = Model.field_evolve

__all__ = [
    "JSON_VARIANTS",
    "STORAGE_VARIANTS",
    "BooleanFromNumber",
    "Class",
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
    "entity",
    "extract",
    "field",
    "field_evolve",
    "field_except",
    "field_from_key",
    "field_only",
    "now",
    "struct",
]
