"""Schema-variant composition engine.

Declare a record once, derive one validated schema per variant.

Module Map
----------
  descriptors       pydantic-backed TypeDescriptors and combinators
  transforms        Registry of named decode/encode pairs
  field             FieldSpec and the field_* helpers
  struct            StructSpec assembly and composition
  extract           extract() and the ExtractedSchema record codec
  entity            Entity dataclass synthesis
  variant_schema    VariantSchema builder bound to a variant set

Tags:
    spine-variants, schema, variants, codec

Doc-Types:
    package-overview, module-index
"""

from spine_variants.schema.descriptors import (
    AdapterDescriptor,
    Array,
    AutoValue,
    BinaryFlag,
    Boolean,
    DateTimeFromDate,
    DateTimeSelf,
    DateTimeUtc,
    Descriptor,
    Integer,
    Json,
    Literal,
    NonEmptyString,
    NonNegative,
    NullOr,
    Number,
    Optional,
    Pattern,
    Positive,
    Record,
    String,
    Union,
    Uuid,
    as_descriptor,
)
from spine_variants.schema.entity import EntityVariant, synthesize
from spine_variants.schema.extract import ExtractedSchema, SchemaField, extract
from spine_variants.schema.field import FieldEntry, FieldSpec, FromKey
from spine_variants.schema.struct import StructSpec
from spine_variants.schema.transforms import (
    ValueTransform,
    get_transform,
    list_transforms,
    register_transform,
)
from spine_variants.schema.variant_schema import VariantSchema

__all__ = [
    # Descriptors
    "AdapterDescriptor",
    "Array",
    "AutoValue",
    "BinaryFlag",
    "Boolean",
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
    "Number",
    "Optional",
    "Pattern",
    "Positive",
    "Record",
    "String",
    "Union",
    "Uuid",
    "as_descriptor",
    # Transforms
    "ValueTransform",
    "get_transform",
    "list_transforms",
    "register_transform",
    # Engine
    "EntityVariant",
    "ExtractedSchema",
    "FieldEntry",
    "FieldSpec",
    "FromKey",
    "SchemaField",
    "StructSpec",
    "VariantSchema",
    "extract",
    "synthesize",
]
