"""Tests for spine_variants.schema.struct (StructSpec assembly)."""

import pytest

from spine_variants.core.errors import (
    DefinitionError,
    EmptySchemaError,
    OutputKeyCollisionError,
    UnknownVariantError,
)
from spine_variants.core.settings import clear_settings_cache
from spine_variants.schema import VariantSchema
from spine_variants.schema.descriptors import Integer, String
from spine_variants.schema.field import FieldEntry, FieldSpec, FromKey
from spine_variants.schema.struct import StructSpec


class TestVariantSchema:
    """Variant-set validation."""

    def test_default_must_be_declared(self):
        with pytest.raises(UnknownVariantError):
            VariantSchema(variants=("a", "b"), default="c")

    def test_empty_variant_set(self):
        with pytest.raises(DefinitionError):
            VariantSchema(variants=(), default="a")

    def test_duplicate_variants(self):
        with pytest.raises(DefinitionError):
            VariantSchema(variants=("a", "a"), default="a")

    def test_repr(self, api):
        assert repr(api) == "Api(variants=['database', 'api'], default='database')"


class TestStructAssembly:
    """Construction-time checks."""

    def test_plain_descriptors_present_everywhere(self, api):
        struct = api.struct({"id": Integer, "name": str})
        assert struct.fields["id"].present_in == ("database", "api")
        assert struct.field_names() == ["id", "name"]

    def test_fields_read_only(self, api):
        struct = api.struct({"id": Integer})
        with pytest.raises(TypeError):
            struct.fields["other"] = struct.fields["id"]

    def test_frozen(self, api):
        struct = api.struct({"id": Integer})
        with pytest.raises(AttributeError):
            struct.default = "api"

    def test_output_key_collision(self, api):
        """Two fields renamed onto one key in one variant never silently drop a field."""
        with pytest.raises(OutputKeyCollisionError) as exc_info:
            api.struct({
                "full_name": String,
                "name": api.field({"database": FromKey("full_name", String), "api": String}),
            })
        assert exc_info.value.variant == "database"
        assert exc_info.value.fields == ("full_name", "name")

    def test_same_key_in_different_variants_is_fine(self, api):
        api.struct({
            "a": api.field_from_key({"database": "x"})(String),
            "b": api.field_from_key({"api": "x"})(String),
        })

    def test_empty_default_variant(self, api):
        with pytest.raises(EmptySchemaError):
            api.struct({"token": api.field_only("api")(String)})

    def test_foreign_field_spec(self, api):
        """A FieldSpec built over another variant set is rejected."""
        other = FieldSpec(("database", "graphql"), (FieldEntry("graphql", String),))
        with pytest.raises(UnknownVariantError):
            api.struct({"id": Integer, "x": other})

    def test_invalid_field_value(self, api):
        with pytest.raises(DefinitionError):
            api.struct({"id": "Integer"})

    def test_struct_equality_is_structural(self, api):
        assert api.struct({"id": Integer}) == api.struct({"id": Integer})


class TestNestedStruct:
    """A StructSpec used as a field value."""

    def test_nested_descriptor_is_extraction(self, api):
        address = api.struct({"city": String, "internal_code": api.field_only("database")(String)})
        person = api.struct({"name": String, "address": address})
        assert person.fields["address"].descriptor("api") is address.extract("api")

    def test_nested_must_share_variants(self, api):
        other = VariantSchema(variants=("database",), default="database").struct({"city": String})
        with pytest.raises(DefinitionError):
            api.struct({"address": other})


class TestComposition:
    """extend / omit return new structs."""

    def test_extend(self, api):
        base = api.struct({"id": Integer})
        extended = base.extend({"name": String})
        assert extended.field_names() == ["id", "name"]
        assert base.field_names() == ["id"]

    def test_extend_replaces_in_place(self, api):
        base = api.struct({"id": Integer, "name": String})
        extended = base.extend({"id": String})
        assert extended.field_names() == ["id", "name"]
        assert extended.fields["id"].descriptor("api") is String

    def test_omit(self, api):
        base = api.struct({"id": Integer, "name": String})
        assert base.omit("name").field_names() == ["id"]

    def test_omit_unknown(self, api):
        with pytest.raises(DefinitionError):
            api.struct({"id": Integer}).omit("nope")

    def test_omit_everything_fails(self, api):
        with pytest.raises(EmptySchemaError):
            api.struct({"id": Integer}).omit("id")


class TestEagerExtraction:
    def test_eager_by_default(self, api):
        struct = api.struct({"id": Integer})
        assert set(struct._extractions) == {"database", "api"}

    def test_lazy_when_disabled(self, api, monkeypatch):
        monkeypatch.setenv("SPINE_VARIANTS_EAGER_EXTRACTION", "false")
        clear_settings_cache()
        struct = api.struct({"id": Integer})
        assert struct._extractions == {}
        struct.extract("api")
        assert set(struct._extractions) == {"api"}

    def test_direct_construction(self):
        struct = StructSpec("Thing", ("a",), "a", (("id", FieldSpec(("a",), (FieldEntry("a", Integer),))),))
        assert struct.label == "Thing"
