"""Tests for spine_variants.schema.field (FieldSpec and helpers)."""

import pytest

from spine_variants.core.errors import DefinitionError, UnknownVariantError, UnreachableFieldError
from spine_variants.schema.descriptors import Integer, String
from spine_variants.schema.field import FieldEntry, FieldSpec, FromKey


class TestFieldSpec:
    """The closed per-variant entry list."""

    def test_entries_validated_against_variants(self):
        with pytest.raises(UnknownVariantError):
            FieldSpec(("a", "b"), (FieldEntry("c", String),))

    def test_duplicate_variant(self):
        with pytest.raises(DefinitionError):
            FieldSpec(("a", "b"), (FieldEntry("a", String), FieldEntry("a", Integer)))

    def test_empty_output_key(self):
        with pytest.raises(DefinitionError):
            FieldSpec(("a",), (FieldEntry("a", String, ""),))

    def test_no_entries(self):
        with pytest.raises(UnreachableFieldError):
            FieldSpec(("a",), ())

    def test_accessors(self):
        spec = FieldSpec(("a", "b"), (FieldEntry("b", String, "renamed"),))
        assert spec.present_in == ("b",)
        assert spec.is_present("b") and not spec.is_present("a")
        assert spec.output_key("b", "name") == "renamed"
        assert spec.output_key("a", "name") is None
        assert spec.descriptor("b") is String
        assert spec.get("a") is None


class TestField:
    """VariantSchema.field with an explicit mapping."""

    def test_explicit_mapping(self, api):
        spec = api.field({"database": String, "api": Integer})
        assert spec.descriptor("database") is String
        assert spec.descriptor("api") is Integer

    def test_entries_follow_variant_order(self, api):
        spec = api.field({"api": String, "database": String})
        assert spec.present_in == ("database", "api")

    def test_from_key(self, api):
        spec = api.field({"database": FromKey("full_name", String), "api": String})
        assert spec.output_key("database", "name") == "full_name"
        assert spec.output_key("api", "name") == "name"

    def test_python_types_coerced(self, api):
        spec = api.field({"database": int})
        assert spec.descriptor("database").decode(1).unwrap() == 1

    def test_unknown_variant(self, api):
        with pytest.raises(UnknownVariantError):
            api.field({"graphql": String})

    def test_empty_mapping_is_unreachable(self, api):
        with pytest.raises(UnreachableFieldError):
            api.field({})


class TestFieldOnly:
    def test_presence(self, api):
        spec = api.field_only("api")(String)
        assert spec.present_in == ("api",)

    def test_descriptor_shared(self):
        from spine_variants.schema import VariantSchema

        schema = VariantSchema(variants=("a", "b", "c"), default="a")
        spec = schema.field_only("a", "b")(int)
        assert spec.descriptor("a") is spec.descriptor("b")

    def test_no_variants(self, api):
        with pytest.raises(UnreachableFieldError):
            api.field_only()

    def test_unknown_variant(self, api):
        with pytest.raises(UnknownVariantError):
            api.field_only("graphql")


class TestFieldExcept:
    def test_presence(self, api):
        spec = api.field_except("database")(String)
        assert spec.present_in == ("api",)

    def test_excluding_everything_fails(self, api):
        with pytest.raises(UnreachableFieldError):
            api.field_except("database", "api")

    def test_unknown_variant(self, api):
        with pytest.raises(UnknownVariantError):
            api.field_except("graphql")


class TestFieldFromKey:
    def test_keys_per_variant(self, api):
        spec = api.field_from_key({"database": "full_name", "api": "fullName"})(String)
        assert spec.output_key("database", "name") == "full_name"
        assert spec.output_key("api", "name") == "fullName"
        assert spec.descriptor("database") is spec.descriptor("api")

    def test_presence_limited_to_keys(self, api):
        spec = api.field_from_key({"api": "fullName"})(String)
        assert spec.present_in == ("api",)

    def test_empty_mapping(self, api):
        with pytest.raises(UnreachableFieldError):
            api.field_from_key({})


class TestFieldEvolve:
    """Changing descriptors without restating presence."""

    def test_transform_one_variant(self, api):
        base = api.field({"database": String, "api": String})
        evolved = api.field_evolve(base, {"api": lambda d: d.brand("Email")})
        assert evolved.descriptor("api").name == "Email"
        assert evolved.descriptor("database") is String

    def test_presence_unchanged(self, api):
        base = api.field_only("database")(String)
        evolved = api.field_evolve(base, {"database": lambda d: d.optional()})
        assert evolved.present_in == ("database",)

    def test_cannot_add_variant(self, api):
        base = api.field_only("database")(String)
        with pytest.raises(DefinitionError):
            api.field_evolve(base, {"api": lambda d: d})

    def test_rename_with_from_key(self, api):
        base = api.field({"database": String, "api": String})
        evolved = api.field_evolve(base, {"api": lambda d: FromKey("fullName", d)})
        assert evolved.output_key("api", "name") == "fullName"

    def test_bare_descriptor_promoted(self, api):
        evolved = api.field_evolve(String, {"api": lambda d: d.optional()})
        assert evolved.present_in == ("database", "api")
        assert evolved.descriptor("api").is_optional

    def test_original_untouched(self, api):
        base = api.field({"database": String, "api": String})
        api.field_evolve(base, {"api": lambda d: d.optional()})
        assert base.descriptor("api") is String
