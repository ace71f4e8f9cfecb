"""Tests for spine_variants.schema.extract (projection and record codec)."""

import threading

import pytest

from spine_variants.core.errors import DecodeError, EncodeError, UnknownVariantError
from spine_variants.core.protocols import TypeDescriptor
from spine_variants.core.settings import clear_settings_cache
from spine_variants.schema import VariantSchema, extract
from spine_variants.schema.descriptors import (
    Array,
    AutoValue,
    Integer,
    NullOr,
    Optional,
    String,
)


@pytest.fixture
def person(api):
    return api.struct(
        {
            "id": Integer,
            "full_name": api.field_from_key({"database": "full_name", "api": "fullName"})(String),
            "password": api.field_only("database")(String),
            "nickname": Optional(String),
            "tags": api.field_only("api")(Array(String)),
        },
        name="Person",
    )


class TestExtract:
    """Projection onto one variant."""

    def test_presence_order_and_keys(self, person):
        assert extract(person, "database").keys() == ["id", "full_name", "password", "nickname"]
        assert extract(person, "api").keys() == ["id", "fullName", "nickname", "tags"]

    def test_field_names(self, person):
        assert extract(person, "api").field_names() == ["id", "full_name", "nickname", "tags"]

    def test_fields_mapping(self, person):
        fields = extract(person, "api").fields
        assert list(fields) == ["id", "fullName", "nickname", "tags"]
        assert fields["id"] is Integer
        with pytest.raises(TypeError):
            fields["x"] = Integer

    def test_memoized(self, person):
        assert extract(person, "api") is extract(person, "api")
        assert person.extract("api") is extract(person, "api")

    def test_deterministic_without_cache(self, api, monkeypatch):
        """Two independently built structs extract to equal schemas."""
        monkeypatch.setenv("SPINE_VARIANTS_EAGER_EXTRACTION", "false")
        clear_settings_cache()
        first = api.struct({"id": Integer, "name": String})
        second = api.struct({"id": Integer, "name": String})
        assert extract(first, "api") == extract(second, "api")

    def test_concurrent_first_access_publishes_once(self, api, monkeypatch):
        monkeypatch.setenv("SPINE_VARIANTS_EAGER_EXTRACTION", "false")
        clear_settings_cache()
        struct = api.struct({"id": Integer})
        results = []
        threads = [threading.Thread(target=lambda: results.append(extract(struct, "api"))) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert all(r is results[0] for r in results)

    def test_unknown_variant(self, person):
        with pytest.raises(UnknownVariantError):
            extract(person, "graphql")

    def test_unhashable_variant(self, person):
        with pytest.raises(UnknownVariantError):
            extract(person, ["api"])

    def test_shared_descriptor_identity(self):
        schema = VariantSchema(variants=("a", "b", "c"), default="a")
        struct = schema.struct({"x": schema.field_only("a", "b")(int)})
        assert extract(struct, "a").fields["x"] is extract(struct, "b").fields["x"]

    def test_empty_non_default_variant_allowed(self, api):
        struct = api.struct({"secret": api.field_only("database")(String)})
        assert len(extract(struct, "api")) == 0

    def test_satisfies_protocol(self, person):
        assert isinstance(extract(person, "api"), TypeDescriptor)
        assert extract(person, "api").name == "Person.api"


class TestDecode:
    """Record decode: all-or-nothing, renamed keys, optional keys."""

    def test_decode_renamed(self, person):
        result = extract(person, "api").decode({"id": 1, "fullName": "Ada", "tags": ["x"]})
        assert result.unwrap() == {"id": 1, "full_name": "Ada", "nickname": None, "tags": ["x"]}

    def test_missing_required_key(self, person):
        result = extract(person, "api").decode({"id": 1, "tags": []})
        assert result.error.paths == ["fullName"]
        assert result.error.issues[0].message == "Missing required key"

    def test_collects_all_issues(self, person):
        result = extract(person, "api").decode({"id": "x", "fullName": 3, "tags": ["ok", 1]})
        assert isinstance(result.error, DecodeError)
        assert result.error.paths == ["id", "fullName", "tags[1]"]
        assert result.error.context.variant == "api"
        assert result.error.context.schema == "Person"

    def test_not_a_mapping(self, person):
        result = extract(person, "api").decode([1, 2])
        assert result.error.paths == ["<root>"]

    def test_optional_none_is_absent(self, person):
        result = extract(person, "database").decode(
            {"id": 1, "full_name": "Ada", "password": "pw", "nickname": None}
        )
        assert result.unwrap()["nickname"] is None

    def test_nullable_key_required(self, api):
        struct = api.struct({"id": Integer, "note": NullOr(String)})
        assert extract(struct, "api").decode({"id": 1}).is_err()
        assert extract(struct, "api").decode({"id": 1, "note": None}).unwrap()["note"] is None

    def test_excess_keys_ignored_by_default(self, person):
        result = extract(person, "api").decode({"id": 1, "fullName": "Ada", "tags": [], "extra": 1})
        assert "extra" not in result.unwrap()

    def test_excess_keys_error(self, person, monkeypatch):
        monkeypatch.setenv("SPINE_VARIANTS_EXCESS_KEYS", "error")
        clear_settings_cache()
        result = extract(person, "api").decode({"id": 1, "fullName": "Ada", "tags": [], "extra": 1})
        assert result.error.paths == ["extra"]


class TestAutoValues:
    """Auto-managed fields in decode and encode."""

    def test_always_overrides_supplied(self, api):
        struct = api.struct({"id": Integer, "version": AutoValue(Integer, lambda: 42)})
        result = extract(struct, "api").decode({"id": 1, "version": 7})
        assert result.unwrap()["version"] == 42

    def test_always_fills_missing(self, api):
        struct = api.struct({"id": Integer, "version": AutoValue(Integer, lambda: 42)})
        assert extract(struct, "api").decode({"id": 1}).unwrap()["version"] == 42

    def test_absent_mode_keeps_supplied(self, api):
        struct = api.struct({"id": AutoValue(Integer, lambda: 42, mode="absent")})
        assert extract(struct, "api").decode({"id": 7}).unwrap()["id"] == 7
        assert extract(struct, "api").decode({}).unwrap()["id"] == 42

    def test_lossy_fields(self, api):
        struct = api.struct({
            "id": Integer,
            "a": AutoValue(Integer, lambda: 1),
            "b": AutoValue(Integer, lambda: 1, mode="absent"),
        })
        assert extract(struct, "api").lossy_fields == frozenset({"a"})

    def test_encode_generates_missing(self, api):
        struct = api.struct({"id": Integer, "version": AutoValue(Integer, lambda: 42)})
        assert extract(struct, "api").encode({"id": 1}).unwrap() == {"id": 1, "version": 42}


class TestEncode:
    """Record encode: output keys, omitted optionals."""

    def test_encode_mapping(self, person):
        value = {"id": 1, "full_name": "Ada", "nickname": None, "tags": ["x"]}
        assert extract(person, "api").encode(value).unwrap() == {"id": 1, "fullName": "Ada", "tags": ["x"]}

    def test_encode_object(self, person):
        class Row:
            id = 1
            full_name = "Ada"
            password = "pw"
            nickname = "A"

        encoded = extract(person, "database").encode(Row()).unwrap()
        assert encoded == {"id": 1, "full_name": "Ada", "password": "pw", "nickname": "A"}

    def test_missing_field(self, person):
        result = extract(person, "api").encode({"id": 1, "tags": []})
        assert isinstance(result.error, EncodeError)
        assert result.error.paths == ["full_name"]

    def test_invalid_value(self, person):
        result = extract(person, "api").encode({"id": "x", "full_name": "Ada", "tags": []})
        assert result.error.paths == ["id"]

    def test_round_trip(self, person):
        schema = extract(person, "api")
        external = {"id": 1, "fullName": "Ada", "nickname": "A", "tags": ["x", "y"]}
        decoded = schema.decode(external).unwrap()
        assert schema.encode(decoded).unwrap() == external
        assert schema.decode(schema.encode(decoded).unwrap()).unwrap() == decoded

    def test_validate(self, person):
        schema = extract(person, "api")
        assert schema.validate({"id": 1, "full_name": "Ada", "tags": []})
        assert not schema.validate({"id": "1", "full_name": "Ada", "tags": []})
        assert not schema.validate(None)
        assert schema.check({"id": 1, "tags": []})[0].path == ("full_name",)


class TestNestedCodec:
    """Nested structs decode and encode through their extraction."""

    def test_nested_decode_paths(self, api):
        address = api.struct({"city": api.field_from_key({"database": "city", "api": "cityName"})(String)})
        person = api.struct({"name": String, "address": address})
        schema = extract(person, "api")
        assert schema.decode({"name": "Ada", "address": {"cityName": "London"}}).unwrap() == {
            "name": "Ada",
            "address": {"city": "London"},
        }
        result = schema.decode({"name": "Ada", "address": {"cityName": 1}})
        assert result.error.paths == ["address.cityName"]

    def test_nested_encode(self, api):
        address = api.struct({"city": api.field_from_key({"api": "cityName", "database": "city"})(String)})
        person = api.struct({"name": String, "address": address})
        encoded = extract(person, "api").encode({"name": "Ada", "address": {"city": "London"}})
        assert encoded.unwrap() == {"name": "Ada", "address": {"cityName": "London"}}
