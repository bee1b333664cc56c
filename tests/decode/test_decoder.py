"""Tests for full decoding."""

import pytest

from liontype._errors import (
    DecodeError,
    MissingFieldError,
    NoUnionVariantMatchedError,
    TypeMismatchError,
    UnknownEnumValueError,
    UnresolvedReferenceError,
)
from liontype.decode import Decoder, decode
from liontype.schema import (
    BOOL,
    BYTES,
    FLOAT,
    IMAGE,
    INT,
    STRING,
    ClassDef,
    ClassRef,
    EnumRef,
    FieldDef,
    LiteralType,
    MapType,
    Schema,
    UnionType,
)
from liontype.values import (
    Checked,
    DynamicRecord,
    EnumValue,
    MediaRef,
    Pending,
    Record,
)

RESUME = ClassRef("Resume")


class TestPrimitives:
    @pytest.mark.parametrize(
        "raw, target, expected",
        [
            ("x", STRING, "x"),
            (3, INT, 3),
            (True, BOOL, True),
            (1.5, FLOAT, 1.5),
            (2, FLOAT, 2.0),
            (3.0, INT, 3),
            (b"ab", BYTES, b"ab"),
            (bytearray(b"ab"), BYTES, b"ab"),
        ],
    )
    def test_accepts(self, raw, target, expected):
        result = decode(raw, target, Schema.empty())
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize(
        "raw, target",
        [
            (3, STRING),
            ("3", INT),
            (True, INT),
            (False, FLOAT),
            (1, BOOL),
            (3.5, INT),
            ("ab", BYTES),
        ],
    )
    def test_rejects(self, raw, target):
        with pytest.raises(TypeMismatchError):
            decode(raw, target, Schema.empty())

    def test_integral_float_can_be_disabled(self):
        with pytest.raises(TypeMismatchError):
            decode(3.0, INT, Schema.empty(), allow_integral_float=False)

    def test_null_for_required(self):
        with pytest.raises(TypeMismatchError, match="Expected string, got null"):
            decode(None, STRING, Schema.empty())

    def test_optional(self):
        assert decode(None, STRING.optional(), Schema.empty()) is None
        assert decode("x", STRING.optional(), Schema.empty()) == "x"

    def test_pending_is_unwrapped(self):
        assert decode(Pending("Jo"), STRING, Schema.empty()) == "Jo"


class TestLiterals:
    def test_match(self):
        assert decode("yes", LiteralType("yes"), Schema.empty()) == "yes"

    @pytest.mark.parametrize("raw", ["no", 1, None])
    def test_mismatch(self, raw):
        with pytest.raises(TypeMismatchError):
            decode(raw, LiteralType("yes"), Schema.empty())

    def test_bool_is_not_int_literal(self):
        with pytest.raises(TypeMismatchError):
            decode(True, LiteralType(1), Schema.empty())


class TestCollections:
    def test_list(self):
        assert decode([1, 2], INT.list(), Schema.empty()) == [1, 2]

    def test_list_error_path(self):
        with pytest.raises(TypeMismatchError) as exc:
            decode([1, "two"], INT.list(), Schema.empty())
        assert exc.value.path == (1,)

    def test_map(self):
        assert decode({"a": 1}, MapType(STRING, INT), Schema.empty()) == {"a": 1}

    def test_map_error_path(self):
        with pytest.raises(TypeMismatchError) as exc:
            decode({"a": 1, "b": "x"}, MapType(STRING, INT), Schema.empty())
        assert exc.value.path == ("b",)

    def test_enum_keys(self, resume_schema):
        target = MapType(EnumRef("FavoriteColor"), INT)
        result = decode({"RED": 1}, target, resume_schema)
        assert result == {EnumValue("FavoriteColor", "RED"): 1}

    def test_not_a_list(self):
        with pytest.raises(TypeMismatchError):
            decode({"a": 1}, INT.list(), Schema.empty())


class TestClasses:
    def test_record(self, resume_schema):
        raw = {"name": "John", "job_title": "Engineer", "company": "Acme"}
        result = decode(raw, RESUME, resume_schema)
        assert result == Record("Resume", raw)

    def test_unknown_keys_ignored(self, resume_schema):
        raw = {"name": "J", "job_title": "E", "company": "A", "age": 3}
        assert "age" not in decode(raw, RESUME, resume_schema)

    def test_missing_required(self, resume_schema):
        with pytest.raises(MissingFieldError) as exc:
            decode({"name": "J", "job_title": "E"}, RESUME, resume_schema)
        assert exc.value.field == "company"
        assert exc.value.path_str == "company"

    def test_missing_optional_is_none(self, resume_schema):
        lead = {"name": "J", "job_title": "E", "company": "A"}
        team = decode({"lead": lead, "members": []}, ClassRef("Team"), resume_schema)
        assert team.size is None
        assert team.color is None

    def test_nested_missing_field_path(self, resume_schema):
        raw = {"lead": {"name": "J", "job_title": "E"}, "members": []}
        with pytest.raises(MissingFieldError) as exc:
            decode(raw, ClassRef("Team"), resume_schema)
        assert exc.value.path_str == "lead.company"

    def test_nested_error_path(self, resume_schema):
        lead = {"name": "J", "job_title": "E", "company": "A"}
        raw = {"lead": lead, "members": [lead, {**lead, "name": 7}]}
        with pytest.raises(TypeMismatchError) as exc:
            decode(raw, ClassRef("Team"), resume_schema)
        assert exc.value.path == ("members", 1, "name")
        assert exc.value.path_str == "members[1].name"

    def test_alias(self):
        schema = Schema.from_defs(
            classes=[ClassDef("A", (FieldDef("job_title", STRING, alias="jobTitle"),))]
        )
        assert decode({"jobTitle": "x"}, ClassRef("A"), schema).job_title == "x"

    def test_dynamic_extras(self, resume_schema):
        raw = {"employee_id": "E1", "department": "Eng", "level": Pending(3)}
        result = decode(raw, ClassRef("DynamicEmployee"), resume_schema)
        assert isinstance(result, DynamicRecord)
        assert dict(result) == {"employee_id": "E1", "department": "Eng", "level": 3}
        assert set(result.extras) == {"department", "level"}

    def test_dynamic_missing_field_omitted(self, resume_schema):
        result = decode({}, ClassRef("DynamicEmployee"), resume_schema)
        assert "employee_id" not in result

    def test_class_needs_map(self, resume_schema):
        with pytest.raises(TypeMismatchError):
            decode("John", RESUME, resume_schema)

    def test_checked_tag_must_match(self, resume_schema):
        raw = Checked({"value": "x"}, "TypeB")
        with pytest.raises(TypeMismatchError):
            decode(raw, ClassRef("TypeA"), resume_schema)


class TestEnums:
    def test_known_value(self, resume_schema):
        result = decode("RED", EnumRef("FavoriteColor"), resume_schema)
        assert result == EnumValue("FavoriteColor", "RED")

    def test_unknown_value(self, resume_schema):
        with pytest.raises(UnknownEnumValueError) as exc:
            decode("YELLOW", EnumRef("FavoriteColor"), resume_schema)
        assert exc.value.value == "YELLOW"
        assert exc.value.details["allowed"] == ["RED", "GREEN", "BLUE"]


class TestUnions:
    def test_first_match_wins(self, resume_schema, ab_union):
        result = decode({"value": "x"}, ab_union, resume_schema)
        assert result.class_name == "TypeA"

    def test_checked_tag_selects_variant(self, resume_schema, ab_union):
        result = decode(Checked({"value": "x"}, "TypeB"), ab_union, resume_schema)
        assert result.class_name == "TypeB"

    def test_tag_names_no_variant(self, resume_schema, ab_union):
        with pytest.raises(NoUnionVariantMatchedError):
            decode(Checked({"value": "x"}, "TypeC"), ab_union, resume_schema)

    def test_no_variant_matches(self):
        target = UnionType((INT, BOOL))
        with pytest.raises(NoUnionVariantMatchedError) as exc:
            decode("x", target, Schema.empty())
        assert set(exc.value.attempts) == {"int", "bool"}

    def test_primitive_order(self):
        assert decode(1, UnionType((BOOL, INT)), Schema.empty()) == 1
        assert decode(True, UnionType((INT, BOOL)), Schema.empty()) is True

    def test_optional_union(self):
        target = UnionType((INT, STRING)).optional()
        assert decode(None, target, Schema.empty()) is None


class TestMedia:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("https://x/a.png", MediaRef.from_url("image", "https://x/a.png")),
            (
                {"url": "https://x/a", "media_type": "image/png"},
                MediaRef.from_url("image", "https://x/a", "image/png"),
            ),
            (
                {"base64": "AAE=", "media_type": "image/png"},
                MediaRef.from_base64("image", "AAE=", "image/png"),
            ),
            (
                {"data": b"\x00\x01", "media_type": "image/png"},
                MediaRef.from_base64("image", "AAE=", "image/png"),
            ),
        ],
    )
    def test_forms(self, raw, expected):
        assert decode(raw, IMAGE, Schema.empty()) == expected

    @pytest.mark.parametrize("raw", ["", {"base64": "AAE="}, 3])
    def test_rejects(self, raw):
        with pytest.raises(TypeMismatchError):
            decode(raw, IMAGE, Schema.empty())


class TestTarget:
    def test_unresolved_target(self):
        with pytest.raises(UnresolvedReferenceError):
            decode({}, ClassRef("Ghost"), Schema.empty())

    def test_decoder_is_reusable(self, resume_schema):
        decoder = Decoder(resume_schema)
        assert decoder.decode("RED", EnumRef("FavoriteColor")).value == "RED"
        with pytest.raises(DecodeError):
            decoder.decode("x", INT)
