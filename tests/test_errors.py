"""Tests for the liontype error taxonomy."""

import pytest

from liontype._errors import (
    ArgumentError,
    DecodeError,
    DuplicateNameError,
    EngineError,
    LionTypeError,
    MissingFieldError,
    NoUnionVariantMatchedError,
    SchemaError,
    TypeMismatchError,
    UnknownEnumValueError,
    UnresolvedReferenceError,
    format_path,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls, base, status",
        [
            (DuplicateNameError, SchemaError, 400),
            (UnresolvedReferenceError, SchemaError, 400),
            (MissingFieldError, DecodeError, 422),
            (UnknownEnumValueError, DecodeError, 422),
            (NoUnionVariantMatchedError, DecodeError, 422),
            (TypeMismatchError, DecodeError, 422),
            (EngineError, LionTypeError, 502),
            (ArgumentError, LionTypeError, 400),
        ],
    )
    def test_bases_and_status(self, cls, base, status):
        assert issubclass(cls, base)
        assert cls.status_code == status

    def test_status_override(self):
        assert SchemaError("x", status_code=409).status_code == 409
        assert SchemaError("x").status_code == 400


class TestLionTypeError:
    def test_to_dict(self):
        err = SchemaError("bad", details={"k": 1})
        assert err.to_dict() == {
            "error": "SchemaError",
            "message": "bad",
            "status_code": 400,
            "details": {"k": 1},
        }

    def test_cause(self):
        cause = KeyError("x")
        err = LionTypeError("wrapped", cause=cause)
        assert err.get_cause() is cause
        assert err.to_dict(include_cause=True)["cause"] == repr(cause)

    def test_from_value(self):
        err = ArgumentError.from_value(3, expected="str", message="nope")
        assert err.message == "nope"
        assert err.details == {"value": 3, "type": "int", "expected": "str"}

    def test_default_message(self):
        assert str(ArgumentError()) == "Invalid function arguments"


class TestDecodeErrorPath:
    def test_format_path(self):
        assert format_path(()) == "<root>"
        assert format_path(("resume", "jobs", 2, "title")) == "resume.jobs[2].title"
        assert format_path((0, "a")) == "[0].a"

    def test_with_prefix_builds_outwards(self):
        err = TypeMismatchError("string", "int", path=("title",))
        err.with_prefix(2).with_prefix("resume", "jobs")
        assert err.path == ("resume", "jobs", 2, "title")
        assert err.path_str == "resume.jobs[2].title"
        assert str(err) == "Expected string, got int at resume.jobs[2].title"
        assert err.to_dict()["path"] == "resume.jobs[2].title"

    def test_subclass_fields(self):
        err = MissingFieldError("company", class_name="Resume")
        assert err.field == "company"
        assert "company" in str(err) and "Resume" in str(err)

        err = UnknownEnumValueError(
            "YELLOW", enum_name="FavoriteColor", allowed=("RED",)
        )
        assert err.value == "YELLOW"
        assert err.details["allowed"] == ["RED"]

    def test_union_attempts_rendered(self):
        inner = TypeMismatchError("int", "string")
        err = NoUnionVariantMatchedError("int | bool", attempts={"int": inner})
        assert err.attempts == {"int": inner}
        assert err.details["attempts"] == {"int": str(inner)}


class TestEngineError:
    def test_wrap_exception(self):
        cause = ConnectionError("down")
        err = EngineError.wrap(cause)
        assert isinstance(err, EngineError)
        assert err.get_cause() is cause
        assert "ConnectionError: down" in str(err)

    def test_wrap_is_idempotent(self):
        err = EngineError("x")
        assert EngineError.wrap(err) is err

    def test_wrap_string(self):
        assert str(EngineError.wrap("rate limited")) == "rate limited"
