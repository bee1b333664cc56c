# Copyright (c) 2023 - 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, ClassVar

__all__ = (
    "ArgumentError",
    "DecodeError",
    "DuplicateNameError",
    "EngineError",
    "LionTypeError",
    "MissingFieldError",
    "NoUnionVariantMatchedError",
    "SchemaError",
    "TypeMismatchError",
    "UnknownEnumValueError",
    "UnresolvedReferenceError",
    "format_path",
)

PathSegment = str | int


class LionTypeError(Exception):
    default_message: ClassVar[str] = "liontype error"
    status_code: ClassVar[int] = 500

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}
        self.status_code = status_code or type(self).status_code

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None

    @classmethod
    def from_value(
        cls,
        value: Any,
        *,
        expected: str | None = None,
        message: str | None = None,
        cause: Exception | None = None,
        **extra: Any,
    ):
        """Create an error from a value with optional expected type and message."""
        details = {
            "value": value,
            "type": type(value).__name__,
            **({"expected": expected} if expected else {}),
            **extra,
        }
        return cls(message=message, details=details, cause=cause)


# ---------------------------------------------------------------------------
# Build time
# ---------------------------------------------------------------------------


class SchemaError(LionTypeError):
    """Raised when a schema cannot be built. Never partially applied."""

    default_message = "Invalid schema"
    status_code = 400


class DuplicateNameError(SchemaError):
    default_message = "Duplicate name in schema"

    def __init__(self, name: str, *, namespace: str, **kw: Any):
        super().__init__(
            f"Duplicate {namespace} name: {name!r}",
            details={"name": name, "namespace": namespace},
            **kw,
        )


class UnresolvedReferenceError(SchemaError):
    default_message = "Unresolved type reference"

    def __init__(self, name: str, *, kind: str, where: str | None = None, **kw):
        msg = f"Unresolved {kind} reference: {name!r}"
        if where:
            msg += f" (in {where})"
        super().__init__(
            msg,
            details={"name": name, "kind": kind, "where": where},
            **kw,
        )


# ---------------------------------------------------------------------------
# Decode time
# ---------------------------------------------------------------------------


def format_path(path: tuple[PathSegment, ...]) -> str:
    """Render ``("resume", "jobs", 2, "title")`` as ``resume.jobs[2].title``."""
    out = ""
    for seg in path:
        if isinstance(seg, int):
            out += f"[{seg}]"
        else:
            out += f".{seg}" if out else str(seg)
    return out or "<root>"


class DecodeError(LionTypeError):
    """Raised when a raw value does not fit its target type.

    ``path`` is the field/index chain from the decode root to the
    offending value; it is built up as the error propagates outwards.
    """

    default_message = "Decode failed"
    status_code = 422

    def __init__(
        self,
        reason: str | None = None,
        *,
        path: tuple[PathSegment, ...] = (),
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.reason = reason or self.default_message
        self.path = tuple(path)
        super().__init__(
            self._render(), details=details or {}, cause=cause
        )

    def _render(self) -> str:
        if not self.path:
            return self.reason
        return f"{self.reason} at {format_path(self.path)}"

    @property
    def path_str(self) -> str:
        return format_path(self.path)

    def with_prefix(self, *segments: PathSegment) -> DecodeError:
        """Prepend path segments in place and return self for re-raise."""
        self.path = tuple(segments) + self.path
        self.message = self._render()
        self.args = (self.message,)
        return self

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = super().to_dict(include_cause=include_cause)
        data["path"] = self.path_str
        return data


class MissingFieldError(DecodeError):
    default_message = "Missing required field"

    def __init__(self, field: str, *, class_name: str | None = None, **kw):
        self.field = field
        where = f" of {class_name}" if class_name else ""
        super().__init__(
            f"Missing required field {field!r}{where}",
            details={"field": field, "class_name": class_name},
            **kw,
        )


class UnknownEnumValueError(DecodeError):
    default_message = "Unknown enum value"

    def __init__(
        self, value: Any, *, enum_name: str, allowed: tuple[str, ...] = (), **kw
    ):
        self.enum_name = enum_name
        self.value = value
        super().__init__(
            f"{value!r} is not a value of enum {enum_name}",
            details={
                "value": value,
                "enum_name": enum_name,
                "allowed": list(allowed),
            },
            **kw,
        )


class NoUnionVariantMatchedError(DecodeError):
    default_message = "No union variant matched"

    def __init__(
        self,
        union: str,
        *,
        attempts: dict[str, DecodeError] | None = None,
        reason: str | None = None,
        **kw,
    ):
        self.attempts = attempts or {}
        super().__init__(
            reason or f"No variant of {union} matched",
            details={
                "union": union,
                "attempts": {k: str(v) for k, v in self.attempts.items()},
            },
            **kw,
        )


class TypeMismatchError(DecodeError):
    default_message = "Type mismatch"

    def __init__(self, expected: str, actual: str, **kw):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected {expected}, got {actual}",
            details={"expected": expected, "actual": actual},
            **kw,
        )


# ---------------------------------------------------------------------------
# Boundary
# ---------------------------------------------------------------------------


class EngineError(LionTypeError):
    """Opaque passthrough of an execution engine failure."""

    default_message = "Execution engine failed"
    status_code = 502

    @classmethod
    def wrap(cls, error: BaseException | str) -> EngineError:
        if isinstance(error, EngineError):
            return error
        if isinstance(error, BaseException):
            return cls(
                f"{type(error).__name__}: {error}",
                details={"error": type(error).__name__},
                cause=error if isinstance(error, Exception) else None,
            )
        return cls(str(error))


class ArgumentError(LionTypeError):
    """Raised when a call names an unknown function or bad arguments."""

    default_message = "Invalid function arguments"
    status_code = 400
