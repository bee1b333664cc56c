# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from . import ln as ln
from ._errors import (
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
)
from .collector import Collector, UsageEvent, UsageStats
from .config import settings
from .decode import decode, decode_partial, encode
from .ln import Undefined, Unset
from .runtime import CallOptions, FunctionDef, FunctionRuntime
from .schema import Schema, TypeBuilder
from .stream import EventKind, StreamEvent, StreamSession, StreamState
from .values import Checked, DynamicRecord, EnumValue, MediaRef, Pending, Record
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(settings.LIONTYPE_LOG_LEVEL)

__all__ = (
    "ArgumentError",
    "CallOptions",
    "Checked",
    "Collector",
    "DecodeError",
    "DuplicateNameError",
    "DynamicRecord",
    "EngineError",
    "EnumValue",
    "EventKind",
    "FunctionDef",
    "FunctionRuntime",
    "LionTypeError",
    "MediaRef",
    "MissingFieldError",
    "NoUnionVariantMatchedError",
    "Pending",
    "Record",
    "Schema",
    "SchemaError",
    "StreamEvent",
    "StreamSession",
    "StreamState",
    "TypeBuilder",
    "TypeMismatchError",
    "Undefined",
    "UnknownEnumValueError",
    "UnresolvedReferenceError",
    "Unset",
    "UsageEvent",
    "UsageStats",
    "__version__",
    "decode",
    "decode_partial",
    "encode",
    "ln",
    "settings",
)
