# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .host import DynamicRecord, EnumValue, MediaRef, Record, to_builtins
from .raw import Checked, Pending, RawValue, raw_kind, strip, unwrap

__all__ = (
    "Checked",
    "DynamicRecord",
    "EnumValue",
    "MediaRef",
    "Pending",
    "RawValue",
    "Record",
    "raw_kind",
    "strip",
    "to_builtins",
    "unwrap",
)
