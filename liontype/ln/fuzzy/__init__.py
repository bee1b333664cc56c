# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from ._accumulator import RawTextAccumulator
from ._fuzzy_json import (
    MAX_JSON_INPUT_SIZE,
    fix_json_string,
    fuzzy_json,
    strip_code_fence,
)
from ._partial_json import parse_partial_json

__all__ = (
    "MAX_JSON_INPUT_SIZE",
    "RawTextAccumulator",
    "fix_json_string",
    "fuzzy_json",
    "parse_partial_json",
    "strip_code_fence",
)
