# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from ._enum import Enum
from ._params import Params
from ._sentinel import (
    MaybeUnset,
    Undefined,
    UndefinedType,
    Unset,
    UnsetType,
    is_sentinel,
)
from ._utils import now_utc

__all__ = (
    "Enum",
    "MaybeUnset",
    "Params",
    "Undefined",
    "UndefinedType",
    "Unset",
    "UnsetType",
    "is_sentinel",
    "now_utc",
)
