# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .decoder import Decoder, decode
from .encoder import encode, encode_args
from .partial import PartialDecoder, decode_partial

__all__ = (
    "Decoder",
    "PartialDecoder",
    "decode",
    "decode_partial",
    "encode",
    "encode_args",
)
