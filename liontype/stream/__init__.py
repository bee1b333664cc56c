# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .handles import AsyncFunctionStream, SessionHandle
from .session import EventKind, StreamEvent, StreamHandler, StreamSession, StreamState

__all__ = (
    "AsyncFunctionStream",
    "EventKind",
    "SessionHandle",
    "StreamEvent",
    "StreamHandler",
    "StreamSession",
    "StreamState",
)
