# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from datetime import datetime, timezone

__all__ = ("now_utc",)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
