# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Any

from ._fuzzy_json import MAX_JSON_INPUT_SIZE, fuzzy_json, strip_code_fence
from ._partial_json import parse_partial_json

__all__ = ("RawTextAccumulator",)

logger = logging.getLogger(__name__)


class RawTextAccumulator:
    """Collects streamed LLM text and turns it into raw value trees.

    ``snapshot()`` is called after each chunk and gives a best-effort
    partial tree; ``complete()`` is called once the text is final.

    Example:
        >>> acc = RawTextAccumulator()
        >>> acc.append('{"name": "Jo')
        >>> acc.snapshot()
        Pending(value={'name': Pending(value='Jo')})
        >>> acc.append('hn"}')
        >>> acc.complete()
        {'name': 'John'}
    """

    __slots__ = ("_chunks", "_size", "max_size")

    def __init__(self, *, max_size: int = MAX_JSON_INPUT_SIZE):
        self._chunks: list[str] = []
        self._size = 0
        self.max_size = max_size

    def append(self, chunk: str) -> None:
        if not isinstance(chunk, str):
            raise TypeError(f"text chunk must be str, got {type(chunk).__name__}")
        self._size += len(chunk)
        if self._size > self.max_size:
            raise ValueError(
                f"Accumulated text ({self._size} bytes) exceeds maximum "
                f"({self.max_size} bytes)."
            )
        self._chunks.append(chunk)

    @property
    def text(self) -> str:
        if len(self._chunks) > 1:
            self._chunks[:] = ["".join(self._chunks)]
        return self._chunks[0] if self._chunks else ""

    def snapshot(self) -> Any:
        """Partial raw tree of the text so far, or ``Undefined``."""
        return parse_partial_json(self.text, max_size=self.max_size)

    def complete(self) -> Any:
        """Terminal raw tree of the full text.

        Text that is not JSON at all is returned as a plain string so a
        string-typed function still decodes.
        """
        text = self.text
        if not text.strip():
            return None
        try:
            return fuzzy_json(text, allow_primitive=True, max_size=self.max_size)
        except ValueError:
            logger.debug("terminal text is not JSON; using it as a string")
            return strip_code_fence(text).strip()

    def __len__(self) -> int:
        return self._size
