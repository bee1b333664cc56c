# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tolerant parser for JSON text that is still being streamed.

``parse_partial_json`` never fails on truncation. Whatever has not been
closed yet (a string, a number, an object, an array) comes back wrapped in
``Pending`` so the partial reconciler can decide what to show early.
Half-written keys and dangling commas are dropped.
"""

from __future__ import annotations

import re
from typing import Any

from liontype.values.raw import Pending

from .._sentinel import Undefined
from ._fuzzy_json import MAX_JSON_INPUT_SIZE, strip_code_fence

__all__ = ("parse_partial_json",)

_NUMBER = re.compile(r"-?(?:\d+)?(?:\.\d*)?(?:[eE][+-]?\d*)?")
_WS = " \t\n\r"
_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
_KEYWORDS = {"true": True, "false": False, "null": None}


def parse_partial_json(
    text: str, /, *, max_size: int = MAX_JSON_INPUT_SIZE
) -> Any:
    """Parse possibly truncated JSON into a raw value tree.

    Returns ``Undefined`` when no value has started yet.

    Example:
        >>> parse_partial_json('{"name": "Jo')
        Pending(value={'name': Pending(value='Jo')})
    """
    if not isinstance(text, str):
        raise TypeError("Input must be a string")
    if len(text) > max_size:
        raise ValueError(
            f"Input size ({len(text)} bytes) exceeds maximum ({max_size} bytes)."
        )
    text = strip_code_fence(text)
    stripped = text.strip(_WS)
    if not stripped:
        return Undefined
    start = _json_start(text)
    if start is None:
        # plain text answer so far (e.g. a string-typed function)
        return Pending(stripped)
    parser = _PartialParser(text, start)
    value, _ = parser.parse_value()
    return value


def _json_start(text: str) -> int | None:
    """Index where the JSON document begins, skipping leading prose."""
    stripped = text.lstrip(_WS)
    offset = len(text) - len(stripped)
    head = stripped[0]
    if head in "{[\"'-" or head.isdigit() or stripped.startswith(
        tuple(k[: len(stripped)] for k in _KEYWORDS)
    ):
        return offset
    positions = [p for p in (text.find("{"), text.find("[")) if p != -1]
    return min(positions) if positions else None


class _PartialParser:
    __slots__ = ("s", "i", "n")

    def __init__(self, text: str, start: int = 0):
        self.s = text
        self.i = start
        self.n = len(text)

    def _skip_ws(self) -> None:
        while self.i < self.n and self.s[self.i] in _WS:
            self.i += 1

    def _at_end(self) -> bool:
        self._skip_ws()
        return self.i >= self.n

    def parse_value(self) -> tuple[Any, bool]:
        """Return ``(raw, complete)``; incomplete raw is wrapped in Pending."""
        if self._at_end():
            return Undefined, False
        char = self.s[self.i]
        if char == "{":
            return self._parse_object()
        if char == "[":
            return self._parse_array()
        if char in "\"'":
            value, complete = self._parse_string(char)
            return (value if complete else Pending(value)), complete
        if char == "-" or char.isdigit():
            return self._parse_number()
        for word, literal in _KEYWORDS.items():
            rest = self.s[self.i : self.i + len(word)]
            if rest == word:
                self.i += len(word)
                return literal, True
            if self.i + len(rest) >= self.n and word.startswith(rest):
                self.i = self.n
                return Pending(None), False
        return self._parse_bare()

    def _parse_object(self) -> tuple[Any, bool]:
        self.i += 1
        obj: dict[str, Any] = {}
        while True:
            if self._at_end():
                return Pending(obj), False
            char = self.s[self.i]
            if char == "}":
                self.i += 1
                return obj, True
            if char == ",":
                self.i += 1
                continue
            key, key_complete = self._parse_key()
            if not key_complete or self._at_end():
                return Pending(obj), False
            if self.s[self.i] != ":":
                # malformed pair; drop what we cannot attribute
                self._skip_until(",}")
                continue
            self.i += 1
            value, complete = self.parse_value()
            if value is not Undefined:
                obj[key] = value
            if not complete:
                return Pending(obj), False

    def _parse_array(self) -> tuple[Any, bool]:
        self.i += 1
        arr: list[Any] = []
        while True:
            if self._at_end():
                return Pending(arr), False
            char = self.s[self.i]
            if char == "]":
                self.i += 1
                return arr, True
            if char == ",":
                self.i += 1
                continue
            value, complete = self.parse_value()
            if value is not Undefined:
                arr.append(value)
            if not complete:
                return Pending(arr), False

    def _parse_key(self) -> tuple[str, bool]:
        char = self.s[self.i]
        if char in "\"'":
            return self._parse_string(char)
        start = self.i
        while self.i < self.n and (
            self.s[self.i].isalnum() or self.s[self.i] == "_"
        ):
            self.i += 1
        if self.i >= self.n:
            return self.s[start:], False
        if self.i == start:
            # unexpected token; skip it so the loop makes progress
            self.i += 1
        return self.s[start : self.i], True

    def _parse_string(self, quote: str) -> tuple[str, bool]:
        self.i += 1
        out: list[str] = []
        while self.i < self.n:
            char = self.s[self.i]
            if char == quote:
                self.i += 1
                return "".join(out), True
            if char == "\\":
                if self.i + 1 >= self.n:
                    self.i = self.n
                    break
                esc = self.s[self.i + 1]
                if esc == "u":
                    digits = self.s[self.i + 2 : self.i + 6]
                    if len(digits) < 4:
                        self.i = self.n
                        break
                    try:
                        out.append(chr(int(digits, 16)))
                    except ValueError:
                        out.append(digits)
                    self.i += 6
                    continue
                out.append(_ESCAPES.get(esc, esc))
                self.i += 2
                continue
            out.append(char)
            self.i += 1
        return "".join(out), False

    def _parse_number(self) -> tuple[Any, bool]:
        m = _NUMBER.match(self.s, self.i)
        token = m.group(0) if m else ""
        self.i += len(token) or 1
        complete = self.i < self.n
        try:
            if any(c in token for c in ".eE"):
                value: Any = float(token)
            else:
                value = int(token)
        except ValueError:
            return Pending(None), False
        return (value if complete else Pending(value)), complete

    def _parse_bare(self) -> tuple[Any, bool]:
        start = self.i
        while self.i < self.n and self.s[self.i] not in ",}]\n":
            self.i += 1
        token = self.s[start : self.i].strip()
        if self.i >= self.n:
            return Pending(token), False
        return token, True

    def _skip_until(self, stops: str) -> None:
        while self.i < self.n and self.s[self.i] not in stops:
            self.i += 1
