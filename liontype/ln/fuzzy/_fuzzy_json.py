# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import contextlib
import re
from typing import Any

import orjson

# Maximum input string size for JSON parsing.
MAX_JSON_INPUT_SIZE = 10 * 1024 * 1024  # 10 MB

_FENCE_PATTERN = re.compile(
    r"^\s*```(?:json|JSON)?\s*\n?(.*?)(?:\n?\s*```\s*)?$", re.DOTALL
)


def strip_code_fence(text: str, /) -> str:
    """Remove a surrounding markdown code fence, if any.

    An unterminated fence (still streaming) is stripped as well.
    """
    if "```" not in text:
        return text
    if m := _FENCE_PATTERN.match(text):
        return m.group(1)
    return text


def fuzzy_json(
    str_to_parse: str,
    /,
    *,
    allow_primitive: bool = False,
    max_size: int = MAX_JSON_INPUT_SIZE,
) -> Any:
    """Parse LLM-produced JSON text with error correction.

    Steps:
    1. Parse directly with orjson.
    2. State-machine cleaning (safe quote/key/comma fixing).
    3. Regex-based cleaning fallback.
    4. Close unmatched brackets on the best cleaned candidate.
    5. If all fail, raise ValueError.

    Args:
        str_to_parse: The JSON text, optionally inside a ```json fence.
        allow_primitive: Accept a bare scalar (string, number, bool, null)
            as the document. Structured outputs are dict or list only.
        max_size: Maximum allowed input size in bytes.

    Raises:
        TypeError: If input is not a string, or the document is a scalar
            and ``allow_primitive`` is False.
        ValueError: If input is empty, exceeds size limit, or parsing fails.
    """
    _check_valid_str(str_to_parse, max_size=max_size)
    str_to_parse = strip_code_fence(str_to_parse).strip()

    with contextlib.suppress(orjson.JSONDecodeError):
        return _validate_return_type(orjson.loads(str_to_parse), allow_primitive)

    cleaned = _clean_json_string_safe(str_to_parse)
    with contextlib.suppress(orjson.JSONDecodeError):
        return _validate_return_type(orjson.loads(cleaned), allow_primitive)

    cleaned_regex = _clean_json_string(str_to_parse.replace("'", '"'))
    with contextlib.suppress(orjson.JSONDecodeError):
        return _validate_return_type(orjson.loads(cleaned_regex), allow_primitive)

    for candidate in (cleaned, cleaned_regex):
        with contextlib.suppress(orjson.JSONDecodeError, ValueError):
            fixed = fix_json_string(candidate)
            return _validate_return_type(orjson.loads(fixed), allow_primitive)

    raise ValueError("Invalid JSON string")


def _check_valid_str(
    str_to_parse: str,
    /,
    *,
    max_size: int = MAX_JSON_INPUT_SIZE,
) -> None:
    if not isinstance(str_to_parse, str):
        raise TypeError("Input must be a string")
    if not str_to_parse.strip():
        raise ValueError("Input string is empty")
    if len(str_to_parse) > max_size:
        raise ValueError(
            f"Input size ({len(str_to_parse)} bytes) exceeds maximum "
            f"({max_size} bytes)."
        )


def _validate_return_type(result: Any, allow_primitive: bool) -> Any:
    if allow_primitive or isinstance(result, (dict, list)):
        return result
    raise TypeError(
        "fuzzy_json returns dict or list, got primitive type: "
        f"{type(result).__name__}"
    )
def _clean_json_string_safe(s: str) -> str:
    """State-machine JSON cleaner that preserves string content.

    Fixes single-quoted strings, trailing commas before ``]``/``}`` and
    unquoted object keys.
    """
    result: list[str] = []
    pos = 0
    length = len(s)

    while pos < length:
        char = s[pos]

        if char == "'":  # rewrite a single-quoted string with double quotes
            result.append('"')
            pos += 1
            while pos < length:
                inner_char = s[pos]
                if inner_char == "\\":
                    if pos + 1 < length:
                        next_char = s[pos + 1]
                        if next_char == "'":  # \' is a plain apostrophe here
                            result.append("'")
                            pos += 2
                            continue
                        result.append(inner_char)
                        result.append(next_char)
                        pos += 2
                        continue
                    result.append(inner_char)
                    pos += 1
                    continue
                if inner_char == "'":  # closing quote
                    result.append('"')
                    pos += 1
                    break
                if inner_char == '"':  # now inside double quotes, escape it
                    result.append('\\"')
                    pos += 1
                    continue
                result.append(inner_char)
                pos += 1
            continue

        if char == '"':  # double-quoted strings are copied untouched
            result.append(char)
            pos += 1
            while pos < length:
                inner_char = s[pos]
                if inner_char == "\\":
                    result.append(inner_char)
                    if pos + 1 < length:
                        pos += 1
                        result.append(s[pos])
                    pos += 1
                    continue
                result.append(inner_char)
                pos += 1
                if inner_char == '"':
                    break
            continue

        if char in "{,":  # a key may follow, or a comma may be trailing
            if char == ",":
                lookahead = pos + 1
                while lookahead < length and s[lookahead] in " \t\n\r":
                    lookahead += 1
                if lookahead < length and s[lookahead] in "]}":
                    pos += 1  # drop the trailing comma
                    continue

            result.append(char)
            pos += 1

            while pos < length and s[pos] in " \t\n\r":
                result.append(s[pos])
                pos += 1

            if pos < length and s[pos] not in "\"'{[":  # bare identifier
                key_start = pos
                while pos < length and (s[pos].isalnum() or s[pos] == "_"):
                    pos += 1
                if pos < length and key_start < pos:
                    key_end = pos
                    while pos < length and s[pos] in " \t\n\r":
                        pos += 1
                    if pos < length and s[pos] == ":":
                        result.append(f'"{s[key_start:key_end]}"')
                        continue
                pos = key_start  # no colon follows, so it was a value
            continue

        result.append(char)
        pos += 1

    return "".join(result).strip()


def _clean_json_string(s: str) -> str:
    """Regex normalization: quotes, whitespace, trailing commas, keys."""
    # single quotes not preceded by a backslash
    s = re.sub(r"(?<!\\)'", '"', s)
    s = re.sub(r"\s+", " ", s)
    # trailing commas before a closing bracket or brace
    s = re.sub(r",\s*([}\]])", r"\1", s)
    # { key: value } becomes {"key": value}
    s = re.sub(r'([{,])\s*([^"\s]+)\s*:', r'\1"\2":', s)
    return s.strip()


def fix_json_string(str_to_parse: str, /) -> str:
    """Close unmatched brackets at the end of a JSON string."""
    if not str_to_parse:
        raise ValueError("Input string is empty")

    brackets = {"{": "}", "[": "]"}
    open_brackets = []
    pos = 0
    length = len(str_to_parse)

    while pos < length:
        char = str_to_parse[pos]

        if char == "\\":
            pos += 2  # escaped char
            continue

        if char == '"':
            pos += 1
            # brackets inside a string do not count
            while pos < length:
                if str_to_parse[pos] == "\\":
                    pos += 2
                    continue
                if str_to_parse[pos] == '"':
                    pos += 1
                    break
                pos += 1
            continue

        if char in brackets:
            open_brackets.append(brackets[char])
        elif char in brackets.values():
            # a stray or mismatched closer is an error, never a guess
            if not open_brackets:
                raise ValueError("Extra closing bracket found.")
            if open_brackets[-1] != char:
                raise ValueError("Mismatched brackets.")
            open_brackets.pop()

        pos += 1

    # append whatever is still open, innermost first
    if open_brackets:
        str_to_parse += "".join(reversed(open_brackets))

    return str_to_parse
