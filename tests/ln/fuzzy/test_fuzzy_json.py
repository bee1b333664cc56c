"""Tests for tolerant JSON parsing of model output."""

import pytest

from liontype.ln.fuzzy import fix_json_string, fuzzy_json, strip_code_fence


class TestStripCodeFence:
    def test_fenced(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_unterminated_fence(self):
        assert strip_code_fence('```json\n{"a": 1').strip() == '{"a": 1}'

    def test_no_fence(self):
        assert strip_code_fence('{"a": 1}') == '{"a": 1}'


class TestFuzzyJson:
    def test_valid_json(self):
        assert fuzzy_json('{"name": "John"}') == {"name": "John"}

    def test_single_quotes_and_unquoted_keys(self):
        assert fuzzy_json("{name: 'John', age: 42}") == {"name": "John", "age": 42}

    def test_single_quoted_string_keeps_quotes_inside(self):
        text = "{'a': 'it\\'s \"q\"'}"
        assert fuzzy_json(text) == {"a": 'it\'s "q"'}

    def test_trailing_comma(self):
        assert fuzzy_json('{"a": [1, 2,], }') == {"a": [1, 2]}

    def test_unclosed_brackets(self):
        assert fuzzy_json('{"a": {"b": [1, 2') == {"a": {"b": [1, 2]}}

    def test_fenced_input(self):
        assert fuzzy_json('```json\n[1, 2]\n```') == [1, 2]

    def test_primitive_needs_opt_in(self):
        with pytest.raises(TypeError):
            fuzzy_json("42")
        assert fuzzy_json("42", allow_primitive=True) == 42

    def test_empty_and_oversized(self):
        with pytest.raises(ValueError):
            fuzzy_json("   ")
        with pytest.raises(ValueError, match="exceeds maximum"):
            fuzzy_json('{"a": 1}', max_size=3)

    def test_not_a_string(self):
        with pytest.raises(TypeError):
            fuzzy_json(b"{}")

    def test_garbage(self):
        with pytest.raises(ValueError):
            fuzzy_json("this is not json at all")


class TestFixJsonString:
    def test_closes_in_order(self):
        assert fix_json_string('{"a": [1, {"b": 2') == '{"a": [1, {"b": 2}]}'

    def test_brackets_inside_strings_ignored(self):
        assert fix_json_string('{"a": "[}"') == '{"a": "[}"}'

    def test_mismatch(self):
        with pytest.raises(ValueError):
            fix_json_string('{"a": 1]')
