"""Tests for filter and sort parsing."""

from __future__ import annotations

import pytest

from mongotab.domains.documents.domain.filters import (
    FilterSyntaxError,
    canonical_json,
    parse_filter,
    parse_json_value,
    parse_sort,
)


class TestParseJsonValue:
    def test_valid_json_object(self):
        is_json, parsed = parse_json_value('{"status": "x", "total": 42}')
        assert is_json is True
        assert parsed == {"status": "x", "total": 42}

    def test_python_dict_single_quotes(self):
        """Python-style dicts are accepted through ast.literal_eval."""
        is_json, parsed = parse_json_value("{'status': 'x'}")
        assert is_json is True
        assert parsed == {"status": "x"}

    def test_plain_text(self):
        assert parse_json_value("status = x") == (False, None)

    def test_malformed(self):
        assert parse_json_value('{"unclosed": ') == (False, None)


class TestParseFilter:
    def test_blank_means_everything(self):
        assert parse_filter("") == {}
        assert parse_filter("   ") == {}

    def test_operator_filter(self):
        assert parse_filter('{"total": {"$gt": 10}}') == {"total": {"$gt": 10}}

    def test_list_is_rejected(self):
        with pytest.raises(FilterSyntaxError):
            parse_filter("[1, 2]")

    def test_garbage_is_rejected(self):
        with pytest.raises(FilterSyntaxError, match="Invalid filter"):
            parse_filter("status:x")


class TestParseSort:
    def test_blank_means_no_sort(self):
        assert parse_sort("") is None

    def test_directions(self):
        assert parse_sort('{"total": -1, "_id": 1}') == {"total": -1, "_id": 1}

    def test_bad_direction(self):
        with pytest.raises(FilterSyntaxError, match="must be 1 or -1"):
            parse_sort('{"total": 2}')


class TestCanonicalJson:
    def test_key_order_does_not_matter(self):
        assert canonical_json({"a": 1, "b": {"y": 2, "x": 1}}) == canonical_json({"b": {"x": 1, "y": 2}, "a": 1})

    def test_non_json_values_are_stringified(self):
        class Oid:
            def __str__(self) -> str:
                return "abc"

        assert canonical_json({"_id": Oid()}) == '{"_id":"abc"}'
