"""Tests for balanced-span JSON extraction."""

from refactor_score.pipeline.extraction import find_array_span, find_json_span
from refactor_score.pipeline.parsing import ANALYSIS_SCHEMA, SUGGESTIONS_SCHEMA


def test_object_span_inside_prose():
    text = 'Sure! Here it is:\n```json\n{"a": {"b": 1}}\n```\nHope that helps.'
    assert find_json_span(text, "{", "}") == '{"a": {"b": 1}}'


def test_span_runs_from_first_opening_to_last_closing():
    text = '{"a": 1} and then {"b": 2}'
    assert find_json_span(text, "{", "}") == text


def test_no_span_when_delimiters_missing_or_reversed():
    assert find_json_span("", "{", "}") is None
    assert find_json_span("no json here", "{", "}") is None
    assert find_json_span('{"a": 1', "{", "}") is None
    assert find_json_span("} backwards {", "{", "}") is None


def test_array_span():
    assert find_array_span('result: [{"title": "x"}] done') == '[{"title": "x"}]'


def test_single_object_is_wrapped_as_array():
    assert find_array_span('{"title": "x"}') == '[{"title": "x"}]'


def test_array_span_none_without_json():
    assert find_array_span("nothing") is None


def test_schema_extract_falls_back_to_empty_value():
    assert ANALYSIS_SCHEMA.extract("not json at all") == "{}"
    assert SUGGESTIONS_SCHEMA.extract("not json at all") == "[]"
