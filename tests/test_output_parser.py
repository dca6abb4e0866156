"""Tests for JSON extraction and Decision parsing from model text."""

import pytest

from fieldwise.core.output_parser import clean_json_text, extract_json, parse_decision
from fieldwise.types import MalformedOutputError, NativeControl, Strategy


class TestExtractJson:
    def test_fenced_json_block(self):
        text = 'Here you go:\n```json\n{"strategy": "signature"}\n```\nDone.'
        assert extract_json(text) == '{"strategy": "signature"}'

    def test_fenced_block_without_language(self):
        text = '```\n{"strategy": "map"}\n```'
        assert extract_json(text) == '{"strategy": "map"}'

    def test_fence_wins_over_braces(self):
        text = 'Example {"strategy": "keyboard"} but really:\n```json\n{"strategy": "map"}\n```'
        assert extract_json(text) == '{"strategy": "map"}'

    def test_brace_span(self):
        text = 'Sure! {"strategy": "native", "native": {"control": "toggle"}} Hope this helps.'
        assert extract_json(text) == '{"strategy": "native", "native": {"control": "toggle"}}'

    def test_brace_span_skips_echoed_instructions(self):
        text = (
            'Config: { "type": "default" }\n'
            'JSON SCHEMA (Strict nesting required):\n'
            '{ "strategy": "native" }'
        )
        assert extract_json(text) == text

    def test_whole_text_when_no_braces(self):
        assert extract_json("no json here") == "no json here"

    def test_empty(self):
        assert extract_json("") is None
        assert extract_json("   \n") is None


class TestCleanJsonText:
    def test_strips_fence_markers(self):
        assert clean_json_text('```json{"a": 1}```') == '{"a": 1}'

    def test_strips_one_leading_backslash(self):
        assert clean_json_text('\\{"a": 1}') == '{"a": 1}'
        assert clean_json_text('\\\\{"a": 1}') == '\\{"a": 1}'

    def test_trims_whitespace(self):
        assert clean_json_text('\n  {"a": 1}  \n') == '{"a": 1}'


class TestParseDecision:
    def test_plain_json(self):
        decision = parse_decision('{"strategy": "native", "native": {"control": "datePicker"}}')
        assert decision.strategy == Strategy.NATIVE
        assert decision.native.control == NativeControl.DATE_PICKER

    def test_markdown_wrapped(self):
        decision = parse_decision(
            '```json\n{"strategy": "map", "label": "Address", "map": {"showUserLocation": true}}\n```'
        )
        assert decision.strategy == Strategy.MAP
        assert decision.label == "Address"

    def test_prose_around_json(self):
        decision = parse_decision('The best fit is {"strategy": "signature"} for this field.')
        assert decision.strategy == Strategy.SIGNATURE

    def test_think_tags_removed(self):
        decision = parse_decision(
            '<think>maybe {"strategy": "webview"}?</think>\n{"strategy": "signature"}'
        )
        assert decision.strategy == Strategy.SIGNATURE

    def test_leading_backslash(self):
        decision = parse_decision('\\{"strategy": "signature"}')
        assert decision.strategy == Strategy.SIGNATURE

    @pytest.mark.parametrize("text", [
        "",
        "I cannot help with that.",
        '{"strategy": "native"}',
        '{"strategy": "native", "native": {"control": "slider"',
    ])
    def test_malformed(self, text):
        with pytest.raises(MalformedOutputError):
            parse_decision(text)

    def test_non_text_response(self):
        with pytest.raises(MalformedOutputError):
            parse_decision(None)

    def test_deeply_nested_json(self):
        with pytest.raises(MalformedOutputError):
            parse_decision("[" * 100_000 + "]" * 100_000)
