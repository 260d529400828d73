"""
Best-effort JSON decoding of model output.
"""

import pytest

from medvoice.core.utils.json_decode import best_effort_json, extract_fenced_block


def test_plain_json_object():
    assert best_effort_json('{"entities": [1, 2]}', {}) == {"entities": [1, 2]}


def test_fenced_block_takes_precedence():
    text = 'Here you go:\n```json\n{"intents": ["OSETR_ZAZNAM"]}\n```\nDone.'
    assert best_effort_json(text, {}) == {"intents": ["OSETR_ZAZNAM"]}


def test_fence_without_language_tag():
    assert extract_fenced_block("```\n[1]\n```") == "[1]"
    assert extract_fenced_block("no fence here") is None


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        None,
        "not json at all",
        '{"segments": [',
        "```json\n{broken\n```",
    ],
)
def test_malformed_output_returns_fallback(raw):
    fallback = {"segments": []}
    assert best_effort_json(raw, fallback) is fallback


def test_non_string_input_returns_fallback():
    assert best_effort_json(b'{"a": 1}', "fallback") == "fallback"
