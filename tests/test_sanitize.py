"""Tests for model output sanitizing."""

import pytest

from papergrid.agents.sanitize import sanitize_output, strip_code_fences


# ── Quotes, Lines, Periods ───────────────────────────────────────────


def test_strips_wrapping_double_quotes():
    assert sanitize_output('"Cancer Immunotherapy Trials"') == "Cancer Immunotherapy Trials"


def test_strips_wrapping_single_quotes():
    assert sanitize_output("'CRISPR Cancer Therapy'") == "CRISPR Cancer Therapy"


def test_strips_trailing_period():
    assert sanitize_output("Gene Editing in Oncology.") == "Gene Editing in Oncology"


def test_strips_quotes_and_period_together():
    assert sanitize_output('"Gene Editing in Oncology".') == "Gene Editing in Oncology"
    assert sanitize_output('"Gene Editing in Oncology."') == "Gene Editing in Oncology"


def test_takes_first_line_only():
    raw = '(CRISPR OR "Cas9") AND cancer\n\nThis query covers synonyms for CRISPR.'
    assert sanitize_output(raw) == '(CRISPR OR "Cas9") AND cancer'


def test_skips_leading_blank_lines_and_code_fences():
    raw = '\n```\n"gene therapy" AND cancer\n```'
    assert sanitize_output(raw) == '"gene therapy" AND cancer'


def test_keeps_quotes_of_separate_phrases():
    query = '"CRISPR" AND "gene therapy"'
    assert sanitize_output(query) == query


def test_mismatched_quotes_are_kept():
    assert sanitize_output("\"gene therapy'") == "\"gene therapy'"


def test_empty_and_blank_input():
    assert sanitize_output("") == ""
    assert sanitize_output("   \n  ") == ""
    assert sanitize_output(None) == ""


# ── Idempotence ──────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "raw",
    [
        '""nested""',
        "'\"Double wrapped\"'",
        '"Trailing".',
        "Two periods..",
        "```python",
        '"```abc"',
        '  "(a OR b) AND c"  \nexplanation',
        '"CRISPR" AND "gene therapy".',
        "'",
        '"',
        ".",
    ],
)
def test_sanitize_is_idempotent(raw):
    once = sanitize_output(raw)
    assert sanitize_output(once) == once


# ── Code Fences ──────────────────────────────────────────────────────


def test_strip_code_fences_json_block():
    raw = '```json\n{"a": 1}\n```'
    assert strip_code_fences(raw) == '{"a": 1}'


def test_strip_code_fences_plain_json_untouched():
    assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'
