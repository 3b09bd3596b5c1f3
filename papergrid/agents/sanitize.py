"""Deterministic clean-up of raw model text."""

import re

_FENCE_RE = re.compile(r"^\s*```")
_JSON_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)
_QUOTES = ('"', "'")


def _first_line(text: str) -> str:
    """First non-blank line that is not a Markdown code fence."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines:
        if not _FENCE_RE.match(line):
            return line
    # Nothing but fences: keep the first so a second pass sees the same line.
    return lines[0] if lines else ""


def _peel_wrapping_quotes(text: str) -> str:
    """Remove one quote pair only if it wraps the whole text.

    `"gene therapy"` loses its quotes; `"CRISPR" AND "cancer"` does not,
    because the outer quotes belong to separate phrases.
    """
    if len(text) >= 2 and text[0] == text[-1] and text[0] in _QUOTES:
        inner = text[1:-1]
        if text[0] not in inner:
            return inner.strip()
    return text


def sanitize_output(text: str) -> str:
    """Reduce model text to a single clean line.

    Keeps the first line, then strips wrapping quotes and a trailing period
    until neither applies, so the result is a fixed point (idempotent).
    """
    current = _first_line(text or "")
    while True:
        peeled = _peel_wrapping_quotes(current)
        if peeled.endswith("."):
            peeled = peeled[:-1].rstrip()
        if peeled == current:
            return current
        current = peeled


def strip_code_fences(text: str) -> str:
    """Unwrap a ```json ... ``` block some models put around structured output."""
    match = _JSON_FENCE_RE.match(text or "")
    if match:
        return match.group(1).strip()
    return (text or "").strip()
