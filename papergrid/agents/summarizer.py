"""Query summary agent: short display title for a Boolean query."""

import logging
import re
from typing import Optional

from papergrid.agents.prompts import build_summary_prompt
from papergrid.agents.sanitize import sanitize_output
from papergrid.core.config import AssistantConfig, load_config
from papergrid.core.errors import MODEL_FAILURES, InputError, OutputValidationError
from papergrid.core.providers import resolve_model

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "Search Results"

_PARENS_RE = re.compile(r"[()]")
_OPERATOR_RE = re.compile(r"\b(AND|OR|NOT)\b")
_MIN_KEYWORD_LEN = 4
_MAX_KEYWORDS = 3


# ── Keyword Fallback ─────────────────────────────────────────────────


def keyword_summary(query: str) -> str:
    """Build a title from the query's first few long, unquoted keywords.

    Used only when the model call fails. Deterministic.
    """
    stripped = _OPERATOR_RE.sub(" ", _PARENS_RE.sub(" ", query))
    keywords = [
        word
        for word in stripped.split()
        if len(word) >= _MIN_KEYWORD_LEN and not word.startswith(('"', "'"))
    ]
    return " ".join(keywords[:_MAX_KEYWORDS]) or FALLBACK_TITLE


# ── Public API ───────────────────────────────────────────────────────


async def summarize_query(
    query: Optional[str],
    provider: Optional[str] = None,
    model: Optional[str] = None,
    config: Optional[AssistantConfig] = None,
) -> str:
    """Summarize a Boolean query into a title of at most five words.

    A failed model call degrades to keyword_summary(); configuration
    problems still raise.
    """
    if not query or not query.strip():
        raise InputError("Query is required")

    config = config or load_config()
    task = config.tasks.summary
    async with resolve_model(config, task, provider, model) as handle:
        try:
            raw = await handle.complete(
                build_summary_prompt(query),
                temperature=task.temperature,
                max_tokens=task.max_tokens,
            )
            summary = sanitize_output(raw)
            if not summary:
                raise OutputValidationError("Model returned an empty summary")
        except MODEL_FAILURES as exc:
            summary = keyword_summary(query)
            logger.warning("Query summary failed (%s); using keyword fallback '%s'", exc, summary)

    return summary
