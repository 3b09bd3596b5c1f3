"""Boolean query agent: generate a query from a description or refine one from feedback."""

import logging
import re
from typing import Optional

from papergrid.agents.models import QueryAction, QueryMode
from papergrid.agents.prompts import build_query_prompt
from papergrid.agents.sanitize import sanitize_output
from papergrid.core.config import AssistantConfig, load_config
from papergrid.core.errors import MODEL_FAILURES, InputError, OutputValidationError
from papergrid.core.providers import resolve_model

logger = logging.getLogger(__name__)

_FIELD_PREFIX_RE = re.compile(r"\b[A-Za-z_]+:")
_PHRASE_RE = re.compile(r'"[^"]*"')


# ── Mode Resolution ──────────────────────────────────────────────────


def resolve_query_mode(
    action: Optional[str | QueryAction],
    existing_query: Optional[str],
) -> QueryMode:
    """Decide which of the three request shapes this is."""
    if action is None or action == "":
        action = QueryAction.GENERATE
    try:
        action = QueryAction(action)
    except ValueError:
        raise InputError(f"Unknown action '{action}' (expected generate or refine)") from None

    has_existing = bool(existing_query and existing_query.strip())

    if action == QueryAction.GENERATE:
        return QueryMode.GENERATE
    if has_existing:
        return QueryMode.REFINE

    logger.warning("Refine requested without an existing query; generating a new query instead")
    return QueryMode.REFINE_WITHOUT_QUERY


# ── Output Lint ──────────────────────────────────────────────────────


def boolean_query_issues(query: str) -> list[str]:
    """List syntax problems the prompt asks the model to avoid.

    Quoted phrases are ignored, so "ratio: 1" inside quotes is fine.
    """
    issues = []
    if "\n" in query:
        issues.append("query spans multiple lines")

    bare = _PHRASE_RE.sub(" ", query)
    prefixes = _FIELD_PREFIX_RE.findall(bare)
    if prefixes:
        issues.append(f"field prefixes present: {', '.join(prefixes)}")

    depth = 0
    for ch in bare:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                break
    if depth != 0:
        issues.append("unbalanced parentheses")
    return issues


# ── Public API ───────────────────────────────────────────────────────


async def generate_query(
    description: Optional[str],
    existing_query: Optional[str] = None,
    action: Optional[str | QueryAction] = None,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    config: Optional[AssistantConfig] = None,
) -> str:
    """Generate (or refine) a single-line Boolean query.

    There is no fallback: a failed model call fails the request.
    """
    if not description or not description.strip():
        raise InputError("Description is required")
    mode = resolve_query_mode(action, existing_query)

    config = config or load_config()
    task = config.tasks.query
    prompt = build_query_prompt(description, mode, existing_query)

    async with resolve_model(config, task, provider, model) as handle:
        try:
            raw = await handle.complete(
                prompt, temperature=task.temperature, max_tokens=task.max_tokens
            )
            query = sanitize_output(raw)
            if not query:
                raise OutputValidationError("Model returned no usable query line")
        except MODEL_FAILURES as exc:
            logger.error("Boolean query generation failed (%s): %s", mode.value, exc)
            raise

    for issue in boolean_query_issues(query):
        logger.warning("Generated query issue: %s", issue)

    logger.info("Generated %s query: %s", mode.value, query)
    return query
