"""Confidence analysis agent: verify extracted fields against the source text."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from papergrid.agents.models import ConfidenceAnalysisResult, ConfidenceReport, ExtractedField
from papergrid.agents.prompts import build_confidence_prompt
from papergrid.core.config import AssistantConfig, load_config
from papergrid.core.errors import MODEL_FAILURES, InputError, OutputValidationError
from papergrid.core.providers import resolve_model

logger = logging.getLogger(__name__)


# ── Input Checks ─────────────────────────────────────────────────────


def coerce_fields(extracted_fields: Optional[Sequence[Any]]) -> list[ExtractedField]:
    """Validate caller-supplied fields. Raises InputError on any problem."""
    if not extracted_fields:
        raise InputError("At least one extracted field is required")

    fields: list[ExtractedField] = []
    for i, item in enumerate(extracted_fields):
        if isinstance(item, ExtractedField):
            fields.append(item)
            continue
        try:
            fields.append(ExtractedField.model_validate(item))
        except ValidationError as exc:
            raise InputError(f"Extracted field #{i} is invalid: {exc}") from exc

    ids = [f.id for f in fields]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise InputError(f"Duplicate extracted field ids: {', '.join(duplicates)}")
    return fields


# ── Output Checks ────────────────────────────────────────────────────


def verify_field_scores(
    analysis: ConfidenceAnalysisResult,
    fields: Sequence[ExtractedField],
) -> None:
    """Require exactly one score per input field id.

    Ranges and enum values are already enforced by the schema model.
    """
    expected = {f.id for f in fields}
    returned = [s.field_id for s in analysis.field_scores]

    unknown = sorted(set(returned) - expected)
    missing = sorted(expected - set(returned))
    repeated = sorted({i for i in returned if returned.count(i) > 1})

    problems = []
    if unknown:
        problems.append(f"unknown ids {unknown}")
    if missing:
        problems.append(f"missing ids {missing}")
    if repeated:
        problems.append(f"repeated ids {repeated}")
    if problems:
        raise OutputValidationError("Field scores do not match input fields: " + "; ".join(problems))


# ── Public API ───────────────────────────────────────────────────────


async def analyze_confidence(
    source_text: Optional[str],
    extracted_fields: Optional[Sequence[Any]],
    provider: Optional[str] = None,
    model: Optional[str] = None,
    config: Optional[AssistantConfig] = None,
) -> ConfidenceReport:
    """Score each extracted field against the source text.

    Fails closed: any provider or validation failure propagates, and no
    partial report is ever built.
    """
    if not source_text or not source_text.strip():
        raise InputError("Source text is required")
    fields = coerce_fields(extracted_fields)

    config = config or load_config()
    task = config.tasks.confidence
    prompt = build_confidence_prompt(source_text, fields)

    async with resolve_model(config, task, provider, model) as handle:
        logger.info("Scoring %d fields with %s", len(fields), handle.model)
        try:
            analysis = await handle.complete_structured(
                prompt,
                ConfidenceAnalysisResult,
                temperature=task.temperature,
                max_tokens=task.max_tokens,
            )
            verify_field_scores(analysis, fields)
        except MODEL_FAILURES as exc:
            logger.error("Confidence analysis failed: %s", exc)
            raise

    logger.info(
        "Confidence analysis complete: overall %.2f across %d fields",
        analysis.overall_confidence,
        len(analysis.field_scores),
    )
    return ConfidenceReport(analysis=analysis, timestamp=datetime.now(timezone.utc))
