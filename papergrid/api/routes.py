"""
API route definitions.

- POST /api/ai/confidence - Score extracted fields against source text
- POST /api/generate-boolean-query - Generate or refine a Boolean query
- POST /api/summarize-query - Short title for a Boolean query
- GET /api/ai/providers - Supported providers and their models
"""

import logging
from functools import lru_cache
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from papergrid.agents.confidence import analyze_confidence
from papergrid.agents.query_builder import generate_query
from papergrid.agents.summarizer import summarize_query
from papergrid.core.config import AssistantConfig, load_config
from papergrid.core.errors import MODEL_FAILURES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@lru_cache(maxsize=1)
def get_config() -> AssistantConfig:
    """Config dependency; read once per process."""
    return load_config()


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


# ── Request Bodies ───────────────────────────────────────────────────
# Required fields are optional here so that a missing value reaches the
# agents and comes back as the 400 {"error": ...} shape, not a 422.


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: Optional[str] = None
    model: Optional[str] = None


class ConfidenceRequest(_Body):
    source_text: Optional[str] = None
    extracted_fields: Optional[list[Any]] = None


class BooleanQueryRequest(_Body):
    description: Optional[str] = None
    existing_query: Optional[str] = None
    action: Optional[str] = None


class SummaryRequest(_Body):
    query: Optional[str] = None


# ── Routes ───────────────────────────────────────────────────────────


@router.post("/ai/confidence")
async def confidence(body: ConfidenceRequest, config: AssistantConfig = Depends(get_config)):
    if not body.source_text or not body.extracted_fields:
        return error_response("Missing required fields", 400)
    try:
        report = await analyze_confidence(
            body.source_text, body.extracted_fields, body.provider, body.model, config
        )
    except MODEL_FAILURES as exc:
        logger.error("Confidence scoring error: %s", exc)
        return error_response("Failed to analyze confidence", 500)

    return {
        "analysis": report.analysis.model_dump(by_alias=True, exclude_none=True),
        "timestamp": report.timestamp.isoformat(),
    }


@router.post("/generate-boolean-query")
async def boolean_query(body: BooleanQueryRequest, config: AssistantConfig = Depends(get_config)):
    if not body.description:
        return error_response("Description is required", 400)
    try:
        query = await generate_query(
            body.description, body.existing_query, body.action, body.provider, body.model, config
        )
    except MODEL_FAILURES as exc:
        logger.error("Error generating Boolean query: %s", exc)
        return error_response("Failed to generate query", 500)
    return {"query": query}


@router.post("/summarize-query")
async def summary(body: SummaryRequest, config: AssistantConfig = Depends(get_config)):
    if not body.query:
        return error_response("Query is required", 400)
    # Model failures are absorbed by the keyword fallback inside the agent.
    text = await summarize_query(body.query, body.provider, body.model, config)
    return {"summary": text}


@router.get("/ai/providers")
async def providers(config: AssistantConfig = Depends(get_config)):
    return {
        "providers": [
            {
                "name": name.value,
                "defaultModel": settings.default_model,
                "models": settings.models,
                "configured": settings.api_key() is not None,
            }
            for name, settings in config.providers.items()
        ]
    }
