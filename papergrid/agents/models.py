"""Shared data models for the confidence, query and summary agents."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """JSON uses camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Confidence Analysis ─────────────────────────────────────────────


class ExtractedField(_CamelModel):
    """A field value extracted upstream from a paper. Input only."""

    model_config = ConfigDict(frozen=True)

    # The search-results client sends the id as fieldId
    id: str = Field(min_length=1, validation_alias=AliasChoices("id", "fieldId"))
    name: str
    type: str
    value: Any = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    citations: Optional[list[Any]] = None


class FieldConfidenceScore(_CamelModel):
    """Verification verdict for a single extracted field."""

    field_id: str = Field(description="id of the extracted field being scored")
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    evidence_strength: Literal["strong", "moderate", "weak", "none"]
    issues: Optional[list[str]] = None


class ConfidenceAnalysisResult(_CamelModel):
    """Schema used for structured output of the confidence analysis."""

    field_scores: list[FieldConfidenceScore]
    overall_confidence: float = Field(ge=0.0, le=1.0)
    recommendations: list[str]


class ConfidenceReport(BaseModel):
    """Validated analysis plus the time it was generated."""

    analysis: ConfidenceAnalysisResult
    timestamp: datetime


# ── Boolean Query ────────────────────────────────────────────────────


class QueryAction(str, Enum):
    GENERATE = "generate"
    REFINE = "refine"


class QueryMode(str, Enum):
    """Resolved request shape for query generation."""

    GENERATE = "generate"
    REFINE = "refine"
    # action=refine without an existing query; prompted like GENERATE
    REFINE_WITHOUT_QUERY = "refine_without_query"
