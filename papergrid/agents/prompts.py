"""Prompt builders for the confidence, query and summary agents.

Pure string rendering: same input, same prompt. No model calls here.
"""

import json
from typing import Optional, Sequence

from papergrid.agents.models import ExtractedField, QueryMode

# ── Confidence Analysis ─────────────────────────────────────────────

CONFIDENCE_RUBRIC = """CONFIDENCE SCORING GUIDELINES:
- 1.0 (100%): Exact match found in text with clear, unambiguous evidence
- 0.8-0.9 (80-90%): Strong evidence with minor interpretation required
- 0.6-0.7 (60-70%): Moderate evidence, some inference needed
- 0.4-0.5 (40-50%): Weak evidence, significant inference required
- 0.2-0.3 (20-30%): Very weak evidence, mostly guesswork
- 0.0-0.1 (0-10%): No evidence found or contradictory information"""


def _field_block(field: ExtractedField) -> str:
    prior = "N/A" if field.confidence is None else f"{field.confidence:g}"
    citations = "None" if field.citations is None else json.dumps(field.citations)
    return (
        f"Field ID: {field.id}\n"
        f"Field: {field.name} ({field.type})\n"
        f"Extracted Value: {json.dumps(field.value)}\n"
        f"Original Confidence: {prior}\n"
        f"Citations: {citations}"
    )


def build_confidence_prompt(source_text: str, fields: Sequence[ExtractedField]) -> str:
    """Build the verification prompt for a set of extracted fields."""
    field_blocks = "\n\n".join(_field_block(f) for f in fields)

    return f"""You are an expert at verifying information extraction accuracy. Analyze the following extracted values against the source text and assign confidence scores.

SOURCE TEXT:
{source_text}

EXTRACTED FIELDS:
{field_blocks}

{CONFIDENCE_RUBRIC}

For each field:
1. Check if the extracted value can be verified in the source text
2. Assess the strength and clarity of supporting evidence
3. Identify any potential issues or contradictions
4. Provide reasoning for the confidence score

Return exactly one entry in fieldScores per field above, using its Field ID as fieldId.
Set evidenceStrength to one of: strong, moderate, weak, none.

Also provide an overall confidence score for the entire extraction and recommendations for improvement."""


# ── Boolean Query ────────────────────────────────────────────────────

BOOLEAN_QUERY_INSTRUCTIONS = """You are generating a Boolean search query optimized for full-text search of scholarly works. Follow these instructions carefully:

Use only Boolean operators (AND, OR, NOT) to connect keywords.

Use quotes for exact phrases (e.g., "gene therapy").

Use parentheses to group synonyms or related terms.

Do not include any field prefixes like author:, year:, journal:, etc.

Do not suggest filters for publication years, author names, journal titles, or affiliations.

Focus only on keywords and concepts that would appear in the full text of the paper.

Make the query comprehensive by including synonyms, acronyms, spelling variants, and related terms, but avoid introducing unrelated false positives.

Use NOT to exclude likely sources of irrelevant results (e.g., mouse models when the focus is human studies).

Keep the query readable with clean logical structure and correct parentheses.

Goal:
Maximize recall without sacrificing precision: include as many valid synonyms and phrasings as necessary, but avoid adding noise."""

_QUERY_OUTPUT_DIRECTIVE = "Output only the Boolean query, no explanation."


def build_query_prompt(
    description: str,
    mode: QueryMode,
    existing_query: Optional[str] = None,
) -> str:
    """Build the generate- or refine-mode Boolean query prompt."""
    if mode == QueryMode.REFINE:
        body = (
            f"Current query: {existing_query}\n\n"
            f"User feedback: {description}\n\n"
            "Generate an improved Boolean query based on the user's feedback. "
            "Maintain the core concept but adjust based on their input."
        )
    else:
        body = (
            f"User's research description: {description}\n\n"
            "Generate a comprehensive Boolean search query for this research topic."
        )

    return f"{BOOLEAN_QUERY_INSTRUCTIONS}\n\n{body}\n\n{_QUERY_OUTPUT_DIRECTIVE}"


# ── Query Summary ────────────────────────────────────────────────────


def build_summary_prompt(query: str) -> str:
    return f"""Summarize this Boolean search query into a concise, human-readable title (max 5 words).
Focus on the main research topic, ignoring Boolean operators.

Query: {query}

Output only the title, no explanation or quotes."""
