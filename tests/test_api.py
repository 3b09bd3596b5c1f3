"""Tests for the HTTP routes."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from papergrid.agents.models import ConfidenceAnalysisResult, ConfidenceReport
from papergrid.api.app import create_app
from papergrid.api.routes import get_config
from papergrid.core.config import AssistantConfig
from papergrid.core.errors import OutputValidationError, ProviderError

QUERY = 'cancer AND (immunotherapy OR "checkpoint inhibitor") NOT mouse'
FIELDS = [{"id": "f1", "name": "age", "type": "number", "value": 45}]


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-openrouter")
    app = create_app()
    app.dependency_overrides[get_config] = lambda: AssistantConfig()
    return TestClient(app)


def _report() -> ConfidenceReport:
    analysis = ConfidenceAnalysisResult.model_validate(
        {
            "fieldScores": [
                {"fieldId": "f1", "confidence": 0.95, "reasoning": "Stated.", "evidenceStrength": "strong"}
            ],
            "overallConfidence": 0.95,
            "recommendations": [],
        }
    )
    return ConfidenceReport(analysis=analysis, timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc))


def test_ping(client):
    assert client.get("/ping").json() == {"message": "pong"}


def test_create_app_configures_logging():
    with patch("papergrid.api.app.logging.basicConfig") as mock_basic_config:
        create_app()
    mock_basic_config.assert_called_once()
    assert "%(name)s" in mock_basic_config.call_args.kwargs["format"]


# ── Confidence ───────────────────────────────────────────────────────


@patch("papergrid.api.routes.analyze_confidence", new_callable=AsyncMock)
def test_confidence_success(mock_analyze, client):
    mock_analyze.return_value = _report()

    response = client.post(
        "/api/ai/confidence",
        json={"sourceText": "The patient's age was 45 years.", "extractedFields": FIELDS},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["analysis"]["fieldScores"][0]["fieldId"] == "f1"
    assert data["analysis"]["fieldScores"][0]["evidenceStrength"] == "strong"
    assert "issues" not in data["analysis"]["fieldScores"][0]
    assert data["timestamp"].startswith("2025-01-01T00:00:00")
    mock_analyze.assert_awaited_once()


@pytest.mark.parametrize(
    "body",
    [
        {"extractedFields": FIELDS},
        {"sourceText": "text", "extractedFields": []},
        {"sourceText": "", "extractedFields": FIELDS},
        {},
    ],
)
def test_confidence_missing_fields(client, body):
    with patch("papergrid.agents.confidence.resolve_model") as mock_resolve:
        response = client.post("/api/ai/confidence", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}
    mock_resolve.assert_not_called()


def test_confidence_invalid_field_is_400(client):
    response = client.post(
        "/api/ai/confidence",
        json={"sourceText": "text", "extractedFields": [{"name": "age"}]},
    )
    assert response.status_code == 400


@patch("papergrid.api.routes.analyze_confidence", new_callable=AsyncMock)
def test_confidence_failure_is_500(mock_analyze, client):
    mock_analyze.side_effect = OutputValidationError("confidence 1.7 out of range")
    response = client.post(
        "/api/ai/confidence", json={"sourceText": "text", "extractedFields": FIELDS}
    )
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to analyze confidence"}


def test_confidence_missing_credential_is_500(client, monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY")
    with patch("papergrid.core.providers.AsyncOpenAI") as mock_client:
        response = client.post(
            "/api/ai/confidence", json={"sourceText": "text", "extractedFields": FIELDS}
        )
    assert response.status_code == 500
    assert response.json() == {"error": "AI provider is not configured"}
    mock_client.assert_not_called()


def test_confidence_accepts_field_id_key(client):
    structured = AsyncMock(return_value=_report().analysis)
    fields = [{"fieldId": "f1", "name": "age", "type": "number", "value": 45}]
    with patch("papergrid.core.providers.ModelHandle.complete_structured", structured):
        response = client.post(
            "/api/ai/confidence", json={"sourceText": "text", "extractedFields": fields}
        )
    assert response.status_code == 200
    assert response.json()["analysis"]["fieldScores"][0]["fieldId"] == "f1"
    assert "Field ID: f1" in structured.call_args.args[0]


def test_confidence_unknown_provider_is_400(client):
    response = client.post(
        "/api/ai/confidence",
        json={"sourceText": "text", "extractedFields": FIELDS, "provider": "bedrock"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid AI provider"}


# ── Boolean Query ────────────────────────────────────────────────────


@patch("papergrid.api.routes.generate_query", new_callable=AsyncMock)
def test_generate_query_success(mock_generate, client):
    mock_generate.return_value = QUERY
    response = client.post(
        "/api/generate-boolean-query",
        json={"description": "tumour immunology", "existingQuery": "cancer", "action": "refine"},
    )
    assert response.status_code == 200
    assert response.json() == {"query": QUERY}
    args = mock_generate.call_args.args
    assert args[:3] == ("tumour immunology", "cancer", "refine")


def test_generate_query_requires_description(client):
    with patch("papergrid.agents.query_builder.resolve_model") as mock_resolve:
        response = client.post("/api/generate-boolean-query", json={"action": "refine"})
    assert response.status_code == 400
    assert response.json() == {"error": "Description is required"}
    mock_resolve.assert_not_called()


@patch("papergrid.api.routes.generate_query", new_callable=AsyncMock)
def test_generate_query_failure_is_500(mock_generate, client):
    mock_generate.side_effect = ProviderError("upstream 502")
    response = client.post("/api/generate-boolean-query", json={"description": "CRISPR"})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate query"}


def test_generate_query_unknown_action_is_400(client):
    response = client.post(
        "/api/generate-boolean-query", json={"description": "CRISPR", "action": "expand"}
    )
    assert response.status_code == 400


# ── Summary ──────────────────────────────────────────────────────────


def test_summarize_requires_query(client):
    response = client.post("/api/summarize-query", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Query is required"}


def test_summarize_fallback_is_200(client):
    create = AsyncMock(side_effect=ProviderError("timeout"))
    with patch("papergrid.core.providers.ModelHandle.complete", create):
        response = client.post("/api/summarize-query", json={"query": QUERY})
    assert response.status_code == 200
    assert response.json() == {"summary": 'cancer immunotherapy inhibitor"'}


@patch("papergrid.api.routes.summarize_query", new_callable=AsyncMock)
def test_summarize_success(mock_summarize, client):
    mock_summarize.return_value = "Cancer Immunotherapy"
    response = client.post("/api/summarize-query", json={"query": QUERY})
    assert response.json() == {"summary": "Cancer Immunotherapy"}


# ── Providers ────────────────────────────────────────────────────────


def test_provider_catalogue(client, monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY")
    providers = {p["name"]: p for p in client.get("/api/ai/providers").json()["providers"]}
    assert providers["openai"]["configured"] is True
    assert providers["openrouter"]["configured"] is False
    assert providers["openrouter"]["defaultModel"] == "openrouter/cypher-alpha:free"
    assert "gpt-4o" in providers["openai"]["models"]
