"""Assistant config: YAML loader and Pydantic models for providers and tasks."""

import os
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator

CONFIG_ENV_VAR = "PAPERGRID_CONFIG"


# ── Providers ────────────────────────────────────────────────────────


class ProviderName(str, Enum):
    """Supported provider identities. Closed set."""

    OPENAI = "openai"
    OPENROUTER = "openrouter"


class ProviderSettings(BaseModel):
    """Endpoint and credential lookup for one provider."""

    api_key_env: str = Field(description="Environment variable holding the API key")
    base_url: Optional[str] = Field(
        default=None, description="Override endpoint; None uses the SDK default"
    )
    headers: dict[str, str] = Field(default_factory=dict)
    referer_env: Optional[str] = Field(
        default=None, description="Environment variable overriding the HTTP-Referer header"
    )
    default_model: str
    models: list[str] = Field(default_factory=list)

    def api_key(self) -> Optional[str]:
        """Read the credential from the process environment (blank counts as absent)."""
        value = os.environ.get(self.api_key_env, "").strip()
        return value or None

    def request_headers(self) -> dict[str, str]:
        """Configured headers, with the referer taken from the environment when set."""
        headers = dict(self.headers)
        if self.referer_env:
            referer = os.environ.get(self.referer_env, "").strip()
            if referer:
                headers["HTTP-Referer"] = referer
        return headers


def _default_providers() -> dict[ProviderName, ProviderSettings]:
    return {
        ProviderName.OPENAI: ProviderSettings(
            api_key_env="OPENAI_API_KEY",
            default_model="gpt-4o",
            models=["gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo"],
        ),
        ProviderName.OPENROUTER: ProviderSettings(
            api_key_env="OPENROUTER_API_KEY",
            base_url="https://openrouter.ai/api/v1",
            headers={
                "HTTP-Referer": "http://localhost:3000",
                "X-Title": "OpenPaper Grid",
            },
            referer_env="OPENROUTER_REFERER",
            default_model="openrouter/cypher-alpha:free",
            models=[
                "openrouter/cypher-alpha:free",
                "anthropic/claude-3.5-sonnet",
                "anthropic/claude-3-haiku",
                "openai/gpt-4-turbo",
                "openai/gpt-4o-mini",
                "google/gemini-pro-1.5",
                "meta-llama/llama-3.1-70b-instruct",
                "mistralai/mistral-large",
                "deepseek/deepseek-chat",
            ],
        ),
    }


# ── Tasks ────────────────────────────────────────────────────────────


class TaskSettings(BaseModel):
    """Model call parameters for one orchestrated task."""

    provider: ProviderName
    model: str
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)


class TaskTable(BaseModel):
    """Per-task defaults."""

    confidence: TaskSettings = TaskSettings(
        provider=ProviderName.OPENROUTER,
        model="openrouter/cypher-alpha:free",
        temperature=0.3,
    )
    query: TaskSettings = TaskSettings(
        provider=ProviderName.OPENAI, model="gpt-4o", temperature=0.3, max_tokens=500
    )
    summary: TaskSettings = TaskSettings(
        provider=ProviderName.OPENAI, model="gpt-4o-mini", temperature=0.3, max_tokens=20
    )


# ── Assistant Config (top-level) ─────────────────────────────────────


class AssistantConfig(BaseModel):
    """Top-level config. Defaults need no file."""

    request_timeout: float = Field(default=60.0, gt=0, description="Seconds per model call")
    providers: dict[ProviderName, ProviderSettings] = Field(
        default_factory=_default_providers
    )
    tasks: TaskTable = Field(default_factory=TaskTable)

    @model_validator(mode="after")
    def tasks_use_known_providers(self) -> "AssistantConfig":
        for task_name in ("confidence", "query", "summary"):
            task = getattr(self.tasks, task_name)
            if task.provider not in self.providers:
                raise ValueError(
                    f"Task '{task_name}' uses provider '{task.provider.value}' "
                    "which has no entry under 'providers'"
                )
        return self


# ── Helpers ──────────────────────────────────────────────────────────


def load_config(path: str | Path | None = None) -> AssistantConfig:
    """Load config from YAML, falling back to $PAPERGRID_CONFIG, then built-in defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return AssistantConfig()

    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return AssistantConfig.model_validate(raw)
