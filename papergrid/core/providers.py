"""Provider resolution and model handles over the OpenAI-compatible chat API."""

import logging
from typing import Optional, TypeVar

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from papergrid.agents.sanitize import strip_code_fences
from papergrid.core.config import AssistantConfig, ProviderName, ProviderSettings, TaskSettings
from papergrid.core.errors import (
    ConfigurationError,
    OutputValidationError,
    ProviderError,
    UnsupportedProviderError,
)

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


# ── Model Handle ─────────────────────────────────────────────────────


class ModelHandle:
    """A model id bound to a configured provider client.

    Supports raw text completion and schema-constrained completion. No
    retries are made here; one failed call is one failure.
    """

    def __init__(self, provider: ProviderName, model: str, client: AsyncOpenAI):
        self.provider = provider
        self.model = model
        self.client = client

    async def close(self) -> None:
        """Release the client's connection pool."""
        await self.client.close()

    async def __aenter__(self) -> "ModelHandle":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _chat(self, prompt: str, **kwargs) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except openai.APIError as exc:
            # Covers connection errors, timeouts and non-2xx status codes.
            raise ProviderError(
                f"{self.provider.value}/{self.model} call failed: {exc}"
            ) from exc

        if not response.choices:
            raise OutputValidationError(f"{self.provider.value}/{self.model} returned no choices")
        content = response.choices[0].message.content or ""
        if not content.strip():
            raise OutputValidationError(f"{self.provider.value}/{self.model} returned empty content")
        return content

    async def complete(
        self,
        prompt: str,
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Unconstrained completion. Returns the raw model text."""
        kwargs = {"temperature": temperature}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        return await self._chat(prompt, **kwargs)

    async def complete_structured(
        self,
        prompt: str,
        schema: type[SchemaT],
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> SchemaT:
        """Schema-constrained completion.

        The JSON schema is sent as the response format, and the reply is
        validated against it again here; the provider is not trusted.
        """
        kwargs = {
            "temperature": temperature,
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": schema.__name__,
                    "schema": schema.model_json_schema(),
                },
            },
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        raw = await self._chat(prompt, **kwargs)
        try:
            return schema.model_validate_json(strip_code_fences(raw))
        except ValidationError as exc:
            raise OutputValidationError(
                f"{self.provider.value}/{self.model} output does not match "
                f"{schema.__name__}: {exc}"
            ) from exc


# ── Resolution ───────────────────────────────────────────────────────


def parse_provider(name: Optional[str], default: ProviderName) -> ProviderName:
    """Map a requested provider name onto the supported set.

    None selects the explicit default; anything unrecognised is rejected.
    """
    if name is None or name == "":
        return default
    try:
        return ProviderName(name.strip().lower())
    except ValueError:
        supported = ", ".join(p.value for p in ProviderName)
        raise UnsupportedProviderError(
            f"Unsupported provider '{name}' (supported: {supported})"
        ) from None


def build_client(settings: ProviderSettings, api_key: str, timeout: float) -> AsyncOpenAI:
    """Create the SDK client for one provider."""
    return AsyncOpenAI(
        api_key=api_key,
        base_url=settings.base_url,
        default_headers=settings.request_headers() or None,
        timeout=timeout,
        max_retries=0,
    )


def resolve_model(
    config: AssistantConfig,
    task: TaskSettings,
    provider: Optional[str] = None,
    model: Optional[str] = None,
) -> ModelHandle:
    """Return a model handle for the requested provider/model.

    Falls back to the task's configured provider. When the caller picks a
    different provider without a model, that provider's default model is used.
    Raises ConfigurationError before any client exists if the credential is missing.
    """
    name = parse_provider(provider, task.provider)
    settings = config.providers.get(name)
    if settings is None:
        raise ConfigurationError(f"Provider '{name.value}' is not configured")

    if model:
        model_id = model
    elif name == task.provider:
        model_id = task.model
    else:
        model_id = settings.default_model

    api_key = settings.api_key()
    if api_key is None:
        raise ConfigurationError(
            f"Provider '{name.value}' requires {settings.api_key_env} in the environment"
        )

    logger.info("Resolved provider %s with model %s", name.value, model_id)
    client = build_client(settings, api_key, config.request_timeout)
    return ModelHandle(name, model_id, client)
