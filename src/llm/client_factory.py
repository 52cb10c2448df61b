# src/llm/client_factory.py — v1
"""Factory: instantiate an LLM client from a provider name.

Called by pipeline/llm_factory.py with the provider:model resolved for a
stage (see llm/config.py). Adapters are imported lazily so a provider
SDK is only needed when a stage is routed to it.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass

from prodanalyzer.config.settings import Settings
from prodanalyzer.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSpec:
    """Where a provider's adapter lives and which setting holds its key."""

    class_path: str
    api_key_field: str | None = None


_PROVIDERS: dict[str, ProviderSpec] = {
    "google": ProviderSpec(
        "prodanalyzer.llm.adapters.google_adapter.GoogleAdapter", "google_api_key"
    ),
    "anthropic": ProviderSpec(
        "prodanalyzer.llm.adapters.anthropic_adapter.AnthropicAdapter", "anthropic_api_key"
    ),
    "openai": ProviderSpec(
        "prodanalyzer.llm.adapters.openai_adapter.OpenAIAdapter", "openai_api_key"
    ),
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def available_providers() -> list[str]:
    return sorted(_PROVIDERS)


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the adapter registered for `provider`.

    Args:
        provider: Provider identifier, case-insensitive (google, anthropic, openai).
        model: Model name sent to the provider (e.g. gemini-2.5-flash).
        settings: Source of the provider's API key, when given.
        **kwargs: Extra adapter constructor arguments.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    spec = _PROVIDERS.get(provider.lower())
    if spec is None:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(available_providers())}"
        )

    init_kwargs = {**kwargs, "model": model}
    if settings is not None and spec.api_key_field:
        init_kwargs.setdefault("api_key", getattr(settings, spec.api_key_field))

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return _import_class(spec.class_path)(**init_kwargs)


def register_provider(name: str, class_path: str, api_key_field: str | None = None) -> None:
    """Register a custom provider adapter (a BaseLLMClient subclass)."""
    _PROVIDERS[name.lower()] = ProviderSpec(class_path, api_key_field)
    logger.info("Registered LLM provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    module_path, class_name = class_path.rsplit(".", 1)
    return getattr(importlib.import_module(module_path), class_name)
