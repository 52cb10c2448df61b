# tests/unit/llm/test_unit_client_factory.py — v1
"""Tests for llm/client_factory.py — provider registry and instantiation."""

from __future__ import annotations

import pytest

from prodanalyzer.config.settings import Settings
from prodanalyzer.llm import client_factory
from prodanalyzer.llm.adapters.anthropic_adapter import AnthropicAdapter
from prodanalyzer.llm.adapters.google_adapter import GoogleAdapter
from prodanalyzer.llm.adapters.openai_adapter import OpenAIAdapter
from prodanalyzer.llm.client_factory import (
    UnsupportedProviderError,
    create_llm_client,
    available_providers,
    register_provider,
)


class TestCreateLLMClient:
    @pytest.mark.parametrize(
        "provider,cls",
        [("google", GoogleAdapter), ("anthropic", AnthropicAdapter), ("openai", OpenAIAdapter)],
    )
    def test_builtin_providers(self, provider, cls):
        client = create_llm_client(provider, "some-model")
        assert isinstance(client, cls)
        assert client.provider_name == provider
        assert client.model_name == "some-model"

    def test_case_insensitive(self):
        assert isinstance(create_llm_client("OpenAI", "gpt-4o"), OpenAIAdapter)

    def test_api_key_from_settings(self):
        s = Settings(_env_file=None, openai_api_key="sk-test")
        client = create_llm_client("openai", "gpt-4o", s)
        assert client._api_key == "sk-test"

    def test_unsupported(self):
        with pytest.raises(UnsupportedProviderError, match="mistral"):
            create_llm_client("mistral", "large")


class TestAvailableProviders:
    def test_builtin(self):
        assert available_providers() == ["anthropic", "google", "openai"]


class TestRegisterProvider:
    def test_custom_provider(self, monkeypatch):
        monkeypatch.setattr(client_factory, "_PROVIDERS", dict(client_factory._PROVIDERS))
        register_provider("gemini", "prodanalyzer.llm.adapters.google_adapter.GoogleAdapter")
        assert isinstance(create_llm_client("gemini", "gemini-2.5-flash"), GoogleAdapter)

    def test_custom_provider_key(self, monkeypatch):
        monkeypatch.setattr(client_factory, "_PROVIDERS", dict(client_factory._PROVIDERS))
        register_provider("azure", "prodanalyzer.llm.adapters.openai_adapter.OpenAIAdapter", "openai_api_key")
        s = Settings(_env_file=None, openai_api_key="sk-azure")
        assert create_llm_client("azure", "gpt-4o", s)._api_key == "sk-azure"
