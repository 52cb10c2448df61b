# src/llm/adapters/anthropic_adapter.py — v1
"""Anthropic Claude adapter implementing BaseLLMClient.

Structured output is forced through a single tool whose input_schema is
the requested stage schema; the tool input is returned as JSON text.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from pydantic import BaseModel

from prodanalyzer.llm.base_client import BaseLLMClient
from prodanalyzer.llm.models import LLMResponse, Message

logger = logging.getLogger(__name__)

STRUCTURED_TOOL = "structured_output"


def _schema_tool(schema: type[BaseModel]) -> dict[str, Any]:
    return {
        "name": STRUCTURED_TOOL,
        "description": f"Return one {schema.__name__} object",
        "input_schema": schema.model_json_schema(),
    }


class AnthropicAdapter(BaseLLMClient):
    """Adapter for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
        max_tokens_default: int = 4000,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens_default = max_tokens_default
        self.__client = None

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            try:
                import anthropic
            except ImportError as e:
                raise ImportError(
                    "anthropic package required: pip install anthropic"
                ) from e
            self.__client = anthropic.AsyncAnthropic(api_key=self._api_key or "")
        return self.__client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4000,
        temperature: float = 0.7,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        request: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens or self._max_tokens_default,
            "temperature": temperature,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if system:
            request["system"] = system
        if response_format is not None:
            request["tools"] = [_schema_tool(response_format)]
            request["tool_choice"] = {"type": "tool", "name": STRUCTURED_TOOL}

        start = time.monotonic()
        response = await self._client.messages.create(**request)
        latency_ms = int((time.monotonic() - start) * 1000)

        return LLMResponse(
            content=self._extract_content(response, response_format is not None),
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=response.model,
            provider="anthropic",
            latency_ms=latency_ms,
            truncated=getattr(response, "stop_reason", None) == "max_tokens",
            raw_response=response,
        )

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model

    @staticmethod
    def _extract_content(response: Any, structured: bool) -> str:
        """Tool input as JSON when structured, else the first text block."""
        blocks = list(response.content)
        if structured:
            for block in blocks:
                if getattr(block, "type", None) == "tool_use":
                    return json.dumps(block.input)
            logger.debug("No %s tool call in reply; falling back to text", STRUCTURED_TOOL)
        for block in blocks:
            if getattr(block, "type", None) == "text":
                return block.text
        return ""
