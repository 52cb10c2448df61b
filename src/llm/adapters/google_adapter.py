# src/llm/adapters/google_adapter.py — v1
"""Google Gemini adapter implementing BaseLLMClient.

Structured output is requested with the JSON response MIME type; the
schema itself travels in the system instruction. A reply with no text
part (blocked or empty candidate) comes back as empty content.

Each adapter owns a GenerativeService client built from its own API key;
the SDK's process-wide genai.configure() is never called, so runs with
different keys do not share credentials.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel

from prodanalyzer.llm.base_client import BaseLLMClient
from prodanalyzer.llm.models import LLMResponse, Message


def _to_contents(messages: list[Message]) -> list[dict[str, Any]]:
    """Gemini names the assistant role "model"."""
    return [
        {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
        for m in messages
    ]


def _reply_text(resp: Any) -> str:
    try:
        return resp.text or ""
    except ValueError:
        # raised by the SDK when the candidate carries no text part
        return ""


def _hit_token_cap(resp: Any) -> bool:
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return False
    reason = getattr(candidates[0], "finish_reason", None)
    return getattr(reason, "name", str(reason)) == "MAX_TOKENS"


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(self, model: str = "gemini-2.5-flash", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            from google.ai import generativelanguage as glm

            self._client = glm.GenerativeServiceAsyncClient(
                client_options={"api_key": self._api_key}
            )
        return self._client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4000,
        temperature: float = 0.7,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        import google.generativeai as genai

        model = genai.GenerativeModel(self._model, system_instruction=system)
        # without this the SDK falls back to its module-level default client
        model._async_client = self._get_client()

        generation_config: dict[str, Any] = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_format is not None:
            generation_config["response_mime_type"] = "application/json"

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            _to_contents(messages), generation_config=generation_config
        )
        latency = int((time.monotonic() - t0) * 1000)

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=_reply_text(resp),
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            truncated=_hit_token_cap(resp),
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def model_name(self) -> str:
        return self._model
