# src/llm/structured.py — v1
"""Structured generation: prompt + pydantic schema -> validated instance.

The pipeline engine only depends on the StructuredGenerator protocol.
LLMStructuredGenerator is the default implementation over the provider
adapters; tests substitute scripted fakes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from prodanalyzer.llm.base_client import BaseLLMClient
from prodanalyzer.llm.models import Message

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert film production analyst. "
    "Respond only with valid JSON matching the provided schema."
)


class StructuredOutputError(Exception):
    """Raised when a model reply is not valid JSON for the requested schema."""


@runtime_checkable
class StructuredGenerator(Protocol):
    """Generate one object of `schema` from a prompt, or raise."""

    async def generate(
        self,
        schema: type[M],
        prompt: str,
        *,
        stage: str,
        system: str | None = None,
    ) -> M: ...


def strip_code_fences(content: str) -> str:
    """Remove markdown code fences some models wrap JSON replies in."""
    text = content.strip()
    if text.startswith("```"):
        lines = [ln for ln in text.split("\n") if not ln.strip().startswith("```")]
        text = "\n".join(lines)
    return text


def parse_structured(schema: type[M], content: str) -> M:
    """Validate a raw model reply against schema.

    Raises:
        StructuredOutputError: If the reply is empty, not JSON, or does not
            conform to the schema.
    """
    text = strip_code_fences(content)
    if not text:
        raise StructuredOutputError(f"Empty response for {schema.__name__}")
    try:
        return schema.model_validate_json(text)
    except ValidationError as exc:
        raise StructuredOutputError(
            f"Response does not match {schema.__name__}: "
            f"{exc.error_count()} validation error(s)"
        ) from exc


class LLMStructuredGenerator:
    """StructuredGenerator backed by per-stage LLM clients.

    Args:
        client_for: Returns the LLM client routed to a stage name
            (typically a pipeline.llm_factory.LLMFactory).
        temperature: Sampling temperature for every call.
        max_tokens: Output token cap for every call.
    """

    def __init__(
        self,
        client_for: Callable[[str], BaseLLMClient],
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> None:
        self._client_for = client_for
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def generate(
        self,
        schema: type[M],
        prompt: str,
        *,
        stage: str,
        system: str | None = None,
    ) -> M:
        client = self._client_for(stage)
        system_prompt = (
            f"{system or DEFAULT_SYSTEM_PROMPT}\n\n"
            f"JSON schema:\n{json.dumps(schema.model_json_schema())}"
        )
        response = await client.complete(
            messages=[Message(role="user", content=prompt)],
            system=system_prompt,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            response_format=schema,
        )
        logger.debug(
            "Stage %s: %s/%s returned %d output tokens in %dms",
            stage,
            response.provider,
            response.model,
            response.output_tokens,
            response.latency_ms,
        )
        try:
            return parse_structured(schema, response.content)
        except StructuredOutputError as exc:
            if response.truncated:
                raise StructuredOutputError(
                    f"{exc} (reply truncated at {self._max_tokens} output tokens)"
                ) from exc
            raise
