# src/pipeline/llm_factory.py — v1
"""LLM factory — creates per-stage LLM clients using config routing.

Resolves provider:model for each stage via the cascade
(per-stage → per-pipeline → default → fallback) and instantiates
the appropriate adapter through llm/client_factory.py.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prodanalyzer.llm.client_factory import create_llm_client
from prodanalyzer.llm.config import resolve_llm

if TYPE_CHECKING:
    from prodanalyzer.config.settings import Settings
    from prodanalyzer.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


class LLMFactory:
    """Create and cache LLM clients per stage.

    Clients are cached by (provider, model) key so stages sharing
    the same assignment reuse a single client instance.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._clients: dict[str, BaseLLMClient] = {}

    def get_client(self, stage_name: str) -> BaseLLMClient:
        """Get or create the LLM client routed to a stage."""
        assignment = resolve_llm(stage_name, self._settings)
        cache_key = assignment.key

        if cache_key not in self._clients:
            self._clients[cache_key] = create_llm_client(
                assignment.provider, assignment.model, self._settings
            )
            logger.info(
                "Created LLM client for '%s': %s (source: %s)",
                stage_name,
                cache_key,
                assignment.source,
            )
        else:
            logger.debug(
                "Reusing cached LLM client for '%s': %s",
                stage_name,
                cache_key,
            )

        return self._clients[cache_key]

    def __call__(self, stage_name: str) -> BaseLLMClient:
        """Callable interface for LLMStructuredGenerator.client_for."""
        return self.get_client(stage_name)
