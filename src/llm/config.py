# src/llm/config.py — v1
"""Per-stage LLM routing with cascade resolution.

Resolution order:
  1. Per-stage setting (LLM_STRIP_CREATOR=openai:gpt-4o)
  2. Per-pipeline setting (LLM_PIPELINE_SCHEDULE=anthropic:claude-sonnet-4-20250514)
  3. Default provider + model (LLM_DEFAULT_PROVIDER + LLM_DEFAULT_MODEL)
  4. Hardcoded fallback (google:gemini-2.5-flash)
"""

from __future__ import annotations

from dataclasses import dataclass

from prodanalyzer.config.pipelines import PIPELINE_STAGE_MAP
from prodanalyzer.config.settings import Settings

_FALLBACK_PROVIDER = "google"
_FALLBACK_MODEL = "gemini-2.5-flash"


@dataclass(frozen=True)
class LLMAssignment:
    """Resolved LLM provider:model for a stage."""

    provider: str
    model: str
    source: str  # "stage", "pipeline", "default", or "fallback"

    @property
    def key(self) -> str:
        """Return 'provider:model' string."""
        return f"{self.provider}:{self.model}"


def _find_pipeline(stage: str) -> str | None:
    """Find which pipeline a stage belongs to."""
    for pipeline, stages in PIPELINE_STAGE_MAP.items():
        if stage in stages:
            return pipeline
    return None


def _parse_assignment(value: str) -> tuple[str, str] | None:
    """Parse 'provider:model' string. Returns None if empty."""
    if not value or ":" not in value:
        return None
    provider, model = value.split(":", 1)
    return (provider.strip(), model.strip())


def resolve_llm(stage: str, settings: Settings) -> LLMAssignment:
    """Resolve the LLM assignment for a stage.

    Args:
        stage: Stage name (e.g. "strip_creator", "budget_finalizer").
        settings: Application settings.

    Returns:
        Resolved LLMAssignment with provider, model, and resolution source.
    """
    # Level 1: Per-stage override
    parsed = _parse_assignment(getattr(settings, f"llm_{stage}", ""))
    if parsed:
        return LLMAssignment(provider=parsed[0], model=parsed[1], source="stage")

    # Level 2: Per-pipeline override
    pipeline = _find_pipeline(stage)
    if pipeline:
        parsed = _parse_assignment(getattr(settings, f"llm_pipeline_{pipeline}", ""))
        if parsed:
            return LLMAssignment(provider=parsed[0], model=parsed[1], source="pipeline")

    # Level 3: Default
    if settings.llm_default_provider and settings.llm_default_model:
        return LLMAssignment(
            provider=settings.llm_default_provider,
            model=settings.llm_default_model,
            source="default",
        )

    # Level 4: Hardcoded fallback
    return LLMAssignment(
        provider=_FALLBACK_PROVIDER,
        model=_FALLBACK_MODEL,
        source="fallback",
    )


def resolve_all(settings: Settings) -> dict[str, LLMAssignment]:
    """Resolve LLM assignments for every known stage, in pipeline order."""
    return {
        stage: resolve_llm(stage, settings)
        for stages in PIPELINE_STAGE_MAP.values()
        for stage in stages
    }
