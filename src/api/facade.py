# src/api/facade.py — v1
"""Public API facade — single entry point for production analysis.

Usage:
    from prodanalyzer.api.facade import analyze
    run = await analyze(breakdown, pipeline="schedule")
    payload = run.to_payload()
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from prodanalyzer.api.models import ConfigOverrides, PipelineInfo, StageInfo
from prodanalyzer.config.settings import ConfigurationError, Settings
from prodanalyzer.llm.structured import LLMStructuredGenerator
from prodanalyzer.pipeline.llm_factory import LLMFactory
from prodanalyzer.pipeline.orchestrator import PipelineOrchestrator
from prodanalyzer.pipeline.registry import default_registry

if TYPE_CHECKING:
    from prodanalyzer.core.models import (
        AssetsInventory,
        SequenceList,
        ShotList,
        SourceDocument,
    )
    from prodanalyzer.llm.structured import StructuredGenerator
    from prodanalyzer.pipeline.plugin_kit.models import PipelineRun

logger = logging.getLogger(__name__)


async def analyze(
    payload: SourceDocument | dict[str, Any],
    pipeline: str = "script",
    settings: Settings | None = None,
    generator: StructuredGenerator | None = None,
    *,
    shots: ShotList | dict[str, Any] | None = None,
    sequences: SequenceList | dict[str, Any] | None = None,
    assets: AssetsInventory | dict[str, Any] | None = None,
    overrides: ConfigOverrides | None = None,
    deadline: float | None = None,
    cancel_event: asyncio.Event | None = None,
) -> PipelineRun:
    """Run one analysis pipeline over a breakdown document.

    Args:
        payload: Scene breakdown (or shot / sequence list) document.
        pipeline: Pipeline name: "script", "schedule" or "budget".
        settings: Global settings. Loaded from .env if None.
        generator: Structured generation collaborator. Defaults to the
            LLM-backed generator routed by `settings`.
        shots: Optional shot list document.
        sequences: Optional sequence list document.
        assets: Optional assets inventory document.
        overrides: Per-invocation settings overrides.
        deadline: Seconds from now bounding the whole run. Defaults to
            settings.run_deadline_s.
        cancel_event: Set it to abandon the remaining stages.

    Returns:
        Immutable PipelineRun. Stage and source errors are reported in it.

    Raises:
        RegistryError: If `pipeline` is not a registered pipeline name.
        ConfigurationError: If overrides name an unknown stage.
    """
    settings = settings or Settings()
    settings = _apply_overrides(settings, overrides)
    definition = default_registry().get_or_raise(pipeline)

    if generator is None:
        generator = LLMStructuredGenerator(
            LLMFactory(settings),
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )

    scene_cap = settings.scene_cap_for(pipeline)
    if overrides is not None and overrides.scene_cap is not None:
        scene_cap = overrides.scene_cap

    budget_s = deadline if deadline is not None else settings.run_deadline_s
    absolute_deadline = time.monotonic() + budget_s if budget_s is not None else None

    orchestrator = PipelineOrchestrator(
        definition,
        generator,
        scene_cap=scene_cap,
        stage_timeout_s=settings.stage_timeout_s,
        fan_out=settings.fan_out_independent_stages,
    )
    return await orchestrator.run(
        payload,
        shots=shots,
        sequences=sequences,
        assets=assets,
        deadline=absolute_deadline,
        cancel_event=cancel_event,
    )


def list_pipelines() -> list[PipelineInfo]:
    """Describe every registered pipeline and its stages."""
    return [
        PipelineInfo(
            name=definition.name,
            description=definition.description,
            stages=[
                StageInfo(
                    name=stage.name,
                    description=stage.description,
                    dependencies=list(stage.dependencies),
                )
                for stage in definition.stages
            ],
            levels=definition.plan.levels,
        )
        for definition in default_registry().pipelines.values()
    ]


def _apply_overrides(settings: Settings, overrides: ConfigOverrides | None) -> Settings:
    """Apply per-invocation config overrides if provided."""
    if overrides is None:
        return settings
    updates = overrides.model_dump(exclude_none=True, exclude={"llm_assignments", "scene_cap"})
    for stage, assignment in (overrides.llm_assignments or {}).items():
        if not hasattr(settings, f"llm_{stage}"):
            raise ConfigurationError(f"No LLM routing setting for stage {stage!r}")
        updates[f"llm_{stage}"] = assignment
    if not updates:
        return settings
    current = settings.model_dump()
    current.update(updates)
    return Settings(**current)
