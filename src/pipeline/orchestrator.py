# src/pipeline/orchestrator.py — v1
"""Pipeline orchestrator — run every stage of a pipeline, then aggregate.

Walks the stages of a PipelineDefinition in declaration order (or level
by level when fan-out is enabled), threading each stage's result into the
prompt context of later stages. A failed stage never stops the run; a
malformed source document stops it before any stage is attempted.

States: NOT_STARTED → RUNNING → AGGREGATING → SUCCESS | TOTAL_FAILURE.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import TYPE_CHECKING, Any

from prodanalyzer.core.models import AssetsInventory, SequenceList, ShotList
from prodanalyzer.core.normalizer import normalize_scenes
from prodanalyzer.core.source import (
    SourceValidationError,
    validate_auxiliary,
    validate_source,
)
from prodanalyzer.logging.context import clear_context, set_run_context
from prodanalyzer.pipeline.aggregator import ResultAggregator
from prodanalyzer.pipeline.context import PromptContext
from prodanalyzer.pipeline.executor import StageExecutor
from prodanalyzer.pipeline.plugin_kit.models import PipelineRun, StageResult

if TYPE_CHECKING:
    from prodanalyzer.core.models import SourceDocument
    from prodanalyzer.llm.structured import StructuredGenerator
    from prodanalyzer.pipeline.plugin_kit.base_stage import PipelineDefinition

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class PipelineOrchestrator:
    """Execute one PipelineDefinition against source documents.

    Args:
        definition: Stages and aggregation rule of the pipeline.
        generator: Structured generation collaborator shared by all stages.
        scene_cap: Maximum number of source records normalized per run.
        stage_timeout_s: Per-stage timeout (None = no per-stage limit).
        fan_out: Run stages of the same dependency level concurrently.
        aggregator: Result aggregator (default ResultAggregator()).
    """

    def __init__(
        self,
        definition: PipelineDefinition,
        generator: StructuredGenerator,
        *,
        scene_cap: int = 20,
        stage_timeout_s: float | None = None,
        fan_out: bool = False,
        aggregator: ResultAggregator | None = None,
    ) -> None:
        if scene_cap < 0:
            raise ValueError("scene_cap must be >= 0")
        self._definition = definition
        self._executor = StageExecutor(generator, timeout_s=stage_timeout_s)
        self._scene_cap = scene_cap
        self._fan_out = fan_out
        self._aggregator = aggregator or ResultAggregator()

    @property
    def definition(self) -> PipelineDefinition:
        return self._definition

    async def run(
        self,
        source: SourceDocument | dict[str, Any],
        *,
        shots: ShotList | dict[str, Any] | None = None,
        sequences: SequenceList | dict[str, Any] | None = None,
        assets: AssetsInventory | dict[str, Any] | None = None,
        deadline: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PipelineRun:
        """Run every stage and return the aggregated, immutable result.

        Pre-flight validation errors and stage errors are reported inside
        the returned PipelineRun; this method does not raise them.

        Args:
            source: Scene breakdown (or shot / sequence list) document.
            shots: Optional shot list used to enrich prompts.
            sequences: Optional sequence list used to enrich prompts.
            assets: Optional assets inventory used to enrich prompts.
            deadline: Absolute time.monotonic() value bounding the whole run.
            cancel_event: When set, in-flight and remaining stages fail as
                cancelled.
        """
        start = time.monotonic()
        run_id = uuid.uuid4().hex[:12]
        name = self._definition.name
        set_run_context(run_id, name)
        try:
            try:
                document = validate_source(source)
                shot_list = validate_auxiliary(shots, ShotList)
                sequence_list = validate_auxiliary(sequences, SequenceList)
                inventory = validate_auxiliary(assets, AssetsInventory)
            except SourceValidationError as exc:
                logger.error("Pipeline %s rejected source: %s", name, exc)
                return PipelineRun(
                    pipeline=name,
                    run_id=run_id,
                    success=False,
                    processing_time_ms=_elapsed_ms(start),
                    stages={},
                    error=str(exc),
                )

            scenes = normalize_scenes(document.data.records(), self._scene_cap)
            context = PromptContext(
                scenes,
                document.data,
                shots=shot_list,
                sequences=sequence_list,
                assets=inventory,
            )
            logger.info(
                "Pipeline %s started: %d stages, %d scenes",
                name,
                len(self._definition.stages),
                len(scenes),
            )

            if self._fan_out:
                await self._run_levels(context, deadline, cancel_event)
            else:
                await self._run_sequential(context, deadline, cancel_event)

            results = context.results
            stages = {n: results[n] for n in self._definition.stage_names}
            success, artifact = self._aggregator.aggregate(self._definition, stages)

            run = PipelineRun(
                pipeline=name,
                run_id=run_id,
                success=success,
                processing_time_ms=_elapsed_ms(start),
                stages=stages,
                final_artifact=artifact,
            )
            logger.info(
                "Pipeline %s finished: %d/%d stages completed",
                name,
                len(run.completed_stages),
                len(stages),
                extra={"success": run.success, "duration_ms": run.processing_time_ms},
            )
            return run
        finally:
            clear_context()

    async def _run_sequential(
        self,
        context: PromptContext,
        deadline: float | None,
        cancel_event: asyncio.Event | None,
    ) -> None:
        for stage in self._definition.stages:
            result = await self._executor.execute(
                stage, context, deadline=deadline, cancel_event=cancel_event
            )
            context.record(stage.name, result)

    async def _run_levels(
        self,
        context: PromptContext,
        deadline: float | None,
        cancel_event: asyncio.Event | None,
    ) -> None:
        for level in self._definition.plan.levels:
            stages = [self._definition.get_stage(n) for n in level]
            results: list[StageResult] = await asyncio.gather(
                *(
                    self._executor.execute(
                        stage, context, deadline=deadline, cancel_event=cancel_event
                    )
                    for stage in stages
                )
            )
            for stage, result in zip(stages, results):
                context.record(stage.name, result)
