# src/pipeline/aggregator.py — v1
"""Result aggregator — best-effort final artifact from completed stages.

Field values follow a per-pipeline precedence chain (synthesis stage
first, then earlier stages that define the same concept, then a literal
default). Confidence is the maximum self-reported confidence over all
completed stages.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, TypeVar

from prodanalyzer.pipeline.plugin_kit.models import FinalArtifact, StageOutput, StageResult

if TYPE_CHECKING:
    from prodanalyzer.pipeline.plugin_kit.base_stage import PipelineDefinition

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=StageOutput)
T = TypeVar("T")


def pick(default: T, *candidates: T | None) -> T:
    """Return the first candidate that is not None, else default."""
    for value in candidates:
        if value is not None:
            return value
    return default


class StageOutputs:
    """Typed, read-only view over the completed stages of a run."""

    def __init__(self, results: Mapping[str, StageResult]) -> None:
        self._results = dict(results)

    def get(self, stage: str, schema: type[S]) -> S | None:
        """Return the stage's data if it completed, else None.

        Raises:
            TypeError: If the stage completed with data of another schema.
        """
        result = self._results.get(stage)
        if result is None or not result.completed:
            return None
        if not isinstance(result.data, schema):
            raise TypeError(
                f"Stage '{stage}' produced {type(result.data).__name__}, "
                f"expected {schema.__name__}"
            )
        return result.data

    def completed(self) -> list[str]:
        return [name for name, r in self._results.items() if r.completed]

    def max_confidence(self) -> float:
        """Maximum confidence over completed stages (0.0 when none completed)."""
        return max(
            (r.data.confidence for r in self._results.values() if r.completed and r.data),
            default=0.0,
        )


class ResultAggregator:
    """Compute run success and the final artifact for a pipeline."""

    def aggregate(
        self,
        definition: PipelineDefinition,
        stages: Mapping[str, StageResult],
    ) -> tuple[bool, FinalArtifact | None]:
        """Return (success, final_artifact); the artifact is None iff no stage completed."""
        outputs = StageOutputs(stages)
        completed = outputs.completed()
        if not completed:
            logger.warning("Pipeline %s: no stage completed", definition.name)
            return False, None

        confidence = outputs.max_confidence()
        artifact = definition.aggregate(outputs, confidence)
        logger.info(
            "Pipeline %s aggregated from %d/%d stages (confidence=%.2f)",
            definition.name,
            len(completed),
            len(stages),
            confidence,
        )
        return True, artifact
