# src/pipeline/plugin_kit/models.py — v1
"""Stage and run result models: StageOutput, StageResult, FinalArtifact, PipelineRun.

Stage outputs and final artifacts serialize with camelCase keys, the
shape downstream dashboards consume; Python code uses snake_case names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for stage schemas and their nested records: camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StageOutput(CamelModel):
    """Base for every stage schema. Each stage self-reports a confidence."""

    confidence: float = Field(ge=0.0, le=1.0)


class FinalArtifact(CamelModel):
    """Base for pipeline-specific aggregates."""

    confidence: float = Field(ge=0.0, le=1.0)


class StageResult(BaseModel):
    """Outcome of one stage: validated data or an error, never both."""

    model_config = ConfigDict(frozen=True)

    completed: bool
    duration_ms: int = Field(ge=0)
    data: SerializeAsAny[StageOutput] | None = None
    error: str | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def _check_outcome(self) -> StageResult:
        if self.completed and (self.data is None or self.error is not None):
            raise ValueError("completed stage must carry data and no error")
        if not self.completed and (self.error is None or self.data is not None):
            raise ValueError("failed stage must carry an error and no data")
        return self

    @classmethod
    def succeeded(cls, data: StageOutput, duration_ms: int) -> StageResult:
        return cls(completed=True, duration_ms=duration_ms, data=data)

    @classmethod
    def failed(cls, error: str, duration_ms: int) -> StageResult:
        return cls(completed=False, duration_ms=duration_ms, error=error)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"completed": self.completed, "durationMs": self.duration_ms}
        if self.data is not None:
            payload["data"] = self.data.model_dump(mode="json", by_alias=True)
        if self.error is not None:
            payload["error"] = self.error
        return payload


class PipelineRun(BaseModel):
    """Immutable result of one pipeline invocation.

    `stages` holds every declared stage in declaration order, except for a
    pre-flight failure where no stage was attempted and `error` is set.
    """

    model_config = ConfigDict(frozen=True)

    pipeline: str
    run_id: str
    success: bool
    processing_time_ms: int = Field(ge=0)
    stages: dict[str, StageResult] = Field(default_factory=dict)
    final_artifact: SerializeAsAny[FinalArtifact] | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _check_consistency(self) -> PipelineRun:
        any_completed = any(r.completed for r in self.stages.values())
        if self.success != any_completed:
            raise ValueError("success must equal 'at least one stage completed'")
        if (self.final_artifact is not None) != self.success:
            raise ValueError("final_artifact must be present exactly when success is true")
        return self

    @property
    def completed_stages(self) -> list[str]:
        return [name for name, r in self.stages.items() if r.completed]

    @property
    def failed_stages(self) -> list[str]:
        return [name for name, r in self.stages.items() if not r.completed]

    def to_payload(self) -> dict[str, Any]:
        """Plain JSON-ready dict: {success, processingTimeMs, stages, finalArtifact?, error?}."""
        payload: dict[str, Any] = {
            "success": self.success,
            "processingTimeMs": self.processing_time_ms,
            "stages": {name: r.to_payload() for name, r in self.stages.items()},
        }
        if self.final_artifact is not None:
            payload["finalArtifact"] = self.final_artifact.model_dump(mode="json", by_alias=True)
        if self.error is not None:
            payload["error"] = self.error
        return payload
