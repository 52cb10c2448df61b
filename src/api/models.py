# src/api/models.py — v1
"""API-level models: ConfigOverrides, PipelineInfo."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ConfigOverrides(BaseModel):
    """Per-invocation overrides, a validated subset of Settings."""

    llm_assignments: dict[str, str] | None = None  # stage -> "provider:model"
    llm_temperature: float | None = None
    stage_timeout_s: float | None = Field(default=None, gt=0)
    run_deadline_s: float | None = Field(default=None, gt=0)
    fan_out_independent_stages: bool | None = None
    scene_cap: int | None = Field(default=None, ge=0)


class StageInfo(BaseModel):
    name: str
    description: str
    dependencies: list[str] = Field(default_factory=list)


class PipelineInfo(BaseModel):
    """Description of a registered pipeline, as listed by the CLI."""

    name: str
    description: str
    stages: list[StageInfo]
    levels: list[list[str]]
