# src/pipeline/definitions/schedule.py — v1
"""Schedule analysis pipeline: stripboard to optimized shooting schedule.

Stages:
  1. strip_creator         color-coded scene strips
  2. block_optimizer       day/night shooting blocks
  3. location_manager      location groups and travel plan
  4. move_calculator       company moves between locations
  5. compliance_validator  union, crew and safety compliance
  6. stripboard_genius     final schedule synthesized from all of the above
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from prodanalyzer.core.models import Level
from prodanalyzer.pipeline.aggregator import StageOutputs, pick
from prodanalyzer.pipeline.plugin_kit.base_stage import PipelineDefinition, StageDefinition
from prodanalyzer.pipeline.plugin_kit.models import CamelModel, FinalArtifact, StageOutput

COMPLIANT_SCORE = 85
NON_COMPLIANT_SCORE = 60

# === strip_creator ===


class Strip(CamelModel):
    scene_id: str
    strip_color: str
    department: str
    complexity: float = Field(ge=1, le=10)


class StripMetadata(CamelModel):
    total_scenes: int
    average_complexity: float
    primary_locations: list[str] = Field(default_factory=list)


class StripCreatorOutput(StageOutput):
    strips: list[Strip] = Field(default_factory=list)
    metadata: StripMetadata


# === block_optimizer ===


class ShootingBlock(CamelModel):
    block_id: str
    scenes: list[str] = Field(default_factory=list)
    location: str
    estimated_duration: float


class BlockOptimization(CamelModel):
    total_days: float
    efficiency: float = Field(ge=0.0, le=1.0)
    cost_savings: str


class BlockOptimizerOutput(StageOutput):
    day_blocks: list[ShootingBlock] = Field(default_factory=list)
    night_blocks: list[ShootingBlock] = Field(default_factory=list)
    optimization: BlockOptimization


# === location_manager ===


class LocationGroup(CamelModel):
    group_id: str
    location: str
    scenes: list[str] = Field(default_factory=list)
    travel_time: float
    complexity: Level


class TravelPlan(CamelModel):
    total_locations: int
    total_travel_time: float
    recommended_sequence: list[str] = Field(default_factory=list)


class LocationManagerOutput(StageOutput):
    location_groups: list[LocationGroup] = Field(default_factory=list)
    travel_plan: TravelPlan


# === move_calculator ===


class CompanyMove(CamelModel):
    move_id: str
    from_location: str
    to_location: str
    equipment: list[str] = Field(default_factory=list)
    duration: float
    cost: str


class MoveSummary(CamelModel):
    total_moves: int
    total_move_time: float
    total_cost: str
    efficiency: float = Field(ge=0.0, le=1.0)


class MoveCalculatorOutput(StageOutput):
    moves: list[CompanyMove] = Field(default_factory=list)
    summary: MoveSummary


# === compliance_validator ===


class ComplianceReport(CamelModel):
    sag_compliance: bool
    crew_compliance: bool
    safety_compliance: bool
    overtime_risk: Level

    @property
    def fully_compliant(self) -> bool:
        return self.sag_compliance and self.crew_compliance and self.safety_compliance


class ComplianceViolation(CamelModel):
    type: str
    description: str
    severity: Literal["WARNING", "VIOLATION"]
    recommendation: str


class ComplianceValidatorOutput(StageOutput):
    compliance_report: ComplianceReport
    violations: list[ComplianceViolation] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# === stripboard_genius ===


class ScheduledDay(CamelModel):
    day: int
    location: str
    scenes: list[str] = Field(default_factory=list)
    time_of_day: str
    estimated_hours: float


class ScheduleBudget(CamelModel):
    estimated: str
    breakdown: dict[str, str] = Field(default_factory=dict)


class FinalSchedule(CamelModel):
    total_days: float
    shooting_blocks: list[ScheduledDay] = Field(default_factory=list)
    budget: ScheduleBudget


class ScheduleSummary(CamelModel):
    efficiency: float = Field(ge=0.0, le=1.0)
    risk_level: Level
    recommendations: list[str] = Field(default_factory=list)
    key_metrics: dict[str, str | float] = Field(default_factory=dict)


class StripboardGeniusOutput(StageOutput):
    final_schedule: FinalSchedule
    summary: ScheduleSummary


# === Final artifact ===


class ShootingSchedule(FinalArtifact):
    total_days: float = 0
    shooting_blocks: list[ScheduledDay] = Field(default_factory=list)
    efficiency: float = 0
    risk_level: Level = "MEDIUM"
    estimated_budget: str = "TBD"
    compliance_score: int = 0
    location_groups: int = 0
    company_moves: int = 0
    recommendations: list[str] = Field(default_factory=list)


def compliance_score(report: ComplianceReport | None) -> int:
    """85 when SAG, crew and safety compliance all hold, 60 otherwise, 0 when unknown."""
    if report is None:
        return 0
    return COMPLIANT_SCORE if report.fully_compliant else NON_COMPLIANT_SCORE


def aggregate_schedule(outputs: StageOutputs, confidence: float) -> ShootingSchedule:
    blocks = outputs.get("block_optimizer", BlockOptimizerOutput)
    locations = outputs.get("location_manager", LocationManagerOutput)
    moves = outputs.get("move_calculator", MoveCalculatorOutput)
    compliance = outputs.get("compliance_validator", ComplianceValidatorOutput)
    genius = outputs.get("stripboard_genius", StripboardGeniusOutput)

    return ShootingSchedule(
        total_days=pick(
            0,
            genius.final_schedule.total_days if genius else None,
            blocks.optimization.total_days if blocks else None,
        ),
        shooting_blocks=pick([], genius.final_schedule.shooting_blocks if genius else None),
        efficiency=pick(
            0,
            genius.summary.efficiency if genius else None,
            blocks.optimization.efficiency if blocks else None,
        ),
        risk_level=pick("MEDIUM", genius.summary.risk_level if genius else None),
        estimated_budget=pick("TBD", genius.final_schedule.budget.estimated if genius else None),
        compliance_score=compliance_score(compliance.compliance_report if compliance else None),
        location_groups=len(locations.location_groups) if locations else 0,
        company_moves=len(moves.moves) if moves else 0,
        recommendations=pick(
            [],
            genius.summary.recommendations if genius else None,
            compliance.recommendations if compliance else None,
        ),
        confidence=confidence,
    )


SCHEDULE_PIPELINE = PipelineDefinition(
    name="schedule",
    description="Shooting schedule analysis: strips, blocks, locations, moves, compliance",
    stages=(
        StageDefinition(
            "strip_creator",
            StripCreatorOutput,
            "strip_creator.txt",
            description="Create color-coded stripboard strips with complexity ratings",
        ),
        StageDefinition(
            "block_optimizer",
            BlockOptimizerOutput,
            "block_optimizer.txt",
            dependencies=("strip_creator",),
            description="Group scenes into day and night shooting blocks",
        ),
        StageDefinition(
            "location_manager",
            LocationManagerOutput,
            "location_manager.txt",
            dependencies=("strip_creator",),
            description="Group scenes by location and plan travel",
        ),
        StageDefinition(
            "move_calculator",
            MoveCalculatorOutput,
            "move_calculator.txt",
            dependencies=("location_manager",),
            description="Plan company moves with time and cost estimates",
        ),
        StageDefinition(
            "compliance_validator",
            ComplianceValidatorOutput,
            "compliance_validator.txt",
            dependencies=("strip_creator",),
            description="Check union, crew and safety compliance",
        ),
        StageDefinition(
            "stripboard_genius",
            StripboardGeniusOutput,
            "stripboard_genius.txt",
            dependencies=(
                "strip_creator",
                "block_optimizer",
                "location_manager",
                "move_calculator",
                "compliance_validator",
            ),
            description="Synthesize the final shooting schedule",
        ),
    ),
    aggregate=aggregate_schedule,
    artifact_schema=ShootingSchedule,
)
