# src/pipeline/definitions/script.py — v1
"""Script analysis pipeline: parse, detect elements, categorize, report.

Stages:
  1. script_parser       classification, elements, production requirements
  2. element_detection   color-coded element and department breakdown
  3. categorization      department analysis, timeline, risks, budget
  4. report_generator    executive summary, phased schedule, recommendations
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from prodanalyzer.core.models import Complexity, Level
from prodanalyzer.pipeline.aggregator import StageOutputs, pick
from prodanalyzer.pipeline.plugin_kit.base_stage import PipelineDefinition, StageDefinition
from prodanalyzer.pipeline.plugin_kit.models import CamelModel, FinalArtifact, StageOutput

# === script_parser ===


class ScriptClassification(CamelModel):
    title: str
    genre: str
    type: str
    complexity: Level
    total_scenes: int
    estimated_pages: float
    logline: str


class CastMember(CamelModel):
    name: str
    role: str
    importance: Literal["LEAD", "SUPPORTING", "BACKGROUND"]
    scenes: int


class PropItem(CamelModel):
    name: str
    category: str
    complexity: Complexity
    department: str


class LocationItem(CamelModel):
    name: str
    type: Literal["INTERIOR", "EXTERIOR", "STUDIO", "PRACTICAL"]
    complexity: Complexity
    cost: str


class VehicleItem(CamelModel):
    name: str
    type: str
    purpose: str
    complexity: Complexity


class ScriptElements(CamelModel):
    cast: list[CastMember] = Field(default_factory=list)
    props: list[PropItem] = Field(default_factory=list)
    locations: list[LocationItem] = Field(default_factory=list)
    vehicles: list[VehicleItem] = Field(default_factory=list)


class ProductionRequirements(CamelModel):
    estimated_budget: str
    shooting_days: float
    prep_weeks: float
    crew_size: int
    complexity: Level


class ScriptParserOutput(StageOutput):
    script: ScriptClassification
    elements: ScriptElements
    production: ProductionRequirements


# === element_detection ===


class DetectedCast(CamelModel):
    name: str
    category: str
    color_code: str
    scene_count: int
    importance: str


class DetectedProp(CamelModel):
    name: str
    category: str
    department: str
    complexity: str


class DetectedLocation(CamelModel):
    name: str
    type: str
    shooting_requirements: str


class DetectedVehicle(CamelModel):
    name: str
    type: str
    requirements: str


class ElementBreakdown(CamelModel):
    total_elements: int
    cast: list[DetectedCast] = Field(default_factory=list)
    props: list[DetectedProp] = Field(default_factory=list)
    locations: list[DetectedLocation] = Field(default_factory=list)
    vehicles: list[DetectedVehicle] = Field(default_factory=list)
    category_counts: dict[str, int] = Field(default_factory=dict)


class DepartmentElements(CamelModel):
    department: str
    elements: list[str] = Field(default_factory=list)
    complexity: Level
    budget: str
    special_requirements: list[str] = Field(default_factory=list)


class ElementDetectionOutput(StageOutput):
    element_breakdown: ElementBreakdown
    department_breakdown: list[DepartmentElements] = Field(default_factory=list)


# === categorization ===


class DepartmentAnalysis(CamelModel):
    name: str
    elements: list[str] = Field(default_factory=list)
    budget: str
    prep_time: str
    complexity: Level
    key_requirements: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)


class ProductionTimeline(CamelModel):
    pre_production: str
    production: str
    post_production: str
    total_duration: str


class RiskAssessment(CamelModel):
    high: list[str] = Field(default_factory=list)
    medium: list[str] = Field(default_factory=list)
    low: list[str] = Field(default_factory=list)


class CategorizedBudget(CamelModel):
    total: str
    breakdown: dict[str, str] = Field(default_factory=dict)
    contingency: str


class CategorizationOutput(StageOutput):
    department_analysis: list[DepartmentAnalysis] = Field(default_factory=list)
    timeline: ProductionTimeline
    risk_assessment: RiskAssessment
    budget: CategorizedBudget


# === report_generator ===


class ExecutiveSummary(CamelModel):
    project_overview: str
    key_findings: str
    budget_highlights: str
    recommendations: str


class SchedulePhase(CamelModel):
    phase: str
    duration: str
    key_milestones: list[str] = Field(default_factory=list)


class ReportSchedule(CamelModel):
    phases: list[SchedulePhase] = Field(default_factory=list)
    critical_path: list[str] = Field(default_factory=list)
    buffer_time: str


class ReportGeneratorOutput(StageOutput):
    executive_summary: ExecutiveSummary
    schedule: ReportSchedule
    recommendations: list[str] = Field(default_factory=list)
    success_factors: list[str] = Field(default_factory=list)


# === Final artifact ===


class DepartmentSummary(CamelModel):
    """Department row common to categorization and element detection."""

    name: str
    elements: list[str] = Field(default_factory=list)
    complexity: Level
    budget: str


class ScriptAnalysis(FinalArtifact):
    script_classification: ScriptClassification | None = None
    element_breakdown: ElementBreakdown | None = None
    production_requirements: ProductionRequirements | None = None
    department_breakdown: list[DepartmentSummary] = Field(default_factory=list)
    risk_assessment: RiskAssessment | None = None
    estimated_budget: str = "TBD"
    shooting_days: float = 0
    executive_summary: ExecutiveSummary | None = None
    recommendations: list[str] = Field(default_factory=list)


def aggregate_script(outputs: StageOutputs, confidence: float) -> ScriptAnalysis:
    parser = outputs.get("script_parser", ScriptParserOutput)
    elements = outputs.get("element_detection", ElementDetectionOutput)
    categories = outputs.get("categorization", CategorizationOutput)
    report = outputs.get("report_generator", ReportGeneratorOutput)

    return ScriptAnalysis(
        script_classification=parser.script if parser else None,
        element_breakdown=elements.element_breakdown if elements else None,
        production_requirements=parser.production if parser else None,
        department_breakdown=pick(
            [],
            [
                DepartmentSummary(
                    name=d.name, elements=d.elements, complexity=d.complexity, budget=d.budget
                )
                for d in categories.department_analysis
            ]
            if categories
            else None,
            [
                DepartmentSummary(
                    name=d.department, elements=d.elements, complexity=d.complexity, budget=d.budget
                )
                for d in elements.department_breakdown
            ]
            if elements
            else None,
        ),
        risk_assessment=categories.risk_assessment if categories else None,
        estimated_budget=pick(
            "TBD",
            categories.budget.total if categories else None,
            parser.production.estimated_budget if parser else None,
        ),
        shooting_days=pick(0, parser.production.shooting_days if parser else None),
        executive_summary=report.executive_summary if report else None,
        recommendations=pick([], report.recommendations if report else None),
        confidence=confidence,
    )


SCRIPT_PIPELINE = PipelineDefinition(
    name="script",
    description="Script breakdown analysis: elements, departments, risks and report",
    stages=(
        StageDefinition(
            "script_parser",
            ScriptParserOutput,
            "script_parser.txt",
            description="Classify the script and estimate production requirements",
        ),
        StageDefinition(
            "element_detection",
            ElementDetectionOutput,
            "element_detection.txt",
            dependencies=("script_parser",),
            description="Detect and color-code production elements by department",
        ),
        StageDefinition(
            "categorization",
            CategorizationOutput,
            "categorization.txt",
            dependencies=("script_parser",),
            description="Department analysis, timeline, risk assessment and budget",
        ),
        StageDefinition(
            "report_generator",
            ReportGeneratorOutput,
            "report_generator.txt",
            dependencies=("script_parser", "element_detection", "categorization"),
            description="Executive report with schedule phases and recommendations",
        ),
    ),
    aggregate=aggregate_script,
    artifact_schema=ScriptAnalysis,
)
