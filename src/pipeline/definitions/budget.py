# src/pipeline/definitions/budget.py — v1
"""Budget analysis pipeline: rates, top sheet, department estimates, final budget.

Stages:
  1. cost_database         union rates, equipment and location costs
  2. preliminary_budget    ATL/BTL top sheet and budget tier
  3. department_estimates  per-department estimates
  4. budget_finalizer      reconciled final budget
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from prodanalyzer.pipeline.aggregator import StageOutputs, pick
from prodanalyzer.pipeline.plugin_kit.base_stage import PipelineDefinition, StageDefinition
from prodanalyzer.pipeline.plugin_kit.models import CamelModel, FinalArtifact, StageOutput

BudgetTier = Literal["ULTRA_LOW", "LOW", "BASIC", "HIGH"]

# === cost_database ===


class SagAftraRates(CamelModel):
    daily_rate: str
    weekly_rate: str
    pension_health: str


class IatseRates(CamelModel):
    base_rate: str
    overtime_multiplier: float
    fringe_percentage: float


class DgaRates(CamelModel):
    director_weekly: str
    assistant_daily: str


class UnionRates(CamelModel):
    sag_aftra: SagAftraRates
    iatse: IatseRates
    dga: DgaRates


class RentalItem(CamelModel):
    item: str
    daily_rate: str
    weekly_rate: str


class EquipmentCosts(CamelModel):
    camera: list[RentalItem] = Field(default_factory=list)
    lighting: list[RentalItem] = Field(default_factory=list)
    grip: list[RentalItem] = Field(default_factory=list)


class LocationCost(CamelModel):
    location: str
    permit_fee: str
    insurance_rate: str
    security_cost: str


class CostDatabaseOutput(StageOutput):
    union_rates: UnionRates
    equipment_costs: EquipmentCosts
    location_costs: list[LocationCost] = Field(default_factory=list)


# === preliminary_budget ===


class TopSheet(CamelModel):
    total_budget: str
    atl_budget: str
    btl_budget: str
    contingency: str
    atl_percentage: float
    btl_percentage: float


class AtlBreakdown(CamelModel):
    cast: str
    director: str
    producer: str
    writer: str


class BtlBreakdown(CamelModel):
    crew: str
    equipment: str
    locations: str
    post_production: str
    other: str


class PreliminaryBudgetOutput(StageOutput):
    top_sheet: TopSheet
    atl_breakdown: AtlBreakdown
    btl_breakdown: BtlBreakdown
    budget_tier: BudgetTier
    investor_summary: str


# === department_estimates ===


class DepartmentEstimate(CamelModel):
    department: str
    estimate: str
    line_items: list[str] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)


class DepartmentEstimatesOutput(StageOutput):
    departments: list[DepartmentEstimate] = Field(default_factory=list)
    total_btl: str


# === budget_finalizer ===


class BudgetFinalizerOutput(StageOutput):
    top_sheet: TopSheet
    department_breakdown: dict[str, str] = Field(default_factory=dict)
    budget_tier: BudgetTier
    investor_summary: str
    cost_risks: list[str] = Field(default_factory=list)


# === Final artifact ===


class BudgetSummary(FinalArtifact):
    total_budget: str = "TBD"
    atl_budget: str = "TBD"
    btl_budget: str = "TBD"
    contingency: str = "TBD"
    budget_tier: BudgetTier = "BASIC"
    department_breakdown: dict[str, str] = Field(default_factory=dict)
    investor_summary: str = ""


def aggregate_budget(outputs: StageOutputs, confidence: float) -> BudgetSummary:
    preliminary = outputs.get("preliminary_budget", PreliminaryBudgetOutput)
    departments = outputs.get("department_estimates", DepartmentEstimatesOutput)
    final = outputs.get("budget_finalizer", BudgetFinalizerOutput)

    final_sheet = final.top_sheet if final else None
    prelim_sheet = preliminary.top_sheet if preliminary else None

    return BudgetSummary(
        total_budget=pick(
            "TBD",
            final_sheet.total_budget if final_sheet else None,
            prelim_sheet.total_budget if prelim_sheet else None,
        ),
        atl_budget=pick(
            "TBD",
            final_sheet.atl_budget if final_sheet else None,
            prelim_sheet.atl_budget if prelim_sheet else None,
        ),
        btl_budget=pick(
            "TBD",
            final_sheet.btl_budget if final_sheet else None,
            prelim_sheet.btl_budget if prelim_sheet else None,
        ),
        contingency=pick(
            "TBD",
            final_sheet.contingency if final_sheet else None,
            prelim_sheet.contingency if prelim_sheet else None,
        ),
        budget_tier=pick(
            "BASIC",
            final.budget_tier if final else None,
            preliminary.budget_tier if preliminary else None,
        ),
        department_breakdown=pick(
            {},
            final.department_breakdown if final else None,
            {d.department: d.estimate for d in departments.departments} if departments else None,
            preliminary.btl_breakdown.model_dump(by_alias=True) if preliminary else None,
        ),
        investor_summary=pick(
            "",
            final.investor_summary if final else None,
            preliminary.investor_summary if preliminary else None,
        ),
        confidence=confidence,
    )


BUDGET_PIPELINE = PipelineDefinition(
    name="budget",
    description="Production budget analysis: rates, top sheet, departments, final budget",
    stages=(
        StageDefinition(
            "cost_database",
            CostDatabaseOutput,
            "cost_database.txt",
            description="Industry union rates, equipment rentals and location costs",
        ),
        StageDefinition(
            "preliminary_budget",
            PreliminaryBudgetOutput,
            "preliminary_budget.txt",
            dependencies=("cost_database",),
            description="Investor-ready ATL/BTL top sheet and budget tier",
        ),
        StageDefinition(
            "department_estimates",
            DepartmentEstimatesOutput,
            "department_estimates.txt",
            dependencies=("cost_database",),
            description="Per-department cost estimates",
        ),
        StageDefinition(
            "budget_finalizer",
            BudgetFinalizerOutput,
            "budget_finalizer.txt",
            dependencies=("cost_database", "preliminary_budget", "department_estimates"),
            description="Reconcile estimates into the final budget",
        ),
    ),
    aggregate=aggregate_budget,
    artifact_schema=BudgetSummary,
)
