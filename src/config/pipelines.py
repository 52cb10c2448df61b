# src/config/pipelines.py — v1
"""Declarative pipeline registry configuration.

Lists the pipeline definitions the registry loads by dotted path, and
the pipeline-to-stage mapping used for LLM routing.
"""

from __future__ import annotations

# Fully qualified paths for dynamic import by pipeline/registry.py.
PIPELINE_REGISTRY: list[str] = [
    "prodanalyzer.pipeline.definitions.script.SCRIPT_PIPELINE",
    "prodanalyzer.pipeline.definitions.schedule.SCHEDULE_PIPELINE",
    "prodanalyzer.pipeline.definitions.budget.BUDGET_PIPELINE",
]

# Pipeline-to-stage mapping for LLM routing. Order is declaration order.
PIPELINE_STAGE_MAP: dict[str, list[str]] = {
    "script": [
        "script_parser",
        "element_detection",
        "categorization",
        "report_generator",
    ],
    "schedule": [
        "strip_creator",
        "block_optimizer",
        "location_manager",
        "move_calculator",
        "compliance_validator",
        "stripboard_genius",
    ],
    "budget": [
        "cost_database",
        "preliminary_budget",
        "department_estimates",
        "budget_finalizer",
    ],
}
