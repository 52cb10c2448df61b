# tests/conftest.py — v1
"""Shared test fixtures for all unit tests.

Provides sample breakdown documents, a scripted structured generator and
valid stage outputs for every built-in pipeline. No network access.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from prodanalyzer.config.settings import Settings
from prodanalyzer.llm.models import LLMResponse
from prodanalyzer.llm.structured import StructuredOutputError
from prodanalyzer.pipeline.definitions.budget import (
    BudgetFinalizerOutput,
    CostDatabaseOutput,
    DepartmentEstimatesOutput,
    PreliminaryBudgetOutput,
)
from prodanalyzer.pipeline.definitions.schedule import (
    BlockOptimizerOutput,
    ComplianceValidatorOutput,
    LocationManagerOutput,
    MoveCalculatorOutput,
    StripboardGeniusOutput,
    StripCreatorOutput,
)
from prodanalyzer.pipeline.definitions.script import (
    CategorizationOutput,
    ElementDetectionOutput,
    ReportGeneratorOutput,
    ScriptParserOutput,
)

Response = BaseModel | BaseException | Callable[[type[BaseModel], str], Awaitable[BaseModel]]


class ScriptedGenerator:
    """StructuredGenerator returning a scripted response per stage.

    A response is a model instance, an exception to raise, or an async
    callable(schema, prompt). Stages without a script raise
    StructuredOutputError, like a model reply that fails validation.
    """

    def __init__(self, responses: dict[str, Response] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.prompts: dict[str, str] = {}
        self.systems: dict[str, str | None] = {}

    async def generate(self, schema, prompt, *, stage, system=None):
        self.calls.append(stage)
        self.prompts[stage] = prompt
        self.systems[stage] = system
        response = self.responses.get(stage)
        if response is None:
            raise StructuredOutputError(f"Response does not match {schema.__name__}")
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, BaseModel):
            return response
        return await response(schema, prompt)


def hanging(delay: float = 10.0) -> Callable[[type[BaseModel], str], Awaitable[BaseModel]]:
    """Scripted response that never returns within a test's timeout."""

    async def _respond(schema: type[BaseModel], prompt: str) -> BaseModel:
        await asyncio.sleep(delay)
        raise AssertionError("hanging response was not abandoned")

    return _respond


# === FIXTURES: Settings ===


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)


# === FIXTURES: Source documents ===


@pytest.fixture
def breakdown_payload() -> dict[str, Any]:
    """Script breakdown document with three scenes."""
    return {
        "success": True,
        "data": {
            "scriptName": "Iron Harbor",
            "genre": "Action",
            "type": "Feature Film",
            "budgetLevel": "High",
            "totalScenes": 3,
            "characters": ["MAYA", "DUKE"],
            "locations": ["Harbor", "Warehouse"],
            "props": ["briefcase"],
            "vehicles": ["truck"],
            "scenes": [
                {
                    "sceneNumber": 1,
                    "Scene_Names": "EXT. HARBOR - NIGHT",
                    "Scene_action": "Maya chases Duke across the docks. A truck explodes in a fire.",
                    "Scene_Characters": ["MAYA", "DUKE"],
                    "location": "Harbor",
                },
                {
                    "sceneNumber": 2,
                    "Scene_Names": "INT. WAREHOUSE - DAY",
                    "Scene_action": "Duke opens a briefcase and makes a phone call.",
                    "Scene_Characters": ["DUKE"],
                    "location": "Warehouse",
                    "timeOfDay": "DAY",
                },
                {
                    "sceneNumber": 3,
                    "Scene_Names": "INT. WAREHOUSE - DAY",
                    "Contents": "A quiet conversation.",
                },
            ],
        },
    }


@pytest.fixture
def empty_payload() -> dict[str, Any]:
    return {"success": True, "data": {"scriptName": "Blank", "scenes": []}}


@pytest.fixture
def shot_list_payload() -> dict[str, Any]:
    return {
        "success": True,
        "data": {
            "projectName": "Iron Harbor",
            "totalShots": 2,
            "shots": [
                {"shotNumber": "1A", "sceneNumber": 1, "shotType": "Wide", "complexity": "HIGH", "setupTime": 45},
                {"shotNumber": "1B", "sceneNumber": 1, "shotType": "Close-up", "complexity": "LOW"},
            ],
            "coverage": {"masterShots": 1, "closeUps": 1},
        },
    }


@pytest.fixture
def sequence_list_payload() -> dict[str, Any]:
    return {
        "success": True,
        "data": {
            "sequences": [
                {
                    "sequenceNumber": "S1",
                    "name": "Dock Chase",
                    "location": "Harbor",
                    "complexity": "HIGH",
                    "dependencies": ["night permit"],
                },
            ],
            "continuity": {
                "characterArcs": [{"character": "MAYA", "wardrobe": ["wet jacket"], "makeup": ["cut"]}]
            },
        },
    }


@pytest.fixture
def assets_payload() -> dict[str, Any]:
    return {
        "success": True,
        "data": {
            "projectName": "Iron Harbor",
            "totalAssets": 2,
            "totalBudget": "$4M",
            "categories": {
                "props": [{"name": "Briefcase", "category": "props", "status": "owned"}],
                "vehicles": [{"name": "Box truck", "category": "vehicles", "status": "rented"}],
            },
        },
    }


# === FIXTURES: Stage outputs ===


@pytest.fixture
def script_outputs() -> dict[str, BaseModel]:
    """Valid output for every script pipeline stage."""
    return {
        "script_parser": ScriptParserOutput.model_validate({
            "script": {
                "title": "Iron Harbor", "genre": "Action", "type": "Feature",
                "complexity": "HIGH", "totalScenes": 3, "estimatedPages": 4.5,
                "logline": "A courier races a smuggler across a burning port.",
            },
            "elements": {
                "cast": [{"name": "MAYA", "role": "Courier", "importance": "LEAD", "scenes": 1}],
                "props": [{"name": "Briefcase", "category": "Hand", "complexity": "SIMPLE", "department": "Props"}],
                "locations": [{"name": "Harbor", "type": "EXTERIOR", "complexity": "COMPLEX", "cost": "$40k"}],
                "vehicles": [{"name": "Truck", "type": "Box", "purpose": "Explosion", "complexity": "COMPLEX"}],
            },
            "production": {
                "estimatedBudget": "$5M", "shootingDays": 12, "prepWeeks": 6,
                "crewSize": 45, "complexity": "HIGH",
            },
            "confidence": 0.7,
        }),
        "element_detection": ElementDetectionOutput.model_validate({
            "elementBreakdown": {
                "totalElements": 4,
                "cast": [{"name": "MAYA", "category": "Lead", "colorCode": "RED", "sceneCount": 1, "importance": "LEAD"}],
                "categoryCounts": {"cast": 2, "props": 1, "vehicles": 1},
            },
            "departmentBreakdown": [
                {"department": "Props", "elements": ["Briefcase"], "complexity": "LOW", "budget": "$2k"},
            ],
            "confidence": 0.6,
        }),
        "categorization": CategorizationOutput.model_validate({
            "departmentAnalysis": [
                {"name": "Stunts", "elements": ["Dock chase"], "budget": "$300k", "prepTime": "4 weeks", "complexity": "HIGH"},
            ],
            "timeline": {
                "preProduction": "8 weeks", "production": "3 weeks",
                "postProduction": "16 weeks", "totalDuration": "27 weeks",
            },
            "riskAssessment": {"high": ["Pyrotechnics"], "medium": [], "low": []},
            "budget": {"total": "$6M", "breakdown": {"Stunts": "$300k"}, "contingency": "$600k"},
            "confidence": 0.8,
        }),
        "report_generator": ReportGeneratorOutput.model_validate({
            "executiveSummary": {
                "projectOverview": "Mid-budget action feature.", "keyFindings": "Stunt heavy.",
                "budgetHighlights": "Pyrotechnics drive cost.", "recommendations": "Lock the harbor early.",
            },
            "schedule": {"phases": [{"phase": "Prep", "duration": "8 weeks"}], "bufferTime": "1 week"},
            "recommendations": ["Secure harbor permits"],
            "successFactors": ["Experienced stunt team"],
            "confidence": 0.75,
        }),
    }


@pytest.fixture
def schedule_outputs() -> dict[str, BaseModel]:
    """Valid output for every schedule pipeline stage."""
    return {
        "strip_creator": StripCreatorOutput.model_validate({
            "strips": [{"sceneId": "sc_001", "stripColor": "blue", "department": "Stunts", "complexity": 8}],
            "metadata": {"totalScenes": 3, "averageComplexity": 5.0, "primaryLocations": ["Harbor"]},
            "confidence": 0.5,
        }),
        "block_optimizer": BlockOptimizerOutput.model_validate({
            "dayBlocks": [{"blockId": "D1", "scenes": ["sc_002"], "location": "Warehouse", "estimatedDuration": 6}],
            "nightBlocks": [{"blockId": "N1", "scenes": ["sc_001"], "location": "Harbor", "estimatedDuration": 10}],
            "optimization": {"totalDays": 9, "efficiency": 0.7, "costSavings": "$20k"},
            "confidence": 0.6,
        }),
        "location_manager": LocationManagerOutput.model_validate({
            "locationGroups": [
                {"groupId": "G1", "location": "Harbor", "scenes": ["sc_001"], "travelTime": 30, "complexity": "HIGH"},
                {"groupId": "G2", "location": "Warehouse", "scenes": ["sc_002", "sc_003"], "travelTime": 15, "complexity": "LOW"},
            ],
            "travelPlan": {"totalLocations": 2, "totalTravelTime": 45, "recommendedSequence": ["Warehouse", "Harbor"]},
            "confidence": 0.65,
        }),
        "move_calculator": MoveCalculatorOutput.model_validate({
            "moves": [{
                "moveId": "M1", "fromLocation": "Warehouse", "toLocation": "Harbor",
                "equipment": ["crane"], "duration": 3, "cost": "$5k",
            }],
            "summary": {"totalMoves": 1, "totalMoveTime": 3, "totalCost": "$5k", "efficiency": 0.8},
            "confidence": 0.55,
        }),
        "compliance_validator": ComplianceValidatorOutput.model_validate({
            "complianceReport": {
                "sagCompliance": True, "crewCompliance": True,
                "safetyCompliance": True, "overtimeRisk": "MEDIUM",
            },
            "recommendations": ["Schedule turnaround after night shoot"],
            "confidence": 0.9,
        }),
        "stripboard_genius": StripboardGeniusOutput.model_validate({
            "finalSchedule": {
                "totalDays": 12,
                "shootingBlocks": [
                    {"day": 1, "location": "Warehouse", "scenes": ["sc_002", "sc_003"], "timeOfDay": "DAY", "estimatedHours": 10},
                ],
                "budget": {"estimated": "$1.2M", "breakdown": {"crew": "$600k"}},
            },
            "summary": {
                "efficiency": 0.85, "riskLevel": "HIGH",
                "recommendations": ["Shoot the warehouse first"], "keyMetrics": {"moves": 1},
            },
            "confidence": 0.8,
        }),
    }


@pytest.fixture
def budget_outputs() -> dict[str, BaseModel]:
    """Valid output for every budget pipeline stage."""
    top_sheet = {
        "totalBudget": "$5M", "atlBudget": "$1.5M", "btlBudget": "$3M",
        "contingency": "$500k", "atlPercentage": 30, "btlPercentage": 60,
    }
    return {
        "cost_database": CostDatabaseOutput.model_validate({
            "unionRates": {
                "sagAftra": {"dailyRate": "$1,082", "weeklyRate": "$3,756", "pensionHealth": "21%"},
                "iatse": {"baseRate": "$45/hr", "overtimeMultiplier": 1.5, "fringePercentage": 30},
                "dga": {"directorWeekly": "$20k", "assistantDaily": "$1.1k"},
            },
            "equipmentCosts": {"camera": [{"item": "ARRI Alexa", "dailyRate": "$1k", "weeklyRate": "$4k"}]},
            "locationCosts": [{"location": "Harbor", "permitFee": "$2k", "insuranceRate": "2%", "securityCost": "$1k"}],
            "confidence": 0.6,
        }),
        "preliminary_budget": PreliminaryBudgetOutput.model_validate({
            "topSheet": top_sheet,
            "atlBreakdown": {"cast": "$800k", "director": "$300k", "producer": "$250k", "writer": "$150k"},
            "btlBreakdown": {
                "crew": "$1.2M", "equipment": "$600k", "locations": "$400k",
                "postProduction": "$500k", "other": "$300k",
            },
            "budgetTier": "LOW",
            "investorSummary": "Lean action feature.",
            "confidence": 0.7,
        }),
        "department_estimates": DepartmentEstimatesOutput.model_validate({
            "departments": [
                {"department": "Camera", "estimate": "$600k"},
                {"department": "Stunts", "estimate": "$300k"},
            ],
            "totalBtl": "$3.1M",
            "confidence": 0.65,
        }),
        "budget_finalizer": BudgetFinalizerOutput.model_validate({
            "topSheet": {**top_sheet, "totalBudget": "$5.4M"},
            "departmentBreakdown": {"Camera": "$620k"},
            "budgetTier": "BASIC",
            "investorSummary": "Reconciled action feature budget.",
            "confidence": 0.85,
        }),
    }


# === FIXTURES: Mock LLM ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response."""
    return LLMResponse(
        content='{"confidence": 0.5}',
        input_tokens=100,
        output_tokens=50,
        model="gemini-2.5-flash",
        provider="google",
        latency_ms=500,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete.return_value = mock_llm_response
    client.provider_name = "google"
    client.model_name = "gemini-2.5-flash"
    return client


# === FIXTURES: Generators ===


@pytest.fixture
def make_generator() -> type[ScriptedGenerator]:
    """ScriptedGenerator class, for building per-test fakes."""
    return ScriptedGenerator


@pytest.fixture
def hanging_response() -> Callable[..., Callable[[type[BaseModel], str], Awaitable[BaseModel]]]:
    return hanging
