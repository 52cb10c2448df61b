# tests/unit/pipeline/test_unit_registry.py — v1
"""Tests for pipeline/registry.py — definition loading and lookup."""

from __future__ import annotations

import pytest

from prodanalyzer.pipeline.definitions.budget import BUDGET_PIPELINE
from prodanalyzer.pipeline.registry import PipelineRegistry, RegistryError, default_registry


class TestPipelineRegistry:
    def test_load_all(self):
        registry = PipelineRegistry()
        registry.load_all()
        assert registry.names == ["script", "schedule", "budget"]

    def test_get(self):
        registry = PipelineRegistry()
        registry.register(BUDGET_PIPELINE)
        assert registry.get("budget") is BUDGET_PIPELINE
        assert registry.get("casting") is None

    def test_get_or_raise(self):
        with pytest.raises(RegistryError, match="casting"):
            PipelineRegistry().get_or_raise("casting")

    def test_bad_module(self):
        with pytest.raises(RegistryError, match="Cannot import"):
            PipelineRegistry().load_all(["prodanalyzer.nowhere.PIPELINE"])

    def test_missing_attribute(self):
        with pytest.raises(RegistryError, match="not found"):
            PipelineRegistry().load_all(["prodanalyzer.pipeline.definitions.budget.NOPE"])

    def test_not_a_definition(self):
        with pytest.raises(RegistryError, match="not a PipelineDefinition"):
            PipelineRegistry().load_all(["prodanalyzer.pipeline.definitions.budget.BudgetSummary"])

    def test_invalid_path(self):
        with pytest.raises(RegistryError, match="Invalid"):
            PipelineRegistry().load_all(["nodots"])

    def test_default_registry_cached(self):
        assert default_registry() is default_registry()
