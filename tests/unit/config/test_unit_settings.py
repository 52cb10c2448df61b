# tests/unit/config/test_unit_settings.py — v1
"""Tests for config/settings.py — defaults, validators, scene caps."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from prodanalyzer.config.pipelines import PIPELINE_REGISTRY, PIPELINE_STAGE_MAP
from prodanalyzer.config.settings import ConfigurationError, Settings, load_settings


def _settings(**kw) -> Settings:
    return Settings(_env_file=None, **kw)


class TestDefaults:
    def test_llm_defaults(self):
        s = _settings()
        assert s.llm_default_provider == "google"
        assert s.llm_default_model == "gemini-2.5-flash"
        assert s.llm_temperature == 0.7
        assert s.llm_max_tokens == 4000

    def test_execution_defaults(self):
        s = _settings()
        assert s.stage_timeout_s == 600.0
        assert s.run_deadline_s is None
        assert s.fan_out_independent_stages is False

    def test_scene_caps(self):
        s = _settings()
        assert s.scene_cap_for("script") == 20
        assert s.scene_cap_for("schedule") == 20
        assert s.scene_cap_for("budget") == 10

    def test_every_stage_has_routing_field(self):
        s = _settings()
        for stages in PIPELINE_STAGE_MAP.values():
            for stage in stages:
                assert getattr(s, f"llm_{stage}") == ""


class TestEnvironment:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LLM_STRIP_CREATOR", "openai:gpt-4o")
        monkeypatch.setenv("SCHEDULE_SCENE_CAP", "5")
        s = _settings()
        assert s.llm_strip_creator == "openai:gpt-4o"
        assert s.schedule_scene_cap == 5


class TestValidators:
    def test_negative_scene_cap(self):
        with pytest.raises(ValidationError):
            _settings(budget_scene_cap=-1)

    def test_zero_stage_timeout(self):
        with pytest.raises(ValidationError):
            _settings(stage_timeout_s=0)

    def test_bad_deadline(self):
        with pytest.raises(ConfigurationError, match="RUN_DEADLINE_S"):
            _settings(run_deadline_s=-5)

    def test_bad_rotation(self):
        with pytest.raises(ConfigurationError, match="LOG_ROTATION"):
            _settings(log_rotation="huge")

    def test_unknown_pipeline_cap(self):
        with pytest.raises(ConfigurationError):
            _settings().scene_cap_for("casting")


class TestLoadSettings:
    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        s = load_settings(llm_temperature=0.2)
        assert s.llm_temperature == 0.2


class TestPipelineConfig:
    def test_registry_paths_match_stage_map(self):
        assert len(PIPELINE_REGISTRY) == len(PIPELINE_STAGE_MAP)
        for name in PIPELINE_STAGE_MAP:
            assert any(path.endswith(f"{name.upper()}_PIPELINE") for path in PIPELINE_REGISTRY)
