# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for LLM routing, stage execution limits,
scene caps and logging. A Settings instance is passed explicitly into
every pipeline invocation; nothing here touches os.environ at run time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prodanalyzer.logging.logger import parse_size


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDERS ===
    llm_default_provider: str = "google"
    llm_default_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4000

    # Provider API keys
    google_api_key: str = ""
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # Per-pipeline LLM assignment
    llm_pipeline_script: str = ""
    llm_pipeline_schedule: str = ""
    llm_pipeline_budget: str = ""

    # Per-stage LLM assignment (highest priority)
    llm_script_parser: str = ""
    llm_element_detection: str = ""
    llm_categorization: str = ""
    llm_report_generator: str = ""
    llm_strip_creator: str = ""
    llm_block_optimizer: str = ""
    llm_location_manager: str = ""
    llm_move_calculator: str = ""
    llm_compliance_validator: str = ""
    llm_stripboard_genius: str = ""
    llm_cost_database: str = ""
    llm_preliminary_budget: str = ""
    llm_department_estimates: str = ""
    llm_budget_finalizer: str = ""

    # === Stage execution ===
    stage_timeout_s: float = 600.0
    run_deadline_s: float | None = None
    fan_out_independent_stages: bool = False

    # === Scene caps ===
    script_scene_cap: int = 20
    schedule_scene_cap: int = 20
    budget_scene_cap: int = 10

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("script_scene_cap", "schedule_scene_cap", "budget_scene_cap")
    @classmethod
    def validate_scene_cap(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("scene caps must be >= 0")
        return v

    @field_validator("stage_timeout_s")
    @classmethod
    def validate_stage_timeout(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("stage_timeout_s must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.run_deadline_s is not None and self.run_deadline_s <= 0:
            errors.append("RUN_DEADLINE_S must be > 0 when set")

        try:
            parse_size(self.log_rotation)
        except ValueError:
            errors.append(
                f"LOG_ROTATION must look like '10MB', got {self.log_rotation!r}"
            )

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    def scene_cap_for(self, pipeline: str) -> int:
        """Return the configured scene cap for a pipeline name."""
        cap = getattr(self, f"{pipeline}_scene_cap", None)
        if cap is None:
            raise ConfigurationError(f"No scene cap configured for pipeline {pipeline!r}")
        return cap


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-request config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
