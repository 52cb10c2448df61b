# src/pipeline/plugin_kit/base_stage.py — v1
"""Stage and pipeline definitions consumed by the orchestrator.

A StageDefinition names its output schema, its prompt template and the
stages whose output it reads. A PipelineDefinition is an ordered list of
stages plus the aggregation function that builds the final artifact.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from prodanalyzer.pipeline.dag_builder import DAGError, ExecutionPlan, build_dag
from prodanalyzer.pipeline.plugin_kit.models import FinalArtifact, StageOutput

if TYPE_CHECKING:
    from prodanalyzer.pipeline.aggregator import StageOutputs
    from prodanalyzer.pipeline.context import PromptContext

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

AggregateFn = Callable[["StageOutputs", float], FinalArtifact]


class StageDefinition:
    """One schema-constrained generation step.

    Args:
        name: Unique stage identifier within its pipeline.
        output_schema: StageOutput subclass the generator must produce.
        prompt_file: Template file name under pipeline/prompts/.
        dependencies: Stages whose output this stage consumes.
        description: Human-readable summary, shown by the CLI.
        system_prompt: Optional system instruction for the generator.
    """

    def __init__(
        self,
        name: str,
        output_schema: type[StageOutput],
        prompt_file: str,
        *,
        dependencies: tuple[str, ...] = (),
        description: str = "",
        system_prompt: str | None = None,
    ) -> None:
        self.name = name
        self.output_schema = output_schema
        self.prompt_file = prompt_file
        self.dependencies = tuple(dependencies)
        self.description = description
        self.system_prompt = system_prompt
        self._prompt_template: str | None = None

    def __repr__(self) -> str:
        return f"StageDefinition({self.name!r}, deps={list(self.dependencies)})"

    @property
    def prompt_path(self) -> Path:
        return PROMPTS_DIR / self.prompt_file

    def _load_prompt(self) -> str:
        if self._prompt_template is None:
            self._prompt_template = self.prompt_path.read_text(encoding="utf-8")
        return self._prompt_template

    def build_prompt(self, context: PromptContext) -> str:
        """Render the template with the accumulated context."""
        return self._load_prompt().format_map(context.variables())


@dataclass(frozen=True)
class PipelineDefinition:
    """Ordered stages plus the per-pipeline aggregation rule.

    Raises:
        DAGError: On duplicate stage names, unknown dependencies, cycles, or
            a dependency declared after the stage that needs it.
    """

    name: str
    stages: tuple[StageDefinition, ...]
    aggregate: AggregateFn
    artifact_schema: type[FinalArtifact]
    description: str = ""
    plan: ExecutionPlan = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        names = [s.name for s in self.stages]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise DAGError(f"Pipeline '{self.name}' declares duplicate stages: {duplicates}")

        position = {n: i for i, n in enumerate(names)}
        for stage in self.stages:
            for dep in stage.dependencies:
                if dep in position and position[dep] >= position[stage.name]:
                    raise DAGError(
                        f"Stage '{stage.name}' depends on '{dep}', declared after it"
                    )

        plan = build_dag({s.name: list(s.dependencies) for s in self.stages})
        object.__setattr__(self, "plan", plan)

    @property
    def stage_names(self) -> list[str]:
        return [s.name for s in self.stages]

    def get_stage(self, name: str) -> StageDefinition:
        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(name)
