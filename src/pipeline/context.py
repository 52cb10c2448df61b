# src/pipeline/context.py — v1
"""Prompt context accumulated across the stages of one run.

Every prompt sees the normalized scene summary plus, for each stage
attempted so far, either that stage's data or an explicit statement that
it failed. A failed upstream stage is never silently left out.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from prodanalyzer.core.models import (
    AssetItem,
    AssetsInventory,
    NormalizedScene,
    ScriptInfo,
    SequenceList,
    ShotList,
)
from prodanalyzer.pipeline.plugin_kit.models import StageResult

NO_SCENE_DATA = (
    "No scene data available: the source document contains no scenes. "
    "Base the analysis only on the project details above and say so."
)
NO_UPSTREAM_DATA = "No earlier stage results: this is the first stage of the pipeline."
FAILED_STAGE_MARKER = (
    "Stage '{name}' failed ({error}); no data is available from it. "
    "Do not assume or invent its results."
)
NO_SHOT_DATA = "No shot data provided."
NO_SEQUENCE_DATA = "No sequence data provided."
NO_ASSETS_DATA = "No assets data provided."

_SAMPLE_SHOTS = 5
_SAMPLE_SEQUENCES = 3


def render_scenes(scenes: Sequence[NormalizedScene]) -> str:
    if not scenes:
        return NO_SCENE_DATA
    return json.dumps(
        [s.model_dump(mode="json") for s in scenes], indent=2, ensure_ascii=False
    )


def render_shot_list(shot_list: ShotList | None) -> str:
    if shot_list is None:
        return NO_SHOT_DATA
    data = shot_list.data
    shots = data.shots
    lines = [
        f"Total shots: {data.total_shots if data.total_shots is not None else len(shots)}",
        "Sample shots: "
        + (
            ", ".join(
                f"{s.shot_number}: {s.shot_type or 'shot'} ({s.complexity})"
                for s in shots[:_SAMPLE_SHOTS]
            )
            or "None specified"
        ),
        f"Setup time: {sum(s.setup_time or 30 for s in shots):g} minutes additional setup",
    ]
    if data.coverage is not None:
        c = data.coverage
        lines.append(
            f"Coverage: {c.master_shots} masters, {c.medium_shots} mediums, "
            f"{c.close_ups} close-ups, {c.cutaways} cutaways, {c.inserts} inserts"
        )
    if data.equipment is not None:
        eq = data.equipment
        lines.append(
            "Equipment: "
            + json.dumps(eq.model_dump(mode="json", by_alias=True), ensure_ascii=False)
        )
    return "\n".join(lines)


def render_sequence_list(sequence_list: SequenceList | None) -> str:
    if sequence_list is None:
        return NO_SEQUENCE_DATA
    data = sequence_list.data
    sequences = data.sequences
    lines = [
        "Total sequences: "
        f"{data.total_sequences if data.total_sequences is not None else len(sequences)}",
        "Sample sequences: "
        + (
            ", ".join(
                f"{s.sequence_number}: {s.name or 'sequence'} ({s.complexity})"
                for s in sequences[:_SAMPLE_SEQUENCES]
            )
            or "None specified"
        ),
    ]
    dependencies = [
        f"{s.location or s.name}: depends on {', '.join(s.dependencies)}"
        for s in sequences
        if s.dependencies
    ]
    lines.append("Location dependencies: " + (" | ".join(dependencies) or "none"))
    if data.continuity is not None:
        items = sum(len(a.wardrobe) + len(a.makeup) for a in data.continuity.character_arcs)
        lines.append(f"Wardrobe/makeup changes: {items} continuity items")
    if data.transitions is not None:
        t = data.transitions
        lines.append(
            f"Transitions: {t.cuts} cuts, {t.fades} fades, {t.dissolves} dissolves, {t.other} other"
        )
    return "\n".join(lines)


def _names(items: list[AssetItem], detail: str | None = None) -> str:
    if not items:
        return "None specified"
    if detail is None:
        return ", ".join(i.name for i in items)
    return ", ".join(f"{i.name} ({getattr(i, detail) or 'N/A'})" for i in items)


def render_assets(assets: AssetsInventory | None) -> str:
    if assets is None:
        return NO_ASSETS_DATA
    data = assets.data
    categories = data.categories
    lines = [
        f"Project: {data.project_name or 'Unknown'}",
        f"Total assets: {data.total_assets or 0}",
        f"Existing budget: {data.total_budget or 'Not specified'}",
        f"Planned days: {data.planned_days if data.planned_days is not None else 'Not specified'}",
    ]
    if categories is not None:
        lines += [
            f"Available cast: {_names(categories.cast, 'department')}",
            f"Available props: {_names(categories.props, 'status')}",
            f"Available wardrobe: {_names(categories.wardrobe)}",
            f"Available locations: {_names(categories.locations, 'cost')}",
            f"Available vehicles: {_names(categories.vehicles, 'status')}",
            f"Available equipment: {_names(categories.equipment, 'department')}",
        ]
    return "\n".join(lines)


class PromptContext:
    """Accumulates stage results for one run and renders prompt variables.

    Args:
        scenes: Normalized, capped scene records.
        info: Source document payload (project name, genre, totals).
        shots: Optional shot list document.
        sequences: Optional sequence list document.
        assets: Optional assets inventory.
    """

    def __init__(
        self,
        scenes: Sequence[NormalizedScene],
        info: ScriptInfo | None = None,
        *,
        shots: ShotList | None = None,
        sequences: SequenceList | None = None,
        assets: AssetsInventory | None = None,
    ) -> None:
        self.scenes = list(scenes)
        self._results: dict[str, StageResult] = {}
        self._static = self._static_variables(info, shots, sequences, assets)

    @property
    def results(self) -> dict[str, StageResult]:
        return dict(self._results)

    def record(self, stage: str, result: StageResult) -> None:
        """Store a stage's final result; each stage is recorded once."""
        if stage in self._results:
            raise ValueError(f"Stage '{stage}' already recorded")
        self._results[stage] = result

    def render_upstream(self) -> str:
        if not self._results:
            return NO_UPSTREAM_DATA
        sections = []
        for name, result in self._results.items():
            if result.completed and result.data is not None:
                body = json.dumps(
                    result.data.model_dump(mode="json", by_alias=True),
                    indent=2,
                    ensure_ascii=False,
                )
            else:
                body = FAILED_STAGE_MARKER.format(name=name, error=result.error)
            sections.append(f"### {name}\n{body}")
        return "\n\n".join(sections)

    def variables(self) -> dict[str, Any]:
        """Template variables for the next stage's prompt."""
        return {**self._static, "upstream": self.render_upstream()}

    def _static_variables(
        self,
        info: ScriptInfo | None,
        shots: ShotList | None,
        sequences: SequenceList | None,
        assets: AssetsInventory | None,
    ) -> dict[str, Any]:
        scenes = self.scenes
        total = len(info.records()) if info is not None else len(scenes)
        locations = list(dict.fromkeys(s.location for s in scenes))
        equipment = [e for s in scenes for e in s.special_equipment]
        return {
            "project": (info.script_name if info else None) or "film",
            "genre": (info.genre if info else None) or "Feature Film",
            "project_type": (info.type if info else None) or "Feature Film",
            "budget_level": (info.budget_level if info else None) or "Medium",
            "total_scenes": (info.total_scenes if info else None) or total,
            "scene_count": len(scenes),
            "characters": ", ".join(info.characters) if info and info.characters else "Unknown",
            "props": ", ".join(info.props) if info and info.props else "Unknown",
            "vehicles": ", ".join(info.vehicles) if info and info.vehicles else "Unknown",
            "locations": ", ".join(info.locations if info and info.locations else locations)
            or "Unknown",
            "scene_locations": ", ".join(locations) or "Unknown",
            "equipment": ", ".join(equipment) or "Standard equipment",
            "stunt_scenes": sum(1 for s in scenes if s.stunts),
            "vfx_scenes": sum(1 for s in scenes if s.vfx),
            "night_scenes": sum(1 for s in scenes if s.time_of_day == "NIGHT"),
            "complex_scenes": sum(1 for s in scenes if s.complexity == "COMPLEX"),
            "scenes": render_scenes(scenes),
            "shots": render_shot_list(shots),
            "sequences": render_sequence_list(sequences),
            "assets": render_assets(assets),
        }
