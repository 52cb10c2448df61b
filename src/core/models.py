# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

Source documents (scene breakdown, shot list, sequence list, assets
inventory) mirror the JSON produced by the breakdown tools, so field
aliases follow their key names. NormalizedScene is the canonical record
every pipeline consumes.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Complexity = Literal["SIMPLE", "MODERATE", "COMPLEX"]
Level = Literal["LOW", "MEDIUM", "HIGH"]


class _SourceModel(BaseModel):
    """Lenient base for imported JSON: aliases or field names, extras ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# === SCENE BREAKDOWN ===


class RawScene(_SourceModel):
    """One scene as exported by the script breakdown tool."""

    scene_number: int | None = Field(default=None, alias="sceneNumber")
    heading: str | None = Field(default=None, alias="Scene_Names")
    action: str | None = Field(default=None, alias="Scene_action")
    characters: list[str] | None = Field(default=None, alias="Scene_Characters")
    dialogue: str | None = Field(default=None, alias="Scene_Dialogue")
    contents: str | None = Field(default=None, alias="Contents")
    location: str | None = None
    time_of_day: str | None = Field(default=None, alias="timeOfDay")
    page_count: float | None = Field(default=None, alias="pageCount")
    estimated_minutes: float | None = Field(default=None, alias="estimatedTime")


# === SHOT LIST ===


class ShotItem(_SourceModel):
    shot_number: str = Field(alias="shotNumber")
    scene_number: int | None = Field(default=None, alias="sceneNumber")
    shot_type: str = Field(default="", alias="shotType")
    camera_angle: str = Field(default="", alias="cameraAngle")
    movement: str | None = None
    lens: str | None = None
    duration: float | None = None
    complexity: Level = "MEDIUM"
    setup_time: float | None = Field(default=None, alias="setupTime")
    department: list[str] = Field(default_factory=list)
    notes: str | None = None


class ShotCoverage(_SourceModel):
    master_shots: int = Field(default=0, alias="masterShots")
    medium_shots: int = Field(default=0, alias="mediumShots")
    close_ups: int = Field(default=0, alias="closeUps")
    cutaways: int = 0
    inserts: int = 0


class CameraSetup(_SourceModel):
    camera: str
    operator: str = ""
    configuration: str = ""
    mobility: str = ""


class ShotEquipment(_SourceModel):
    cameras: list[CameraSetup] = Field(default_factory=list)
    lenses: list[str] = Field(default_factory=list)
    special_equipment: list[str] = Field(default_factory=list, alias="specialEquipment")


class ShotListInfo(_SourceModel):
    project_name: str | None = Field(default=None, alias="projectName")
    total_shots: int | None = Field(default=None, alias="totalShots")
    shots: list[ShotItem] = Field(default_factory=list)
    coverage: ShotCoverage | None = None
    equipment: ShotEquipment | None = None


class ShotList(_SourceModel):
    success: bool = True
    data: ShotListInfo


# === SEQUENCE LIST ===


class SequenceItem(_SourceModel):
    sequence_number: str = Field(alias="sequenceNumber")
    name: str = ""
    start_scene: int | None = Field(default=None, alias="startScene")
    end_scene: int | None = Field(default=None, alias="endScene")
    duration: float | None = None
    location: str | None = None
    time_of_day: str | None = Field(default=None, alias="timeOfDay")
    characters: list[str] = Field(default_factory=list)
    description: str = ""
    complexity: Level = "MEDIUM"
    shooting_order: int | None = Field(default=None, alias="shootingOrder")
    dependencies: list[str] = Field(default_factory=list)


class CharacterArc(_SourceModel):
    character: str
    sequences: list[str] = Field(default_factory=list)
    wardrobe: list[str] = Field(default_factory=list)
    makeup: list[str] = Field(default_factory=list)
    continuity_notes: list[str] = Field(default_factory=list, alias="continuityNotes")


class SequenceContinuity(_SourceModel):
    character_arcs: list[CharacterArc] = Field(default_factory=list, alias="characterArcs")


class SequenceTransitions(_SourceModel):
    cuts: int = 0
    fades: int = 0
    dissolves: int = 0
    other: int = 0


class SequenceListInfo(_SourceModel):
    project_name: str | None = Field(default=None, alias="projectName")
    total_sequences: int | None = Field(default=None, alias="totalSequences")
    sequences: list[SequenceItem] = Field(default_factory=list)
    continuity: SequenceContinuity | None = None
    transitions: SequenceTransitions | None = None


class SequenceList(_SourceModel):
    success: bool = True
    data: SequenceListInfo


# === ASSETS INVENTORY ===


class AssetItem(_SourceModel):
    name: str
    category: str = ""
    description: str | None = None
    cost: str | None = None
    status: str | None = None
    department: str | None = None


class AssetCategories(_SourceModel):
    cast: list[AssetItem] = Field(default_factory=list)
    props: list[AssetItem] = Field(default_factory=list)
    wardrobe: list[AssetItem] = Field(default_factory=list)
    vehicles: list[AssetItem] = Field(default_factory=list)
    locations: list[AssetItem] = Field(default_factory=list)
    equipment: list[AssetItem] = Field(default_factory=list)


class AssetsInfo(_SourceModel):
    project_name: str | None = Field(default=None, alias="projectName")
    total_assets: int | None = Field(default=None, alias="totalAssets")
    categories: AssetCategories | None = None
    total_budget: str | None = Field(default=None, alias="totalBudget")
    planned_days: int | None = Field(default=None, alias="plannedDays")


class AssetsInventory(_SourceModel):
    success: bool = True
    data: AssetsInfo


# === SOURCE DOCUMENT ===


class ScriptInfo(_SourceModel):
    """Payload of a script breakdown document."""

    timestamp: str | None = None
    script_name: str | None = Field(default=None, alias="scriptName")
    genre: str | None = None
    type: str | None = None
    budget_level: str | None = Field(default=None, alias="budgetLevel")
    total_scenes: int | None = Field(default=None, alias="totalScenes")
    characters: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    props: list[str] = Field(default_factory=list)
    vehicles: list[str] = Field(default_factory=list)
    scenes: list[RawScene] | None = None
    shots: list[ShotItem] | None = None
    sequences: list[SequenceItem] | None = None

    def records(self) -> list[RawScene] | list[ShotItem] | list[SequenceItem]:
        """Return the first non-empty record array: scenes, then sequences, then shots."""
        for records in (self.scenes, self.sequences, self.shots):
            if records:
                return records
        return []


class SourceDocument(_SourceModel):
    """Top-level script breakdown document (`{success, data}`)."""

    success: bool
    data: ScriptInfo


# === NORMALIZED ===


class NormalizedScene(BaseModel):
    """Canonical scene record consumed by every pipeline stage.

    page_count and estimated_minutes carry the source value when present;
    otherwise a fixed default is used and placeholder_estimates is True.
    """

    model_config = ConfigDict(frozen=True)

    scene_id: str
    scene_number: str
    location: str
    location_type: Literal["INT", "EXT"]
    time_of_day: str
    description: str
    cast: list[str]
    props: list[str]
    wardrobe: list[str]
    special_equipment: list[str]
    vfx: list[str]
    stunts: list[str]
    animals: list[str]
    vehicles: list[str]
    atmospherics: list[str]
    priority: Level
    complexity: Complexity
    page_count: float
    estimated_minutes: float
    placeholder_estimates: bool = True


class ScriptStats(BaseModel):
    """Deterministic summary statistics over a script breakdown."""

    total_scenes: int
    locations: list[str]
    characters: list[str]
    times_of_day: list[str]
    estimated_shooting_days: int
    complexity_score: int
