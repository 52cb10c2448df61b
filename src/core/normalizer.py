# src/core/normalizer.py — v1
"""Scene normalization — heterogeneous breakdown records to NormalizedScene.

Scene, shot and sequence records are capped, kept in input order, and
enriched with keyword-derived category lists. Keyword matching is a
case-insensitive substring test; each matching keyword appends one
label and labels are not deduplicated.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import TypeVar

from prodanalyzer.core.models import (
    Complexity,
    Level,
    NormalizedScene,
    RawScene,
    SequenceItem,
    ShotItem,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_LOCATION = "Unknown Location"
UNKNOWN_CAST = "UNKNOWN"
DEFAULT_TIME_OF_DAY = "DAY"
# Heading markers match as whole words, so "printing" is not an interior.
NIGHT_PATTERN = re.compile(r"\bNIGHT\b", re.IGNORECASE)
INTERIOR_PATTERN = re.compile(r"\bINT(?:ERIOR)?\b", re.IGNORECASE)
DESCRIPTION_LIMIT = 200

# Midpoints of the ranges the breakdown tool used to draw at random.
DEFAULT_PAGE_COUNT = 2.0
DEFAULT_ESTIMATED_MINUTES = 150.0

PROP_KEYWORDS = ("gun", "weapon", "car", "phone", "briefcase", "computer", "sword", "helmet", "armor")
EQUIPMENT_KEYWORDS = ("camera", "lighting", "crane", "steadicam", "boom", "harness")
VFX_KEYWORDS = ("explosion", "fire", "magic", "digital", "cgi", "effects")
STUNT_KEYWORDS = ("fight", "chase", "jump", "fall", "crash", "battle")
VEHICLE_KEYWORDS = ("car", "truck", "motorcycle", "plane", "helicopter", "ship")
HIGH_PRIORITY_KEYWORDS = ("fight", "battle", "explosion")
COMPLEXITY_KEYWORDS = ("fight", "chase", "explosion", "effects", "crowd", "vehicles")

DEFAULT_PROPS = ["basic props"]
DEFAULT_WARDROBE = ["Period appropriate costumes"]
DEFAULT_ATMOSPHERICS = ["Scene atmosphere"]


def match_keywords(text: str, keywords: Iterable[str], suffix: str = "") -> list[str]:
    """Return one label per keyword found in text (case-insensitive)."""
    lowered = text.lower()
    return [f"{kw}{suffix}" for kw in keywords if kw in lowered]


def classify_priority(text: str) -> Level:
    if match_keywords(text, HIGH_PRIORITY_KEYWORDS):
        return "HIGH"
    return "MEDIUM"


def classify_complexity(text: str) -> Complexity:
    hits = len(match_keywords(text, COMPLEXITY_KEYWORDS))
    if hits >= 3:
        return "COMPLEX"
    if hits >= 1:
        return "MODERATE"
    return "SIMPLE"


def _truncate(text: str) -> str:
    return text[:DESCRIPTION_LIMIT] + "..."


def _build(
    *,
    scene_id: str,
    scene_number: str,
    location: str,
    heading: str,
    time_of_day: str | None,
    text: str,
    cast: list[str] | None,
    page_count: float | None = None,
    estimated_minutes: float | None = None,
) -> NormalizedScene:
    if not time_of_day:
        time_of_day = "NIGHT" if NIGHT_PATTERN.search(heading) else DEFAULT_TIME_OF_DAY
    placeholder = page_count is None or estimated_minutes is None
    return NormalizedScene(
        scene_id=scene_id,
        scene_number=scene_number,
        location=location,
        location_type="INT" if INTERIOR_PATTERN.search(heading) else "EXT",
        time_of_day=time_of_day,
        description=_truncate(text),
        cast=list(cast) if cast else [UNKNOWN_CAST],
        props=match_keywords(text, PROP_KEYWORDS) or list(DEFAULT_PROPS),
        wardrobe=list(DEFAULT_WARDROBE),
        special_equipment=match_keywords(text, EQUIPMENT_KEYWORDS),
        vfx=match_keywords(text, VFX_KEYWORDS, " effects"),
        stunts=match_keywords(text, STUNT_KEYWORDS, " sequence"),
        animals=[],
        vehicles=match_keywords(text, VEHICLE_KEYWORDS),
        atmospherics=list(DEFAULT_ATMOSPHERICS),
        priority=classify_priority(text),
        complexity=classify_complexity(text),
        page_count=DEFAULT_PAGE_COUNT if page_count is None else page_count,
        estimated_minutes=(
            DEFAULT_ESTIMATED_MINUTES if estimated_minutes is None else estimated_minutes
        ),
        placeholder_estimates=placeholder,
    )


def normalize_scene(scene: RawScene, index: int) -> NormalizedScene:
    """Normalize one breakdown scene; index is its 0-based input position."""
    number = str(scene.scene_number or index + 1)
    heading = scene.heading or ""
    return _build(
        scene_id=f"sc_{number.zfill(3)}",
        scene_number=number,
        location=scene.location or scene.heading or UNKNOWN_LOCATION,
        heading=heading,
        time_of_day=scene.time_of_day,
        text=scene.action or scene.contents or "",
        cast=scene.characters,
        page_count=scene.page_count,
        estimated_minutes=scene.estimated_minutes,
    )


def normalize_shot(shot: ShotItem, index: int) -> NormalizedScene:
    number = shot.shot_number or str(index + 1)
    text = " ".join(
        part for part in (shot.shot_type, shot.camera_angle, shot.movement, shot.notes) if part
    )
    return _build(
        scene_id=f"sh_{number.zfill(3)}",
        scene_number=str(shot.scene_number) if shot.scene_number is not None else number,
        location=UNKNOWN_LOCATION,
        heading="",
        time_of_day=None,
        text=text,
        cast=None,
        estimated_minutes=shot.duration,
    )


def normalize_sequence(sequence: SequenceItem, index: int) -> NormalizedScene:
    number = sequence.sequence_number or str(index + 1)
    return _build(
        scene_id=f"seq_{number.zfill(3)}",
        scene_number=number,
        location=sequence.location or sequence.name or UNKNOWN_LOCATION,
        heading=sequence.name,
        time_of_day=sequence.time_of_day,
        text=sequence.description,
        cast=sequence.characters,
        estimated_minutes=sequence.duration,
    )


def cap(records: Sequence[T], limit: int) -> list[T]:
    """Truncate to at most `limit` records, preserving order."""
    if limit < 0:
        raise ValueError("limit must be >= 0")
    return list(records[:limit])


def normalize_scenes(
    records: Sequence[RawScene | ShotItem | SequenceItem] | None,
    limit: int,
) -> list[NormalizedScene]:
    """Normalize up to `limit` records of any supported kind, in input order.

    Args:
        records: Scenes, shots or sequences (mixed lists are accepted).
        limit: Maximum number of records to keep.

    Returns:
        Ordered list of NormalizedScene, empty for empty or missing input.
    """
    if not records:
        return []

    normalized: list[NormalizedScene] = []
    for index, record in enumerate(cap(records, limit)):
        if isinstance(record, RawScene):
            normalized.append(normalize_scene(record, index))
        elif isinstance(record, ShotItem):
            normalized.append(normalize_shot(record, index))
        elif isinstance(record, SequenceItem):
            normalized.append(normalize_sequence(record, index))
        else:
            raise TypeError(f"Unsupported record type: {type(record).__name__}")

    if len(records) > limit:
        logger.info("Scene cap applied: kept %d of %d records", limit, len(records))
    return normalized
