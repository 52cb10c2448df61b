# src/core/source.py — v1
"""Source document loading: shape validation and summary statistics.

validate_source() is the pre-flight check the orchestrator runs before
any stage; it is the only place a malformed document is rejected.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from prodanalyzer.core.models import ScriptStats, SourceDocument

M = TypeVar("M", bound=BaseModel)

_HEAVY_ACTION = ("battle", "fight", "chase")
_MEDIUM_ACTION = ("crowd", "effects")


class SourceValidationError(ValueError):
    """Raised when a source document fails basic shape validation."""


def _describe(exc: ValidationError) -> str:
    return f"{exc.error_count()} field error(s): " + "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )


def validate_source(payload: SourceDocument | dict[str, Any]) -> SourceDocument:
    """Validate a raw breakdown payload.

    Requires a truthy `success` flag, a `data` object and at least one
    record array under it (`scenes`, `sequences` or `shots`, possibly
    empty).

    Raises:
        SourceValidationError: If the payload does not have that shape.
    """
    if isinstance(payload, SourceDocument):
        document = payload
    else:
        if not isinstance(payload, dict):
            raise SourceValidationError(
                f"Invalid source document: expected an object, got {type(payload).__name__}"
            )
        try:
            document = SourceDocument.model_validate(payload)
        except ValidationError as exc:
            raise SourceValidationError(f"Invalid source document: {_describe(exc)}") from exc

    if not document.success:
        raise SourceValidationError("Invalid source document: success flag is false")
    data = document.data
    if data.scenes is None and data.sequences is None and data.shots is None:
        raise SourceValidationError(
            "Invalid source document: data.scenes (or data.sequences / data.shots) is required"
        )
    return document


def validate_auxiliary(payload: M | dict[str, Any] | None, model: type[M]) -> M | None:
    """Validate an optional auxiliary document (shot list, sequence list, assets).

    Raises:
        SourceValidationError: If the payload is present but malformed.
    """
    if payload is None or isinstance(payload, model):
        return payload
    if not isinstance(payload, dict):
        raise SourceValidationError(
            f"Invalid {model.__name__}: expected an object, got {type(payload).__name__}"
        )
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise SourceValidationError(f"Invalid {model.__name__}: {_describe(exc)}") from exc


def load_json_file(path: Path) -> dict[str, Any]:
    """Read a JSON document from disk."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SourceValidationError(f"Failed to parse {path.name}: {exc}") from exc


def script_stats(document: SourceDocument) -> ScriptStats:
    """Compute deterministic statistics over every scene of a document."""
    scenes = document.data.scenes or []
    locations = list(dict.fromkeys(s.location for s in scenes if s.location))
    characters = list(dict.fromkeys(c for s in scenes for c in (s.characters or [])))
    times = list(dict.fromkeys(s.time_of_day for s in scenes if s.time_of_day))

    if not scenes:
        return ScriptStats(
            total_scenes=0,
            locations=[],
            characters=[],
            times_of_day=[],
            estimated_shooting_days=0,
            complexity_score=0,
        )

    score = 0
    for scene in scenes:
        text = (scene.action or scene.contents or "").lower()
        if any(kw in text for kw in _HEAVY_ACTION):
            score += 3
        elif any(kw in text for kw in _MEDIUM_ACTION):
            score += 2
        else:
            score += 1

    scenes_per_day = 3 if score > len(scenes) * 2 else 5
    return ScriptStats(
        total_scenes=len(scenes),
        locations=locations,
        characters=characters,
        times_of_day=times,
        estimated_shooting_days=math.ceil(len(scenes) / scenes_per_day),
        complexity_score=min(100, math.floor(score / len(scenes) * 10 + 0.5)),
    )
