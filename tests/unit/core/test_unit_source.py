# tests/unit/core/test_unit_source.py — v1
"""Tests for core/source.py — pre-flight validation and script statistics."""

from __future__ import annotations

import json

import pytest

from prodanalyzer.core.models import ShotList
from prodanalyzer.core.normalizer import normalize_scenes
from prodanalyzer.core.source import (
    SourceValidationError,
    load_json_file,
    script_stats,
    validate_auxiliary,
    validate_source,
)


class TestValidateSource:
    def test_valid(self, breakdown_payload):
        document = validate_source(breakdown_payload)
        assert document.data.script_name == "Iron Harbor"
        assert len(document.data.scenes) == 3

    def test_empty_scenes_allowed(self, empty_payload):
        assert validate_source(empty_payload).data.scenes == []

    def test_missing_data(self):
        with pytest.raises(SourceValidationError, match="data"):
            validate_source({"success": True})

    def test_success_false(self, breakdown_payload):
        breakdown_payload["success"] = False
        with pytest.raises(SourceValidationError, match="success"):
            validate_source(breakdown_payload)

    def test_missing_scenes(self):
        with pytest.raises(SourceValidationError, match="scenes"):
            validate_source({"success": True, "data": {"scriptName": "X"}})

    def test_sequences_accepted(self):
        document = validate_source(
            {"success": True, "data": {"sequences": [{"sequenceNumber": "1"}]}}
        )
        assert len(document.data.records()) == 1

    def test_empty_scenes_with_shots_normalizes_shots(self):
        document = validate_source(
            {"success": True, "data": {"scenes": [], "shots": [{"shotNumber": "1A"}]}}
        )
        scenes = normalize_scenes(document.data.records(), 20)
        assert [s.scene_id for s in scenes] == ["sh_01A"]

    def test_not_an_object(self):
        with pytest.raises(SourceValidationError, match="expected an object"):
            validate_source(["scenes"])

    def test_scenes_wrong_type(self):
        with pytest.raises(SourceValidationError):
            validate_source({"success": True, "data": {"scenes": "many"}})


class TestValidateAuxiliary:
    def test_none(self):
        assert validate_auxiliary(None, ShotList) is None

    def test_valid(self, shot_list_payload):
        shots = validate_auxiliary(shot_list_payload, ShotList)
        assert shots.data.shots[0].shot_number == "1A"

    def test_invalid(self):
        with pytest.raises(SourceValidationError, match="ShotList"):
            validate_auxiliary({"success": True}, ShotList)


class TestLoadJsonFile:
    def test_reads(self, tmp_path, breakdown_payload):
        path = tmp_path / "breakdown.json"
        path.write_text(json.dumps(breakdown_payload), encoding="utf-8")
        assert load_json_file(path) == breakdown_payload

    def test_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SourceValidationError, match="bad.json"):
            load_json_file(path)


class TestScriptStats:
    def test_stats(self, breakdown_payload):
        stats = script_stats(validate_source(breakdown_payload))
        assert stats.total_scenes == 3
        assert stats.locations == ["Harbor", "Warehouse"]
        assert stats.characters == ["MAYA", "DUKE"]
        assert stats.times_of_day == ["DAY"]
        # chase = 3, plain = 1, plain = 1 -> 5 <= 6 -> 5 scenes per day
        assert stats.estimated_shooting_days == 1
        # 5 / 3 * 10 = 16.67 -> 17
        assert stats.complexity_score == 17

    def test_heavy_script_uses_three_scenes_per_day(self):
        scenes = [{"Scene_action": "a battle"} for _ in range(4)]
        stats = script_stats(validate_source({"success": True, "data": {"scenes": scenes}}))
        assert stats.estimated_shooting_days == 2
        assert stats.complexity_score == 30

    def test_empty(self, empty_payload):
        stats = script_stats(validate_source(empty_payload))
        assert stats.total_scenes == 0
        assert stats.estimated_shooting_days == 0
        assert stats.complexity_score == 0
