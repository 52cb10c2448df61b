# tests/unit/pipeline/test_unit_executor.py — v1
"""Tests for pipeline/executor.py — failures, timeouts and cancellation as results."""

from __future__ import annotations

import asyncio
import time

import pytest

from prodanalyzer.llm.structured import StructuredOutputError
from prodanalyzer.pipeline.context import PromptContext
from prodanalyzer.pipeline.executor import StageExecutor, describe_error
from prodanalyzer.pipeline.plugin_kit.base_stage import StageDefinition
from prodanalyzer.pipeline.plugin_kit.models import StageOutput


# --- Helpers ---


class NoteOutput(StageOutput):
    note: str


class OtherOutput(StageOutput):
    other: int = 0


@pytest.fixture
def stage(tmp_path) -> StageDefinition:
    template = tmp_path / "note.txt"
    template.write_text("Project {project}\n{scenes}\n{upstream}", encoding="utf-8")
    return StageDefinition("note", NoteOutput, str(template), system_prompt="Be brief.")


@pytest.fixture
def context() -> PromptContext:
    return PromptContext([])


# --- Tests ---


class TestDescribeError:
    def test_with_message(self):
        assert describe_error(ValueError("bad value")) == "ValueError: bad value"

    def test_without_message(self):
        assert describe_error(TimeoutError()) == "TimeoutError"


class TestExecute:
    @pytest.mark.asyncio
    async def test_success(self, stage, context, make_generator):
        generator = make_generator({"note": NoteOutput(note="ok", confidence=0.9)})
        result = await StageExecutor(generator).execute(stage, context)
        assert result.completed
        assert result.data.note == "ok"
        assert result.duration_ms >= 0
        assert "Project film" in generator.prompts["note"]
        assert generator.systems["note"] == "Be brief."

    @pytest.mark.asyncio
    async def test_generator_error_becomes_failed_result(self, stage, context, make_generator):
        generator = make_generator({"note": StructuredOutputError("Response does not match NoteOutput")})
        result = await StageExecutor(generator).execute(stage, context)
        assert not result.completed
        assert result.error == "StructuredOutputError: Response does not match NoteOutput"

    @pytest.mark.asyncio
    async def test_transport_error(self, stage, context, make_generator):
        generator = make_generator({"note": ConnectionError("connection reset")})
        result = await StageExecutor(generator).execute(stage, context)
        assert result.error == "ConnectionError: connection reset"

    @pytest.mark.asyncio
    async def test_wrong_schema_rejected(self, stage, context, make_generator):
        generator = make_generator({"note": OtherOutput(confidence=0.1)})
        result = await StageExecutor(generator).execute(stage, context)
        assert not result.completed
        assert result.error.startswith("TypeError")

    @pytest.mark.asyncio
    async def test_missing_template(self, tmp_path, context, make_generator):
        missing = StageDefinition("note", NoteOutput, str(tmp_path / "absent.txt"))
        generator = make_generator({"note": NoteOutput(note="ok", confidence=0.9)})
        result = await StageExecutor(generator).execute(missing, context)
        assert result.error.startswith("FileNotFoundError")
        assert generator.calls == []


class TestTimeouts:
    @pytest.mark.asyncio
    async def test_stage_timeout(self, stage, context, make_generator, hanging_response):
        generator = make_generator({"note": hanging_response()})
        start = time.monotonic()
        result = await StageExecutor(generator, timeout_s=0.05).execute(stage, context)
        assert time.monotonic() - start < 2
        assert not result.completed
        assert result.error.startswith("StageTimeoutError")

    @pytest.mark.asyncio
    async def test_deadline_shorter_than_timeout(self, stage, context, make_generator, hanging_response):
        generator = make_generator({"note": hanging_response()})
        result = await StageExecutor(generator, timeout_s=60).execute(
            stage, context, deadline=time.monotonic() + 0.05
        )
        assert result.error.startswith("StageTimeoutError")

    @pytest.mark.asyncio
    async def test_expired_deadline_skips_call(self, stage, context, make_generator):
        generator = make_generator({"note": NoteOutput(note="ok", confidence=0.9)})
        result = await StageExecutor(generator).execute(
            stage, context, deadline=time.monotonic() - 1
        )
        assert "deadline expired" in result.error
        assert generator.calls == []


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, stage, context, make_generator):
        event = asyncio.Event()
        event.set()
        generator = make_generator({"note": NoteOutput(note="ok", confidence=0.9)})
        result = await StageExecutor(generator).execute(stage, context, cancel_event=event)
        assert result.error.startswith("StageCancelledError")
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test_cancelled_in_flight(self, stage, context, make_generator, hanging_response):
        event = asyncio.Event()
        generator = make_generator({"note": hanging_response()})
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, event.set)
        result = await StageExecutor(generator, timeout_s=30).execute(
            stage, context, cancel_event=event
        )
        assert result.error.startswith("StageCancelledError")
        assert generator.calls == ["note"]
