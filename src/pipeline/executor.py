# src/pipeline/executor.py — v1
"""Stage executor — one generation call per stage, failures become results.

Any exception raised while building the prompt or during the call
(validation, transport, provider, timeout, cancellation) is caught here
and returned as a failed StageResult. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from prodanalyzer.logging.context import set_stage_context
from prodanalyzer.pipeline.plugin_kit.models import StageOutput, StageResult

if TYPE_CHECKING:
    from prodanalyzer.llm.structured import StructuredGenerator
    from prodanalyzer.pipeline.context import PromptContext
    from prodanalyzer.pipeline.plugin_kit.base_stage import StageDefinition

logger = logging.getLogger(__name__)


class StageTimeoutError(Exception):
    """Raised when a stage exceeds its timeout or the run deadline."""


class StageCancelledError(Exception):
    """Raised when the run's cancellation signal fires during a stage."""


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def describe_error(exc: BaseException) -> str:
    """Human-readable one-line description of a stage failure."""
    message = str(exc).strip()
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


class StageExecutor:
    """Run a single stage against a StructuredGenerator.

    Args:
        generator: Structured generation collaborator.
        timeout_s: Per-stage timeout in seconds (None = no per-stage limit).
    """

    def __init__(
        self,
        generator: StructuredGenerator,
        *,
        timeout_s: float | None = None,
    ) -> None:
        self._generator = generator
        self._timeout_s = timeout_s

    async def execute(
        self,
        stage: StageDefinition,
        context: PromptContext,
        *,
        deadline: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> StageResult:
        """Execute one stage and return its result. Never raises Exception.

        Args:
            stage: Stage to run.
            context: Accumulated run context used to render the prompt.
            deadline: Absolute time.monotonic() value after which the stage
                is abandoned as timed out.
            cancel_event: When set, the in-flight call is abandoned.
        """
        set_stage_context(stage.name)
        start = time.monotonic()
        try:
            prompt = stage.build_prompt(context)
            data = await self._call(stage, prompt, deadline, cancel_event)
        except Exception as exc:
            duration = _elapsed_ms(start)
            logger.warning(
                "Stage %s failed: %s",
                stage.name,
                exc,
                extra={"duration_ms": duration, "completed": False},
            )
            return StageResult.failed(describe_error(exc), duration)
        finally:
            set_stage_context(None)

        duration = _elapsed_ms(start)
        logger.info(
            "Stage %s completed",
            stage.name,
            extra={"duration_ms": duration, "completed": True, "confidence": data.confidence},
        )
        return StageResult.succeeded(data, duration)

    def _remaining(self, deadline: float | None) -> float | None:
        limits = [self._timeout_s] if self._timeout_s is not None else []
        if deadline is not None:
            limits.append(deadline - time.monotonic())
        return min(limits) if limits else None

    async def _call(
        self,
        stage: StageDefinition,
        prompt: str,
        deadline: float | None,
        cancel_event: asyncio.Event | None,
    ) -> StageOutput:
        if cancel_event is not None and cancel_event.is_set():
            raise StageCancelledError(f"Run cancelled before stage '{stage.name}' started")
        remaining = self._remaining(deadline)
        if remaining is not None and remaining <= 0:
            raise StageTimeoutError(f"Run deadline expired before stage '{stage.name}' started")

        call = asyncio.ensure_future(
            self._generator.generate(
                stage.output_schema,
                prompt,
                stage=stage.name,
                system=stage.system_prompt,
            )
        )
        waiters: set[asyncio.Future] = {call}
        cancel_wait: asyncio.Future | None = None
        if cancel_event is not None:
            cancel_wait = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_wait)

        try:
            done, pending = await asyncio.wait(
                waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for fut in waiters:
                if not fut.done():
                    fut.cancel()
            await asyncio.gather(*waiters, return_exceptions=True)

        if call in done:
            data = call.result()
            if not isinstance(data, stage.output_schema):
                raise TypeError(
                    f"Generator returned {type(data).__name__}, "
                    f"expected {stage.output_schema.__name__}"
                )
            return data
        if cancel_wait is not None and cancel_wait in done:
            raise StageCancelledError(f"Run cancelled during stage '{stage.name}'")
        raise StageTimeoutError(f"Stage '{stage.name}' timed out after {remaining:.1f}s")
