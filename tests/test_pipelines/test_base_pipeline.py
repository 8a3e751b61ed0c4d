"""
Tests for Base Pipeline Module

Tests for rejuvenator/pipelines/base_pipeline.py
"""

import pytest

from rejuvenator.core.exceptions import PipelineError
from rejuvenator.pipelines.base_pipeline import (
    BasePipeline,
    PipelineResult,
    PipelineStatus,
    PipelineStep,
)


class MockPipeline(BasePipeline):
    """Mock pipeline for testing."""

    def __init__(self, fail_at=None, optional=False):
        self.fail_at = fail_at
        self.optional = optional
        super().__init__("mock_pipeline")

    def _define_steps(self) -> None:
        self._steps = [
            PipelineStep("step1", "First"),
            PipelineStep("step2", "Second", required=not self.optional),
            PipelineStep("step3", "Third"),
        ]

    async def _execute_step(self, step, input_data, context):
        if step.name == self.fail_at:
            raise PipelineError("boom", {"stage": step.name})
        context.setdefault("seen", []).append(step.name)
        return f"{input_data}_{step.name}"


class TestPipelineResult:
    """Tests for PipelineResult class."""

    def test_success_property(self):
        assert PipelineResult(status=PipelineStatus.COMPLETED).success is True
        assert PipelineResult(status=PipelineStatus.FAILED).success is False


class TestBasePipeline:
    """Tests for BasePipeline class."""

    @pytest.mark.asyncio
    async def test_data_flows_through_steps(self):
        """Each step's output feeds the next."""
        pipeline = MockPipeline()

        result = await pipeline.run("input")

        assert result.status == PipelineStatus.COMPLETED
        assert result.output == "input_step1_step2_step3"
        assert result.metadata["steps_completed"] == 3
        assert list(result.metadata["step_seconds"]) == ["step1", "step2", "step3"]
        assert pipeline.status == PipelineStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_required_step_failure_fails_run(self):
        pipeline = MockPipeline(fail_at="step2")
        context = {}

        result = await pipeline.run("input", context)

        assert result.status == PipelineStatus.FAILED
        assert "boom" in result.error
        assert result.metadata["failed_step"] == "step2"
        assert result.metadata["error_type"] == "PipelineError"
        assert result.metadata["details"]["stage"] == "step2"
        assert context["seen"] == ["step1"]
        assert list(result.metadata["step_seconds"]) == ["step1", "step2"]

    @pytest.mark.asyncio
    async def test_optional_step_failure_is_tolerated(self):
        pipeline = MockPipeline(fail_at="step2", optional=True)

        result = await pipeline.run("input")

        assert result.success
        assert result.output == "input_step1_step3"

    @pytest.mark.asyncio
    async def test_progress_callback(self):
        pipeline = MockPipeline()
        updates = []
        pipeline.set_progress_callback(updates.append)

        await pipeline.run("input")

        assert [u["step"] for u in updates] == ["step1", "step2", "step3"]
        assert updates[-1]["percent"] == 100

    @pytest.mark.asyncio
    async def test_cancel_during_run_stops_before_next_step(self):
        pipeline = MockPipeline()
        # run() resets the flag, so cancel from inside the first progress report
        pipeline.set_progress_callback(lambda update: pipeline.cancel())

        result = await pipeline.run("input")

        assert result.status == PipelineStatus.CANCELLED
        assert result.metadata["cancelled_at"] == "step2"

    @pytest.mark.asyncio
    async def test_raising_progress_callback_does_not_fail_run(self):
        pipeline = MockPipeline()

        def broken(update):
            raise RuntimeError("observer bug")

        pipeline.set_progress_callback(broken)

        result = await pipeline.run("input")

        assert result.success
        assert result.output == "input_step1_step2_step3"
