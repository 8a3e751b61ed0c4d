"""
Rejuvenator Base Pipeline

Step runner behind the rejuvenation driver. Steps run in the order
``_define_steps`` declares them and each one receives the previous step's
output. A required step that raises ends the run with a FAILED result
naming the step; an optional step logs the error and hands its input on
unchanged. Observer callbacks never change the outcome of a run.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from rejuvenator.core.exceptions import RejuvenatorError
from rejuvenator.core.logging_config import get_logger

logger = get_logger("pipelines.base")

InputT = TypeVar('InputT')
OutputT = TypeVar('OutputT')

ProgressCallback = Callable[[Dict[str, Any]], None]


class PipelineStatus(Enum):
    """Lifecycle of one run."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class PipelineResult(Generic[OutputT]):
    """
    Outcome of ``BasePipeline.run``.

    ``metadata`` always carries ``step_seconds`` (wall time per finished
    step). Failed runs add ``failed_step`` and ``error_type``, plus
    ``details`` when the error was a RejuvenatorError; cancelled runs add
    ``cancelled_at``.
    """
    status: PipelineStatus
    output: Optional[OutputT] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status == PipelineStatus.COMPLETED


@dataclass
class PipelineStep:
    name: str
    description: str
    required: bool = True


class BasePipeline(ABC, Generic[InputT, OutputT]):
    """Runs declared steps in sequence and reports the result instead of raising."""

    def __init__(self, name: str):
        self.name = name
        self._steps: List[PipelineStep] = []
        self._current_step: int = 0
        self._status = PipelineStatus.PENDING
        self._cancelled = False
        self._progress_callback: Optional[ProgressCallback] = None

        self._define_steps()

    @abstractmethod
    def _define_steps(self) -> None:
        """Fill ``self._steps``."""

    @abstractmethod
    async def _execute_step(
        self,
        step: PipelineStep,
        input_data: Any,
        context: Dict[str, Any]
    ) -> Any:
        """Run ``step`` on the previous step's output and return its own."""

    async def run(
        self,
        input_data: InputT,
        context: Optional[Dict[str, Any]] = None
    ) -> PipelineResult[OutputT]:
        """
        Run every step once.

        Args:
            input_data: Input for the first step
            context: Scratch space shared by all steps of this run

        Returns:
            PipelineResult with the last step's output
        """
        context = context if context is not None else {}
        started = datetime.now()
        timings: Dict[str, float] = {}

        self._status = PipelineStatus.RUNNING
        self._current_step = 0
        self._cancelled = False
        logger.info(f"Starting pipeline: {self.name}")

        current_data: Any = input_data
        for index, step in enumerate(self._steps):
            if self._cancelled:
                return self._finish(
                    PipelineStatus.CANCELLED, started, timings,
                    cancelled_at=step.name,
                )

            self._current_step = index
            self._report_progress(step, index, len(self._steps))

            step_started = datetime.now()
            try:
                current_data = await self._run_step(step, current_data, context)
            except Exception as e:
                timings[step.name] = self._get_duration(step_started)
                return self._failed(step, e, started, timings)
            timings[step.name] = self._get_duration(step_started)

        result = self._finish(PipelineStatus.COMPLETED, started, timings, steps_completed=len(self._steps))
        result.output = current_data
        return result

    async def _run_step(self, step: PipelineStep, input_data: Any, context: Dict[str, Any]) -> Any:
        logger.debug(f"Executing step: {step.name}")
        try:
            return await self._execute_step(step, input_data, context)
        except Exception as e:
            if step.required:
                raise
            logger.warning(f"Optional step failed: {step.name} - {e}")
            return input_data

    def _failed(
        self,
        step: PipelineStep,
        error: Exception,
        started: datetime,
        timings: Dict[str, float]
    ) -> PipelineResult:
        logger.error(f"Pipeline failed: {self.name} at {step.name} - {error}")
        extra: Dict[str, Any] = {'failed_step': step.name, 'error_type': type(error).__name__}
        if isinstance(error, RejuvenatorError) and error.details:
            extra['details'] = error.details
        result = self._finish(PipelineStatus.FAILED, started, timings, **extra)
        result.error = str(error)
        return result

    def _finish(
        self,
        status: PipelineStatus,
        started: datetime,
        timings: Dict[str, float],
        **metadata: Any
    ) -> PipelineResult:
        self._status = status
        return PipelineResult(
            status=status,
            duration_seconds=self._get_duration(started),
            metadata={'step_seconds': dict(timings), **metadata},
        )

    def cancel(self) -> None:
        """Stop before the next step (or, in subclasses, the next unit of work)."""
        self._cancelled = True
        logger.info(f"Pipeline cancelled: {self.name}")

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        self._progress_callback = callback

    def _notify(self, callback: Optional[Callable[..., None]], *args: Any) -> None:
        """Invoke an observer; a raising observer is logged and ignored."""
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            logger.warning(f"{self.name}: callback {getattr(callback, '__name__', callback)!r} raised: {e}")

    def _report_progress(self, step: PipelineStep, current: int, total: int) -> None:
        self._notify(self._progress_callback, {
            'pipeline': self.name,
            'step': step.name,
            'current': current + 1,
            'total': total,
            'percent': (current + 1) / total * 100
        })

    def _get_duration(self, start_time: datetime) -> float:
        return (datetime.now() - start_time).total_seconds()

    @property
    def status(self) -> PipelineStatus:
        return self._status

    @property
    def progress(self) -> float:
        """Fraction of steps started, 0-1."""
        if not self._steps:
            return 0.0
        return self._current_step / len(self._steps)

    @property
    def steps(self) -> List[PipelineStep]:
        return self._steps.copy()
