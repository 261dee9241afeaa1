"""Pipeline executor for orchestrating command steps.

A pipeline is a list of stages run strictly in order. Each stage is a batch
of steps, run either sequentially or concurrently; the executor joins on
every step of a batch before starting the next stage.

Step policies:
- mandatory: failures are collected and joined into the pipeline error
- optional: failures are logged as warnings and never fail the pipeline
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Any, Callable, List, Optional, Sequence, Type, TypeVar

from workflow_engine.core.logging import (
    LoggerLike,
    flush_logging,
    get_context_logger,
    get_logger,
)
from workflow_engine.pipeline.errors import PipelineError, join_errors
from workflow_engine.shell.cancel import CancelToken
from workflow_engine.shell.command import ToolCommand
from workflow_engine.shell.runner import ProcessRunner

LOGGER = get_logger(__name__)

C = TypeVar("C", bound=ToolCommand)

DEFAULT_MAX_WORKERS = 4


class StepPolicy(str, Enum):
    """Failure tolerance of a pipeline step."""

    MANDATORY = "mandatory"
    OPTIONAL = "optional"


class PipelineState(str, Enum):
    """Lifecycle of a pipeline run. There is no retry state."""

    NOT_STARTED = "not-started"
    RUNNING = "running"
    COMPLETED_SUCCESS = "completed-success"
    COMPLETED_WITH_ERRORS = "completed-with-errors"


@dataclass
class Step:
    """A named unit of work.

    ``action`` takes no arguments and raises on failure; whatever it
    returns is kept as the step's value.
    """

    name: str
    action: Callable[[], Any]
    policy: StepPolicy = StepPolicy.MANDATORY

    @classmethod
    def mandatory(cls, name: str, action: Callable[[], Any]) -> "Step":
        return cls(name, action, StepPolicy.MANDATORY)

    @classmethod
    def optional(cls, name: str, action: Callable[[], Any]) -> "Step":
        return cls(name, action, StepPolicy.OPTIONAL)


@dataclass
class StepResult:
    """Outcome of a single step."""

    name: str
    policy: StepPolicy
    value: Any = None
    error: Optional[BaseException] = None
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class Stage:
    """A batch of steps that must all finish before the next stage."""

    name: str
    steps: List[Step] = field(default_factory=list)
    concurrent: bool = False


@dataclass
class PipelineResult:
    """Step results of a pipeline run, in source order."""

    steps: List[StepResult] = field(default_factory=list)

    @property
    def errors(self) -> List[BaseException]:
        """Mandatory step failures in source order."""
        return [
            r.error
            for r in self.steps
            if r.policy == StepPolicy.MANDATORY and r.error is not None
        ]

    @property
    def warnings(self) -> List[BaseException]:
        """Optional step failures in source order."""
        return [
            r.error
            for r in self.steps
            if r.policy == StepPolicy.OPTIONAL and r.error is not None
        ]

    @property
    def error(self) -> Optional[PipelineError]:
        return join_errors(*self.errors)

    @property
    def success(self) -> bool:
        return not self.errors

    def value(self, name: str) -> Any:
        """Return the value produced by the step called ``name``.

        Raises:
            KeyError: If no step has that name.
        """
        for result in self.steps:
            if result.name == name:
                return result.value
        raise KeyError(name)


class PipelineExecutor:
    """Runs steps and stages, applying each step's failure policy."""

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        logger: Optional[LoggerLike] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            max_workers: Upper bound on threads for a concurrent batch.
            logger: Logger for step records (default: module logger).
        """
        self._max_workers = max(1, max_workers)
        self._logger = logger or LOGGER

    def run_step(self, step: Step) -> StepResult:
        """Run one step, capturing its failure instead of raising."""
        self._logger.debug(f"step {step.name} started ({step.policy.value})")
        start = time.monotonic()
        result = StepResult(name=step.name, policy=step.policy)

        try:
            result.value = step.action()
        except Exception as e:
            result.error = e
            if step.policy == StepPolicy.OPTIONAL:
                self._logger.warning(f"optional step {step.name} failed: {e}")
            else:
                self._logger.error(f"step {step.name} failed: {e}")

        result.duration_ms = int((time.monotonic() - start) * 1000)
        self._logger.debug(
            f"step {step.name} finished in {result.duration_ms}ms "
            f"({'ok' if result.success else 'failed'})"
        )
        return result

    def run_batch(
        self, steps: Sequence[Step], concurrent: bool = False
    ) -> List[StepResult]:
        """Run a batch of steps to completion.

        A failing step never stops its siblings. Results are returned in
        the order the steps were given, not completion order.

        Args:
            steps: Steps to run.
            concurrent: Run the steps on a thread pool instead of in order.

        Returns:
            One StepResult per step.
        """
        if not steps:
            return []

        if not concurrent or len(steps) == 1:
            return [self.run_step(step) for step in steps]

        workers = min(self._max_workers, len(steps))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="pipeline-step"
        ) as pool:
            futures = [pool.submit(self.run_step, step) for step in steps]
            return [future.result() for future in futures]

    def run_stages(
        self, stages: Sequence[Stage], stop_on_error: bool = False
    ) -> PipelineResult:
        """Run stages in order, each as one batch.

        Args:
            stages: Stages to run.
            stop_on_error: Skip the remaining stages once a stage has a
                mandatory failure. Use when later stages consume the output
                of earlier ones.

        Returns:
            PipelineResult with the results of every step that ran.
        """
        result = PipelineResult()
        for stage in stages:
            if stop_on_error and result.errors:
                self._logger.info(f"stage {stage.name} skipped after earlier failure")
                continue
            mode = "concurrent" if stage.concurrent else "sequential"
            self._logger.info(
                f"stage {stage.name} started ({len(stage.steps)} steps, {mode})"
            )
            result.steps.extend(self.run_batch(stage.steps, stage.concurrent))
        return result


class Pipeline(ABC):
    """Base class for pipelines.

    Subclasses implement ``_execute`` and return the PipelineResult of their
    stages. ``run`` drives the state machine and raises the joined error of
    all mandatory failures.
    """

    name: str = "pipeline"

    def __init__(
        self,
        stdout: Optional[IO[Any]] = None,
        stderr: Optional[IO[Any]] = None,
        dry_run: bool = False,
        cancel_token: Optional[CancelToken] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        runner: Optional[ProcessRunner] = None,
        logger: Optional[LoggerLike] = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            stdout: Stream for tool output.
            stderr: Stream for tool diagnostics.
            dry_run: Log commands instead of running them.
            cancel_token: Shared token that kills in-flight commands.
            max_workers: Thread bound for concurrent stages.
            runner: Process runner for every command (default: module runner).
            logger: Logger for pipeline records.
        """
        self.stdout = stdout
        self.stderr = stderr
        self.dry_run = dry_run
        self.cancel_token = cancel_token
        self.runner = runner
        self.logger = logger or get_context_logger(
            type(self).__module__, pipeline=self.name, dry_run=dry_run
        )
        self.executor = PipelineExecutor(max_workers=max_workers, logger=self.logger)
        self.state = PipelineState.NOT_STARTED
        self.result: Optional[PipelineResult] = None

    def command(self, command_cls: Type[C], stdout: Optional[IO[Any]] = None) -> C:
        """Create a command wired to this pipeline's streams and options.

        Args:
            command_cls: Tool command class, e.g. GrypeCommand.
            stdout: Override for the pipeline's stdout.
        """
        return (
            command_cls(
                stdout if stdout is not None else self.stdout,
                self.stderr,
                runner=self.runner,
                logger=self.logger,
            )
            .with_dry_run(self.dry_run)
            .with_cancel_token(self.cancel_token)
        )

    @abstractmethod
    def _execute(self) -> PipelineResult:
        """Run the pipeline's stages."""

    def run(self) -> None:
        """Run the pipeline once.

        Raises:
            PipelineError: If any mandatory step failed.
            RuntimeError: If the pipeline has already been run.
        """
        if self.state != PipelineState.NOT_STARTED:
            raise RuntimeError(f"{self.name} pipeline has already been run")

        self.state = PipelineState.RUNNING
        self.logger.info("start")

        try:
            self.result = self._execute()
        except Exception:
            self.state = PipelineState.COMPLETED_WITH_ERRORS
            self.logger.error("aborted")
            flush_logging()
            raise

        error = self.result.error
        if error is None:
            self.state = PipelineState.COMPLETED_SUCCESS
        else:
            self.state = PipelineState.COMPLETED_WITH_ERRORS

        self.logger.info(f"complete state={self.state.value}")
        flush_logging()

        if error is not None:
            raise error
