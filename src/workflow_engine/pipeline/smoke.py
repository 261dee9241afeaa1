"""Smoke test pipeline for the containerized execution environment.

The environment exposes two data-producing operations: a sample run and a
diagnostic dump. Both are collected concurrently and combined into one
report::

    debug output:
    <sample>
    system information:
    <diagnostics>
"""

from __future__ import annotations

import io
import sys
from typing import Any, Optional, Protocol, Sequence

from workflow_engine.core.logging import LoggerLike, get_logger
from workflow_engine.pipeline.executor import Pipeline, PipelineResult, Stage, Step
from workflow_engine.shell.cancel import CancelToken
from workflow_engine.shell.containers import get_engine_command
from workflow_engine.shell.runner import ProcessRunner

LOGGER = get_logger(__name__)

# Commands run inside the image for each report section
SAMPLE_COMMAND = ("workflow-engine", "--dry-run", "debug")
SYSTEM_INFO_COMMAND = ("uname", "-a")


class SmokeEnvironment(Protocol):
    """A ready execution context for the smoke test."""

    def sample(self) -> str:
        """Run the sample operation and return its output."""
        ...

    def system_info(self) -> str:
        """Run the diagnostic operation and return its output."""
        ...


def format_report(sample: str, system_info: str) -> str:
    return f"debug output:\n{sample}\nsystem information:\n{system_info}\n"


class ContainerSmokeEnvironment:
    """SmokeEnvironment backed by a docker or podman image."""

    def __init__(
        self,
        image: str,
        engine: str = "docker",
        dry_run: bool = False,
        cancel_token: Optional[CancelToken] = None,
        runner: Optional[ProcessRunner] = None,
        logger: Optional[LoggerLike] = None,
    ) -> None:
        """Initialize the environment.

        Raises:
            ValueError: If ``engine`` is not a supported container engine.
        """
        self.image = image
        self._engine_cls = get_engine_command(engine)
        self._dry_run = dry_run
        self._cancel_token = cancel_token
        self._runner = runner
        self._logger = logger or LOGGER

    def _capture(self, command: Sequence[str]) -> str:
        buffer = io.StringIO()
        (
            self._engine_cls(buffer, runner=self._runner, logger=self._logger)
            .run_image(self.image, *command)
            .with_dry_run(self._dry_run)
            .with_cancel_token(self._cancel_token)
            .run()
        )
        return buffer.getvalue().rstrip("\n")

    def sample(self) -> str:
        return self._capture(SAMPLE_COMMAND)

    def system_info(self) -> str:
        return self._capture(SYSTEM_INFO_COMMAND)


class SmokeTestPipeline(Pipeline):
    """Collects sample and diagnostic output from an environment concurrently."""

    name = "smoke_test"

    def __init__(self, environment: SmokeEnvironment, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.environment = environment

    def _execute(self) -> PipelineResult:
        result = self.executor.run_stages(
            [
                Stage(
                    "collect",
                    [
                        Step.mandatory("sample", self.environment.sample),
                        Step.mandatory("system-info", self.environment.system_info),
                    ],
                    concurrent=True,
                )
            ]
        )
        if result.success:
            report = format_report(result.value("sample"), result.value("system-info"))
            out = self.stdout if self.stdout is not None else sys.stdout
            if isinstance(out, io.TextIOBase):
                out.write(report)
            else:
                out.write(report.encode("utf-8"))
            out.flush()
        return result
