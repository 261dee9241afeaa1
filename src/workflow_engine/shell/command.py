"""Fluent command builders for external tools.

A builder is created with default I/O streams, given a tool operation
(which fixes the argument list), optionally tweaked with ``with_*`` calls,
and finished with one terminal call::

    GrypeCommand(stdout, stderr).version().with_dry_run(True).run()

Builders are single use: each terminal call produces and consumes exactly
one Invocation.
"""

from __future__ import annotations

from typing import IO, Any, List, Optional, Sequence, TypeVar

from workflow_engine.core.errors import WorkflowEngineError
from workflow_engine.core.logging import LoggerLike, get_logger
from workflow_engine.shell.cancel import CancelToken
from workflow_engine.shell.options import (
    OptionFunc,
    build_options,
    with_cancel_token,
    with_dry_run,
    with_io,
)
from workflow_engine.shell.runner import (
    ExitOutcome,
    Invocation,
    ProcessRunner,
    run as default_run,
)

LOGGER = get_logger(__name__)

T = TypeVar("T", bound="ToolCommand")


class CommandError(WorkflowEngineError):
    """A command finished with a non-success exit outcome."""

    def __init__(self, invocation: Invocation, outcome: ExitOutcome) -> None:
        self.invocation = invocation
        self.outcome = outcome
        message = f"{invocation.command_line}: {outcome.description}"
        if outcome.description != f"exit code {outcome.code}":
            message += f" (exit code {outcome.code})"
        if outcome.error is not None:
            message += f": {outcome.error}"
        super().__init__(message)

    @property
    def exit_code(self) -> int:
        return self.outcome.code


class ToolCommand:
    """Base class for a single external tool.

    Subclasses set ``program`` and expose one method per tool operation
    that calls ``_set_args`` and returns ``self``.
    """

    program: str = ""

    def __init__(
        self,
        stdout: Optional[IO[Any]] = None,
        stderr: Optional[IO[Any]] = None,
        stdin: Optional[IO[Any]] = None,
        runner: Optional[ProcessRunner] = None,
        logger: Optional[LoggerLike] = None,
    ) -> None:
        """Initialize the command.

        Args:
            stdout: Default stdout for the invocation.
            stderr: Default stderr for the invocation.
            stdin: Default stdin for the invocation.
            runner: Runner to execute with (default: module runner).
            logger: Logger for warnings (default: module logger).
        """
        self._args: List[str] = []
        self._option_funcs: List[OptionFunc] = [with_io(stdin, stdout, stderr)]
        self._runner = runner
        self._logger = logger or LOGGER
        self._consumed = False

    def _set_args(self: T, *args: str) -> T:
        self._args = list(args)
        return self

    def with_dry_run(self: T, enabled: bool) -> T:
        self._option_funcs.append(with_dry_run(enabled))
        return self

    def with_cancel_token(self: T, token: Optional[CancelToken]) -> T:
        self._option_funcs.append(with_cancel_token(token))
        return self

    def with_options(self: T, *option_funcs: OptionFunc) -> T:
        """Apply extra option functions on top of the defaults."""
        self._option_funcs.extend(option_funcs)
        return self

    @property
    def args(self) -> Sequence[str]:
        return tuple(self._args)

    def invocation(self) -> Invocation:
        """Build the Invocation without running it."""
        return Invocation(
            program=self.program,
            args=tuple(self._args),
            options=build_options(*self._option_funcs),
        )

    def execute(self) -> ExitOutcome:
        """Run the command and return the raw exit outcome."""
        return self._execute(self.invocation())

    def _execute(self, invocation: Invocation) -> ExitOutcome:
        if self._consumed:
            raise RuntimeError(f"{self.program} command has already been executed")
        self._consumed = True

        if self._runner is not None:
            return self._runner.run(invocation)
        return default_run(invocation)

    def run(self) -> None:
        """Run the command.

        Raises:
            CommandError: If the exit outcome is not success.
        """
        invocation = self.invocation()
        outcome = self._execute(invocation)
        if not outcome.success:
            raise CommandError(invocation, outcome)

    def run_log_error_as_warning(self) -> None:
        """Run the command, logging a failure as a warning instead of raising."""
        try:
            self.run()
        except CommandError as e:
            self._logger.warning(f"{self.program} failed: {e}")
