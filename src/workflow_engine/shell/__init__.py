"""Process execution core.

Exposes the execution options, the process runner, the exit-code
taxonomy and the per-tool command builders.
"""

from workflow_engine.shell.cancel import CancelToken
from workflow_engine.shell.command import CommandError, ToolCommand
from workflow_engine.shell.containers import (
    ContainerEngineCommand,
    DockerCommand,
    PodmanCommand,
    get_engine_command,
)
from workflow_engine.shell.exit_codes import (
    EXIT_CONTEXT_CANCEL,
    EXIT_KILL_FAILURE,
    EXIT_OK,
    EXIT_UNKNOWN,
)
from workflow_engine.shell.grype import GrypeCommand
from workflow_engine.shell.options import (
    ExecutionOptions,
    OptionFunc,
    build_options,
    with_cancel_token,
    with_dry_run,
    with_io,
    with_stderr,
    with_stdin,
    with_stdout,
)
from workflow_engine.shell.runner import ExitOutcome, Invocation, ProcessRunner, run
from workflow_engine.shell.syft import SyftCommand

__all__ = [
    "CancelToken",
    "CommandError",
    "ContainerEngineCommand",
    "DockerCommand",
    "EXIT_CONTEXT_CANCEL",
    "EXIT_KILL_FAILURE",
    "EXIT_OK",
    "EXIT_UNKNOWN",
    "ExecutionOptions",
    "ExitOutcome",
    "GrypeCommand",
    "Invocation",
    "OptionFunc",
    "PodmanCommand",
    "ProcessRunner",
    "SyftCommand",
    "ToolCommand",
    "build_options",
    "get_engine_command",
    "run",
    "with_cancel_token",
    "with_dry_run",
    "with_io",
    "with_stderr",
    "with_stdin",
    "with_stdout",
]
