"""Execution options for a single process invocation.

Options are an immutable value built from option functions. Each option
function touches exactly one concern and returns a new value, so applying
the same concern twice is last-write-wins and the same list of functions can
be reused to build sibling invocations with shared defaults::

    defaults = [with_io(None, out, err), with_dry_run(True)]
    options = build_options(*defaults, with_stdout(buffer))
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import IO, Any, Callable, Optional

from workflow_engine.shell.cancel import CancelToken

# Any file-like object: binary or text, real file or in-memory buffer
Stream = Optional[IO[Any]]


@dataclass(frozen=True)
class ExecutionOptions:
    """How a single invocation should be run.

    Streams left as None inherit the parent process' stream.
    """

    dry_run: bool = False
    stdin: Stream = None
    stdout: Stream = None
    stderr: Stream = None
    cancel_token: Optional[CancelToken] = None


OptionFunc = Callable[[ExecutionOptions], ExecutionOptions]


def build_options(*option_funcs: OptionFunc) -> ExecutionOptions:
    """Apply option functions, in order, to default options."""
    return apply_options(ExecutionOptions(), *option_funcs)


def apply_options(
    options: ExecutionOptions, *option_funcs: OptionFunc
) -> ExecutionOptions:
    """Apply option functions, in order, on top of existing options."""
    for option_func in option_funcs:
        options = option_func(options)
    return options


def with_dry_run(enabled: bool) -> OptionFunc:
    """Log the command that would run and report success without running it."""

    def _apply(o: ExecutionOptions) -> ExecutionOptions:
        return replace(o, dry_run=enabled)

    return _apply


def with_io(stdin: Stream, stdout: Stream, stderr: Stream) -> OptionFunc:
    """Set input and output streams for a command."""

    def _apply(o: ExecutionOptions) -> ExecutionOptions:
        return replace(o, stdin=stdin, stdout=stdout, stderr=stderr)

    return _apply


def with_stdin(stream: Stream) -> OptionFunc:
    def _apply(o: ExecutionOptions) -> ExecutionOptions:
        return replace(o, stdin=stream)

    return _apply


def with_stdout(stream: Stream) -> OptionFunc:
    def _apply(o: ExecutionOptions) -> ExecutionOptions:
        return replace(o, stdout=stream)

    return _apply


def with_stderr(stream: Stream) -> OptionFunc:
    def _apply(o: ExecutionOptions) -> ExecutionOptions:
        return replace(o, stderr=stream)

    return _apply


def with_cancel_token(token: Optional[CancelToken]) -> OptionFunc:
    """Kill the process when ``token`` fires before the process exits."""

    def _apply(o: ExecutionOptions) -> ExecutionOptions:
        return replace(o, cancel_token=token)

    return _apply
