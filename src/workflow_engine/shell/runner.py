"""Process runner for a single external command.

The runner spawns one child process according to its ExecutionOptions,
relays any non-file streams through pipes, and waits for whichever happens
first: the child exits, or the cancellation token fires. Every outcome is
mapped onto the sentinel taxonomy in ``exit_codes``.
"""

from __future__ import annotations

import codecs
import contextlib
import io
import shlex
import subprocess
import threading
from dataclasses import dataclass, field
from typing import IO, Any, List, Optional, Tuple

from workflow_engine.core.logging import LoggerLike, get_logger
from workflow_engine.shell.cancel import CancelToken
from workflow_engine.shell.exit_codes import (
    EXIT_CONTEXT_CANCEL,
    EXIT_KILL_FAILURE,
    EXIT_OK,
    EXIT_UNKNOWN,
    describe_exit_code,
)
from workflow_engine.shell.options import ExecutionOptions

LOGGER = get_logger(__name__)

# Seconds to wait for the background wait thread after a forced kill
DEFAULT_KILL_GRACE_PERIOD = 5.0

CHUNK_SIZE = 64 * 1024

_EXITED = "exited"
_CANCELLED = "cancelled"


@dataclass(frozen=True)
class Invocation:
    """A resolved, ready-to-run external program call."""

    program: str
    args: Tuple[str, ...] = ()
    options: ExecutionOptions = field(default_factory=ExecutionOptions)

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class ExitOutcome:
    """Exit code of an invocation plus the error behind it, if any."""

    code: int
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.code == EXIT_OK

    @property
    def description(self) -> str:
        return describe_exit_code(self.code)


class _FirstEvent:
    """Records which of several named events happened first."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self.winner: Optional[str] = None

    def set(self, name: str) -> None:
        with self._lock:
            if self.winner is None:
                self.winner = name
        self._event.set()

    def wait(self) -> Optional[str]:
        self._event.wait()
        return self.winner


def _fileno(stream: IO[Any]) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


class _StreamRelay:
    """Connects ExecutionOptions streams to a child process.

    Streams backed by a real file descriptor are passed to the child
    directly. Anything else (in-memory buffers, capture streams) goes
    through a pipe serviced by a background thread.
    """

    def __init__(self, options: ExecutionOptions) -> None:
        self._options = options
        self._drains: List[threading.Thread] = []
        self._lock = threading.Lock()
        self.errors: List[BaseException] = []

        self.stdin = self._popen_arg(options.stdin, is_input=True)
        self.stdout = self._popen_arg(options.stdout, is_input=False)
        self.stderr = self._popen_arg(options.stderr, is_input=False)

    @staticmethod
    def _popen_arg(stream: Optional[IO[Any]], is_input: bool) -> Any:
        if stream is None:
            return None
        if _fileno(stream) is not None:
            if not is_input:
                # Python-level buffers must reach the fd before the child writes
                stream.flush()
            return stream
        return subprocess.PIPE

    def start(self, process: subprocess.Popen) -> None:
        if self.stdin is subprocess.PIPE:
            feeder = threading.Thread(
                target=self._feed,
                args=(self._options.stdin, process.stdin),
                name=f"stdin-{process.pid}",
                daemon=True,
            )
            feeder.start()

        for name, arg, pipe, writer in (
            ("stdout", self.stdout, process.stdout, self._options.stdout),
            ("stderr", self.stderr, process.stderr, self._options.stderr),
        ):
            if arg is subprocess.PIPE:
                drain = threading.Thread(
                    target=self._drain,
                    args=(pipe, writer),
                    name=f"{name}-{process.pid}",
                    daemon=True,
                )
                drain.start()
                self._drains.append(drain)

    def join(self) -> None:
        for drain in self._drains:
            drain.join()

    @property
    def error(self) -> Optional[BaseException]:
        with self._lock:
            return self.errors[0] if self.errors else None

    def _record(self, error: BaseException) -> None:
        with self._lock:
            self.errors.append(error)

    def _feed(self, reader: IO[Any], pipe: IO[bytes]) -> None:
        try:
            while True:
                chunk = reader.read(CHUNK_SIZE)
                if not chunk:
                    break
                if isinstance(chunk, str):
                    chunk = chunk.encode("utf-8")
                pipe.write(chunk)
        except BrokenPipeError:
            # The child closed its stdin early, same as exiting without reading
            pass
        except (OSError, ValueError) as e:
            self._record(e)
        finally:
            with contextlib.suppress(OSError):
                pipe.close()

    def _drain(self, pipe: IO[bytes], writer: IO[Any]) -> None:
        decoder = None
        if isinstance(writer, io.TextIOBase):
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        failed = False
        try:
            while True:
                chunk = pipe.read1(CHUNK_SIZE)  # type: ignore[attr-defined]
                if not chunk:
                    break
                if failed:
                    # Keep draining so the child never blocks on a full pipe
                    continue
                try:
                    writer.write(decoder.decode(chunk) if decoder else chunk)
                except (OSError, ValueError, TypeError) as e:
                    self._record(e)
                    failed = True

            if decoder is not None and not failed:
                tail = decoder.decode(b"", final=True)
                if tail:
                    writer.write(tail)
        except (OSError, ValueError) as e:
            self._record(e)
        finally:
            with contextlib.suppress(OSError):
                pipe.close()


class ProcessRunner:
    """Executes invocations and maps their outcome to an exit code.

    Example:
        >>> runner = ProcessRunner()
        >>> runner.run(Invocation("true")).code
        0
    """

    def __init__(
        self,
        logger: Optional[LoggerLike] = None,
        kill_grace_period: float = DEFAULT_KILL_GRACE_PERIOD,
    ) -> None:
        """Initialize the runner.

        Args:
            logger: Logger for exec records (default: module logger).
            kill_grace_period: Seconds to wait for a killed child to be reaped.
        """
        self._logger = logger or LOGGER
        self._kill_grace_period = kill_grace_period

    def run(self, invocation: Invocation) -> ExitOutcome:
        """Run the invocation and return its outcome.

        Dry runs are logged and reported as successful without spawning
        anything. Otherwise the child is spawned and raced against the
        options' cancellation token.

        Args:
            invocation: The program, arguments and options to run.

        Returns:
            ExitOutcome with a taxonomy exit code.
        """
        options = invocation.options
        self._logger.info(
            f"shell exec dry_run={options.dry_run} command={invocation.command_line}"
        )
        if options.dry_run:
            return ExitOutcome(EXIT_OK)

        relay = _StreamRelay(options)
        try:
            process = subprocess.Popen(
                invocation.argv,
                stdin=relay.stdin,
                stdout=relay.stdout,
                stderr=relay.stderr,
            )
        except (OSError, ValueError) as e:
            self._logger.debug(f"failed to start {invocation.program}: {e}")
            return ExitOutcome(EXIT_UNKNOWN, e)

        relay.start(process)
        outcome = self._wait(process, relay, options.cancel_token)
        self._logger.debug(
            f"{invocation.program} finished: {outcome.description} (code {outcome.code})"
        )
        return outcome

    def _wait(
        self,
        process: subprocess.Popen,
        relay: _StreamRelay,
        token: Optional[CancelToken],
    ) -> ExitOutcome:
        first = _FirstEvent()

        def on_cancel() -> None:
            first.set(_CANCELLED)

        # Registered before the wait thread starts: a token that has
        # already fired wins over a child that exits immediately.
        if token is not None:
            token.add_callback(on_cancel)

        def wait_for_exit() -> None:
            try:
                process.wait()
                relay.join()
            finally:
                first.set(_EXITED)

        waiter = threading.Thread(
            target=wait_for_exit, name=f"wait-{process.pid}", daemon=True
        )
        waiter.start()

        try:
            winner = first.wait()
        finally:
            if token is not None:
                token.remove_callback(on_cancel)

        if winner == _CANCELLED:
            return self._kill(process, waiter)

        return self._classify(process.returncode, relay.error)

    def _kill(self, process: subprocess.Popen, waiter: threading.Thread) -> ExitOutcome:
        try:
            process.kill()
        except OSError as e:
            self._logger.error(f"failed to kill process {process.pid}: {e}")
            return ExitOutcome(EXIT_KILL_FAILURE, e)

        waiter.join(self._kill_grace_period)
        if waiter.is_alive():
            self._logger.warning(
                f"process {process.pid} not reaped within {self._kill_grace_period}s of kill"
            )
        return ExitOutcome(EXIT_CONTEXT_CANCEL)

    @staticmethod
    def _classify(
        returncode: Optional[int], relay_error: Optional[BaseException]
    ) -> ExitOutcome:
        if returncode is None:
            return ExitOutcome(EXIT_UNKNOWN)
        if returncode < 0:
            # Terminated by a signal, reported the way a POSIX shell does
            return ExitOutcome(128 - returncode)
        if returncode != EXIT_OK:
            return ExitOutcome(returncode)
        if relay_error is not None:
            return ExitOutcome(EXIT_UNKNOWN, relay_error)
        return ExitOutcome(EXIT_OK)


_default_runner = ProcessRunner()


def run(invocation: Invocation) -> ExitOutcome:
    """Run ``invocation`` with the default runner."""
    return _default_runner.run(invocation)
