"""Shared fixtures for workflow-engine tests."""

from __future__ import annotations

import io
import logging
import threading
import time
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import pytest

from workflow_engine.core import logging as wf_logging
from workflow_engine.core.logging import ROOT_LOGGER_NAME
from workflow_engine.shell.runner import ExitOutcome, Invocation, ProcessRunner


class RecordingRunner(ProcessRunner):
    """Runner that records invocations instead of spawning processes.

    Exit codes, output and delays are looked up by the most specific key
    that matches: the full command line, ``"<program> <first arg>"``, or
    the program name. Unknown commands succeed with no output.
    """

    def __init__(self) -> None:
        super().__init__()
        self.codes: Dict[str, int] = {}
        self.outputs: Dict[str, str] = {}
        self.delays: Dict[str, float] = {}
        self.invocations: List[Invocation] = []
        self._lock = threading.Lock()

    def _lookup(self, table: Dict[str, object], invocation: Invocation) -> Optional[object]:
        keys = [invocation.command_line]
        if invocation.args:
            keys.append(f"{invocation.program} {invocation.args[0]}")
        keys.append(invocation.program)
        for key in keys:
            if key in table:
                return table[key]
        return None

    @property
    def command_lines(self) -> List[str]:
        with self._lock:
            return [i.command_line for i in self.invocations]

    @property
    def programs(self) -> List[str]:
        with self._lock:
            return [i.program for i in self.invocations]

    def run(self, invocation: Invocation) -> ExitOutcome:
        with self._lock:
            self.invocations.append(invocation)
        if invocation.options.dry_run:
            return ExitOutcome(0)

        delay = self._lookup(self.delays, invocation)
        if delay:
            time.sleep(delay)

        output = self._lookup(self.outputs, invocation)
        stdout = invocation.options.stdout
        if output is not None and stdout is not None:
            if isinstance(stdout, io.TextIOBase):
                stdout.write(output)
            else:
                stdout.write(str(output).encode("utf-8"))

        code = self._lookup(self.codes, invocation)
        return ExitOutcome(int(code) if code is not None else 0)


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config directory at an empty temp directory."""
    home = tmp_path / "workflow-engine-home"
    monkeypatch.setenv("WORKFLOW_ENGINE_HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by a test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    wf_logging._handler = None
