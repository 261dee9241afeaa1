"""Tests for workflow_engine.shell.options."""

from __future__ import annotations

import dataclasses
import io

import pytest

from workflow_engine.shell.cancel import CancelToken
from workflow_engine.shell.options import (
    ExecutionOptions,
    apply_options,
    build_options,
    with_cancel_token,
    with_dry_run,
    with_io,
    with_stderr,
    with_stdin,
    with_stdout,
)


class TestExecutionOptions:
    """Tests for the ExecutionOptions value."""

    def test_defaults(self) -> None:
        options = ExecutionOptions()
        assert options.dry_run is False
        assert options.stdin is None
        assert options.stdout is None
        assert options.stderr is None
        assert options.cancel_token is None

    def test_is_immutable(self) -> None:
        options = ExecutionOptions()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.dry_run = True  # type: ignore[misc]


class TestBuildOptions:
    """Tests for composing option functions."""

    def test_no_functions_gives_defaults(self) -> None:
        assert build_options() == ExecutionOptions()

    def test_with_io_sets_all_streams(self) -> None:
        stdin, stdout, stderr = io.BytesIO(), io.BytesIO(), io.BytesIO()
        options = build_options(with_io(stdin, stdout, stderr))
        assert options.stdin is stdin
        assert options.stdout is stdout
        assert options.stderr is stderr

    def test_single_stream_functions(self) -> None:
        stdin, stdout, stderr = io.BytesIO(), io.BytesIO(), io.BytesIO()
        options = build_options(with_stdin(stdin), with_stdout(stdout), with_stderr(stderr))
        assert (options.stdin, options.stdout, options.stderr) == (stdin, stdout, stderr)

    def test_same_concern_is_last_write_wins(self) -> None:
        options = build_options(with_dry_run(True), with_dry_run(False))
        assert options.dry_run is False

        first, second = io.StringIO(), io.StringIO()
        options = build_options(with_stdout(first), with_stdout(second))
        assert options.stdout is second

    def test_stream_override_keeps_other_streams(self) -> None:
        stdin, stdout, stderr = io.BytesIO(), io.BytesIO(), io.BytesIO()
        override = io.BytesIO()
        options = build_options(with_io(stdin, stdout, stderr), with_stdout(override))
        assert options.stdin is stdin
        assert options.stdout is override
        assert options.stderr is stderr

    def test_functions_are_reusable_across_invocations(self) -> None:
        shared = [with_dry_run(True), with_stderr(io.StringIO())]
        first = build_options(*shared, with_stdout(io.StringIO()))
        second = build_options(*shared)

        assert first.dry_run and second.dry_run
        assert first.stderr is second.stderr
        assert first.stdout is not None
        assert second.stdout is None

    def test_dry_run_and_cancel_token_are_independent(self) -> None:
        token = CancelToken()
        options = build_options(with_dry_run(True), with_cancel_token(token))
        assert options.dry_run is True
        assert options.cancel_token is token

    def test_apply_options_does_not_mutate_input(self) -> None:
        base = ExecutionOptions()
        updated = apply_options(base, with_dry_run(True))
        assert base.dry_run is False
        assert updated.dry_run is True
