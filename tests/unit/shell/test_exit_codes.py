"""Tests for workflow_engine.shell.exit_codes."""

from __future__ import annotations

import pytest

from workflow_engine.shell.exit_codes import (
    EXIT_CONTEXT_CANCEL,
    EXIT_KILL_FAILURE,
    EXIT_OK,
    EXIT_UNKNOWN,
    describe_exit_code,
)


class TestExitCodes:
    """Tests for the sentinel exit codes."""

    def test_sentinel_values(self) -> None:
        assert EXIT_OK == 0
        assert EXIT_KILL_FAILURE == 230
        assert EXIT_CONTEXT_CANCEL == 231
        assert EXIT_UNKNOWN == 232

    @pytest.mark.parametrize(
        "code,expected",
        [
            (0, "success"),
            (230, "failed to kill process after cancellation"),
            (231, "cancelled"),
            (232, "unknown failure"),
            (1, "exit code 1"),
            (137, "exit code 137"),
        ],
    )
    def test_describe_exit_code(self, code: int, expected: str) -> None:
        assert describe_exit_code(code) == expected
