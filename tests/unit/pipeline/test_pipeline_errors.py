"""Tests for workflow_engine.pipeline.errors."""

from __future__ import annotations

from workflow_engine.pipeline.errors import PipelineError, join_errors


class TestJoinErrors:
    """Tests for join_errors."""

    def test_no_errors_returns_none(self) -> None:
        assert join_errors() is None
        assert join_errors(None, None) is None

    def test_single_error_renders_as_itself(self) -> None:
        error = join_errors(None, ValueError("grype failed"), None)
        assert isinstance(error, PipelineError)
        assert str(error) == "grype failed"
        assert len(error) == 1

    def test_keeps_source_order(self) -> None:
        first, second = RuntimeError("first"), RuntimeError("second")
        error = join_errors(first, second)
        assert error is not None
        assert list(error) == [first, second]
        assert str(error) == "first\nsecond"

    def test_flattens_nested_pipeline_errors(self) -> None:
        a, b, c = OSError("a"), OSError("b"), OSError("c")
        error = join_errors(PipelineError([a, b]), c)
        assert error is not None
        assert error.errors == [a, b, c]

    def test_constituents_keep_identity(self) -> None:
        original = KeyError("missing")
        error = join_errors(original)
        assert error is not None
        assert error.errors[0] is original
