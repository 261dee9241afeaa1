"""Aggregate error for mandatory pipeline steps."""

from __future__ import annotations

from typing import Iterable, List, Optional

from workflow_engine.core.errors import WorkflowEngineError


class PipelineError(WorkflowEngineError):
    """One or more mandatory steps failed.

    ``errors`` keeps every constituent exception in source order. The
    message is their messages joined by newlines, so a single failure
    renders exactly as that failure.
    """

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self.errors: List[BaseException] = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)


def join_errors(*errors: Optional[BaseException]) -> Optional[PipelineError]:
    """Combine errors, skipping None.

    Nested PipelineErrors are flattened so their constituents keep their
    own identity.

    Returns:
        PipelineError, or None when every argument is None.
    """
    collected: List[BaseException] = []
    for error in errors:
        if error is None:
            continue
        if isinstance(error, PipelineError):
            collected.extend(error.errors)
        else:
            collected.append(error)

    if not collected:
        return None
    return PipelineError(collected)
