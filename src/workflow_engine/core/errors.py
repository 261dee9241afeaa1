"""Exception hierarchy for workflow-engine."""

from __future__ import annotations


class WorkflowEngineError(Exception):
    """Base class for all workflow-engine errors."""

    pass
