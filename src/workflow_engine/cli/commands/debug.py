"""Debug command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import Any

from workflow_engine.cli.commands.pipeline import PipelineCommand
from workflow_engine.config.models import WorkflowEngineConfig
from workflow_engine.pipeline import DebugPipeline, Pipeline


class DebugCommand(PipelineCommand):
    """Reports tool versions and builds a sample SBOM."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "debug"

    def build_pipeline(
        self, args: Namespace, config: WorkflowEngineConfig, **common: Any
    ) -> Pipeline:
        return DebugPipeline(artifacts=config.artifacts, **common)
