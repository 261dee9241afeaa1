"""Image scan command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import Any

from workflow_engine.cli.commands.pipeline import PipelineCommand
from workflow_engine.config.models import WorkflowEngineConfig
from workflow_engine.pipeline import ImageScanPipeline, Pipeline


class ImageScanCommand(PipelineCommand):
    """Generates an SBOM for an image tarball and scans it."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "image-scan"

    def build_pipeline(
        self, args: Namespace, config: WorkflowEngineConfig, **common: Any
    ) -> Pipeline:
        return ImageScanPipeline(artifacts=config.artifacts, **common)
