"""Debug pipeline: report tool versions and build a sample SBOM."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from workflow_engine.config.models import ArtifactConfig
from workflow_engine.pipeline.executor import Pipeline, PipelineResult, Stage, Step
from workflow_engine.shell.containers import DockerCommand, PodmanCommand
from workflow_engine.shell.grype import GrypeCommand
from workflow_engine.shell.syft import SyftCommand


class DebugPipeline(Pipeline):
    """Checks that every expected tool is installed and working.

    Stages:
    1. grype and syft versions, then a syft SBOM of the test image tarball
       (mandatory, all run even if one fails)
    2. podman and docker versions (optional, failures are only logged)
    """

    name = "debug"

    def __init__(self, artifacts: Optional[ArtifactConfig] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.artifacts = artifacts or ArtifactConfig()

    def _execute(self) -> PipelineResult:
        self.logger.info(f"current directory: {Path.cwd()}")

        artifact_dir = Path(self.artifacts.directory)
        # Failing to create it is a local fault and aborts the run
        artifact_dir.mkdir(parents=True, exist_ok=True)
        self.logger.debug(f"artifact directory: {artifact_dir.resolve()}")

        mandatory = Stage(
            "mandatory",
            [
                Step.mandatory("grype-version", self.command(GrypeCommand).version().run),
                Step.mandatory("syft-version", self.command(SyftCommand).version().run),
                Step.mandatory(
                    "syft-scan-image",
                    self.command(SyftCommand)
                    .scan_image(self.artifacts.image_tarball, str(self.artifacts.sbom_path))
                    .run,
                ),
            ],
        )
        optional = Stage(
            "optional",
            [
                Step.optional(
                    "podman-version",
                    self.command(PodmanCommand).version().run_log_error_as_warning,
                ),
                Step.optional(
                    "docker-version",
                    self.command(DockerCommand).version().run_log_error_as_warning,
                ),
            ],
        )
        return self.executor.run_stages([mandatory, optional])
