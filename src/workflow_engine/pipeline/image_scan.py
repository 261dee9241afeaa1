"""Image scan pipeline: SBOM an image tarball, then scan the SBOM with grype."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Optional

from workflow_engine.config.models import ArtifactConfig
from workflow_engine.pipeline.executor import Pipeline, PipelineResult, Stage, Step
from workflow_engine.shell.grype import GrypeCommand
from workflow_engine.shell.syft import SyftCommand


class ImageScanPipeline(Pipeline):
    """Produces an SBOM and a grype report for a saved container image.

    Stages run in order and stop at the first failing stage, since each one
    consumes the previous stage's artifact:

    1. ``syft scan`` writes the SBOM into the artifact directory
    2. ``grype sbom:`` scans it, the JSON report is captured in memory
    3. the report is saved to the artifact directory
    """

    name = "image_scan"

    def __init__(self, artifacts: Optional[ArtifactConfig] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.artifacts = artifacts or ArtifactConfig()
        self._report = io.BytesIO()

    def with_artifact_config(self, artifacts: ArtifactConfig) -> "ImageScanPipeline":
        self.artifacts = artifacts
        return self

    def _execute(self) -> PipelineResult:
        self.logger.info(
            f"artifacts directory={self.artifacts.directory} "
            f"sbom_filename={self.artifacts.sbom_filename} "
            f"grype_filename={self.artifacts.grype_filename}"
        )
        Path(self.artifacts.directory).mkdir(parents=True, exist_ok=True)

        sbom = str(self.artifacts.sbom_path)
        stages = [
            Stage(
                "sbom",
                [
                    Step.mandatory(
                        "syft-scan-image",
                        self.command(SyftCommand)
                        .scan_image(self.artifacts.image_tarball, sbom)
                        .run,
                    )
                ],
            ),
            Stage(
                "scan",
                [
                    Step.mandatory(
                        "grype-scan-sbom",
                        self.command(GrypeCommand, stdout=self._report).scan_sbom(sbom).run,
                    )
                ],
            ),
            Stage("save", [Step.mandatory("save-grype-report", self._save_report)]),
        ]
        return self.executor.run_stages(stages, stop_on_error=True)

    def _save_report(self) -> Optional[Path]:
        """Write the captured grype report into the artifact directory."""
        grype_path = self.artifacts.grype_path
        if self.dry_run:
            self.logger.info(f"dry run, not saving grype report to {grype_path}")
            return None

        self.logger.debug(f"save grype artifact dest={grype_path}")
        grype_path.write_bytes(self._report.getvalue())
        return grype_path
