"""Tests for workflow_engine.pipeline.image_scan."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from workflow_engine.config.models import ArtifactConfig
from workflow_engine.pipeline.errors import PipelineError
from workflow_engine.pipeline.executor import PipelineState
from workflow_engine.pipeline.image_scan import ImageScanPipeline

REPORT = '{"matches": []}'


@pytest.fixture
def artifacts(tmp_path: Path) -> ArtifactConfig:
    return ArtifactConfig(
        directory=str(tmp_path / "artifacts"),
        sbom_filename="sbom.json",
        grype_filename="grype.json",
        image_tarball=str(tmp_path / "image.tar"),
    )


class TestImageScanPipeline:
    """Tests for ImageScanPipeline."""

    def test_scans_and_saves_report(self, recording_runner, artifacts: ArtifactConfig) -> None:
        recording_runner.outputs["grype"] = REPORT

        pipeline = ImageScanPipeline(artifacts=artifacts, runner=recording_runner)
        pipeline.run()

        sbom = str(artifacts.sbom_path)
        assert recording_runner.command_lines == [
            f"syft scan docker-archive:{artifacts.image_tarball} --output syft-json={sbom}",
            f"grype sbom:{sbom} --output json",
        ]
        assert artifacts.grype_path.read_text() == REPORT
        assert pipeline.result is not None
        assert pipeline.result.value("save-grype-report") == artifacts.grype_path
        assert pipeline.state == PipelineState.COMPLETED_SUCCESS

    def test_report_is_not_written_to_pipeline_stdout(
        self, recording_runner, artifacts: ArtifactConfig
    ) -> None:
        stdout = io.BytesIO()
        recording_runner.outputs["grype"] = REPORT
        ImageScanPipeline(artifacts=artifacts, stdout=stdout, runner=recording_runner).run()

        assert stdout.getvalue() == b""
        assert recording_runner.invocations[0].options.stdout is stdout

    def test_sbom_failure_skips_scan(self, recording_runner, artifacts: ArtifactConfig) -> None:
        recording_runner.codes["syft"] = 1

        with pytest.raises(PipelineError, match="syft scan"):
            ImageScanPipeline(artifacts=artifacts, runner=recording_runner).run()

        assert recording_runner.programs == ["syft"]
        assert not artifacts.grype_path.exists()

    def test_scan_failure_skips_save(self, recording_runner, artifacts: ArtifactConfig) -> None:
        recording_runner.codes["grype"] = 1

        with pytest.raises(PipelineError) as exc_info:
            ImageScanPipeline(artifacts=artifacts, runner=recording_runner).run()

        assert str(exc_info.value) == f"grype sbom:{artifacts.sbom_path} --output json: exit code 1"
        assert not artifacts.grype_path.exists()

    def test_dry_run_does_not_save(self, recording_runner, artifacts: ArtifactConfig) -> None:
        pipeline = ImageScanPipeline(artifacts=artifacts, dry_run=True, runner=recording_runner)
        pipeline.run()

        assert len(recording_runner.invocations) == 2
        assert Path(artifacts.directory).is_dir()
        assert not artifacts.grype_path.exists()

    def test_with_artifact_config(self, recording_runner, tmp_path: Path) -> None:
        other = ArtifactConfig(directory=str(tmp_path / "other"))
        pipeline = ImageScanPipeline(runner=recording_runner).with_artifact_config(other)
        assert pipeline.artifacts is other
