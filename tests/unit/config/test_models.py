"""Tests for workflow_engine.config.models."""

from __future__ import annotations

from pathlib import Path

from workflow_engine.config.models import (
    DEFAULT_ARTIFACT_DIRECTORY,
    DEFAULT_IMAGE_TARBALL,
    ArtifactConfig,
    PipelineSettings,
    SmokeConfig,
    WorkflowEngineConfig,
)


class TestArtifactConfig:
    """Tests for ArtifactConfig dataclass."""

    def test_defaults(self) -> None:
        config = ArtifactConfig()
        assert config.directory == DEFAULT_ARTIFACT_DIRECTORY
        assert config.image_tarball == DEFAULT_IMAGE_TARBALL
        assert config.sbom_path == Path("test/.artifacts/sbom.json")
        assert config.grype_path == Path("test/.artifacts/grype-report.json")

    def test_paths_follow_directory(self) -> None:
        config = ArtifactConfig(directory="out", sbom_filename="s.json", grype_filename="g.json")
        assert config.sbom_path == Path("out") / "s.json"
        assert config.grype_path == Path("out") / "g.json"


class TestWorkflowEngineConfig:
    """Tests for WorkflowEngineConfig dataclass."""

    def test_defaults(self) -> None:
        config = WorkflowEngineConfig()
        assert config.dry_run is False
        assert config.timeout is None
        assert config.pipeline == PipelineSettings()
        assert config.smoke == SmokeConfig()
        assert config.smoke.engine == "docker"
        assert config.sources == []

    def test_sources_is_a_copy(self) -> None:
        config = WorkflowEngineConfig()
        config._config_sources = ["cli"]
        sources = config.sources
        sources.append("other")
        assert config.sources == ["cli"]
