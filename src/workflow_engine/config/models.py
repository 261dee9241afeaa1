"""Configuration data models for workflow-engine.

Defines typed configuration classes that represent the
.workflow-engine.yml structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

DEFAULT_ARTIFACT_DIRECTORY = "test/.artifacts"
DEFAULT_IMAGE_TARBALL = "test/.artifacts/build-image/test-local.tar"

# Container engines the smoke test can use
VALID_ENGINES = {"docker", "podman"}


@dataclass
class ArtifactConfig:
    """Where pipelines read and write their files.

    Filenames are relative to ``directory``; ``image_tarball`` is a path of
    its own (relative paths resolve against the working directory).
    """

    directory: str = DEFAULT_ARTIFACT_DIRECTORY
    sbom_filename: str = "sbom.json"
    grype_filename: str = "grype-report.json"
    image_tarball: str = DEFAULT_IMAGE_TARBALL

    @property
    def sbom_path(self) -> Path:
        return Path(self.directory) / self.sbom_filename

    @property
    def grype_path(self) -> Path:
        return Path(self.directory) / self.grype_filename


@dataclass
class PipelineSettings:
    """Pipeline execution settings."""

    # Upper bound on threads for a concurrent stage
    max_workers: int = 4


@dataclass
class SmokeConfig:
    """Containerized smoke test settings."""

    engine: str = "docker"
    image: str = "workflow-engine:latest"


@dataclass
class WorkflowEngineConfig:
    """Complete workflow-engine configuration.

    Example .workflow-engine.yml:
        dry_run: false
        timeout: 600
        artifacts:
          directory: build/artifacts
          sbom_filename: sbom.json
        smoke:
          engine: podman
    """

    dry_run: bool = False
    # Overall deadline in seconds for a pipeline run, None for no deadline
    timeout: Optional[float] = None
    artifacts: ArtifactConfig = field(default_factory=ArtifactConfig)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    smoke: SmokeConfig = field(default_factory=SmokeConfig)

    # Metadata (not from YAML, set by loader)
    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def sources(self) -> List[str]:
        return list(self._config_sources)
