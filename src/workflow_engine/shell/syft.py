"""Syft SBOM generator command."""

from __future__ import annotations

from workflow_engine.shell.command import ToolCommand

DEFAULT_SBOM_FORMAT = "syft-json"


class SyftCommand(ToolCommand):
    """Builds syft invocations."""

    program = "syft"

    def version(self) -> "SyftCommand":
        return self._set_args("version")

    def scan_image(
        self,
        image_tarball: str,
        sbom_filename: str,
        sbom_format: str = DEFAULT_SBOM_FORMAT,
    ) -> "SyftCommand":
        """Generate an SBOM for a saved image tarball.

        Args:
            image_tarball: Path to an image saved with ``docker save``.
            sbom_filename: Where syft writes the SBOM.
            sbom_format: Syft output format name.
        """
        return self._set_args(
            "scan",
            f"docker-archive:{image_tarball}",
            "--output",
            f"{sbom_format}={sbom_filename}",
        )
