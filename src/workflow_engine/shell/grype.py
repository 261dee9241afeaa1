"""Grype vulnerability scanner command."""

from __future__ import annotations

from workflow_engine.shell.command import ToolCommand


class GrypeCommand(ToolCommand):
    """Builds grype invocations.

    Operations:
    - ``grype version``
    - ``grype sbom:<file> --output json`` to evaluate an SBOM
    """

    program = "grype"

    def version(self) -> "GrypeCommand":
        return self._set_args("version")

    def scan_sbom(self, sbom_filename: str) -> "GrypeCommand":
        """Scan an SBOM file, writing the JSON report to stdout."""
        return self._set_args(f"sbom:{sbom_filename}", "--output", "json")
