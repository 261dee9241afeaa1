"""Container engine commands (docker, podman)."""

from __future__ import annotations

from typing import TypeVar

from workflow_engine.shell.command import ToolCommand

C = TypeVar("C", bound="ContainerEngineCommand")


class ContainerEngineCommand(ToolCommand):
    """Operations shared by docker-compatible container engines."""

    def version(self: C) -> C:
        return self._set_args("version")

    def info(self: C) -> C:
        """Confirm the engine daemon/runtime is reachable."""
        return self._set_args("info")

    def run_image(self: C, image: str, *command: str) -> C:
        """Run ``command`` in a throwaway container of ``image``."""
        return self._set_args("run", "--rm", image, *command)


class DockerCommand(ContainerEngineCommand):
    program = "docker"


class PodmanCommand(ContainerEngineCommand):
    program = "podman"


ENGINES = {
    DockerCommand.program: DockerCommand,
    PodmanCommand.program: PodmanCommand,
}


def get_engine_command(name: str) -> type[ContainerEngineCommand]:
    """Return the command class for a container engine name.

    Raises:
        ValueError: If the engine is not supported.
    """
    try:
        return ENGINES[name]
    except KeyError:
        raise ValueError(
            f"Unsupported container engine '{name}' (expected one of: {', '.join(sorted(ENGINES))})"
        ) from None
