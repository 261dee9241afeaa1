"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workflow_engine.config.models import WorkflowEngineConfig


class Command(ABC):
    """Base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier.

        Returns:
            String name of the command.
        """

    @abstractmethod
    def execute(self, args: Namespace, config: "WorkflowEngineConfig | None" = None) -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Optional workflow-engine configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


# Import command implementations for convenience
# ruff: noqa: E402
from workflow_engine.cli.commands.pipeline import PipelineCommand
from workflow_engine.cli.commands.debug import DebugCommand
from workflow_engine.cli.commands.image_scan import ImageScanCommand
from workflow_engine.cli.commands.smoke_test import SmokeTestCommand

__all__ = [
    "Command",
    "PipelineCommand",
    "DebugCommand",
    "ImageScanCommand",
    "SmokeTestCommand",
]
