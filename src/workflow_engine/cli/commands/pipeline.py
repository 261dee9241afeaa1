"""Shared implementation for commands that run a pipeline."""

from __future__ import annotations

import sys
from abc import abstractmethod
from argparse import Namespace
from typing import Any, Dict

from workflow_engine.cli.commands import Command
from workflow_engine.cli.exit_codes import (
    EXIT_ENVIRONMENT_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_PIPELINE_FAILURE,
    EXIT_SUCCESS,
)
from workflow_engine.config.loader import get_default_config
from workflow_engine.config.models import WorkflowEngineConfig
from workflow_engine.core.logging import get_logger
from workflow_engine.pipeline import Pipeline, PipelineError
from workflow_engine.shell.cancel import CancelToken

LOGGER = get_logger(__name__)


class PipelineCommand(Command):
    """Runs one pipeline and maps its result to an exit code."""

    @abstractmethod
    def build_pipeline(
        self, args: Namespace, config: WorkflowEngineConfig, **common: Any
    ) -> Pipeline:
        """Create the pipeline to run.

        Args:
            args: Parsed command-line arguments.
            config: Loaded configuration.
            **common: Keyword arguments every Pipeline accepts (streams,
                dry run, cancel token, worker bound).
        """

    def execute(self, args: Namespace, config: WorkflowEngineConfig | None = None) -> int:
        """Run the pipeline.

        Returns:
            EXIT_SUCCESS, EXIT_PIPELINE_FAILURE if a mandatory step failed,
            EXIT_INVALID_USAGE for an unusable configuration, or
            EXIT_ENVIRONMENT_ERROR on a local fault.
        """
        if config is None:
            config = get_default_config()

        token = CancelToken()
        common: Dict[str, Any] = {
            "stdout": sys.stdout,
            "stderr": sys.stderr,
            "dry_run": config.dry_run,
            "cancel_token": token,
            "max_workers": config.pipeline.max_workers,
        }

        try:
            pipeline = self.build_pipeline(args, config, **common)
        except ValueError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        if config.timeout:
            token.cancel_after(config.timeout)

        try:
            pipeline.run()
        except PipelineError as e:
            LOGGER.error(f"{self.name} failed:\n{e}")
            return EXIT_PIPELINE_FAILURE
        except OSError as e:
            LOGGER.error(f"{self.name} aborted: {e}")
            return EXIT_ENVIRONMENT_ERROR
        finally:
            token.clear_deadline()

        return EXIT_SUCCESS
