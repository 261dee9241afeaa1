"""Home directory resolution for workflow-engine."""

from __future__ import annotations

import os
from pathlib import Path

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".workflow-engine"

# Environment variable to override home directory
WORKFLOW_ENGINE_HOME_ENV = "WORKFLOW_ENGINE_HOME"


def get_workflow_engine_home() -> Path:
    """Get the workflow-engine home directory path.

    Resolution order:
    1. WORKFLOW_ENGINE_HOME environment variable (if set)
    2. ~/.workflow-engine (default)

    Returns:
        Path to the workflow-engine home directory.
    """
    env_home = os.environ.get(WORKFLOW_ENGINE_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME
