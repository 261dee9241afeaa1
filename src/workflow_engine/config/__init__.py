"""Configuration module for workflow-engine.

Provides configuration file loading, parsing, and validation with support for:
- Project-level config (.workflow-engine.yml)
- Global config (~/.workflow-engine/config.yml)
- Environment variable expansion
"""

from workflow_engine.config.models import (
    ArtifactConfig,
    PipelineSettings,
    SmokeConfig,
    WorkflowEngineConfig,
)
from workflow_engine.config.loader import (
    ConfigError,
    find_global_config,
    find_project_config,
    load_config,
)
from workflow_engine.config.validation import ConfigValidationWarning, validate_config

__all__ = [
    "ArtifactConfig",
    "ConfigError",
    "ConfigValidationWarning",
    "PipelineSettings",
    "SmokeConfig",
    "WorkflowEngineConfig",
    "find_global_config",
    "find_project_config",
    "load_config",
    "validate_config",
]
