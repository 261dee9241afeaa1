"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (.workflow-engine.yml)
- Global config (~/.workflow-engine/config.yml)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, Union

import yaml

from workflow_engine.config.models import (
    ArtifactConfig,
    PipelineSettings,
    SmokeConfig,
    WorkflowEngineConfig,
)
from workflow_engine.config.validation import validate_config
from workflow_engine.core.errors import WorkflowEngineError
from workflow_engine.core.logging import get_logger
from workflow_engine.core.paths import get_workflow_engine_home

LOGGER = get_logger(__name__)

# Config file names
PROJECT_CONFIG_NAMES = [
    ".workflow-engine.yml",
    ".workflow-engine.yaml",
    "workflow-engine.yml",
    "workflow-engine.yaml",
]
GLOBAL_CONFIG_NAME = "config.yml"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(WorkflowEngineError):
    """Configuration loading or parsing error."""

    pass


def load_config(
    project_root: Path,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
) -> WorkflowEngineConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config
    3. Global config (~/.workflow-engine/config.yml)
    4. Built-in defaults

    Args:
        project_root: Directory searched for the project config file.
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.

    Returns:
        Merged WorkflowEngineConfig instance.

    Raises:
        ConfigError: If specified config file doesn't exist or has parse errors.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    # Layer 1: Global config
    global_path = find_global_config()
    if global_path is not None:
        try:
            global_dict = load_yaml_file(global_path)
            validate_config(global_dict, source=str(global_path))
            merged = merge_configs(merged, global_dict)
            sources.append(f"global:{global_path}")
            LOGGER.debug(f"Loaded global config from {global_path}")
        except (ConfigError, OSError, yaml.YAMLError) as e:
            LOGGER.warning(f"Failed to load global config: {e}")

    # Layer 2: Project or custom config
    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        merged = merge_configs(merged, _load_layer(cli_config_path))
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")
    else:
        project_path = find_project_config(project_root)
        if project_path is not None:
            merged = merge_configs(merged, _load_layer(project_path))
            sources.append(f"project:{project_path}")
            LOGGER.debug(f"Loaded project config from {project_path}")

    # Layer 3: CLI overrides
    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def _load_layer(path: Path) -> Dict[str, Any]:
    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    validate_config(data, source=str(path))
    return data


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find config file in project root.

    Args:
        project_root: Directory to search in.

    Returns:
        Path to config file if found, None otherwise.
    """
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def find_global_config() -> Optional[Path]:
    """Find global config at ~/.workflow-engine/config.yml.

    Returns:
        Path to global config if it exists, None otherwise.
    """
    config_path = get_workflow_engine_home() / GLOBAL_CONFIG_NAME
    if config_path.exists():
        return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Args:
        path: Path to YAML file.

    Returns:
        Parsed dictionary.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
        FileNotFoundError: If file doesn't exist.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        data: Config data (dict, list, or scalar).

    Returns:
        Data with environment variables expanded.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge

    Args:
        base: Base configuration dictionary.
        overlay: Overlay configuration to merge on top.

    Returns:
        Merged configuration dictionary.
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def _typed(
    data: Dict[str, Any],
    key: str,
    expected: Union[Type[Any], Tuple[Type[Any], ...]],
    default: Any,
) -> Any:
    """Return data[key] if it has the expected type, otherwise the default."""
    value = data.get(key)
    if value is None:
        return default
    if expected is not bool and isinstance(value, bool):
        return default
    if not isinstance(value, expected):
        return default
    return value


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def dict_to_config(data: Dict[str, Any]) -> WorkflowEngineConfig:
    """Convert a merged config dict to typed WorkflowEngineConfig.

    Values of the wrong type were already reported by validation and fall
    back to their defaults here.

    Args:
        data: Configuration dictionary.

    Returns:
        Typed WorkflowEngineConfig instance.
    """
    defaults = WorkflowEngineConfig()

    artifacts_data = _section(data, "artifacts")
    artifacts = ArtifactConfig(
        directory=_typed(artifacts_data, "directory", str, defaults.artifacts.directory),
        sbom_filename=_typed(
            artifacts_data, "sbom_filename", str, defaults.artifacts.sbom_filename
        ),
        grype_filename=_typed(
            artifacts_data, "grype_filename", str, defaults.artifacts.grype_filename
        ),
        image_tarball=_typed(
            artifacts_data, "image_tarball", str, defaults.artifacts.image_tarball
        ),
    )

    pipeline_data = _section(data, "pipeline")
    max_workers = _typed(pipeline_data, "max_workers", int, defaults.pipeline.max_workers)
    pipeline = PipelineSettings(max_workers=max(1, max_workers))

    smoke_data = _section(data, "smoke")
    smoke = SmokeConfig(
        engine=_typed(smoke_data, "engine", str, defaults.smoke.engine),
        image=_typed(smoke_data, "image", str, defaults.smoke.image),
    )

    timeout = _typed(data, "timeout", (int, float), None)
    if timeout is not None and timeout <= 0:
        timeout = None

    return WorkflowEngineConfig(
        dry_run=_typed(data, "dry_run", bool, False),
        timeout=float(timeout) if timeout is not None else None,
        artifacts=artifacts,
        pipeline=pipeline,
        smoke=smoke,
    )


def get_default_config() -> WorkflowEngineConfig:
    """Get default configuration.

    Returns:
        Default WorkflowEngineConfig instance.
    """
    return WorkflowEngineConfig()
