"""Configuration validation for workflow-engine.

Warns on unknown keys and wrongly typed values. Never raises: invalid
values are reported and then ignored by the loader in favour of defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, Dict, List, Optional, Set, Tuple, Type, Union

from workflow_engine.config.models import VALID_ENGINES
from workflow_engine.core.logging import get_logger

LOGGER = get_logger(__name__)

VALID_TOP_LEVEL_KEYS: Set[str] = {
    "dry_run",
    "timeout",
    "artifacts",
    "pipeline",
    "smoke",
}

_TypeSpec = Union[Type[Any], Tuple[Type[Any], ...]]

# Expected types of keys inside each section
SECTION_KEYS: Dict[str, Dict[str, _TypeSpec]] = {
    "artifacts": {
        "directory": str,
        "sbom_filename": str,
        "grype_filename": str,
        "image_tarball": str,
    },
    "pipeline": {
        "max_workers": int,
    },
    "smoke": {
        "engine": str,
        "image": str,
    },
}


@dataclass
class ConfigValidationWarning:
    """A validation warning for configuration."""

    message: str
    source: str
    key: Optional[str] = None
    suggestion: Optional[str] = None


def validate_config(
    data: Dict[str, Any],
    source: str,
) -> List[ConfigValidationWarning]:
    """Validate configuration dictionary.

    Args:
        data: Config dictionary to validate.
        source: Source file path for warning messages.

    Returns:
        List of validation warnings.
    """
    warnings: List[ConfigValidationWarning] = []

    if not isinstance(data, dict):
        warnings.append(ConfigValidationWarning(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
        ))
        return warnings

    for key in data.keys():
        if key not in VALID_TOP_LEVEL_KEYS:
            _add(warnings, ConfigValidationWarning(
                message=f"Unknown top-level key '{key}'",
                source=source,
                key=key,
                suggestion=_suggest_key(key, VALID_TOP_LEVEL_KEYS),
            ))

    dry_run = data.get("dry_run")
    if dry_run is not None and not isinstance(dry_run, bool):
        _add(warnings, ConfigValidationWarning(
            message=f"'dry_run' must be a boolean, got {type(dry_run).__name__}",
            source=source,
            key="dry_run",
        ))

    timeout = data.get("timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            _add(warnings, ConfigValidationWarning(
                message=f"'timeout' must be a number, got {type(timeout).__name__}",
                source=source,
                key="timeout",
            ))
        elif timeout <= 0:
            _add(warnings, ConfigValidationWarning(
                message="'timeout' must be greater than zero",
                source=source,
                key="timeout",
            ))

    for section, expected in SECTION_KEYS.items():
        value = data.get(section)
        if value is None:
            continue
        if not isinstance(value, dict):
            _add(warnings, ConfigValidationWarning(
                message=f"'{section}' must be a mapping, got {type(value).__name__}",
                source=source,
                key=section,
            ))
            continue

        for key, item in value.items():
            if key not in expected:
                _add(warnings, ConfigValidationWarning(
                    message=f"Unknown key '{section}.{key}'",
                    source=source,
                    key=f"{section}.{key}",
                    suggestion=_suggest_key(key, set(expected)),
                ))
            elif isinstance(item, bool) or not isinstance(item, expected[key]):
                _add(warnings, ConfigValidationWarning(
                    message=f"'{section}.{key}' has invalid type {type(item).__name__}",
                    source=source,
                    key=f"{section}.{key}",
                ))

    smoke = data.get("smoke")
    if isinstance(smoke, dict):
        engine = smoke.get("engine")
        if isinstance(engine, str) and engine not in VALID_ENGINES:
            _add(warnings, ConfigValidationWarning(
                message=f"Unknown container engine '{engine}'",
                source=source,
                key="smoke.engine",
                suggestion=_suggest_key(engine, VALID_ENGINES),
            ))

    return warnings


def _add(warnings: List[ConfigValidationWarning], warning: ConfigValidationWarning) -> None:
    warnings.append(warning)
    _log_warning(warning)


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Args:
        invalid_key: The invalid key entered.
        valid_keys: Set of valid keys.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(warning: ConfigValidationWarning) -> None:
    """Log a validation warning."""
    msg = f"{warning.message} in {warning.source}"
    if warning.suggestion:
        msg += f" (did you mean '{warning.suggestion}'?)"
    LOGGER.warning(msg)
