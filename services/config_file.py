# ============================================================================
# CONFIG FILE LOADER
# ============================================================================
# STATUS: Service - YAML checker configuration
# PURPOSE: Load checker descriptors and global settings from a YAML file
# CREATED: 19 OCT 2026
# ============================================================================
"""
Config File Loader

Reads a YAML file of the form:

    default_interval: 1s        # optional
    max_attempts: 30            # optional
    checks:
      - type: http
        id: api
        address: http://api:8080/healthz
        expected-status-codes: 200-299
      - type: tcp
        id: db
        address: db:5432

Dashed keys are accepted and normalized to underscores. Entries are
validated as CheckerDescriptors; an entry without an id gets its list
position as id.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from core.config.durations import parse_duration
from core.logging import ComponentType, get_logger
from core.models.descriptor import CheckerDescriptor, describe_validation_error
from checkers import ConfigurationError

logger = get_logger(__name__, ComponentType.FACTORY)

_TOP_LEVEL_KEYS = frozenset({"default_interval", "max_attempts", "checks"})


class ConfigFileError(ConfigurationError):
    """Config file missing, unparsable, or structurally invalid."""
    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        super().__init__(f"config file {self.path}: {reason}")


@dataclass
class ConfigFile:
    """Contents of a loaded config file. None = not set in the file."""
    checks: List[CheckerDescriptor] = field(default_factory=list)
    default_interval: Optional[float] = None
    max_attempts: Optional[int] = None


def load_config_file(path: Union[str, Path]) -> ConfigFile:
    """
    Load and validate a YAML config file.

    Raises:
        ConfigFileError: Read, parse or validation failure
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigFileError(path, e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigFileError(path, "top level must be a mapping")

    data = _normalize_keys(data)
    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigFileError(path, f"unknown keys: {', '.join(unknown)}")

    config = ConfigFile()

    if data.get("default_interval") is not None:
        try:
            config.default_interval = parse_duration(data["default_interval"])
        except ValueError as e:
            raise ConfigFileError(path, f"default_interval: {e}") from e

    if data.get("max_attempts") is not None:
        max_attempts = data["max_attempts"]
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 0:
            raise ConfigFileError(path, "max_attempts must be a non-negative integer")
        config.max_attempts = max_attempts

    checks = data.get("checks") or []
    if not isinstance(checks, list):
        raise ConfigFileError(path, "checks must be a list")

    for index, entry in enumerate(checks):
        if not isinstance(entry, dict):
            raise ConfigFileError(path, f"checks[{index}] must be a mapping")
        entry = _normalize_keys(entry)
        entry.setdefault("id", str(index))
        try:
            config.checks.append(CheckerDescriptor(**entry))
        except ValidationError as e:
            raise ConfigFileError(path, f"checks[{index}]: {describe_validation_error(e)}") from e

    logger.info(f"Loaded {len(config.checks)} checks from {path}")
    return config


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    normalized = {}
    for key, value in data.items():
        key = str(key).replace("-", "_")
        if key == "header":
            key = "headers"
        normalized[key] = value
    return normalized


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ConfigFile",
    "ConfigFileError",
    "load_config_file",
]
