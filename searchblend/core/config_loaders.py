"""
Configuration Loading Functions.

Handles loading searchblend configuration from YAML and applying
environment variable overrides.

Configuration precedence: 1. Env vars, 2. YAML file, 3. Defaults

Environment Variables
---------------------
    SEARCHBLEND_BLOCK_SIZE       blending.block_size (1-1000)
    SEARCHBLEND_BOOST_POSITION   blending.boost_position (0-1000)
    SEARCHBLEND_BOOST_COUNT      blending.boost_count (0-1000)
    SEARCHBLEND_LOG_LEVEL        logging.level

String values in the YAML file may reference the environment with
``${VAR_NAME}`` or ``${VAR_NAME:default}``.
"""

import dataclasses
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from searchblend.core.config import Config
from searchblend.core.exceptions import ConfigValidationError
from searchblend.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILENAMES = ("searchblend.yaml", "searchblend.yml")
LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Handles strings with ${VAR_NAME} or ${VAR_NAME:default} syntax inside
    nested dictionaries and lists. A string that consists of a single
    reference to an integer (``${BLOCK:10}``) becomes an int, so numeric
    settings can come from the environment.

    Args:
        value: Configuration value (string, dict, list, or primitive)

    Returns:
        Value with all environment variables expanded
    """
    if isinstance(value, str):

        def replace_env_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        expanded = _ENV_PATTERN.sub(replace_env_var, value)
        if expanded != value and _ENV_PATTERN.fullmatch(value) and expanded.isdigit():
            return int(expanded)
        return expanded
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def get_env_int(
    name: str,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> Optional[int]:
    """Read an integer environment variable, clamped to bounds.

    Returns None when the variable is unset or not an integer.
    """
    value = os.environ.get(name)
    if value is None:
        return None

    try:
        int_value = int(value)
    except ValueError:
        logger.warning(f"Invalid integer value for {name}={value}, ignoring")
        return None

    if min_value is not None and int_value < min_value:
        return min_value
    if max_value is not None and int_value > max_value:
        return max_value
    return int_value


def _apply_env_overrides(config: Config) -> Config:
    """
    Apply environment variable overrides to configuration.

    The blending section is rebuilt rather than mutated so that its
    validation runs again on the overridden values.
    """
    overrides = {}
    block_size = get_env_int("SEARCHBLEND_BLOCK_SIZE", min_value=1, max_value=1000)
    if block_size is not None:
        overrides["block_size"] = block_size

    boost_position = get_env_int("SEARCHBLEND_BOOST_POSITION", min_value=0, max_value=1000)
    if boost_position is not None:
        overrides["boost_position"] = boost_position

    boost_count = get_env_int("SEARCHBLEND_BOOST_COUNT", min_value=0, max_value=1000)
    if boost_count is not None:
        overrides["boost_count"] = boost_count

    if overrides:
        config.blending = dataclasses.replace(config.blending, **overrides)

    log_level = os.environ.get("SEARCHBLEND_LOG_LEVEL")
    if log_level:
        if log_level.upper() in LOG_LEVELS:
            config.logging.level = log_level.upper()
        else:
            logger.warning(f"Ignoring unknown SEARCHBLEND_LOG_LEVEL={log_level}")

    return config


def load_config(
    config_path: Optional[Path] = None, base_path: Optional[Path] = None
) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    A missing file is not an error: defaults are used. A file that exists
    but cannot be parsed raises ConfigValidationError, because blending
    with a silently different configuration would change pagination.

    Args:
        config_path: Path to config file. Defaults to searchblend.yaml in base_path.
        base_path: Base path for relative paths. Defaults to current directory.

    Returns:
        Config object with all settings.
    """
    base_path = base_path or Path.cwd()

    if config_path is None:
        for filename in DEFAULT_CONFIG_FILENAMES:
            candidate = base_path / filename
            if candidate.exists():
                config_path = candidate
                break
        else:
            return _create_default_config(base_path)
    if not config_path.exists():
        logger.debug("Config file not found, using defaults", path=str(config_path))
        return _create_default_config(base_path)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigValidationError(
            f"Could not parse {config_path}: {e}", field=str(config_path)
        ) from e

    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"{config_path} must contain a mapping at the top level",
            field=str(config_path),
        )

    config = Config.from_dict(data, base_path)
    return _apply_env_overrides(config)


def _create_default_config(base_path: Path) -> Config:
    """Create default configuration with environment overrides."""
    config = Config()
    config._base_path = base_path
    return _apply_env_overrides(config)


def save_config(config: Config, config_path: Path) -> None:
    """Write configuration back to YAML in the snake_case key style."""
    data = {
        "backends": {
            "primary": dataclasses.asdict(config.backends.primary),
            "secondary": dataclasses.asdict(config.backends.secondary),
        },
        "blending": dataclasses.asdict(config.blending),
        "facets": {
            mapping.field: {
                "secondary": mapping.secondary,
                "type": mapping.type,
                "values": dict(mapping.values),
            }
            for mapping in config.facets
        },
        "logging": dataclasses.asdict(config.logging),
    }
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
