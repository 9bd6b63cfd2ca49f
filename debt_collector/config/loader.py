"""Layered configuration loading."""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..collector_logging import get_logger
from .legacy import SETTINGS_FILENAME, load_settings_file
from .models import ENV_VARS, CollectorConfig

logger = get_logger()


def _resolve_settings_file(settings_file: Path | None) -> tuple[Path, Path]:
    """Return (settings file, project directory) for the given argument.

    A directory means "the settings file inside this project"; a file path
    is used as is; nothing means the current directory.
    """
    if settings_file is None:
        project_dir = Path.cwd()
        return project_dir / SETTINGS_FILENAME, project_dir
    if settings_file.is_dir():
        return settings_file / SETTINGS_FILENAME, settings_file
    return settings_file, settings_file.parent


def _validated(config_dict: dict[str, Any]) -> CollectorConfig:
    """Build the config, dropping only the settings that fail validation."""
    try:
        return CollectorConfig(**config_dict)
    except ValidationError as e:
        logger.warning(f"Configuration validation failed: {e.error_count()} errors")

    valid: dict[str, Any] = {}
    for key, value in config_dict.items():
        if key not in CollectorConfig.model_fields:
            logger.warning(f"Ignoring unknown setting {key}")
            continue
        try:
            CollectorConfig(**{**valid, key: value})
        except ValidationError:
            logger.warning(f"Ignoring invalid setting {key}={value!r}")
            continue
        valid[key] = value
    return CollectorConfig(**valid)


def load_config(
    settings_file: Path | None = None, load_env_file: bool = True, **overrides: Any
) -> CollectorConfig:
    """Load configuration from all sources.

    Precedence (highest to lowest):
    1. Explicit overrides (``None`` values are ignored)
    2. Environment variables
    3. Settings file
    4. Defaults

    A ``.env`` file in the project directory is loaded into the environment
    first; variables already set are not overwritten.
    """
    path, project_dir = _resolve_settings_file(settings_file)

    if load_env_file:
        env_file = project_dir / ".env"
        if env_file.is_file():
            load_dotenv(env_file, override=False)
            logger.debug(f"Loaded environment from {env_file}")

    config_dict: dict[str, Any] = {}

    file_settings = load_settings_file(path)
    if file_settings:
        config_dict.update(file_settings)
        logger.debug(f"Loaded {len(file_settings)} settings from {path}")

    env_count = 0
    for var, field in ENV_VARS.items():
        value = os.environ.get(var)
        if value:
            config_dict[field] = value
            env_count += 1
    if env_count:
        logger.debug(f"Applied {env_count} environment variables")

    explicit = {k: v for k, v in overrides.items() if v is not None}
    config_dict.update(explicit)
    if explicit:
        logger.debug(f"Applied {len(explicit)} explicit overrides")

    return _validated(config_dict)
