"""Environment variable loading and validation."""

import os
import tempfile
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError
from .models import LogFormat, LogLevel

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}
_VALID_LEVELS = [level.value for level in LogLevel]
_VALID_FORMATS = [log_format.value for log_format in LogFormat]


class EnvironmentConfig:
    """Process-wide settings read from the environment."""

    def __init__(
        self,
        experimental: bool = False,
        workdir: Optional[Path] = None,
        log_level: Optional[str] = None,
        log_format: Optional[str] = None,
    ):
        self.experimental = experimental
        self.workdir = workdir or Path(tempfile.gettempdir()) / "updatecore"
        self.log_level = log_level
        self.log_format = log_format


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - UPDATECORE_EXPERIMENTAL: Enable experimental features such as autodiscovery
    - UPDATECORE_WORKDIR: Root directory of SCM working copies
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_FORMAT: Log output format (json or key-value)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If any variable holds an invalid value
    """
    errors = []

    experimental_str = os.getenv("UPDATECORE_EXPERIMENTAL", "")
    workdir_str = os.getenv("UPDATECORE_WORKDIR")
    log_level = os.getenv("LOG_LEVEL")
    log_format = os.getenv("LOG_FORMAT")

    experimental = False
    normalized = experimental_str.strip().lower()
    if normalized in _TRUTHY:
        experimental = True
    elif normalized not in _FALSY:
        errors.append(
            f"Invalid UPDATECORE_EXPERIMENTAL: '{experimental_str}'. Must be true or false."
        )

    if log_level and log_level.upper() not in _VALID_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(_VALID_LEVELS)}"
        )

    if log_format and log_format not in _VALID_FORMATS:
        errors.append(
            f"Invalid LOG_FORMAT: '{log_format}'. Must be one of: {', '.join(_VALID_FORMATS)}"
        )

    workdir = None
    if workdir_str:
        workdir = Path(workdir_str).expanduser()
        if workdir.exists() and not workdir.is_dir():
            errors.append(f"UPDATECORE_WORKDIR is not a directory: {workdir}")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Check the variables exported in your shell or .env file",
                "Unset variables you do not need; every one of them is optional",
            ],
        )

    return EnvironmentConfig(
        experimental=experimental,
        workdir=workdir,
        log_level=log_level.upper() if log_level else None,
        log_format=log_format,
    )
