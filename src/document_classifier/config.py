"""
Environment Helpers
===================

Typed lookups for settings that fall back to environment variables.
Explicit constructor arguments always win over the environment.
"""

import os

from .errors import ConfigurationError


def env_int(name: str, default: int) -> int:
    """Read an integer setting from the environment."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


def env_float(name: str, default: float) -> float:
    """Read a float setting from the environment."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
