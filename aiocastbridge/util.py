"""Utility functions for aiocastbridge."""

from __future__ import annotations

import importlib
from typing import Any

from .errors import ConfigurationError


def import_from_path(path: str) -> Any:
    """Import the object named by a ``module:attribute`` path.

    Nested attributes are separated by dots, e.g. ``pkg.backend:Factory.create``.

    Raises:
        ConfigurationError: If the path is malformed or cannot be imported.
    """
    module_name, sep, attr_path = path.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Expected 'module:attribute', got {path!r}")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as err:
        raise ConfigurationError(f"Could not import module {module_name!r}: {err}") from err
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as err:
            raise ConfigurationError(f"{module_name!r} has no attribute {attr_path!r}") from err
    return target


def parse_snowflake(value: str, *, name: str) -> int:
    """Parse a numeric identity value, raising a clear error when it is invalid."""
    try:
        parsed = int(value.strip())
    except (AttributeError, ValueError) as err:
        raise ConfigurationError(f"{name} must be a numeric id, got {value!r}") from err
    if parsed <= 0:
        raise ConfigurationError(f"{name} must be a positive id, got {parsed}")
    return parsed
