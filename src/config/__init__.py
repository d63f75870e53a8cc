"""Centralized configuration management for formtree.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from src.config import EnvVar, get_environment
    >>>
    >>> limit = get_environment(EnvVar.RADIO_MAX_OPTIONS)  # Returns int: 3
    >>> limit = get_environment(EnvVar.RADIO_MAX_OPTIONS, override=5)
    >>>
    >>> for var in list_environment_variables("import"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    logging: Log output configuration
    import: Heuristics applied when importing a bare JSON Schema
    output: Serialization of exported form documents
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Main interface
    get_environment,
    get_environment_info,
    # Introspection
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Introspection
    "list_environment_variables",
]
