"""
Configuration loading for nullcommits.

Provides a loader for the user configuration file and the environment
overrides. See :mod:`nullcommits.config.loader` for implementation
details.
"""

from .loader import ConfigError, load_config, parse_budget, resolve_diff_budget  # noqa: F401
