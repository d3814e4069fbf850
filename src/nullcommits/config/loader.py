"""
Configuration loader for nullcommits.

Settings are read from a JSON file named ``.nullcommitsrc`` in the
user's home directory. Every key is optional:

- ``apiKey`` (str): OpenAI API key
- ``diffBudget`` (int): maximum number of diff characters sent to the model
- ``model`` (str): chat model name
- ``baseUrl`` (str): base URL of the OpenAI compatible API
- ``requestTimeout`` (int|float): request timeout in seconds

The ``OPENAI_API_KEY`` and ``NULLCOMMITS_DIFF_BUDGET`` environment
variables override the file. If the file is malformed or a value is
invalid, a :class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from nullcommits.diff.budget import DEFAULT_DIFF_BUDGET


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings or logging errors in
# environments where the root logger may be closed. Propagation is disabled
# until the CLI configures logging.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


API_KEY_ENV = "OPENAI_API_KEY"
DIFF_BUDGET_ENV = "NULLCOMMITS_DIFF_BUDGET"

DEFAULT_CONFIG: Dict[str, Any] = {
    "diffBudget": DEFAULT_DIFF_BUDGET,
    "model": "gpt-5.1",
    "baseUrl": "https://api.openai.com/v1",
    "requestTimeout": 60,
}

_BUDGET_PATTERN = re.compile(r"^(\d+)(K)?$", re.IGNORECASE)


class ConfigError(Exception):
    """Raised when the configuration file or a configured value is invalid."""

    pass


def _get_config_path() -> Path:
    """Return the path of the user configuration file (``~/.nullcommitsrc``)."""
    return Path.home() / ".nullcommitsrc"


def parse_budget(value: Union[int, str]) -> int:
    """Parse a diff budget such as ``128000`` or ``"128K"``.

    Raises
    ------
    ConfigError
        If the value is not a positive whole number.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid diff budget: {value!r}")
    if isinstance(value, int):
        budget = value
    elif isinstance(value, str):
        match = _BUDGET_PATTERN.match(value.strip())
        if not match:
            raise ConfigError(
                f"Invalid diff budget {value!r}. Must be a positive number (e.g. 128000 or 128K)"
            )
        budget = int(match.group(1))
        if match.group(2):
            budget *= 1000
    else:
        raise ConfigError(f"Invalid diff budget: {value!r}")
    if budget <= 0:
        raise ConfigError(f"Diff budget must be positive, got {budget}")
    return budget


def format_budget(budget: int) -> str:
    """Format a budget for display, e.g. ``128K`` for 128000."""
    if budget >= 1000:
        return f"{budget // 1000}K"
    return str(budget)


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Failed to parse config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")
    return data


def _validate(config: Dict[str, Any]) -> None:
    config["diffBudget"] = parse_budget(config["diffBudget"])
    if "apiKey" in config and not isinstance(config["apiKey"], str):
        raise ConfigError("'apiKey' must be a string")
    if not isinstance(config["model"], str):
        raise ConfigError("'model' must be a string")
    if not isinstance(config["baseUrl"], str):
        raise ConfigError("'baseUrl' must be a string")
    timeout = config["requestTimeout"]
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ConfigError("'requestTimeout' must be a number")


def load_config(require_api_key: bool = True) -> Dict[str, Any]:
    """Load the configuration and return it.

    Defaults are merged with the config file, then with the environment.

    Args:
        require_api_key: Raise if no API key is configured. Commands that
            never talk to the language model pass ``False``.

    Returns:
        A dictionary with the keys ``diffBudget``, ``model``, ``baseUrl``,
        ``requestTimeout``, ``source`` and, when configured, ``apiKey``.

    Raises:
        ConfigError: If the file is malformed, a value is invalid, or the
            API key is missing while required.
    """
    config: Dict[str, Any] = dict(DEFAULT_CONFIG)
    source = "default"

    config_path = _get_config_path()
    if config_path.exists():
        config.update(_read_config_file(config_path))
        source = "config file"
        logger.debug("Loaded configuration from: %s", config_path)

    env_key = os.environ.get(API_KEY_ENV)
    if env_key:
        config["apiKey"] = env_key
        source = "config file + environment" if source == "config file" else "environment"

    env_budget = os.environ.get(DIFF_BUDGET_ENV)
    if env_budget:
        try:
            config["diffBudget"] = parse_budget(env_budget)
        except ConfigError as exc:
            raise ConfigError(f"{DIFF_BUDGET_ENV}: {exc}") from exc

    _validate(config)

    if require_api_key and not config.get("apiKey"):
        raise ConfigError(
            "OpenAI API key not found!\n"
            "Please set it using one of these methods:\n"
            f"  1. Set the {API_KEY_ENV} environment variable\n"
            f'  2. Create {config_path} with: {{"apiKey": "sk-..."}}'
        )

    config["source"] = source
    return config


def resolve_diff_budget(explicit: Optional[Union[int, str]] = None) -> int:
    """Return the diff budget to use.

    Priority: explicit setting > ``NULLCOMMITS_DIFF_BUDGET`` > config file >
    default.
    """
    if explicit is not None:
        return parse_budget(explicit)
    return load_config(require_api_key=False)["diffBudget"]


def save_diff_budget(budget: Union[int, str]) -> Path:
    """Validate ``budget`` and store it in the config file.

    Other keys of an existing config file are kept. A file that cannot be
    parsed is replaced.

    Returns:
        Path of the config file.
    """
    parsed = parse_budget(budget)
    config_path = _get_config_path()
    data: Dict[str, Any] = {}
    if config_path.exists():
        try:
            data = _read_config_file(config_path)
        except ConfigError:
            logger.warning("Replacing unreadable config file %s", config_path)
            data = {}
    data["diffBudget"] = parsed
    try:
        config_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to write config file {config_path}: {exc}") from exc
    logger.debug("Saved diff budget %d to %s", parsed, config_path)
    return config_path
