"""Config Loader - Loads named client profiles from YAML.

Handles loading YAML config files with environment variable substitution
and resolving a single profile into a ClientConfig. Example file:

    clients:
      api:
        base_url: https://api.example.com
        default_headers:
          Authorization: Bearer ${API_TOKEN}
        mode: same-origin

Headers listed in a profile are merged over the built-in defaults.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

from bim_fetch.models import DEFAULT_HEADERS, ClientConfig, ClientsFile


class ConfigError(Exception):
    """Raised when configuration loading fails."""


_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def load_clients_file(config_path: Path) -> ClientsFile:
    """Load client profiles from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _substitute_env_vars(raw_config)
    _merge_default_headers(raw_config)

    try:
        return ClientsFile.model_validate(raw_config)
    except Exception as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def load_client_config(config_path: Path, name: str) -> ClientConfig:
    """Load one named profile. Raises ConfigError if it does not exist."""
    clients_file = load_clients_file(config_path)
    if name not in clients_file.clients:
        available = ", ".join(clients_file.clients.keys()) or "(none)"
        raise ConfigError(f"Client '{name}' not found in config. Available: {available}")
    return clients_file.clients[name]


def _merge_default_headers(raw_config: dict[str, Any]) -> None:
    """Put built-in default headers under each profile's own headers, in place."""
    clients = raw_config.get("clients")
    if not isinstance(clients, dict):
        return
    for profile in clients.values():
        if isinstance(profile, dict) and isinstance(profile.get("default_headers"), dict):
            profile["default_headers"] = {**DEFAULT_HEADERS, **profile["default_headers"]}


def _substitute_env_vars(data: Any) -> Any:
    """Recursively substitute ${ENV_VAR} patterns in strings within data."""
    if isinstance(data, str):
        return _substitute_string(data)
    elif isinstance(data, dict):
        return {k: _substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    return data


def _substitute_string(s: str) -> str:
    """Substitute ${ENV_VAR} patterns. Raises ConfigError if env var is not set."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set")
        return value

    return _ENV_VAR_PATTERN.sub(replacer, s)
