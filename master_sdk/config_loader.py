"""Config Loader - Loads the master client's runtime configuration.

The YAML file has a `master` section (endpoint, timeout, default headers)
and an optional `build` section overriding the User-Agent metadata.
${ENV_VAR} references are expanded in the `master` section only, so
tokens and addresses can stay out of the file; `build` values are literal.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from master_sdk.models import BuildInfo, RuntimeConfig
from master_sdk.version import BUILD_INFO


class ConfigError(Exception):
    """Raised when configuration loading fails."""


_ENV_REF = re.compile(r"\$\{([^}]+)\}")


def load_runtime_config(config_path: Path) -> RuntimeConfig:
    """Read, expand and validate a master client config file."""
    raw = _read_yaml(config_path)

    master = raw.get("master")
    if isinstance(master, dict):
        raw = {**raw, "master": _expand_master_section(master)}

    try:
        return RuntimeConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure in {config_path}: {e}") from e


def resolve_build_info(config: RuntimeConfig) -> BuildInfo:
    """Build metadata from the config file if present, else the process-wide one."""
    return config.build if config.build is not None else BUILD_INFO


def expand_env(value: str, where: str, environ: Mapping[str, str] | None = None) -> str:
    """Replace ${NAME} references in value. An unset NAME is a ConfigError naming where."""
    env = os.environ if environ is None else environ

    def lookup(match: re.Match) -> str:
        name = match.group(1)
        if name not in env:
            raise ConfigError(f"{where}: environment variable '{name}' is not set")
        return env[name]

    return _ENV_REF.sub(lookup, value)


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError("Config file must be a YAML mapping")
    return raw


def _expand_master_section(master: dict[str, Any]) -> dict[str, Any]:
    """Expand env references in the master scalars and in each default header value."""
    expanded: dict[str, Any] = {}
    for key, value in master.items():
        if key == "headers" and isinstance(value, dict):
            expanded[key] = {
                name: expand_env(v, f"master.headers.{name}") if isinstance(v, str) else v
                for name, v in value.items()
            }
        elif isinstance(value, str):
            expanded[key] = expand_env(value, f"master.{key}")
        else:
            expanded[key] = value
    return expanded
