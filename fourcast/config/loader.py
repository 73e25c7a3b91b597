"""YAML config loader with credential resolution and dotted-key lookup."""

import json
import os
from pathlib import Path
from typing import Any

import yaml

from fourcast.config.schema import FourcastConfig


def load_config(
    path: str | Path | None, environ: dict[str, str] | None = None
) -> FourcastConfig:
    """Load and validate config from a YAML file.

    A missing path (or None) yields the defaults. API keys left empty in the
    YAML are filled from the environment variables named by ``api_key_env``.
    """
    raw: dict[str, Any] = {}
    if path is not None and Path(path).exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    config = FourcastConfig(**raw)
    return resolve_credentials(config, os.environ if environ is None else environ)


def resolve_credentials(config: FourcastConfig, environ: Any) -> FourcastConfig:
    """Return a copy of config with empty API keys read from the environment."""
    updates: dict[str, Any] = {}
    for section_name in ("openweathermap", "geocoding"):
        section = getattr(config, section_name)
        if not section.api_key and environ.get(section.api_key_env):
            updates[section_name] = section.model_copy(
                update={"api_key": environ[section.api_key_env]}
            )
    if not updates:
        return config
    return config.model_copy(update=updates)


def get_config_value(config: FourcastConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'http.max_retries'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if isinstance(obj, list):
            obj = obj[int(part)]
        elif hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def redacted_dump(config: FourcastConfig) -> str:
    """JSON dump of the config with credentials masked."""
    data = config.model_dump(mode="json")
    for section_name in ("openweathermap", "geocoding"):
        if data[section_name]["api_key"]:
            data[section_name]["api_key"] = "[REDACTED]"
    return json.dumps(data, indent=2)
