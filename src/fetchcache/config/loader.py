"""Config loading entry points for fetchcache."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .models import FetchCacheConfig

ENV_ROOT = "FETCHCACHE_ROOT"
ENV_APP_NAME = "FETCHCACHE_APP_NAME"


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def load_config(
    path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> FetchCacheConfig:
    """Load configuration: model defaults, then `path`, environment, `overrides`."""

    merged: dict[str, Any] = FetchCacheConfig().model_dump(mode="json")

    if path:
        merged = _layered(merged, _file_layer(path))

    merged = _layered(merged, _environment_overrides())

    if overrides:
        merged = _layered(merged, _nest_overrides(overrides))

    try:
        return FetchCacheConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid fetchcache configuration: {exc}") from exc


def dump_example_config(dest: Path) -> None:
    """Write the default configuration to ``dest``."""

    if dest.suffix.lower() == ".toml":
        raise ConfigError("TOML export is not supported yet; use a YAML destination.")

    dest.parent.mkdir(parents=True, exist_ok=True)
    defaults = FetchCacheConfig().model_dump(mode="json")
    if dest.suffix.lower() in {".json"}:
        dest.write_text(json.dumps(defaults, indent=2), encoding="utf-8")
        return
    dest.write_text(
        yaml.safe_dump(defaults, sort_keys=False),
        encoding="utf-8",
    )


def _environment_overrides() -> dict[str, Any]:
    cache: dict[str, Any] = {}
    root = os.getenv(ENV_ROOT)
    if root:
        cache["root"] = root
    app_name = os.getenv(ENV_APP_NAME)
    if app_name:
        cache["app_name"] = app_name
    return {"cache": cache} if cache else {}


def _file_layer(path: Path) -> dict[str, Any]:
    """Parse `path` into a settings layer; an empty file is an empty layer."""

    payload = _read_structured_file(path)
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Config file {path} must hold a mapping of sections, got {type(payload).__name__}.")
    return dict(payload)


def _read_structured_file(path: Path) -> Any:
    """Return the parsed contents of a YAML/TOML/JSON file."""

    if not path.exists():
        raise ConfigError(f"Config file {path} does not exist.")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text) or {}
        if suffix == ".toml":
            return tomllib.loads(text)
        if suffix == ".json":
            return json.loads(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not parse config file {path}: {exc}") from exc

    raise ConfigError(f"Unsupported config format for {path}")


def _layered(lower: Mapping[str, Any], upper: Mapping[str, Any]) -> dict[str, Any]:
    """Return `lower` with `upper` laid over it, section by section.

    Nested sections combine key by key; any other value in `upper` wins.
    Neither input is modified.
    """

    combined = dict(lower)
    for key, value in upper.items():
        current = combined.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            value = _layered(current, value)
        combined[key] = value
    return combined


def _nest_overrides(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Turn ``{"cache.root": x}`` style keys into nested sections."""

    nested: dict[str, Any] = {}
    for key, value in overrides.items():
        *sections, leaf = str(key).split(".")
        for section in reversed(sections):
            value = {leaf: value}
            leaf = section
        nested = _layered(nested, {leaf: value})
    return nested


__all__ = [
    "ConfigError",
    "ENV_APP_NAME",
    "ENV_ROOT",
    "load_config",
    "dump_example_config",
]
