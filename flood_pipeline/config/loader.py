"""Read settings from YAML, overlay the environment, validate with pydantic.

Layering, lowest to highest precedence:

1. defaults declared on the schema models
2. ``<config_dir>/base.yaml``
3. ``<config_dir>/<environment>.yaml``
4. ``FLOOD_PIPELINE__SECTION__KEY`` environment variables

``load_config_from_files`` stops after step 3 and returns a plain dict; only
``get_config`` applies the environment and builds a ``PipelineConfig``.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError, ErrorCode
from .schemas import PipelineConfig

ENV_PREFIX = "FLOOD_PIPELINE"
DEFAULT_CONFIG_DIR = Path("config")


def _deep_merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated by ``override``, recursing into nested mappings."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge_dicts(current, value)
        else:
            merged[key] = value
    return merged


def _convert_env_value(value: str) -> Any:
    """Best-effort typing of an environment string: bool, int, float, list, str."""
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"

    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue

    # FLOOD_PIPELINE__PIPELINE__ALLOWED_YEARS=2021,2022
    if "," in value:
        items = (item.strip() for item in value.split(","))
        return [_convert_env_value(item) for item in items if item]

    return value


def _set_nested(target: dict[str, Any], keys: list[str], value: Any) -> None:
    """Assign ``value`` at ``keys`` inside ``target``, copying each level it touches."""
    node = target
    for key in keys[:-1]:
        child = node.get(key)
        node[key] = dict(child) if isinstance(child, dict) else {}
        node = node[key]
    node[keys[-1]] = value


def _apply_env_overrides(config_dict: dict[str, Any], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Overlay ``PREFIX__SECTION__KEY`` variables onto a copy of ``config_dict``.

    ``FLOOD_PIPELINE__REPORTS__TOP_CONTRACTORS=10`` sets
    ``["reports"]["top_contractors"]`` to ``10``.
    """
    marker = f"{prefix}__"
    overridden = dict(config_dict)
    for name, raw in os.environ.items():
        if name.startswith(marker):
            keys = name[len(marker) :].lower().split("__")
            _set_nested(overridden, keys, _convert_env_value(raw))
    return overridden


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse config file {path}: {e}",
            operation="load_config_from_files",
            details={"file_path": str(path)},
            status_code=ErrorCode.CONFIG_LOAD_FAILED,
            cause=e,
        ) from e
    return loaded or {}


def load_config_from_files(
    environment: str | None = None, config_dir: Path | None = None
) -> dict[str, Any]:
    """Merge ``base.yaml`` with the optional ``<environment>.yaml`` overlay.

    Either file may be absent; with neither present the result is ``{}`` and the
    schema defaults take over.
    """
    directory = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
    layers = [directory / "base.yaml"]
    if environment:
        layers.append(directory / f"{environment}.yaml")

    merged: dict[str, Any] = {}
    for layer in layers:
        if layer.exists():
            merged = _deep_merge_dicts(merged, _read_yaml(layer))
    return merged


@lru_cache(maxsize=1)
def get_config(
    environment: str | None = None,
    config_dir: Path | None = None,
    apply_env_overrides_flag: bool = True,
) -> PipelineConfig:
    """Build the validated ``PipelineConfig`` for this process.

    The result is cached per argument set; call ``reload_config`` after changing
    files or environment variables.
    """
    environment = environment or os.getenv(f"{ENV_PREFIX}__PIPELINE__ENVIRONMENT", "development")

    raw = load_config_from_files(environment=environment, config_dir=config_dir)
    raw["pipeline"] = {"environment": environment, **(raw.get("pipeline") or {})}
    if apply_env_overrides_flag:
        raw = _apply_env_overrides(raw)

    try:
        return PipelineConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            operation="get_config",
            details={"environment": environment},
            cause=e,
        ) from e


def reload_config() -> None:
    """Drop the cached configuration."""
    get_config.cache_clear()
