"""Utilities for loading selector configuration from JSON or YAML files."""

from __future__ import annotations

import json
from pathlib import Path

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

from .config import SelectorConfig


def load_config(path: str | Path) -> SelectorConfig:
    """Load a :class:`SelectorConfig` from a JSON or YAML file."""

    data = _read_file(path)
    if not isinstance(data, dict):
        raise RuntimeError("configuration file must contain a mapping at the top level")
    return SelectorConfig.model_validate(data)


def _read_file(path: str | Path) -> dict:
    payload = Path(path).read_text(encoding="utf-8")
    suffix = Path(path).suffix.lower()
    if suffix in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("PyYAML is required for YAML configuration files")
        return yaml.safe_load(payload) or {}
    return json.loads(payload)


__all__ = ["load_config"]
