"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

The YAML file is grouped into sections which are flattened onto the
:class:`Settings` field names::

    sanity:
      project_id: abc123        -> sanity_project_id
      dataset: production       -> sanity_dataset
    rag:
      content_chunk_size: 800   -> content_chunk_size
    logging:
      level: DEBUG              -> log_level
"""

from pathlib import Path
from typing import Any

import yaml

from cms_context.config.settings import Settings

# Section name -> prefix prepended to each key inside that section.
_SECTION_PREFIXES: dict[str, str] = {
    "sanity": "sanity_",
    "content": "",
    "rag": "",
    "app": "app_",
    "logging": "log_",
}


def load_config(path: str = "config/config.yaml") -> dict[str, Any]:
    """Read the YAML config file into a nested dict (empty if missing)."""
    config_path = Path(path)
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def load_settings(path: str = "config/config.yaml", overrides: dict[str, Any] | None = None) -> Settings:
    """Build :class:`Settings` from the YAML file, env vars and *overrides*.

    Args:
        path: Path to the YAML configuration file.
        overrides: Optional nested dict deep-merged on top of the YAML
            contents before flattening.  Like the YAML values, these rank
            below environment variables and ``.env``.

    Returns:
        Fully resolved settings.
    """
    config = load_config(path)
    if overrides:
        _deep_merge(config, overrides)
    return Settings(**_flatten(config))


def _flatten(config: dict[str, Any]) -> dict[str, Any]:
    """Map sectioned YAML keys onto flat Settings field names."""
    flat: dict[str, Any] = {}
    for section, values in config.items():
        if isinstance(values, dict) and section in _SECTION_PREFIXES:
            prefix = _SECTION_PREFIXES[section]
            for key, value in values.items():
                flat[f"{prefix}{key}"] = value
        else:
            flat[section] = values
    return flat


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
