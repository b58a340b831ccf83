"""Runtime settings for the tag-binding tooling.

Settings come from, in order of preference:
- a YAML file (`--config-path`, else `config/tagging.yaml` when it exists), or
- a JSON object in `GCP_TAGGING_SETTINGS_JSON`.

Either source may hold the keys at top level or under a `tagging:` key, e.g.:

```yaml
tagging:
  poll_interval_s: 2
  operation_timeout_s: 60
  derive_region_from_zone: true
  transport: rest
```

Missing sources mean defaults. Command-line flags are applied on top with
`dataclasses.replace`.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from utils.endpoints import DEFAULT_API_VERSION, DEFAULT_GLOBAL_HOST
from utils.http_gateway import DEFAULT_REQUEST_TIMEOUT_S, TRANSPORT_REST, TRANSPORTS

DEFAULT_SETTINGS_CONFIG = "config/tagging.yaml"
SETTINGS_ENV_VAR = "GCP_TAGGING_SETTINGS_JSON"


@dataclass(frozen=True)
class TaggingSettings:
    poll_interval_s: float = 2.0
    operation_timeout_s: float = 60.0
    derive_region_from_zone: bool = True
    global_host: str = DEFAULT_GLOBAL_HOST
    api_version: str = DEFAULT_API_VERSION
    transport: str = TRANSPORT_REST
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S


_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "poll_interval_s": (int, float),
    "operation_timeout_s": (int, float),
    "derive_region_from_zone": (bool,),
    "global_host": (str,),
    "api_version": (str,),
    "transport": (str,),
    "request_timeout_s": (int, float),
}


def load_settings(config_path: str | None = None) -> TaggingSettings:
    """Load settings from YAML or the environment, falling back to defaults.

    Args:
        config_path: Optional explicit YAML path. When given, the file must exist.

    Returns:
        Validated `TaggingSettings`.

    Raises:
        FileNotFoundError: If `config_path` is given but missing.
        ValueError: If the mapping is malformed or holds unknown keys.
    """
    if config_path and not Path(config_path).exists():
        raise FileNotFoundError(f"Settings file not found: {config_path}")

    mapping = _load_mapping_from_file(config_path)
    if mapping is None:
        mapping = _load_mapping_from_env()
    if mapping is None:
        return TaggingSettings()

    return settings_from_mapping(mapping)


def settings_from_mapping(mapping: dict[str, Any]) -> TaggingSettings:
    known = {f.name for f in fields(TaggingSettings)}
    unknown = sorted(set(mapping) - known)
    if unknown:
        raise ValueError(f"Unknown settings key(s): {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in mapping.items():
        expected = _FIELD_TYPES[key]
        # bool is an int subclass; only accept it where a bool is expected.
        if isinstance(value, bool) and bool not in expected:
            raise ValueError(f"Setting '{key}' must be a number.")
        if not isinstance(value, expected):
            raise ValueError(f"Setting '{key}' has invalid type {type(value).__name__}.")
        values[key] = float(value) if float in expected else value

    settings = TaggingSettings(**values)
    if settings.poll_interval_s <= 0 or settings.operation_timeout_s <= 0:
        raise ValueError("poll_interval_s and operation_timeout_s must be positive.")
    if settings.transport not in TRANSPORTS:
        raise ValueError(f"transport must be one of: {', '.join(TRANSPORTS)}")
    return settings


def _resolve_settings_path(config_path: str | None) -> Path | None:
    if config_path:
        return Path(config_path)

    default_path = Path(DEFAULT_SETTINGS_CONFIG)
    if default_path.exists():
        return default_path

    return None


def _unwrap(raw_data: Any, source: str) -> dict[str, Any]:
    if not isinstance(raw_data, dict):
        raise ValueError(f"{source} must contain a mapping.")
    inner = raw_data.get("tagging", raw_data)
    if inner is None:
        return {}
    if not isinstance(inner, dict):
        raise ValueError(f"{source} 'tagging' entry must be a mapping.")
    return inner


def _load_mapping_from_file(config_path: str | None) -> dict[str, Any] | None:
    path_to_load = _resolve_settings_path(config_path)
    if not path_to_load or not path_to_load.exists():
        return None

    with open(path_to_load, "r", encoding="utf-8") as config_file:
        raw_data = yaml.safe_load(config_file) or {}

    return _unwrap(raw_data, "Settings file")


def _load_mapping_from_env() -> dict[str, Any] | None:
    env_payload = os.getenv(SETTINGS_ENV_VAR)
    if not env_payload:
        return None

    try:
        parsed = json.loads(env_payload)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Failed to parse {SETTINGS_ENV_VAR} environment variable as JSON.",
        ) from exc

    return _unwrap(parsed, SETTINGS_ENV_VAR)
