"""YAML config loader with environment overrides and dotted-key lookup."""

import hashlib
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from forecaster.config.schema import ServiceConfig

# env var -> dotted config keys it overrides
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "YR_API_URL": ("upstream.base_url",),
    "USER_AGENT": ("upstream.user_agent", "geocoding.user_agent"),
    "REDIS_URL": ("cache.redis_url",),
    "NOMINATIM_API_URL": ("geocoding.base_url",),
    "PORT": ("server.port",),
}


def load_config(
    path: str | Path | None = None, env: Mapping[str, str] | None = None
) -> ServiceConfig:
    """Load and validate config from an optional YAML file.

    A missing or empty file yields defaults. Environment variables listed in
    ENV_OVERRIDES win over file values.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    if env is None:
        env = os.environ
    for var, keys in ENV_OVERRIDES.items():
        value = env.get(var)
        if not value:
            continue
        for dotted_key in keys:
            section, field = dotted_key.split(".", 1)
            # "upstream:" with no body loads as None
            if raw.get(section) is None:
                raw[section] = {}
            raw[section][field] = value

    return ServiceConfig(**raw)


def config_hash(config: ServiceConfig) -> str:
    """Compute a deterministic SHA256 hash of the config."""
    data = config.model_dump_json(indent=None)
    return hashlib.sha256(data.encode()).hexdigest()[:16]


def get_config_value(config: ServiceConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'rate_limit.min_interval_ms'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict) and part in obj:
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj
