"""Server configuration.

Settings come from a `Config` dataclass that callers (tests, runners) can
build directly, optionally seeded from the YAML server config file:

    log_level: INFO
    host: 0.0.0.0
    port: 3000
    storage_backend: sqlite      # or: memory
    data_dir: data
    db_file: kvstore.db
    token_length: 6
    feature_flags:
      - kvstore_use_brotli
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional
import logging

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path('data/config/server_config.yml')


@dataclass
class Config:
    data_dir: str = "data"
    storage_backend: str = "sqlite"
    db_file: str = "kvstore.db"
    token_length: int = 6
    host: str = "0.0.0.0"
    port: int = 3000
    # If None, check feature-flag at runtime via has_feature_flag
    enable_brotli: Optional[bool] = None
    config_path: Optional[str] = None


def load_server_config(path: Optional[Path | str] = None) -> dict[str, Any]:
    """Return the parsed server config file, or an empty dict when it is absent."""
    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        return {}
    with cfg_path.open('r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Server config {cfg_path} must be a mapping")
    return data


def config_from_file(path: Optional[Path | str] = None, **overrides: Any) -> Config:
    """Build a `Config` from the server config file; keyword overrides win."""
    raw = load_server_config(path)
    known = {f.name for f in fields(Config)}
    values = {k: v for k, v in raw.items() if k in known}
    values.update({k: v for k, v in overrides.items() if v is not None})
    values['config_path'] = str(path) if path else str(DEFAULT_CONFIG_PATH)
    cfg = Config(**values)
    logger.debug("Loaded config: %s", cfg)
    return cfg


def has_feature_flag(name: str, path: Optional[Path | str] = None) -> bool:
    flags = load_server_config(path).get('feature_flags') or []
    return name in flags
