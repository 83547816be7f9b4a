from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional


def configure_logging(config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for the application.

    Establishes an early NOTSET basic config so the server config can be
    read, then reconfigures the root logger to the `log_level` found in the
    config file (WARNING when absent). Returns a module logger.
    """
    logging.basicConfig(level=logging.NOTSET, format='%(asctime)s INFO %(message)s')
    DEFAULT_LOG_LEVEL = logging.WARNING

    cfg_path = Path(config_path) if config_path else Path('data/config/server_config.yml')
    if cfg_path.exists():
        try:
            with cfg_path.open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
                _lvl = _cfg.get('log_level')
                if isinstance(_lvl, str) and isinstance(getattr(logging, _lvl.upper(), None), int):
                    DEFAULT_LOG_LEVEL = getattr(logging, _lvl.upper())
        except (OSError, yaml.YAMLError):
            DEFAULT_LOG_LEVEL = logging.WARNING

    logging.log(100, f'[kvstore]: Log level set to: {logging.getLevelName(DEFAULT_LOG_LEVEL)}')

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=DEFAULT_LOG_LEVEL, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logger.info("Starting KV Store Server")

    return logger
