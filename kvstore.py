"""Production entry point for the KV store server.

    python kvstore.py [--config data/config/server_config.yml] [--host H] [--port P]
    python kvstore.py --print-template
"""
from __future__ import annotations
import argparse
import sys
from typing import Iterable, Optional

import yaml

from kvstore_lib.config import DEFAULT_CONFIG_PATH, config_from_file
from kvstore_lib.main import create_app

TEMPLATE = {
    'log_level': 'INFO',
    'host': '0.0.0.0',
    'port': 3000,
    'storage_backend': 'sqlite',
    'data_dir': 'data',
    'db_file': 'kvstore.db',
    'token_length': 6,
    'feature_flags': [],
}


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Multi-tenant bucketed key-value HTTP server")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to the YAML server config")
    p.add_argument("--host", default=None, help="Listen address (overrides config)")
    p.add_argument("--port", type=int, default=None, help="Listen port (overrides config)")
    p.add_argument("--print-template", action="store_true", help="Print the default YAML template to stdout and exit")
    return p


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = get_parser().parse_args(list(argv) if argv is not None else None)
    if args.print_template:
        sys.stdout.write(yaml.safe_dump(TEMPLATE, sort_keys=False))
        return 0

    config = config_from_file(args.config, host=args.host, port=args.port)
    app = create_app(config)

    import uvicorn
    uvicorn.run(app, host=config.host, port=config.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
