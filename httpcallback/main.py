"""
Command line entry point: load config, build the storage backend, serve.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

import uvicorn

from httpcallback.app import create_app
from httpcallback.config import DEFAULT_CONFIG_PATH, load_settings
from httpcallback.dependencies import create_repository_factory
from httpcallback.errors import BackendConnectionError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="httpcallback API server")
    parser.add_argument(
        "--address",
        type=str,
        default="",
        help="The address to host on (empty for all interfaces)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="The port to host on",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help="The path to the TOML configuration file",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting with config %s", args.config)

    try:
        factory = create_repository_factory(settings)
    except BackendConnectionError as exc:
        logger.critical("Could not create repository factory: %s", exc)
        return 1

    app = create_app(settings, factory)
    host = args.address or "0.0.0.0"
    logger.info("httpcallback now hosting at %s:%s", host, args.port)
    uvicorn.run(app, host=host, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
