"""
Command-line entry point that serves a database over HTTP.

Usage:
    dbexplorer --config config.yml
    dbexplorer --config config.yml --port 9000
"""

import argparse
import logging

import uvicorn

from .config import config_path, load_config
from .core import DBExplorer
from .logging_utils import configure_logging
from .server import create_app

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve generic CRUD access to a relational database")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML config file (default: $DBEXPLORER_CONFIG or config.yml)",
    )
    parser.add_argument("--host", default=None, help="Override server.host from the config")
    parser.add_argument("--port", type=int, default=None, help="Override server.port from the config")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Load config, build the catalog once and start uvicorn."""
    args = build_parser().parse_args(argv)
    config = load_config(args.config or config_path())
    configure_logging(config.observability.log_level)

    # Catalog failures abort startup here, before any request is served.
    explorer = DBExplorer.from_config(config)
    app = create_app(explorer)

    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.info("Starting server at %s:%d with tables %s", host, port, ", ".join(explorer.list_tables()))
    try:
        uvicorn.run(app, host=host, port=port, log_level=config.observability.log_level.lower())
    finally:
        explorer.close()


if __name__ == "__main__":
    main()
