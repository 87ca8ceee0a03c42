"""Run the pygeotrack server.

Usage::

    python -m pygeotrack --port 8080
    python -m pygeotrack --offline --seed 42   # synthetic data only
"""

from __future__ import annotations

import argparse
import logging

from aiohttp import web

from pygeotrack.config import GeoTrackConfig
from pygeotrack.server import create_app


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pygeotrack", description="Serve the live entity pipeline.")
    parser.add_argument("--host", help="Bind address (default: GEOTRACK_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Bind port (default: GEOTRACK_PORT or 8080)")
    parser.add_argument("--offline", action="store_true", help="Disable live sources; synthetic data only")
    parser.add_argument("--seed", type=int, help="Seed for simulation and synthetic data")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.offline:
        overrides["live_sources_enabled"] = False
    config = GeoTrackConfig.from_env(**overrides)

    web.run_app(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
