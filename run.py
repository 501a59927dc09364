#!/usr/bin/env python3
"""
Development server for the AVM Engine API.

Usage:
    python run.py [--host HOST] [--port PORT] [--reload]

Flags override HOST, PORT and DEBUG from the environment.
"""

import argparse
import logging

import uvicorn

from utils.config import Config
from utils.logging import setup_logging


logger = logging.getLogger(__name__)


def main():
    """Parse flags and serve web.app:app."""
    config = Config.load()

    parser = argparse.ArgumentParser(description="Serve the AVM Engine API")
    parser.add_argument("--host", default=config.host, help=f"Bind address (default: {config.host})")
    parser.add_argument("--port", type=int, default=config.port, help=f"Port (default: {config.port})")
    parser.add_argument("--reload", action="store_true", default=config.debug, help="Reload on code changes")
    args = parser.parse_args()

    setup_logging(config.log_level, config.log_format)
    logger.info(
        "Serving AVM Engine on http://%s:%d (radius %.1f km, %d-%d comparables)",
        args.host,
        args.port,
        config.avm.default_radius_km,
        config.avm.min_comparables,
        config.avm.max_comparables,
    )

    uvicorn.run("web.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
