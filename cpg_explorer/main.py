#!/usr/bin/env python3
"""
CPG Explorer - API Server Entry Point

Serves call-graph and data-flow neighborhoods, plus dashboard lookups,
over a precomputed code property graph stored in SQLite.
"""

import argparse
import os
import sys

import uvicorn

from .config import settings
from .utils.logger import setup_logging


def main():
    """Main entry point for the API server."""
    parser = argparse.ArgumentParser(description="CPG Explorer - API Server")
    parser.add_argument("--db", default=settings.cpg_db_path, help="Path to the SQLite CPG database")
    parser.add_argument("--host", default=settings.api_host, help="Host to bind")
    parser.add_argument("--port", type=int, default=settings.api_port, help="Port to bind")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level")

    args = parser.parse_args()

    logger = setup_logging(args.log_level.upper(), settings.log_file).bind(component="main")

    if not os.path.exists(args.db):
        logger.error(f"Database not found: {args.db}")
        sys.exit(1)

    # api_server reads the database path from settings when uvicorn imports it
    settings.cpg_db_path = args.db

    logger.info("Starting CPG Explorer API server")
    logger.info(f"Database: {args.db}")
    logger.info(f"Listening on {args.host}:{args.port}")

    try:
        uvicorn.run(
            "cpg_explorer.api_server:app",
            host=args.host,
            port=args.port,
            log_level=args.log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
