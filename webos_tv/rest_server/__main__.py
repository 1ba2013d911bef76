#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Runs the webOS TV REST server with uvicorn.

Usage: python -m webos_tv.rest_server [--host HOST] [--port PORT] [--log-level LEVEL]
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

def setup_logging(level_name: str) -> None:
    """Configure logging to stdout."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(max(level, logging.INFO))
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(level)

def main() -> None:
    parser = argparse.ArgumentParser(description="Run the webOS TV REST server.")
    parser.add_argument("--host", default=None, help="Bind address (overrides SERVER_HOST).")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (overrides SERVER_PORT).")
    parser.add_argument(
        "--log-level",
        choices=["critical", "error", "warning", "info", "debug"],
        default=None,
        help="Log level (overrides LOG_LEVEL).",
    )
    args = parser.parse_args()
    load_dotenv()

    host = args.host or os.environ.get("SERVER_HOST") or DEFAULT_HOST
    port_env = os.environ.get("SERVER_PORT")
    port = args.port or (int(port_env) if port_env else DEFAULT_PORT)
    log_level = (args.log_level or os.environ.get("LOG_LEVEL") or "info").lower()
    setup_logging(log_level)

    uvicorn.run(
        "webos_tv.rest_server.app:tv_api",
        host=host,
        port=port,
        log_level=log_level,
        log_config=None,
    )

if __name__ == "__main__":
    main()
