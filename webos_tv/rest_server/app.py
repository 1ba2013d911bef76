#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls a webOS TV.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import time
import os
import json

from contextlib import asynccontextmanager
from dotenv import load_dotenv

from .logger import logger
from ..internal_types import *
from .. import (
    __version__ as pkg_version,
    WebOsTvClient,
    WebOsTvClientConfig,
    WebOsTvError,
    WebOsTvTimeoutError,
    WebOsTvSocketNotReadyError,
    WebOsTvInvalidArgumentError,
    WebOsTvCommandError,
    webos_tv_connect,
  )

from .api import router as api_router, get_tv_client

def error_status_code(exc: WebOsTvError) -> int:
    """Maps a client error to the HTTP status returned to REST callers."""
    if isinstance(exc, WebOsTvInvalidArgumentError):
        return 400
    if isinstance(exc, WebOsTvCommandError):
        return 502
    if isinstance(exc, WebOsTvSocketNotReadyError):
        return 503
    if isinstance(exc, WebOsTvTimeoutError):
        return 504
    return 500

@asynccontextmanager
async def fastapi_lifetime(app: FastAPI) -> AsyncIterator[None]:
    """
    A context manager that initializes and cleans up for FastAPI.
    """

    tv_client: Optional[WebOsTvClient] = None
    try:
        logger.info("TV REST server starting up--initializing...")
        load_dotenv()
        config_file = os.environ.get("WEBOS_TV_CONFIG", None)
        if config_file is None:
            if os.path.exists("webos_tv_config.json"):
                config_file = "webos_tv_config.json"
        if config_file is None:
            raw_config: JsonableDict = {}
        else:
            with open(config_file, "r") as f:
                raw_config = json.load(f)
        app.state.raw_config = raw_config
        tv_config = WebOsTvClientConfig.from_jsonable(raw_config)
        app.state.tv_config = tv_config
        app.state.launch_time = time.monotonic()
        tv_client = await webos_tv_connect(config=tv_config)
        app.state.tv_client = tv_client
        if tv_config.audio_checker_output is not None:
            error = await tv_client.start_audio_checker(tv_config.audio_checker_output)
            if error is not None:
                logger.warning(f"Audio checker not started: {error}")
        logger.info(f"Serving API for TV at {tv_client}...")

        logger.info("TV REST server initialization done; starting server...")
        yield
    finally:
        logger.info("TV REST server shutting down--cleaning up...")
        if tv_client is not None:
            await tv_client.aclose()

tv_api = FastAPI(
    title="webos-tv",
    description="REST API for controlling an LG webOS TV",
    version=pkg_version,
    lifespan=fastapi_lifetime,
  )
tv_api.include_router(api_router)

@tv_api.exception_handler(WebOsTvError)
async def webos_tv_error_handler(request: Request, exc: WebOsTvError) -> JSONResponse:
    status_code = error_status_code(exc)
    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={ "error": str(exc) })

def get_tv_config() -> WebOsTvClientConfig:
    return tv_api.state.tv_config

def get_raw_config() -> JsonableDict:
    return tv_api.state.raw_config
