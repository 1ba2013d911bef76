# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV emulator session.

One session per accepted WebSocket connection.
"""

from __future__ import annotations

import asyncio
import json

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed

from ..internal_types import *
from ..pkg_logging import logger

if TYPE_CHECKING:
    from .emulator_impl import WebOsTvEmulator

class WebOsTvEmulatorSession:
    emulator: WebOsTvEmulator
    ws: ServerConnection
    session_id: int
    registered: bool = False
    request_tasks: Set[asyncio.Task[None]]

    def __init__(self, emulator: WebOsTvEmulator, ws: ServerConnection):
        self.emulator = emulator
        self.ws = ws
        self.request_tasks = set()
        self.session_id = emulator.alloc_session_id(self)

    async def send_frame(self, frame: JsonableDict) -> None:
        logger.debug(f"{self}: Sending {frame}")
        try:
            await self.ws.send(json.dumps(frame))
        except ConnectionClosed:
            logger.debug(f"{self}: Connection closed; dropping {frame}")

    def spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self.request_tasks.add(task)
        task.add_done_callback(self.request_tasks.discard)

    async def run(self) -> None:
        """Reads frames until the connection closes."""
        try:
            async for raw in self.ws:
                try:
                    frame = json.loads(raw)
                except ValueError:
                    logger.debug(f"{self}: Ignoring non-JSON message {raw!r}")
                    continue
                if not isinstance(frame, dict):
                    logger.debug(f"{self}: Ignoring non-object message {raw!r}")
                    continue
                self.emulator.on_frame_received(self, frame)
        except ConnectionClosed:
            pass
        finally:
            for task in list(self.request_tasks):
                task.cancel()
            self.emulator.free_session_id(self.session_id)
            logger.debug(f"{self}: Session closed")

    async def close(self) -> None:
        await self.ws.close()

    def __str__(self) -> str:
        return f"WebOsTvEmulatorSession({self.session_id})"

    def __repr__(self) -> str:
        return str(self)
