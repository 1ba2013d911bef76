# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV connection session state.

Holds the state of the one logical connection owned by a client, and a
readiness signal that requests wait on until registration completes.

Single-writer discipline: the transport listener calls mark_connected() and
mark_disconnected(); the registration state machine calls mark_registered()
and set_registration_failure(). Everything else only reads.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from ..internal_types import *
from ..exceptions import WebOsTvError, WebOsTvSocketNotReadyError
from ..pkg_logging import logger

from .resolve_host import TvEndpoint

class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    REGISTERED = "registered"

class ConnectionSession:
    """The connection state of a single client."""

    endpoint: TvEndpoint
    _state: ConnectionState
    _ready: asyncio.Event
    """Set when the state is REGISTERED or registration has failed; cleared on disconnect."""
    _registration_failure: Optional[WebOsTvError] = None

    def __init__(self, endpoint: TvEndpoint) -> None:
        self.endpoint = endpoint
        self._state = ConnectionState.DISCONNECTED
        self._ready = asyncio.Event()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state != ConnectionState.DISCONNECTED

    @property
    def is_registered(self) -> bool:
        return self._state == ConnectionState.REGISTERED

    @property
    def registration_failure(self) -> Optional[WebOsTvError]:
        return self._registration_failure

    def mark_connected(self) -> None:
        self._state = ConnectionState.CONNECTED
        self._registration_failure = None
        self._ready.clear()

    def mark_disconnected(self) -> None:
        # Clears REGISTERED as well; REGISTERED implies CONNECTED
        self._state = ConnectionState.DISCONNECTED
        self._ready.clear()

    def mark_registered(self) -> None:
        if self._state == ConnectionState.DISCONNECTED:
            logger.debug(f"{self}: Ignoring registration for a closed connection")
            return
        self._state = ConnectionState.REGISTERED
        self._registration_failure = None
        self._ready.set()

    def set_registration_failure(self, exc: WebOsTvError) -> None:
        self._registration_failure = exc
        self._ready.set()

    async def wait_registered(self, timeout_secs: float) -> None:
        """Waits until the connection is registered.

        Raises WebOsTvSocketNotReadyError if that does not happen within
        timeout_secs, or the registration failure if registration could not
        be completed.
        """
        if not self.is_registered:
            try:
                await asyncio.wait_for(self._ready.wait(), timeout_secs)
            except asyncio.TimeoutError:
                raise WebOsTvSocketNotReadyError(
                    f"Connection to {self.endpoint} not registered within {timeout_secs} seconds") from None
        if self._registration_failure is not None:
            raise self._registration_failure
        if not self.is_registered:
            raise WebOsTvSocketNotReadyError(f"Connection to {self.endpoint} lost before it could be used")

    def __str__(self) -> str:
        return f"ConnectionSession({self.endpoint}, state={self._state.value})"

    def __repr__(self) -> str:
        return str(self)
