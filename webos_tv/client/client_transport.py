# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV client abstract transport interface.

Provides a low-level abstract interface for maintaining one logical connection
to a TV, sending opaque text frames, and delivering connection events and
inbound text frames to a listener. Does not provide registration, request
correlation, or any higher-level abstractions such as semantic commands.

This abstraction allows for alternate transports (e.g., an in-memory fake for
testing).
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from enum import Enum

from ..internal_types import *

class TlsPolicy(str, Enum):
    """Whether the TV's TLS certificate is validated on wss:// connections.

    TVs present self-signed certificates, so validation usually has to be
    turned off. There is deliberately no default at the transport level; the
    caller must choose.
    """
    VERIFY = "verify"
    NO_VERIFY = "no_verify"

class TransportListener(ABC):
    """Receives events from a WebOsTvClientTransport.

    Callbacks run on the transport's receive task and must not wait on the
    outcome of a request sent over the same transport.
    """

    @abstractmethod
    async def on_opened(self) -> None:
        """Called each time a connection is established."""
        raise NotImplementedError()

    @abstractmethod
    def on_message(self, raw: Union[str, bytes]) -> None:
        """Called for each inbound message, in arrival order."""
        raise NotImplementedError()

    @abstractmethod
    def on_error(self, exc: BaseException) -> None:
        """Called when a connection attempt fails or an open connection errors."""
        raise NotImplementedError()

    @abstractmethod
    def on_closed(self) -> None:
        """Called each time an established connection is lost or closed."""
        raise NotImplementedError()

class WebOsTvClientTransport(ABC):
    listener: Optional[TransportListener] = None

    def set_listener(self, listener: Optional[TransportListener]) -> None:
        """Sets the object that receives connection events and inbound messages."""
        self.listener = listener

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True while a connection is open."""
        raise NotImplementedError()

    @abstractmethod
    async def start(self) -> None:
        """Begins connecting (and reconnecting as needed) in the background.
        Returns without waiting for the first connection.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    async def send(self, text: str) -> None:
        """Sends a single text frame on the current connection. Never retries.

        Raises WebOsTvTransportError if there is no open connection or the
        write fails.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    async def shutdown(self, exc: Optional[BaseException] = None) -> None:
        """Shuts the transport down, and stops reconnecting. Does not wait for
           the transport to finish closing. Safe to call from a callback.

        If exc is not None, sets the final status of the transport.

        Has no effect if the transport is already shutting down or closed.

        Does not raise an exception based on final status.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    async def wait(self) -> None:
        """Waits for complete shutdown/cleanup. Does not initiate shutdown
        Not safe to call from a callback.

        Returns immediately if the transport is already closed.
        Raises an exception if the final status of the transport is an exception.

        Must be implemented by a subclass.
        """
        raise NotImplementedError()

    async def aclose(self, exc: Optional[BaseException] = None) -> None:
        """Closes the transport and waits for complete shutdown/cleanup.
        Not safe to call from a callback.

        If exc is not None, sets the final status of the transport.

        Has no effect if the transport is already closed.

        Raises an exception if the final status of the transport is an exception.

        May be overridden by subclasses. The default implementation simply calls
        shutdown() and then wait().
        """
        await self.shutdown(exc)
        await self.wait()

    async def __aenter__(self) -> WebOsTvClientTransport:
        """Enters a context that will close the transport on exit."""
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
          ) -> None:
        """Exits the context, closes the transport, and waits for complete shutdown/cleanup."""
        # Close the transport without raising an exception
        closer: asyncio.Task[None] = asyncio.ensure_future(self.aclose(exc))
        assert isinstance(closer, asyncio.Task)
        done, pending = await asyncio.wait([closer])
        assert len(done) == 1 and len(pending) == 0
        if exc is None:
            # raise the exception from the transport if there is one
            closer.result()
