# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV WebSocket client transport.

Provides an implementation of WebOsTvClientTransport over a single
WebSocket connection that automatically reconnects, after a fixed delay,
whenever the connection is lost or cannot be established.
"""

from __future__ import annotations

import asyncio
from asyncio import Future
import ssl
import time

from websockets.asyncio.client import connect, ClientConnection
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..internal_types import *
from ..exceptions import WebOsTvTransportError
from ..constants import (
    CONNECT_TIMEOUT,
    CONNECT_RETRY_INTERVAL,
    CONNECTION_LOSS_LOG_INTERVAL,
    MAX_FRAME_SIZE,
  )
from ..pkg_logging import logger

from .client_transport import WebOsTvClientTransport, TlsPolicy
from .resolve_host import TvEndpoint

def create_ssl_context(tls_policy: TlsPolicy) -> ssl.SSLContext:
    """Creates an SSL context for wss:// connections according to a TLS policy."""
    context = ssl.create_default_context()
    if tls_policy == TlsPolicy.NO_VERIFY:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context

class WebSocketClientTransport(WebOsTvClientTransport):
    """webOS TV auto-reconnecting WebSocket client transport."""

    endpoint: TvEndpoint
    tls_policy: TlsPolicy
    connect_timeout_secs: float
    reconnect_delay_secs: float
    loss_log_interval_secs: float
    final_status: Future[None]

    _ws: Optional[ClientConnection] = None
    _run_task: Optional[asyncio.Task[None]] = None
    _last_loss_log_time: Optional[float] = None
    """Monotonic time of the last connection-loss log line that was emitted."""
    _suppressed_loss_count: int = 0

    def __init__(
            self,
            endpoint: TvEndpoint,
            *,
            tls_policy: TlsPolicy,
            connect_timeout_secs: float=CONNECT_TIMEOUT,
            reconnect_delay_secs: float=CONNECT_RETRY_INTERVAL,
            loss_log_interval_secs: float=CONNECTION_LOSS_LOG_INTERVAL,
          ) -> None:
        """Initializes the transport. Does not connect; call start().
        """
        super().__init__()
        self.endpoint = endpoint
        self.tls_policy = TlsPolicy(tls_policy)
        self.connect_timeout_secs = connect_timeout_secs
        self.reconnect_delay_secs = reconnect_delay_secs
        self.loss_log_interval_secs = loss_log_interval_secs
        self.final_status = asyncio.get_running_loop().create_future()
        if self.endpoint.is_secure and self.tls_policy == TlsPolicy.NO_VERIFY:
            logger.warning(f"{self}: TLS certificate validation is disabled for {self.endpoint}")

    # @abstractmethod
    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    def is_shutting_down(self) -> bool:
        """Returns True if the transport is shutting down or closed."""
        return self.final_status.done()

    def _connect_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = dict(
            open_timeout=self.connect_timeout_secs,
            max_size=MAX_FRAME_SIZE,
          )
        if self.endpoint.is_secure:
            kwargs['ssl'] = create_ssl_context(self.tls_policy)
        return kwargs

    def log_connection_loss(self, reason: str) -> bool:
        """Logs a connection loss or failed connection attempt, at most once per
           loss_log_interval_secs. Returns True if a line was emitted at INFO level."""
        now = time.monotonic()
        if self._last_loss_log_time is not None and now - self._last_loss_log_time < self.loss_log_interval_secs:
            self._suppressed_loss_count += 1
            logger.debug(f"{self}: {reason}")
            return False
        suppressed = self._suppressed_loss_count
        self._last_loss_log_time = now
        self._suppressed_loss_count = 0
        if suppressed > 0:
            logger.info(f"{self}: {reason}; retrying every {self.reconnect_delay_secs}s ({suppressed} similar events suppressed)")
        else:
            logger.info(f"{self}: {reason}; retrying every {self.reconnect_delay_secs}s")
        return True

    async def _notify_opened(self) -> None:
        if self.listener is not None:
            try:
                await self.listener.on_opened()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"{self}: Exception in on_opened handler: {e}", exc_info=True)

    def _notify_message(self, raw: Union[str, bytes]) -> None:
        if self.listener is not None:
            try:
                self.listener.on_message(raw)
            except Exception as e:
                logger.warning(f"{self}: Exception in on_message handler: {e}", exc_info=True)

    def _notify_error(self, exc: BaseException) -> None:
        if self.listener is not None:
            try:
                self.listener.on_error(exc)
            except Exception as e:
                logger.warning(f"{self}: Exception in on_error handler: {e}", exc_info=True)

    def _notify_closed(self) -> None:
        if self.listener is not None:
            try:
                self.listener.on_closed()
            except Exception as e:
                logger.warning(f"{self}: Exception in on_closed handler: {e}", exc_info=True)

    async def _connect_once(self) -> None:
        """Makes one connection attempt and, if it succeeds, pumps inbound
           messages to the listener until the connection is lost."""
        opened = False
        reason = "Connection attempt failed"
        try:
            logger.debug(f"{self}: Connecting to {self.endpoint}")
            async with connect(self.endpoint.url, **self._connect_kwargs()) as ws:
                self._ws = ws
                opened = True
                self._last_loss_log_time = None
                logger.info(f"{self}: Connected to {self.endpoint}")
                await self._notify_opened()
                async for message in ws:
                    logger.debug(f"{self}: Received: {message!r}")
                    self._notify_message(message)
                reason = "Connection closed by TV"
        except asyncio.CancelledError:
            raise
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            reason = f"{'Connection lost' if opened else 'Connection attempt failed'}: {e or e.__class__.__name__}"
            self._notify_error(WebOsTvTransportError(reason))
        finally:
            self._ws = None
            if opened:
                self._notify_closed()
        if not self.is_shutting_down():
            self.log_connection_loss(reason)

    async def _run(self) -> None:
        """Connects, and reconnects after a fixed delay, until shut down."""
        try:
            while not self.is_shutting_down():
                await self._connect_once()
                if self.is_shutting_down():
                    break
                await asyncio.sleep(self.reconnect_delay_secs)
        except asyncio.CancelledError:
            logger.debug(f"{self}: Connection task cancelled")
        except BaseException as e:
            logger.exception(f"{self}: Connection task failed: {e}")
            await self.shutdown(e)
            raise

    # @abstractmethod
    async def start(self) -> None:
        if self.is_shutting_down():
            raise WebOsTvTransportError(f"{self}: Transport is shut down")
        if self._run_task is None:
            self._run_task = asyncio.create_task(self._run(), name=f"webos-tv-transport-{self.endpoint.address}")

    # @abstractmethod
    async def send(self, text: str) -> None:
        ws = self._ws
        if ws is None:
            raise WebOsTvTransportError(f"{self}: Not connected")
        try:
            logger.debug(f"{self}: Sending: {text}")
            await ws.send(text)
        except (ConnectionClosed, OSError) as e:
            raise WebOsTvTransportError(f"{self}: Send failed: {e}") from e

    # @abstractmethod
    async def shutdown(self, exc: Optional[BaseException] = None) -> None:
        """Shuts the transport down and stops reconnecting. Does not wait for the
           transport to finish closing. Safe to call from a callback.

        If exc is not None, sets the final status of the transport.

        Has no effect if the transport is already shutting down or closed.

        Does not raise an exception based on final status.
        """
        if not self.final_status.done():
            if exc is not None:
                self.final_status.set_exception(exc)
            else:
                self.final_status.set_result(None)
            run_task = self._run_task
            if run_task is not None and not run_task.done() and run_task is not asyncio.current_task():
                run_task.cancel()

    # @abstractmethod
    async def wait(self) -> None:
        """Waits for complete shutdown/cleanup. Does not initiate shutdown.
        Not safe to call from a callback.

        Returns immediately if the transport is already closed.
        Raises an exception if the final status of the transport is an exception.
        """
        run_task = self._run_task
        if run_task is not None:
            try:
                await run_task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.debug("Exception while waiting for connection task to finish", exc_info=True)
        await self.final_status

    # @override
    async def __aenter__(self) -> WebSocketClientTransport:
        """Enters a context that will close the transport on exit."""
        return self

    def __str__(self) -> str:
        return f"WebSocketClientTransport({self.endpoint})"

    def __repr__(self) -> str:
        return str(self)
