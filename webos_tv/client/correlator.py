# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Request/response correlation for SSAP requests.

Each outbound request gets a fresh unique id and a pending future. Inbound
frames carrying a matching id resolve the future; each pending entry is
resolved at most once and removed whether it resolves or times out. Many
requests may be outstanding at once, and responses may arrive in any order.
"""

from __future__ import annotations

import asyncio
import uuid

from ..internal_types import *
from ..constants import DEFAULT_PREFIX, DEFAULT_TIMEOUT, READY_TIMEOUT
from ..exceptions import (
    WebOsTvTimeoutError,
    WebOsTvSocketNotReadyError,
    WebOsTvTransportError,
  )
from ..pkg_logging import logger
from ..protocol import OutboundFrame, OutboundFrameType, InboundFrame

from .session import ConnectionSession

SendText = Callable[[str], Awaitable[None]]

class RequestCorrelator:
    session: ConnectionSession
    request_timeout_secs: float
    ready_timeout_secs: float

    _send_text: SendText
    _pending: Dict[str, asyncio.Future[InboundFrame]]

    def __init__(
            self,
            session: ConnectionSession,
            send_text: SendText,
            request_timeout_secs: float=DEFAULT_TIMEOUT,
            ready_timeout_secs: float=READY_TIMEOUT,
          ) -> None:
        self.session = session
        self._send_text = send_text
        self.request_timeout_secs = request_timeout_secs
        self.ready_timeout_secs = ready_timeout_secs
        self._pending = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def send(
            self,
            type: Union[OutboundFrameType, str],
            path: Optional[str],
            payload: Optional[JsonableDict]=None,
            prefix: str=DEFAULT_PREFIX,
            timeout_secs: Optional[float]=None,
          ) -> InboundFrame:
        """Sends a request and waits for the frame that answers it.

        Waits first for the connection to be registered. Raises
        WebOsTvSocketNotReadyError if it is not registered within the ready
        timeout, and WebOsTvTimeoutError if no answer arrives within the
        request timeout. The answering frame may be an error frame; it is
        returned to the caller as-is.
        """
        if OutboundFrameType(type) == OutboundFrameType.REQUEST:
            await self.session.wait_registered(self.ready_timeout_secs)

        if timeout_secs is None:
            timeout_secs = self.request_timeout_secs
        request_id = str(uuid.uuid4())
        frame = OutboundFrame.create(request_id, type, path, payload=payload, prefix=prefix)
        future: asyncio.Future[InboundFrame] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            logger.debug(f"{self}: Sending {frame}")
            try:
                await self._send_text(frame.to_json())
            except WebOsTvTransportError as e:
                raise WebOsTvSocketNotReadyError(f"Unable to send request {frame.uri}: {e}") from e
            try:
                result = await asyncio.wait_for(future, timeout_secs)
            except asyncio.TimeoutError:
                raise WebOsTvTimeoutError(
                    f"No response to request {frame.uri} within {timeout_secs} seconds") from None
        finally:
            self._pending.pop(request_id, None)
        return result

    def dispatch(self, frame: InboundFrame) -> bool:
        """Delivers an inbound frame to the request waiting for it.

        Returns False if no pending request has the frame's id; such frames
        (unsolicited events, late responses) are dropped.
        """
        if frame.id is None:
            logger.debug(f"{self}: Dropping frame without id: {frame}")
            return False
        future = self._pending.pop(frame.id, None)
        if future is None:
            logger.debug(f"{self}: Dropping frame with no pending request: {frame}")
            return False
        if not future.done():
            future.set_result(frame)
        return True

    def cancel_all(self, exc: Optional[BaseException]=None) -> None:
        """Fails all pending requests. Used when the client is closed."""
        pending = list(self._pending.values())
        self._pending.clear()
        for future in pending:
            if not future.done():
                if exc is None:
                    future.cancel()
                else:
                    future.set_exception(exc)

    def __str__(self) -> str:
        return f"RequestCorrelator({self.session.endpoint}, pending={len(self._pending)})"

    def __repr__(self) -> str:
        return str(self)
