# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV registration (pairing) state machine.

Drives the registration handshake each time the transport connects:

    UNREGISTERED --(register sent, TV prompts)--> AWAITING_CONFIRMATION
    UNREGISTERED / AWAITING_CONFIRMATION --(registered)--> REGISTERED

REGISTERED lasts for the life of one connection; any disconnect resets the
machine to UNREGISTERED. There is no timeout while awaiting confirmation,
since a person has to accept the prompt on the TV.
"""

from __future__ import annotations

from enum import Enum
import uuid

from ..internal_types import *
from ..exceptions import WebOsTvPersistenceError, WebOsTvSocketNotReadyError, WebOsTvTransportError
from ..pkg_logging import logger
from ..protocol import (
    OutboundFrame,
    OutboundFrameType,
    InboundFrame,
    CLIENT_KEY_FIELD,
    handshake_payload,
  )

from .credential_store import CredentialStore
from .session import ConnectionSession

SendFrame = Callable[[OutboundFrame], Awaitable[None]]

class RegistrationState(str, Enum):
    UNREGISTERED = "unregistered"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    REGISTERED = "registered"

class RegistrationStateMachine:
    """Performs the registration handshake and maintains the pairing credential."""

    session: ConnectionSession
    credential_store: CredentialStore
    manifest: Optional[JsonableDict]
    state: RegistrationState
    register_id: Optional[str] = None
    """Id of the register frame sent on the current connection."""
    client_key: Optional[str] = None
    """The credential sent with the current register frame, if any."""

    _send_frame: SendFrame

    def __init__(
            self,
            session: ConnectionSession,
            credential_store: CredentialStore,
            send_frame: SendFrame,
            manifest: Optional[JsonableDict]=None,
          ) -> None:
        self.session = session
        self.credential_store = credential_store
        self.manifest = manifest
        self._send_frame = send_frame
        self.state = RegistrationState.UNREGISTERED

    @property
    def address(self) -> str:
        return self.session.endpoint.address

    @property
    def is_registered(self) -> bool:
        return self.state == RegistrationState.REGISTERED

    async def on_opened(self) -> None:
        """Loads the stored credential and sends the register frame."""
        self.state = RegistrationState.UNREGISTERED
        try:
            self.client_key = self.credential_store.load(self.address)
        except WebOsTvPersistenceError as e:
            logger.error(f"{self}: {e}")
            self.session.set_registration_failure(e)
            return
        self.register_id = str(uuid.uuid4())
        frame = OutboundFrame(
            self.register_id,
            OutboundFrameType.REGISTER,
            payload=handshake_payload(self.client_key, manifest=self.manifest),
          )
        if self.client_key is None:
            logger.info(f"{self}: No pairing key for {self.address}; registering without one (TV will prompt)")
        else:
            logger.debug(f"{self}: Registering with stored pairing key")
        try:
            await self._send_frame(frame)
        except WebOsTvTransportError as e:
            # The transport will reconnect and we will be called again
            logger.debug(f"{self}: Unable to send register frame: {e}")

    def on_closed(self) -> None:
        self.state = RegistrationState.UNREGISTERED
        self.register_id = None

    def _is_own_frame(self, frame: InboundFrame) -> bool:
        return frame.id is None or frame.id == self.register_id

    def handle_frame(self, frame: InboundFrame) -> bool:
        """Consumes a handshake frame received before registration completed.

        Returns True if the frame was part of the handshake. Any other frame is
        not routable yet and is discarded by the caller.
        """
        if self.is_registered or not self._is_own_frame(frame):
            return False

        if frame.is_registered:
            new_key = None if frame.payload is None else frame.payload.get(CLIENT_KEY_FIELD)
            if isinstance(new_key, str) and new_key != '' and new_key != self.client_key:
                try:
                    self.credential_store.save(self.address, new_key)
                except WebOsTvPersistenceError as e:
                    logger.error(f"{self}: {e}")
                    self.state = RegistrationState.UNREGISTERED
                    self.session.set_registration_failure(e)
                    return True
                self.client_key = new_key
            self.state = RegistrationState.REGISTERED
            self.session.mark_registered()
            logger.info(f"{self}: Registered with TV at {self.session.endpoint}")
            return True

        if frame.is_response:
            if self.state != RegistrationState.AWAITING_CONFIRMATION:
                self.state = RegistrationState.AWAITING_CONFIRMATION
                logger.warning(f"{self}: Waiting for the pairing prompt to be accepted on the TV")
            return True

        if frame.is_error:
            logger.warning(f"{self}: Registration rejected by TV: {frame.error}")
            self.state = RegistrationState.UNREGISTERED
            self.session.set_registration_failure(
                WebOsTvSocketNotReadyError(f"Registration rejected by TV at {self.session.endpoint}: {frame.error}"))
            return True

        return False

    def __str__(self) -> str:
        return f"RegistrationStateMachine({self.address}, state={self.state.value})"

    def __repr__(self) -> str:
        return str(self)
