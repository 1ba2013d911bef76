# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV emulator.

Provides a simple emulation of a webOS TV's SSAP WebSocket endpoint: the
registration handshake, a handful of stateful services (volume, mute, sound
output, power, inputs, apps, alerts) and generic success responses for the
rest. Intended for testing clients without a TV.
"""

from __future__ import annotations

import asyncio
import uuid

from websockets.asyncio.server import serve, Server, ServerConnection

from ..internal_types import *
from ..pkg_logging import logger
from ..constants import DEFAULT_PREFIX, DEFAULT_INSECURE_PORT
from ..exceptions import WebOsTvError
from ..protocol import Endpoint, SoundOutput, CLIENT_KEY_FIELD

from .session import WebOsTvEmulatorSession

RequestHandler = Callable[[JsonableDict], JsonableDict]

class PairingMode:
    AUTO = "auto"
    """Prompt, then immediately accept."""
    MANUAL = "manual"
    """Prompt, then wait for accept_pairing()."""
    DENY = "deny"
    """Prompt, then reject with an error frame."""

class WebOsTvEmulator(AsyncContextManager['WebOsTvEmulator']):
    bind_addr: str
    port: int
    pairing_mode: str
    client_keys: Set[str]
    """Keys that are accepted without prompting."""
    sessions: Dict[int, WebOsTvEmulatorSession]
    next_session_id: int = 0
    connection_count: int = 0
    received: List[JsonableDict]
    """Every frame received from any client, in arrival order."""
    silent_uris: Set[str]
    """Request URIs that are never answered."""
    error_uris: Dict[str, str]
    """Request URIs that are answered with an error frame carrying the given text."""
    response_delays: Dict[str, float]
    """Seconds to delay the answer to the given request URIs."""
    luna_calls: List[Tuple[str, JsonableDict]]
    """luna:// calls triggered by closing alerts."""

    volume: int = 10
    muted: bool = False
    sound_output: str
    power_state: str = "Active"
    screen_on: bool = True
    current_input: str = "HDMI_1"
    foreground_app: str = "com.webos.app.livetv"
    alerts: Dict[str, JsonableDict]

    server: Optional[Server] = None
    _pairing_accepted: asyncio.Event
    _handlers: Dict[str, RequestHandler]
    _known_uris: Set[str]

    def __init__(
            self,
            bind_addr: Optional[str] = None,
            port: int = DEFAULT_INSECURE_PORT,
            pairing_mode: str = PairingMode.AUTO,
            client_keys: Optional[Iterable[str]] = None,
            sound_output: Union[SoundOutput, str] = SoundOutput.INTERNAL_SPEAKER,
          ):
        """Creates an emulator. Use port=0 to listen on an ephemeral port."""
        if not pairing_mode in (PairingMode.AUTO, PairingMode.MANUAL, PairingMode.DENY):
            raise WebOsTvError(f"Unknown pairing mode {pairing_mode}")
        self.bind_addr = '127.0.0.1' if bind_addr is None else bind_addr
        self.port = port
        self.pairing_mode = pairing_mode
        self.client_keys = set() if client_keys is None else set(client_keys)
        self.sessions = {}
        self.received = []
        self.silent_uris = set()
        self.error_uris = {}
        self.response_delays = {}
        self.luna_calls = []
        self.sound_output = SoundOutput(sound_output).value
        self.alerts = {}
        self._pairing_accepted = asyncio.Event()
        self._handlers = {
            Endpoint.GET_VOLUME.value: self._get_volume,
            Endpoint.SET_VOLUME.value: self._set_volume,
            Endpoint.VOLUME_UP.value: self._volume_up,
            Endpoint.VOLUME_DOWN.value: self._volume_down,
            Endpoint.SET_MUTE.value: self._set_mute,
            Endpoint.GET_AUDIO_STATUS.value: self._get_audio_status,
            Endpoint.GET_SOUND_OUTPUT.value: self._get_sound_output,
            Endpoint.CHANGE_SOUND_OUTPUT.value: self._change_sound_output,
            Endpoint.GET_POWER_STATE.value: self._get_power_state,
            Endpoint.POWER_OFF.value: self._power_off,
            Endpoint.TURN_OFF_SCREEN.value: self._turn_off_screen,
            Endpoint.TURN_ON_SCREEN.value: self._turn_on_screen,
            Endpoint.GET_INPUTS.value: self._get_inputs,
            Endpoint.SET_INPUT.value: self._set_input,
            Endpoint.GET_CURRENT_APP_INFO.value: self._get_current_app_info,
            Endpoint.LAUNCH.value: self._launch,
            Endpoint.CREATE_ALERT.value: self._create_alert,
            Endpoint.CLOSE_ALERT.value: self._close_alert,
            Endpoint.CREATE_TOAST.value: self._create_toast,
          }
        self._known_uris = { DEFAULT_PREFIX + e.value for e in Endpoint }

    # ---- session bookkeeping

    def alloc_session_id(self, session: WebOsTvEmulatorSession) -> int:
        result = self.next_session_id
        self.next_session_id += 1
        self.sessions[result] = session
        self.connection_count += 1
        return result

    def free_session_id(self, session_id: int) -> None:
        self.sessions.pop(session_id, None)

    def requests_for(self, uri: str) -> List[JsonableDict]:
        """Returns all request frames received for uri."""
        return [ f for f in self.received if f.get("type") == "request" and f.get("uri") == uri ]

    # ---- frame handling

    def on_frame_received(self, session: WebOsTvEmulatorSession, frame: JsonableDict) -> None:
        """Called when a frame is received from a session."""
        logger.debug(f"{session}: Received {frame}")
        self.received.append(frame)
        frame_type = frame.get("type")
        if frame_type == "register":
            session.spawn(self.handle_register(session, frame))
        elif frame_type == "request":
            session.spawn(self.handle_request(session, frame))
        else:
            logger.debug(f"{session}: Ignoring frame of type {frame_type!r}")

    async def handle_register(self, session: WebOsTvEmulatorSession, frame: JsonableDict) -> None:
        frame_id = frame.get("id")
        payload = frame.get("payload")
        client_key = payload.get(CLIENT_KEY_FIELD) if isinstance(payload, dict) else None
        if isinstance(client_key, str) and client_key in self.client_keys:
            await self._send_registered(session, frame_id, client_key)
            return

        await session.send_frame(
            { "id": frame_id, "type": "response", "payload": { "pairingType": "PROMPT", "returnValue": True } })
        if self.pairing_mode == PairingMode.DENY:
            await session.send_frame({ "id": frame_id, "type": "error", "error": "403 User denied access", "payload": {} })
            return
        if self.pairing_mode == PairingMode.MANUAL:
            await self._pairing_accepted.wait()
        new_key = uuid.uuid4().hex
        self.client_keys.add(new_key)
        await self._send_registered(session, frame_id, new_key)

    async def _send_registered(self, session: WebOsTvEmulatorSession, frame_id: Any, client_key: str) -> None:
        session.registered = True
        await session.send_frame({ "id": frame_id, "type": "registered", "payload": { CLIENT_KEY_FIELD: client_key } })

    def accept_pairing(self) -> None:
        """Accepts the pairing prompt in PairingMode.MANUAL."""
        self._pairing_accepted.set()

    async def handle_request(self, session: WebOsTvEmulatorSession, frame: JsonableDict) -> None:
        frame_id = frame.get("id")
        uri = frame.get("uri")
        payload = frame.get("payload")
        if not isinstance(payload, dict):
            payload = {}
        if not isinstance(uri, str):
            await session.send_frame({ "id": frame_id, "type": "error", "error": "400 missing uri", "payload": {} })
            return
        if uri in self.silent_uris:
            logger.debug(f"{session}: Not answering {uri}")
            return
        delay = self.response_delays.get(uri)
        if delay is not None:
            await asyncio.sleep(delay)
        if not session.registered:
            await session.send_frame(
                { "id": frame_id, "type": "error", "error": "401 insufficient permissions (not registered)", "payload": {} })
            return
        error = self.error_uris.get(uri)
        if error is None and not uri in self._known_uris:
            error = "404 no such service or method"
        if error is not None:
            await session.send_frame({ "id": frame_id, "type": "error", "error": error, "payload": {} })
            return
        handler = self._handlers.get(uri[len(DEFAULT_PREFIX):])
        result: JsonableDict = { "returnValue": True } if handler is None else handler(payload)
        await session.send_frame({ "id": frame_id, "type": "response", "payload": result })

    # ---- services

    def _get_volume(self, payload: JsonableDict) -> JsonableDict:
        return { "returnValue": True, "volume": self.volume, "muted": self.muted, "scenario": "mastervolume_tv_speaker" }

    def _set_volume(self, payload: JsonableDict) -> JsonableDict:
        volume = payload.get("volume")
        if not isinstance(volume, int):
            return { "returnValue": False, "errorText": "volume must be an integer" }
        self.volume = max(0, min(100, volume))
        return { "returnValue": True, "volume": self.volume }

    def _volume_up(self, payload: JsonableDict) -> JsonableDict:
        self.volume = min(100, self.volume + 1)
        return { "returnValue": True }

    def _volume_down(self, payload: JsonableDict) -> JsonableDict:
        self.volume = max(0, self.volume - 1)
        return { "returnValue": True }

    def _set_mute(self, payload: JsonableDict) -> JsonableDict:
        self.muted = bool(payload.get("mute"))
        return { "returnValue": True }

    def _get_audio_status(self, payload: JsonableDict) -> JsonableDict:
        return { "returnValue": True, "volume": self.volume, "mute": self.muted, "scenario": "mastervolume_tv_speaker" }

    def _get_sound_output(self, payload: JsonableDict) -> JsonableDict:
        return { "returnValue": True, "soundOutput": self.sound_output }

    def _change_sound_output(self, payload: JsonableDict) -> JsonableDict:
        output = SoundOutput.parse(str(payload.get("output")))
        if output is None:
            return { "returnValue": False, "errorText": "unknown sound output" }
        self.sound_output = output.value
        return { "returnValue": True }

    def _get_power_state(self, payload: JsonableDict) -> JsonableDict:
        return { "returnValue": True, "state": self.power_state }

    def _power_off(self, payload: JsonableDict) -> JsonableDict:
        self.power_state = "Suspend"
        return { "returnValue": True }

    def _turn_off_screen(self, payload: JsonableDict) -> JsonableDict:
        self.screen_on = False
        self.power_state = "Screen Off"
        return { "returnValue": True }

    def _turn_on_screen(self, payload: JsonableDict) -> JsonableDict:
        self.screen_on = True
        self.power_state = "Active"
        return { "returnValue": True }

    def _get_inputs(self, payload: JsonableDict) -> JsonableDict:
        devices: List[Jsonable] = [
            { "id": f"HDMI_{i}", "label": f"HDMI {i}", "connected": i == 1, "appId": f"com.webos.app.hdmi{i}" }
            for i in range(1, 5)
          ]
        return { "returnValue": True, "devices": devices }

    def _set_input(self, payload: JsonableDict) -> JsonableDict:
        input_id = payload.get("inputId")
        if not isinstance(input_id, str):
            return { "returnValue": False, "errorText": "inputId required" }
        self.current_input = input_id
        return { "returnValue": True }

    def _get_current_app_info(self, payload: JsonableDict) -> JsonableDict:
        return { "returnValue": True, "appId": self.foreground_app, "windowId": "", "processId": "" }

    def _launch(self, payload: JsonableDict) -> JsonableDict:
        app_id = payload.get("id")
        if not isinstance(app_id, str):
            return { "returnValue": False, "errorText": "id required" }
        self.foreground_app = app_id
        return { "returnValue": True, "id": app_id, "sessionId": uuid.uuid4().hex }

    def _create_alert(self, payload: JsonableDict) -> JsonableDict:
        alert_id = f"com.webos.service.apiadapter-{uuid.uuid4().hex}"
        self.alerts[alert_id] = payload
        return { "returnValue": True, "alertId": alert_id }

    def _close_alert(self, payload: JsonableDict) -> JsonableDict:
        alert_id = payload.get("alertId")
        alert = self.alerts.pop(alert_id, None) if isinstance(alert_id, str) else None
        if alert is None:
            return { "returnValue": False, "errorText": "unknown alertId" }
        onclose = alert.get("onclose")
        if isinstance(onclose, dict) and isinstance(onclose.get("uri"), str):
            params = onclose.get("params")
            self.luna_calls.append((onclose["uri"], params if isinstance(params, dict) else {}))
        return { "returnValue": True }

    def _create_toast(self, payload: JsonableDict) -> JsonableDict:
        return { "returnValue": True, "toastId": f"com.webos.service.apiadapter-{uuid.uuid4().hex}" }

    # ---- lifecycle

    async def _handle_connection(self, ws: ServerConnection) -> None:
        session = WebOsTvEmulatorSession(self, ws)
        logger.debug(f"{session}: Accepted connection")
        await session.run()

    async def drop_connections(self) -> None:
        """Closes every open client connection, as a TV does when it restarts."""
        for session in list(self.sessions.values()):
            await session.close()

    @property
    def url(self) -> str:
        return f"ws://{self.bind_addr}:{self.port}"

    async def start(self) -> None:
        self.server = await serve(self._handle_connection, self.bind_addr, self.port)
        if self.port == 0:
            self.port = list(self.server.sockets)[0].getsockname()[1]
        logger.debug(f"Emulator: Listening on {self.bind_addr}:{self.port}")

    async def close(self) -> None:
        """Stops the emulator and closes all connections."""
        if self.server is not None:
            server = self.server
            self.server = None
            server.close()
            await server.wait_closed()

    async def run(self) -> None:
        """Runs the emulator until cancelled."""
        async with self:
            await asyncio.Future()

    async def __aenter__(self) -> WebOsTvEmulator:
        await self.start()
        return self

    async def __aexit__(self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> None:
        await self.close()

    def __str__(self) -> str:
        return f"WebOsTvEmulator({self.bind_addr}:{self.port})"

    def __repr__(self) -> str:
        return str(self)
