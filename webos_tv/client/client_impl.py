# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV client.

Owns one logical connection to a TV and everything layered on it: the
registration handshake, request correlation, the sound output watchdog, and a
command facade with one method per supported operation.
"""

from __future__ import annotations

import asyncio
from asyncio import Future

from ..internal_types import *
from ..exceptions import (
    WebOsTvCommandError,
    WebOsTvInvalidArgumentError,
    WebOsTvParseError,
    WebOsTvSocketNotReadyError,
  )
from ..constants import DEFAULT_PREFIX, LUNA_PREFIX
from ..pkg_logging import logger
from ..protocol import (
    Endpoint,
    SoundOutput,
    OutboundFrame,
    OutboundFrameType,
    InboundFrame,
    CommandMeta,
    load_manifest,
    name_to_command_meta,
  )
from ..wol import send_magic_packet

from .client_config import WebOsTvClientConfig
from .client_transport import WebOsTvClientTransport, TransportListener
from .ws_client_transport import WebSocketClientTransport
from .resolve_host import TvEndpoint, resolve_tv_endpoint
from .credential_store import CredentialStore
from .session import ConnectionSession
from .registration import RegistrationStateMachine
from .correlator import RequestCorrelator
from .watchdog import SoundOutputWatchdog

class WebOsTvClient(TransportListener):
    """webOS TV client."""

    config: WebOsTvClientConfig
    endpoint: TvEndpoint
    transport: WebOsTvClientTransport
    session: ConnectionSession
    credential_store: CredentialStore
    registration: RegistrationStateMachine
    correlator: RequestCorrelator
    watchdog: SoundOutputWatchdog
    final_status: Future[None]

    def __init__(
            self,
            transport: WebOsTvClientTransport,
            endpoint: TvEndpoint,
            config: Optional[WebOsTvClientConfig]=None,
            credential_store: Optional[CredentialStore]=None,
            manifest: Optional[JsonableDict]=None,
          ):
        if config is None:
            config = WebOsTvClientConfig()
        self.config = config
        self.endpoint = endpoint
        self.transport = transport
        self.final_status = asyncio.get_running_loop().create_future()
        if credential_store is None:
            credential_store = CredentialStore(config.key_dir)
        self.credential_store = credential_store
        if manifest is None and config.handshake_manifest_path is not None:
            manifest = load_manifest(config.handshake_manifest_path)
        self.session = ConnectionSession(endpoint)
        self.registration = RegistrationStateMachine(
            self.session,
            self.credential_store,
            self._send_frame,
            manifest=manifest,
          )
        self.correlator = RequestCorrelator(
            self.session,
            self.transport.send,
            request_timeout_secs=config.timeout_secs,
            ready_timeout_secs=config.ready_timeout_secs,
          )
        self.watchdog = SoundOutputWatchdog(
            self.session,
            self._watchdog_request,
            poll_interval_secs=config.watchdog_poll_secs,
            quirk_mode=config.watchdog_quirk_mode,
          )
        self.transport.set_listener(self)

    async def _send_frame(self, frame: OutboundFrame) -> None:
        logger.debug(f"{self}: Sending {frame}")
        await self.transport.send(frame.to_json())

    async def _watchdog_request(self, path: str, payload: Optional[JsonableDict]) -> InboundFrame:
        return await self.correlator.send(OutboundFrameType.REQUEST, path, payload=payload)

    # ---- TransportListener

    async def on_opened(self) -> None:
        logger.info(f"{self}: Connected")
        self.session.mark_connected()
        await self.registration.on_opened()

    def on_message(self, raw: Union[str, bytes]) -> None:
        self.dispatch(raw)

    def on_error(self, exc: BaseException) -> None:
        logger.debug(f"{self}: Transport error: {exc}")

    def on_closed(self) -> None:
        logger.info(f"{self}: Disconnected")
        self.session.mark_disconnected()
        self.registration.on_closed()

    def dispatch(self, raw: Union[str, bytes]) -> None:
        """Parses one inbound message and routes it.

        Until the connection is registered, frames go to the registration
        state machine; afterwards they are matched by id to pending requests.
        Malformed messages are logged and dropped.
        """
        try:
            frame = InboundFrame.parse(raw)
        except WebOsTvParseError as e:
            logger.debug(f"{self}: Dropping malformed message: {e}")
            return
        logger.debug(f"{self}: Received {frame}")
        if not self.session.is_registered:
            if not self.registration.handle_frame(frame):
                logger.debug(f"{self}: Discarding {frame} received before registration")
            return
        self.correlator.dispatch(frame)

    # ---- lifecycle

    async def start(self) -> None:
        """Starts connecting. Returns immediately; the transport reconnects forever."""
        await self.transport.start()

    async def wait_registered(self, timeout_secs: Optional[float]=None) -> None:
        if timeout_secs is None:
            timeout_secs = self.config.ready_timeout_secs
        await self.session.wait_registered(timeout_secs)

    @property
    def is_registered(self) -> bool:
        return self.session.is_registered

    async def _async_dispose(self) -> None:
        await self.watchdog.stop()
        self.correlator.cancel_all(WebOsTvSocketNotReadyError(f"{self}: Client closed"))
        await self.transport.aclose()
        if not self.final_status.done():
            self.final_status.set_result(None)

    async def aclose(self) -> None:
        await self._async_dispose()

    async def __aenter__(self) -> WebOsTvClient:
        logger.debug(f"{self}: Entering async context manager")
        return self

    async def __aexit__(
            self,
            exc_type: type[BaseException],
            exc_val: Optional[BaseException],
            exc_tb: TracebackType
          ) -> None:
        logger.debug(f"{self}: Exiting async context manager, exc={exc_val}")
        await self._async_dispose()

    @classmethod
    async def create(
            cls,
            host: Optional[str]=None,
            config: Optional[WebOsTvClientConfig]=None,
            start: bool=True,
          ) -> Self:
        """Creates a client for the TV at host (or the configured default host)
           and, if start is True, starts connecting."""
        if config is None:
            config = WebOsTvClientConfig()
        if host is None:
            host = config.default_host
        endpoint = resolve_tv_endpoint(
            host,
            default_protocol=config.default_protocol,
            default_port=config.default_port,
          )
        transport = WebSocketClientTransport(
            endpoint,
            tls_policy=config.tls_policy,
            connect_timeout_secs=config.connect_timeout_secs,
            reconnect_delay_secs=config.reconnect_delay_secs,
          )
        try:
            self = cls(transport, endpoint, config=config)
            if start:
                await self.start()
        except BaseException:
            await transport.aclose()
            raise
        return self

    # ---- requests

    async def send_message(
            self,
            type: Union[OutboundFrameType, str],
            uri: Optional[str],
            payload: Optional[JsonableDict]=None,
            prefix: str=DEFAULT_PREFIX,
          ) -> InboundFrame:
        """Sends a raw frame and returns the frame that answers it, which may be
           an error frame."""
        return await self.correlator.send(type, uri, payload=payload, prefix=prefix)

    async def request(
            self,
            path: Union[Endpoint, str],
            payload: Optional[JsonableDict]=None,
            prefix: str=DEFAULT_PREFIX,
          ) -> JsonableDict:
        """Sends a request and returns the response payload.

        Raises WebOsTvCommandError if the TV answers with an error frame.
        """
        path = str(path)
        frame = await self.send_message(OutboundFrameType.REQUEST, path, payload=payload, prefix=prefix)
        if frame.is_error:
            raise WebOsTvCommandError(
                f"{prefix}{path} failed: {frame.error}", error=frame.error, payload=frame.payload)
        return {} if frame.payload is None else frame.payload

    async def luna_request(self, path: Union[Endpoint, str], params: Optional[JsonableDict]=None) -> JsonableDict:
        """Invokes an internal luna:// service.

        The TV does not accept luna:// requests from network clients directly.
        Instead an alert is created whose close action is the luna call, and the
        alert is closed immediately.
        """
        action: JsonableDict = { "uri": LUNA_PREFIX + str(path), "params": {} if params is None else params }
        alert = await self.request(
            Endpoint.CREATE_ALERT,
            {
                "message": " ",
                "buttons": [ { "label": "", "onClick": action["uri"], "params": action["params"] } ],
                "onclose": action,
                "onfail": action,
            })
        alert_id = alert.get("alertId")
        if not isinstance(alert_id, str):
            raise WebOsTvCommandError(f"{self}: TV did not return an alert id for {action['uri']}", payload=alert)
        return await self.request(Endpoint.CLOSE_ALERT, { "alertId": alert_id })

    async def transact(self, command: CommandMeta, params: Optional[Mapping[str, Any]]=None) -> JsonableDict:
        payload = command.build_payload({} if params is None else params)
        if command.is_luna:
            return await self.luna_request(command.endpoint, payload)
        return await self.request(command.endpoint, payload, prefix=command.prefix)

    async def transact_by_name(self, command_name: str, **params: Any) -> JsonableDict:
        """Sends a catalog command by name (e.g., "audio.set_volume", volume=15)
           and returns the response payload."""
        return await self.transact(name_to_command_meta(command_name), params)

    # ---- api / audio

    async def get_services(self) -> JsonableDict:
        return await self.transact_by_name("api.get_services")

    async def get_volume(self) -> JsonableDict:
        return await self.transact_by_name("audio.get_volume")

    async def set_volume(self, volume: int) -> JsonableDict:
        if not isinstance(volume, int) or volume < 0 or volume > 100:
            raise WebOsTvInvalidArgumentError(f"Volume must be an integer between 0 and 100: {volume!r}")
        return await self.transact_by_name("audio.set_volume", volume=volume)

    async def volume_up(self) -> JsonableDict:
        return await self.transact_by_name("audio.volume_up")

    async def volume_down(self) -> JsonableDict:
        return await self.transact_by_name("audio.volume_down")

    async def set_mute(self, mute: bool) -> JsonableDict:
        return await self.transact_by_name("audio.set_mute", mute=mute)

    async def toggle_mute(self) -> JsonableDict:
        """Mutes the TV if it is unmuted, and vice versa."""
        status = await self.get_audio_status()
        return await self.set_mute(not bool(status.get("mute", False)))

    async def get_audio_status(self) -> JsonableDict:
        return await self.transact_by_name("audio.get_status")

    async def get_sound_output(self) -> Optional[str]:
        """Returns the current sound output wire value (e.g., "tv_speaker")."""
        payload = await self.transact_by_name("audio.get_sound_output")
        result = payload.get("soundOutput")
        return result if isinstance(result, str) else None

    async def set_sound_output(self, output: Union[SoundOutput, str]) -> JsonableDict:
        sound_output = SoundOutput.parse(output)
        if sound_output is None:
            raise WebOsTvInvalidArgumentError(f"Unknown sound output: {output!r}")
        return await self.transact_by_name("audio.set_sound_output", output=sound_output.value)

    async def start_audio_checker(self, output: Union[SoundOutput, str]) -> Optional[WebOsTvInvalidArgumentError]:
        """Starts (or restarts) the watchdog that keeps the sound output pinned to
           output. Returns an error, rather than raising, if output is not a
           recognized sound output."""
        return await self.watchdog.start(output)

    async def stop_audio_checker(self) -> None:
        await self.watchdog.stop()

    # ---- apps

    async def get_current_app_info(self) -> JsonableDict:
        return await self.transact_by_name("app.get_current")

    async def launch_app(
            self,
            app_id: str,
            content_id: Optional[str]=None,
            params: Optional[JsonableDict]=None,
          ) -> JsonableDict:
        return await self.transact_by_name("app.launch", id=app_id, contentId=content_id, params=params)

    async def get_apps(self) -> JsonableDict:
        return await self.transact_by_name("app.list")

    async def get_all_apps(self) -> JsonableDict:
        return await self.transact_by_name("app.list_all")

    async def get_app_status(self, app_id: str) -> JsonableDict:
        return await self.transact_by_name("app.get_status", appId=app_id)

    async def get_app_state(self, app_id: str) -> JsonableDict:
        return await self.transact_by_name("app.get_state", id=app_id)

    async def close_launcher(self) -> JsonableDict:
        return await self.transact_by_name("app.close_launcher")

    async def close_web_app(self) -> JsonableDict:
        return await self.transact_by_name("app.close_web_app")

    # ---- input method

    async def send_enter(self) -> JsonableDict:
        return await self.transact_by_name("ime.send_enter")

    async def send_delete(self, count: int=1) -> JsonableDict:
        return await self.transact_by_name("ime.delete_characters", count=count)

    async def insert_text(self, text: str, replace: bool=False) -> JsonableDict:
        return await self.transact_by_name("ime.insert_text", text=text, replace=replace)

    async def get_input_socket(self) -> JsonableDict:
        """Returns the path of the pointer/button input socket."""
        return await self.transact_by_name("input.get_pointer_socket")

    # ---- display

    async def set_3d_on(self) -> JsonableDict:
        return await self.transact_by_name("display.set_3d_on")

    async def set_3d_off(self) -> JsonableDict:
        return await self.transact_by_name("display.set_3d_off")

    async def get_calibration(self, command: Optional[str]=None, pic_mode: Optional[str]=None) -> JsonableDict:
        return await self.transact_by_name("calibration.get", command=command, picMode=pic_mode)

    async def set_calibration(self, calibration: Mapping[str, Any]) -> JsonableDict:
        """Sends picture calibration data. calibration holds the raw payload fields
           ("command", "data", "dataCount", ...)."""
        return await self.transact_by_name("calibration.set", **calibration)

    async def take_screenshot(self) -> JsonableDict:
        return await self.transact_by_name("tv.take_screenshot")

    # ---- system

    async def get_software_info(self) -> JsonableDict:
        return await self.transact_by_name("system.get_software_info")

    async def get_system_info(self) -> JsonableDict:
        return await self.transact_by_name("system.get_info")

    async def get_system_settings(self, category: str="picture", keys: Optional[List[str]]=None) -> JsonableDict:
        if keys is None:
            keys = [ "backlight", "brightness", "contrast", "color", "pictureMode" ]
        return await self.transact_by_name("system.get_settings", category=category, keys=keys)

    async def get_configs(self, config_names: Optional[List[str]]=None) -> JsonableDict:
        if config_names is None:
            config_names = [ "tv.model.*" ]
        return await self.transact_by_name("system.get_configs", configNames=config_names)

    async def list_devices(self) -> JsonableDict:
        return await self.transact_by_name("system.list_devices")

    # ---- media

    async def media_play(self) -> JsonableDict:
        return await self.transact_by_name("media.play")

    async def media_stop(self) -> JsonableDict:
        return await self.transact_by_name("media.stop")

    async def media_pause(self) -> JsonableDict:
        return await self.transact_by_name("media.pause")

    async def media_rewind(self) -> JsonableDict:
        return await self.transact_by_name("media.rewind")

    async def media_fast_forward(self) -> JsonableDict:
        return await self.transact_by_name("media.fast_forward")

    async def media_close(self, session_id: Optional[str]=None) -> JsonableDict:
        return await self.transact_by_name("media.close", sessionId=session_id)

    # ---- power

    async def power_off(self) -> JsonableDict:
        return await self.transact_by_name("power.off")

    async def toggle_power(self) -> JsonableDict:
        """Requests power off.

        A TV that is fully off is not reachable over the network, so the only
        transition a connected client can reliably request is power off. What
        happens when the TV is in standby is firmware dependent; use wake() to
        turn it on.
        """
        return await self.power_off()

    async def power_on(self) -> JsonableDict:
        """Best-effort power on; only works while the TV is in network standby."""
        return await self.transact_by_name("power.on")

    async def wake(self) -> None:
        """Sends a wake-on-LAN packet to the configured MAC address."""
        if self.config.mac_address is None or self.config.mac_address == '':
            raise WebOsTvInvalidArgumentError(f"{self}: No MAC address configured for wake-on-LAN")
        await send_magic_packet(self.config.mac_address)

    async def get_power_state(self) -> JsonableDict:
        return await self.transact_by_name("power.get_state")

    async def turn_off_screen(self, standby_mode: Optional[str]=None) -> JsonableDict:
        try:
            return await self.transact_by_name("power.screen_off", standbyMode=standby_mode)
        except WebOsTvCommandError as e:
            logger.debug(f"{self}: screen off failed ({e}); trying webOS 4 endpoint")
            return await self.transact_by_name("power.screen_off_wo4", standbyMode=standby_mode)

    async def turn_on_screen(self, standby_mode: Optional[str]=None) -> JsonableDict:
        try:
            return await self.transact_by_name("power.screen_on", standbyMode=standby_mode)
        except WebOsTvCommandError as e:
            logger.debug(f"{self}: screen on failed ({e}); trying webOS 4 endpoint")
            return await self.transact_by_name("power.screen_on_wo4", standbyMode=standby_mode)

    # ---- notifications

    async def show_toast(
            self,
            message: str,
            icon_data: Optional[str]=None,
            icon_extension: Optional[str]=None,
          ) -> JsonableDict:
        return await self.transact_by_name(
            "notification.create_toast", message=message, iconData=icon_data, iconExtension=icon_extension)

    async def close_toast(self, toast_id: str) -> JsonableDict:
        return await self.transact_by_name("notification.close_toast", toastId=toast_id)

    async def show_alert(self, message: str, buttons: Optional[List[JsonableDict]]=None) -> JsonableDict:
        if buttons is None:
            buttons = [ { "label": "OK" } ]
        return await self.transact_by_name("notification.create_alert", message=message, buttons=buttons)

    async def close_alert(self, alert_id: str) -> JsonableDict:
        return await self.transact_by_name("notification.close_alert", alertId=alert_id)

    # ---- tv

    async def channel_up(self) -> JsonableDict:
        return await self.transact_by_name("tv.channel_up")

    async def channel_down(self) -> JsonableDict:
        return await self.transact_by_name("tv.channel_down")

    async def get_channels(self) -> JsonableDict:
        return await self.transact_by_name("tv.get_channels")

    async def get_channel_info(self, channel_id: Optional[str]=None) -> JsonableDict:
        return await self.transact_by_name("tv.get_channel_info", channelId=channel_id)

    async def get_current_channel(self) -> JsonableDict:
        return await self.transact_by_name("tv.get_current_channel")

    async def set_channel(self, channel_id: str) -> JsonableDict:
        return await self.transact_by_name("tv.set_channel", channelId=channel_id)

    async def get_inputs(self) -> JsonableDict:
        return await self.transact_by_name("tv.get_inputs")

    async def set_input(self, input_id: str) -> JsonableDict:
        return await self.transact_by_name("tv.set_input", inputId=input_id)

    # ---- luna services

    async def activate_screensaver(self) -> JsonableDict:
        return await self.transact_by_name("luna.turn_on_screensaver")

    async def reboot(self, reason: Optional[str]=None) -> JsonableDict:
        try:
            return await self.transact_by_name("luna.reboot", reason=reason)
        except WebOsTvCommandError as e:
            logger.debug(f"{self}: reboot failed ({e}); trying webOS 4 endpoint")
            return await self.transact_by_name("luna.reboot_wo4", reason=reason)

    async def show_input_picker(self) -> JsonableDict:
        return await self.transact_by_name("luna.show_input_picker")

    async def set_configs(self, configs: JsonableDict) -> JsonableDict:
        return await self.transact_by_name("luna.set_configs", configs=configs)

    async def set_system_settings(self, category: str, settings: JsonableDict) -> JsonableDict:
        return await self.transact_by_name("luna.set_system_settings", category=category, settings=settings)

    async def set_device_info(self, input_id: str, icon: str, label: str) -> JsonableDict:
        return await self.transact_by_name("luna.set_device_info", id=input_id, icon=icon, label=label)

    async def eject_device(self, device_id: str) -> JsonableDict:
        return await self.transact_by_name("luna.eject_device", deviceId=device_id)

    async def set_oled_temporal_peak_control(self, enable: bool) -> JsonableDict:
        return await self.transact_by_name("luna.set_tpc", enable=enable)

    async def set_oled_global_stress_reduction(self, enable: bool) -> JsonableDict:
        return await self.transact_by_name("luna.set_gsr", enable=enable)

    async def set_white_balance(self, color_temperature: int, pic_mode: str) -> JsonableDict:
        return await self.transact_by_name("luna.set_white_balance", colorTemperature=color_temperature, picMode=pic_mode)

    def __str__(self) -> str:
        return f"WebOsTvClient({self.endpoint})"

    def __repr__(self) -> str:
       return str(self)
