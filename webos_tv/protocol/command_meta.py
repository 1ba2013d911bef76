#!/usr/bin/env python3

"""
webOS TV known commands and metadata.

This module maps semantic command names (e.g., "audio.set_volume") to the
relative endpoint path, URI prefix, and payload parameters of each command.

There is no protocol implementation here; only metadata about the protocol.
"""
from __future__ import annotations

from ..internal_types import *
from ..exceptions import WebOsTvInvalidArgumentError
from ..constants import DEFAULT_PREFIX, LUNA_PREFIX
from .endpoints import Endpoint

class CommandMeta:
    """Metadata for a single named command"""
    name: str
    endpoint: Endpoint
    params: Tuple[str, ...]
    """Names of the payload fields accepted by the command."""
    optional_params: Tuple[str, ...]
    """Names of payload fields that may be omitted."""
    prefix: str
    description: str

    def __init__(
            self,
            name: str,
            endpoint: Endpoint,
            description: str,
            params: Iterable[str]=(),
            optional_params: Iterable[str]=(),
            prefix: str=DEFAULT_PREFIX,
          ):
        self.name = name
        self.endpoint = endpoint
        self.description = description
        self.params = tuple(params)
        self.optional_params = tuple(optional_params)
        self.prefix = prefix

    @property
    def is_luna(self) -> bool:
        """True if the command targets an internal luna service."""
        return self.prefix == LUNA_PREFIX

    @property
    def uri(self) -> str:
        return self.prefix + self.endpoint.value

    def build_payload(self, params: Mapping[str, Any]) -> Optional[JsonableDict]:
        """Validates keyword parameters against this command and returns the request
           payload, or None if the command takes no payload."""
        unknown = [ k for k in params if not k in self.params ]
        if len(unknown) > 0:
            raise WebOsTvInvalidArgumentError(f"Command {self.name}: unexpected parameter(s): {', '.join(unknown)}")
        missing = [ k for k in self.params if not k in params and not k in self.optional_params ]
        if len(missing) > 0:
            raise WebOsTvInvalidArgumentError(f"Command {self.name}: missing parameter(s): {', '.join(missing)}")
        if len(self.params) == 0:
            return None
        return { k: v for k, v in params.items() if v is not None }

    def __str__(self) -> str:
        return f"CommandMeta(name={self.name!r}, uri={self.uri!r})"

    def __repr__(self) -> str:
        return str(self)

_commands: List[CommandMeta] = [
    CommandMeta("api.get_services", Endpoint.GET_SERVICES, "Get the list of services available on the TV."),
    CommandMeta("audio.get_volume", Endpoint.GET_VOLUME, "Get the current volume."),
    CommandMeta("audio.set_volume", Endpoint.SET_VOLUME, "Set the volume.", params=("volume",)),
    CommandMeta("audio.volume_up", Endpoint.VOLUME_UP, "Increase the volume by one step."),
    CommandMeta("audio.volume_down", Endpoint.VOLUME_DOWN, "Decrease the volume by one step."),
    CommandMeta("audio.set_mute", Endpoint.SET_MUTE, "Mute or unmute.", params=("mute",)),
    CommandMeta("audio.get_status", Endpoint.GET_AUDIO_STATUS, "Get volume, mute state and sound output."),
    CommandMeta("audio.get_sound_output", Endpoint.GET_SOUND_OUTPUT, "Get the current sound output device."),
    CommandMeta("audio.set_sound_output", Endpoint.CHANGE_SOUND_OUTPUT, "Set the sound output device.", params=("output",)),
    CommandMeta("app.get_current", Endpoint.GET_CURRENT_APP_INFO, "Get the foreground app."),
    CommandMeta("app.launch", Endpoint.LAUNCH, "Launch an app.", params=("id", "contentId", "params"), optional_params=("contentId", "params")),
    CommandMeta("app.list", Endpoint.GET_APPS, "List launch points."),
    CommandMeta("app.list_all", Endpoint.GET_APPS_ALL, "List all installed apps."),
    CommandMeta("app.get_status", Endpoint.GET_APP_STATUS, "Get the status of an app.", params=("appId",)),
    CommandMeta("app.get_state", Endpoint.GET_APP_STATE, "Get the launcher state of an app.", params=("id",)),
    CommandMeta("app.close_launcher", Endpoint.LAUNCHER_CLOSE, "Close the launcher."),
    CommandMeta("app.close_web_app", Endpoint.CLOSE_WEB_APP, "Close the foreground web app."),
    CommandMeta("ime.send_enter", Endpoint.SEND_ENTER, "Send the enter key to the input method."),
    CommandMeta("ime.delete_characters", Endpoint.SEND_DELETE, "Delete characters in the input method.", params=("count",)),
    CommandMeta("ime.insert_text", Endpoint.INSERT_TEXT, "Insert text in the input method.", params=("text", "replace"), optional_params=("replace",)),
    CommandMeta("display.set_3d_on", Endpoint.SET_3D_ON, "Turn 3D mode on."),
    CommandMeta("display.set_3d_off", Endpoint.SET_3D_OFF, "Turn 3D mode off."),
    CommandMeta("system.get_software_info", Endpoint.GET_SOFTWARE_INFO, "Get firmware information."),
    CommandMeta("system.get_info", Endpoint.GET_SYSTEM_INFO, "Get system information."),
    CommandMeta("system.get_settings", Endpoint.GET_SYSTEM_SETTINGS, "Get system settings.", params=("category", "keys")),
    CommandMeta("system.get_configs", Endpoint.GET_CONFIGS, "Get configuration values.", params=("configNames",)),
    CommandMeta("system.list_devices", Endpoint.LIST_DEVICES, "List attached storage devices."),
    CommandMeta("media.play", Endpoint.MEDIA_PLAY, "Play."),
    CommandMeta("media.stop", Endpoint.MEDIA_STOP, "Stop."),
    CommandMeta("media.pause", Endpoint.MEDIA_PAUSE, "Pause."),
    CommandMeta("media.rewind", Endpoint.MEDIA_REWIND, "Rewind."),
    CommandMeta("media.fast_forward", Endpoint.MEDIA_FAST_FORWARD, "Fast forward."),
    CommandMeta("media.close", Endpoint.MEDIA_CLOSE, "Close the media viewer.", params=("sessionId",), optional_params=("sessionId",)),
    CommandMeta("power.off", Endpoint.POWER_OFF, "Request power off."),
    CommandMeta("power.on", Endpoint.POWER_ON, "Request power on (only works while the TV is in standby with networking active)."),
    CommandMeta("power.get_state", Endpoint.GET_POWER_STATE, "Get the power state."),
    CommandMeta("power.screen_off", Endpoint.TURN_OFF_SCREEN, "Turn the screen off.", params=("standbyMode",), optional_params=("standbyMode",)),
    CommandMeta("power.screen_on", Endpoint.TURN_ON_SCREEN, "Turn the screen on.", params=("standbyMode",), optional_params=("standbyMode",)),
    CommandMeta("power.screen_off_wo4", Endpoint.TURN_OFF_SCREEN_WO4, "Turn the screen off (webOS 4).", params=("standbyMode",), optional_params=("standbyMode",)),
    CommandMeta("power.screen_on_wo4", Endpoint.TURN_ON_SCREEN_WO4, "Turn the screen on (webOS 4).", params=("standbyMode",), optional_params=("standbyMode",)),
    CommandMeta("notification.create_toast", Endpoint.CREATE_TOAST, "Show a toast.", params=("message", "iconData", "iconExtension"), optional_params=("iconData", "iconExtension")),
    CommandMeta("notification.close_toast", Endpoint.CLOSE_TOAST, "Close a toast.", params=("toastId",)),
    CommandMeta("notification.create_alert", Endpoint.CREATE_ALERT, "Show an alert.", params=("message", "buttons", "onclose", "onfail"), optional_params=("buttons", "onclose", "onfail")),
    CommandMeta("notification.close_alert", Endpoint.CLOSE_ALERT, "Close an alert.", params=("alertId",)),
    CommandMeta("tv.channel_up", Endpoint.TV_CHANNEL_UP, "Next channel."),
    CommandMeta("tv.channel_down", Endpoint.TV_CHANNEL_DOWN, "Previous channel."),
    CommandMeta("tv.get_channels", Endpoint.GET_TV_CHANNELS, "List channels."),
    CommandMeta("tv.get_channel_info", Endpoint.GET_CHANNEL_INFO, "Get program info for a channel.", params=("channelId",), optional_params=("channelId",)),
    CommandMeta("tv.get_current_channel", Endpoint.GET_CURRENT_CHANNEL, "Get the current channel."),
    CommandMeta("tv.set_channel", Endpoint.SET_CHANNEL, "Switch to a channel.", params=("channelId",)),
    CommandMeta("tv.get_inputs", Endpoint.GET_INPUTS, "List external inputs."),
    CommandMeta("tv.set_input", Endpoint.SET_INPUT, "Switch to an external input.", params=("inputId",)),
    CommandMeta("tv.take_screenshot", Endpoint.TAKE_SCREENSHOT, "Capture the screen.", params=("path", "method", "format"), optional_params=("path", "method", "format")),
    CommandMeta("input.get_pointer_socket", Endpoint.INPUT_SOCKET, "Get the pointer input socket path."),
    CommandMeta("calibration.get", Endpoint.GET_CALIBRATION, "Get picture calibration data.", params=("command", "picMode"), optional_params=("command", "picMode")),
    CommandMeta("calibration.set", Endpoint.CALIBRATION, "Set picture calibration data.", params=("command", "data", "dataCount", "dataType", "dataOpt", "picMode", "profileNo", "programID"), optional_params=("data", "dataCount", "dataType", "dataOpt", "picMode", "profileNo", "programID")),
    CommandMeta("luna.turn_on_screensaver", Endpoint.LUNA_TURN_ON_SCREEN_SAVER, "Activate the screensaver.", prefix=LUNA_PREFIX),
    CommandMeta("luna.reboot", Endpoint.LUNA_REBOOT_TV, "Reboot the TV.", params=("reason",), optional_params=("reason",), prefix=LUNA_PREFIX),
    CommandMeta("luna.reboot_wo4", Endpoint.LUNA_REBOOT_TV_WO4, "Reboot the TV (webOS 4).", params=("reason",), optional_params=("reason",), prefix=LUNA_PREFIX),
    CommandMeta("luna.show_input_picker", Endpoint.LUNA_SHOW_INPUT_PICKER, "Show the input picker.", prefix=LUNA_PREFIX),
    CommandMeta("luna.set_configs", Endpoint.LUNA_SET_CONFIGS, "Set configuration values.", params=("configs",), prefix=LUNA_PREFIX),
    CommandMeta("luna.set_system_settings", Endpoint.LUNA_SET_SYSTEM_SETTINGS, "Set system settings.", params=("category", "settings"), prefix=LUNA_PREFIX),
    CommandMeta("luna.set_device_info", Endpoint.LUNA_SET_DEVICE_INFO, "Set input device info.", params=("id", "icon", "label"), prefix=LUNA_PREFIX),
    CommandMeta("luna.eject_device", Endpoint.LUNA_EJECT_DEVICE, "Eject an attached storage device.", params=("deviceId",), prefix=LUNA_PREFIX),
    CommandMeta("luna.set_tpc", Endpoint.LUNA_SET_TPC, "Enable/disable OLED temporal peak control.", params=("enable",), prefix=LUNA_PREFIX),
    CommandMeta("luna.set_gsr", Endpoint.LUNA_SET_GSR, "Enable/disable OLED global stress reduction.", params=("enable",), prefix=LUNA_PREFIX),
    CommandMeta("luna.set_white_balance", Endpoint.LUNA_SET_WHITE_BALANCE, "Set white balance.", params=("colorTemperature", "picMode"), prefix=LUNA_PREFIX),
  ]

_name_to_command_meta: Dict[str, CommandMeta] = { c.name: c for c in _commands }

def get_all_commands() -> List[CommandMeta]:
    """Returns metadata for all known commands, in catalog order."""
    return list(_commands)

def name_to_command_meta(name: str) -> CommandMeta:
    """Returns metadata for a command by name.

    Raises WebOsTvInvalidArgumentError if the name is not known.
    """
    result = _name_to_command_meta.get(name)
    if result is None:
        raise WebOsTvInvalidArgumentError(f"Unknown command name: {name}")
    return result
