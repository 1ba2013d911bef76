# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import copy
import json

from ..internal_types import *
from ..exceptions import WebOsTvError

# Registration handshake, performed once per connection:
#   Client: {"type": "register", "payload": <descriptor>[+ "client-key"]}
#   TV:     {"type": "response", "payload": {"pairingType": "PROMPT", ...}}
#             only if the key is missing or unknown; the TV shows a pairing prompt
#   TV:     {"type": "registered", "payload": {"client-key": <key>}}
#   <Normal request/response session begins>

CLIENT_KEY_FIELD = "client-key"
"""Payload field carrying the pairing credential, in both directions."""

PAIRING_TYPE = "PROMPT"
"""Pairing by on-screen confirmation."""

DEFAULT_PERMISSIONS: List[str] = [
    "LAUNCH",
    "LAUNCH_WEBAPP",
    "APP_TO_APP",
    "CLOSE",
    "TEST_OPEN",
    "TEST_PROTECTED",
    "CONTROL_AUDIO",
    "CONTROL_DISPLAY",
    "CONTROL_INPUT_JOYSTICK",
    "CONTROL_INPUT_MEDIA_RECORDING",
    "CONTROL_INPUT_MEDIA_PLAYBACK",
    "CONTROL_INPUT_TV",
    "CONTROL_POWER",
    "CONTROL_TV_SCREEN",
    "CONTROL_TV_STANBY",
    "CONTROL_FAVORITE_GROUP",
    "CONTROL_USER_INFO",
    "CONTROL_BLUETOOTH",
    "CONTROL_TIMER_INFO",
    "CONTROL_RECORDING",
    "CONTROL_BOX_CHANNEL",
    "CONTROL_CHANNEL_BLOCK",
    "CONTROL_CHANNEL_GROUP",
    "CONTROL_TV_POWER",
    "CONTROL_WOL",
    "CONTROL_INPUT_TEXT",
    "CONTROL_MOUSE_AND_KEYBOARD",
    "READ_APP_STATUS",
    "READ_CURRENT_CHANNEL",
    "READ_INPUT_DEVICE_LIST",
    "READ_NETWORK_STATE",
    "READ_RUNNING_APPS",
    "READ_TV_CHANNEL_LIST",
    "READ_POWER_STATE",
    "READ_COUNTRY_INFO",
    "READ_SETTINGS",
    "READ_LGE_TV_INPUT_EVENTS",
    "READ_TV_CURRENT_TIME",
    "READ_INSTALLED_APPS",
    "READ_LGE_SDX",
    "READ_NOTIFICATIONS",
    "SEARCH",
    "WRITE_SETTINGS",
    "WRITE_NOTIFICATION_ALERT",
    "WRITE_NOTIFICATION_TOAST",
    "ADD_LAUNCHER_CHANNEL",
    "SET_CHANNEL_OVERRIDE",
    "UPDATE_FROM_REMOTE_APP",
    "STB_INTERNAL_CONNECTION",
  ]
"""Permissions requested by the client."""

DEFAULT_MANIFEST: JsonableDict = {
    "manifestVersion": 1,
    "appVersion": "1.1",
    "permissions": DEFAULT_PERMISSIONS,
  }
"""Unsigned client manifest. Some firmware versions require a signed manifest;
   one can be supplied with load_manifest()."""

def load_manifest(path: str) -> JsonableDict:
    """Loads a client manifest (e.g., one that includes a "signed" block and
       "signatures") from a JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            manifest = json.load(f)
    except (OSError, ValueError) as e:
        raise WebOsTvError(f"Unable to load handshake manifest from {path}") from e
    if not isinstance(manifest, dict):
        raise WebOsTvError(f"Handshake manifest in {path} is not a JSON object")
    return manifest

def handshake_payload(
        client_key: Optional[str]=None,
        manifest: Optional[JsonableDict]=None,
      ) -> JsonableDict:
    """Builds the payload of a register frame.

    The descriptor is fixed; the previously obtained client key is added only
    when one is known.
    """
    payload: JsonableDict = {
        "forcePairing": False,
        "pairingType": PAIRING_TYPE,
        "manifest": copy.deepcopy(DEFAULT_MANIFEST if manifest is None else manifest),
      }
    if client_key is not None and client_key != '':
        payload[CLIENT_KEY_FIELD] = client_key
    return payload
