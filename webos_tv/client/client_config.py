# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV client configuration.

Provides a general config object for a WebOsTvClient.
"""

from __future__ import annotations

import os

from ..internal_types import *
from ..exceptions import WebOsTvError
from ..constants import (
    DEFAULT_PROTOCOL,
    DEFAULT_TIMEOUT,
    READY_TIMEOUT,
    CONNECT_TIMEOUT,
    CONNECT_RETRY_INTERVAL,
    WATCHDOG_POLL_INTERVAL,
    DEFAULT_KEY_DIR,
  )
from ..protocol import SoundOutput
from .client_transport import TlsPolicy

def _env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value == '':
        return None
    return value.strip().lower() in ('1', 'true', 'yes', 'on')

def _env_float(name: str) -> Optional[float]:
    value = os.environ.get(name)
    if value is None or value == '':
        return None
    return float(value)

class WebOsTvClientConfig:
    """webOS TV client configuration."""
    default_host: Optional[str]
    default_protocol: str
    default_port: Optional[int]
    mac_address: Optional[str]
    key_dir: str
    tls_policy: TlsPolicy
    timeout_secs: float
    ready_timeout_secs: float
    connect_timeout_secs: float
    reconnect_delay_secs: float
    audio_checker_output: Optional[str]
    watchdog_poll_secs: float
    watchdog_quirk_mode: bool
    handshake_manifest_path: Optional[str]

    def __init__(
            self,
            default_host: Optional[str]=None,
            *,
            default_protocol: Optional[str]=None,
            default_port: Optional[int]=None,
            mac_address: Optional[str]=None,
            key_dir: Optional[str]=None,
            tls_policy: Optional[Union[TlsPolicy, str]]=None,
            timeout_secs: Optional[float]=None,
            ready_timeout_secs: Optional[float]=None,
            connect_timeout_secs: Optional[float]=None,
            reconnect_delay_secs: Optional[float]=None,
            audio_checker_output: Optional[str]=None,
            watchdog_poll_secs: Optional[float]=None,
            watchdog_quirk_mode: Optional[bool]=None,
            handshake_manifest_path: Optional[str]=None,
            base_config: Optional[WebOsTvClientConfig]=None
          ) -> None:
        """Creates a configuration for a webOS TV client.

           Args:
             default_host: The hostname or IP address of the TV.
                   May optionally be prefixed with "ws://" or "wss://".
                   May be suffixed with ":<port>" to specify a
                   non-default port, which will override the default_port argument.
                   If None, the default host will be taken from the
                     TV_IP environment variable.
             default_protocol: "ws" or "wss". If None, taken from TV_PROTOCOL,
                   defaulting to "wss".
             default_port: The default port number to use.
                    If None, the default port will be taken from TV_PORT.
                    If that environment variable is not found, the standard
                    port for the protocol (3001 for wss, 3000 for ws) is used.
             mac_address:
                   The TV's MAC address, used for wake-on-LAN. If None,
                   taken from TV_MAC.
             key_dir:
                   Directory that holds pairing keys, one file per TV address.
                   If None, taken from KEY_PATH, defaulting to "./keys".
             tls_policy:
                   Whether to verify the TV's TLS certificate. TVs present
                   self-signed certificates, so the default is
                   TlsPolicy.NO_VERIFY unless TV_VERIFY_TLS is set to true.
             timeout_secs:
                   The time to wait for a response to each request, in seconds.
                   If None, taken from TV_TIMEOUT, defaulting to 5 seconds.
             ready_timeout_secs:
                   The time a request waits for registration to complete.
             connect_timeout_secs:
                   The timeout for each connection attempt.
             reconnect_delay_secs:
                   The fixed delay between reconnection attempts.
             audio_checker_output:
                   If not None, the sound output the watchdog should pin
                   at startup. If None, taken from AUDIO_CHECKER.
             watchdog_poll_secs:
                   The interval between watchdog checks.
             watchdog_quirk_mode:
                   If True, a failed sound output correction is retried as
                   desired -> tv_speaker -> desired.
             handshake_manifest_path:
                   Optional path of a JSON file holding a (signed) client
                   manifest to send during registration.
             base_config:
                     An optional base configuration to use.
        """
        if base_config is None:
            self.init_from_defaults()
        else:
            self.init_from_base_config(base_config)

        if default_host is not None and default_host != '':
            self.default_host = default_host

        if default_protocol is not None and default_protocol != '':
            self.default_protocol = default_protocol.lower()

        if default_port is not None and default_port > 0:
            self.default_port = default_port

        if mac_address is not None:
            self.mac_address = mac_address

        if key_dir is not None and key_dir != '':
            self.key_dir = key_dir

        if tls_policy is not None:
            self.tls_policy = TlsPolicy(tls_policy)

        if timeout_secs is not None:
            self.timeout_secs = timeout_secs

        if ready_timeout_secs is not None:
            self.ready_timeout_secs = ready_timeout_secs

        if connect_timeout_secs is not None:
            self.connect_timeout_secs = connect_timeout_secs

        if reconnect_delay_secs is not None:
            self.reconnect_delay_secs = reconnect_delay_secs

        if audio_checker_output is not None:
            if SoundOutput.parse(audio_checker_output) is None:
                raise WebOsTvError(f"Unknown sound output: {audio_checker_output}")
            self.audio_checker_output = audio_checker_output

        if watchdog_poll_secs is not None:
            self.watchdog_poll_secs = watchdog_poll_secs

        if watchdog_quirk_mode is not None:
            self.watchdog_quirk_mode = watchdog_quirk_mode

        if handshake_manifest_path is not None:
            self.handshake_manifest_path = handshake_manifest_path

    def init_from_defaults(self) -> None:
        """Initializes the configuration from environment variables and defaults."""
        default_host: Optional[str] = os.environ.get('TV_IP')
        if default_host == '':
            default_host = None
        self.default_host = default_host
        default_protocol = os.environ.get('TV_PROTOCOL')
        if default_protocol is None or default_protocol == '':
            default_protocol = DEFAULT_PROTOCOL
        self.default_protocol = default_protocol.lower()
        default_port_str = os.environ.get('TV_PORT')
        default_port: Optional[int] = None
        if not default_port_str is None and default_port_str != '':
            default_port = int(default_port_str)
        self.default_port = default_port
        mac_address = os.environ.get('TV_MAC')
        if mac_address == '':
            mac_address = None
        self.mac_address = mac_address
        key_dir = os.environ.get('KEY_PATH')
        if key_dir is None or key_dir == '':
            key_dir = os.path.join(os.getcwd(), DEFAULT_KEY_DIR)
        self.key_dir = key_dir
        verify_tls = _env_bool('TV_VERIFY_TLS')
        self.tls_policy = TlsPolicy.VERIFY if verify_tls else TlsPolicy.NO_VERIFY
        timeout_secs = _env_float('TV_TIMEOUT')
        self.timeout_secs = DEFAULT_TIMEOUT if timeout_secs is None else timeout_secs
        self.ready_timeout_secs = READY_TIMEOUT
        self.connect_timeout_secs = CONNECT_TIMEOUT
        self.reconnect_delay_secs = CONNECT_RETRY_INTERVAL
        audio_checker_output = os.environ.get('AUDIO_CHECKER')
        if audio_checker_output == '':
            audio_checker_output = None
        self.audio_checker_output = audio_checker_output
        self.watchdog_poll_secs = WATCHDOG_POLL_INTERVAL
        quirk_mode = _env_bool('AUDIO_CHECKER_QUIRK_MODE')
        self.watchdog_quirk_mode = bool(quirk_mode)
        manifest_path = os.environ.get('TV_MANIFEST_PATH')
        if manifest_path == '':
            manifest_path = None
        self.handshake_manifest_path = manifest_path

    def init_from_base_config(self, base_config: WebOsTvClientConfig) -> None:
        """Initializes the configuration from a base configuration."""
        self.default_host = base_config.default_host
        self.default_protocol = base_config.default_protocol
        self.default_port = base_config.default_port
        self.mac_address = base_config.mac_address
        self.key_dir = base_config.key_dir
        self.tls_policy = base_config.tls_policy
        self.timeout_secs = base_config.timeout_secs
        self.ready_timeout_secs = base_config.ready_timeout_secs
        self.connect_timeout_secs = base_config.connect_timeout_secs
        self.reconnect_delay_secs = base_config.reconnect_delay_secs
        self.audio_checker_output = base_config.audio_checker_output
        self.watchdog_poll_secs = base_config.watchdog_poll_secs
        self.watchdog_quirk_mode = base_config.watchdog_quirk_mode
        self.handshake_manifest_path = base_config.handshake_manifest_path

    @classmethod
    def from_jsonable(cls, data: JsonableDict) -> WebOsTvClientConfig:
        """Creates a configuration from a JSON-style dict (e.g., a config file).
           Missing keys fall back to environment variables and defaults."""
        return cls(
            default_host=data.get('host'),
            default_protocol=data.get('protocol'),
            default_port=data.get('port'),
            mac_address=data.get('mac_address'),
            key_dir=data.get('key_dir'),
            tls_policy=data.get('tls_policy'),
            timeout_secs=data.get('timeout_secs'),
            ready_timeout_secs=data.get('ready_timeout_secs'),
            connect_timeout_secs=data.get('connect_timeout_secs'),
            reconnect_delay_secs=data.get('reconnect_delay_secs'),
            audio_checker_output=data.get('audio_checker_output'),
            watchdog_poll_secs=data.get('watchdog_poll_secs'),
            watchdog_quirk_mode=data.get('watchdog_quirk_mode'),
            handshake_manifest_path=data.get('handshake_manifest_path'),
          )

    def __str__(self) -> str:
        return (
            f"WebOsTvClientConfig("
            f"default_host={self.default_host}, "
            f"default_protocol={self.default_protocol}, "
            f"default_port={self.default_port}, "
            f"tls_policy={self.tls_policy.value}, "
            f"timeout_secs={self.timeout_secs!r})"
          )

    def __repr__(self) -> str:
        return str(self)
