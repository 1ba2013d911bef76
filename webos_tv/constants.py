# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by webos_tv"""

DEFAULT_PROTOCOL = "wss"
"""The default WebSocket scheme. Recent webOS firmware only accepts TLS connections."""

DEFAULT_SECURE_PORT = 3001
"""The listen port used by the TV for SSAP over TLS (wss://)."""

DEFAULT_INSECURE_PORT = 3000
"""The listen port used by the TV for plain SSAP (ws://)."""

DEFAULT_PREFIX = "ssap://"
"""The URI prefix prepended to a relative command path."""

LUNA_PREFIX = "luna://"
"""The URI prefix for internal luna service calls, which can only be reached
   indirectly (see WebOsTvClient.luna_request)."""

DEFAULT_TIMEOUT = 5.0
"""The time to wait for a matching response to a request, in seconds."""

READY_TIMEOUT = 5.0
"""The time a request waits for the connection to become registered before
   failing with WebOsTvSocketNotReadyError, in seconds."""

CONNECT_TIMEOUT = 10.0
"""The timeout for opening the WebSocket (TCP + TLS + HTTP upgrade), in seconds."""

CONNECT_RETRY_INTERVAL = 1.0
"""The fixed delay between reconnection attempts, in seconds. There is no backoff;
   TVs come back quickly after sleep/wake or reboot."""

CONNECTION_LOSS_LOG_INTERVAL = 2.5
"""At most one connection-loss log line is emitted per this many seconds."""

WATCHDOG_POLL_INTERVAL = 2.0
"""The default interval between sound output checks by the watchdog, in seconds."""

DEFAULT_KEY_DIR = "keys"
"""The default directory, relative to the working directory, that holds pairing keys."""

MAX_FRAME_SIZE = 16 * 1024 * 1024
"""Largest inbound frame accepted. Channel lists and app lists can be large."""

WOL_PORT = 9
"""UDP port for wake-on-LAN magic packets."""
