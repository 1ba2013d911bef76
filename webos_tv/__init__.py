# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package webos_tv provides an API and a REST server for controlling
LG webOS TVs via their SSAP WebSocket protocol.
"""

from .version import __version__

from .pkg_logging import logger

from .internal_types import Jsonable, JsonableDict

from .exceptions import (
    WebOsTvError,
    WebOsTvTimeoutError,
    WebOsTvSocketNotReadyError,
    WebOsTvParseError,
    WebOsTvInvalidArgumentError,
    WebOsTvTransportError,
    WebOsTvPersistenceError,
    WebOsTvCommandError,
  )

from .constants import (
    DEFAULT_PROTOCOL,
    DEFAULT_SECURE_PORT,
    DEFAULT_INSECURE_PORT,
    DEFAULT_TIMEOUT,
    DEFAULT_PREFIX,
    LUNA_PREFIX,
  )

from .client import (
    WebOsTvClient,
    WebOsTvClientConfig,
    TvEndpoint,
    TlsPolicy,
    CredentialStore,
    ConnectionState,
    resolve_tv_endpoint,
    webos_tv_connect,
  )

from .protocol import (
    Endpoint,
    SoundOutput,
    CommandMeta,
    OutboundFrame,
    InboundFrame,
    get_all_commands,
    name_to_command_meta,
  )

from .wol import send_magic_packet
