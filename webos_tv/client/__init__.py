# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV client.

Provides a reconnecting, self-registering client for LG webOS TVs.
"""

from .resolve_host import TvEndpoint, resolve_tv_endpoint, default_port_for_protocol
from .client_transport import TlsPolicy, TransportListener, WebOsTvClientTransport
from .ws_client_transport import WebSocketClientTransport, create_ssl_context
from .credential_store import CredentialStore
from .session import ConnectionState, ConnectionSession
from .registration import RegistrationState, RegistrationStateMachine
from .correlator import RequestCorrelator
from .watchdog import SoundOutputWatchdog
from .simple import webos_tv_connect
from .client_config import WebOsTvClientConfig
from .client_impl import (
    WebOsTvClient,
  )
