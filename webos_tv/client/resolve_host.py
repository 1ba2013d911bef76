# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV endpoint resolver.

Provides a method that can resolve various host specifiers and environment
variables into a WebSocket endpoint (protocol, address, port).
"""

from __future__ import annotations

import os

from ..internal_types import *
from ..exceptions import WebOsTvError
from ..constants import DEFAULT_PROTOCOL, DEFAULT_SECURE_PORT, DEFAULT_INSECURE_PORT

class TvEndpoint:
    """The WebSocket endpoint of a TV."""
    protocol: str
    address: str
    port: int

    def __init__(self, protocol: str, address: str, port: int):
        self.protocol = protocol
        self.address = address
        self.port = port

    @property
    def url(self) -> str:
        host = f"[{self.address}]" if ':' in self.address else self.address
        return f"{self.protocol}://{host}:{self.port}"

    @property
    def is_secure(self) -> bool:
        return self.protocol == "wss"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TvEndpoint):
            return NotImplemented
        return (self.protocol, self.address, self.port) == (other.protocol, other.address, other.port)

    def __hash__(self) -> int:
        return hash((self.protocol, self.address, self.port))

    def __str__(self) -> str:
        return self.url

    def __repr__(self) -> str:
        return f"TvEndpoint({self.url})"

def default_port_for_protocol(protocol: str) -> int:
    return DEFAULT_SECURE_PORT if protocol == "wss" else DEFAULT_INSECURE_PORT

def resolve_tv_endpoint(
        host: Optional[str]=None,
        default_protocol: Optional[str]=None,
        default_port: Optional[int]=None,
      ) -> TvEndpoint:
    """Resolves a TV host string into an endpoint.

        Args:
            host: The hostname or IP address of the TV.
                    May optionally be prefixed with "ws://" or "wss://",
                    which overrides default_protocol.
                    May be suffixed with ":<port>" to specify a
                    non-default port, which will override the default_port argument.
                    IPv6 literals must be bracketed when a port is given.
                    If None, the host will be taken from the
                    TV_IP environment variable.
            default_protocol: "ws" or "wss". If None, the protocol will be taken
                    from the TV_PROTOCOL environment variable. If that
                    environment variable is not found, "wss" is used.
            default_port: The default port number to use. If None, the port
                    will be taken from TV_PORT. If that environment
                    variable is not found, 3001 is used for wss and 3000 for ws.

        Returns:
            The resolved TvEndpoint.
    """
    if host is None or host == '':
        host = os.environ.get('TV_IP')
        if host is None or host == '':
            raise WebOsTvError("No TV host specified, and TV_IP is not set")

    if default_protocol is None or default_protocol == '':
        default_protocol = os.environ.get('TV_PROTOCOL')
        if default_protocol is None or default_protocol == '':
            default_protocol = DEFAULT_PROTOCOL

    protocol = default_protocol.lower()
    if '://' in host:
        protocol, host = host.split('://', 1)
        protocol = protocol.lower()
    if not protocol in ('ws', 'wss'):
        raise WebOsTvError(f"Unsupported protocol for webOS TV: '{protocol}'")
    host = host.rstrip('/')

    port: Optional[int] = None
    if host.startswith('['):
        # bracketed IPv6 literal
        address, _, rest = host[1:].partition(']')
        if rest.startswith(':'):
            port = int(rest[1:])
        host = address
    elif host.count(':') == 1:
        host, port_str = host.rsplit(':', 1)
        port = int(port_str)

    if port is None:
        if default_port is None or default_port <= 0:
            default_port_str = os.environ.get('TV_PORT')
            if default_port_str is None or default_port_str == '':
                default_port = default_port_for_protocol(protocol)
            else:
                default_port = int(default_port_str)
        port = default_port

    return TvEndpoint(protocol, host, port)
