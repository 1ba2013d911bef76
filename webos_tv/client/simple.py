# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV simple client connection API.

Provides a simple API for connecting to a TV from a configuration.
"""

from __future__ import annotations

from ..internal_types import *
from .client_config import WebOsTvClientConfig
from .client_impl import WebOsTvClient

async def webos_tv_connect(
        host: Optional[str]=None,
        config: Optional[WebOsTvClientConfig]=None,
        wait_registered: bool=False,
      ) -> WebOsTvClient:
    """Create a webOS TV client from a configuration and start connecting.

    Args:
        host: The hostname or IP address of the TV.
                May optionally be prefixed with "ws://" or "wss://".
                May be suffixed with ":<port>" to specify a
                non-default port.
                If None, the host will be taken from the config, or the
                TV_IP environment variable.
        config: A WebOsTvClientConfig object that specifies
                the default host, port, key directory, etc. to use.
                If None, a default config will be created.
        wait_registered:
                If True, waits until the connection is registered (paired)
                before returning. Requests wait for registration anyway,
                so this is only useful to surface connection problems early.
    """
    config = WebOsTvClientConfig(
        default_host=host,
        base_config=config
      )
    client = await WebOsTvClient.create(config=config)
    try:
        if wait_registered:
            await client.wait_registered()
    except BaseException:
        await client.aclose()
        raise

    return client
