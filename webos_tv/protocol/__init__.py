# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Low-level protocol definitions for LG webOS TVs (SSAP over WebSocket).
"""

from .endpoints import (
    Endpoint,
    SoundOutput,
    sound_output_values,
  )

from .frame import (
    OutboundFrame,
    OutboundFrameType,
    InboundFrame,
    InboundFrameType,
  )

from .handshake import (
    CLIENT_KEY_FIELD,
    DEFAULT_MANIFEST,
    handshake_payload,
    load_manifest,
)

from .command_meta import (
    CommandMeta,
    get_all_commands,
    name_to_command_meta,
  )
