# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV emulator.

Provides a simple emulation of a webOS TV's SSAP WebSocket endpoint.
"""

from .emulator_impl import WebOsTvEmulator, PairingMode
