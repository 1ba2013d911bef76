# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Wake-on-LAN.

Sends a magic packet (6 bytes of 0xff followed by the target MAC address
repeated 16 times) as a UDP broadcast. Delivery is not confirmed.
"""

from __future__ import annotations

import asyncio
import re
import socket

from .internal_types import *
from .constants import WOL_PORT
from .exceptions import WebOsTvInvalidArgumentError
from .pkg_logging import logger

DEFAULT_BROADCAST_ADDRESS = "255.255.255.255"

def parse_mac_address(mac_address: str) -> bytes:
    """Parses a MAC address like "aa:bb:cc:dd:ee:ff", "aa-bb-cc-dd-ee-ff" or
       "aabbccddeeff" into 6 bytes."""
    hex_digits = re.sub(r'[:\-.]', '', mac_address.strip())
    if not re.fullmatch(r'[0-9a-fA-F]{12}', hex_digits):
        raise WebOsTvInvalidArgumentError(f"Invalid MAC address: {mac_address!r}")
    return bytes.fromhex(hex_digits)

def create_magic_packet(mac_address: str) -> bytes:
    return b'\xff' * 6 + parse_mac_address(mac_address) * 16

async def send_magic_packet(
        mac_address: str,
        address: str=DEFAULT_BROADCAST_ADDRESS,
        port: int=WOL_PORT,
      ) -> None:
    """Sends a wake-on-LAN magic packet for mac_address."""
    packet = create_magic_packet(mac_address)
    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        asyncio.DatagramProtocol,
        family=socket.AF_INET,
        allow_broadcast=True,
      )
    try:
        transport.sendto(packet, (address, port))
    finally:
        transport.close()
    logger.info(f"Wake-on-LAN sent to {address}:{port} for {mac_address}")
