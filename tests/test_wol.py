import pytest

from webos_tv.exceptions import WebOsTvInvalidArgumentError
from webos_tv.wol import create_magic_packet, parse_mac_address


def test_magic_packet_layout():
    packet = create_magic_packet("aa:bb:cc:dd:ee:ff")
    mac = bytes.fromhex("aabbccddeeff")
    assert len(packet) == 102
    assert packet[:6] == b"\xff" * 6
    assert packet[6:] == mac * 16


@pytest.mark.parametrize("mac", ["AA-BB-CC-DD-EE-FF", "aabbccddeeff", "aabb.ccdd.eeff"])
def test_mac_formats(mac):
    assert parse_mac_address(mac) == bytes.fromhex("aabbccddeeff")


def test_invalid_mac_raises():
    with pytest.raises(WebOsTvInvalidArgumentError):
        parse_mac_address("not-a-mac")
