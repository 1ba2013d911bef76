import os

import pytest

from webos_tv.client import TlsPolicy, WebOsTvClientConfig
from webos_tv.exceptions import WebOsTvError

ENV_VARS = (
    "TV_IP", "TV_PROTOCOL", "TV_PORT", "TV_MAC", "KEY_PATH", "TV_VERIFY_TLS",
    "TV_TIMEOUT", "AUDIO_CHECKER", "AUDIO_CHECKER_QUIRK_MODE", "TV_MANIFEST_PATH",
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = WebOsTvClientConfig()
    assert config.default_host is None
    assert config.default_protocol == "wss"
    assert config.default_port is None
    assert config.key_dir == os.path.join(os.getcwd(), "keys")
    assert config.tls_policy == TlsPolicy.NO_VERIFY
    assert config.timeout_secs == 5.0
    assert config.ready_timeout_secs == 5.0
    assert config.reconnect_delay_secs == 1.0
    assert config.watchdog_poll_secs == 2.0
    assert config.watchdog_quirk_mode is False
    assert config.audio_checker_output is None


def test_environment(monkeypatch):
    monkeypatch.setenv("TV_IP", "10.0.0.5")
    monkeypatch.setenv("TV_PROTOCOL", "WS")
    monkeypatch.setenv("TV_PORT", "3000")
    monkeypatch.setenv("TV_MAC", "aa:bb:cc:dd:ee:ff")
    monkeypatch.setenv("KEY_PATH", "/var/lib/webos/keys")
    monkeypatch.setenv("TV_VERIFY_TLS", "true")
    monkeypatch.setenv("TV_TIMEOUT", "2.5")
    monkeypatch.setenv("AUDIO_CHECKER", "external_arc")
    monkeypatch.setenv("AUDIO_CHECKER_QUIRK_MODE", "yes")
    config = WebOsTvClientConfig()
    assert config.default_host == "10.0.0.5"
    assert config.default_protocol == "ws"
    assert config.default_port == 3000
    assert config.mac_address == "aa:bb:cc:dd:ee:ff"
    assert config.key_dir == "/var/lib/webos/keys"
    assert config.tls_policy == TlsPolicy.VERIFY
    assert config.timeout_secs == 2.5
    assert config.audio_checker_output == "external_arc"
    assert config.watchdog_quirk_mode is True


def test_explicit_arguments_override_base_config():
    base = WebOsTvClientConfig("10.0.0.5", timeout_secs=1.0)
    config = WebOsTvClientConfig(default_port=3100, base_config=base)
    assert config.default_host == "10.0.0.5"
    assert config.default_port == 3100
    assert config.timeout_secs == 1.0


def test_invalid_audio_checker_output_is_rejected():
    with pytest.raises(WebOsTvError):
        WebOsTvClientConfig(audio_checker_output="loudspeaker")


def test_from_jsonable():
    config = WebOsTvClientConfig.from_jsonable({"host": "tv.local", "protocol": "ws", "tls_policy": "verify"})
    assert config.default_host == "tv.local"
    assert config.default_protocol == "ws"
    assert config.tls_policy == TlsPolicy.VERIFY
