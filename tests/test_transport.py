import asyncio
import logging
import socket
import ssl
from types import SimpleNamespace

import pytest

from webos_tv.client import ws_client_transport
from webos_tv.client.client_transport import TlsPolicy, TransportListener
from webos_tv.client.resolve_host import TvEndpoint
from webos_tv.client.ws_client_transport import WebSocketClientTransport, create_ssl_context
from webos_tv.exceptions import WebOsTvTransportError


class _RecordingListener(TransportListener):
    def __init__(self) -> None:
        self.opened = 0
        self.closed = 0
        self.errors = []
        self.messages = []

    async def on_opened(self) -> None:
        self.opened += 1

    def on_message(self, raw) -> None:
        self.messages.append(raw)

    def on_error(self, exc: BaseException) -> None:
        self.errors.append(exc)

    def on_closed(self) -> None:
        self.closed += 1


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


async def _wait_for(predicate, *, timeout: float = 2.0, interval: float = 0.01) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


def test_ssl_context_policies():
    relaxed = create_ssl_context(TlsPolicy.NO_VERIFY)
    assert relaxed.verify_mode == ssl.CERT_NONE
    assert relaxed.check_hostname is False

    strict = create_ssl_context(TlsPolicy.VERIFY)
    assert strict.verify_mode == ssl.CERT_REQUIRED


@pytest.mark.asyncio
async def test_disabled_verification_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="webos_tv"):
        transport = WebSocketClientTransport(TvEndpoint("wss", "10.0.0.5", 3001), tls_policy=TlsPolicy.NO_VERIFY)
    await transport.aclose()
    assert any("TLS certificate validation is disabled" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_connection_loss_logging_is_rate_limited(monkeypatch, caplog):
    clock = [100.0]
    monkeypatch.setattr(ws_client_transport, "time", SimpleNamespace(monotonic=lambda: clock[0]))
    transport = WebSocketClientTransport(TvEndpoint("ws", "10.0.0.5", 3000), tls_policy=TlsPolicy.VERIFY)
    try:
        with caplog.at_level(logging.INFO, logger="webos_tv"):
            assert transport.log_connection_loss("Connection lost") is True
            clock[0] += 1.0
            assert transport.log_connection_loss("Connection lost") is False
            clock[0] += 1.0
            assert transport.log_connection_loss("Connection lost") is False
            clock[0] += 1.0
            assert transport.log_connection_loss("Connection lost") is True
        info_lines = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        assert len(info_lines) == 2
        assert "2 similar events suppressed" in info_lines[1]
    finally:
        await transport.aclose()


@pytest.mark.asyncio
async def test_send_without_connection_raises():
    transport = WebSocketClientTransport(TvEndpoint("ws", "127.0.0.1", _unused_port()), tls_policy=TlsPolicy.VERIFY)
    try:
        assert not transport.is_connected
        with pytest.raises(WebOsTvTransportError):
            await transport.send("{}")
    finally:
        await transport.aclose()


@pytest.mark.asyncio
async def test_failed_connects_are_retried_until_shutdown():
    listener = _RecordingListener()
    transport = WebSocketClientTransport(
        TvEndpoint("ws", "127.0.0.1", _unused_port()),
        tls_policy=TlsPolicy.VERIFY,
        connect_timeout_secs=0.5,
        reconnect_delay_secs=0.01,
    )
    transport.set_listener(listener)
    await transport.start()
    try:
        assert await _wait_for(lambda: len(listener.errors) >= 3)
        assert all(isinstance(e, WebOsTvTransportError) for e in listener.errors)
        assert listener.opened == 0
        assert listener.closed == 0
    finally:
        await transport.aclose()
    attempts = len(listener.errors)
    await asyncio.sleep(0.05)
    assert len(listener.errors) == attempts
