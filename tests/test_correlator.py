import asyncio
import json

import pytest

from webos_tv.client.correlator import RequestCorrelator
from webos_tv.client.resolve_host import TvEndpoint
from webos_tv.client.session import ConnectionSession
from webos_tv.exceptions import (
    WebOsTvSocketNotReadyError,
    WebOsTvTimeoutError,
    WebOsTvTransportError,
)
from webos_tv.protocol import InboundFrame


class _FakeWire:
    def __init__(self) -> None:
        self.sent = []
        self.fail_with = None

    async def send(self, text: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(json.loads(text))


async def _wait_for(predicate, *, timeout: float = 0.5, interval: float = 0.005) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


def _session(registered: bool = True) -> ConnectionSession:
    session = ConnectionSession(TvEndpoint("ws", "10.0.0.5", 3000))
    session.mark_connected()
    if registered:
        session.mark_registered()
    return session


def _response(frame_id: str, payload: dict) -> InboundFrame:
    return InboundFrame("response", id=frame_id, payload=payload)


@pytest.mark.asyncio
async def test_set_volume_request_resolves_with_matching_payload():
    wire = _FakeWire()
    correlator = RequestCorrelator(_session(), wire.send)

    task = asyncio.create_task(correlator.send("request", "audio/setVolume", {"volume": 15}))
    assert await _wait_for(lambda: len(wire.sent) == 1)
    sent = wire.sent[0]
    assert sent["type"] == "request"
    assert sent["uri"] == "ssap://audio/setVolume"
    assert sent["payload"] == {"volume": 15}

    assert correlator.dispatch(_response(sent["id"], {"volume": 15, "returnValue": True}))
    frame = await task
    assert frame.payload == {"volume": 15, "returnValue": True}
    assert correlator.pending_count == 0


@pytest.mark.asyncio
async def test_concurrent_requests_resolve_by_id_not_arrival_order():
    wire = _FakeWire()
    correlator = RequestCorrelator(_session(), wire.send)

    first = asyncio.create_task(correlator.send("request", "audio/getVolume"))
    second = asyncio.create_task(correlator.send("request", "tv/getCurrentChannel"))
    assert await _wait_for(lambda: len(wire.sent) == 2)
    ids = {frame["uri"]: frame["id"] for frame in wire.sent}
    assert len(set(ids.values())) == 2

    correlator.dispatch(_response(ids["ssap://tv/getCurrentChannel"], {"channelNumber": "7"}))
    correlator.dispatch(_response(ids["ssap://audio/getVolume"], {"volume": 3}))

    assert (await first).payload == {"volume": 3}
    assert (await second).payload == {"channelNumber": "7"}


@pytest.mark.asyncio
async def test_timeout_removes_pending_entry_and_late_response_is_dropped():
    wire = _FakeWire()
    correlator = RequestCorrelator(_session(), wire.send, request_timeout_secs=0.05)

    with pytest.raises(WebOsTvTimeoutError):
        await correlator.send("request", "audio/getVolume")
    assert correlator.pending_count == 0

    late = _response(wire.sent[0]["id"], {"volume": 3})
    assert correlator.dispatch(late) is False


@pytest.mark.asyncio
async def test_not_registered_within_ready_timeout_sends_nothing():
    wire = _FakeWire()
    correlator = RequestCorrelator(_session(registered=False), wire.send, ready_timeout_secs=0.05)

    with pytest.raises(WebOsTvSocketNotReadyError):
        await correlator.send("request", "audio/getVolume")
    assert wire.sent == []
    assert correlator.pending_count == 0


@pytest.mark.asyncio
async def test_request_waits_for_registration_then_proceeds():
    wire = _FakeWire()
    session = _session(registered=False)
    correlator = RequestCorrelator(session, wire.send, ready_timeout_secs=1.0)

    task = asyncio.create_task(correlator.send("request", "audio/getVolume"))
    await asyncio.sleep(0.05)
    assert wire.sent == []

    session.mark_registered()
    assert await _wait_for(lambda: len(wire.sent) == 1)
    correlator.dispatch(_response(wire.sent[0]["id"], {"volume": 9}))
    assert (await task).payload == {"volume": 9}


@pytest.mark.asyncio
async def test_write_failure_surfaces_as_not_ready():
    wire = _FakeWire()
    wire.fail_with = WebOsTvTransportError("Not connected")
    correlator = RequestCorrelator(_session(), wire.send)

    with pytest.raises(WebOsTvSocketNotReadyError):
        await correlator.send("request", "audio/getVolume")
    assert correlator.pending_count == 0


@pytest.mark.asyncio
async def test_error_frame_resolves_the_request():
    wire = _FakeWire()
    correlator = RequestCorrelator(_session(), wire.send)

    task = asyncio.create_task(correlator.send("request", "audio/explode"))
    assert await _wait_for(lambda: len(wire.sent) == 1)
    correlator.dispatch(InboundFrame("error", id=wire.sent[0]["id"], error="404 no such service or method"))

    frame = await task
    assert frame.is_error
    assert frame.error == "404 no such service or method"


@pytest.mark.asyncio
async def test_unmatched_and_idless_frames_are_dropped():
    correlator = RequestCorrelator(_session(), _FakeWire().send)
    assert correlator.dispatch(_response("nobody", {})) is False
    assert correlator.dispatch(InboundFrame("response", payload={"event": True})) is False


@pytest.mark.asyncio
async def test_cancel_all_fails_pending_requests():
    wire = _FakeWire()
    correlator = RequestCorrelator(_session(), wire.send)

    task = asyncio.create_task(correlator.send("request", "audio/getVolume"))
    assert await _wait_for(lambda: correlator.pending_count == 1)
    correlator.cancel_all(WebOsTvSocketNotReadyError("closed"))

    with pytest.raises(WebOsTvSocketNotReadyError):
        await task
    assert correlator.pending_count == 0
