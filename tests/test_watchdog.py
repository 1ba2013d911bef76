import asyncio

import pytest

from webos_tv.client.resolve_host import TvEndpoint
from webos_tv.client.session import ConnectionSession
from webos_tv.client.watchdog import SoundOutputWatchdog
from webos_tv.exceptions import WebOsTvInvalidArgumentError, WebOsTvTimeoutError
from webos_tv.protocol import Endpoint, InboundFrame, SoundOutput

GET = Endpoint.GET_SOUND_OUTPUT.value
CHANGE = Endpoint.CHANGE_SOUND_OUTPUT.value


class _FakeTv:
    """Answers sound output requests. Polls report successive values from
    outputs; the last value repeats."""

    def __init__(self, *outputs: str, change_ok: bool = True) -> None:
        self.outputs = list(outputs)
        self.change_ok = change_ok
        self.failing_polls = 0
        self.calls = []

    @property
    def polls(self) -> int:
        return sum(1 for path, _ in self.calls if path == GET)

    @property
    def changes(self):
        return [payload["output"] for path, payload in self.calls if path == CHANGE]

    async def request(self, path, payload):
        self.calls.append((path, payload))
        if path == GET:
            if self.failing_polls > 0:
                self.failing_polls -= 1
                raise WebOsTvTimeoutError("no answer")
            value = self.outputs.pop(0) if len(self.outputs) > 1 else self.outputs[0]
            return InboundFrame("response", id="x", payload={"soundOutput": value, "returnValue": True})
        return InboundFrame("response", id="y", payload={"returnValue": self.change_ok})


async def _wait_for(predicate, *, timeout: float = 1.0, interval: float = 0.005) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


def _registered_session() -> ConnectionSession:
    session = ConnectionSession(TvEndpoint("ws", "10.0.0.5", 3000))
    session.mark_connected()
    session.mark_registered()
    return session


@pytest.mark.asyncio
async def test_drift_is_corrected_once_then_left_alone():
    tv = _FakeTv("tv_speaker", "external_arc")
    watchdog = SoundOutputWatchdog(_registered_session(), tv.request)
    await watchdog.start("external_arc")
    await watchdog.stop()
    tv.calls.clear()

    assert await watchdog.check_once() is True
    assert tv.changes == ["external_arc"]

    assert await watchdog.check_once() is False
    assert tv.changes == ["external_arc"]


@pytest.mark.asyncio
async def test_invalid_output_returns_error_and_schedules_nothing():
    tv = _FakeTv("tv_speaker")
    watchdog = SoundOutputWatchdog(_registered_session(), tv.request, poll_interval_secs=0.01)

    error = await watchdog.start("loudspeaker")
    assert isinstance(error, WebOsTvInvalidArgumentError)
    assert not watchdog.is_running
    await asyncio.sleep(0.05)
    assert tv.calls == []


@pytest.mark.asyncio
async def test_starting_twice_leaves_exactly_one_task():
    tv = _FakeTv("external_arc")
    watchdog = SoundOutputWatchdog(_registered_session(), tv.request, poll_interval_secs=0.01)

    assert await watchdog.start("external_arc") is None
    first = watchdog._task
    assert await watchdog.start(SoundOutput.OPTICAL_AUDIO) is None
    try:
        assert first.done()
        assert watchdog.is_running
        assert watchdog._task is not first
        assert watchdog.desired_output == SoundOutput.OPTICAL_AUDIO
    finally:
        await watchdog.stop()


@pytest.mark.asyncio
async def test_overlapping_starts_leave_exactly_one_task():
    tv = _FakeTv("external_arc")
    watchdog = SoundOutputWatchdog(_registered_session(), tv.request, poll_interval_secs=0.01)
    assert await watchdog.start("external_arc") is None

    def live_tasks():
        return [
            t for t in asyncio.all_tasks()
            if not t.done() and t.get_coro().__qualname__ == "SoundOutputWatchdog._run"
        ]

    results = await asyncio.gather(watchdog.start("external_arc"), watchdog.start("tv_speaker"))
    assert results == [None, None]
    assert len(live_tasks()) == 1
    assert watchdog.desired_output == SoundOutput.INTERNAL_SPEAKER

    await watchdog.stop()
    assert live_tasks() == []
    polls = tv.polls
    await asyncio.sleep(0.05)
    assert tv.polls == polls


@pytest.mark.asyncio
async def test_stop_prevents_further_polls():
    tv = _FakeTv("external_arc")
    watchdog = SoundOutputWatchdog(_registered_session(), tv.request, poll_interval_secs=0.01)
    await watchdog.start("external_arc")
    assert await _wait_for(lambda: tv.polls >= 2)

    await watchdog.stop()
    polls = tv.polls
    await asyncio.sleep(0.05)
    assert tv.polls == polls
    assert not watchdog.is_running
    await watchdog.stop()


@pytest.mark.asyncio
async def test_no_polls_while_not_registered():
    tv = _FakeTv("tv_speaker")
    session = ConnectionSession(TvEndpoint("ws", "10.0.0.5", 3000))
    session.mark_connected()
    watchdog = SoundOutputWatchdog(session, tv.request, poll_interval_secs=0.01)
    await watchdog.start("external_arc")
    try:
        await asyncio.sleep(0.05)
        assert tv.calls == []

        session.mark_registered()
        assert await _wait_for(lambda: tv.changes == ["external_arc"])
    finally:
        await watchdog.stop()


@pytest.mark.asyncio
async def test_tick_errors_are_swallowed():
    tv = _FakeTv("tv_speaker")
    tv.failing_polls = 2
    watchdog = SoundOutputWatchdog(_registered_session(), tv.request, poll_interval_secs=0.01)
    await watchdog.start("external_arc")
    try:
        assert await _wait_for(lambda: len(tv.changes) >= 1)
        assert watchdog.is_running
    finally:
        await watchdog.stop()


@pytest.mark.asyncio
async def test_quirk_mode_cycles_through_tv_speaker_on_failed_correction():
    tv = _FakeTv("tv_speaker", change_ok=False)
    watchdog = SoundOutputWatchdog(_registered_session(), tv.request, quirk_mode=True)
    await watchdog.start("external_arc")
    await watchdog.stop()
    tv.calls.clear()

    await watchdog.check_once()
    assert tv.changes == ["external_arc", "external_arc", "tv_speaker", "external_arc"]


@pytest.mark.asyncio
async def test_failed_correction_without_quirk_mode_is_not_retried():
    tv = _FakeTv("tv_speaker", change_ok=False)
    watchdog = SoundOutputWatchdog(_registered_session(), tv.request)
    await watchdog.start("external_arc")
    await watchdog.stop()
    tv.calls.clear()

    await watchdog.check_once()
    assert tv.changes == ["external_arc"]
