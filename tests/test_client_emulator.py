import asyncio
from contextlib import asynccontextmanager

import pytest

from webos_tv.client import WebOsTvClient, WebOsTvClientConfig
from webos_tv.emulator import PairingMode, WebOsTvEmulator
from webos_tv.exceptions import (
    WebOsTvCommandError,
    WebOsTvSocketNotReadyError,
    WebOsTvTimeoutError,
)


async def _wait_for(predicate, *, timeout: float = 3.0, interval: float = 0.01) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


@asynccontextmanager
async def _connected(tmp_path, emulator: WebOsTvEmulator, **config_kwargs):
    defaults = dict(
        default_protocol="ws",
        key_dir=str(tmp_path),
        timeout_secs=2.0,
        ready_timeout_secs=3.0,
        reconnect_delay_secs=0.05,
        watchdog_poll_secs=0.05,
    )
    defaults.update(config_kwargs)
    config = WebOsTvClientConfig(**defaults)
    client = await WebOsTvClient.create(host=emulator.url, config=config)
    try:
        yield client
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_first_connection_pairs_and_sets_volume(tmp_path):
    async with WebOsTvEmulator(port=0) as emulator:
        async with _connected(tmp_path, emulator) as client:
            await client.wait_registered()
            result = await client.set_volume(15)

            assert result == {"returnValue": True, "volume": 15}
            assert emulator.volume == 15
            request = emulator.requests_for("ssap://audio/setVolume")[0]
            assert request["payload"] == {"volume": 15}
            assert isinstance(request["id"], str) and request["id"] != ""

            stored = (tmp_path / "127.0.0.1").read_text(encoding="utf-8")
            assert stored in emulator.client_keys


@pytest.mark.asyncio
async def test_stored_key_skips_the_prompt(tmp_path):
    (tmp_path / "127.0.0.1").write_text("known-key", encoding="utf-8")
    async with WebOsTvEmulator(port=0, pairing_mode=PairingMode.DENY, client_keys=["known-key"]) as emulator:
        async with _connected(tmp_path, emulator) as client:
            await client.wait_registered()
            assert await client.get_sound_output() == "tv_speaker"
            register = [f for f in emulator.received if f["type"] == "register"][0]
            assert register["payload"]["client-key"] == "known-key"


@pytest.mark.asyncio
async def test_requests_wait_for_manual_pairing(tmp_path):
    async with WebOsTvEmulator(port=0, pairing_mode=PairingMode.MANUAL) as emulator:
        async with _connected(tmp_path, emulator) as client:
            task = asyncio.create_task(client.get_volume())
            assert await _wait_for(lambda: client.registration.state.value == "awaiting_confirmation")
            assert not task.done()

            emulator.accept_pairing()
            result = await task
            assert result["volume"] == 10


@pytest.mark.asyncio
async def test_denied_pairing_leaves_requests_not_ready(tmp_path):
    async with WebOsTvEmulator(port=0, pairing_mode=PairingMode.DENY) as emulator:
        async with _connected(tmp_path, emulator, ready_timeout_secs=30.0) as client:
            with pytest.raises(WebOsTvSocketNotReadyError):
                await asyncio.wait_for(client.get_volume(), 3.0)
            assert emulator.requests_for("ssap://audio/getVolume") == []


@pytest.mark.asyncio
async def test_reconnects_and_reregisters_after_connection_loss(tmp_path):
    async with WebOsTvEmulator(port=0) as emulator:
        async with _connected(tmp_path, emulator) as client:
            await client.wait_registered()
            await emulator.drop_connections()

            assert await _wait_for(lambda: emulator.connection_count >= 2 and client.is_registered)
            await client.volume_up()
            assert emulator.volume == 11
            registers = [f for f in emulator.received if f["type"] == "register"]
            assert "client-key" in registers[-1]["payload"]


@pytest.mark.asyncio
async def test_error_response_raises_command_error(tmp_path):
    async with WebOsTvEmulator(port=0) as emulator:
        emulator.error_uris["ssap://audio/getVolume"] = "500 Application error"
        async with _connected(tmp_path, emulator) as client:
            with pytest.raises(WebOsTvCommandError) as excinfo:
                await client.get_volume()
            assert excinfo.value.error == "500 Application error"


@pytest.mark.asyncio
async def test_unanswered_request_times_out(tmp_path):
    async with WebOsTvEmulator(port=0) as emulator:
        emulator.silent_uris.add("ssap://audio/getVolume")
        async with _connected(tmp_path, emulator, timeout_secs=0.2) as client:
            await client.wait_registered()
            with pytest.raises(WebOsTvTimeoutError):
                await client.get_volume()
            assert client.correlator.pending_count == 0


@pytest.mark.asyncio
async def test_out_of_order_responses_reach_their_callers(tmp_path):
    async with WebOsTvEmulator(port=0) as emulator:
        emulator.response_delays["ssap://audio/getVolume"] = 0.2
        async with _connected(tmp_path, emulator) as client:
            await client.wait_registered()
            slow = asyncio.create_task(client.get_volume())
            fast = asyncio.create_task(client.get_power_state())

            power = await fast
            assert not slow.done()
            assert power["state"] == "Active"
            assert (await slow)["volume"] == 10


@pytest.mark.asyncio
async def test_luna_commands_go_through_an_alert(tmp_path):
    async with WebOsTvEmulator(port=0) as emulator:
        async with _connected(tmp_path, emulator) as client:
            await client.reboot()
            assert emulator.luna_calls == [("luna://com.webos.service.tvpower/power/reboot", {})]
            assert emulator.alerts == {}


@pytest.mark.asyncio
async def test_audio_checker_pins_sound_output(tmp_path):
    async with WebOsTvEmulator(port=0, sound_output="tv_speaker") as emulator:
        async with _connected(tmp_path, emulator) as client:
            assert await client.start_audio_checker("external_arc") is None
            assert await _wait_for(lambda: emulator.sound_output == "external_arc")

            # the TV falls back to its speakers; the watchdog puts it back
            emulator.sound_output = "tv_speaker"
            assert await _wait_for(lambda: emulator.sound_output == "external_arc")

            await client.stop_audio_checker()
            assert not client.watchdog.is_running
