import asyncio
import logging

import pytest

from webos_tv.client.credential_store import CredentialStore
from webos_tv.client.registration import RegistrationState, RegistrationStateMachine
from webos_tv.client.resolve_host import TvEndpoint
from webos_tv.client.session import ConnectionSession
from webos_tv.exceptions import WebOsTvPersistenceError, WebOsTvSocketNotReadyError
from webos_tv.protocol import InboundFrame


class _CountingStore(CredentialStore):
    def __init__(self, key_dir) -> None:
        super().__init__(key_dir)
        self.saves = 0

    def save(self, address: str, key: str) -> None:
        self.saves += 1
        super().save(address, key)


class _BrokenStore(CredentialStore):
    def load(self, address: str):
        raise WebOsTvPersistenceError("disk on fire")


class _ReadOnlyStore(CredentialStore):
    def save(self, address: str, key: str) -> None:
        raise WebOsTvPersistenceError("read-only file system")


def _make(store: CredentialStore):
    sent = []

    async def send_frame(frame) -> None:
        sent.append(frame)

    session = ConnectionSession(TvEndpoint("wss", "10.0.0.5", 3001))
    session.mark_connected()
    machine = RegistrationStateMachine(session, store, send_frame)
    return machine, session, sent


@pytest.mark.asyncio
async def test_register_without_stored_key(tmp_path):
    machine, _, sent = _make(CredentialStore(tmp_path))
    await machine.on_opened()

    assert len(sent) == 1
    frame = sent[0].to_jsonable()
    assert frame["type"] == "register"
    assert "client-key" not in frame["payload"]
    assert frame["payload"]["pairingType"] == "PROMPT"
    assert frame["payload"]["forcePairing"] is False
    assert machine.state == RegistrationState.UNREGISTERED


@pytest.mark.asyncio
async def test_register_with_stored_key(tmp_path):
    store = CredentialStore(tmp_path)
    store.save("10.0.0.5", "ABC123")
    machine, _, sent = _make(store)
    await machine.on_opened()

    assert sent[0].payload["client-key"] == "ABC123"


@pytest.mark.asyncio
async def test_pairing_prompt_then_registered_persists_key(tmp_path, caplog):
    store = CredentialStore(tmp_path)
    machine, session, sent = _make(store)
    await machine.on_opened()
    register_id = sent[0].id

    with caplog.at_level(logging.WARNING, logger="webos_tv"):
        assert machine.handle_frame(InboundFrame("response", id=register_id, payload={"pairingType": "PROMPT"}))
    assert machine.state == RegistrationState.AWAITING_CONFIRMATION
    assert not session.is_registered
    assert any("pairing prompt" in r.getMessage() for r in caplog.records)

    assert machine.handle_frame(InboundFrame("registered", id=register_id, payload={"client-key": "ABC123"}))
    assert machine.state == RegistrationState.REGISTERED
    assert session.is_registered
    assert (tmp_path / "10.0.0.5").read_text(encoding="utf-8") == "ABC123"

    # next connection presents the persisted key
    machine.on_closed()
    session.mark_disconnected()
    session.mark_connected()
    await machine.on_opened()
    assert sent[-1].payload["client-key"] == "ABC123"


@pytest.mark.asyncio
async def test_unchanged_key_is_not_rewritten(tmp_path):
    store = _CountingStore(tmp_path)
    store.save("10.0.0.5", "ABC123")
    machine, session, sent = _make(store)
    await machine.on_opened()

    machine.handle_frame(InboundFrame("registered", id=sent[0].id, payload={"client-key": "ABC123"}))
    assert session.is_registered
    assert store.saves == 1


@pytest.mark.asyncio
async def test_error_frame_resets_to_unregistered(tmp_path):
    machine, session, sent = _make(CredentialStore(tmp_path))
    await machine.on_opened()
    machine.handle_frame(InboundFrame("response", id=sent[0].id, payload={"pairingType": "PROMPT"}))

    assert machine.handle_frame(InboundFrame("error", id=sent[0].id, error="403 User denied access"))
    assert machine.state == RegistrationState.UNREGISTERED
    assert not session.is_registered


@pytest.mark.asyncio
async def test_rejected_registration_fails_waiting_callers_immediately(tmp_path):
    machine, session, sent = _make(CredentialStore(tmp_path))
    await machine.on_opened()
    waiter = asyncio.create_task(session.wait_registered(30.0))
    await asyncio.sleep(0)

    machine.handle_frame(InboundFrame("error", id=sent[0].id, error="403 User denied access"))
    with pytest.raises(WebOsTvSocketNotReadyError) as excinfo:
        await asyncio.wait_for(waiter, 1.0)
    assert "403 User denied access" in str(excinfo.value)

    # a fresh connection starts over
    session.mark_disconnected()
    session.mark_connected()
    assert session.registration_failure is None


@pytest.mark.asyncio
async def test_frames_for_other_requests_are_not_consumed(tmp_path):
    machine, session, _ = _make(CredentialStore(tmp_path))
    await machine.on_opened()

    assert machine.handle_frame(InboundFrame("response", id="someone-else", payload={"volume": 1})) is False
    assert machine.state == RegistrationState.UNREGISTERED
    assert not session.is_registered


@pytest.mark.asyncio
async def test_disconnect_resets_state(tmp_path):
    machine, _, sent = _make(CredentialStore(tmp_path))
    await machine.on_opened()
    machine.handle_frame(InboundFrame("registered", id=sent[0].id, payload={"client-key": "K"}))
    assert machine.is_registered

    machine.on_closed()
    assert machine.state == RegistrationState.UNREGISTERED
    assert machine.register_id is None


@pytest.mark.asyncio
async def test_unreadable_credential_fails_waiting_callers(tmp_path):
    machine, session, sent = _make(_BrokenStore(tmp_path))
    await machine.on_opened()

    assert sent == []
    with pytest.raises(WebOsTvPersistenceError):
        await session.wait_registered(1.0)


@pytest.mark.asyncio
async def test_unwritable_credential_fails_waiting_callers(tmp_path):
    machine, session, sent = _make(_ReadOnlyStore(tmp_path))
    await machine.on_opened()

    machine.handle_frame(InboundFrame("registered", id=sent[0].id, payload={"client-key": "K"}))
    assert not session.is_registered
    with pytest.raises(WebOsTvPersistenceError):
        await session.wait_registered(1.0)
