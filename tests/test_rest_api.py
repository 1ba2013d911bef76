import pytest
from fastapi.testclient import TestClient

from webos_tv.exceptions import (
    WebOsTvCommandError,
    WebOsTvInvalidArgumentError,
    WebOsTvSocketNotReadyError,
    WebOsTvTimeoutError,
)
from webos_tv.protocol import InboundFrame, SoundOutput
from webos_tv.rest_server import get_tv_client, tv_api


class _FakeTvClient:
    def __init__(self) -> None:
        self.calls = []
        self.audio_checker = None

    async def set_volume(self, volume: int):
        self.calls.append(("set_volume", volume))
        return {"returnValue": True, "volume": volume}

    async def get_volume(self):
        return {"returnValue": True, "volume": 7}

    async def get_sound_output(self):
        return "external_arc"

    async def start_audio_checker(self, output: str):
        if SoundOutput.parse(output) is None:
            return WebOsTvInvalidArgumentError(f"Unknown sound output {output!r}")
        self.audio_checker = output
        return None

    async def stop_audio_checker(self):
        self.audio_checker = None

    async def send_message(self, type, uri, payload=None, prefix="ssap://"):
        self.calls.append(("send_message", type, uri, payload, prefix))
        return InboundFrame("response", id="abc", payload={"returnValue": True})

    async def toggle_power(self):
        self.calls.append(("toggle_power",))
        return {"returnValue": True}

    async def get_app_state(self, app_id: str):
        return {"returnValue": True, "id": app_id, "running": True}

    async def get_power_state(self):
        raise WebOsTvTimeoutError("No response within 5.0 seconds")

    async def get_current_app_info(self):
        raise WebOsTvCommandError("401 insufficient permissions", error="401 insufficient permissions")

    async def get_inputs(self):
        raise WebOsTvSocketNotReadyError("not registered")


@pytest.fixture
def fake_client():
    fake = _FakeTvClient()
    tv_api.dependency_overrides[get_tv_client] = lambda: fake
    try:
        yield fake
    finally:
        tv_api.dependency_overrides.clear()


@pytest.fixture
def http(fake_client):
    return TestClient(tv_api)


def test_set_volume(http, fake_client):
    response = http.post("/set-volume", json={"volume": 15})
    assert response.status_code == 200
    assert response.json() == {"returnValue": True, "volume": 15}
    assert fake_client.calls == [("set_volume", 15)]


def test_get_volume_and_sound_output(http):
    assert http.get("/volume").json()["volume"] == 7
    assert http.get("/sound-output").json() == {"soundOutput": "external_arc"}


def test_send_message_defaults_prefix(http, fake_client):
    response = http.post("/send-message", json={"type": "request", "uri": "audio/getVolume"})
    assert response.status_code == 200
    assert response.json() == {"type": "response", "id": "abc", "payload": {"returnValue": True}}
    assert fake_client.calls == [("send_message", "request", "audio/getVolume", None, "ssap://")]


def test_audio_checker_start_and_stop(http, fake_client):
    response = http.post("/audio-checker", json={"output": "external_arc"})
    assert response.status_code == 200
    assert fake_client.audio_checker == "external_arc"

    assert http.post("/stop-audio-checker").status_code == 200
    assert fake_client.audio_checker is None


def test_audio_checker_rejects_unknown_output(http, fake_client):
    response = http.post("/audio-checker", json={"output": "loudspeaker"})
    assert response.status_code == 400
    assert "loudspeaker" in response.json()["error"]
    assert fake_client.audio_checker is None


def test_toggle_power_requests_power_off(http, fake_client):
    assert http.post("/toggle-power").json() == {"returnValue": True}
    assert fake_client.calls == [("toggle_power",)]


def test_path_parameters(http):
    assert http.get("/app-state/netflix").json()["id"] == "netflix"


@pytest.mark.parametrize(
    "path, status",
    [("/power-state", 504), ("/current-app-info", 502), ("/inputs", 503)],
)
def test_client_errors_map_to_http_status(http, path, status):
    response = http.get(path)
    assert response.status_code == status
    assert "error" in response.json()


def test_missing_body_field_is_rejected(http):
    assert http.post("/set-volume", json={}).status_code == 422
