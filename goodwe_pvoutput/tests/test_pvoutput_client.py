# goodwe_pvoutput/tests/test_pvoutput_client.py

from datetime import datetime

import pytest
import requests

from goodwe_pvoutput.config import PVOutputConfig
from goodwe_pvoutput.models.reading import Reading
from goodwe_pvoutput.protocol.frame import parse_payload
from goodwe_pvoutput.services.pvoutput_client import (
    PVOutputClient,
    UploadError,
    reading_from_snapshot,
)
from goodwe_pvoutput.logging import ConsoleLog, get_logger

from .fake_inverter import build_payload


ConsoleLog(level="INFO", quiet=True).setup()
LOG = get_logger("pvoutput-test")

NOW = datetime(2024, 6, 1, 13, 5)


class FakeResponse:
    def __init__(self, status_code=200, text="OK 200: Added Status"):
        self.status_code = status_code
        self.text = text


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def _cfg(**overrides):
    cfg = PVOutputConfig(api_key="KEY", system_id="42")
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return cfg


def test_reading_from_snapshot():
    snap = parse_payload(build_payload(ac_power=2000, yield_today=41, temperature=415))
    reading = reading_from_snapshot(snap, NOW)

    assert reading.date == NOW
    assert reading.power == 2000
    # 4.1 kWh must not truncate to 4099 Wh.
    assert reading.energy == 4100
    assert reading.voltage == 230
    assert reading.temperature == 41


def test_add_status_posts_form_with_headers():
    session = FakeSession()
    client = PVOutputClient(_cfg(), LOG, session=session)

    client.add_status(Reading(date=NOW, power=2000, energy=12300, voltage=230, temperature=41))

    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://pvoutput.org/service/r2/addstatus.jsp"
    assert call["headers"] == {"X-Pvoutput-Apikey": "KEY", "X-Pvoutput-SystemId": "42"}
    assert call["timeout"] == 5.0
    assert call["data"] == {
        "d": "20240601",
        "t": "13:05",
        "v1": "12300",
        "v2": "2000",
        "v6": "230",
        "v5": "41",
    }


def test_optional_fields_omitted_when_not_positive():
    form = PVOutputClient.build_form(Reading(date=NOW, power=0, energy=0, voltage=0, temperature=None))
    assert "v5" not in form
    assert "v6" not in form
    assert form["v1"] == "0"
    assert form["v2"] == "0"


def test_accepts_any_2xx():
    session = FakeSession(FakeResponse(204, ""))
    PVOutputClient(_cfg(), LOG, session=session).add_status(Reading(date=NOW, power=1, energy=1))


def test_non_2xx_raises_upload_error():
    session = FakeSession(FakeResponse(401, "Unauthorized 401: Invalid API Key"))
    client = PVOutputClient(_cfg(), LOG, session=session)

    with pytest.raises(UploadError) as excinfo:
        client.add_status(Reading(date=NOW, power=1, energy=1))

    assert excinfo.value.status_code == 401
    assert "Invalid API Key" in str(excinfo.value)
    assert len(session.calls) == 1


def test_transport_failure_raises_upload_error_without_retry():
    session = FakeSession(error=requests.ConnectionError("connection reset"))
    client = PVOutputClient(_cfg(), LOG, session=session)

    with pytest.raises(UploadError) as excinfo:
        client.add_status(Reading(date=NOW, power=1, energy=1))

    assert excinfo.value.status_code is None
    assert len(session.calls) == 1


def test_custom_url_is_used():
    session = FakeSession()
    client = PVOutputClient(_cfg(url="https://pv.test/addstatus"), LOG, session=session)
    client.add_status(Reading(date=NOW, power=1, energy=1))
    assert session.calls[0]["url"] == "https://pv.test/addstatus"
