# goodwe_pvoutput/tests/test_geocoder.py

import json

import pytest
import requests

from goodwe_pvoutput.config import LocationConfig
from goodwe_pvoutput.logging import ConsoleLog, get_logger
from goodwe_pvoutput.services.geocoder import Geocoder, GeocodingError, LocationCache


ConsoleLog(level="INFO", quiet=True).setup()
LOG = get_logger("geocoder-test")


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        return FakeResponse(self.status_code, self.payload)


def _cfg(tmp_path, **overrides):
    cfg = LocationConfig(name="Utrecht, Netherlands", cache_path=str(tmp_path / "cache.json"))
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return cfg


def test_configured_coordinates_skip_lookup(tmp_path):
    session = FakeSession()
    geocoder = Geocoder(_cfg(tmp_path, latitude=52.09, longitude=5.12), LOG, session=session)

    assert geocoder.resolve() == (52.09, 5.12)
    assert session.calls == []


def test_cache_miss_geocodes_and_saves(tmp_path):
    session = FakeSession([{"lat": "52.0907", "lon": "5.1214"}])
    cfg = _cfg(tmp_path)
    geocoder = Geocoder(cfg, LOG, session=session)

    assert geocoder.resolve() == (52.0907, 5.1214)

    call = session.calls[0]
    assert call["url"] == "https://nominatim.openstreetmap.org/search"
    assert call["params"] == {"q": "Utrecht, Netherlands", "format": "json", "limit": "1"}
    assert call["headers"]["User-Agent"]
    saved = json.loads((tmp_path / "cache.json").read_text())
    assert saved == {"Utrecht, Netherlands": [52.0907, 5.1214]}


def test_cache_hit_skips_network(tmp_path):
    (tmp_path / "cache.json").write_text(json.dumps({"Utrecht, Netherlands": [1.5, 2.5]}))
    session = FakeSession()
    geocoder = Geocoder(_cfg(tmp_path), LOG, session=session)

    assert geocoder.resolve() == (1.5, 2.5)
    assert session.calls == []


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        json.dumps({"Utrecht, Netherlands": [52.0]}),
        json.dumps({"Utrecht, Netherlands": None}),
        json.dumps({"Utrecht, Netherlands": ["north", "east"]}),
    ],
)
def test_unreadable_cache_is_ignored(tmp_path, content):
    (tmp_path / "cache.json").write_text(content)
    session = FakeSession([{"lat": "1", "lon": "2"}])
    geocoder = Geocoder(_cfg(tmp_path), LOG, session=session)

    assert geocoder.resolve() == (1.0, 2.0)
    assert len(session.calls) == 1


def test_empty_result_raises(tmp_path):
    geocoder = Geocoder(_cfg(tmp_path), LOG, session=FakeSession([]))
    with pytest.raises(GeocodingError):
        geocoder.resolve()


def test_http_error_raises(tmp_path):
    geocoder = Geocoder(_cfg(tmp_path), LOG, session=FakeSession([], status_code=503))
    with pytest.raises(GeocodingError):
        geocoder.resolve()


def test_no_location_raises(tmp_path):
    geocoder = Geocoder(_cfg(tmp_path, name=None), LOG, session=FakeSession())
    with pytest.raises(GeocodingError):
        geocoder.resolve()


def test_location_cache_round_trip(tmp_path):
    cache = LocationCache(tmp_path / "nested" / "cache.json", LOG)
    assert cache.load() == {}
    cache.save({"Berlin": (52.52, 13.405)})
    assert cache.load() == {"Berlin": (52.52, 13.405)}
