# goodwe_pvoutput/tests/test_daylight_policy.py

from datetime import datetime, timezone

from goodwe_pvoutput.config import DaylightConfig
from goodwe_pvoutput.services.daylight_policy import DaylightPolicy
from goodwe_pvoutput.logging import ConsoleLog, get_logger


ConsoleLog(level="INFO", quiet=True).setup()
LOG = get_logger("daylight-test")

AMSTERDAM = (52.37, 4.90)


def _policy(latitude=None, longitude=None, **overrides):
    cfg = DaylightConfig(
        timezone="UTC",
        static_sunrise="06:00",
        static_sunset="18:00",
    )
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return DaylightPolicy(cfg, LOG, latitude=latitude, longitude=longitude)


def test_static_window_before_sunrise():
    info = _policy().get_info(datetime(2024, 6, 1, 2, 0, tzinfo=timezone.utc))
    assert info.phase == "BEFORE_SUNRISE"
    assert info.is_daylight is False
    assert info.source == "static"


def test_static_window_midday():
    info = _policy().get_info(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))
    assert info.phase == "DAY"
    assert info.is_daylight


def test_static_window_after_sunset():
    info = _policy().get_info(datetime(2024, 6, 1, 18, 30, tzinfo=timezone.utc))
    assert info.phase == "AFTER_SUNSET"
    assert not info.is_daylight


def test_astral_summer_day_in_amsterdam():
    policy = _policy(*AMSTERDAM)

    noon = policy.get_info(datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc))
    assert noon.source == "astral"
    assert noon.is_daylight
    # Sunrise around 03:20 UTC, sunset around 20:05 UTC at midsummer.
    assert noon.sunrise.hour == 3
    assert noon.sunset.hour == 20

    assert policy.get_info(datetime(2024, 6, 21, 1, 0, tzinfo=timezone.utc)).phase == "BEFORE_SUNRISE"
    assert policy.get_info(datetime(2024, 6, 21, 22, 0, tzinfo=timezone.utc)).phase == "AFTER_SUNSET"


def test_local_timezone_is_respected():
    policy = _policy(*AMSTERDAM, timezone="Europe/Amsterdam")
    info = policy.get_info(datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc))
    assert info.is_daylight
    assert info.sunrise.utcoffset().total_seconds() == 2 * 3600


def test_polar_day_falls_back_to_static_window():
    policy = _policy(78.22, 15.65)
    info = policy.get_info(datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc))
    assert info.source == "static"
    assert info.is_daylight


def test_naive_datetime_assumes_configured_timezone():
    info = _policy().get_info(datetime(2024, 6, 1, 12, 0))
    assert info.phase == "DAY"
