from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from astral import Observer
from astral.sun import sun

from goodwe_pvoutput.config import DaylightConfig, parse_clock
from goodwe_pvoutput.models.daylight import DaylightInfo


class DaylightPolicy:
    """Decides whether the current moment lies between sunrise and sunset."""

    def __init__(self, cfg: DaylightConfig, log, *, latitude: float | None = None, longitude: float | None = None):
        self.cfg = cfg
        self.log = log
        self._tz = ZoneInfo(cfg.timezone)
        self._observer = None

        if latitude is not None and longitude is not None:
            self._observer = Observer(latitude=latitude, longitude=longitude)

        self._static_sunrise = parse_clock(cfg.static_sunrise) or time(6, 0)
        self._static_sunset = parse_clock(cfg.static_sunset) or time(20, 0)

    def _static_times(self, local_date: date) -> tuple[datetime, datetime]:
        sunrise = datetime.combine(local_date, self._static_sunrise, tzinfo=self._tz)
        sunset = datetime.combine(local_date, self._static_sunset, tzinfo=self._tz)
        return sunrise, sunset

    def _sun_times(self, local_date: date) -> tuple[datetime, datetime, str]:
        if self._observer is None:
            sunrise, sunset = self._static_times(local_date)
            source = "static"
        else:
            try:
                data = sun(self._observer, date=local_date, tzinfo=self._tz)
            except ValueError as exc:
                # Polar day/night: astral cannot place sunrise or sunset.
                self.log.warning("Sun times unavailable (%s); using static window", exc)
                sunrise, sunset = self._static_times(local_date)
                source = "static"
            else:
                sunrise, sunset = data["sunrise"], data["sunset"]
                source = "astral"

        if sunset <= sunrise:
            sunset = sunrise + timedelta(hours=12)

        return sunrise, sunset, source

    @property
    def timezone(self) -> ZoneInfo:
        return self._tz

    def get_info(self, now: datetime) -> DaylightInfo:
        if now.tzinfo is None:
            self.log.warning(
                "DaylightPolicy received naive datetime; assuming %s timezone",
                self.cfg.timezone,
            )
            local_now = now.replace(tzinfo=self._tz)
        else:
            local_now = now.astimezone(self._tz)
        sunrise, sunset, source = self._sun_times(local_now.date())

        if local_now < sunrise:
            phase = "BEFORE_SUNRISE"
        elif local_now > sunset:
            phase = "AFTER_SUNSET"
        else:
            phase = "DAY"

        self.log.debug(
            "Daylight policy: phase=%s, sunrise=%s, sunset=%s (%s)",
            phase,
            sunrise,
            sunset,
            source,
        )

        return DaylightInfo(
            is_daylight=phase == "DAY",
            phase=phase,
            sunrise=sunrise,
            sunset=sunset,
            source=source,
        )
