# goodwe_pvoutput/config.py
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import configparser
import os


@dataclass
class InverterConfig:
    host: str | None = None
    port: int = 8899
    model: str = "dt"
    retries: int = 3
    timeout: float = 1.0
    retry_delay: float = 1.0


@dataclass
class PVOutputConfig:
    api_key: str | None = None
    system_id: str | None = None
    url: str = "https://pvoutput.org/service/r2/addstatus.jsp"
    timeout: float = 5.0


@dataclass
class LocationConfig:
    name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    cache_path: str = ".location_cache.json"
    geocoder_url: str = "https://nominatim.openstreetmap.org/search"
    user_agent: str = "goodwe-pvoutput/1.0"
    timeout: float = 10.0

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class DaylightConfig:
    timezone: str = "UTC"
    static_sunrise: str | None = "06:00"
    static_sunset: str | None = "20:00"


@dataclass
class LoggingConfig:
    console_level: str = "WARNING"
    console_quiet: bool = False
    debug_modules: list[str] = field(default_factory=list)
    structured_enabled: bool = False
    structured_path: str | None = None


@dataclass
class AppConfig:
    inverter: InverterConfig
    pvoutput: PVOutputConfig
    location: LocationConfig
    daylight: DaylightConfig
    logging: LoggingConfig

    def apply_overrides(
        self,
        *,
        ip_address: str | None = None,
        port: int | None = None,
        api_key: str | None = None,
        system_id: str | None = None,
        location: str | None = None,
    ) -> "AppConfig":
        """Apply command-line overrides in place; ``None`` leaves a value untouched."""
        if ip_address:
            self.inverter.host = ip_address
        if port is not None:
            self.inverter.port = port
        if api_key:
            self.pvoutput.api_key = api_key
        if system_id:
            self.pvoutput.system_id = system_id
        if location:
            self.location.name = location
        return self

    def validate_for(self, command: str, *, needs_location: bool = True) -> None:
        missing = []
        if not self.inverter.host:
            missing.append("inverter host (--ip-address / IP_ADDRESS)")
        if command == "upload":
            if not self.pvoutput.api_key:
                missing.append("PVOutput API key (--api-key / API_KEY)")
            if not self.pvoutput.system_id:
                missing.append("PVOutput system ID (--system-id / SYSTEM_ID)")
        if needs_location and not (self.location.name or self.location.has_coordinates):
            missing.append("location (--location / LOCATION) or [location] latitude/longitude")
        if missing:
            raise ValueError("Missing required settings: " + "; ".join(missing))
        if self.inverter.retries < 1:
            raise ValueError("[inverter] retries must be at least 1")
        try:
            ZoneInfo(self.daylight.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"[daylight] unknown timezone '{self.daylight.timezone}'") from exc
        for key in ("static_sunrise", "static_sunset"):
            try:
                parse_clock(getattr(self.daylight, key))
            except ValueError as exc:
                raise ValueError(f"[daylight] {key}: {exc}") from exc


def parse_clock(raw: str | None) -> time | None:
    """Parse ``HH`` or ``HH:MM``; blank means unset."""
    if raw is None or not raw.strip():
        return None
    text = raw.strip()
    hour, _, minute = text.partition(":")
    try:
        return time(hour=int(hour), minute=int(minute) if minute else 0)
    except ValueError as exc:
        raise ValueError(f"invalid time '{text}', expected HH:MM") from exc


# Environment variables honoured when the config file leaves a value unset.
ENV_KEYS = {
    "IP_ADDRESS": ("inverter", "host"),
    "PORT": ("inverter", "port"),
    "API_KEY": ("pvoutput", "api_key"),
    "SYSTEM_ID": ("pvoutput", "system_id"),
    "LOCATION": ("location", "name"),
}


class Config:
    def __init__(self, path: str | None):
        self.path = Path(path) if path else None
        self.parser = configparser.ConfigParser(inline_comment_prefixes=("#",))
        if self.path is not None:
            try:
                read = self.parser.read(self.path)
            except configparser.Error as exc:
                raise ValueError(f"Config file {self.path}: {exc}") from exc
            if not read:
                raise FileNotFoundError(f"Config file not found: {self.path}")

    @classmethod
    def load(cls, path: str | None = None, environ: Mapping[str, str] | None = None) -> AppConfig:
        cfg = cls(path)
        env = os.environ if environ is None else environ

        p = cfg.parser

        def _as_bool(value: str) -> bool:
            return value.strip().lower() == "true"

        def _maybe_float(raw: str | None) -> float | None:
            if raw is None:
                return None
            raw = raw.strip()
            if not raw:
                return None
            return float(raw)

        def _maybe_str(raw: str | None) -> str | None:
            if raw is None:
                return None
            raw = raw.strip()
            return raw or None

        # --- Inverter ---
        inverter_kwargs = {}
        if "inverter" in p:
            inv_sec = p["inverter"]
            if (host := _maybe_str(inv_sec.get("host"))) is not None:
                inverter_kwargs["host"] = host
            if "port" in inv_sec:
                inverter_kwargs["port"] = int(inv_sec["port"])
            if "model" in inv_sec:
                inverter_kwargs["model"] = inv_sec["model"].strip()
            if "retries" in inv_sec:
                inverter_kwargs["retries"] = int(inv_sec["retries"])
            if "timeout" in inv_sec:
                inverter_kwargs["timeout"] = float(inv_sec["timeout"])
            if "retry_delay" in inv_sec:
                inverter_kwargs["retry_delay"] = float(inv_sec["retry_delay"])
        inverter_cfg = InverterConfig(**inverter_kwargs)

        # --- PVOutput ---
        pvoutput_kwargs = {}
        if "pvoutput" in p:
            pv_sec = p["pvoutput"]
            if (api_key := _maybe_str(pv_sec.get("api_key"))) is not None:
                pvoutput_kwargs["api_key"] = api_key
            if (system_id := _maybe_str(pv_sec.get("system_id"))) is not None:
                pvoutput_kwargs["system_id"] = system_id
            if "url" in pv_sec:
                pvoutput_kwargs["url"] = pv_sec["url"].strip()
            if "timeout" in pv_sec:
                pvoutput_kwargs["timeout"] = float(pv_sec["timeout"])
        pvoutput_cfg = PVOutputConfig(**pvoutput_kwargs)

        # --- Location ---
        location_kwargs = {}
        if "location" in p:
            loc_sec = p["location"]
            if (name := _maybe_str(loc_sec.get("name"))) is not None:
                location_kwargs["name"] = name
            if (latitude := _maybe_float(loc_sec.get("latitude"))) is not None:
                location_kwargs["latitude"] = latitude
            if (longitude := _maybe_float(loc_sec.get("longitude"))) is not None:
                location_kwargs["longitude"] = longitude
            if "cache_path" in loc_sec:
                location_kwargs["cache_path"] = loc_sec["cache_path"].strip()
            if "geocoder_url" in loc_sec:
                location_kwargs["geocoder_url"] = loc_sec["geocoder_url"].strip()
            if "user_agent" in loc_sec:
                location_kwargs["user_agent"] = loc_sec["user_agent"].strip()
            if "timeout" in loc_sec:
                location_kwargs["timeout"] = float(loc_sec["timeout"])
        location_cfg = LocationConfig(**location_kwargs)

        # --- Daylight ---
        daylight_kwargs = {}
        if "daylight" in p:
            daylight_sec = p["daylight"]
            if "timezone" in daylight_sec:
                daylight_kwargs["timezone"] = daylight_sec["timezone"].strip()
            if "static_sunrise" in daylight_sec:
                daylight_kwargs["static_sunrise"] = daylight_sec["static_sunrise"]
            if "static_sunset" in daylight_sec:
                daylight_kwargs["static_sunset"] = daylight_sec["static_sunset"]
        daylight_cfg = DaylightConfig(**daylight_kwargs)

        # --- Logging ---
        logging_kwargs = {}
        if "logging" in p:
            logging_sec = p["logging"]
            if "console_level" in logging_sec:
                logging_kwargs["console_level"] = logging_sec["console_level"]
            if "console_quiet" in logging_sec:
                logging_kwargs["console_quiet"] = _as_bool(logging_sec["console_quiet"])
            if "debug_modules" in logging_sec:
                raw = logging_sec["debug_modules"]
                logging_kwargs["debug_modules"] = [x.strip() for x in raw.split(",") if x.strip()]
            if "structured_enabled" in logging_sec:
                logging_kwargs["structured_enabled"] = _as_bool(logging_sec["structured_enabled"])
            if "structured_path" in logging_sec:
                logging_kwargs["structured_path"] = _maybe_str(logging_sec["structured_path"])
        logging_cfg = LoggingConfig(**logging_kwargs)

        app_cfg = AppConfig(
            inverter=inverter_cfg,
            pvoutput=pvoutput_cfg,
            location=location_cfg,
            daylight=daylight_cfg,
            logging=logging_cfg,
        )

        # --- Environment fallbacks ---
        for env_key, (section, attr) in ENV_KEYS.items():
            raw = _maybe_str(env.get(env_key))
            if raw is None:
                continue
            target = getattr(app_cfg, section)
            if attr == "port":
                if "port" not in inverter_kwargs:
                    target.port = int(raw)
            elif getattr(target, attr) is None:
                setattr(target, attr, raw)

        return app_cfg
