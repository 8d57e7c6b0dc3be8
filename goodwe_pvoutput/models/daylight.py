from dataclasses import dataclass
from datetime import datetime


@dataclass
class DaylightInfo:
    is_daylight: bool
    phase: str  # BEFORE_SUNRISE, DAY, AFTER_SUNSET
    sunrise: datetime
    sunset: datetime
    source: str  # "astral" or "static"
