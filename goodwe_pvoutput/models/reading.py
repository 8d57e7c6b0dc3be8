# goodwe_pvoutput/models/reading.py
from dataclasses import dataclass
from datetime import datetime


@dataclass
class Reading:
    date: datetime
    power: int                  # W
    energy: int                 # Wh generated today
    voltage: int | None = None  # AC phase 1, V
    temperature: int | None = None  # degrees C
