# goodwe_pvoutput/models/telemetry.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any


class InverterStatus(IntEnum):
    WAITING = 0
    NORMAL = 1
    ERROR = 2
    CHECKING = 3


def resolve_status(code: int) -> InverterStatus | int:
    """Map a raw status code to :class:`InverterStatus`, keeping unknown codes as-is."""
    try:
        return InverterStatus(code)
    except ValueError:
        return int(code)


@dataclass(frozen=True)
class DCChannel:
    voltage: float
    current: float
    power: float


@dataclass(frozen=True)
class ACPhase:
    voltage: float
    current: float
    frequency: float


@dataclass(frozen=True)
class TelemetrySnapshot:
    sample_time: datetime
    dc_channels: tuple[DCChannel, ...]
    ac_phases: tuple[ACPhase, ...]
    ac_power: float
    status: InverterStatus | int   # raw int when the code is not a known status
    temperature: float
    yield_today: float             # kWh
    yield_total: float             # kWh
    working_hours: float

    @property
    def status_known(self) -> bool:
        return isinstance(self.status, InverterStatus)

    @property
    def status_name(self) -> str:
        if isinstance(self.status, InverterStatus):
            return self.status.name
        return f"UNKNOWN({self.status})"

    def as_dict(self) -> dict[str, Any]:
        return {
            "sample": self.sample_time.isoformat(),
            "voltage_dc": [ch.voltage for ch in self.dc_channels],
            "current_dc": [ch.current for ch in self.dc_channels],
            "power_dc": [ch.power for ch in self.dc_channels],
            "voltage_ac": [ph.voltage for ph in self.ac_phases],
            "current_ac": [ph.current for ph in self.ac_phases],
            "frequency_ac": [ph.frequency for ph in self.ac_phases],
            "power_ac": self.ac_power,
            "status": int(self.status),
            "status_name": self.status_name,
            "temperature": self.temperature,
            "yield_today": self.yield_today,
            "yield_total": self.yield_total,
            "working_hours": self.working_hours,
        }
