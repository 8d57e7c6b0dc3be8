# goodwe_pvoutput/services/output_formatter.py

from __future__ import annotations

import json
from typing import Optional

from goodwe_pvoutput.models.reading import Reading
from goodwe_pvoutput.models.telemetry import TelemetrySnapshot


def emit_json(snapshot: TelemetrySnapshot, reading: Optional[Reading] = None) -> None:
    payload = snapshot.as_dict()
    if reading is not None:
        payload["reading"] = {
            "date": reading.date.isoformat(),
            "power": reading.power,
            "energy": reading.energy,
            "voltage": reading.voltage,
            "temperature": reading.temperature,
        }
    print(json.dumps(payload, indent=2))


def format_human(snapshot: TelemetrySnapshot) -> str:
    lines = [
        f"Sample:        {snapshot.sample_time.isoformat()}",
        f"Status:        {snapshot.status_name}",
        f"AC power:      {snapshot.ac_power:.0f} W",
        f"Temperature:   {snapshot.temperature:.1f} C",
        f"Yield today:   {snapshot.yield_today:.1f} kWh",
        f"Yield total:   {snapshot.yield_total:.0f} kWh",
        f"Working hours: {snapshot.working_hours:.0f} h",
    ]
    for idx, ch in enumerate(snapshot.dc_channels, start=1):
        lines.append(
            f"DC{idx}: {ch.voltage:.1f} V  {ch.current:.1f} A  {ch.power:.1f} W"
        )
    for idx, ph in enumerate(snapshot.ac_phases, start=1):
        lines.append(
            f"AC{idx}: {ph.voltage:.1f} V  {ph.current:.1f} A  {ph.frequency:.2f} Hz"
        )
    return "\n".join(lines)


def emit_human(snapshot: TelemetrySnapshot) -> None:
    print(format_human(snapshot))
