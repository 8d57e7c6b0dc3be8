from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

import requests

from goodwe_pvoutput.config import PVOutputConfig
from goodwe_pvoutput.models.reading import Reading
from goodwe_pvoutput.models.telemetry import TelemetrySnapshot


class UploadError(Exception):
    """PVOutput rejected the status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def reading_from_snapshot(snapshot: TelemetrySnapshot, now: datetime) -> Reading:
    """Reduce a telemetry snapshot to the fields PVOutput accepts."""
    return Reading(
        date=now,
        power=int(snapshot.ac_power),
        # kWh -> Wh; round first so 4.1 kWh does not become 4099 Wh.
        energy=int(round(snapshot.yield_today * 1000)),
        voltage=int(snapshot.ac_phases[0].voltage),
        temperature=int(snapshot.temperature),
    )


class PVOutputClient:
    """Minimal PVOutput "Add Status" client."""

    API_URL_DEFAULT = "https://pvoutput.org/service/r2/addstatus.jsp"

    def __init__(self, cfg: PVOutputConfig, log, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.log = log
        self.session = session or requests.Session()
        self.url = cfg.url or self.API_URL_DEFAULT

    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        return {
            "X-Pvoutput-Apikey": self.cfg.api_key or "",
            "X-Pvoutput-SystemId": self.cfg.system_id or "",
        }

    @staticmethod
    def build_form(reading: Reading) -> Dict[str, str]:
        form = {
            "d": reading.date.strftime("%Y%m%d"),
            "t": reading.date.strftime("%H:%M"),
            "v1": str(reading.energy),
            "v2": str(reading.power),
        }
        # Optional values are omitted rather than sent as zero.
        if reading.voltage is not None and reading.voltage > 0:
            form["v6"] = str(reading.voltage)
        if reading.temperature is not None and reading.temperature > 0:
            form["v5"] = str(reading.temperature)
        return form

    # ------------------------------------------------------------------
    def add_status(self, reading: Reading) -> None:
        form = self.build_form(reading)
        self.log.debug("PVOutput addstatus payload: %s", form)

        try:
            resp = self.session.post(
                self.url,
                data=form,
                headers=self._headers(),
                timeout=self.cfg.timeout,
            )
        except requests.RequestException as exc:
            raise UploadError(f"PVOutput request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            body = (getattr(resp, "text", "") or "").strip()
            detail = f": {body[:200]}" if body else ""
            raise UploadError(
                f"upload failed: HTTP {resp.status_code}{detail}",
                status_code=resp.status_code,
            )

        self.log.info(
            "Uploaded status to PVOutput (power=%sW, energy=%sWh)",
            reading.power,
            reading.energy,
        )
