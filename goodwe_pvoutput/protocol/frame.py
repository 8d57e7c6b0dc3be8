"""Request building, response unwrapping and payload decoding.

The functions here are pure: they never touch the network and hold no state,
so the exchange driver and the tests share exactly the same code path.

Example:
    >>> from goodwe_pvoutput.protocol.layouts import DT_LAYOUT
    >>> build_request(DT_LAYOUT).hex(" ")
    '7f 03 75 94 00 49 d5 c2'
"""

from __future__ import annotations

from datetime import datetime, timezone

from goodwe_pvoutput.models.telemetry import (
    ACPhase,
    DCChannel,
    TelemetrySnapshot,
    resolve_status,
)
from goodwe_pvoutput.protocol.checksum import checksum
from goodwe_pvoutput.protocol.errors import FramingError, IntegrityError, ValidationError
from goodwe_pvoutput.protocol.layouts import DT_LAYOUT, FrameLayout


def build_request(layout: FrameLayout = DT_LAYOUT) -> bytes:
    """Return the discovery request: command followed by its checksum."""
    return layout.command + checksum(layout.command)


def extract_payload(datagram: bytes, layout: FrameLayout = DT_LAYOUT) -> bytes:
    """Check framing and CRC of a raw response and return the payload.

    Raises:
        FramingError: wrong datagram length or header bytes.
        IntegrityError: trailing checksum does not match the payload.
    """
    if len(datagram) != layout.response_length:
        raise FramingError(
            f"bad response size: got {len(datagram)}, want {layout.response_length}"
        )

    header_len = len(layout.header)
    if datagram[:header_len] != layout.header:
        raise FramingError(f"invalid header: {datagram[:header_len].hex()}")

    payload = datagram[header_len:header_len + layout.payload_length]
    trailer = datagram[header_len + layout.payload_length:]
    expected = checksum(payload)
    if trailer != expected:
        raise IntegrityError(
            f"CRC mismatch: got {trailer.hex()}, computed {expected.hex()}"
        )
    return payload


def _decode_fields(payload: bytes, layout: FrameLayout) -> dict[str, float]:
    return {spec.name: spec.decode(payload) for spec in layout.fields}


def _check_plausible(values: dict[str, float], layout: FrameLayout) -> None:
    if values["yield_today"] > layout.max_yield_today:
        raise ValidationError(
            f"unrealistic yield today: {values['yield_today']} kWh "
            f"(limit {layout.max_yield_today})"
        )
    if values["yield_total"] > layout.max_yield_total:
        raise ValidationError(
            f"unrealistic yield total: {values['yield_total']} kWh "
            f"(limit {layout.max_yield_total})"
        )


def parse_payload(
    payload: bytes,
    layout: FrameLayout = DT_LAYOUT,
    *,
    now: datetime | None = None,
) -> TelemetrySnapshot:
    """Decode a verified payload into a :class:`TelemetrySnapshot`.

    Args:
        payload: Payload bytes with header and checksum already stripped.
        layout: Field table to decode with.
        now: Sample timestamp; defaults to the current UTC time.

    Raises:
        FramingError: payload length does not match the layout.
        ValidationError: decoded yields are physically impossible.
    """
    if len(payload) != layout.payload_length:
        raise FramingError(
            f"bad payload size: got {len(payload)}, want {layout.payload_length}"
        )

    values = _decode_fields(payload, layout)
    _check_plausible(values, layout)

    dc_channels = []
    for i in range(layout.dc_channels):
        voltage = values[f"dc{i}_voltage"]
        current = values[f"dc{i}_current"]
        dc_channels.append(DCChannel(voltage=voltage, current=current, power=voltage * current))

    ac_phases = []
    for i in range(layout.ac_phases):
        voltage = values[f"ac{i}_voltage"]
        current = values[f"ac{i}_current"]
        frequency = values[f"ac{i}_frequency"]
        # Phase 0 is always reported; higher phases use the sentinel when absent.
        if i > 0 and voltage == layout.sentinel_voltage:
            voltage, current, frequency = 0.0, 0.0, 0.0
        ac_phases.append(ACPhase(voltage=voltage, current=current, frequency=frequency))

    return TelemetrySnapshot(
        sample_time=now or datetime.now(timezone.utc),
        dc_channels=tuple(dc_channels),
        ac_phases=tuple(ac_phases),
        ac_power=values["ac_power"],
        status=resolve_status(int(values["status"])),
        temperature=values["temperature"],
        yield_today=values["yield_today"],
        yield_total=values["yield_total"],
        working_hours=values["working_hours"],
    )
