"""
Wire layouts for supported GoodWe inverter families.

Each :class:`FrameLayout` is the single source of truth for one firmware
family: the discovery command, the response framing, and the byte offsets and
scale exponents of every telemetry field inside the response payload.  The
decode and CRC code never hard-codes an offset; adding a model means adding a
layout here and registering it in :data:`LAYOUTS`.

Offsets are relative to the payload, i.e. after the 2-byte ``AA 55`` header
has been stripped and before the trailing 2-byte checksum.
"""

from __future__ import annotations

from dataclasses import dataclass

from goodwe_pvoutput.protocol.fields import FieldSpec


@dataclass(frozen=True, slots=True)
class FrameLayout:
    """Request command, response framing and field table for one model.

    Attributes:
        model: Identifier used in configuration (``[inverter] model``).
        command: Request bytes sent before the checksum is appended.
        header: Expected first bytes of every response datagram.
        response_length: Total datagram size including header and checksum.
        dc_channels: Number of DC (MPPT string) inputs in the payload.
        ac_phases: Number of AC output phases in the payload.
        fields: Field table; DC and AC entries are named ``dc{i}_*`` and
            ``ac{i}_*`` with zero-based indices.
        sentinel_voltage: Decoded AC voltage meaning "phase not present".
        max_yield_today: Upper plausibility bound for daily yield (kWh).
        max_yield_total: Upper plausibility bound for lifetime yield (kWh).
    """

    model: str
    command: bytes
    header: bytes
    response_length: int
    dc_channels: int
    ac_phases: int
    fields: tuple[FieldSpec, ...]
    sentinel_voltage: float
    max_yield_today: float
    max_yield_total: float

    @property
    def payload_length(self) -> int:
        return self.response_length - len(self.header) - 2

    def __post_init__(self) -> None:  # noqa: D105
        for spec in self.fields:
            if spec.offset + spec.size > self.payload_length:
                msg = (
                    f"Layout '{self.model}': field '{spec.name}' at offset "
                    f"{spec.offset} overruns {self.payload_length}-byte payload"
                )
                raise ValueError(msg)


def _dc_fields(count: int, base: int) -> list[FieldSpec]:
    fields: list[FieldSpec] = []
    for i in range(count):
        offset = base + 4 * i
        fields.append(FieldSpec(f"dc{i}_voltage", offset, "u16", -1))
        fields.append(FieldSpec(f"dc{i}_current", offset + 2, "u16", -1))
    return fields


def _ac_fields(count: int, voltage_base: int, current_base: int, frequency_base: int) -> list[FieldSpec]:
    fields: list[FieldSpec] = []
    for i in range(count):
        fields.append(FieldSpec(f"ac{i}_voltage", voltage_base + 2 * i, "u16", -1))
        fields.append(FieldSpec(f"ac{i}_current", current_base + 2 * i, "u16", -1))
        fields.append(FieldSpec(f"ac{i}_frequency", frequency_base + 2 * i, "u16", -2))
    return fields


# ---------------------------------------------------------------------------
# DT family (three-phase, UDP port 8899)
# ---------------------------------------------------------------------------

DT_LAYOUT = FrameLayout(
    model="dt",
    command=bytes((0x7F, 0x03, 0x75, 0x94, 0x00, 0x49)),
    header=bytes((0xAA, 0x55)),
    response_length=153,
    dc_channels=4,
    ac_phases=3,
    fields=tuple(
        _dc_fields(4, base=9)
        + _ac_fields(3, voltage_base=39, current_base=45, frequency_base=51)
        + [
            FieldSpec("ac_power", 59, "u16", 0),
            FieldSpec("status", 61, "u16", 0),
            FieldSpec("temperature", 85, "u16", -1),
            FieldSpec("yield_today", 91, "u16", -1),
            FieldSpec("yield_total", 93, "u32", 0),
            FieldSpec("working_hours", 99, "u16", 0),
        ]
    ),
    sentinel_voltage=6553.5,
    max_yield_today=6500,
    max_yield_total=4_000_000,
)


LAYOUTS: dict[str, FrameLayout] = {
    DT_LAYOUT.model: DT_LAYOUT,
}
"""Registered layouts keyed by model identifier."""


def get_layout(model: str) -> FrameLayout:
    key = (model or "").strip().lower()
    try:
        return LAYOUTS[key]
    except KeyError:
        known = ", ".join(sorted(LAYOUTS))
        raise ValueError(f"Unknown inverter model '{model}' (known: {known})") from None
