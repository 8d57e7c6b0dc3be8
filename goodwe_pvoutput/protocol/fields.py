# goodwe_pvoutput/protocol/fields.py

from __future__ import annotations

import math
import struct
from dataclasses import dataclass


_FORMATS = {
    "u16": struct.Struct(">H"),
    "u32": struct.Struct(">I"),
}


def _scale(raw: int, exponent: int) -> float:
    """Apply ``10**exponent`` to *raw*, rounding half-up to ``-exponent`` places."""
    if exponent >= 0:
        return float(raw * 10 ** exponent)
    factor = 10 ** -exponent
    value = raw / factor
    return math.floor(value * factor + 0.5) / factor


def _decode(fmt: struct.Struct, buf: bytes, exponent: int, offset: int) -> float:
    if offset < 0 or len(buf) < offset + fmt.size:
        raise ValueError(
            f"need {fmt.size} bytes at offset {offset}, buffer has {len(buf)}"
        )
    (raw,) = fmt.unpack_from(buf, offset)
    return _scale(raw, exponent)


def decode_u16(buf: bytes, exponent: int, offset: int = 0) -> float:
    """Decode a big-endian unsigned 16-bit fixed-point value.

    >>> decode_u16(b"\\x09\\x29", -1)
    234.5
    """
    return _decode(_FORMATS["u16"], buf, exponent, offset)


def decode_u32(buf: bytes, exponent: int, offset: int = 0) -> float:
    """Decode a big-endian unsigned 32-bit fixed-point value."""
    return _decode(_FORMATS["u32"], buf, exponent, offset)


_DECODERS = {
    "u16": decode_u16,
    "u32": decode_u32,
}


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One fixed-offset telemetry field inside a response payload.

    Attributes:
        name: Key the decoded value is stored under.
        offset: Byte position within the payload.
        width: ``"u16"`` or ``"u32"``.
        exponent: Power-of-ten scale applied to the raw integer.
    """

    name: str
    offset: int
    width: str
    exponent: int = 0

    def __post_init__(self) -> None:
        if self.width not in _DECODERS:
            raise ValueError(f"Field '{self.name}': unsupported width '{self.width}'")

    @property
    def size(self) -> int:
        return _FORMATS[self.width].size

    def decode(self, payload: bytes) -> float:
        return _DECODERS[self.width](payload, self.exponent, self.offset)
