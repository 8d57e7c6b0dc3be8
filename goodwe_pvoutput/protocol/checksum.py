"""CRC16/MODBUS checksum used on both sides of the inverter exchange.

The inverter appends the checksum to every response payload and expects it on
every request.  The register value is transmitted low byte first regardless of
the big-endian layout used for the telemetry fields themselves.

Example:
    >>> checksum(bytes([0x7F, 0x03, 0x75, 0x94, 0x00, 0x49])).hex(" ")
    'd5 c2'
"""

from __future__ import annotations

CRC16_INIT = 0xFFFF
CRC16_POLY = 0xA001


def crc16(data: bytes) -> int:
    """Return the 16-bit CRC register after consuming *data*.

    Bit-serial implementation with the reflected MODBUS polynomial; frames are
    short enough that a lookup table buys nothing.
    """
    crc = CRC16_INIT
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x0001:
                crc = (crc >> 1) ^ CRC16_POLY
            else:
                crc >>= 1
    return crc


def checksum(data: bytes) -> bytes:
    """Return the two checksum bytes for *data*, low byte first."""
    crc = crc16(data)
    return bytes((crc & 0xFF, crc >> 8))


def verify(data: bytes, expected: bytes) -> bool:
    return checksum(data) == bytes(expected)
