# goodwe_pvoutput/tests/test_checksum.py

import pytest

from goodwe_pvoutput.protocol.checksum import checksum, crc16, verify


DISCOVERY_COMMAND = bytes([0x7F, 0x03, 0x75, 0x94, 0x00, 0x49])


def test_discovery_command_checksum_is_pinned():
    assert checksum(DISCOVERY_COMMAND) == bytes([0xD5, 0xC2])
    assert crc16(DISCOVERY_COMMAND) == 0xC2D5


def test_standard_check_value():
    assert crc16(b"123456789") == 0x4B37


def test_empty_input_returns_initial_register_low_byte_first():
    assert checksum(b"") == b"\xff\xff"


def test_checksum_is_low_byte_first():
    crc = crc16(b"\x03\x01\x00")
    assert crc == 0x5080
    assert checksum(b"\x03\x01\x00") == b"\x80\x50"


@pytest.mark.parametrize(
    "data",
    [
        b"\x00",
        b"\xff" * 7,
        DISCOVERY_COMMAND,
        bytes(range(149)),
        b"GoodWe telemetry",
    ],
)
def test_appended_checksum_verifies_after_split(data):
    framed = data + checksum(data)
    body, trailer = framed[:-2], framed[-2:]
    assert verify(body, trailer)
    # Reflected CRC without final XOR leaves a zero residue over body + CRC.
    assert crc16(framed) == 0


def test_verify_rejects_corruption():
    trailer = checksum(DISCOVERY_COMMAND)
    corrupted = bytes([DISCOVERY_COMMAND[0] ^ 0x01]) + DISCOVERY_COMMAND[1:]
    assert not verify(corrupted, trailer)
    assert not verify(DISCOVERY_COMMAND, trailer[::-1])
