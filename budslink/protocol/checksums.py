"""
Checksum and CRC calculation.

Two integrity checks are used on the wire:

- Sony MDR frames carry an 8-bit additive checksum: the unsigned sum of
  every unescaped header and payload byte, modulo 256.
- Samsung frames carry a 16-bit CRC (CCITT polynomial 0x1021, initial
  value 0, no reflection) over the message id and payload, computed with
  a precomputed lookup table and stored little-endian.
"""

from __future__ import annotations

from typing import Final

CRC16_POLYNOMIAL: Final[int] = 0x1021


def _build_crc16_table(polynomial: int = CRC16_POLYNOMIAL) -> tuple[int, ...]:
    table = []
    for i in range(256):
        crc = i << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ polynomial
            else:
                crc <<= 1
        table.append(crc & 0xFFFF)
    return tuple(table)


CRC16_TABLE: Final[tuple[int, ...]] = _build_crc16_table()
"""Lookup table for the CCITT CRC16, indexed by (crc >> 8) ^ byte."""


def calculate_checksum(data: bytes | bytearray | memoryview) -> int:
    """
    Calculate the 8-bit additive checksum over the specified data.

    Args:
        data: Unescaped header and payload bytes.

    Returns:
        8-bit checksum value (0-255).

    Example:
        >>> calculate_checksum(bytes([0x01, 0x01, 0x00, 0x00, 0x00, 0x00]))
        2
    """
    return sum(data) & 0xFF


def validate_checksum(data: bytes | bytearray | memoryview, checksum: int) -> bool:
    """
    Check that data sums to the given checksum.

    Args:
        data: Unescaped header and payload bytes.
        checksum: Checksum byte found in the frame.

    Returns:
        True if the checksum matches.
    """
    return calculate_checksum(data) == checksum


def crc16(data: bytes | bytearray | memoryview, initial: int = 0) -> int:
    """
    Calculate the table-driven CCITT CRC16.

    Args:
        data: Bytes to checksum (message id followed by payload).
        initial: Starting CRC register value.

    Returns:
        16-bit CRC value.

    Example:
        >>> hex(crc16(bytes([0x60])))
        '0x6ca6'
    """
    crc = initial
    for byte in data:
        crc = (CRC16_TABLE[((crc >> 8) ^ byte) & 0xFF] ^ (crc << 8)) & 0xFFFF
    return crc


def crc16_bytes(data: bytes | bytearray | memoryview) -> bytes:
    """
    Calculate the CRC16 and return it in wire order (little-endian).

    Args:
        data: Bytes to checksum.

    Returns:
        Two bytes, low byte first.
    """
    return crc16(data).to_bytes(2, "little")
