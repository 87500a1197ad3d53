"""
Samsung Galaxy Buds protocol constants.

Frame layout:

    SOM | header | id | payload | crc16 (little-endian) | EOM

Modern models use SOM 0xFD / EOM 0xDD and a 2-byte little-endian header
whose low 10 bits carry the size (id + payload + CRC). The original
Galaxy Buds use SOM 0xFE / EOM 0xEE and a [type, size] header.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class SamsungFraming:
    """Framing bytes and header bit layout."""

    SOM: Final[int] = 0xFD
    """Start of message (modern)."""

    EOM: Final[int] = 0xDD
    """End of message (modern)."""

    LEGACY_SOM: Final[int] = 0xFE
    """Start of message (original Galaxy Buds)."""

    LEGACY_EOM: Final[int] = 0xEE
    """End of message (original Galaxy Buds)."""

    SIZE_MASK: Final[int] = 0x03FF
    """Header bits carrying the size."""

    RESPONSE_FLAG: Final[int] = 0x1000
    """Header bit marking a response."""

    FRAGMENT_FLAG: Final[int] = 0x2000
    """Header bit marking a fragment."""

    MIN_FRAME_SIZE: Final[int] = 6
    """SOM + header + id + CRC is never less than this."""

    HEADER_SIZE: Final[int] = 3
    """SOM plus the 2-byte header."""

    CRC_SIZE: Final[int] = 2


class MessageType(IntEnum):
    """Legacy header type byte."""

    REQUEST = 0
    RESPONSE = 1


class MessageId(IntEnum):
    """Samsung message ids."""

    UNIVERSAL_ACK = 0x42
    """Acknowledgement; payload[0] is the id being acknowledged."""

    STATUS_UPDATED = 0x60
    """Short status: battery, ear detection."""

    EXTENDED_STATUS_UPDATED = 0x61
    """Full status sent on connect and on request."""

    NOISE_CONTROLS_UPDATE = 0x77
    """Noise control mode changed on the device."""

    NOISE_CONTROLS = 0x78
    """Set noise control mode."""


class NoiseControlMode(IntEnum):
    """Noise control modes."""

    OFF = 0
    NOISE_REDUCTION = 1
    AMBIENT_SOUND = 2
    ADAPTIVE = 3


class EarState(IntEnum):
    """Per-bud placement (modern nibble encoding)."""

    DISCONNECTED = 0
    WEARING = 1
    IDLE = 2
    CASE = 3
    CLOSED_CASE = 4


class LegacyEarState(IntEnum):
    """Ear detection byte of the original Galaxy Buds."""

    NONE = 0x00
    RIGHT = 0x01
    LEFT = 0x10
    BOTH = 0x11


class ChargingBits:
    """Bits of the charging status byte."""

    LEFT: Final[int] = 0x10
    RIGHT: Final[int] = 0x04
    CASE: Final[int] = 0x01
    MASK: Final[int] = 0x15


CASE_LEVEL_UNKNOWN: Final[int] = 0xFF
"""Case level reported when the case state is not known."""
