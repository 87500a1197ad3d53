"""
Apple accessory protocol (AAP) constants.

AAP packets carry no length field. Inbound notifications are recognized
by a fixed byte prefix and, for most kinds, a fixed total length.
Control settings share one header and are told apart by the setting id
at offset 6.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class ApplePackets:
    """Fixed outbound packets and inbound prefixes."""

    HANDSHAKE: Final[bytes] = bytes.fromhex("00000400010002000000000000000000")
    """Opens the AAP session."""

    HANDSHAKE_ACK: Final[bytes] = bytes.fromhex("01000400")
    """Prefix of the reply to HANDSHAKE."""

    SET_SPECIFIC_FEATURES: Final[bytes] = bytes.fromhex("040004004d00ff0000000000000000")
    """Enables conversation awareness and related features."""

    FEATURES_ACK: Final[bytes] = bytes.fromhex("040004002b00")
    """Prefix of the reply to SET_SPECIFIC_FEATURES."""

    REQUEST_NOTIFICATIONS: Final[bytes] = bytes.fromhex("040004000f00ffffffff")
    """Subscribes to battery, ear detection and setting notifications."""

    BATTERY_PREFIX: Final[bytes] = bytes.fromhex("040004000400")
    """Battery notification prefix."""

    EAR_DETECTION_PREFIX: Final[bytes] = bytes.fromhex("040004000600")
    """Ear detection notification prefix."""

    CONTROL_PREFIX: Final[bytes] = bytes.fromhex("040004000900")
    """Control setting prefix, followed by the setting id."""

    AWARENESS_DATA_PREFIX: Final[bytes] = bytes.fromhex("040004004b00020001")
    """Conversation awareness speech level notification prefix."""

    SUFFIX: Final[bytes] = bytes.fromhex("000000")
    """Padding after a control setting value."""


class AppleLengths:
    """Total packet lengths for fixed-size notifications."""

    BATTERY: Final[int] = 22
    EAR_DETECTION: Final[int] = 8
    CONTROL: Final[int] = 11
    AWARENESS_DATA: Final[int] = 10

    BATTERY_RECORD: Final[int] = 5
    """Stride of a per-cell battery record."""

    BATTERY_RECORDS_OFFSET: Final[int] = 7
    BATTERY_COUNT_OFFSET: Final[int] = 6


class MessageKind(IntEnum):
    """Inbound message kinds recognized by the codec."""

    HANDSHAKE_ACK = 1
    FEATURES_ACK = 2
    BATTERY = 3
    EAR_DETECTION = 4
    CONTROL = 5
    AWARENESS_DATA = 6


class ControlId(IntEnum):
    """Setting ids carried in control packets."""

    LISTENING_MODE = 0x0D
    PRESS_SPEED = 0x17
    PRESS_DURATION = 0x18
    TONE_VOLUME = 0x1F
    VOLUME_SWIPE_INTERVAL = 0x23
    VOLUME_SWIPE_MODE = 0x25
    CONVERSATION_AWARENESS = 0x28
    ADAPTIVE_LEVEL = 0x2E


class BatteryType(IntEnum):
    """Cell type in a battery record."""

    SINGLE = 0x01
    RIGHT = 0x02
    LEFT = 0x04
    CASE = 0x08


CHARGING_BIT: Final[int] = 0x01
"""Bit of the battery status byte set while charging."""


class EarDetection(IntEnum):
    """Per-bud placement."""

    IN_EAR = 0x00
    OUT_OF_EAR = 0x01
    IN_CASE = 0x02


class ListeningMode(IntEnum):
    """Noise control (listening) modes."""

    OFF = 0x01
    ANC = 0x02
    TRANSPARENCY = 0x03
    ADAPTIVE = 0x04


class AwarenessMode(IntEnum):
    """Conversation awareness switch."""

    ON = 0x01
    OFF = 0x02


class PressSpeed(IntEnum):
    """Double/triple press speed."""

    DEFAULT = 0x00
    SLOWER = 0x01
    SLOWEST = 0x02


class PressDuration(IntEnum):
    """Press-and-hold duration."""

    DEFAULT = 0x00
    SHORTER = 0x01
    SHORTEST = 0x02


class VolumeSwipeInterval(IntEnum):
    """Delay between volume swipe steps."""

    DEFAULT = 0x00
    LONGER = 0x01
    LONGEST = 0x02


class SwitchValue(IntEnum):
    """On/off encoding used by boolean control settings."""

    ON = 0x01
    OFF = 0x02


ADAPTIVE_LEVEL_RANGE: Final[range] = range(0, 101)
TONE_VOLUME_RANGE: Final[range] = range(0, 101)
"""Tone volume values accepted by the device."""

AWARENESS_LEVEL_RANGE: Final[range] = range(1, 10)
AWARENESS_ATTENUATED_MAX: Final[int] = 2
"""Speech levels at or below this mean media is attenuated."""
