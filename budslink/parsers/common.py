"""
Helpers shared by the vendor decoders.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TypeVar

from budslink.models.state import BatteryCell, BatteryStatus

E = TypeVar("E", bound=IntEnum)


def enum_or_none(enum_cls: type[E], value: int) -> E | None:
    """
    Convert a wire byte to an enum member.

    Args:
        enum_cls: Target enumeration.
        value: Raw byte.

    Returns:
        The member, or None if the value is not defined.

    Example:
        >>> from budslink.protocol.sony_constants import BgmDistance
        >>> enum_or_none(BgmDistance, 1)
        <BgmDistance.LIVING_ROOM: 1>
        >>> enum_or_none(BgmDistance, 9) is None
        True
    """
    try:
        return enum_cls(value)
    except ValueError:
        return None


def bool_from_byte(value: int) -> bool | None:
    """Map 0/1 to False/True; any other byte is not a boolean."""
    if value == 0x00:
        return False
    if value == 0x01:
        return True
    return None


def battery_cell(level: int, charging: bool) -> BatteryCell:
    """Build a battery cell with the level clamped to 0..100."""
    status = BatteryStatus.CHARGING if charging else BatteryStatus.DISCHARGING
    return BatteryCell.clamped(level, status)
