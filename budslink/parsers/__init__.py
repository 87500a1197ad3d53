"""
Semantic decoders for device payloads.

Each vendor module exposes a pure decoder:

    decode_frame(state, frame, capabilities) -> (new_state, events)

Decoders never raise on device data. Payloads that are too short, carry
an undefined enumeration value or describe a feature the model does not
have decode to no change.

Example:
    >>> from budslink.parsers import decode_sony
    >>> from budslink.capabilities.sony import WH_1000XM6
    >>> from budslink.models import SonyState
    >>> frame = Frame(kind=0x0C, payload=bytes.fromhex("23005500"))
    >>> state, events = decode_sony(SonyState(), frame, WH_1000XM6)
    >>> state.battery[1].level
    85
"""

from budslink.parsers.apple import decode_frame as decode_apple
from budslink.parsers.common import battery_cell, bool_from_byte, enum_or_none
from budslink.parsers.samsung import decode_battery, decode_ear
from budslink.parsers.samsung import decode_frame as decode_samsung
from budslink.parsers.sony import decode_frame as decode_sony
from budslink.parsers.sony import response_tag
from budslink.protocol.frames import Frame

__all__ = [
    # Decoders
    "decode_sony",
    "decode_samsung",
    "decode_apple",
    "response_tag",
    # Helpers
    "decode_battery",
    "decode_ear",
    "enum_or_none",
    "bool_from_byte",
    "battery_cell",
    "Frame",
]
