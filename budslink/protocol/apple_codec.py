"""
Apple accessory protocol (AAP) codec.

AAP has no length field. Notifications are recognized by matching a
known prefix against the start of the received bytes; most kinds also
have a fixed total length. Each notification normally arrives as one
complete write, but a chunk that starts a known prefix and ends short is
kept until the rest arrives.

Unrecognized packets are common (the protocol has many kinds this
library does not use) and are discarded at debug level.

Example:
    >>> codec = AppleFrameCodec()
    >>> frames = codec.feed(bytes.fromhex("0400040006000001"))
    >>> frames[0].kind == MessageKind.EAR_DETECTION
    True
    >>> frames[0].payload.hex()
    '0001'
"""

from __future__ import annotations

import logging
from typing import Final, NamedTuple

from budslink.exceptions import ProtocolError
from budslink.protocol.apple_constants import AppleLengths, ApplePackets, MessageKind
from budslink.protocol.frames import (
    Frame,
    FrameCodec,
    FrameParseError,
    FrameParseResult,
    InvalidFrameHook,
)

logger = logging.getLogger(__name__)


class MessageShape(NamedTuple):
    """Prefix and total length of one inbound message kind."""

    kind: MessageKind
    prefix: bytes
    length: int | None
    """Fixed total length, or None if the message takes the whole chunk."""


MESSAGE_SHAPES: Final[tuple[MessageShape, ...]] = (
    MessageShape(MessageKind.HANDSHAKE_ACK, ApplePackets.HANDSHAKE_ACK, None),
    MessageShape(MessageKind.FEATURES_ACK, ApplePackets.FEATURES_ACK, None),
    MessageShape(MessageKind.BATTERY, ApplePackets.BATTERY_PREFIX, AppleLengths.BATTERY),
    MessageShape(
        MessageKind.EAR_DETECTION, ApplePackets.EAR_DETECTION_PREFIX, AppleLengths.EAR_DETECTION
    ),
    MessageShape(
        MessageKind.AWARENESS_DATA,
        ApplePackets.AWARENESS_DATA_PREFIX,
        AppleLengths.AWARENESS_DATA,
    ),
    MessageShape(MessageKind.CONTROL, ApplePackets.CONTROL_PREFIX, AppleLengths.CONTROL),
)

_SHAPES_BY_KIND: Final[dict[MessageKind, MessageShape]] = {s.kind: s for s in MESSAGE_SHAPES}


def match_shape(data: bytes | bytearray) -> MessageShape | None:
    """
    Find the message shape whose prefix starts the data.

    Args:
        data: Received bytes.

    Returns:
        The matching shape, or None.
    """
    for shape in MESSAGE_SHAPES:
        if data[:len(shape.prefix)] == shape.prefix:
            return shape
    return None


def _is_partial_prefix(data: bytes | bytearray) -> bool:
    return any(
        len(data) < len(shape.prefix) and shape.prefix.startswith(data)
        for shape in MESSAGE_SHAPES
    )


class AppleFrameCodec(FrameCodec):
    """
    Prefix-dispatch codec for AAP notifications.

    Frame.kind is a MessageKind and Frame.payload holds the bytes that
    follow the matched prefix.
    """

    vendor = "apple"

    def __init__(self, on_invalid: InvalidFrameHook | None = None) -> None:
        super().__init__(on_invalid)

    def feed(self, chunk: bytes) -> list[Frame]:
        if self._buffer and match_shape(chunk) is not None:
            # A new notification started before the buffered one completed
            self._report(
                FrameParseError(
                    FrameParseResult.INCOMPLETE_FRAME,
                    "Partial message superseded by a new one",
                    bytes(self._buffer),
                )
            )
            self._buffer.clear()

        self._buffer.extend(chunk)
        frames: list[Frame] = []

        while self._buffer:
            shape = match_shape(self._buffer)
            if shape is None:
                if _is_partial_prefix(self._buffer):
                    break
                logger.debug("Ignoring unrecognized packet: %s", self._buffer.hex(" "))
                self._buffer.clear()
                break

            if shape.length is None:
                size = len(self._buffer)
            elif len(self._buffer) < shape.length:
                break
            else:
                size = shape.length

            packet = bytes(self._buffer[:size])
            del self._buffer[:size]
            frames.append(
                Frame(kind=shape.kind, payload=packet[len(shape.prefix):], raw=packet)
            )

        return frames

    def encode(self, kind: int, payload: bytes = b"") -> bytes:
        """
        Build a packet of a known kind.

        Args:
            kind: Message kind (see MessageKind).
            payload: Bytes following the kind's prefix.

        Returns:
            Complete packet.

        Raises:
            ProtocolError: If the kind is unknown or the packet length does
                not match the kind's fixed length.
        """
        try:
            shape = _SHAPES_BY_KIND[MessageKind(kind)]
        except ValueError:
            raise ProtocolError(f"Unknown message kind: {kind}") from None

        packet = shape.prefix + payload
        if shape.length is not None and len(packet) != shape.length:
            raise ProtocolError(
                f"{shape.kind.name} packets are {shape.length} bytes, got {len(packet)}"
            )
        return packet


def encode_control(setting_id: int, value: int) -> bytes:
    """
    Build a control setting packet.

    Args:
        setting_id: Setting id (see ControlId).
        value: Setting value byte.

    Returns:
        11-byte control packet.

    Example:
        >>> encode_control(0x0D, 0x02).hex(" ")
        '04 00 04 00 09 00 0d 02 00 00 00'
    """
    if not 0 <= value <= 0xFF:
        raise ProtocolError(f"Control value out of range: {value}")
    return ApplePackets.CONTROL_PREFIX + bytes([setting_id, value]) + ApplePackets.SUFFIX
