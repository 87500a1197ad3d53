"""
Samsung Galaxy Buds frame codec.

Frame layout:

    SOM | header | id | payload | crc16 (2 bytes, little-endian) | EOM

The header is two bytes in both layouts:

- modern: little-endian word, size in bits 0..9, response flag 0x1000,
  fragment flag 0x2000
- legacy (original Galaxy Buds): [type, size]

Size counts the id, the payload and the CRC. The CRC16 covers the id
and the payload.

Example:
    >>> codec = SamsungFrameCodec()
    >>> codec.encode(MessageId.STATUS_UPDATED).hex(" ")
    'fd 03 00 60 a6 6c dd'
"""

from __future__ import annotations

import logging

from budslink.exceptions import ProtocolError
from budslink.protocol.checksums import crc16, crc16_bytes
from budslink.protocol.frames import (
    Frame,
    FrameCodec,
    FrameParseError,
    FrameParseResult,
    InvalidFrameHook,
)
from budslink.protocol.samsung_constants import MessageId, MessageType, SamsungFraming

logger = logging.getLogger(__name__)


class SamsungFrameCodec(FrameCodec):
    """
    Codec for Samsung Galaxy Buds frames.

    Attributes:
        legacy: Whether the legacy SOM/EOM pair and header are in use.
    """

    vendor = "samsung"

    def __init__(
        self,
        legacy: bool = False,
        on_invalid: InvalidFrameHook | None = None,
    ) -> None:
        """
        Initialize the codec.

        Args:
            legacy: Use the original Galaxy Buds framing.
            on_invalid: Optional hook called with every rejected span.
        """
        super().__init__(on_invalid)
        self.legacy = legacy
        if legacy:
            self._som = SamsungFraming.LEGACY_SOM
            self._eom = SamsungFraming.LEGACY_EOM
        else:
            self._som = SamsungFraming.SOM
            self._eom = SamsungFraming.EOM

    @property
    def start_of_message(self) -> int:
        """SOM byte expected by this codec."""
        return self._som

    @property
    def end_of_message(self) -> int:
        """EOM byte expected by this codec."""
        return self._eom

    def _declared_size(self, data: bytes | bytearray) -> int:
        if self.legacy:
            return data[2]
        return (data[1] | data[2] << 8) & SamsungFraming.SIZE_MASK

    def parse(self, span: bytes) -> tuple[FrameParseResult, Frame | FrameParseError]:
        """
        Validate and decode one complete frame.

        Args:
            span: Raw frame bytes from SOM to EOM.

        Returns:
            Tuple of (result, Frame or FrameParseError).
        """
        if len(span) < SamsungFraming.MIN_FRAME_SIZE:
            return FrameParseResult.INVALID_FORMAT, FrameParseError(
                FrameParseResult.INVALID_FORMAT,
                f"Frame too short: {len(span)} < {SamsungFraming.MIN_FRAME_SIZE}",
                bytes(span),
            )

        if span[0] != self._som or span[-1] != self._eom:
            return FrameParseResult.INVALID_FORMAT, FrameParseError(
                FrameParseResult.INVALID_FORMAT,
                f"Unexpected SOM/EOM 0x{span[0]:02X}/0x{span[-1]:02X}",
                bytes(span),
            )

        size = self._declared_size(span)
        payload_size = max(size - 1 - SamsungFraming.CRC_SIZE, 0)
        expected_len = SamsungFraming.HEADER_SIZE + 1 + payload_size + SamsungFraming.CRC_SIZE + 1
        if len(span) != expected_len:
            return FrameParseResult.INVALID_FORMAT, FrameParseError(
                FrameParseResult.INVALID_FORMAT,
                f"Frame length {len(span)} does not match header ({expected_len})",
                bytes(span),
            )

        msg_id = span[3]
        payload = bytes(span[4:4 + payload_size])
        received = span[4 + payload_size] | span[5 + payload_size] << 8
        expected = crc16(bytes([msg_id]) + payload)
        if received != expected:
            return FrameParseResult.INVALID_CHECKSUM, FrameParseError(
                FrameParseResult.INVALID_CHECKSUM,
                "CRC mismatch",
                bytes(span),
                expected=expected,
                received=received,
            )

        return FrameParseResult.SUCCESS, Frame(kind=msg_id, payload=payload, raw=bytes(span))

    def feed(self, chunk: bytes) -> list[Frame]:
        self._buffer.extend(chunk)
        frames: list[Frame] = []

        while True:
            start = self._buffer.find(self._som)
            if start < 0:
                if self._buffer:
                    logger.debug("Discarding %d bytes without SOM", len(self._buffer))
                self._buffer.clear()
                break
            if start > 0:
                logger.debug("Skipping %d bytes before SOM", start)
                del self._buffer[:start]

            if len(self._buffer) < SamsungFraming.HEADER_SIZE:
                break

            size = self._declared_size(self._buffer)
            total = SamsungFraming.HEADER_SIZE + size + 1
            if size < 1 + SamsungFraming.CRC_SIZE:
                self._report(
                    FrameParseError(
                        FrameParseResult.INVALID_FORMAT,
                        f"Declared size {size} below minimum",
                        bytes(self._buffer[:SamsungFraming.HEADER_SIZE]),
                    )
                )
                del self._buffer[:1]
                continue

            if len(self._buffer) < total:
                resync = self._next_complete_frame()
                if resync is None:
                    break
                self._report(
                    FrameParseError(
                        FrameParseResult.INVALID_FORMAT,
                        f"Declared size {size} overruns a later frame",
                        bytes(self._buffer[:resync]),
                    )
                )
                del self._buffer[:resync]
                continue

            span = bytes(self._buffer[:total])
            result, value = self.parse(span)
            if result is FrameParseResult.SUCCESS:
                del self._buffer[:total]
                frames.append(value)  # type: ignore[arg-type]
            else:
                self._report(value)  # type: ignore[arg-type]
                if result is FrameParseResult.INVALID_CHECKSUM:
                    # Markers and length were consistent, so the span is a whole frame
                    del self._buffer[:total]
                else:
                    del self._buffer[:1]

        return frames

    def _next_complete_frame(self) -> int | None:
        # Offset of a later SOM that starts a whole, valid frame, if any.
        start = self._buffer.find(self._som, 1)
        while start > 0:
            candidate = self._buffer[start:]
            if len(candidate) < SamsungFraming.HEADER_SIZE:
                return None
            total = SamsungFraming.HEADER_SIZE + self._declared_size(candidate) + 1
            if total <= len(candidate):
                result, _ = self.parse(bytes(candidate[:total]))
                if result is FrameParseResult.SUCCESS:
                    return start
            start = self._buffer.find(self._som, start + 1)
        return None

    def encode(self, kind: int, payload: bytes = b"", response: bool = False) -> bytes:
        """
        Build a complete wire frame.

        Args:
            kind: Message id (see MessageId).
            payload: Payload bytes.
            response: Mark the frame as a response rather than a request.

        Returns:
            Complete frame from SOM to EOM.

        Raises:
            ProtocolError: If the id is out of range or the payload is too
                large for the size field.
        """
        if not 0 <= kind <= 0xFF:
            raise ProtocolError(f"Message id out of range: {kind}")

        size = 1 + len(payload) + SamsungFraming.CRC_SIZE
        buf = bytearray([self._som])
        if self.legacy:
            if size > 0xFF:
                raise ProtocolError(f"Payload too large for legacy frame: {len(payload)}")
            msg_type = MessageType.RESPONSE if response else MessageType.REQUEST
            buf.extend((msg_type, size))
        else:
            if size > SamsungFraming.SIZE_MASK:
                raise ProtocolError(f"Payload too large: {len(payload)}")
            header = size | (SamsungFraming.RESPONSE_FLAG if response else 0)
            buf.extend(header.to_bytes(2, "little"))

        buf.append(kind)
        buf.extend(payload)
        buf.extend(crc16_bytes(bytes([kind]) + payload))
        buf.append(self._eom)
        return bytes(buf)


def encode_request(msg_id: MessageId, payload: bytes = b"", legacy: bool = False) -> bytes:
    """
    Encode a request frame without keeping a codec around.

    Args:
        msg_id: Message id.
        payload: Payload bytes.
        legacy: Use the original Galaxy Buds framing.

    Returns:
        Complete frame.
    """
    return SamsungFrameCodec(legacy=legacy).encode(msg_id, payload)
