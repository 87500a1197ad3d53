"""
Sony MDR frame codec.

Frame layout on the wire:

    HEADER | escaped(type, seq, length[4, big-endian], payload, checksum) | TRAILER

Any HEADER, TRAILER or ESCAPE byte inside the frame body is written as
ESCAPE followed by the byte with bit 0x10 cleared; unescaping restores
the bit. The checksum is the unsigned sum of the unescaped type, seq,
length and payload bytes, modulo 256.

Because marker bytes never appear unescaped inside a body, feed() can
find frame boundaries by scanning for HEADER...TRAILER spans in a
rolling buffer. A trailing HEADER without its TRAILER stays buffered
until the rest of the frame arrives.

Example:
    >>> codec = SonyFrameCodec()
    >>> wire = codec.encode(MessageType.ACK, b"", sequence=1)
    >>> wire.hex(" ")
    '3e 01 01 00 00 00 00 02 3c'
    >>> codec.feed(wire)
    [Frame(kind=0x01, seq=1, payload=)]
"""

from __future__ import annotations

import logging

from budslink.exceptions import ProtocolError
from budslink.protocol.checksums import calculate_checksum
from budslink.protocol.frames import (
    Frame,
    FrameCodec,
    FrameParseError,
    FrameParseResult,
    InvalidFrameHook,
)
from budslink.protocol.sony_constants import ESCAPED_BYTES, MessageType, SonyFraming

logger = logging.getLogger(__name__)

_UNESCAPE_BIT = ~SonyFraming.ESCAPE_MASK & 0xFF


def escape_bytes(data: bytes | bytearray) -> bytes:
    """
    Escape marker bytes for transmission.

    Args:
        data: Unescaped frame body.

    Returns:
        Body with every HEADER/TRAILER/ESCAPE byte replaced by an escape pair.
    """
    out = bytearray()
    for byte in data:
        if byte in ESCAPED_BYTES:
            out.append(SonyFraming.ESCAPE)
            out.append(byte & SonyFraming.ESCAPE_MASK)
        else:
            out.append(byte)
    return bytes(out)


def unescape_bytes(data: bytes | bytearray) -> bytes | None:
    """
    Reverse escape_bytes().

    Args:
        data: Escaped frame body (without HEADER/TRAILER).

    Returns:
        The unescaped body, or None if the data ends in a dangling ESCAPE.
    """
    out = bytearray()
    i = 0
    while i < len(data):
        byte = data[i]
        if byte == SonyFraming.ESCAPE:
            i += 1
            if i >= len(data):
                return None
            out.append(data[i] | _UNESCAPE_BIT)
        else:
            out.append(byte)
        i += 1
    return bytes(out)


class SonyFrameCodec(FrameCodec):
    """
    Codec for Sony MDR frames (both protocol revisions).
    """

    vendor = "sony"

    def __init__(self, on_invalid: InvalidFrameHook | None = None) -> None:
        super().__init__(on_invalid)

    def parse(self, span: bytes) -> tuple[FrameParseResult, Frame | FrameParseError]:
        """
        Validate and decode one HEADER...TRAILER span.

        Args:
            span: Raw bytes including both markers.

        Returns:
            Tuple of (result, Frame or FrameParseError).
        """
        if not span:
            return FrameParseResult.EMPTY_BUFFER, FrameParseError(
                FrameParseResult.EMPTY_BUFFER, "Empty span"
            )

        if span[0] != SonyFraming.HEADER or span[-1] != SonyFraming.TRAILER:
            return FrameParseResult.INVALID_FORMAT, FrameParseError(
                FrameParseResult.INVALID_FORMAT, "Missing frame markers", span
            )

        body = unescape_bytes(span[1:-1])
        if body is None:
            return FrameParseResult.INVALID_FORMAT, FrameParseError(
                FrameParseResult.INVALID_FORMAT, "Dangling escape byte", span
            )

        if len(body) < SonyFraming.MIN_BODY_SIZE:
            return FrameParseResult.INVALID_FORMAT, FrameParseError(
                FrameParseResult.INVALID_FORMAT,
                f"Body too short: {len(body)} < {SonyFraming.MIN_BODY_SIZE}",
                span,
            )

        received = body[-1]
        expected = calculate_checksum(body[:-1])
        if received != expected:
            return FrameParseResult.INVALID_CHECKSUM, FrameParseError(
                FrameParseResult.INVALID_CHECKSUM,
                "Checksum mismatch",
                span,
                expected=expected,
                received=received,
            )

        length = int.from_bytes(body[2:6], "big")
        payload = body[6:-1]
        if len(payload) != length:
            return FrameParseResult.INVALID_FORMAT, FrameParseError(
                FrameParseResult.INVALID_FORMAT,
                f"Length field {length} does not match payload size {len(payload)}",
                span,
            )

        return FrameParseResult.SUCCESS, Frame(
            kind=body[0],
            payload=bytes(payload),
            sequence=body[1],
            raw=bytes(span),
        )

    def feed(self, chunk: bytes) -> list[Frame]:
        self._buffer.extend(chunk)
        frames: list[Frame] = []

        while True:
            start = self._buffer.find(SonyFraming.HEADER)
            if start < 0:
                if self._buffer:
                    logger.debug("Discarding %d bytes outside a frame", len(self._buffer))
                self._buffer.clear()
                break

            end = self._buffer.find(SonyFraming.TRAILER, start + 1)
            if end < 0:
                # Keep the open frame for the next chunk
                del self._buffer[:start]
                break

            # A second HEADER before the TRAILER means the first frame was cut short
            restart = self._buffer.rfind(SonyFraming.HEADER, start + 1, end)
            if restart > start:
                self._report(
                    FrameParseError(
                        FrameParseResult.INCOMPLETE_FRAME,
                        "Frame interrupted by a new header",
                        bytes(self._buffer[start:restart]),
                    )
                )
                start = restart

            span = bytes(self._buffer[start:end + 1])
            del self._buffer[:end + 1]

            result, value = self.parse(span)
            if result is FrameParseResult.SUCCESS:
                frames.append(value)  # type: ignore[arg-type]
            else:
                self._report(value)  # type: ignore[arg-type]

        return frames

    def encode(self, kind: int, payload: bytes = b"", sequence: int = 0) -> bytes:
        """
        Build a complete wire frame.

        Args:
            kind: Message type (see MessageType).
            payload: Payload bytes.
            sequence: Sequence bit (0 or 1).

        Returns:
            HEADER, escaped body and checksum, TRAILER.

        Raises:
            ProtocolError: If the message type or sequence is out of range.
        """
        if not 0 <= kind <= 0xFF:
            raise ProtocolError(f"Message type out of range: {kind}")
        if sequence not in (0, 1):
            raise ProtocolError(f"Sequence must be 0 or 1, got {sequence}")

        body = bytearray([kind, sequence])
        body.extend(len(payload).to_bytes(4, "big"))
        body.extend(payload)
        body.append(calculate_checksum(body))

        return bytes([SonyFraming.HEADER]) + escape_bytes(body) + bytes([SonyFraming.TRAILER])

    def encode_ack(self, received_sequence: int) -> bytes:
        """
        Build the ACK for a received command frame.

        The ACK carries the inverse of the received sequence bit.

        Args:
            received_sequence: Sequence byte of the frame being acknowledged.

        Returns:
            Complete ACK frame.
        """
        return self.encode(MessageType.ACK, b"", sequence=1 - (received_sequence & 0x01))
