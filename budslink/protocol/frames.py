"""
Shared frame types and the codec contract.

Every vendor codec turns raw chunks from the byte transport into
validated Frame objects and serializes outbound messages into wire
bytes. The contract is the same for all three vendor families:

    feed(chunk) -> list[Frame]
    encode(kind, payload, ...) -> bytes

A Frame only exists once its integrity check (if the format has one) has
passed and its declared length matches the bytes available. Spans that
fail validation are dropped, logged, counted and passed to an optional
on_invalid hook; they never raise out of feed().
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, ClassVar

from budslink.exceptions import ChecksumError, FrameError, ProtocolError

logger = logging.getLogger(__name__)


class FrameParseResult(Enum):
    """
    Result codes for frame parsing operations.
    """

    SUCCESS = auto()
    """Frame was successfully parsed and validated."""

    EMPTY_BUFFER = auto()
    """Buffer is empty, no data to parse."""

    INCOMPLETE_FRAME = auto()
    """Buffer contains partial frame data, more bytes needed."""

    INVALID_CHECKSUM = auto()
    """Checksum or CRC validation failed (data corruption)."""

    INVALID_FORMAT = auto()
    """Frame markers, header or length are malformed."""

    UNKNOWN_MESSAGE = auto()
    """Bytes do not match any known message shape."""


@dataclass(frozen=True)
class Frame:
    """
    A single validated protocol unit.

    Attributes:
        kind: Message type (Sony), message id (Samsung) or message kind
            (Apple).
        payload: Message payload.
        sequence: Sequence byte where the format has one, else None.
        raw: The wire bytes the frame was decoded from.
    """

    kind: int
    payload: bytes
    sequence: int | None = None
    raw: bytes = field(default=b"", compare=False)

    def __repr__(self) -> str:
        seq = f", seq={self.sequence}" if self.sequence is not None else ""
        return f"Frame(kind=0x{self.kind:02X}{seq}, payload={self.payload.hex(' ')})"


@dataclass(frozen=True)
class FrameParseError:
    """
    Details about a span that failed validation.

    Attributes:
        result: The parse result code.
        message: Human-readable description.
        data: The offending bytes.
        expected: Computed checksum/CRC, if relevant.
        received: Checksum/CRC found in the frame, if relevant.
    """

    result: FrameParseResult
    message: str
    data: bytes = b""
    expected: int | None = None
    received: int | None = None

    def to_exception(self) -> ProtocolError:
        """Convert to the matching exception type."""
        if self.result is FrameParseResult.INVALID_CHECKSUM:
            return ChecksumError(self.message, expected=self.expected, received=self.received)
        return FrameError(self.message, data=self.data)


InvalidFrameHook = Callable[[FrameParseError], None]


class FrameCodec(ABC):
    """
    Abstract base class for vendor frame codecs.

    Subclasses own the reassembly buffer: bytes that do not yet form a
    complete frame stay buffered across feed() calls and are never
    dropped silently.

    Attributes:
        vendor: Short vendor name used in log messages.
        dropped: Number of spans rejected since construction.
    """

    vendor: ClassVar[str] = "generic"

    def __init__(self, on_invalid: InvalidFrameHook | None = None) -> None:
        """
        Initialize the codec.

        Args:
            on_invalid: Optional hook called with every rejected span.
        """
        self._buffer = bytearray()
        self._on_invalid = on_invalid
        self.dropped = 0

    @property
    def buffered(self) -> bytes:
        """Unconsumed bytes waiting for the rest of a frame."""
        return bytes(self._buffer)

    def reset(self) -> None:
        """Discard any partially received frame."""
        self._buffer.clear()

    @abstractmethod
    def feed(self, chunk: bytes) -> list[Frame]:
        """
        Add a chunk of received bytes and extract complete frames.

        Args:
            chunk: Bytes as delivered by the transport.

        Returns:
            Validated frames in arrival order (possibly empty).
        """
        ...

    @abstractmethod
    def encode(self, kind: int, payload: bytes = b"") -> bytes:
        """
        Serialize an outbound message into wire bytes.

        Args:
            kind: Message type, id or kind.
            payload: Message payload.

        Returns:
            Complete wire frame.
        """
        ...

    def _report(self, error: FrameParseError) -> None:
        self.dropped += 1
        logger.warning(
            "Dropping invalid %s frame (%s): %s [%s]",
            self.vendor,
            error.result.name,
            error.message,
            error.data.hex(" "),
        )
        if self._on_invalid is not None:
            self._on_invalid(error)
