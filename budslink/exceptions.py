"""
Exception hierarchy for budslink.

All exceptions inherit from BudsLinkError. The design follows these
principles:

1. Malformed wire data never raises out of a codec; frame errors are
   reported through FrameParseResult and the log, and the exception types
   below carry the details when a caller asks for them explicitly
2. Connection-level failures (handshake, transport) are distinct from
   protocol violations
3. Nothing raised here crosses the callback boundary to the device layer
"""

from __future__ import annotations


class BudsLinkError(Exception):
    """
    Base exception for all budslink errors.

    Allows callers to catch every library-specific error with a single
    except clause.
    """

    pass


class ProtocolError(BudsLinkError):
    """
    Protocol-level error.

    Raised when an outbound message cannot be represented on the wire,
    such as a sequence number outside 0/1 or a payload that does not fit
    the length field.
    """

    pass


class ChecksumError(ProtocolError):
    """
    Checksum or CRC validation failure.

    Carries the value computed locally and the value found in the frame.
    """

    def __init__(
        self,
        message: str = "Checksum validation failed",
        *,
        expected: int | None = None,
        received: int | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.received = received

    def __str__(self) -> str:
        base = super().__str__()
        if self.expected is not None and self.received is not None:
            return f"{base} (expected 0x{self.expected:02X}, got 0x{self.received:02X})"
        return base


class FrameError(ProtocolError):
    """
    Frame structure error.

    Raised for truncated frames, bad start/end markers, or length fields
    that disagree with the bytes available.
    """

    def __init__(
        self,
        message: str,
        *,
        data: bytes | None = None,
    ) -> None:
        super().__init__(message)
        self.data = data

    def __str__(self) -> str:
        base = super().__str__()
        if self.data:
            preview = self.data[:32].hex(" ")
            if len(self.data) > 32:
                preview += " ..."
            return f"{base} [{preview}]"
        return base


class TimeoutError(BudsLinkError):  # noqa: A001 - intentionally shadows builtin
    """
    A message or response was not acknowledged in time.
    """

    def __init__(
        self,
        message: str = "Communication timeout",
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        base = super().__str__()
        if self.timeout_seconds is not None:
            return f"{base} (after {self.timeout_seconds:.2f}s)"
        return base


class ConnectionError(BudsLinkError):  # noqa: A001 - intentionally shadows builtin
    """
    Device connection error.

    Raised when:
    - The session is used after it was closed
    - The link cannot be started
    """

    pass


class HandshakeError(ConnectionError):
    """
    The connect-time handshake could not be completed.

    Without a completed handshake no further communication is possible,
    so the session is torn down.
    """

    def __init__(
        self,
        message: str = "Handshake failed",
        *,
        stage: str | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.attempts = attempts

    def __str__(self) -> str:
        base = super().__str__()
        details = []
        if self.stage:
            details.append(f"stage={self.stage}")
        if self.attempts is not None:
            details.append(f"attempts={self.attempts}")
        if details:
            return f"{base} ({', '.join(details)})"
        return base


class TransportError(BudsLinkError):
    """
    Transport layer error.

    Raised for low-level byte stream failures such as writing to a closed
    channel or a socket/TTY error.
    """

    pass


class UnknownModelError(BudsLinkError):
    """
    No capability record is registered for a model identifier.
    """

    def __init__(self, model: object) -> None:
        super().__init__(f"No capability record registered for model {model!r}")
        self.model = model
