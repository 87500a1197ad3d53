"""
Abstract byte transport.

A transport is one full-duplex byte stream to the earbuds, normally an
RFCOMM channel exposed as a TTY (``/dev/rfcommN``) or as a socket the
platform's Bluetooth stack hands over.

The transport layer is responsible for:
- Opening/closing the connection
- Reading whatever bytes have arrived, in chunks of arbitrary size
- Writing complete frames
- Reporting closure (``read`` returns ``b""``)

Framing is not the transport's concern; the session's codec reassembles
frames from the chunks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType


class AbstractTransport(ABC):
    """
    Abstract base class for byte transports.

    Transports support the async context manager protocol:

        async with AsyncSerialTransport("/dev/rfcomm0") as transport:
            await transport.write(frame)
            chunk = await transport.read(1024)

    Attributes:
        is_open: Whether the transport is currently open.
        name: Identifier for the transport (TTY path, peer address).
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """
        Check if the transport is currently open.

        Returns:
            True if connected and ready for I/O, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Transport identifier, e.g. "/dev/rfcomm0"."""
        ...

    @abstractmethod
    async def open(self) -> None:
        """
        Open the transport.

        Raises:
            TransportError: If the connection cannot be established.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Close the transport.

        Safe to call multiple times.
        """
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write bytes to the transport.

        Args:
            data: A complete wire frame.

        Raises:
            TransportError: If the transport is not open or the write fails.
        """
        ...

    @abstractmethod
    async def read(self, max_size: int) -> bytes:
        """
        Read the next chunk of received bytes.

        Waits until at least one byte is available.

        Args:
            max_size: Maximum number of bytes to return.

        Returns:
            Between 1 and ``max_size`` bytes, or ``b""`` once the remote
            end has closed the stream.

        Raises:
            TransportError: If the transport is not open or the read fails.
        """
        ...

    async def __aenter__(self) -> AbstractTransport:
        """Async context manager entry - opens the transport."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes the transport."""
        await self.close()
