"""
Async transport over an already connected socket.

Desktop Bluetooth stacks (BlueZ profile handlers, for instance) connect
the RFCOMM channel themselves and hand the application a socket or a
file descriptor. This transport wraps it in asyncio streams.

Example:
    >>> sock = socket.socket(fileno=fd)
    >>> async with AsyncSocketTransport(sock) as transport:
    ...     chunk = await transport.read(1024)
"""

from __future__ import annotations

import asyncio
import logging
import socket

from budslink.exceptions import TransportError
from budslink.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)


class AsyncSocketTransport(AbstractTransport):
    """
    Transport over a connected stream socket.

    The transport takes ownership of the socket and closes it on close().
    """

    def __init__(self, sock: socket.socket, name: str | None = None) -> None:
        """
        Initialize the socket transport.

        Args:
            sock: Connected stream socket (RFCOMM, TCP, or one end of a
                socketpair in tests).
            name: Identifier for logs. Defaults to the peer address.
        """
        self._sock = sock
        self._name = name
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    @property
    def is_open(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    @property
    def name(self) -> str:
        if self._name is not None:
            return self._name
        try:
            return str(self._sock.getpeername())
        except OSError:
            return f"fd:{self._sock.fileno()}"

    async def open(self) -> None:
        """
        Attach asyncio streams to the socket.

        Raises:
            TransportError: If the socket cannot be used.
        """
        if self.is_open:
            return
        try:
            self._reader, self._writer = await asyncio.open_connection(sock=self._sock)
        except OSError as e:
            raise TransportError(f"Cannot use socket {self.name}: {e}") from e
        logger.debug("Opened socket transport %s", self.name)

    async def close(self) -> None:
        if self._writer is not None:
            try:
                self._writer.close()
                await self._writer.wait_closed()
            except OSError as e:
                logger.debug("Error closing socket %s: %s", self._name, e)
        else:
            self._sock.close()
        self._reader = None
        self._writer = None

    async def write(self, data: bytes) -> None:
        """
        Write a frame to the socket.

        Raises:
            TransportError: If the transport is not open or write fails.
        """
        if not self.is_open:
            raise TransportError("Socket transport is not open")
        try:
            self._writer.write(data)  # type: ignore[union-attr]
            await self._writer.drain()  # type: ignore[union-attr]
        except OSError as e:
            raise TransportError(f"Write failed: {e}") from e

    async def read(self, max_size: int) -> bytes:
        """
        Read whatever has arrived, up to ``max_size`` bytes.

        Returns:
            The received bytes, or ``b""`` at end of stream.

        Raises:
            TransportError: If the transport is not open or read fails.
        """
        if self._reader is None:
            raise TransportError("Socket transport is not open")
        try:
            return await self._reader.read(max_size)
        except OSError as e:
            raise TransportError(f"Read failed: {e}") from e

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"AsyncSocketTransport({self.name!r}, {status})"
