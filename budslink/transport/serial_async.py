"""
Async serial transport using pyserial-asyncio.

Used for RFCOMM channels bound to a TTY, e.g. after
``rfcomm bind /dev/rfcomm0 <address> <channel>``. The line settings are
ignored by the RFCOMM layer but pyserial still needs them.

Example:
    >>> transport = AsyncSerialTransport("/dev/rfcomm0")
    >>> async with transport:
    ...     await transport.write(frame)
    ...     chunk = await transport.read(1024)
"""

from __future__ import annotations

import asyncio
import logging

from budslink.exceptions import TransportError
from budslink.transport.abc import AbstractTransport

try:
    import serial
    import serial_asyncio

    SERIAL_AVAILABLE = True
except ImportError:
    SERIAL_AVAILABLE = False
    serial = None  # type: ignore[assignment]
    serial_asyncio = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

DEFAULT_BAUD_RATE = 115200


class AsyncSerialTransport(AbstractTransport):
    """
    Async serial transport using pyserial-asyncio.

    Attributes:
        name: TTY path (e.g., "/dev/rfcomm0").
        is_open: Whether the port is currently open.
    """

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUD_RATE) -> None:
        """
        Initialize the async serial transport.

        Args:
            port: TTY path (e.g., "/dev/rfcomm0").
            baudrate: Nominal baud rate.

        Raises:
            ImportError: If pyserial-asyncio is not installed.
        """
        if not SERIAL_AVAILABLE:
            raise ImportError(
                "pyserial-asyncio is required for serial transports. "
                "Install with: pip install budslink[serial]"
            )

        self._port = port
        self._baudrate = baudrate
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    @property
    def is_open(self) -> bool:
        return (
            self._writer is not None
            and not self._writer.is_closing()
            and self._reader is not None
        )

    @property
    def name(self) -> str:
        return self._port

    async def open(self) -> None:
        """
        Open the TTY.

        Raises:
            TransportError: If the port cannot be opened.
        """
        if self.is_open:
            return

        try:
            self._reader, self._writer = await serial_asyncio.open_serial_connection(
                url=self._port,
                baudrate=self._baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
        except serial.SerialException as e:
            raise TransportError(f"Failed to open serial port {self._port}: {e}") from e
        except OSError as e:
            raise TransportError(f"OS error opening {self._port}: {e}") from e
        logger.debug("Opened %s", self._port)

    async def close(self) -> None:
        if self._writer is not None:
            try:
                self._writer.close()
                await self._writer.wait_closed()
            except (OSError, serial.SerialException) as e:
                logger.debug("Error closing %s: %s", self._port, e)

        self._reader = None
        self._writer = None

    async def write(self, data: bytes) -> None:
        """
        Write a frame to the TTY.

        Raises:
            TransportError: If the port is not open or write fails.
        """
        if not self.is_open:
            raise TransportError("Serial port is not open")

        try:
            self._writer.write(data)  # type: ignore[union-attr]
            await self._writer.drain()  # type: ignore[union-attr]
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Write failed: {e}") from e

    async def read(self, max_size: int) -> bytes:
        """
        Read whatever has arrived, up to ``max_size`` bytes.

        Returns:
            The received bytes, or ``b""`` at end of stream.

        Raises:
            TransportError: If the port is not open or read fails.
        """
        if self._reader is None:
            raise TransportError("Serial port is not open")

        try:
            return await self._reader.read(max_size)
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Read failed: {e}") from e

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"AsyncSerialTransport({self._port!r}, baudrate={self._baudrate}, {status})"
