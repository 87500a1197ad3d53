"""
Mock transport for testing.

Inbound bytes are queued with add_response() or produced by a callback
that sees every write, so a test can play the device side of a
conversation without hardware.

Example:
    >>> from budslink.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.set_response_callback(lambda data: bytes.fromhex("01000400"))
    >>>
    >>> async with mock:
    ...     await mock.write(b"hello")
    ...     assert await mock.read(1024) == bytes.fromhex("01000400")
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable

from budslink.exceptions import TransportError
from budslink.transport.abc import AbstractTransport


class MockTransport(AbstractTransport):
    """
    Mock transport for testing without hardware.

    Records every write for verification. Reads return queued chunks in
    FIFO order and wait while none are queued, like a real stream.

    Attributes:
        written_data: List of all bytes written to the transport.
    """

    def __init__(self, name: str = "mock://buds") -> None:
        """
        Initialize the mock transport.

        Args:
            name: Identifier for the mock transport.
        """
        self._name = name
        self._is_open = False
        self._eof = False
        self._chunks: deque[bytes] = deque()
        self._data_ready = asyncio.Event()
        self._written_data: list[bytes] = []
        self._response_callback: Callable[[bytes], bytes | None] | None = None

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def name(self) -> str:
        return self._name

    @property
    def written_data(self) -> list[bytes]:
        """Get all data written to the transport."""
        return self._written_data.copy()

    @property
    def last_written(self) -> bytes | None:
        """Get the most recently written data."""
        return self._written_data[-1] if self._written_data else None

    def add_response(self, response: bytes) -> None:
        """
        Queue a chunk for the next read.

        Args:
            response: Bytes the device "sends".
        """
        self._chunks.append(bytes(response))
        self._data_ready.set()

    def add_responses(self, *responses: bytes) -> None:
        for response in responses:
            self.add_response(response)

    def set_response_callback(
        self,
        callback: Callable[[bytes], bytes | None] | None,
    ) -> None:
        """
        Set a callback to dynamically generate responses.

        The callback receives each written frame and returns the bytes to
        queue in reply, or None for no reply.

        Args:
            callback: Function that takes written bytes and returns response.
        """
        self._response_callback = callback

    def feed_eof(self) -> None:
        """Simulate the remote end closing the stream."""
        self._eof = True
        self._data_ready.set()

    def clear(self) -> None:
        """Clear all written data and pending responses."""
        self._written_data.clear()
        self._chunks.clear()
        self._data_ready.clear()

    def clear_written(self) -> None:
        """Clear only the written data history."""
        self._written_data.clear()

    async def open(self) -> None:
        if self._is_open:
            raise TransportError("Mock transport already open")
        self._is_open = True
        self._eof = False

    async def close(self) -> None:
        self._is_open = False
        self._data_ready.set()

    async def write(self, data: bytes) -> None:
        """
        Record written data and trigger the response callback.

        Raises:
            TransportError: If transport is not open.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")

        self._written_data.append(bytes(data))

        if self._response_callback:
            response = self._response_callback(bytes(data))
            if response:
                self.add_response(response)

    async def read(self, max_size: int) -> bytes:
        """
        Return the next queued chunk, waiting for one if necessary.

        Chunks longer than ``max_size`` are split across reads.

        Raises:
            TransportError: If transport is not open.
        """
        while True:
            if not self._is_open:
                raise TransportError("Mock transport not open")
            if self._chunks:
                chunk = self._chunks.popleft()
                if len(chunk) > max_size:
                    self._chunks.appendleft(chunk[max_size:])
                    chunk = chunk[:max_size]
                return chunk
            if self._eof:
                return b""
            self._data_ready.clear()
            await self._data_ready.wait()

    def assert_written(self, expected: bytes, index: int = -1) -> None:
        """
        Assert that specific data was written.

        Args:
            expected: Expected bytes.
            index: Index in written_data list (-1 for last).

        Raises:
            AssertionError: If data doesn't match.
        """
        if not self._written_data:
            raise AssertionError("No data written to mock transport")

        actual = self._written_data[index]
        if actual != expected:
            raise AssertionError(
                f"Written data mismatch: expected {expected.hex(' ')}, got {actual.hex(' ')}"
            )

    def assert_write_count(self, expected: int) -> None:
        actual = len(self._written_data)
        if actual != expected:
            raise AssertionError(f"Write count mismatch: expected {expected}, got {actual}")
