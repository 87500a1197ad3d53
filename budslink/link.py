"""
Device link: runs a protocol session over a byte transport.

The session itself never touches the transport. DeviceLink owns the two
tasks that connect them:

    reader  transport.read() -> session.on_data(), until EOF or error
    writer  session writes -> asyncio.Queue -> transport.write()

so the session's ``send`` never blocks and writes stay in order.

Example:
    >>> from budslink import DeviceCallbacks, DeviceLink, create_default_registry
    >>> from budslink.transport import AsyncSerialTransport
    >>>
    >>> async def main():
    ...     registry = create_default_registry()
    ...     callbacks = DeviceCallbacks(update_battery=print)
    ...     transport = AsyncSerialTransport("/dev/rfcomm0")
    ...     async with DeviceLink(transport, registry.get("WH-1000XM4"), callbacks) as link:
    ...         await link.wait_ready(timeout=10.0)
    ...         link.session.set_voice_notifications(False)
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import TYPE_CHECKING, Any

from budslink.callbacks import DeviceCallbacks
from budslink.config import DEFAULT_SESSION_CONFIG, SessionConfig
from budslink.exceptions import ConnectionError, TimeoutError, TransportError
from budslink.sessions import SessionState, create_session

if TYPE_CHECKING:
    from budslink.models.capabilities import CapabilityRecord
    from budslink.scheduling import Scheduler
    from budslink.sessions import Session
    from budslink.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)


class DeviceLink:
    """
    Connects one transport to one protocol session.

    Attributes:
        session: The protocol session; setters are called on it directly.
        transport: The underlying transport.
    """

    def __init__(
        self,
        transport: AbstractTransport,
        capabilities: CapabilityRecord,
        callbacks: DeviceCallbacks | None = None,
        scheduler: Scheduler | None = None,
        config: SessionConfig = DEFAULT_SESSION_CONFIG,
    ) -> None:
        """
        Initialize the link.

        Args:
            transport: Transport to the earbuds; opened by start() if needed.
            capabilities: Capability record of the connected model.
            callbacks: Event sink for decoded device state.
            scheduler: Timer source. Defaults to the running event loop.
            config: Timeouts, retry budgets and read size.
        """
        self._transport = transport
        self._config = config
        self._outbox: asyncio.Queue[bytes] = asyncio.Queue()
        self._reader_task: asyncio.Task[None] | None = None
        self._writer_task: asyncio.Task[None] | None = None
        self._ready = asyncio.Event()
        self._closed = asyncio.Event()

        user_callbacks = callbacks if callbacks is not None else DeviceCallbacks()
        self._user_state_change = user_callbacks.on_state_change
        self._session = create_session(
            capabilities,
            self._outbox.put_nowait,
            dataclasses.replace(user_callbacks, on_state_change=self._on_state_change),
            scheduler,
            config,
        )

    @property
    def session(self) -> Session:
        return self._session

    @property
    def transport(self) -> AbstractTransport:
        return self._transport

    @property
    def is_running(self) -> bool:
        """Whether the reader task is alive."""
        return self._reader_task is not None and not self._reader_task.done()

    async def start(self) -> None:
        """
        Open the transport, start the I/O tasks and begin the handshake.

        Raises:
            ConnectionError: If the link was already started.
            TransportError: If the transport cannot be opened.
        """
        if self._reader_task is not None:
            raise ConnectionError(
                f"Cannot start: link is in {self._session.state.name} state"
            )

        if not self._transport.is_open:
            logger.debug("Opening transport %s", self._transport.name)
            await self._transport.open()

        self._reader_task = asyncio.create_task(self._read_loop())
        self._writer_task = asyncio.create_task(self._write_loop())
        self._session.start()

    async def wait_ready(self, timeout: float | None = None) -> None:
        """
        Wait until the handshake completes.

        Args:
            timeout: Seconds to wait; None waits indefinitely.

        Raises:
            HandshakeError: If the handshake failed.
            ConnectionError: If the link closed before becoming ready.
            TimeoutError: If the timeout expires first.
        """
        ready = asyncio.ensure_future(self._ready.wait())
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait(
                {ready, closed}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            ready.cancel()
            closed.cancel()

        if self._ready.is_set():
            return
        if self._closed.is_set():
            failure = getattr(self._session, "failure", None)
            if failure is not None:
                raise failure
            raise ConnectionError("Link closed before the handshake completed")
        raise TimeoutError("Handshake did not complete", timeout_seconds=timeout)

    async def close(self) -> None:
        """
        Stop the session and the I/O tasks, then close the transport.

        Safe to call multiple times.
        """
        self._session.close()
        for task in (self._reader_task, self._writer_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        if self._transport.is_open:
            await self._transport.close()
        self._closed.set()

    # ===== Tasks =====

    async def _read_loop(self) -> None:
        try:
            while True:
                chunk = await self._transport.read(self._config.read_chunk_size)
                if not chunk:
                    logger.info("%s closed by remote end", self._transport.name)
                    break
                logger.debug("RX chunk: %s", chunk.hex(" "))
                self._session.on_data(chunk)
        except TransportError as e:
            logger.warning("Read from %s failed: %s", self._transport.name, e)
        finally:
            self._session.on_close()
            self._closed.set()

    async def _write_loop(self) -> None:
        while True:
            data = await self._outbox.get()
            try:
                await self._transport.write(data)
            except TransportError as e:
                logger.warning("Write to %s failed: %s", self._transport.name, e)
                self._session.on_close()
                self._closed.set()
                return

    def _on_state_change(self, old: SessionState, new: SessionState) -> Any:
        if new is SessionState.STEADY:
            self._ready.set()
        elif new is SessionState.CLOSED:
            self._closed.set()
        if self._user_state_change is not None:
            return self._user_state_change(old, new)
        return None

    # ===== Context manager =====

    async def __aenter__(self) -> DeviceLink:
        """Async context manager entry - starts the link."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - closes session and transport."""
        await self.close()

    def __repr__(self) -> str:
        return f"DeviceLink({self._transport.name!r}, session={self._session!r})"
