"""
Protocol session base class.

A session owns one device connection's protocol state: the frame codec,
the decoded device state and the handshake state machine. It is driven
from outside through three entry points:

    start()          send the opening message
    on_data(chunk)   bytes received from the transport
    on_close()       the transport went away

and writes through the ``send`` callable it was constructed with. All
timers go through a Scheduler so every session can run on a virtual
clock in tests.

State machine:
    CONNECTING -> HANDSHAKE_SENT -> FEATURES_NEGOTIATED
        -> AWAITING_INITIAL_STATE -> STEADY
    any state -> CLOSED (transport closure, handshake failure, close())
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Callable, ClassVar, Generic, TypeVar

from budslink.callbacks import DeviceCallbacks
from budslink.config import DEFAULT_SESSION_CONFIG, SessionConfig
from budslink.exceptions import ConnectionError
from budslink.models.capabilities import CapabilityRecord
from budslink.models.events import DeviceEvent
from budslink.models.state import DeviceState
from budslink.protocol.frames import Frame, FrameCodec
from budslink.scheduling import AsyncioScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=CapabilityRecord)
S = TypeVar("S", bound=DeviceState)

SendFunction = Callable[[bytes], None]


class SessionState(Enum):
    """Protocol session states."""

    CONNECTING = auto()
    """Created, nothing sent yet."""

    HANDSHAKE_SENT = auto()
    """Opening message sent, waiting for the device to answer."""

    FEATURES_NEGOTIATED = auto()
    """Device answered; negotiating optional features."""

    AWAITING_INITIAL_STATE = auto()
    """Initial state requests sent."""

    STEADY = auto()
    """Handshake complete; notifications and commands flow freely."""

    CLOSED = auto()
    """Transport closed or handshake failed. Terminal."""


class Session(ABC, Generic[C, S]):
    """
    Abstract base class for vendor protocol sessions.

    Attributes:
        vendor: Short vendor name used in log messages.
    """

    vendor: ClassVar[str] = "generic"

    def __init__(
        self,
        capabilities: C,
        send: SendFunction,
        callbacks: DeviceCallbacks | None = None,
        scheduler: Scheduler | None = None,
        config: SessionConfig = DEFAULT_SESSION_CONFIG,
    ) -> None:
        """
        Initialize the session.

        Args:
            capabilities: Capability record of the connected model.
            send: Called with every outbound wire frame.
            callbacks: Event sink. Defaults to one with no callbacks set.
            scheduler: Timer source. Defaults to the running event loop.
            config: Timeouts and retry budgets.
        """
        self._caps = capabilities
        self._send = send
        self._callbacks = callbacks if callbacks is not None else DeviceCallbacks()
        self._scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._config = config
        self._state = SessionState.CONNECTING
        self._timers: list[TimerHandle] = []
        self._codec = self._create_codec()
        self._device_state = self._initial_state()

    # ===== Properties =====

    @property
    def state(self) -> SessionState:
        """Current state machine state."""
        return self._state

    @property
    def capabilities(self) -> C:
        return self._caps

    @property
    def device_state(self) -> S:
        """Latest decoded device state."""
        return self._device_state

    @property
    def codec(self) -> FrameCodec:
        return self._codec

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def is_closed(self) -> bool:
        return self._state is SessionState.CLOSED

    @property
    def is_ready(self) -> bool:
        """Whether the handshake has completed."""
        return self._state is SessionState.STEADY

    # ===== Entry points =====

    @abstractmethod
    def start(self) -> None:
        """
        Send the opening message of the handshake.

        Raises:
            ConnectionError: If the session was already started or closed.
        """
        ...

    def on_data(self, chunk: bytes) -> None:
        """
        Process bytes received from the transport.

        Args:
            chunk: Received bytes, any size.
        """
        if self.is_closed:
            logger.debug("Ignoring %d bytes received after close", len(chunk))
            return
        for frame in self._codec.feed(chunk):
            if self.is_closed:
                break
            self._handle_frame(frame)

    def on_close(self) -> None:
        """The transport closed. Tears down all timers and pending state."""
        if self.is_closed:
            return
        logger.info("%s transport closed in %s state", self.vendor, self._state.name)
        self._teardown()

    def close(self) -> None:
        """Close the session locally."""
        if self.is_closed:
            return
        logger.debug("Closing %s session", self.vendor)
        self._teardown()

    # ===== Subclass hooks =====

    @abstractmethod
    def _create_codec(self) -> FrameCodec:
        ...

    @abstractmethod
    def _initial_state(self) -> S:
        ...

    @abstractmethod
    def _handle_frame(self, frame: Frame) -> None:
        """Handle one validated inbound frame."""
        ...

    def _teardown(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        self._codec.reset()
        self._set_state(SessionState.CLOSED)

    # ===== Helpers =====

    def _require_new(self) -> None:
        if self._state is not SessionState.CONNECTING:
            raise ConnectionError(f"Cannot start: session is in {self._state.name} state")

    def _set_state(self, new_state: SessionState) -> None:
        if new_state is self._state:
            return
        old_state = self._state
        self._state = new_state
        logger.debug("%s session: %s -> %s", self.vendor, old_state.name, new_state.name)
        self._callbacks.notify_state_change(old_state, new_state)

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise ConnectionError(f"{self.vendor} session is closed")

    def _write(self, data: bytes) -> None:
        self._ensure_open()
        logger.debug("TX: %s", data.hex(" "))
        self._send(data)

    def _schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = self._scheduler.call_later(delay, callback)
        self._timers = [t for t in self._timers if not t.cancelled]
        self._timers.append(handle)
        return handle

    def _apply(self, new_state: S, events: list[DeviceEvent]) -> None:
        self._device_state = new_state
        self._callbacks.dispatch_all(events)

    def _emit(self, event: DeviceEvent) -> None:
        self._callbacks.dispatch(event)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(model={self._caps.model_id!r}, state={self._state.name})"
        )
