"""
Reliable delivery for Sony MDR messages.

Sony devices process one command at a time and acknowledge each one.
ReliableDeliveryQueue keeps at most one message in flight:

1. The head message is encoded once, with the next sequence bit, and
   sent.
2. A timer starts. If the message's tag is acknowledged first, the timer
   is cancelled and the next message goes out.
3. On timeout the identical bytes are sent again while retries remain.
   Once they are exhausted the message is dropped, on_exhausted is
   called, and the queue advances.

ResponseWaiter covers the handshake steps that wait for one specific
reply, independently of the queue: send, wait, resend up to a bounded
number of attempts, then fail.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable

from budslink.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

EncodeFunction = Callable[[int, bytes, int], bytes]
"""(kind, payload, sequence) -> wire bytes"""


@dataclass
class QueuedMessage:
    """
    A message waiting in, or in flight from, the delivery queue.

    Attributes:
        tag: Logical tag that completes the message.
        kind: Message type.
        payload: Message payload.
        retries_remaining: Retransmissions still allowed.
        encoded: Wire bytes, fixed at first transmission.
        attempts: Transmissions so far.
    """

    tag: str
    kind: int
    payload: bytes
    retries_remaining: int
    encoded: bytes | None = None
    attempts: int = 0


class ReliableDeliveryQueue:
    """
    FIFO of messages delivered one at a time with ACK and retry.

    Example:
        >>> from budslink.scheduling import VirtualScheduler
        >>> sent = []
        >>> queue = ReliableDeliveryQueue(
        ...     sent.append, VirtualScheduler(), 1.0,
        ...     encode=lambda kind, payload, seq: bytes([kind, seq]) + payload,
        ... )
        >>> queue.enqueue("ack", 0x0C, b"\\x10", retries=0)
        >>> queue.enqueue("ack", 0x0C, b"\\x11", retries=0)
        >>> sent
        [b'\\x0c\\x00\\x10']
        >>> queue.acknowledge("ack")
        True
        >>> sent[-1]
        b'\\x0c\\x01\\x11'
    """

    def __init__(
        self,
        send: Callable[[bytes], None],
        scheduler: Scheduler,
        timeout: float,
        on_exhausted: Callable[[QueuedMessage], None] | None = None,
        *,
        encode: EncodeFunction,
    ) -> None:
        """
        Initialize the queue.

        Args:
            send: Called with the wire bytes of every transmission.
            scheduler: Timer source for the acknowledgement timeout.
            timeout: Seconds to wait for each acknowledgement.
            on_exhausted: Called with a message dropped after its last
                retry.
            encode: Serializes (kind, payload, sequence) to wire bytes.
        """
        self._send = send
        self._scheduler = scheduler
        self._timeout = timeout
        self._on_exhausted = on_exhausted
        self._encode = encode
        self._pending: deque[QueuedMessage] = deque()
        self._in_flight: QueuedMessage | None = None
        self._timer: TimerHandle | None = None
        self._sequence = 0
        self._closed = False

    @property
    def pending(self) -> list[QueuedMessage]:
        """Messages waiting behind the one in flight."""
        return list(self._pending)

    @property
    def in_flight(self) -> QueuedMessage | None:
        return self._in_flight

    @property
    def next_sequence(self) -> int:
        """Sequence bit the next new message will carry."""
        return self._sequence

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._pending) + (1 if self._in_flight is not None else 0)

    def enqueue(self, tag: str, kind: int, payload: bytes, retries: int = 0) -> None:
        """
        Append a message; it is sent at once if nothing is in flight.

        Args:
            tag: Tag whose acknowledgement completes the message.
            kind: Message type.
            payload: Message payload.
            retries: Retransmissions allowed after the first send.
        """
        if self._closed:
            logger.debug("Queue closed, dropping %s message", tag)
            return
        self._pending.append(QueuedMessage(tag, kind, bytes(payload), retries))
        if self._in_flight is None:
            self._advance()

    def acknowledge(self, tag: str) -> bool:
        """
        Complete the in-flight message if its tag matches.

        Args:
            tag: Tag derived from the inbound frame.

        Returns:
            True if the in-flight message was completed.
        """
        message = self._in_flight
        if self._closed or message is None or message.tag != tag:
            return False
        logger.debug("'%s' acknowledged after %d attempt(s)", tag, message.attempts)
        self._cancel_timer()
        self._in_flight = None
        self._advance()
        return True

    def close(self) -> None:
        """Cancel the timer and discard every message. The queue stays inert."""
        self._cancel_timer()
        self._pending.clear()
        self._in_flight = None
        self._closed = True

    def _advance(self) -> None:
        if self._closed or not self._pending:
            return
        message = self._pending.popleft()
        message.encoded = self._encode(message.kind, message.payload, self._sequence)
        self._sequence = 1 - self._sequence
        self._in_flight = message
        self._transmit(message)

    def _transmit(self, message: QueuedMessage) -> None:
        message.attempts += 1
        self._timer = self._scheduler.call_later(self._timeout, self._on_timeout)
        self._send(message.encoded)  # type: ignore[arg-type]

    def _on_timeout(self) -> None:
        self._timer = None
        message = self._in_flight
        if self._closed or message is None:
            return

        if message.retries_remaining > 0:
            message.retries_remaining -= 1
            total = message.attempts + message.retries_remaining + 1
            logger.warning(
                "No acknowledgement for '%s', resending (attempt %d/%d)",
                message.tag,
                message.attempts + 1,
                total,
            )
            self._transmit(message)
            return

        logger.warning(
            "No acknowledgement for '%s' after %d attempt(s), dropping",
            message.tag,
            message.attempts,
        )
        self._in_flight = None
        if self._on_exhausted is not None:
            self._on_exhausted(message)
        self._advance()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class ResponseWaiter:
    """
    Wait for one specific reply with bounded resends.

    The first attempt sends immediately. Each attempt waits ``timeout``
    seconds; after ``attempts`` unanswered attempts on_failure is called.

    Example:
        >>> from budslink.scheduling import VirtualScheduler
        >>> scheduler = VirtualScheduler()
        >>> done = []
        >>> waiter = ResponseWaiter(
        ...     "supportInfo", lambda: None, scheduler, timeout=5.0, attempts=3,
        ...     on_success=lambda: done.append("ok"), on_failure=lambda: done.append("fail"),
        ... )
        >>> waiter.start()
        >>> scheduler.advance(5.0)
        >>> waiter.resolve("supportInfo")
        True
        >>> done
        ['ok']
    """

    def __init__(
        self,
        tag: str,
        resend: Callable[[], None],
        scheduler: Scheduler,
        timeout: float,
        attempts: int,
        on_success: Callable[[], None],
        on_failure: Callable[[], None],
    ) -> None:
        self.tag = tag
        self._resend = resend
        self._scheduler = scheduler
        self._timeout = timeout
        self._max_attempts = attempts
        self._on_success = on_success
        self._on_failure = on_failure
        self._attempt = 0
        self._timer: TimerHandle | None = None
        self._done = False

    @property
    def attempt(self) -> int:
        """Attempts made so far."""
        return self._attempt

    @property
    def done(self) -> bool:
        return self._done

    def start(self) -> None:
        self._next_attempt()

    def resolve(self, tag: str) -> bool:
        """
        Offer an inbound tag.

        Returns:
            True if it was the awaited reply.
        """
        if self._done or tag != self.tag:
            return False
        logger.debug("'%s' received on attempt %d", self.tag, self._attempt)
        self._finish()
        self._on_success()
        return True

    def cancel(self) -> None:
        self._finish()

    def _finish(self) -> None:
        self._done = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _next_attempt(self) -> None:
        if self._done:
            return
        if self._attempt >= self._max_attempts:
            logger.error("No '%s' after %d attempt(s)", self.tag, self._attempt)
            self._finish()
            self._on_failure()
            return

        self._attempt += 1
        if self._attempt > 1:
            logger.warning(
                "Waiting for '%s' (attempt %d/%d)", self.tag, self._attempt, self._max_attempts
            )
        self._timer = self._scheduler.call_later(self._timeout, self._on_timeout)
        self._resend()

    def _on_timeout(self) -> None:
        self._timer = None
        self._next_attempt()
