"""
Protocol sessions: one handshake state machine per vendor.

Use create_session() to pick the implementation from a capability record.
"""

from budslink.sessions.apple import AppleSession
from budslink.sessions.base import SendFunction, Session, SessionState
from budslink.sessions.delivery import QueuedMessage, ReliableDeliveryQueue, ResponseWaiter
from budslink.sessions.factory import create_session
from budslink.sessions.samsung import SamsungSession
from budslink.sessions.sony import SonySession

__all__ = [
    "Session",
    "SessionState",
    "SendFunction",
    "SonySession",
    "SamsungSession",
    "AppleSession",
    "create_session",
    "ReliableDeliveryQueue",
    "QueuedMessage",
    "ResponseWaiter",
]
