"""
budslink - async protocol engine for wireless earbuds.

Speaks the Sony MDR (V1 and V2), Samsung Galaxy Buds and Apple AAP
protocols over one RFCOMM byte stream: frames and checksums the wire
bytes, runs each vendor's handshake, decodes notifications into device
state and delivers changes through typed callbacks.

Example:
    >>> from budslink import DeviceCallbacks, DeviceLink, create_default_registry
    >>> from budslink.transport import AsyncSerialTransport
    >>> from budslink.protocol.samsung_constants import NoiseControlMode
    >>>
    >>> async def main():
    ...     caps = create_default_registry().get("Galaxy Buds 2 Pro")
    ...     callbacks = DeviceCallbacks(update_anc_mode=print)
    ...     async with DeviceLink(AsyncSerialTransport("/dev/rfcomm0"), caps, callbacks) as link:
    ...         await link.wait_ready()
    ...         link.session.set_anc_mode(NoiseControlMode.ADAPTIVE)
"""

from budslink.callbacks import DeviceCallbacks
from budslink.capabilities import CapabilityRegistry, create_default_registry
from budslink.config import DEFAULT_SESSION_CONFIG, SessionConfig
from budslink.exceptions import (
    BudsLinkError,
    ChecksumError,
    ConnectionError,
    FrameError,
    HandshakeError,
    ProtocolError,
    TimeoutError,
    TransportError,
    UnknownModelError,
)
from budslink.link import DeviceLink
from budslink.models import (
    AppleCapabilities,
    BatteryCell,
    BatteryStatus,
    SamsungCapabilities,
    SonyCapabilities,
    Vendor,
)
from budslink.sessions import (
    AppleSession,
    SamsungSession,
    Session,
    SessionState,
    SonySession,
    create_session,
)
from budslink.transport import AbstractTransport, AsyncSerialTransport, AsyncSocketTransport

__version__ = "0.1.0"
__all__ = [
    # Link and sessions
    "DeviceLink",
    "Session",
    "SessionState",
    "SonySession",
    "SamsungSession",
    "AppleSession",
    "create_session",
    "DeviceCallbacks",
    # Configuration
    "SessionConfig",
    "DEFAULT_SESSION_CONFIG",
    # Capabilities
    "CapabilityRegistry",
    "create_default_registry",
    "Vendor",
    "SonyCapabilities",
    "SamsungCapabilities",
    "AppleCapabilities",
    "BatteryCell",
    "BatteryStatus",
    # Exceptions
    "BudsLinkError",
    "ProtocolError",
    "ChecksumError",
    "FrameError",
    "TimeoutError",
    "ConnectionError",
    "HandshakeError",
    "TransportError",
    "UnknownModelError",
    # Transport
    "AbstractTransport",
    "AsyncSerialTransport",
    "AsyncSocketTransport",
    # Version
    "__version__",
]
