"""
Byte transports for the RFCOMM stream.

Available transports:
- AsyncSerialTransport: RFCOMM TTY using pyserial-asyncio
- AsyncSocketTransport: socket handed over by the Bluetooth stack
- MockTransport: Mock transport for testing without hardware

Testing Example:
    >>> from budslink.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.add_response(bytes.fromhex("01000400"))  # AAP handshake ack
"""

from budslink.transport.abc import AbstractTransport
from budslink.transport.mock import MockTransport
from budslink.transport.serial_async import AsyncSerialTransport
from budslink.transport.socket import AsyncSocketTransport

__all__ = [
    "AbstractTransport",
    "AsyncSerialTransport",
    "AsyncSocketTransport",
    "MockTransport",
]
