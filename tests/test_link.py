"""Tests for DeviceLink."""

import asyncio

import pytest

from budslink import DeviceCallbacks, DeviceLink, SessionConfig, SessionState
from budslink.capabilities.apple import AIRPODS_PRO_2
from budslink.capabilities.samsung import GALAXY_BUDS3_PRO
from budslink.exceptions import ConnectionError, HandshakeError, TimeoutError
from budslink.models.capabilities import SonyCapabilities
from budslink.protocol.apple_constants import ApplePackets
from budslink.protocol.sony_codec import SonyFrameCodec
from budslink.protocol.sony_constants import MessageType, ProtocolRevision
from budslink.transport.mock import MockTransport

SAMSUNG_STATUS_REQUEST = bytes.fromhex("fd 03 00 60 a6 6c dd")
SAMSUNG_STATUS = bytes.fromhex("FD 0B 08 60 01 64 63 01 01 33 57 04 6E CB DD")
SONY_INIT = bytes.fromhex("3e 0c 00 00 00 00 02 00 00 0e 3c")

TEST_SONY = SonyCapabilities(
    model_id="TEST",
    revision=ProtocolRevision.V1,
    battery_single=True,
    device_info=False,
)

SONY_REPLIES = {
    b"\x00\x00": bytes([0x01, 0x00, 0x02, 0x00]),
    b"\x06\x00": bytes([0x07, 0x00, 0x01, 0x62]),
    b"\x10\x00": bytes([0x11, 0x00, 0x50, 0x00]),
}


def sony_device(data):
    """Answer Sony requests the way a headset would."""
    if len(data) < 10 or data[1] != MessageType.COMMAND_1:
        return None
    reply = SONY_REPLIES.get(data[7:9])
    if reply is None:
        return None
    return SonyFrameCodec().encode(MessageType.COMMAND_1, reply)


class TestDeviceLink:
    """Tests for DeviceLink class."""

    @pytest.fixture
    def mock_transport(self):
        """Create a MockTransport instance."""
        return MockTransport()

    @pytest.mark.asyncio
    async def test_samsung_ready(self, mock_transport):
        """Test a Samsung handshake over the mock transport."""
        batteries = []
        mock_transport.set_response_callback(
            lambda data: SAMSUNG_STATUS if data == SAMSUNG_STATUS_REQUEST else None
        )
        link = DeviceLink(
            mock_transport, GALAXY_BUDS3_PRO, DeviceCallbacks(update_battery=batteries.append)
        )

        await link.start()
        await link.wait_ready(timeout=1.0)

        assert link.session.state is SessionState.STEADY
        assert link.is_running
        mock_transport.assert_written(SAMSUNG_STATUS_REQUEST, index=0)
        assert batteries[0][1].level == 100
        await link.close()

    @pytest.mark.asyncio
    async def test_sony_ready(self, mock_transport):
        """Test a Sony handshake, including acknowledgements, over the mock transport."""
        mock_transport.set_response_callback(sony_device)
        link = DeviceLink(mock_transport, TEST_SONY)

        async with link:
            await link.wait_ready(timeout=1.0)
            await asyncio.sleep(0.01)
            assert link.session.device_state.support_functions == frozenset({0x62})
            acks = [data for data in mock_transport.written_data if data[1] == MessageType.ACK]
            assert len(acks) == 3

        assert not mock_transport.is_open

    @pytest.mark.asyncio
    async def test_apple_ready(self, mock_transport):
        """Test an AirPods handshake over the mock transport."""
        mock_transport.set_response_callback(
            lambda data: ApplePackets.HANDSHAKE_ACK if data == ApplePackets.HANDSHAKE else None
        )
        link = DeviceLink(mock_transport, AIRPODS_PRO_2, config=SessionConfig(settle_delay=0.01))

        async with link:
            await link.wait_ready(timeout=1.0)
            await asyncio.sleep(0.01)
            mock_transport.assert_written(ApplePackets.REQUEST_NOTIFICATIONS)

    @pytest.mark.asyncio
    async def test_state_changes_forwarded(self, mock_transport):
        """Test that the user's state change callback still fires."""
        states = []
        mock_transport.set_response_callback(
            lambda data: SAMSUNG_STATUS if data == SAMSUNG_STATUS_REQUEST else None
        )
        callbacks = DeviceCallbacks(on_state_change=lambda old, new: states.append(new))

        async with DeviceLink(mock_transport, GALAXY_BUDS3_PRO, callbacks) as link:
            await link.wait_ready(timeout=1.0)

        assert states == [
            SessionState.AWAITING_INITIAL_STATE,
            SessionState.STEADY,
            SessionState.CLOSED,
        ]

    @pytest.mark.asyncio
    async def test_eof_closes_session(self, mock_transport):
        """Test that the remote end closing the stream closes the session."""
        link = DeviceLink(mock_transport, GALAXY_BUDS3_PRO)
        await link.start()
        mock_transport.feed_eof()

        with pytest.raises(ConnectionError):
            await link.wait_ready(timeout=1.0)
        assert link.session.state is SessionState.CLOSED
        await asyncio.sleep(0)
        assert not link.is_running
        await link.close()

    @pytest.mark.asyncio
    async def test_wait_ready_timeout(self, mock_transport):
        """Test that wait_ready times out without a reply."""
        async with DeviceLink(mock_transport, GALAXY_BUDS3_PRO) as link:
            with pytest.raises(TimeoutError):
                await link.wait_ready(timeout=0.05)

    @pytest.mark.asyncio
    async def test_handshake_failure(self, mock_transport):
        """Test that a failed handshake is raised from wait_ready."""
        config = SessionConfig(ack_timeout=0.01, handshake_retries=1)
        async with DeviceLink(mock_transport, TEST_SONY, config=config) as link:
            with pytest.raises(HandshakeError) as exc_info:
                await link.wait_ready(timeout=1.0)

        assert exc_info.value.stage == "init"
        assert mock_transport.written_data == [SONY_INIT] * 2

    @pytest.mark.asyncio
    async def test_double_start_raises(self, mock_transport):
        """Test that starting twice raises error."""
        link = DeviceLink(mock_transport, GALAXY_BUDS3_PRO)
        await link.start()
        with pytest.raises(ConnectionError):
            await link.start()
        await link.close()

    @pytest.mark.asyncio
    async def test_opens_transport(self, mock_transport):
        """Test that start opens a closed transport and close closes it."""
        link = DeviceLink(mock_transport, GALAXY_BUDS3_PRO)
        await link.start()
        assert mock_transport.is_open
        await link.close()
        await link.close()
        assert not mock_transport.is_open
        assert link.session.is_closed

    @pytest.mark.asyncio
    async def test_repr(self, mock_transport):
        """Test the link repr."""
        link = DeviceLink(mock_transport, GALAXY_BUDS3_PRO)
        assert repr(link) == (
            "DeviceLink('mock://buds', "
            "session=SamsungSession(model='Galaxy Buds 3 Pro', state=CONNECTING))"
        )
