"""Tests for the vendor protocol sessions."""

import pytest

from budslink.callbacks import DeviceCallbacks
from budslink.capabilities.apple import AIRPODS_PRO, AIRPODS_PRO_2
from budslink.capabilities.samsung import GALAXY_BUDS2, GALAXY_BUDS2_PRO, GALAXY_BUDS3_PRO
from budslink.capabilities.sony import WH_1000XM4
from budslink.exceptions import ConnectionError, HandshakeError, UnknownModelError
from budslink.models.capabilities import CapabilityRecord, SonyCapabilities, Vendor
from budslink.models.state import BatteryCell, BatteryIndex, BatteryStatus
from budslink.protocol.apple_constants import ApplePackets, AwarenessMode, ListeningMode
from budslink.protocol.samsung_constants import NoiseControlMode
from budslink.protocol.sony_codec import SonyFrameCodec
from budslink.protocol.sony_constants import (
    AmbientSoundMode,
    MessageType,
    ProtocolRevision,
)
from budslink.scheduling import VirtualScheduler
from budslink.sessions import (
    AppleSession,
    SamsungSession,
    SessionState,
    SonySession,
    create_session,
)

SONY_INIT = bytes.fromhex("3e 0c 00 00 00 00 02 00 00 0e 3c")
SAMSUNG_STATUS_REQUEST = bytes.fromhex("fd 03 00 60 a6 6c dd")
SAMSUNG_STATUS = bytes.fromhex("FD 0B 08 60 01 64 63 01 01 33 57 04 6E CB DD")

TEST_SONY = SonyCapabilities(
    model_id="TEST",
    revision=ProtocolRevision.V1,
    battery_single=True,
    device_info=False,
)


class Recorder:
    """Collect callbacks for assertions."""

    def __init__(self):
        self.events = []
        self.states = []
        self.callbacks = DeviceCallbacks(
            update_battery=lambda cells: self.events.append(("battery", dict(cells))),
            update_anc_mode=lambda mode: self.events.append(("anc", mode)),
            update_awareness_mode=lambda mode: self.events.append(("awareness", mode)),
            on_state_change=lambda old, new: self.states.append(new),
        )


def sony_frame(kind, payload, sequence=0):
    """Build an inbound Sony frame."""
    return SonyFrameCodec().encode(kind, payload, sequence)


class TestSonySession:
    """Tests for SonySession."""

    @pytest.fixture
    def scheduler(self):
        """Create a virtual clock."""
        return VirtualScheduler()

    @pytest.fixture
    def sent(self):
        """Collect written frames."""
        return []

    @pytest.fixture
    def recorder(self):
        """Create a callback recorder."""
        return Recorder()

    @pytest.fixture
    def session(self, sent, scheduler, recorder):
        """Create a session for a minimal V1 model."""
        return SonySession(TEST_SONY, sent.append, recorder.callbacks, scheduler)

    def test_start_sends_init(self, session, sent):
        """Test that start sends the protocol info request."""
        session.start()
        assert sent == [SONY_INIT]
        assert session.state is SessionState.HANDSHAKE_SENT

    def test_start_twice_raises(self, session):
        """Test that a session can only be started once."""
        session.start()
        with pytest.raises(ConnectionError):
            session.start()

    def test_full_handshake(self, session, sent, recorder):
        """Test the handshake from init to steady state."""
        codec = SonyFrameCodec()
        session.start()

        session.on_data(sony_frame(MessageType.COMMAND_1, bytes([0x01, 0x00, 0x02, 0x00])))
        assert session.state is SessionState.FEATURES_NEGOTIATED
        assert sent[1] == codec.encode_ack(0)
        assert sent[2] == codec.encode(MessageType.COMMAND_1, b"\x06\x00", 1)
        assert session.device_state.protocol_version == 2

        session.on_data(
            sony_frame(MessageType.COMMAND_1, bytes([0x07, 0x00, 0x01, 0x62]), sequence=1)
        )
        assert session.state is SessionState.AWAITING_INITIAL_STATE
        assert sent[3] == codec.encode_ack(1)
        assert sent[4] == codec.encode(MessageType.COMMAND_1, b"\x10\x00", 0)
        assert session.device_state.support_functions == frozenset({0x62})

        session.on_data(sony_frame(MessageType.COMMAND_1, bytes([0x11, 0x00, 0x50, 0x00])))
        assert session.state is SessionState.STEADY
        assert session.is_ready
        assert recorder.events == [
            ("battery", {BatteryIndex.PRIMARY: BatteryCell(level=80)}),
        ]
        assert recorder.states == [
            SessionState.HANDSHAKE_SENT,
            SessionState.FEATURES_NEGOTIATED,
            SessionState.AWAITING_INITIAL_STATE,
            SessionState.STEADY,
        ]

    def test_every_command_frame_is_acked(self, session, sent):
        """Test that notifications are acknowledged with the inverse sequence bit."""
        session.start()
        session.on_data(sony_frame(MessageType.COMMAND_1, bytes([0x13, 0x00, 0x40, 0x01]), 1))
        assert sent[-1] == SonyFrameCodec().encode_ack(1)
        assert session.device_state.battery[BatteryIndex.PRIMARY].status is (
            BatteryStatus.CHARGING
        )

    def test_init_retried(self, session, sent, scheduler):
        """Test that the init message is resent on the V1 timeout."""
        session.start()
        scheduler.advance(1.25)
        assert sent == [SONY_INIT, SONY_INIT]

    def test_handshake_failure(self, session, sent, scheduler, recorder):
        """Test that an unanswered init closes the session."""
        session.start()
        scheduler.advance(1.25 * 4)

        assert sent == [SONY_INIT] * 4
        assert session.state is SessionState.CLOSED
        assert isinstance(session.failure, HandshakeError)
        assert session.failure.stage == "init"
        assert session.failure.attempts == 4
        assert recorder.states[-1] is SessionState.CLOSED

    def test_support_info_failure(self, session, sent, scheduler):
        """Test that an unanswered support request fails after three attempts."""
        session.start()
        session.on_data(sony_frame(MessageType.COMMAND_1, bytes([0x01, 0x00, 0x02, 0x00])))
        scheduler.advance(15.0)

        support = [frame for frame in sent if frame[7:9] == b"\x06\x00"]
        assert len(support) == 3
        assert session.is_closed
        assert session.failure.stage == "supportInfo"
        assert session.failure.attempts == 3

    def test_v2_uses_short_timeout(self, sent, scheduler):
        """Test the V2 acknowledgement timeout."""
        caps = TEST_SONY.model_copy(update={"revision": ProtocolRevision.V2})
        session = SonySession(caps, sent.append, scheduler=scheduler)
        session.start()
        scheduler.advance(0.5)
        assert len(sent) == 2

    def test_setting_waits_for_queue(self, sent, scheduler):
        """Test that a set command queues behind the handshake."""
        session = SonySession(WH_1000XM4, sent.append, scheduler=scheduler)
        session.start()
        session.set_ambient_sound_control(AmbientSoundMode.ANC_ON)
        assert len(sent) == 1
        assert len(session.queue) == 2

    def test_unsupported_setting_is_ignored(self, session, sent):
        """Test that a setting the model lacks sends nothing."""
        session.start()
        session.set_voice_notifications(True)
        assert len(session.queue) == 1

    def test_close(self, session, scheduler, sent):
        """Test that closing stops retries and rejects settings."""
        session.start()
        session.close()
        scheduler.advance(10.0)

        assert sent == [SONY_INIT]
        assert session.is_closed
        with pytest.raises(ConnectionError):
            session.set_equalizer_bands([0] * 6)

    def test_data_after_close_ignored(self, session, sent):
        """Test that inbound bytes after close are dropped."""
        session.start()
        session.on_close()
        session.on_data(sony_frame(MessageType.COMMAND_1, bytes([0x01, 0x00, 0x02, 0x00])))
        assert sent == [SONY_INIT]
        assert session.state is SessionState.CLOSED


class TestSamsungSession:
    """Tests for SamsungSession."""

    @pytest.fixture
    def sent(self):
        """Collect written frames."""
        return []

    @pytest.fixture
    def recorder(self):
        """Create a callback recorder."""
        return Recorder()

    def test_start_requests_status(self, sent):
        """Test that start sends a status request."""
        session = SamsungSession(GALAXY_BUDS3_PRO, sent.append, scheduler=VirtualScheduler())
        session.start()
        assert sent == [SAMSUNG_STATUS_REQUEST]
        assert session.state is SessionState.AWAITING_INITIAL_STATE

    def test_status_completes_handshake(self, sent, recorder):
        """Test that the first status frame moves to steady state."""
        session = SamsungSession(
            GALAXY_BUDS3_PRO, sent.append, recorder.callbacks, VirtualScheduler()
        )
        session.start()
        session.on_data(SAMSUNG_STATUS[:5])
        assert session.state is SessionState.AWAITING_INITIAL_STATE
        session.on_data(SAMSUNG_STATUS[5:])

        assert session.state is SessionState.STEADY
        assert recorder.events[0][0] == "battery"
        assert session.device_state.battery[BatteryIndex.PRIMARY].level == 100

    def test_set_anc_mode(self, sent):
        """Test that a supported mode is written."""
        session = SamsungSession(GALAXY_BUDS2_PRO, sent.append, scheduler=VirtualScheduler())
        session.start()
        session.set_anc_mode(NoiseControlMode.AMBIENT_SOUND)
        assert sent[-1] == bytes.fromhex("FD 04 00 78 02 B2 A1 DD")

    def test_set_anc_mode_unsupported_mode(self, sent):
        """Test that an unsupported mode is silently ignored."""
        session = SamsungSession(GALAXY_BUDS2, sent.append, scheduler=VirtualScheduler())
        session.start()
        session.set_anc_mode(NoiseControlMode.ADAPTIVE)
        assert sent == [SAMSUNG_STATUS_REQUEST]

    def test_set_anc_mode_after_close(self, sent):
        """Test that settings on a closed session raise."""
        session = SamsungSession(GALAXY_BUDS2_PRO, sent.append, scheduler=VirtualScheduler())
        session.start()
        session.on_close()
        with pytest.raises(ConnectionError):
            session.set_anc_mode(NoiseControlMode.OFF)


class TestAppleSession:
    """Tests for AppleSession."""

    @pytest.fixture
    def scheduler(self):
        """Create a virtual clock."""
        return VirtualScheduler()

    @pytest.fixture
    def sent(self):
        """Collect written packets."""
        return []

    @pytest.fixture
    def recorder(self):
        """Create a callback recorder."""
        return Recorder()

    @pytest.fixture
    def session(self, sent, scheduler, recorder):
        """Create a session for a model with conversation awareness."""
        return AppleSession(AIRPODS_PRO_2, sent.append, recorder.callbacks, scheduler)

    def test_handshake(self, session, sent, scheduler):
        """Test the handshake through to notifications."""
        session.start()
        assert sent == [ApplePackets.HANDSHAKE]
        assert session.state is SessionState.HANDSHAKE_SENT

        session.on_data(ApplePackets.HANDSHAKE_ACK)
        assert session.state is SessionState.FEATURES_NEGOTIATED
        assert sent[-1] == ApplePackets.SET_SPECIFIC_FEATURES

        scheduler.advance(0.25)
        assert sent[-1] == ApplePackets.REQUEST_NOTIFICATIONS
        assert session.state is SessionState.STEADY

    def test_no_features_without_awareness(self, sent, scheduler):
        """Test that models without awareness skip the features packet."""
        session = AppleSession(AIRPODS_PRO, sent.append, scheduler=scheduler)
        session.start()
        session.on_data(ApplePackets.HANDSHAKE_ACK)
        scheduler.advance(0.25)
        assert sent == [ApplePackets.HANDSHAKE, ApplePackets.REQUEST_NOTIFICATIONS]
        assert session.state is SessionState.STEADY

    def test_handshake_fallback(self, session, sent, scheduler):
        """Test that the handshake continues without an ack."""
        session.start()
        scheduler.advance(5.0)
        assert session.state is SessionState.FEATURES_NEGOTIATED
        scheduler.advance(0.25)
        assert session.state is SessionState.STEADY
        assert sent.count(ApplePackets.SET_SPECIFIC_FEATURES) == 1

    def test_ack_cancels_fallback(self, session, sent, scheduler):
        """Test that the fallback does not run after the ack."""
        session.start()
        session.on_data(ApplePackets.HANDSHAKE_ACK)
        scheduler.advance(10.0)
        assert sent.count(ApplePackets.SET_SPECIFIC_FEATURES) == 1

    def test_features_resent_on_insert(self, session, sent, scheduler):
        """Test that a bud going in re-enables awareness reporting."""
        session.start()
        session.on_data(ApplePackets.HANDSHAKE_ACK)
        scheduler.advance(0.25)
        session.on_data(ApplePackets.FEATURES_ACK)
        session.on_data(bytes.fromhex("04 00 04 00 06 00 00 01"))
        assert sent[-1] == ApplePackets.SET_SPECIFIC_FEATURES
        assert sent.count(ApplePackets.SET_SPECIFIC_FEATURES) == 2

    def test_no_resend_before_features_ack(self, session, sent, scheduler):
        """Test that placement changes before the features ack send nothing."""
        session.start()
        session.on_data(ApplePackets.HANDSHAKE_ACK)
        scheduler.advance(0.25)
        session.on_data(bytes.fromhex("04 00 04 00 06 00 00 01"))
        assert sent[-1] == ApplePackets.REQUEST_NOTIFICATIONS

    def test_set_listening_mode(self, session, sent):
        """Test writing a listening mode."""
        session.start()
        session.set_listening_mode(ListeningMode.ANC)
        assert sent[-1] == bytes.fromhex("04 00 04 00 09 00 0d 02 00 00 00")

    def test_set_awareness_mode_emits(self, session, sent, recorder):
        """Test that the awareness mode is reported locally once."""
        session.start()
        session.set_awareness_mode(AwarenessMode.OFF)
        session.set_awareness_mode(AwarenessMode.OFF)
        assert recorder.events == [("awareness", AwarenessMode.OFF)]
        assert session.device_state.awareness_mode is AwarenessMode.OFF
        assert len(sent) == 3

    def test_close_cancels_timers(self, session, sent, scheduler):
        """Test that closing stops the handshake timers."""
        session.start()
        session.close()
        scheduler.advance(10.0)
        assert sent == [ApplePackets.HANDSHAKE]
        assert scheduler.pending == 0

    def test_setting_after_close(self, session):
        """Test that settings on a closed session raise."""
        session.start()
        session.close()
        with pytest.raises(ConnectionError):
            session.set_tone_volume(50)


class TestCreateSession:
    """Tests for create_session."""

    def test_picks_vendor(self):
        """Test that each record type gets its session."""
        scheduler = VirtualScheduler()
        assert isinstance(create_session(WH_1000XM4, print, scheduler=scheduler), SonySession)
        assert isinstance(
            create_session(GALAXY_BUDS2_PRO, print, scheduler=scheduler), SamsungSession
        )
        assert isinstance(create_session(AIRPODS_PRO, print, scheduler=scheduler), AppleSession)

    def test_unknown_record(self):
        """Test that a record of no supported vendor raises."""
        record = CapabilityRecord(vendor=Vendor.SONY, model_id="Other")
        with pytest.raises(UnknownModelError):
            create_session(record, print, scheduler=VirtualScheduler())

    def test_repr(self):
        """Test the session repr."""
        session = create_session(GALAXY_BUDS2_PRO, print, scheduler=VirtualScheduler())
        assert repr(session) == "SamsungSession(model='Galaxy Buds 2 Pro', state=CONNECTING)"
