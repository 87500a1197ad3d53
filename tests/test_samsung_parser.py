"""Tests for the Samsung Galaxy Buds payload decoder."""

import pytest

from budslink.capabilities.samsung import (
    GALAXY_BUDS,
    GALAXY_BUDS2,
    GALAXY_BUDS2_PRO,
    GALAXY_BUDS3_PRO,
    GALAXY_BUDS_PLUS,
)
from budslink.models.events import AncModeUpdate, BatteryUpdate, EarStateUpdate
from budslink.models.state import BatteryCell, BatteryIndex, BatteryStatus, SamsungState
from budslink.parsers.samsung import decode_battery, decode_ear, decode_frame
from budslink.protocol.samsung_codec import SamsungFrameCodec
from budslink.protocol.samsung_constants import EarState, MessageId, NoiseControlMode


def frame_from_wire(hex_frame: str):
    """Decode one wire frame with the modern codec."""
    frames = SamsungFrameCodec().feed(bytes.fromhex(hex_frame))
    assert len(frames) == 1
    return frames[0]


class TestStatus:
    """Tests for status and extended status frames."""

    def test_buds_plus_extended_status(self):
        """Test battery and ear placement from an extended status frame."""
        frame = frame_from_wire(
            "fd1b80610d0064640100333d000100000033000501050100000003004883dd"
        )
        state, events = decode_frame(SamsungState(), frame, GALAXY_BUDS_PLUS)

        assert state.battery == {
            BatteryIndex.PRIMARY: BatteryCell(level=100, status=BatteryStatus.DISCHARGING),
            BatteryIndex.RIGHT: BatteryCell(level=100, status=BatteryStatus.DISCHARGING),
            BatteryIndex.CASE: BatteryCell(level=61, status=BatteryStatus.DISCHARGING),
        }
        assert state.left_ear is EarState.CASE
        assert state.right_ear is EarState.CASE
        assert [type(e) for e in events] == [BatteryUpdate, EarStateUpdate]
        assert events[1] == EarStateUpdate(EarState.CASE, EarState.CASE)

    def test_buds3_pro_status_charging(self):
        """Test the charging bitmask of a status frame."""
        frame = frame_from_wire("FD 0B 08 60 01 64 63 01 01 33 57 04 6E CB DD")
        state, events = decode_frame(SamsungState(), frame, GALAXY_BUDS3_PRO)

        assert state.battery[BatteryIndex.PRIMARY] == BatteryCell(
            level=100, status=BatteryStatus.DISCHARGING
        )
        assert state.battery[BatteryIndex.RIGHT] == BatteryCell(
            level=99, status=BatteryStatus.CHARGING
        )
        assert state.battery[BatteryIndex.CASE].level == 87
        assert (state.left_ear, state.right_ear) == (EarState.CASE, EarState.CASE)
        assert isinstance(events[0], BatteryUpdate)

    def test_status_without_anc_byte(self):
        """Test that a plain status frame carries no noise control event."""
        frame = frame_from_wire("FD 0B 08 60 01 64 63 01 01 33 57 04 6E CB DD")
        _, events = decode_frame(SamsungState(), frame, GALAXY_BUDS3_PRO)
        assert not any(isinstance(e, AncModeUpdate) for e in events)

    def test_unknown_id_yields_nothing(self):
        """Test that frames of other ids are ignored."""
        # 0xF2 carries no battery or ear fields; only 0x60 and 0x61 are decoded.
        frame = frame_from_wire("FD 0D 00 F2 52 D2 A3 08 00 B3 00 07 07 00 A5 DE DD")
        state = SamsungState()
        assert decode_frame(state, frame, GALAXY_BUDS2_PRO) == (state, [])

    def test_legacy_status(self):
        """Test the original Galaxy Buds without a case level."""
        frame = SamsungFrameCodec(legacy=True).feed(
            SamsungFrameCodec(legacy=True).encode(
                MessageId.STATUS_UPDATED, bytes([0x00, 0x5A, 0x50, 0x00, 0x00, 0x10])
            )
        )[0]
        state, events = decode_frame(SamsungState(), frame, GALAXY_BUDS)
        assert set(state.battery) == {BatteryIndex.PRIMARY, BatteryIndex.RIGHT}
        assert state.battery[BatteryIndex.PRIMARY].level == 90
        assert (state.left_ear, state.right_ear) == (EarState.WEARING, EarState.IDLE)
        assert len(events) == 2


class TestDecodeBattery:
    """Tests for decode_battery."""

    def test_zero_level_is_disconnected(self):
        """Test that a level of 0 marks the cell disconnected."""
        cells = decode_battery(
            bytes([0x00, 0x00, 0x40, 0, 0, 0, 0x30, 0x00]),
            GALAXY_BUDS3_PRO.status_battery,
            GALAXY_BUDS3_PRO.status_charge_offset,
        )
        assert cells[BatteryIndex.PRIMARY].status is BatteryStatus.DISCONNECTED
        assert cells[BatteryIndex.RIGHT].level == 64

    def test_unknown_case_level(self):
        """Test that a case level of 255 is reported as disconnected."""
        cells = decode_battery(
            bytes([0x00, 0x50, 0x50, 0, 0, 0, 0xFF, 0x01]),
            GALAXY_BUDS3_PRO.status_battery,
            GALAXY_BUDS3_PRO.status_charge_offset,
        )
        assert cells[BatteryIndex.CASE] == BatteryCell(
            level=0, status=BatteryStatus.DISCONNECTED
        )

    def test_short_payload(self):
        """Test that a payload too short for the levels yields nothing."""
        assert decode_battery(b"\x00\x50", GALAXY_BUDS3_PRO.status_battery, 7) == {}

    def test_missing_charge_byte(self):
        """Test that a missing charging byte means not charging."""
        cells = decode_battery(
            bytes([0x00, 0x50, 0x50, 0, 0, 0, 0x40]),
            GALAXY_BUDS3_PRO.status_battery,
            GALAXY_BUDS3_PRO.status_charge_offset,
        )
        assert not any(cell.is_charging for cell in cells.values())


class TestDecodeEar:
    """Tests for ear placement bytes."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (0x11, (EarState.WEARING, EarState.WEARING)),
            (0x12, (EarState.WEARING, EarState.IDLE)),
            (0x33, (EarState.CASE, EarState.CASE)),
            (0x40, (EarState.CLOSED_CASE, EarState.DISCONNECTED)),
        ],
    )
    def test_modern_nibbles(self, raw, expected):
        """Test the split-nibble encoding."""
        assert decode_ear(raw, legacy=False) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (0x11, (EarState.WEARING, EarState.WEARING)),
            (0x10, (EarState.WEARING, EarState.IDLE)),
            (0x01, (EarState.IDLE, EarState.WEARING)),
            (0x00, (EarState.IDLE, EarState.IDLE)),
        ],
    )
    def test_legacy(self, raw, expected):
        """Test the original Galaxy Buds encoding."""
        assert decode_ear(raw, legacy=True) == expected

    def test_invalid_nibble(self):
        """Test that an undefined nibble is None."""
        assert decode_ear(0x91, legacy=False) == (None, EarState.WEARING)

    def test_invalid_nibble_keeps_previous(self):
        """Test that an undefined nibble keeps the last known placement."""
        payload = bytes([0x00, 0x50, 0x50, 0x00, 0x00, 0x91, 0x40, 0x00])
        frame = SamsungFrameCodec().feed(
            SamsungFrameCodec().encode(MessageId.STATUS_UPDATED, payload)
        )[0]
        previous = SamsungState(left_ear=EarState.IDLE, right_ear=EarState.IDLE)
        state, _ = decode_frame(previous, frame, GALAXY_BUDS3_PRO)
        assert (state.left_ear, state.right_ear) == (EarState.IDLE, EarState.WEARING)


class TestNoiseControls:
    """Tests for noise control updates."""

    def test_noise_controls_update(self):
        """Test the dedicated noise controls update frame."""
        frame = frame_from_wire("FD 0A 00 77 00 11 01 00 0D 0D 01 4D A6 DD")
        state, events = decode_frame(SamsungState(), frame, GALAXY_BUDS2_PRO)
        assert state.anc_mode is NoiseControlMode.OFF
        assert events == [AncModeUpdate(NoiseControlMode.OFF)]

    def test_update_ignored_without_anc(self):
        """Test that models without noise control ignore the update."""
        frame = frame_from_wire("FD 0A 00 77 00 11 01 00 0D 0D 01 4D A6 DD")
        _, events = decode_frame(SamsungState(), frame, GALAXY_BUDS_PLUS)
        assert events == []

    def test_universal_ack(self):
        """Test the acknowledgement of a noise controls command."""
        codec = SamsungFrameCodec()
        frame = codec.feed(codec.encode(MessageId.UNIVERSAL_ACK, bytes([0x78, 0x01])))[0]
        _, events = decode_frame(SamsungState(), frame, GALAXY_BUDS2_PRO)
        assert events == [AncModeUpdate(NoiseControlMode.NOISE_REDUCTION)]

    def test_universal_ack_other_command(self):
        """Test that acknowledgements of other commands are ignored."""
        codec = SamsungFrameCodec()
        frame = codec.feed(codec.encode(MessageId.UNIVERSAL_ACK, bytes([0x60, 0x01])))[0]
        _, events = decode_frame(SamsungState(), frame, GALAXY_BUDS2_PRO)
        assert events == []

    def test_mode_not_supported_by_model(self):
        """Test that a mode outside the model's list is ignored."""
        codec = SamsungFrameCodec()
        frame = codec.feed(codec.encode(MessageId.NOISE_CONTROLS_UPDATE, bytes([0x03])))[0]
        _, events = decode_frame(SamsungState(), frame, GALAXY_BUDS2)
        assert events == []

    def test_extended_status_mode(self):
        """Test the mode byte of an extended status frame."""
        payload = bytearray(44)
        payload[2], payload[3], payload[7] = 0x50, 0x50, 0x40
        payload[6] = 0x11
        payload[12] = NoiseControlMode.AMBIENT_SOUND
        codec = SamsungFrameCodec()
        frame = codec.feed(codec.encode(MessageId.EXTENDED_STATUS_UPDATED, bytes(payload)))[0]
        state, events = decode_frame(SamsungState(), frame, GALAXY_BUDS2_PRO)
        assert state.anc_mode is NoiseControlMode.AMBIENT_SOUND
        assert AncModeUpdate(NoiseControlMode.AMBIENT_SOUND) in events
        assert (state.left_ear, state.right_ear) == (EarState.WEARING, EarState.WEARING)
