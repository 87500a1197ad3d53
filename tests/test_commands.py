"""Tests for the outbound command builders."""

import pytest

from budslink.capabilities.apple import AIRPODS_2, AIRPODS_PRO, AIRPODS_PRO_2
from budslink.capabilities.samsung import GALAXY_BUDS2, GALAXY_BUDS_PLUS
from budslink.capabilities.sony import (
    WF_1000XM3,
    WF_1000XM4,
    WF_1000XM5,
    WH_1000XM4,
    WH_1000XM5,
    WH_1000XM6,
)
from budslink.commands import apple, samsung, sony
from budslink.exceptions import ProtocolError
from budslink.models.capabilities import SonyCapabilities
from budslink.models.state import SonyState
from budslink.protocol.apple_constants import AwarenessMode, ListeningMode as AppleMode
from budslink.protocol.samsung_constants import MessageId, NoiseControlMode
from budslink.protocol.sony_constants import (
    AmbientSoundMode,
    AutoAsmSensitivity,
    AutoPowerOff,
    BatteryType,
    BgmDistance,
    EqualizerPreset,
    ListeningMode,
    MessageType,
    ProtocolRevision,
)

BARE_V1 = SonyCapabilities(model_id="Bare", revision=ProtocolRevision.V1, device_info=False)


class TestSonyRequests:
    """Tests for Sony GET requests."""

    def test_protocol_info_request(self):
        """Test the opening handshake message."""
        command = sony.protocol_info_request()
        assert command == (MessageType.COMMAND_1, b"\x00\x00", "init")
        assert command.is_request

    def test_support_function_request(self):
        """Test the support function request."""
        assert sony.support_function_request().payload == b"\x06\x00"

    def test_device_info_requests(self):
        """Test the device info sequence."""
        tags = [c.tag for c in sony.device_info_requests(WH_1000XM4)]
        assert tags == [
            "capabilityInfo",
            "deviceInfoModel",
            "deviceInfoFirmware",
            "deviceInfoSeriesColor",
        ]
        assert sony.device_info_requests(BARE_V1) == []

    def test_battery_request_by_revision(self):
        """Test that the battery request code depends on the revision."""
        assert sony.battery_request(WH_1000XM4, BatteryType.SINGLE).payload == b"\x10\x00"
        assert sony.battery_request(WF_1000XM4, BatteryType.CASE).payload == b"\x22\x02"

    def test_initial_state_requests_v1(self):
        """Test that one request goes out per supported feature."""
        state = SonyState(support_functions=frozenset({0x62}))
        requests = sony.initial_state_requests(WH_1000XM4, state)
        assert [r.tag for r in requests] == [
            "battery",
            "speakToChatConfig",
            "speakToChatEnable",
            "equalizer",
            "voiceNotifications",
            "audioUpsampling",
            "pauseWhenTakenOff",
            "automaticPowerOff",
            "ambientControl",
            "codecIndicator",
            "upscalingIndicator",
        ]
        ambient = requests[8]
        assert ambient.payload == b"\x66\x02"

    def test_initial_state_requests_without_support_functions(self):
        """Test that V1 ambient is skipped until NC/ASM support is reported."""
        requests = sony.initial_state_requests(WH_1000XM4, SonyState())
        assert "ambientControl" not in [r.tag for r in requests]

    def test_initial_state_requests_v2_buds(self):
        """Test the request set of a V2 earbud model."""
        requests = sony.initial_state_requests(WF_1000XM5, SonyState())
        tags = [r.tag for r in requests]
        assert tags.count("battery") == 2
        assert "listeningModeBgm" in tags
        assert "listeningModeNonBgm" in tags
        assert "codecIndicator" not in tags
        voice = next(r for r in requests if r.tag == "voiceNotifications")
        assert voice.kind == MessageType.COMMAND_2
        assert voice.payload == b"\x46\x03"

    def test_initial_state_requests_minimal(self):
        """Test that a model without features requests nothing."""
        assert sony.initial_state_requests(BARE_V1, SonyState()) == []

    @pytest.mark.parametrize(
        "functions,expected",
        [
            ({0x61}, 0x01),
            ({0x62}, 0x02),
            ({0x63}, 0x03),
            ({0x61, 0x63}, 0x02),
        ],
    )
    def test_v1_ambient_code(self, functions, expected):
        """Test the NC/ASM request code selection."""
        assert sony.v1_ambient_code(frozenset(functions)) == expected

    def test_v2_ambient_index(self):
        """Test the NC/ASM layout index selection."""
        assert sony.v2_ambient_index(WF_1000XM4) == 0x17
        assert sony.v2_ambient_index(WH_1000XM6) == 0x19


class TestSonySetCommands:
    """Tests for Sony SET commands."""

    def test_set_ambient_v1_anc(self):
        """Test V1 noise cancelling on."""
        command = sony.set_ambient_sound_control(WH_1000XM4, AmbientSoundMode.ANC_ON)
        assert command.payload == bytes.fromhex("68 02 11 02 01 01 00 00")
        assert command.tag == "ack"
        assert not command.is_request

    def test_set_ambient_v1_ambient(self):
        """Test V1 ambient sound with focus on voice."""
        command = sony.set_ambient_sound_control(
            WH_1000XM4, AmbientSoundMode.AMBIENT, focus_on_voice=True, level=15
        )
        assert command.payload == bytes.fromhex("68 02 11 02 00 01 01 0f")

    def test_set_ambient_v1_off(self):
        """Test V1 everything off."""
        command = sony.set_ambient_sound_control(WH_1000XM4, AmbientSoundMode.OFF, level=3)
        assert command.payload == bytes.fromhex("68 02 00 02 00 01 00 03")

    def test_set_ambient_v2_wind_layout(self):
        """Test the V2 layout with a wind byte."""
        anc = sony.set_ambient_sound_control(WF_1000XM4, AmbientSoundMode.ANC_ON)
        wind = sony.set_ambient_sound_control(WF_1000XM4, AmbientSoundMode.WIND)
        ambient = sony.set_ambient_sound_control(
            WF_1000XM4, AmbientSoundMode.AMBIENT, focus_on_voice=True, level=5
        )
        assert anc.payload == bytes.fromhex("68 17 01 01 00 02 00 0a")
        assert wind.payload == bytes.fromhex("68 17 01 01 00 03 00 0a")
        assert ambient.payload == bytes.fromhex("68 17 01 01 01 02 01 05")

    def test_set_ambient_v2_adaptive(self):
        """Test the adaptive layout with flag and sensitivity."""
        command = sony.set_ambient_sound_control(
            WH_1000XM6,
            AmbientSoundMode.AMBIENT,
            focus_on_voice=False,
            level=8,
            adaptive=True,
            sensitivity=AutoAsmSensitivity.LOW,
        )
        assert command.payload == bytes.fromhex("68 19 01 01 01 00 08 01 02")

    def test_set_ambient_level_out_of_range(self):
        """Test that a level above 20 raises."""
        with pytest.raises(ProtocolError):
            sony.set_ambient_sound_control(WH_1000XM4, AmbientSoundMode.AMBIENT, level=21)

    def test_set_ambient_unsupported(self):
        """Test that a model without NC/ASM gets no command."""
        assert sony.set_ambient_sound_control(BARE_V1, AmbientSoundMode.ANC_ON) is None

    def test_set_equalizer_preset(self):
        """Test selecting a preset."""
        command = sony.set_equalizer_preset(WH_1000XM5, EqualizerPreset.BASS)
        assert command.payload == bytes.fromhex("58 00 16 00")

    def test_set_equalizer_bands(self):
        """Test custom band levels."""
        command = sony.set_equalizer_bands(WH_1000XM4, [-10, -5, 0, 5, 10, 0])
        assert command.payload == bytes.fromhex("58 01 ff 06 00 05 0a 0f 14 0a")

    def test_set_equalizer_wrong_band_count(self):
        """Test that a band count the model lacks raises."""
        with pytest.raises(ProtocolError):
            sony.set_equalizer_bands(WH_1000XM4, [0] * 10)

    def test_set_equalizer_band_out_of_range(self):
        """Test that a band level past the offset raises."""
        with pytest.raises(ProtocolError):
            sony.set_equalizer_bands(WH_1000XM5, [7] + [0] * 9)

    def test_set_voice_notifications(self):
        """Test both voice payload layouts."""
        v1 = sony.set_voice_notifications(WH_1000XM4, False)
        v2 = sony.set_voice_notifications(WH_1000XM5, True)
        assert v1 == (MessageType.COMMAND_2, bytes.fromhex("48 01 01 00"), "ack")
        assert v2.payload == bytes.fromhex("48 03 00")

    def test_set_auto_power_off(self):
        """Test the automatic power off byte pair."""
        command = sony.set_auto_power_off(WH_1000XM4, AutoPowerOff.OFF)
        assert command.payload == bytes.fromhex("f8 04 01 11 00")
        assert sony.set_auto_power_off(WF_1000XM4, AutoPowerOff.OFF) is None

    def test_set_pause_when_taken_off_v2(self):
        """Test the inverted V2 power parameter."""
        command = sony.set_pause_when_taken_off(WH_1000XM5, True)
        assert command.payload == bytes.fromhex("28 01 00")

    def test_set_speak_to_chat_v2(self):
        """Test the inverted V2 speak-to-chat flag."""
        command = sony.set_speak_to_chat_enabled(WH_1000XM5, True)
        assert command.payload == bytes.fromhex("f8 0c 00 01")

    def test_set_audio_upsampling(self):
        """Test both upsampling payload layouts."""
        assert sony.set_audio_upsampling(WH_1000XM4, True).payload == bytes.fromhex(
            "e8 02 00 01"
        )
        assert sony.set_audio_upsampling(WH_1000XM5, False).payload == bytes.fromhex(
            "e8 01 00"
        )
        assert sony.set_audio_upsampling(WF_1000XM3, True) is None

    def test_listening_mode_bgm(self):
        """Test that selecting BGM sends the BGM switch only."""
        commands = sony.set_listening_mode(
            WF_1000XM5, SonyState(), ListeningMode.BGM, BgmDistance.CAFE
        )
        assert [c.payload for c in commands] == [bytes.fromhex("e8 03 00 02")]

    def test_listening_mode_leave_bgm(self):
        """Test that leaving BGM turns it off before setting the mode."""
        state = SonyState(bgm_active=True)
        commands = sony.set_listening_mode(WF_1000XM5, state, ListeningMode.STANDARD)
        assert [c.payload for c in commands] == [
            bytes.fromhex("e8 03 01 00"),
            bytes.fromhex("e8 04 00"),
        ]

    def test_listening_mode_cinema(self):
        """Test that cinema mode is a single command."""
        commands = sony.set_listening_mode(WF_1000XM5, SonyState(), ListeningMode.CINEMA)
        assert [c.payload for c in commands] == [bytes.fromhex("e8 04 01")]

    def test_listening_mode_unsupported(self):
        """Test that V1 models get no listening mode commands."""
        assert sony.set_listening_mode(WH_1000XM4, SonyState(), ListeningMode.BGM) == []


class TestSamsungCommands:
    """Tests for Samsung command builders."""

    def test_status_request(self):
        """Test the status request."""
        assert samsung.status_request() == (MessageId.STATUS_UPDATED, b"")

    def test_set_anc_mode(self):
        """Test the noise controls command."""
        command = samsung.set_anc_mode(GALAXY_BUDS2, NoiseControlMode.AMBIENT_SOUND)
        assert command == (MessageId.NOISE_CONTROLS, b"\x02")

    def test_set_anc_mode_unsupported_mode(self):
        """Test that a mode the model lacks returns None."""
        assert samsung.set_anc_mode(GALAXY_BUDS2, NoiseControlMode.ADAPTIVE) is None

    def test_set_anc_mode_without_anc(self):
        """Test that models without noise control return None."""
        assert samsung.set_anc_mode(GALAXY_BUDS_PLUS, NoiseControlMode.OFF) is None


class TestAppleCommands:
    """Tests for AirPods command builders."""

    def test_handshake(self):
        """Test the handshake packet."""
        assert apple.handshake() == bytes.fromhex("00000400010002000000000000000000")

    def test_specific_features(self):
        """Test that features are only sent to models with awareness."""
        assert apple.set_specific_features(AIRPODS_PRO_2) == bytes.fromhex(
            "040004004d00ff0000000000000000"
        )
        assert apple.set_specific_features(AIRPODS_PRO) is None

    def test_listening_mode(self):
        """Test the listening mode packet and model gating."""
        assert apple.set_listening_mode(AIRPODS_PRO_2, AppleMode.ADAPTIVE) == bytes.fromhex(
            "04 00 04 00 09 00 0d 04 00 00 00"
        )
        assert apple.set_listening_mode(AIRPODS_PRO, AppleMode.ADAPTIVE) is None
        assert apple.set_listening_mode(AIRPODS_2, AppleMode.ANC) is None

    def test_adaptive_level_range(self):
        """Test that adaptive levels above 100 raise."""
        assert apple.set_adaptive_level(AIRPODS_PRO_2, 100)[6:8] == bytes([0x2E, 0x64])
        with pytest.raises(ProtocolError):
            apple.set_adaptive_level(AIRPODS_PRO_2, 101)

    def test_awareness_mode(self):
        """Test the conversation awareness packet."""
        packet = apple.set_awareness_mode(AIRPODS_PRO_2, AwarenessMode.OFF)
        assert packet == bytes.fromhex("04 00 04 00 09 00 28 02 00 00 00")

    def test_tone_volume_range(self):
        """Test that tone volumes above 100 raise."""
        with pytest.raises(ProtocolError):
            apple.set_tone_volume(AIRPODS_PRO_2, 120)

    def test_volume_swipe(self):
        """Test the volume swipe packets and model gating."""
        assert apple.set_volume_swipe_mode(AIRPODS_PRO_2, True)[6:8] == bytes([0x25, 0x01])
        assert apple.set_volume_swipe_mode(AIRPODS_PRO, True) is None
