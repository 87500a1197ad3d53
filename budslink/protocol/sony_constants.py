"""
Sony MDR protocol constants.

This module defines the framing bytes, message types, payload type codes
for both protocol revisions, and the value enumerations carried inside
payloads.

Wire format:
    0x3E | escape(type, seq, len32be, payload, checksum) | 0x3C

V1 devices (WH-1000XM3/XM4 generation) and V2 devices (WH-1000XM5/XM6,
WF-1000XM5 generation) share the framing and the CONNECT command group
but use different codes and layouts for most feature groups.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class SonyFraming:
    """Framing bytes and limits for Sony MDR frames."""

    HEADER: Final[int] = 0x3E
    """Start of frame marker."""

    TRAILER: Final[int] = 0x3C
    """End of frame marker."""

    ESCAPE: Final[int] = 0x3D
    """Escape prefix for marker bytes inside a frame."""

    ESCAPE_MASK: Final[int] = 0xEF
    """Mask applied to an escaped byte; unescaping restores bit 0x10."""

    MIN_BODY_SIZE: Final[int] = 7
    """type + seq + 4-byte length + checksum."""


ESCAPED_BYTES: Final[frozenset[int]] = frozenset(
    {SonyFraming.HEADER, SonyFraming.TRAILER, SonyFraming.ESCAPE}
)


class MessageType(IntEnum):
    """Sony MDR message types."""

    ACK = 0x01
    """Acknowledgement of a received command frame."""

    COMMAND_1 = 0x0C
    """Primary command channel (MDR)."""

    COMMAND_2 = 0x0E
    """Secondary command channel (MDR no. 2: voice guidance)."""


class ProtocolRevision(IntEnum):
    """Protocol revision spoken by a model."""

    V1 = 1
    V2 = 2


class ConnectPayload(IntEnum):
    """CONNECT group codes shared by both revisions."""

    GET_PROTOCOL_INFO = 0x00
    RET_PROTOCOL_INFO = 0x01
    GET_CAPABILITY_INFO = 0x02
    RET_CAPABILITY_INFO = 0x03
    GET_DEVICE_INFO = 0x04
    RET_DEVICE_INFO = 0x05
    GET_SUPPORT_FUNCTION = 0x06
    RET_SUPPORT_FUNCTION = 0x07


class DeviceInfoType(IntEnum):
    """Sub-codes for CONNECT_GET_DEVICE_INFO."""

    MODEL_NAME = 0x01
    FW_VERSION = 0x02
    SERIES_AND_COLOR = 0x03


FIXED_VALUE: Final[int] = 0x00
"""Second byte of parameterless CONNECT requests."""


class PayloadTypeV1(IntEnum):
    """Payload type codes for protocol revision 1."""

    COMMON_GET_BATTERY_LEVEL = 0x10
    COMMON_RET_BATTERY_LEVEL = 0x11
    COMMON_NTFY_BATTERY_LEVEL = 0x13
    COMMON_GET_UPSCALING_EFFECT = 0x14
    COMMON_RET_UPSCALING_EFFECT = 0x15
    COMMON_NTFY_UPSCALING_EFFECT = 0x17
    COMMON_GET_AUDIO_CODEC = 0x18
    COMMON_RET_AUDIO_CODEC = 0x19
    COMMON_NTFY_AUDIO_CODEC = 0x1B
    EQ_EBB_GET_PARAM = 0x56
    EQ_EBB_RET_PARAM = 0x57
    EQ_EBB_SET_PARAM = 0x58
    EQ_EBB_NTFY_PARAM = 0x59
    NC_ASM_GET_PARAM = 0x66
    NC_ASM_RET_PARAM = 0x67
    NC_ASM_SET_PARAM = 0x68
    NC_ASM_NTFY_PARAM = 0x69
    AUDIO_GET_PARAM = 0xE6
    AUDIO_RET_PARAM = 0xE7
    AUDIO_SET_PARAM = 0xE8
    AUDIO_NTFY_PARAM = 0xE9
    SYSTEM_GET_PARAM = 0xF6
    SYSTEM_RET_PARAM = 0xF7
    SYSTEM_SET_PARAM = 0xF8
    SYSTEM_NTFY_PARAM = 0xF9
    SYSTEM_GET_EXTENDED_PARAM = 0xFA
    SYSTEM_RET_EXTENDED_PARAM = 0xFB
    SYSTEM_SET_EXTENDED_PARAM = 0xFC
    SYSTEM_NTFY_EXTENDED_PARAM = 0xFD


class PayloadTypeV2(IntEnum):
    """Payload type codes for protocol revision 2."""

    POWER_GET_STATUS = 0x22
    POWER_RET_STATUS = 0x23
    POWER_NTFY_STATUS = 0x25
    POWER_GET_PARAM = 0x26
    POWER_RET_PARAM = 0x27
    POWER_SET_PARAM = 0x28
    POWER_NTFY_PARAM = 0x29
    EQEBB_GET_PARAM = 0x56
    EQEBB_RET_PARAM = 0x57
    EQEBB_SET_PARAM = 0x58
    EQEBB_NTFY_PARAM = 0x59
    NCASM_GET_PARAM = 0x66
    NCASM_RET_PARAM = 0x67
    NCASM_SET_PARAM = 0x68
    NCASM_NTFY_PARAM = 0x69
    AUDIO_GET_PARAM = 0xE6
    AUDIO_RET_PARAM = 0xE7
    AUDIO_SET_PARAM = 0xE8
    AUDIO_NTFY_PARAM = 0xE9
    SYSTEM_GET_PARAM = 0xF6
    SYSTEM_RET_PARAM = 0xF7
    SYSTEM_SET_PARAM = 0xF8
    SYSTEM_NTFY_PARAM = 0xF9
    SYSTEM_GET_EXT_PARAM = 0xFA
    SYSTEM_RET_EXT_PARAM = 0xFB
    SYSTEM_SET_EXT_PARAM = 0xFC
    SYSTEM_NTFY_EXT_PARAM = 0xFD


class VoicePayload(IntEnum):
    """COMMAND_2 group codes (voice prompts / voice guidance)."""

    GET_PARAM = 0x46
    RET_PARAM = 0x47
    SET_PARAM = 0x48
    NTFY_PARAM = 0x49


class FunctionType(IntEnum):
    """Function codes reported by CONNECT_RET_SUPPORT_FUNCTION (V1)."""

    NOISE_CANCELLING = 0x61
    NOISE_CANCELLING_AND_AMBIENT_SOUND_MODE = 0x62
    AMBIENT_SOUND_MODE = 0x63


class BatteryType(IntEnum):
    """Battery selector used in battery requests and replies."""

    SINGLE = 0x00
    """Headphones with a single cell."""

    DUAL = 0x01
    """Left and right earbuds."""

    CASE = 0x02
    """Charging case."""


class AmbientSoundMode(IntEnum):
    """Noise control modes."""

    OFF = 0
    """Noise cancelling and ambient sound both off."""

    ANC_ON = 1
    """Noise cancelling on."""

    AMBIENT = 2
    """Ambient sound (transparency) on."""

    WIND = 3
    """Wind noise reduction."""


class AutoAsmSensitivity(IntEnum):
    """Adaptive (auto ambient sound) sensitivity."""

    STANDARD = 0x00
    HIGH = 0x01
    LOW = 0x02


class Speak2ChatSensitivity(IntEnum):
    """Speak-to-chat voice detection sensitivity."""

    AUTO = 0x00
    HIGH = 0x01
    LOW = 0x02


class Speak2ChatTimeout(IntEnum):
    """Speak-to-chat mode-off timeout."""

    SHORT = 0x00
    STANDARD = 0x01
    LONG = 0x02
    OFF = 0x03


class EqualizerPreset(IntEnum):
    """Equalizer preset codes."""

    OFF = 0x00
    ROCK = 0x01
    POP = 0x02
    JAZZ = 0x03
    DANCE = 0x04
    EDM = 0x05
    R_AND_B_HIP_HOP = 0x06
    ACOUSTIC = 0x07
    BRIGHT = 0x10
    EXCITED = 0x11
    MELLOW = 0x12
    RELAXED = 0x13
    VOCAL = 0x14
    TREBLE = 0x15
    BASS = 0x16
    SPEECH = 0x17
    CUSTOM = 0xA0
    USER_SETTING1 = 0xA1
    USER_SETTING2 = 0xA2
    USER_SETTING3 = 0xA3
    USER_SETTING4 = 0xA4
    USER_SETTING5 = 0xA5
    MANUAL = 0xFF


class AutoPowerOff(IntEnum):
    """Automatic power off setting."""

    OFF = 0
    AFTER_5_MIN = 1
    AFTER_30_MIN = 2
    AFTER_1_HOUR = 3
    AFTER_3_HOUR = 4
    WHEN_TAKEN_OFF = 5


AUTO_POWER_OFF_BYTES: Final[dict[AutoPowerOff, tuple[int, int]]] = {
    AutoPowerOff.OFF: (0x11, 0x00),
    AutoPowerOff.AFTER_5_MIN: (0x00, 0x00),
    AutoPowerOff.AFTER_30_MIN: (0x01, 0x01),
    AutoPowerOff.AFTER_1_HOUR: (0x02, 0x02),
    AutoPowerOff.AFTER_3_HOUR: (0x03, 0x03),
    AutoPowerOff.WHEN_TAKEN_OFF: (0x10, 0x00),
}
"""Wire byte pair for each automatic power off setting."""


class ListeningMode(IntEnum):
    """Listening mode (V2)."""

    STANDARD = 0x00
    CINEMA = 0x01
    BGM = 0x02
    """Background music effect."""


class BgmDistance(IntEnum):
    """Virtual speaker distance in background music mode."""

    MY_ROOM = 0x00
    LIVING_ROOM = 0x01
    CAFE = 0x02


class AudioCodec(IntEnum):
    """Codec indicator values (V1)."""

    UNSETTLED = 0x00
    SBC = 0x01
    AAC = 0x02
    LDAC = 0x10
    APT_X = 0x20
    APT_X_HD = 0x21
    LC3 = 0x30
    OTHER = 0xFF


class DseeType(IntEnum):
    """Upscaling engine reported by the upscaling indicator (V1)."""

    DSEE_HX = 0x00
    DSEE = 0x01
    DSEE_HX_AI = 0x02
    DSEE_ULTIMATE = 0x03


class ResponseTag:
    """
    Logical tags correlating outbound requests with inbound replies.

    A message waiting on ACK completes on the bare ACK frame; every other
    tag completes when the matching reply arrives.
    """

    ACK: Final[str] = "ack"
    INIT: Final[str] = "init"
    CAPABILITY_INFO: Final[str] = "capabilityInfo"
    DEVICE_INFO_MODEL: Final[str] = "deviceInfoModel"
    DEVICE_INFO_FIRMWARE: Final[str] = "deviceInfoFirmware"
    DEVICE_INFO_SERIES_COLOR: Final[str] = "deviceInfoSeriesColor"
    SUPPORT_INFO: Final[str] = "supportInfo"
    BATTERY: Final[str] = "battery"
    AMBIENT_CONTROL: Final[str] = "ambientControl"
    SPEAK_TO_CHAT_ENABLE: Final[str] = "speakToChatEnable"
    SPEAK_TO_CHAT_CONFIG: Final[str] = "speakToChatConfig"
    EQUALIZER: Final[str] = "equalizer"
    VOICE_NOTIFICATIONS: Final[str] = "voiceNotifications"
    AUDIO_UPSAMPLING: Final[str] = "audioUpsampling"
    PAUSE_WHEN_TAKEN_OFF: Final[str] = "pauseWhenTakenOff"
    AUTOMATIC_POWER_OFF: Final[str] = "automaticPowerOff"
    LISTENING_MODE_BGM: Final[str] = "listeningModeBgm"
    LISTENING_MODE_NON_BGM: Final[str] = "listeningModeNonBgm"
    CODEC_INDICATOR: Final[str] = "codecIndicator"
    UPSCALING_INDICATOR: Final[str] = "upscalingIndicator"


class ParamV1:
    """Second payload byte selecting the parameter within a V1 group."""

    EQUALIZER: Final[int] = 0x01
    NC_ASM: Final[int] = 0x02
    AUDIO_UPSAMPLING: Final[int] = 0x02
    PAUSE_WHEN_TAKEN_OFF: Final[int] = 0x03
    AUTOMATIC_POWER_OFF: Final[int] = 0x04
    SPEAK_TO_CHAT: Final[int] = 0x05
    VOICE_NOTIFICATIONS: Final[int] = 0x01
    """COMMAND_2 voice prompt category; followed by a second 0x01."""

    NC_ASM_NOISE_CANCELLING: Final[int] = 0x01
    NC_ASM_DUAL: Final[int] = 0x02
    NC_ASM_AMBIENT_ONLY: Final[int] = 0x03
    """NC_ASM GET codes chosen from the reported support functions."""


class ParamV2:
    """Second payload byte selecting the parameter within a V2 group."""

    EQUALIZER: Final[int] = 0x00
    AUDIO_UPSAMPLING: Final[int] = 0x01
    LISTENING_MODE_BGM: Final[int] = 0x03
    LISTENING_MODE: Final[int] = 0x04
    PAUSE_WHEN_TAKEN_OFF: Final[int] = 0x01
    AUTOMATIC_POWER_OFF: Final[int] = 0x05
    SPEAK_TO_CHAT: Final[int] = 0x0C
    VOICE_GUIDANCE: Final[int] = 0x03

    NCASM_BASIC: Final[int] = 0x15
    NCASM_WIND: Final[int] = 0x17
    """Layout with the wind noise reduction byte."""

    NCASM_ADAPTIVE: Final[int] = 0x19
    """Layout with the adaptive (NA) flag and sensitivity."""

    NCASM_AMBIENT_ONLY: Final[int] = 0x22
    """Layout of models without noise cancelling."""


AMBIENT_LEVEL_MAX: Final[int] = 20
AMBIENT_LEVEL_DEFAULT: Final[int] = 10
"""Level assumed when the device reports one outside 0..AMBIENT_LEVEL_MAX."""

EQUALIZER_BAND_OFFSET: Final[dict[int, int]] = {6: 10, 10: 6}
"""Wire offset per band count: band value = raw byte - offset."""
