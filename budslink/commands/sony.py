"""
Sony MDR command builders.

Every builder returns a SonyCommand (message type, payload, tag) ready
for the delivery queue, or None when the model does not have the
feature. Requests carry the tag of the reply that completes them; set
commands carry ResponseTag.ACK and complete on the bare acknowledgement.

Builders are pure. The session decides when to send and applies any
local state change.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

from budslink.exceptions import ProtocolError
from budslink.models.capabilities import SonyCapabilities
from budslink.models.state import SonyState
from budslink.protocol.sony_constants import (
    AMBIENT_LEVEL_DEFAULT,
    AMBIENT_LEVEL_MAX,
    AUTO_POWER_OFF_BYTES,
    EQUALIZER_BAND_OFFSET,
    FIXED_VALUE,
    AmbientSoundMode,
    AutoAsmSensitivity,
    AutoPowerOff,
    BatteryType,
    BgmDistance,
    ConnectPayload,
    DeviceInfoType,
    EqualizerPreset,
    FunctionType,
    ListeningMode,
    MessageType,
    ParamV1,
    ParamV2,
    PayloadTypeV1,
    PayloadTypeV2,
    ProtocolRevision,
    ResponseTag,
    Speak2ChatSensitivity,
    Speak2ChatTimeout,
    VoicePayload,
)


class SonyCommand(NamedTuple):
    """One outbound message and the tag that completes it."""

    kind: MessageType
    payload: bytes
    tag: str

    @property
    def is_request(self) -> bool:
        """True if the message waits for a reply rather than an ACK."""
        return self.tag != ResponseTag.ACK


def _request(
    payload: Sequence[int], tag: str, kind: MessageType = MessageType.COMMAND_1
) -> SonyCommand:
    return SonyCommand(kind, bytes(payload), tag)


def _command(payload: Sequence[int], kind: MessageType = MessageType.COMMAND_1) -> SonyCommand:
    return SonyCommand(kind, bytes(payload), ResponseTag.ACK)


def _is_v1(caps: SonyCapabilities) -> bool:
    return caps.revision is ProtocolRevision.V1


# ===== CONNECT group =====

_DEVICE_INFO_TAGS = {
    DeviceInfoType.MODEL_NAME: ResponseTag.DEVICE_INFO_MODEL,
    DeviceInfoType.FW_VERSION: ResponseTag.DEVICE_INFO_FIRMWARE,
    DeviceInfoType.SERIES_AND_COLOR: ResponseTag.DEVICE_INFO_SERIES_COLOR,
}


def protocol_info_request() -> SonyCommand:
    """Opening message of the handshake."""
    return _request([ConnectPayload.GET_PROTOCOL_INFO, FIXED_VALUE], ResponseTag.INIT)


def support_function_request() -> SonyCommand:
    return _request([ConnectPayload.GET_SUPPORT_FUNCTION, FIXED_VALUE], ResponseTag.SUPPORT_INFO)


def capability_info_request() -> SonyCommand:
    return _request(
        [ConnectPayload.GET_CAPABILITY_INFO, FIXED_VALUE], ResponseTag.CAPABILITY_INFO
    )


def device_info_request(info_type: DeviceInfoType) -> SonyCommand:
    return _request([ConnectPayload.GET_DEVICE_INFO, info_type], _DEVICE_INFO_TAGS[info_type])


def device_info_requests(caps: SonyCapabilities) -> list[SonyCommand]:
    """Capability info, model name, firmware version, series and color."""
    if not caps.device_info:
        return []
    return [capability_info_request()] + [device_info_request(t) for t in DeviceInfoType]


# ===== Requests =====


def battery_request(caps: SonyCapabilities, battery_type: BatteryType) -> SonyCommand:
    code = (
        PayloadTypeV1.COMMON_GET_BATTERY_LEVEL
        if _is_v1(caps)
        else PayloadTypeV2.POWER_GET_STATUS
    )
    return _request([code, battery_type], ResponseTag.BATTERY)


def v1_ambient_code(support_functions: frozenset[int]) -> int | None:
    """
    Pick the V1 NC/ASM request code from the reported support functions.

    Example:
        >>> v1_ambient_code(frozenset({0x62}))
        2
        >>> v1_ambient_code(frozenset()) is None
        True
    """
    nc = bool(
        support_functions
        & {FunctionType.NOISE_CANCELLING, FunctionType.NOISE_CANCELLING_AND_AMBIENT_SOUND_MODE}
    )
    asm = bool(
        support_functions
        & {FunctionType.AMBIENT_SOUND_MODE, FunctionType.NOISE_CANCELLING_AND_AMBIENT_SOUND_MODE}
    )
    if nc and asm:
        return ParamV1.NC_ASM_DUAL
    if asm:
        return ParamV1.NC_ASM_AMBIENT_ONLY
    if nc:
        return ParamV1.NC_ASM_NOISE_CANCELLING
    return None


def v2_ambient_index(caps: SonyCapabilities) -> int:
    """NC/ASM layout index used by a V2 model."""
    if caps.ambient_sound_control_na:
        return ParamV2.NCASM_ADAPTIVE
    if caps.wind_noise_reduction or caps.ambient_sound_control2:
        return ParamV2.NCASM_WIND
    return ParamV2.NCASM_BASIC


def ambient_request(caps: SonyCapabilities, state: SonyState) -> SonyCommand | None:
    if not caps.ambient_control_supported:
        return None
    if _is_v1(caps):
        code = v1_ambient_code(state.support_functions)
        if code is None:
            return None
        return _request([PayloadTypeV1.NC_ASM_GET_PARAM, code], ResponseTag.AMBIENT_CONTROL)
    return _request(
        [PayloadTypeV2.NCASM_GET_PARAM, v2_ambient_index(caps)], ResponseTag.AMBIENT_CONTROL
    )


def speak_to_chat_enabled_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.speak_to_chat_enabled:
        return None
    if _is_v1(caps):
        payload = [PayloadTypeV1.SYSTEM_GET_PARAM, ParamV1.SPEAK_TO_CHAT]
    else:
        payload = [PayloadTypeV2.SYSTEM_GET_PARAM, ParamV2.SPEAK_TO_CHAT]
    return _request(payload, ResponseTag.SPEAK_TO_CHAT_ENABLE)


def speak_to_chat_config_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.speak_to_chat_config:
        return None
    if _is_v1(caps):
        payload = [PayloadTypeV1.SYSTEM_GET_EXTENDED_PARAM, ParamV1.SPEAK_TO_CHAT]
    else:
        payload = [PayloadTypeV2.SYSTEM_GET_EXT_PARAM, ParamV2.SPEAK_TO_CHAT]
    return _request(payload, ResponseTag.SPEAK_TO_CHAT_CONFIG)


def equalizer_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.equalizer_supported:
        return None
    if _is_v1(caps):
        payload = [PayloadTypeV1.EQ_EBB_GET_PARAM, ParamV1.EQUALIZER]
    else:
        payload = [PayloadTypeV2.EQEBB_GET_PARAM, ParamV2.EQUALIZER]
    return _request(payload, ResponseTag.EQUALIZER)


def voice_notifications_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.voice_notifications:
        return None
    if _is_v1(caps):
        payload = [VoicePayload.GET_PARAM, ParamV1.VOICE_NOTIFICATIONS, 0x01]
    else:
        payload = [VoicePayload.GET_PARAM, ParamV2.VOICE_GUIDANCE]
    return _request(payload, ResponseTag.VOICE_NOTIFICATIONS, MessageType.COMMAND_2)


def audio_upsampling_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.audio_upsampling:
        return None
    if _is_v1(caps):
        payload = [PayloadTypeV1.AUDIO_GET_PARAM, ParamV1.AUDIO_UPSAMPLING]
    else:
        payload = [PayloadTypeV2.AUDIO_GET_PARAM, ParamV2.AUDIO_UPSAMPLING]
    return _request(payload, ResponseTag.AUDIO_UPSAMPLING)


def pause_when_taken_off_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.pause_when_taken_off:
        return None
    if _is_v1(caps):
        payload = [PayloadTypeV1.SYSTEM_GET_PARAM, ParamV1.PAUSE_WHEN_TAKEN_OFF]
    else:
        payload = [PayloadTypeV2.POWER_GET_PARAM, ParamV2.PAUSE_WHEN_TAKEN_OFF]
    return _request(payload, ResponseTag.PAUSE_WHEN_TAKEN_OFF)


def auto_power_off_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.automatic_power_off:
        return None
    if _is_v1(caps):
        payload = [PayloadTypeV1.SYSTEM_GET_PARAM, ParamV1.AUTOMATIC_POWER_OFF]
    else:
        payload = [PayloadTypeV2.POWER_GET_PARAM, ParamV2.AUTOMATIC_POWER_OFF]
    return _request(payload, ResponseTag.AUTOMATIC_POWER_OFF)


def listening_mode_requests(caps: SonyCapabilities) -> list[SonyCommand]:
    """Standard/cinema mode first, then the background music state."""
    if not caps.listening_mode or _is_v1(caps):
        return []
    return [
        _request(
            [PayloadTypeV2.AUDIO_GET_PARAM, ParamV2.LISTENING_MODE],
            ResponseTag.LISTENING_MODE_NON_BGM,
        ),
        _request(
            [PayloadTypeV2.AUDIO_GET_PARAM, ParamV2.LISTENING_MODE_BGM],
            ResponseTag.LISTENING_MODE_BGM,
        ),
    ]


def codec_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.codec_indicator or not _is_v1(caps):
        return None
    return _request(
        [PayloadTypeV1.COMMON_GET_AUDIO_CODEC, FIXED_VALUE], ResponseTag.CODEC_INDICATOR
    )


def upscaling_request(caps: SonyCapabilities) -> SonyCommand | None:
    if not caps.upscaling_indicator or not _is_v1(caps):
        return None
    return _request(
        [PayloadTypeV1.COMMON_GET_UPSCALING_EFFECT, FIXED_VALUE], ResponseTag.UPSCALING_INDICATOR
    )


def initial_state_requests(caps: SonyCapabilities, state: SonyState) -> list[SonyCommand]:
    """
    One request per feature the model supports, in handshake order.

    Args:
        caps: Capability record of the connected model.
        state: State after the support functions were recorded.

    Returns:
        Requests to enqueue once the handshake has completed.
    """
    requests: list[SonyCommand | None] = []
    if caps.battery_single:
        requests.append(battery_request(caps, BatteryType.SINGLE))
    if caps.battery_dual:
        requests.append(battery_request(caps, BatteryType.DUAL))
    if caps.battery_case:
        requests.append(battery_request(caps, BatteryType.CASE))

    requests += [
        speak_to_chat_config_request(caps),
        speak_to_chat_enabled_request(caps),
        equalizer_request(caps),
        voice_notifications_request(caps),
        audio_upsampling_request(caps),
        pause_when_taken_off_request(caps),
        auto_power_off_request(caps),
        ambient_request(caps, state),
    ]
    requests += listening_mode_requests(caps)
    requests += [codec_request(caps), upscaling_request(caps)]
    return [r for r in requests if r is not None]


# ===== Set commands =====


def _check_level(level: int) -> int:
    if not 0 <= level <= AMBIENT_LEVEL_MAX:
        raise ProtocolError(f"Ambient level must be 0-{AMBIENT_LEVEL_MAX}, got {level}")
    return level


def set_ambient_sound_control(
    caps: SonyCapabilities,
    mode: AmbientSoundMode,
    focus_on_voice: bool = False,
    level: int = AMBIENT_LEVEL_DEFAULT,
    adaptive: bool = False,
    sensitivity: AutoAsmSensitivity = AutoAsmSensitivity.STANDARD,
) -> SonyCommand | None:
    """
    Build the NC/ASM set command.

    Args:
        caps: Capability record of the connected model.
        mode: Target noise control mode.
        focus_on_voice: Focus on voice while in ambient sound mode.
        level: Ambient sound level, 0-20.
        adaptive: Adaptive ambient sound (models with adaptive NC only).
        sensitivity: Adaptive sensitivity (models with adaptive NC only).

    Returns:
        The command, or None if the model has no noise control.

    Raises:
        ProtocolError: If the level is out of range.
    """
    if not caps.ambient_control_supported:
        return None
    _check_level(level)
    off = mode is AmbientSoundMode.OFF

    if _is_v1(caps):
        if caps.wind_noise_reduction:
            mode_code = {AmbientSoundMode.ANC_ON: 2, AmbientSoundMode.WIND: 1}.get(mode, 0)
        else:
            mode_code = 1 if mode is AmbientSoundMode.ANC_ON else 0
        attenuation = level if mode in (AmbientSoundMode.OFF, AmbientSoundMode.AMBIENT) else 0
        return _command(
            [
                PayloadTypeV1.NC_ASM_SET_PARAM,
                ParamV1.NC_ASM,
                0x00 if off else 0x11,
                0x01 if caps.wind_noise_reduction else 0x02,
                mode_code,
                0x01,
                int(focus_on_voice),
                attenuation,
            ]
        )

    payload = [
        PayloadTypeV2.NCASM_SET_PARAM,
        v2_ambient_index(caps),
        0x01,
        0x00 if off else 0x01,
        0x01 if mode is AmbientSoundMode.AMBIENT else 0x00,
    ]
    if caps.wind_noise_reduction:
        payload.append(0x03 if mode is AmbientSoundMode.WIND else 0x02)
    payload += [int(focus_on_voice), level]
    if caps.ambient_sound_control_na:
        payload += [int(adaptive), sensitivity]
    return _command(payload)


def set_speak_to_chat_enabled(caps: SonyCapabilities, enabled: bool) -> SonyCommand | None:
    if not caps.speak_to_chat_enabled:
        return None
    if _is_v1(caps):
        return _command(
            [PayloadTypeV1.SYSTEM_SET_PARAM, ParamV1.SPEAK_TO_CHAT, 0x01, int(enabled)]
        )
    return _command(
        [PayloadTypeV2.SYSTEM_SET_PARAM, ParamV2.SPEAK_TO_CHAT, 0x00 if enabled else 0x01, 0x01]
    )


def set_speak_to_chat_config(
    caps: SonyCapabilities,
    sensitivity: Speak2ChatSensitivity,
    timeout: Speak2ChatTimeout,
) -> SonyCommand | None:
    if not caps.speak_to_chat_config:
        return None
    if _is_v1(caps):
        return _command(
            [
                PayloadTypeV1.SYSTEM_SET_EXTENDED_PARAM,
                ParamV1.SPEAK_TO_CHAT,
                0x00,
                sensitivity,
                0x00,
                timeout,
            ]
        )
    return _command(
        [PayloadTypeV2.SYSTEM_SET_EXT_PARAM, ParamV2.SPEAK_TO_CHAT, sensitivity, timeout]
    )


def set_equalizer_preset(caps: SonyCapabilities, preset: EqualizerPreset) -> SonyCommand | None:
    if not caps.equalizer_supported:
        return None
    if _is_v1(caps):
        return _command([PayloadTypeV1.EQ_EBB_SET_PARAM, ParamV1.EQUALIZER, preset, 0x00])
    return _command([PayloadTypeV2.EQEBB_SET_PARAM, ParamV2.EQUALIZER, preset, 0x00])


def set_equalizer_bands(caps: SonyCapabilities, bands: Sequence[int]) -> SonyCommand | None:
    """
    Build a custom equalizer command.

    Args:
        caps: Capability record of the connected model.
        bands: One value per band; the range is +/- the band offset
            (10 for six-band models, 6 for ten-band models).

    Returns:
        The command, or None if the model has no equalizer.

    Raises:
        ProtocolError: If the band count does not match the model or a
            value is out of range.
    """
    if not caps.equalizer_supported:
        return None
    count = caps.equalizer_bands
    if len(bands) != count:
        raise ProtocolError(f"{caps.display_name} has {count} equalizer bands, got {len(bands)}")
    offset = EQUALIZER_BAND_OFFSET[count]
    for value in bands:
        if not -offset <= value <= offset:
            raise ProtocolError(f"Equalizer band value must be -{offset}..{offset}, got {value}")

    if _is_v1(caps):
        header = [PayloadTypeV1.EQ_EBB_SET_PARAM, ParamV1.EQUALIZER, EqualizerPreset.MANUAL]
    else:
        header = [PayloadTypeV2.EQEBB_SET_PARAM, ParamV2.EQUALIZER, EqualizerPreset.CUSTOM]
    return _command(header + [count] + [value + offset for value in bands])


def set_voice_notifications(caps: SonyCapabilities, enabled: bool) -> SonyCommand | None:
    if not caps.voice_notifications:
        return None
    if _is_v1(caps):
        payload = [VoicePayload.SET_PARAM, ParamV1.VOICE_NOTIFICATIONS, 0x01, int(enabled)]
    else:
        payload = [VoicePayload.SET_PARAM, ParamV2.VOICE_GUIDANCE, 0x00 if enabled else 0x01]
    return _command(payload, MessageType.COMMAND_2)


def set_audio_upsampling(caps: SonyCapabilities, enabled: bool) -> SonyCommand | None:
    if not caps.audio_upsampling:
        return None
    if _is_v1(caps):
        return _command(
            [PayloadTypeV1.AUDIO_SET_PARAM, ParamV1.AUDIO_UPSAMPLING, 0x00, int(enabled)]
        )
    return _command([PayloadTypeV2.AUDIO_SET_PARAM, ParamV2.AUDIO_UPSAMPLING, int(enabled)])


def set_pause_when_taken_off(caps: SonyCapabilities, enabled: bool) -> SonyCommand | None:
    if not caps.pause_when_taken_off:
        return None
    if _is_v1(caps):
        return _command(
            [PayloadTypeV1.SYSTEM_SET_PARAM, ParamV1.PAUSE_WHEN_TAKEN_OFF, 0x00, int(enabled)]
        )
    return _command(
        [PayloadTypeV2.POWER_SET_PARAM, ParamV2.PAUSE_WHEN_TAKEN_OFF, 0x00 if enabled else 0x01]
    )


def set_auto_power_off(caps: SonyCapabilities, setting: AutoPowerOff) -> SonyCommand | None:
    if not caps.automatic_power_off:
        return None
    first, second = AUTO_POWER_OFF_BYTES[setting]
    if _is_v1(caps):
        return _command(
            [PayloadTypeV1.SYSTEM_SET_PARAM, ParamV1.AUTOMATIC_POWER_OFF, 0x01, first, second]
        )
    return _command([PayloadTypeV2.POWER_SET_PARAM, ParamV2.AUTOMATIC_POWER_OFF, first, second])


def set_listening_mode(
    caps: SonyCapabilities,
    state: SonyState,
    mode: ListeningMode,
    distance: BgmDistance = BgmDistance.MY_ROOM,
) -> list[SonyCommand]:
    """
    Build the commands that switch the listening mode.

    Background music mode is a separate switch on the device: selecting
    BGM turns it on, and leaving BGM for STANDARD turns it off before the
    standard/cinema mode is set.

    Args:
        caps: Capability record of the connected model.
        state: Current state (whether BGM is active).
        mode: Target mode.
        distance: Virtual speaker distance for BGM.

    Returns:
        Zero, one or two commands.
    """
    if not caps.listening_mode or _is_v1(caps):
        return []

    bgm = mode is ListeningMode.BGM
    commands: list[SonyCommand] = []
    if bgm or (state.bgm_active and mode is ListeningMode.STANDARD):
        commands.append(
            _command(
                [
                    PayloadTypeV2.AUDIO_SET_PARAM,
                    ParamV2.LISTENING_MODE_BGM,
                    0x00 if bgm else 0x01,
                    distance,
                ]
            )
        )
    if not bgm:
        commands.append(
            _command([PayloadTypeV2.AUDIO_SET_PARAM, ParamV2.LISTENING_MODE, mode])
        )
    return commands
