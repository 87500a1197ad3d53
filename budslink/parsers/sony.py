"""
Sony MDR payload decoder.

decode_frame() is a pure function: it takes the current SonyState, one
validated frame and the model's capability record, and returns the new
state plus the events to deliver. It never raises on device data; a
payload with the wrong length or an undefined enumeration value decodes
to no change.

response_tag() maps an inbound frame to the logical tag it completes in
the delivery queue and the handshake waiters.

Payload layouts (payload[0] is the payload type code):

    battery       [type, battery_type, level, charging, (level2, charging2)]
    NC/ASM (V1)   [type, 0x02, on, dual, mode, ?, voice, level]
    NC/ASM (V2)   [type, idx, ?, on, ambient, (wind), voice, level, (adaptive, sens)]
    equalizer     [type, param, preset, count, band * count]
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping

from budslink.models.capabilities import SonyCapabilities
from budslink.models.events import (
    AmbientSoundUpdate,
    AudioUpsamplingUpdate,
    AutoPowerOffUpdate,
    BatteryUpdate,
    BgmModeUpdate,
    CodecUpdate,
    DeviceEvent,
    DeviceInfoUpdate,
    EqualizerUpdate,
    ListeningModeUpdate,
    PauseWhenTakenOffUpdate,
    SpeakToChatConfigUpdate,
    SpeakToChatEnabledUpdate,
    UpscalingUpdate,
    VoiceNotificationsUpdate,
)
from budslink.models.state import BatteryCell, BatteryIndex, SonyState
from budslink.parsers.common import battery_cell, bool_from_byte, enum_or_none
from budslink.protocol.frames import Frame
from budslink.protocol.sony_constants import (
    AMBIENT_LEVEL_DEFAULT,
    AMBIENT_LEVEL_MAX,
    AUTO_POWER_OFF_BYTES,
    EQUALIZER_BAND_OFFSET,
    AmbientSoundMode,
    AudioCodec,
    AutoAsmSensitivity,
    BatteryType,
    BgmDistance,
    ConnectPayload,
    DeviceInfoType,
    DseeType,
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

logger = logging.getLogger(__name__)

Decoded = tuple[SonyState, list[DeviceEvent]]
PayloadHandler = Callable[[SonyState, bytes, SonyCapabilities], Decoded]

_AUTO_POWER_OFF_BY_BYTES = {pair: setting for setting, pair in AUTO_POWER_OFF_BYTES.items()}


def _unchanged(state: SonyState) -> Decoded:
    return state, []


# ===== Response tags =====

_CONNECT_TAGS: Mapping[int, str | Mapping[int, str]] = {
    ConnectPayload.RET_PROTOCOL_INFO: ResponseTag.INIT,
    ConnectPayload.RET_CAPABILITY_INFO: ResponseTag.CAPABILITY_INFO,
    ConnectPayload.RET_SUPPORT_FUNCTION: ResponseTag.SUPPORT_INFO,
    ConnectPayload.RET_DEVICE_INFO: {
        DeviceInfoType.MODEL_NAME: ResponseTag.DEVICE_INFO_MODEL,
        DeviceInfoType.FW_VERSION: ResponseTag.DEVICE_INFO_FIRMWARE,
        DeviceInfoType.SERIES_AND_COLOR: ResponseTag.DEVICE_INFO_SERIES_COLOR,
    },
}

_V1_TAGS: Mapping[int, str | Mapping[int, str]] = {
    PayloadTypeV1.COMMON_RET_BATTERY_LEVEL: ResponseTag.BATTERY,
    PayloadTypeV1.COMMON_NTFY_BATTERY_LEVEL: ResponseTag.BATTERY,
    PayloadTypeV1.NC_ASM_RET_PARAM: ResponseTag.AMBIENT_CONTROL,
    PayloadTypeV1.NC_ASM_NTFY_PARAM: ResponseTag.AMBIENT_CONTROL,
    PayloadTypeV1.EQ_EBB_RET_PARAM: ResponseTag.EQUALIZER,
    PayloadTypeV1.EQ_EBB_NTFY_PARAM: ResponseTag.EQUALIZER,
    PayloadTypeV1.COMMON_RET_AUDIO_CODEC: ResponseTag.CODEC_INDICATOR,
    PayloadTypeV1.COMMON_NTFY_AUDIO_CODEC: ResponseTag.CODEC_INDICATOR,
    PayloadTypeV1.COMMON_RET_UPSCALING_EFFECT: ResponseTag.UPSCALING_INDICATOR,
    PayloadTypeV1.COMMON_NTFY_UPSCALING_EFFECT: ResponseTag.UPSCALING_INDICATOR,
    PayloadTypeV1.AUDIO_RET_PARAM: {ParamV1.AUDIO_UPSAMPLING: ResponseTag.AUDIO_UPSAMPLING},
    PayloadTypeV1.AUDIO_NTFY_PARAM: {ParamV1.AUDIO_UPSAMPLING: ResponseTag.AUDIO_UPSAMPLING},
    PayloadTypeV1.SYSTEM_RET_PARAM: {
        ParamV1.PAUSE_WHEN_TAKEN_OFF: ResponseTag.PAUSE_WHEN_TAKEN_OFF,
        ParamV1.AUTOMATIC_POWER_OFF: ResponseTag.AUTOMATIC_POWER_OFF,
        ParamV1.SPEAK_TO_CHAT: ResponseTag.SPEAK_TO_CHAT_ENABLE,
    },
    PayloadTypeV1.SYSTEM_NTFY_PARAM: {
        ParamV1.PAUSE_WHEN_TAKEN_OFF: ResponseTag.PAUSE_WHEN_TAKEN_OFF,
        ParamV1.AUTOMATIC_POWER_OFF: ResponseTag.AUTOMATIC_POWER_OFF,
        ParamV1.SPEAK_TO_CHAT: ResponseTag.SPEAK_TO_CHAT_ENABLE,
    },
    PayloadTypeV1.SYSTEM_RET_EXTENDED_PARAM: {
        ParamV1.SPEAK_TO_CHAT: ResponseTag.SPEAK_TO_CHAT_CONFIG
    },
    PayloadTypeV1.SYSTEM_NTFY_EXTENDED_PARAM: {
        ParamV1.SPEAK_TO_CHAT: ResponseTag.SPEAK_TO_CHAT_CONFIG
    },
}

_V2_AUDIO_TAGS: Mapping[int, str] = {
    ParamV2.AUDIO_UPSAMPLING: ResponseTag.AUDIO_UPSAMPLING,
    ParamV2.LISTENING_MODE_BGM: ResponseTag.LISTENING_MODE_BGM,
    ParamV2.LISTENING_MODE: ResponseTag.LISTENING_MODE_NON_BGM,
}
_V2_POWER_TAGS: Mapping[int, str] = {
    ParamV2.PAUSE_WHEN_TAKEN_OFF: ResponseTag.PAUSE_WHEN_TAKEN_OFF,
    ParamV2.AUTOMATIC_POWER_OFF: ResponseTag.AUTOMATIC_POWER_OFF,
}

_V2_TAGS: Mapping[int, str | Mapping[int, str]] = {
    PayloadTypeV2.POWER_RET_STATUS: ResponseTag.BATTERY,
    PayloadTypeV2.POWER_NTFY_STATUS: ResponseTag.BATTERY,
    PayloadTypeV2.NCASM_RET_PARAM: ResponseTag.AMBIENT_CONTROL,
    PayloadTypeV2.NCASM_NTFY_PARAM: ResponseTag.AMBIENT_CONTROL,
    PayloadTypeV2.EQEBB_RET_PARAM: ResponseTag.EQUALIZER,
    PayloadTypeV2.EQEBB_NTFY_PARAM: ResponseTag.EQUALIZER,
    PayloadTypeV2.AUDIO_RET_PARAM: _V2_AUDIO_TAGS,
    PayloadTypeV2.AUDIO_NTFY_PARAM: _V2_AUDIO_TAGS,
    PayloadTypeV2.POWER_RET_PARAM: _V2_POWER_TAGS,
    PayloadTypeV2.POWER_NTFY_PARAM: _V2_POWER_TAGS,
    PayloadTypeV2.SYSTEM_RET_PARAM: {ParamV2.SPEAK_TO_CHAT: ResponseTag.SPEAK_TO_CHAT_ENABLE},
    PayloadTypeV2.SYSTEM_NTFY_PARAM: {ParamV2.SPEAK_TO_CHAT: ResponseTag.SPEAK_TO_CHAT_ENABLE},
    PayloadTypeV2.SYSTEM_RET_EXT_PARAM: {ParamV2.SPEAK_TO_CHAT: ResponseTag.SPEAK_TO_CHAT_CONFIG},
    PayloadTypeV2.SYSTEM_NTFY_EXT_PARAM: {ParamV2.SPEAK_TO_CHAT: ResponseTag.SPEAK_TO_CHAT_CONFIG},
}


def _lookup_tag(
    table: Mapping[int, str | Mapping[int, str]], payload: bytes
) -> str | None:
    entry = table.get(payload[0])
    if entry is None or isinstance(entry, str):
        return entry
    if len(payload) < 2:
        return None
    return entry.get(payload[1])


def response_tag(frame: Frame, revision: ProtocolRevision) -> str | None:
    """
    Find the logical tag an inbound frame completes.

    Args:
        frame: Validated inbound frame.
        revision: Protocol revision of the connected model.

    Returns:
        ResponseTag.ACK for a bare ACK, the matching reply tag for a
        known reply or notification, or None.

    Example:
        >>> frame = Frame(kind=MessageType.COMMAND_1, payload=bytes([0x01, 0x01, 0x00]))
        >>> response_tag(frame, ProtocolRevision.V1)
        'init'
    """
    if frame.kind == MessageType.ACK:
        return ResponseTag.ACK
    if not frame.payload:
        return None

    if frame.kind == MessageType.COMMAND_2:
        if frame.payload[0] in (VoicePayload.RET_PARAM, VoicePayload.NTFY_PARAM):
            return ResponseTag.VOICE_NOTIFICATIONS
        return None

    if frame.kind != MessageType.COMMAND_1:
        return None

    tag = _lookup_tag(_CONNECT_TAGS, frame.payload)
    if tag is not None:
        return tag
    table = _V1_TAGS if revision is ProtocolRevision.V1 else _V2_TAGS
    return _lookup_tag(table, frame.payload)


# ===== CONNECT group (both revisions) =====


def _protocol_info(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if len(payload) < 3:
        return state.model_copy(update={"init_complete": True}), []
    version = payload[1] << 8 | payload[2]
    logger.info("Protocol version %d.%d", payload[1], payload[2])
    return state.model_copy(update={"protocol_version": version, "init_complete": True}), []


def _length_prefixed_text(payload: bytes) -> str | None:
    if len(payload) < 3:
        return None
    length = payload[2]
    if len(payload) < 3 + length:
        return None
    return payload[3:3 + length].decode("utf-8", errors="replace")


def _device_info(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if len(payload) < 2:
        return _unchanged(state)

    info_type = payload[1]
    if info_type == DeviceInfoType.MODEL_NAME:
        name = _length_prefixed_text(payload)
        if name is None:
            return _unchanged(state)
        logger.info("Device model name: %s", name)
        return state.model_copy(update={"model_name": name}), [DeviceInfoUpdate(model_name=name)]

    if info_type == DeviceInfoType.FW_VERSION:
        version = _length_prefixed_text(payload)
        if version is None:
            return _unchanged(state)
        logger.info("Device firmware version: %s", version)
        return (
            state.model_copy(update={"firmware_version": version}),
            [DeviceInfoUpdate(firmware_version=version)],
        )

    if info_type == DeviceInfoType.SERIES_AND_COLOR and len(payload) >= 4:
        series, color = payload[2], payload[3]
        return (
            state.model_copy(update={"series": series, "color": color}),
            [DeviceInfoUpdate(series=series, color=color)],
        )

    return _unchanged(state)


def _support_function(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if len(payload) < 3:
        return _unchanged(state)
    count = payload[2]
    if len(payload) < 3 + count:
        return _unchanged(state)

    functions = frozenset(payload[3:3 + count])
    known = [f.name for f in FunctionType if f in functions]
    logger.info("Support functions: %s", ", ".join(known) if known else "none recognized")
    return state.model_copy(update={"support_functions": functions}), []


# ===== Shared layouts =====


def _battery(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    """
    Decode a battery reply or notification.

    A single or case reading goes to the case cell when the model has a
    case, else to the primary cell. A dual reading fills left and right,
    skipping a side whose level is 0 (bud not connected).
    """
    if len(payload) < 4:
        return _unchanged(state)

    battery_type = enum_or_none(BatteryType, payload[1])
    if battery_type is None:
        return _unchanged(state)

    cells: dict[int, BatteryCell] = {}
    if battery_type is BatteryType.DUAL:
        if payload[2] > 0:
            cells[BatteryIndex.PRIMARY] = battery_cell(payload[2], payload[3] == 0x01)
        if len(payload) >= 6 and payload[4] > 0:
            cells[BatteryIndex.RIGHT] = battery_cell(payload[4], payload[5] == 0x01)
    else:
        index = BatteryIndex.CASE if caps.battery_case else BatteryIndex.PRIMARY
        cells[index] = battery_cell(payload[2], payload[3] == 0x01)

    if not cells:
        return _unchanged(state)
    return state.with_battery(cells), [BatteryUpdate(cells)]  # type: ignore[return-value]


def _ambient_level(raw: int) -> int:
    return raw if 0 <= raw <= AMBIENT_LEVEL_MAX else AMBIENT_LEVEL_DEFAULT


def _ambient_result(
    state: SonyState,
    mode: AmbientSoundMode,
    focus: bool,
    level: int,
    adaptive: bool | None = None,
    sensitivity: AutoAsmSensitivity | None = None,
) -> Decoded:
    new_state = state.model_copy(
        update={
            "ambient_mode": mode,
            "focus_on_voice": focus,
            "ambient_level": level,
            "adaptive_enabled": adaptive,
            "adaptive_sensitivity": sensitivity,
        }
    )
    return new_state, [AmbientSoundUpdate(mode, focus, level, adaptive, sensitivity)]


def _equalizer(
    state: SonyState, payload: bytes, caps: SonyCapabilities, expected_bands: int
) -> Decoded:
    if len(payload) < 4:
        return _unchanged(state)

    preset = enum_or_none(EqualizerPreset, payload[2])
    if preset is None:
        return _unchanged(state)

    count = payload[3]
    if count != expected_bands or len(payload) != 4 + count:
        logger.debug(
            "Ignoring equalizer payload with %d bands (model has %d)", count, expected_bands
        )
        return _unchanged(state)

    offset = EQUALIZER_BAND_OFFSET[count]
    bands = tuple(raw - offset for raw in payload[4:4 + count])
    return (
        state.model_copy(update={"equalizer_preset": preset, "equalizer_bands": bands}),
        [EqualizerUpdate(preset, bands)],
    )


def _speak_to_chat_config(
    state: SonyState, sensitivity_raw: int, timeout_raw: int
) -> Decoded:
    sensitivity = enum_or_none(Speak2ChatSensitivity, sensitivity_raw)
    timeout = enum_or_none(Speak2ChatTimeout, timeout_raw)
    if sensitivity is None or timeout is None:
        return _unchanged(state)
    return (
        state.model_copy(
            update={"speak_to_chat_sensitivity": sensitivity, "speak_to_chat_timeout": timeout}
        ),
        [SpeakToChatConfigUpdate(sensitivity, timeout)],
    )


def _flag(
    state: SonyState,
    value: bool | None,
    field: str,
    event: type[DeviceEvent],
) -> Decoded:
    if value is None:
        return _unchanged(state)
    return state.model_copy(update={field: value}), [event(value)]  # type: ignore[call-arg]


def _auto_power_off(state: SonyState, pair: tuple[int, int]) -> Decoded:
    setting = _AUTO_POWER_OFF_BY_BYTES.get(pair)
    if setting is None:
        return _unchanged(state)
    return state.model_copy(update={"auto_power_off": setting}), [AutoPowerOffUpdate(setting)]


# ===== Revision 1 =====


def _v1_ambient(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if not caps.ambient_control_supported or len(payload) != 8:
        return _unchanged(state)

    enabled, layout, sub = payload[2], payload[3], payload[4]
    mode: AmbientSoundMode | None = None
    if enabled == 0x00:
        mode = AmbientSoundMode.OFF
    elif enabled == 0x01:
        if layout == 0x00:
            mode = AmbientSoundMode.AMBIENT if sub == 0x00 else AmbientSoundMode.ANC_ON
        elif layout == 0x02:
            if sub == 0x00:
                mode = AmbientSoundMode.AMBIENT
            elif sub == 0x01:
                mode = AmbientSoundMode.WIND
            else:
                mode = AmbientSoundMode.ANC_ON

    if mode is None:
        return _unchanged(state)
    return _ambient_result(state, mode, payload[6] == 0x01, _ambient_level(payload[7]))


def _v1_equalizer(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if not caps.equalizer_supported:
        return _unchanged(state)
    return _equalizer(state, payload, caps, caps.equalizer_bands)


def _v1_system(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if len(payload) < 4:
        return _unchanged(state)
    param = payload[1]

    if param == ParamV1.PAUSE_WHEN_TAKEN_OFF and caps.pause_when_taken_off:
        if len(payload) != 4:
            return _unchanged(state)
        return _flag(
            state, bool_from_byte(payload[3]), "pause_when_taken_off", PauseWhenTakenOffUpdate
        )

    if param == ParamV1.AUTOMATIC_POWER_OFF and caps.automatic_power_off:
        if len(payload) < 5:
            return _unchanged(state)
        return _auto_power_off(state, (payload[3], payload[4]))

    if param == ParamV1.SPEAK_TO_CHAT and caps.speak_to_chat_enabled:
        if len(payload) != 4 or payload[2] != 0x01:
            return _unchanged(state)
        return _flag(
            state, bool_from_byte(payload[3]), "speak_to_chat_enabled", SpeakToChatEnabledUpdate
        )

    return _unchanged(state)


def _v1_system_extended(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if not caps.speak_to_chat_config or len(payload) != 6 or payload[1] != ParamV1.SPEAK_TO_CHAT:
        return _unchanged(state)
    return _speak_to_chat_config(state, payload[3], payload[5])


def _v1_audio(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if (
        not caps.audio_upsampling
        or len(payload) != 4
        or payload[1] != ParamV1.AUDIO_UPSAMPLING
    ):
        return _unchanged(state)
    return _flag(state, bool_from_byte(payload[3]), "audio_upsampling", AudioUpsamplingUpdate)


def _v1_codec(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if not caps.codec_indicator or len(payload) < 3:
        return _unchanged(state)
    codec = enum_or_none(AudioCodec, payload[2])
    if codec is None:
        return _unchanged(state)
    return state.model_copy(update={"codec": codec}), [CodecUpdate(codec)]


def _v1_upscaling(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if not caps.upscaling_indicator or len(payload) < 4:
        return _unchanged(state)
    dsee = enum_or_none(DseeType, payload[2])
    if dsee is None:
        return _unchanged(state)
    shown = payload[3] != 0x00
    return (
        state.model_copy(update={"upscaling_type": dsee, "upscaling_shown": shown}),
        [UpscalingUpdate(dsee, shown)],
    )


def _v1_voice(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if not caps.voice_notifications or len(payload) != 4:
        return _unchanged(state)
    return _flag(
        state, bool_from_byte(payload[3]), "voice_notifications", VoiceNotificationsUpdate
    )


# ===== Revision 2 =====


def _v2_ambient(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    """
    Decode a V2 NC/ASM reply.

    The index byte selects the layout. The wind byte is only present on
    models with wind noise reduction; focus on voice and level sit at
    the end, followed by the adaptive flag and sensitivity on models
    with adaptive noise control.
    """
    if not caps.ambient_control_supported or not 6 <= len(payload) <= 9:
        return _unchanged(state)

    idx = payload[1]
    if idx not in (
        ParamV2.NCASM_BASIC,
        ParamV2.NCASM_WIND,
        ParamV2.NCASM_ADAPTIVE,
        ParamV2.NCASM_AMBIENT_ONLY,
    ):
        return _unchanged(state)

    adaptive = state.adaptive_enabled
    sensitivity = state.adaptive_sensitivity

    if payload[3] == 0x00:
        focus = bool(state.focus_on_voice)
        level = state.ambient_level if state.ambient_level is not None else AMBIENT_LEVEL_DEFAULT
        return _ambient_result(state, AmbientSoundMode.OFF, focus, level, adaptive, sensitivity)

    mode: AmbientSoundMode | None = None
    has_wind_byte = caps.wind_noise_reduction and idx in (
        ParamV2.NCASM_WIND,
        ParamV2.NCASM_ADAPTIVE,
    )
    if has_wind_byte:
        sub = payload[5]
        if sub in (0x03, 0x05):
            mode = AmbientSoundMode.WIND
        elif sub == 0x02:
            mode = AmbientSoundMode.ANC_ON if payload[4] == 0x00 else AmbientSoundMode.AMBIENT
    elif idx == ParamV2.NCASM_AMBIENT_ONLY:
        mode = AmbientSoundMode.AMBIENT
    else:
        mode = AmbientSoundMode.ANC_ON if payload[4] == 0x00 else AmbientSoundMode.AMBIENT

    if mode is None:
        return _unchanged(state)

    i = len(payload) - (4 if caps.ambient_sound_control_na else 2)
    focus = payload[i] == 0x01
    level = _ambient_level(payload[i + 1])

    if caps.ambient_sound_control_na and idx == ParamV2.NCASM_ADAPTIVE:
        flag = bool_from_byte(payload[-2])
        if flag is not None:
            adaptive = flag
        reported = enum_or_none(AutoAsmSensitivity, payload[-1])
        if reported is not None:
            sensitivity = reported

    return _ambient_result(state, mode, focus, level, adaptive, sensitivity)


def _v2_equalizer(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if not caps.equalizer_supported:
        return _unchanged(state)
    return _equalizer(state, payload, caps, caps.equalizer_bands)


def _v2_system(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if (
        not caps.speak_to_chat_enabled
        or len(payload) != 4
        or payload[1] != ParamV2.SPEAK_TO_CHAT
    ):
        return _unchanged(state)
    disabled = bool_from_byte(payload[2])
    return _flag(
        state,
        None if disabled is None else not disabled,
        "speak_to_chat_enabled",
        SpeakToChatEnabledUpdate,
    )


def _v2_system_extended(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if not caps.speak_to_chat_config or len(payload) < 4 or payload[1] != ParamV2.SPEAK_TO_CHAT:
        return _unchanged(state)
    return _speak_to_chat_config(state, payload[2], payload[3])


def _v2_audio(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if len(payload) < 3:
        return _unchanged(state)
    param = payload[1]

    if param == ParamV2.AUDIO_UPSAMPLING and caps.audio_upsampling:
        if len(payload) != 3:
            return _unchanged(state)
        return _flag(
            state, bool_from_byte(payload[2]), "audio_upsampling", AudioUpsamplingUpdate
        )

    if param == ParamV2.LISTENING_MODE_BGM and caps.listening_mode and len(payload) >= 4:
        distance = enum_or_none(BgmDistance, payload[3])
        if distance is None:
            return _unchanged(state)
        active = payload[2] == 0x00
        return (
            state.model_copy(update={"bgm_active": active, "bgm_distance": distance}),
            [BgmModeUpdate(active, distance)],
        )

    if param == ParamV2.LISTENING_MODE and caps.listening_mode:
        mode = enum_or_none(ListeningMode, payload[2])
        if mode not in (ListeningMode.STANDARD, ListeningMode.CINEMA):
            return _unchanged(state)
        return state.model_copy(update={"listening_mode": mode}), [ListeningModeUpdate(mode)]

    return _unchanged(state)


def _v2_power(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if len(payload) < 3:
        return _unchanged(state)
    param = payload[1]

    if param == ParamV2.PAUSE_WHEN_TAKEN_OFF and caps.pause_when_taken_off:
        if len(payload) != 3:
            return _unchanged(state)
        disabled = bool_from_byte(payload[2])
        return _flag(
            state,
            None if disabled is None else not disabled,
            "pause_when_taken_off",
            PauseWhenTakenOffUpdate,
        )

    if param == ParamV2.AUTOMATIC_POWER_OFF and caps.automatic_power_off and len(payload) >= 4:
        return _auto_power_off(state, (payload[2], payload[3]))

    return _unchanged(state)


def _v2_voice(state: SonyState, payload: bytes, caps: SonyCapabilities) -> Decoded:
    if (
        not caps.voice_notifications
        or len(payload) < 3
        or payload[1] != ParamV2.VOICE_GUIDANCE
    ):
        return _unchanged(state)
    disabled = bool_from_byte(payload[2])
    return _flag(
        state,
        None if disabled is None else not disabled,
        "voice_notifications",
        VoiceNotificationsUpdate,
    )


# ===== Dispatch =====

_CONNECT_HANDLERS: Mapping[int, PayloadHandler] = {
    ConnectPayload.RET_PROTOCOL_INFO: _protocol_info,
    ConnectPayload.RET_DEVICE_INFO: _device_info,
    ConnectPayload.RET_SUPPORT_FUNCTION: _support_function,
}

_V1_HANDLERS: Mapping[int, PayloadHandler] = {
    **_CONNECT_HANDLERS,
    PayloadTypeV1.COMMON_RET_BATTERY_LEVEL: _battery,
    PayloadTypeV1.COMMON_NTFY_BATTERY_LEVEL: _battery,
    PayloadTypeV1.NC_ASM_RET_PARAM: _v1_ambient,
    PayloadTypeV1.NC_ASM_NTFY_PARAM: _v1_ambient,
    PayloadTypeV1.EQ_EBB_RET_PARAM: _v1_equalizer,
    PayloadTypeV1.EQ_EBB_NTFY_PARAM: _v1_equalizer,
    PayloadTypeV1.SYSTEM_RET_PARAM: _v1_system,
    PayloadTypeV1.SYSTEM_NTFY_PARAM: _v1_system,
    PayloadTypeV1.SYSTEM_RET_EXTENDED_PARAM: _v1_system_extended,
    PayloadTypeV1.SYSTEM_NTFY_EXTENDED_PARAM: _v1_system_extended,
    PayloadTypeV1.AUDIO_RET_PARAM: _v1_audio,
    PayloadTypeV1.AUDIO_NTFY_PARAM: _v1_audio,
    PayloadTypeV1.COMMON_RET_AUDIO_CODEC: _v1_codec,
    PayloadTypeV1.COMMON_NTFY_AUDIO_CODEC: _v1_codec,
    PayloadTypeV1.COMMON_RET_UPSCALING_EFFECT: _v1_upscaling,
    PayloadTypeV1.COMMON_NTFY_UPSCALING_EFFECT: _v1_upscaling,
}

_V2_HANDLERS: Mapping[int, PayloadHandler] = {
    **_CONNECT_HANDLERS,
    PayloadTypeV2.POWER_RET_STATUS: _battery,
    PayloadTypeV2.POWER_NTFY_STATUS: _battery,
    PayloadTypeV2.NCASM_RET_PARAM: _v2_ambient,
    PayloadTypeV2.NCASM_NTFY_PARAM: _v2_ambient,
    PayloadTypeV2.EQEBB_RET_PARAM: _v2_equalizer,
    PayloadTypeV2.EQEBB_NTFY_PARAM: _v2_equalizer,
    PayloadTypeV2.SYSTEM_RET_PARAM: _v2_system,
    PayloadTypeV2.SYSTEM_NTFY_PARAM: _v2_system,
    PayloadTypeV2.SYSTEM_RET_EXT_PARAM: _v2_system_extended,
    PayloadTypeV2.SYSTEM_NTFY_EXT_PARAM: _v2_system_extended,
    PayloadTypeV2.AUDIO_RET_PARAM: _v2_audio,
    PayloadTypeV2.AUDIO_NTFY_PARAM: _v2_audio,
    PayloadTypeV2.POWER_RET_PARAM: _v2_power,
    PayloadTypeV2.POWER_NTFY_PARAM: _v2_power,
}

_VOICE_HANDLERS: Mapping[ProtocolRevision, PayloadHandler] = {
    ProtocolRevision.V1: _v1_voice,
    ProtocolRevision.V2: _v2_voice,
}


def decode_frame(state: SonyState, frame: Frame, caps: SonyCapabilities) -> Decoded:
    """
    Decode one inbound frame.

    Args:
        state: Current device state.
        frame: Validated inbound frame.
        caps: Capability record of the connected model.

    Returns:
        Tuple of (new state, events). ACK frames and unknown payloads
        return the state unchanged with no events.
    """
    if not frame.payload:
        return _unchanged(state)

    handler: PayloadHandler | None = None
    if frame.kind == MessageType.COMMAND_1:
        table = _V1_HANDLERS if caps.revision is ProtocolRevision.V1 else _V2_HANDLERS
        handler = table.get(frame.payload[0])
    elif frame.kind == MessageType.COMMAND_2:
        if frame.payload[0] in (VoicePayload.RET_PARAM, VoicePayload.NTFY_PARAM):
            handler = _VOICE_HANDLERS[caps.revision]

    if handler is None:
        logger.debug("Unhandled payload: %s", frame.payload.hex(" "))
        return _unchanged(state)
    return handler(state, frame.payload, caps)
