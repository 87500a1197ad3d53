"""
AirPods / Beats payload decoder.

Frames come from AppleFrameCodec: Frame.kind is a MessageKind and
Frame.payload holds the bytes after the matched prefix. Setting and ear
detection events are only emitted when the value actually changes, since
the device repeats them freely.
"""

from __future__ import annotations

import logging
from typing import Any

from budslink.models.capabilities import AppleCapabilities
from budslink.models.events import (
    AdaptiveLevelUpdate,
    AncModeUpdate,
    AwarenessDataUpdate,
    AwarenessModeUpdate,
    BatteryUpdate,
    DeviceEvent,
    EarStateUpdate,
    PressControlUpdate,
)
from budslink.models.state import AppleState, BatteryCell, BatteryIndex
from budslink.parsers.common import battery_cell, enum_or_none
from budslink.protocol.apple_constants import (
    ADAPTIVE_LEVEL_RANGE,
    AWARENESS_ATTENUATED_MAX,
    AWARENESS_LEVEL_RANGE,
    CHARGING_BIT,
    TONE_VOLUME_RANGE,
    AppleLengths,
    AwarenessMode,
    BatteryType,
    ControlId,
    EarDetection,
    ListeningMode,
    MessageKind,
    PressDuration,
    PressSpeed,
    SwitchValue,
    VolumeSwipeInterval,
)
from budslink.protocol.frames import Frame

logger = logging.getLogger(__name__)

Decoded = tuple[AppleState, list[DeviceEvent]]

_CELL_INDEX = {
    BatteryType.SINGLE: BatteryIndex.PRIMARY,
    BatteryType.LEFT: BatteryIndex.PRIMARY,
    BatteryType.RIGHT: BatteryIndex.RIGHT,
    BatteryType.CASE: BatteryIndex.CASE,
}


def _battery(state: AppleState, payload: bytes, caps: AppleCapabilities) -> Decoded:
    """
    Decode a battery notification.

    The packet is always the same size; the count byte says how many of
    the 5-byte records ([type, 0x01, level, status, 0x01]) are valid.
    """
    if not payload:
        return state, []
    count = payload[0]
    if not 1 <= count <= 3:
        return state, []

    stride = AppleLengths.BATTERY_RECORD
    cells: dict[int, BatteryCell] = {}
    for i in range(count):
        record = payload[1 + i * stride:1 + (i + 1) * stride]
        if len(record) < 4:
            break
        cell_type = enum_or_none(BatteryType, record[0])
        if cell_type is None:
            continue
        cells[_CELL_INDEX[cell_type]] = battery_cell(record[2], bool(record[3] & CHARGING_BIT))

    if not cells:
        return state, []
    return state.with_battery(cells), [BatteryUpdate(cells)]  # type: ignore[return-value]


def _ear(state: AppleState, payload: bytes, caps: AppleCapabilities) -> Decoded:
    if len(payload) < 2:
        return state, []
    bud1 = enum_or_none(EarDetection, payload[0])
    bud2 = enum_or_none(EarDetection, payload[1])
    if bud1 is None or bud2 is None:
        return state, []
    if bud1 == state.bud1 and bud2 == state.bud2:
        return state, []
    return state.model_copy(update={"bud1": bud1, "bud2": bud2}), [EarStateUpdate(bud1, bud2)]


def _changed(
    state: AppleState, field: str, value: Any, event: DeviceEvent
) -> Decoded:
    if getattr(state, field) == value:
        return state, []
    return state.model_copy(update={field: value}), [event]


def _control(state: AppleState, payload: bytes, caps: AppleCapabilities) -> Decoded:
    if len(payload) < 2:
        return state, []
    setting, raw = payload[0], payload[1]

    if setting == ControlId.LISTENING_MODE:
        mode = enum_or_none(ListeningMode, raw)
        if mode is None or mode not in caps.listening_modes:
            return state, []
        return _changed(state, "listening_mode", mode, AncModeUpdate(mode))

    if setting == ControlId.ADAPTIVE_LEVEL:
        if not caps.adaptive_supported or raw not in ADAPTIVE_LEVEL_RANGE:
            return state, []
        return _changed(state, "adaptive_level", raw, AdaptiveLevelUpdate(raw))

    if setting == ControlId.CONVERSATION_AWARENESS:
        mode = enum_or_none(AwarenessMode, raw)
        if not caps.awareness_supported or mode is None:
            return state, []
        return _changed(state, "awareness_mode", mode, AwarenessModeUpdate(mode))

    if setting == ControlId.PRESS_SPEED and caps.press_controls:
        speed = enum_or_none(PressSpeed, raw)
        if speed is not None:
            return _changed(state, "press_speed", speed, PressControlUpdate(setting, speed))
    elif setting == ControlId.PRESS_DURATION and caps.press_controls:
        duration = enum_or_none(PressDuration, raw)
        if duration is not None:
            return _changed(
                state, "press_duration", duration, PressControlUpdate(setting, duration)
            )
    elif setting == ControlId.TONE_VOLUME and caps.tone_volume:
        if raw in TONE_VOLUME_RANGE:
            return _changed(state, "tone_volume", raw, PressControlUpdate(setting, raw))
    elif setting == ControlId.VOLUME_SWIPE_INTERVAL and caps.volume_swipe:
        interval = enum_or_none(VolumeSwipeInterval, raw)
        if interval is not None:
            return _changed(
                state, "volume_swipe_interval", interval, PressControlUpdate(setting, interval)
            )
    elif setting == ControlId.VOLUME_SWIPE_MODE and caps.volume_swipe:
        switch = enum_or_none(SwitchValue, raw)
        if switch is not None:
            return _changed(
                state,
                "volume_swipe_enabled",
                switch is SwitchValue.ON,
                PressControlUpdate(setting, switch),
            )

    return state, []


def _awareness_data(state: AppleState, payload: bytes, caps: AppleCapabilities) -> Decoded:
    if not caps.awareness_supported or not payload:
        return state, []
    level = payload[0]
    if level not in AWARENESS_LEVEL_RANGE:
        return state, []
    attenuated = level <= AWARENESS_ATTENUATED_MAX
    return (
        state.model_copy(update={"awareness_attenuated": attenuated}),
        [AwarenessDataUpdate(attenuated)],
    )


def decode_frame(state: AppleState, frame: Frame, caps: AppleCapabilities) -> Decoded:
    """
    Decode one inbound AAP message.

    Handshake and features acknowledgements only update the session
    flags; they carry no events.

    Args:
        state: Current device state.
        frame: Frame produced by AppleFrameCodec.
        caps: Capability record of the connected model.

    Returns:
        Tuple of (new state, events).
    """
    kind = frame.kind
    if kind == MessageKind.HANDSHAKE_ACK:
        logger.debug("Handshake acknowledged")
        return state.model_copy(update={"handshake_acked": True}), []
    if kind == MessageKind.FEATURES_ACK:
        logger.debug("Specific features acknowledged")
        return state.model_copy(update={"features_acked": True}), []
    if kind == MessageKind.BATTERY:
        return _battery(state, frame.payload, caps)
    if kind == MessageKind.EAR_DETECTION:
        return _ear(state, frame.payload, caps)
    if kind == MessageKind.CONTROL:
        return _control(state, frame.payload, caps)
    if kind == MessageKind.AWARENESS_DATA:
        return _awareness_data(state, frame.payload, caps)
    return state, []
