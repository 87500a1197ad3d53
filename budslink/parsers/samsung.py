"""
Samsung Galaxy Buds payload decoder.

Status (0x60) and extended status (0x61) frames carry the battery
levels, the charging bitmask, the ear detection byte and (extended only)
the noise control mode. Byte offsets differ per model and come from the
capability record.
"""

from __future__ import annotations

import logging

from budslink.models.capabilities import SamsungBatteryOffsets, SamsungCapabilities
from budslink.models.events import AncModeUpdate, BatteryUpdate, DeviceEvent, EarStateUpdate
from budslink.models.state import BatteryCell, BatteryIndex, BatteryStatus, SamsungState
from budslink.parsers.common import enum_or_none
from budslink.protocol.frames import Frame
from budslink.protocol.samsung_constants import (
    CASE_LEVEL_UNKNOWN,
    ChargingBits,
    EarState,
    LegacyEarState,
    MessageId,
    NoiseControlMode,
)

logger = logging.getLogger(__name__)

Decoded = tuple[SamsungState, list[DeviceEvent]]

_STATUS_FRAMES = (MessageId.STATUS_UPDATED, MessageId.EXTENDED_STATUS_UPDATED)


def _byte_at(payload: bytes, offset: int | None) -> int | None:
    if offset is None or offset >= len(payload):
        return None
    return payload[offset]


def _cell(level: int, charging: bool) -> BatteryCell:
    if level == 0:
        return BatteryCell(level=0, status=BatteryStatus.DISCONNECTED)
    status = BatteryStatus.CHARGING if charging else BatteryStatus.DISCHARGING
    return BatteryCell.clamped(level, status)


def decode_battery(
    payload: bytes, offsets: SamsungBatteryOffsets, charge_offset: int | None
) -> dict[int, BatteryCell]:
    """
    Read the battery cells out of a status payload.

    A level of 0 means the bud (or case) is not connected. A case level
    of 255 means the case state is unknown and is reported as 0.

    Args:
        payload: Status or extended status payload.
        offsets: Level offsets for this frame type.
        charge_offset: Offset of the charging bitmask, or None if the
            model does not report charging.

    Returns:
        Cells by BatteryIndex; empty if the payload is too short.
    """
    left = _byte_at(payload, offsets.left)
    right = _byte_at(payload, offsets.right)
    if left is None or right is None:
        return {}

    mask = _byte_at(payload, charge_offset) or 0
    cells = {
        BatteryIndex.PRIMARY: _cell(left, bool(mask & ChargingBits.LEFT)),
        BatteryIndex.RIGHT: _cell(right, bool(mask & ChargingBits.RIGHT)),
    }
    if offsets.case is not None:
        case = _byte_at(payload, offsets.case)
        if case is None or case == CASE_LEVEL_UNKNOWN:
            case = 0
        cells[BatteryIndex.CASE] = _cell(case, bool(mask & ChargingBits.CASE))
    return cells


def decode_ear(raw: int, legacy: bool) -> tuple[EarState | None, EarState | None]:
    """
    Split the ear detection byte into left and right placement.

    Modern models put the left bud in the high nibble and the right bud
    in the low nibble. The original Galaxy Buds only report which buds
    are worn.

    Example:
        >>> decode_ear(0x12, legacy=False)
        (<EarState.WEARING: 1>, <EarState.IDLE: 2>)
        >>> decode_ear(0x10, legacy=True)
        (<EarState.WEARING: 1>, <EarState.IDLE: 2>)
    """
    if legacy:
        if raw == LegacyEarState.BOTH:
            return EarState.WEARING, EarState.WEARING
        if raw == LegacyEarState.LEFT:
            return EarState.WEARING, EarState.IDLE
        if raw == LegacyEarState.RIGHT:
            return EarState.IDLE, EarState.WEARING
        return EarState.IDLE, EarState.IDLE
    return enum_or_none(EarState, raw >> 4), enum_or_none(EarState, raw & 0x0F)


def _battery(state: SamsungState, frame: Frame, caps: SamsungCapabilities) -> Decoded:
    if frame.kind == MessageId.EXTENDED_STATUS_UPDATED:
        if caps.extended_battery is None:
            return state, []
        cells = decode_battery(frame.payload, caps.extended_battery, caps.extended_charge_offset)
    else:
        cells = decode_battery(frame.payload, caps.status_battery, caps.status_charge_offset)

    if not cells:
        return state, []
    logger.debug(
        "Battery: %s", ", ".join(f"{i}={cell}" for i, cell in sorted(cells.items()))
    )
    return state.with_battery(cells), [BatteryUpdate(cells)]  # type: ignore[return-value]


def _anc(state: SamsungState, frame: Frame, caps: SamsungCapabilities) -> Decoded:
    if not caps.anc_supported:
        return state, []

    if frame.kind == MessageId.EXTENDED_STATUS_UPDATED:
        raw = _byte_at(frame.payload, caps.anc_extended_offset)
    elif frame.kind == MessageId.NOISE_CONTROLS_UPDATE:
        raw = _byte_at(frame.payload, caps.anc_update_offset)
    elif frame.kind == MessageId.UNIVERSAL_ACK:
        if _byte_at(frame.payload, 0) != MessageId.NOISE_CONTROLS:
            return state, []
        raw = _byte_at(frame.payload, caps.anc_ack_offset)
    else:
        return state, []

    mode = enum_or_none(NoiseControlMode, raw) if raw is not None else None
    if mode is None or mode not in caps.anc_modes:
        logger.debug("Ignoring noise control value %r for %s", raw, caps.display_name)
        return state, []

    logger.debug("Noise control mode: %s", mode.name)
    return state.model_copy(update={"anc_mode": mode}), [AncModeUpdate(mode)]


def _ear(state: SamsungState, frame: Frame, caps: SamsungCapabilities) -> Decoded:
    if frame.kind == MessageId.EXTENDED_STATUS_UPDATED:
        raw = _byte_at(frame.payload, caps.ear_offset)
    else:
        raw = _byte_at(frame.payload, caps.ear_offset - 1)
    if raw is None:
        return state, []

    left, right = decode_ear(raw, caps.legacy_ear_detection)
    if left is None:
        left = state.left_ear
    if right is None:
        right = state.right_ear
    if left is None or right is None:
        return state, []

    return (
        state.model_copy(update={"left_ear": left, "right_ear": right}),
        [EarStateUpdate(left, right)],
    )


def decode_frame(state: SamsungState, frame: Frame, caps: SamsungCapabilities) -> Decoded:
    """
    Decode one inbound frame.

    Args:
        state: Current device state.
        frame: Validated inbound frame (kind is the message id).
        caps: Capability record of the connected model.

    Returns:
        Tuple of (new state, events). Frames of other ids return the
        state unchanged with no events.
    """
    events: list[DeviceEvent] = []

    if frame.kind in _STATUS_FRAMES:
        for handler in (_battery, _anc, _ear):
            state, produced = handler(state, frame, caps)
            events.extend(produced)
    elif frame.kind in (MessageId.NOISE_CONTROLS_UPDATE, MessageId.UNIVERSAL_ACK):
        state, events = _anc(state, frame, caps)
    else:
        logger.debug("Unhandled message id 0x%02X", frame.kind)

    return state, events
