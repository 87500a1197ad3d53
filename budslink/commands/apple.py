"""
AirPods / Beats command builders.

Settings are written with control packets (setting id + value byte).
Every builder returns the complete packet, or None when the model does
not have the setting.

Example:
    >>> from budslink.capabilities.apple import AIRPODS_PRO_2
    >>> set_listening_mode(AIRPODS_PRO_2, ListeningMode.ANC).hex(" ")
    '04 00 04 00 09 00 0d 02 00 00 00'
"""

from __future__ import annotations

from budslink.exceptions import ProtocolError
from budslink.models.capabilities import AppleCapabilities
from budslink.protocol.apple_codec import encode_control
from budslink.protocol.apple_constants import (
    ADAPTIVE_LEVEL_RANGE,
    TONE_VOLUME_RANGE,
    ApplePackets,
    AwarenessMode,
    ControlId,
    ListeningMode,
    PressDuration,
    PressSpeed,
    SwitchValue,
    VolumeSwipeInterval,
)


def handshake() -> bytes:
    return ApplePackets.HANDSHAKE


def set_specific_features(caps: AppleCapabilities) -> bytes | None:
    """Enable conversation awareness reporting on models that have it."""
    if not caps.awareness_supported:
        return None
    return ApplePackets.SET_SPECIFIC_FEATURES


def request_notifications() -> bytes:
    return ApplePackets.REQUEST_NOTIFICATIONS


def set_listening_mode(caps: AppleCapabilities, mode: ListeningMode) -> bytes | None:
    """
    Build the listening mode packet.

    Returns:
        The packet, or None if the model does not offer the mode (for
        example ADAPTIVE on a model without adaptive audio).
    """
    if mode not in caps.listening_modes:
        return None
    return encode_control(ControlId.LISTENING_MODE, mode)


def set_adaptive_level(caps: AppleCapabilities, level: int) -> bytes | None:
    """
    Build the adaptive level packet.

    Raises:
        ProtocolError: If the level is outside 0-100.
    """
    if not caps.adaptive_supported:
        return None
    if level not in ADAPTIVE_LEVEL_RANGE:
        raise ProtocolError(f"Adaptive level must be 0-100, got {level}")
    return encode_control(ControlId.ADAPTIVE_LEVEL, level)


def set_awareness_mode(caps: AppleCapabilities, mode: AwarenessMode) -> bytes | None:
    if not caps.awareness_supported:
        return None
    return encode_control(ControlId.CONVERSATION_AWARENESS, mode)


def set_press_speed(caps: AppleCapabilities, speed: PressSpeed) -> bytes | None:
    if not caps.press_controls:
        return None
    return encode_control(ControlId.PRESS_SPEED, speed)


def set_press_duration(caps: AppleCapabilities, duration: PressDuration) -> bytes | None:
    if not caps.press_controls:
        return None
    return encode_control(ControlId.PRESS_DURATION, duration)


def set_tone_volume(caps: AppleCapabilities, volume: int) -> bytes | None:
    """
    Build the tone volume packet.

    Raises:
        ProtocolError: If the volume is outside 0-100.
    """
    if not caps.tone_volume:
        return None
    if volume not in TONE_VOLUME_RANGE:
        raise ProtocolError(f"Tone volume must be 0-100, got {volume}")
    return encode_control(ControlId.TONE_VOLUME, volume)


def set_volume_swipe_interval(
    caps: AppleCapabilities, interval: VolumeSwipeInterval
) -> bytes | None:
    if not caps.volume_swipe:
        return None
    return encode_control(ControlId.VOLUME_SWIPE_INTERVAL, interval)


def set_volume_swipe_mode(caps: AppleCapabilities, enabled: bool) -> bytes | None:
    if not caps.volume_swipe:
        return None
    value = SwitchValue.ON if enabled else SwitchValue.OFF
    return encode_control(ControlId.VOLUME_SWIPE_MODE, value)
