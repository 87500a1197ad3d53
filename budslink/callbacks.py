"""
Callback interface between a session and the device layer.

A session is constructed with one DeviceCallbacks instance. Each field is
an optional callable matching one semantic event; unset fields are
skipped. Exceptions raised by a callback are logged and never propagate
back into the protocol engine.

Example:
    >>> from budslink.models.events import BatteryUpdate
    >>> levels = []
    >>> callbacks = DeviceCallbacks(update_battery=lambda cells: levels.append(cells[1].level))
    >>> callbacks.dispatch(BatteryUpdate({1: BatteryCell(level=42)}))
    >>> levels
    [42]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from budslink.models.events import DeviceEvent
from budslink.models.state import BatteryCell

logger = logging.getLogger(__name__)


@dataclass
class DeviceCallbacks:
    """
    Typed callables, one per semantic event.

    Attributes:
        update_battery: ``(cells: Mapping[int, BatteryCell])``
        update_anc_mode: ``(mode)``; Samsung noise control or Apple
            listening mode.
        update_ambient_sound_control: ``(mode, focus_on_voice, level,
            adaptive_enabled, adaptive_sensitivity)``; Sony.
        update_adaptive_level: ``(level)``; Apple.
        update_awareness_mode: ``(mode)``; Apple.
        update_awareness_data: ``(attenuated)``; Apple.
        update_ear_state: ``(left, right)``
        update_equalizer: ``(preset, bands)``; Sony.
        update_speak_to_chat_enabled: ``(enabled)``; Sony.
        update_speak_to_chat_config: ``(sensitivity, timeout)``; Sony.
        update_voice_notifications: ``(enabled)``; Sony.
        update_audio_upsampling: ``(enabled)``; Sony.
        update_pause_when_taken_off: ``(enabled)``; Sony.
        update_auto_power_off: ``(setting)``; Sony.
        update_listening_mode_bgm: ``(active, distance)``; Sony V2.
        update_listening_mode: ``(mode)``; Sony V2.
        update_codec_indicator: ``(codec)``; Sony V1.
        update_upscaling_indicator: ``(upscaling_type, shown)``; Sony V1.
        update_device_info: ``(model_name, firmware_version, series,
            color)``; Sony.
        update_control_setting: ``(setting_id, value)``; Apple press,
            tone and volume swipe settings.
        on_state_change: ``(old_state, new_state)``; session state
            machine transitions.
    """

    update_battery: Optional[Callable[[Mapping[int, BatteryCell]], Any]] = None
    update_anc_mode: Optional[Callable[..., Any]] = None
    update_ambient_sound_control: Optional[Callable[..., Any]] = None
    update_adaptive_level: Optional[Callable[[int], Any]] = None
    update_awareness_mode: Optional[Callable[..., Any]] = None
    update_awareness_data: Optional[Callable[[bool], Any]] = None
    update_ear_state: Optional[Callable[..., Any]] = None
    update_equalizer: Optional[Callable[..., Any]] = None
    update_speak_to_chat_enabled: Optional[Callable[[bool], Any]] = None
    update_speak_to_chat_config: Optional[Callable[..., Any]] = None
    update_voice_notifications: Optional[Callable[[bool], Any]] = None
    update_audio_upsampling: Optional[Callable[[bool], Any]] = None
    update_pause_when_taken_off: Optional[Callable[[bool], Any]] = None
    update_auto_power_off: Optional[Callable[..., Any]] = None
    update_listening_mode_bgm: Optional[Callable[..., Any]] = None
    update_listening_mode: Optional[Callable[..., Any]] = None
    update_codec_indicator: Optional[Callable[..., Any]] = None
    update_upscaling_indicator: Optional[Callable[..., Any]] = None
    update_device_info: Optional[Callable[..., Any]] = None
    update_control_setting: Optional[Callable[[int, int], Any]] = None
    on_state_change: Optional[Callable[..., Any]] = None

    def dispatch(self, event: DeviceEvent) -> None:
        """
        Deliver one event to its callback.

        Args:
            event: Event produced by a decoder or a session.
        """
        callback = getattr(self, event.callback_name, None)
        if callback is None:
            return
        try:
            callback(*event.arguments())
        except Exception:
            logger.exception("Callback %s raised", event.callback_name)

    def dispatch_all(self, events: Iterable[DeviceEvent]) -> None:
        for event in events:
            self.dispatch(event)

    def notify_state_change(self, old: Any, new: Any) -> None:
        """Report a session state transition."""
        if self.on_state_change is None:
            return
        try:
            self.on_state_change(old, new)
        except Exception:
            logger.exception("Callback on_state_change raised")
