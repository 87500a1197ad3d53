"""
Semantic events emitted by the decoders.

Each event names the DeviceCallbacks field it is delivered to
(``callback_name``) and carries the callback arguments as plain values.
Decoders return events; sessions hand them to DeviceCallbacks.dispatch().

Example:
    >>> event = BatteryUpdate({1: BatteryCell(level=80)})
    >>> event.as_properties()
    {'battery1_level': 80, 'battery1_status': 'discharging'}
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Mapping

from budslink.models.state import BatteryCell


@dataclass(frozen=True)
class DeviceEvent:
    """Base class for semantic events."""

    callback_name: ClassVar[str] = ""

    def arguments(self) -> tuple[Any, ...]:
        """Positional arguments for the callback."""
        return tuple(getattr(self, f.name) for f in fields(self))


@dataclass(frozen=True)
class BatteryUpdate(DeviceEvent):
    """
    Battery cells changed.

    Only the cells present in the decoded message are included.
    """

    callback_name: ClassVar[str] = "update_battery"

    cells: Mapping[int, BatteryCell]

    def as_properties(self) -> dict[str, Any]:
        """Flatten to ``battery{N}_level`` / ``battery{N}_status`` keys."""
        props: dict[str, Any] = {}
        for index in sorted(self.cells):
            cell = self.cells[index]
            props[f"battery{index}_level"] = cell.level
            props[f"battery{index}_status"] = cell.status.value
        return props


@dataclass(frozen=True)
class AncModeUpdate(DeviceEvent):
    """Noise control mode (Samsung) or listening mode (Apple) changed."""

    callback_name: ClassVar[str] = "update_anc_mode"

    mode: int


@dataclass(frozen=True)
class AmbientSoundUpdate(DeviceEvent):
    """Sony noise cancelling / ambient sound settings changed."""

    callback_name: ClassVar[str] = "update_ambient_sound_control"

    mode: int
    focus_on_voice: bool
    level: int
    adaptive_enabled: bool | None = None
    adaptive_sensitivity: int | None = None


@dataclass(frozen=True)
class AdaptiveLevelUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_adaptive_level"

    level: int


@dataclass(frozen=True)
class AwarenessModeUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_awareness_mode"

    mode: int


@dataclass(frozen=True)
class AwarenessDataUpdate(DeviceEvent):
    """Conversation awareness speech level crossed the attenuation threshold."""

    callback_name: ClassVar[str] = "update_awareness_data"

    attenuated: bool


@dataclass(frozen=True)
class EarStateUpdate(DeviceEvent):
    """
    Ear placement changed.

    Values are vendor placement codes: Samsung EarState for left/right,
    Apple EarDetection for bud 1 / bud 2.
    """

    callback_name: ClassVar[str] = "update_ear_state"

    left: int
    right: int


@dataclass(frozen=True)
class EqualizerUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_equalizer"

    preset: int
    bands: tuple[int, ...]


@dataclass(frozen=True)
class SpeakToChatEnabledUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_speak_to_chat_enabled"

    enabled: bool


@dataclass(frozen=True)
class SpeakToChatConfigUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_speak_to_chat_config"

    sensitivity: int
    timeout: int


@dataclass(frozen=True)
class VoiceNotificationsUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_voice_notifications"

    enabled: bool


@dataclass(frozen=True)
class AudioUpsamplingUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_audio_upsampling"

    enabled: bool


@dataclass(frozen=True)
class PauseWhenTakenOffUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_pause_when_taken_off"

    enabled: bool


@dataclass(frozen=True)
class AutoPowerOffUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_auto_power_off"

    setting: int


@dataclass(frozen=True)
class BgmModeUpdate(DeviceEvent):
    """Background music effect switched on or off, or its distance changed."""

    callback_name: ClassVar[str] = "update_listening_mode_bgm"

    active: bool
    distance: int


@dataclass(frozen=True)
class ListeningModeUpdate(DeviceEvent):
    """Sony standard / cinema listening mode changed."""

    callback_name: ClassVar[str] = "update_listening_mode"

    mode: int


@dataclass(frozen=True)
class CodecUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_codec_indicator"

    codec: int


@dataclass(frozen=True)
class UpscalingUpdate(DeviceEvent):
    callback_name: ClassVar[str] = "update_upscaling_indicator"

    upscaling_type: int
    shown: bool


@dataclass(frozen=True)
class DeviceInfoUpdate(DeviceEvent):
    """
    Identification reported during the handshake.

    Fields the device did not report in this message are None.
    """

    callback_name: ClassVar[str] = "update_device_info"

    model_name: str | None = None
    firmware_version: str | None = None
    series: int | None = None
    color: int | None = None


@dataclass(frozen=True)
class PressControlUpdate(DeviceEvent):
    """Apple press speed, press duration, tone volume or volume swipe setting changed."""

    callback_name: ClassVar[str] = "update_control_setting"

    setting_id: int
    value: int
