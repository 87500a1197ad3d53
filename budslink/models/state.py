"""
Decoded device state.

A DeviceState is the canonical property set decoded from a device: the
battery cells plus the vendor-specific settings. States are immutable;
decoders return a new state built with model_copy(update=...) together
with the events describing what changed.

A field is None until the device has reported it.
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Mapping

from pydantic import BaseModel, ConfigDict, Field

from budslink.protocol import apple_constants as apple
from budslink.protocol import samsung_constants as samsung
from budslink.protocol import sony_constants as sony


class BatteryStatus(str, Enum):
    """Charging status of one battery cell."""

    CHARGING = "charging"
    DISCHARGING = "discharging"
    DISCONNECTED = "disconnected"


class BatteryCell(BaseModel):
    """
    Level and status of one battery cell.

    Example:
        >>> BatteryCell.clamped(130, BatteryStatus.CHARGING).level
        100
    """

    model_config = ConfigDict(frozen=True)

    level: int = Field(ge=0, le=100, description="Charge level in percent")
    status: BatteryStatus = BatteryStatus.DISCHARGING

    @classmethod
    def clamped(cls, level: int, status: BatteryStatus) -> BatteryCell:
        """Build a cell with the level clamped to 0..100."""
        return cls(level=max(0, min(level, 100)), status=status)

    @property
    def is_charging(self) -> bool:
        return self.status is BatteryStatus.CHARGING

    def __str__(self) -> str:
        return f"{self.level}% ({self.status.value})"


class BatteryIndex:
    """Cell numbering shared by every vendor."""

    PRIMARY: Final[int] = 1
    """Single-cell headphones, or the left earbud."""

    RIGHT: Final[int] = 2
    """Right earbud."""

    CASE: Final[int] = 3
    """Charging case."""


class DeviceState(BaseModel):
    """
    State fields shared by every vendor.

    Attributes:
        battery: Battery cells by index (see BatteryIndex).
    """

    model_config = ConfigDict(frozen=True)

    battery: dict[int, BatteryCell] = Field(default_factory=dict)

    def with_battery(self, cells: Mapping[int, BatteryCell]) -> DeviceState:
        """
        Return a copy with the given cells replaced.

        Cells not named in ``cells`` keep their previous value.
        """
        merged = dict(self.battery)
        merged.update(cells)
        return self.model_copy(update={"battery": merged})


class SonyState(DeviceState):
    """Decoded state of a Sony MDR device."""

    protocol_version: int | None = None
    init_complete: bool = False
    support_functions: frozenset[int] = frozenset()

    model_name: str | None = None
    firmware_version: str | None = None
    series: int | None = None
    color: int | None = None

    ambient_mode: sony.AmbientSoundMode | None = None
    focus_on_voice: bool | None = None
    ambient_level: int | None = Field(default=None, ge=0, le=20)
    adaptive_enabled: bool | None = None
    adaptive_sensitivity: sony.AutoAsmSensitivity | None = None

    speak_to_chat_enabled: bool | None = None
    speak_to_chat_sensitivity: sony.Speak2ChatSensitivity | None = None
    speak_to_chat_timeout: sony.Speak2ChatTimeout | None = None

    equalizer_preset: int | None = None
    equalizer_bands: tuple[int, ...] = ()

    voice_notifications: bool | None = None
    audio_upsampling: bool | None = None
    pause_when_taken_off: bool | None = None
    auto_power_off: sony.AutoPowerOff | None = None

    bgm_active: bool | None = None
    bgm_distance: sony.BgmDistance | None = None
    listening_mode: sony.ListeningMode | None = None

    codec: sony.AudioCodec | None = None
    upscaling_type: sony.DseeType | None = None
    upscaling_shown: bool | None = None


class SamsungState(DeviceState):
    """Decoded state of a Samsung Galaxy Buds device."""

    anc_mode: samsung.NoiseControlMode | None = None
    left_ear: samsung.EarState | None = None
    right_ear: samsung.EarState | None = None


class AppleState(DeviceState):
    """
    Decoded state of an AirPods / Beats device.

    Buds start out in the case until the first ear detection packet.
    """

    handshake_acked: bool = False
    features_acked: bool = False

    listening_mode: apple.ListeningMode | None = None
    adaptive_level: int | None = Field(default=None, ge=0, le=100)
    awareness_mode: apple.AwarenessMode | None = None
    awareness_attenuated: bool | None = None

    bud1: apple.EarDetection = apple.EarDetection.IN_CASE
    bud2: apple.EarDetection = apple.EarDetection.IN_CASE

    press_speed: apple.PressSpeed | None = None
    press_duration: apple.PressDuration | None = None
    tone_volume: int | None = Field(default=None, ge=0, le=100)
    volume_swipe_interval: apple.VolumeSwipeInterval | None = None
    volume_swipe_enabled: bool | None = None
