"""
Capability records.

A capability record is the immutable per-model description consumed by
the decoders, the encoders and the sessions: which features exist, which
protocol revision or framing the model speaks, and the byte offsets that
locate each value in that model's payloads.

Records are created once, when the model is identified, and shared
read-only for the lifetime of the connection. Decoders check a flag
before reading the offset it guards; an absent flag means the offset is
not meaningful for that model.

Example:
    >>> caps = SonyCapabilities(
    ...     model_id="WH-1000XM4",
    ...     revision=ProtocolRevision.V1,
    ...     battery_single=True,
    ...     ambient_sound_control=True,
    ... )
    >>> caps.ambient_control_supported
    True
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from budslink.protocol.apple_constants import ListeningMode as AppleListeningMode
from budslink.protocol.samsung_constants import NoiseControlMode
from budslink.protocol.sony_constants import ProtocolRevision


class Vendor(str, Enum):
    """Protocol family spoken by a model."""

    SONY = "sony"
    SAMSUNG = "samsung"
    APPLE = "apple"


class CapabilityRecord(BaseModel):
    """
    Fields shared by every capability record.

    Attributes:
        vendor: Protocol family.
        model_id: Identifier the record is registered under.
        name: Display name.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    vendor: Vendor
    model_id: str = Field(min_length=1)
    name: str = ""

    @property
    def display_name(self) -> str:
        """Display name, falling back to the model id."""
        return self.name or self.model_id


class SonyCapabilities(CapabilityRecord):
    """
    Feature flags for a Sony MDR model.

    Battery flags select which battery types are requested; the ambient
    sound flags select the NC/ASM layout; equalizer_bands is 0 when the
    model has no equalizer.
    """

    vendor: Literal[Vendor.SONY] = Vendor.SONY
    revision: ProtocolRevision

    # Battery
    battery_single: bool = False
    battery_dual: bool = False
    battery_case: bool = False

    # Noise control
    no_noise_cancelling: bool = False
    ambient_sound_control: bool = False
    ambient_sound_control2: bool = False
    ambient_sound_control_na: bool = Field(
        default=False, description="Adaptive (auto NC/ASM) noise control"
    )
    wind_noise_reduction: bool = False

    # Speak-to-chat
    speak_to_chat_enabled: bool = False
    speak_to_chat_config: bool = False

    # Sound
    equalizer_bands: Literal[0, 6, 10] = 0
    audio_upsampling: bool = False
    listening_mode: bool = Field(default=False, description="BGM / cinema modes (V2)")

    # System
    voice_notifications: bool = False
    pause_when_taken_off: bool = False
    automatic_power_off: bool = False

    # Indicators (V1)
    codec_indicator: bool = False
    upscaling_indicator: bool = False

    device_info: bool = Field(default=True, description="Query model name, firmware and color")

    @property
    def ambient_control_supported(self) -> bool:
        """Whether the model has any NC/ASM control."""
        return not self.no_noise_cancelling and (
            self.ambient_sound_control
            or self.ambient_sound_control2
            or self.wind_noise_reduction
        )

    @property
    def speak_to_chat_supported(self) -> bool:
        return self.speak_to_chat_enabled or self.speak_to_chat_config

    @property
    def equalizer_supported(self) -> bool:
        return self.equalizer_bands != 0


class SamsungBatteryOffsets(BaseModel):
    """Payload offsets of the left, right and case levels."""

    model_config = ConfigDict(frozen=True)

    left: int = Field(ge=0)
    right: int = Field(ge=0)
    case: int | None = Field(default=None, ge=0)


class SamsungModel(IntEnum):
    """Samsung Galaxy Buds model ids."""

    UNKNOWN = 0
    GALAXY_BUDS = 1
    GALAXY_BUDS_PLUS = 2
    GALAXY_BUDS_LIVE = 3
    GALAXY_BUDS_PRO = 4
    GALAXY_BUDS2 = 5
    GALAXY_BUDS2_PRO = 6
    GALAXY_BUDS_FE = 7
    GALAXY_BUDS3 = 8
    GALAXY_BUDS3_PRO = 9


class SamsungCapabilities(CapabilityRecord):
    """
    Layout description for a Samsung Galaxy Buds model.

    Attributes:
        model: Samsung model id.
        legacy_framing: Use the 0xFE/0xEE framing of the original Galaxy Buds.
        anc_modes: Noise control modes the model accepts; empty if the
            model has no noise control.
        anc_extended_offset: Mode offset in an extended status payload.
        anc_update_offset: Mode offset in a noise controls update payload.
        anc_ack_offset: Mode offset in the universal ACK of NOISE_CONTROLS.
        ear_offset: Ear detection offset in an extended status payload
            (one less in a status payload).
        legacy_ear_detection: Ear byte uses the two-bit-field encoding.
        status_battery: Level offsets in a status payload.
        status_charge_offset: Charging bitmask offset in a status payload.
        extended_battery: Level offsets in an extended status payload.
        extended_charge_offset: Charging bitmask offset in an extended
            status payload.
    """

    vendor: Literal[Vendor.SAMSUNG] = Vendor.SAMSUNG
    model: SamsungModel

    legacy_framing: bool = False

    anc_modes: tuple[NoiseControlMode, ...] = ()
    anc_extended_offset: int = 12
    anc_update_offset: int = 0
    anc_ack_offset: int = 1

    ear_offset: int = 6
    legacy_ear_detection: bool = False

    status_battery: SamsungBatteryOffsets
    status_charge_offset: int | None = None
    extended_battery: SamsungBatteryOffsets | None = None
    extended_charge_offset: int | None = None

    @property
    def anc_supported(self) -> bool:
        return bool(self.anc_modes)

    @property
    def has_case(self) -> bool:
        return self.status_battery.case is not None


class AppleCapabilities(CapabilityRecord):
    """
    Feature flags for an AirPods / Beats model.

    Attributes:
        anc_supported: Listening mode control (off, ANC, transparency).
        adaptive_supported: Adaptive listening mode and its level.
        awareness_supported: Conversation awareness.
        single_battery: Over-ear model reporting a single cell.
        press_controls: Press speed and press duration settings.
        tone_volume: Tone volume setting.
        volume_swipe: Volume swipe mode and interval settings.
    """

    vendor: Literal[Vendor.APPLE] = Vendor.APPLE
    product_id: int | None = Field(default=None, ge=0, le=0xFFFF)

    anc_supported: bool = False
    adaptive_supported: bool = False
    awareness_supported: bool = False
    single_battery: bool = False

    press_controls: bool = True
    tone_volume: bool = True
    volume_swipe: bool = False

    @property
    def listening_modes(self) -> tuple[AppleListeningMode, ...]:
        """Listening modes the model accepts."""
        if not self.anc_supported:
            return ()
        modes = (
            AppleListeningMode.OFF,
            AppleListeningMode.ANC,
            AppleListeningMode.TRANSPARENCY,
        )
        if self.adaptive_supported:
            modes += (AppleListeningMode.ADAPTIVE,)
        return modes


AnyCapabilities = SonyCapabilities | SamsungCapabilities | AppleCapabilities
"""Union of the concrete capability record types."""
