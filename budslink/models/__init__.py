"""
Data models for budslink.

This package contains:

- Capability records describing what each supported model can do
- Decoded device state (battery cells and vendor settings)
- Semantic events emitted by the decoders
"""

from budslink.models.capabilities import (
    AnyCapabilities,
    AppleCapabilities,
    CapabilityRecord,
    SamsungBatteryOffsets,
    SamsungCapabilities,
    SamsungModel,
    SonyCapabilities,
    Vendor,
)
from budslink.models.events import (
    AdaptiveLevelUpdate,
    AmbientSoundUpdate,
    AncModeUpdate,
    AudioUpsamplingUpdate,
    AutoPowerOffUpdate,
    AwarenessDataUpdate,
    AwarenessModeUpdate,
    BatteryUpdate,
    BgmModeUpdate,
    CodecUpdate,
    DeviceEvent,
    DeviceInfoUpdate,
    EarStateUpdate,
    EqualizerUpdate,
    ListeningModeUpdate,
    PauseWhenTakenOffUpdate,
    PressControlUpdate,
    SpeakToChatConfigUpdate,
    SpeakToChatEnabledUpdate,
    UpscalingUpdate,
    VoiceNotificationsUpdate,
)
from budslink.models.state import (
    AppleState,
    BatteryCell,
    BatteryIndex,
    BatteryStatus,
    DeviceState,
    SamsungState,
    SonyState,
)

__all__ = [
    # Capabilities
    "Vendor",
    "CapabilityRecord",
    "SonyCapabilities",
    "SamsungCapabilities",
    "SamsungBatteryOffsets",
    "SamsungModel",
    "AppleCapabilities",
    "AnyCapabilities",
    # State
    "BatteryStatus",
    "BatteryCell",
    "BatteryIndex",
    "DeviceState",
    "SonyState",
    "SamsungState",
    "AppleState",
    # Events
    "DeviceEvent",
    "BatteryUpdate",
    "AncModeUpdate",
    "AmbientSoundUpdate",
    "AdaptiveLevelUpdate",
    "AwarenessModeUpdate",
    "AwarenessDataUpdate",
    "EarStateUpdate",
    "EqualizerUpdate",
    "SpeakToChatEnabledUpdate",
    "SpeakToChatConfigUpdate",
    "VoiceNotificationsUpdate",
    "AudioUpsamplingUpdate",
    "PauseWhenTakenOffUpdate",
    "AutoPowerOffUpdate",
    "BgmModeUpdate",
    "ListeningModeUpdate",
    "CodecUpdate",
    "UpscalingUpdate",
    "DeviceInfoUpdate",
    "PressControlUpdate",
]
