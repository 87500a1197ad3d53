"""
Sony model capabilities.

V1 covers the WH-1000XM3/XM4 and WF-1000XM3 generation; V2 covers the
WF-1000XM4 and later.
"""

from __future__ import annotations

from typing import Final

from budslink.models.capabilities import SonyCapabilities
from budslink.protocol.sony_constants import ProtocolRevision

WH_1000XM3: Final = SonyCapabilities(
    model_id="WH-1000XM3",
    name="Sony WH-1000XM3",
    revision=ProtocolRevision.V1,
    battery_single=True,
    ambient_sound_control=True,
    equalizer_bands=6,
    audio_upsampling=True,
    automatic_power_off=True,
    voice_notifications=True,
    codec_indicator=True,
)

WH_1000XM4: Final = SonyCapabilities(
    model_id="WH-1000XM4",
    name="Sony WH-1000XM4",
    revision=ProtocolRevision.V1,
    battery_single=True,
    ambient_sound_control=True,
    speak_to_chat_enabled=True,
    speak_to_chat_config=True,
    equalizer_bands=6,
    audio_upsampling=True,
    pause_when_taken_off=True,
    automatic_power_off=True,
    voice_notifications=True,
    codec_indicator=True,
    upscaling_indicator=True,
)

WF_1000XM3: Final = SonyCapabilities(
    model_id="WF-1000XM3",
    name="Sony WF-1000XM3",
    revision=ProtocolRevision.V1,
    battery_dual=True,
    battery_case=True,
    ambient_sound_control=True,
    equalizer_bands=6,
    automatic_power_off=True,
    codec_indicator=True,
)

WF_1000XM4: Final = SonyCapabilities(
    model_id="WF-1000XM4",
    name="Sony WF-1000XM4",
    revision=ProtocolRevision.V2,
    battery_dual=True,
    battery_case=True,
    ambient_sound_control2=True,
    wind_noise_reduction=True,
    speak_to_chat_enabled=True,
    speak_to_chat_config=True,
    equalizer_bands=6,
    audio_upsampling=True,
    voice_notifications=True,
)

WH_1000XM5: Final = SonyCapabilities(
    model_id="WH-1000XM5",
    name="Sony WH-1000XM5",
    revision=ProtocolRevision.V2,
    battery_single=True,
    ambient_sound_control2=True,
    wind_noise_reduction=True,
    speak_to_chat_enabled=True,
    speak_to_chat_config=True,
    equalizer_bands=10,
    audio_upsampling=True,
    pause_when_taken_off=True,
    automatic_power_off=True,
    voice_notifications=True,
)

WF_1000XM5: Final = SonyCapabilities(
    model_id="WF-1000XM5",
    name="Sony WF-1000XM5",
    revision=ProtocolRevision.V2,
    battery_dual=True,
    battery_case=True,
    ambient_sound_control2=True,
    wind_noise_reduction=True,
    speak_to_chat_enabled=True,
    speak_to_chat_config=True,
    equalizer_bands=10,
    audio_upsampling=True,
    voice_notifications=True,
    listening_mode=True,
)

WH_1000XM6: Final = SonyCapabilities(
    model_id="WH-1000XM6",
    name="Sony WH-1000XM6",
    revision=ProtocolRevision.V2,
    battery_single=True,
    ambient_sound_control2=True,
    ambient_sound_control_na=True,
    speak_to_chat_enabled=True,
    speak_to_chat_config=True,
    equalizer_bands=10,
    audio_upsampling=True,
    pause_when_taken_off=True,
    automatic_power_off=True,
    voice_notifications=True,
    listening_mode=True,
)

SONY_MODELS: Final[tuple[SonyCapabilities, ...]] = (
    WH_1000XM3,
    WH_1000XM4,
    WF_1000XM3,
    WF_1000XM4,
    WH_1000XM5,
    WF_1000XM5,
    WH_1000XM6,
)
