"""
AirPods / Beats model capabilities, keyed by marketing name.
"""

from __future__ import annotations

from typing import Final

from budslink.models.capabilities import AppleCapabilities

AIRPODS_2: Final = AppleCapabilities(
    model_id="AirPods 2", name="AirPods (2nd generation)", product_id=0x200F
)
AIRPODS_3: Final = AppleCapabilities(
    model_id="AirPods 3", name="AirPods (3rd generation)", product_id=0x2013
)
AIRPODS_4_ANC: Final = AppleCapabilities(
    model_id="AirPods 4 ANC",
    name="AirPods 4 with Active Noise Cancellation",
    product_id=0x201B,
    anc_supported=True,
    adaptive_supported=True,
    awareness_supported=True,
)
AIRPODS_PRO: Final = AppleCapabilities(
    model_id="AirPods Pro",
    name="AirPods Pro",
    product_id=0x200E,
    anc_supported=True,
)
AIRPODS_PRO_2: Final = AppleCapabilities(
    model_id="AirPods Pro 2",
    name="AirPods Pro (2nd generation)",
    product_id=0x2014,
    anc_supported=True,
    adaptive_supported=True,
    awareness_supported=True,
    volume_swipe=True,
)
AIRPODS_MAX: Final = AppleCapabilities(
    model_id="AirPods Max",
    name="AirPods Max",
    product_id=0x200A,
    anc_supported=True,
    single_battery=True,
    press_controls=False,
)

APPLE_MODELS: Final[tuple[AppleCapabilities, ...]] = (
    AIRPODS_2,
    AIRPODS_3,
    AIRPODS_4_ANC,
    AIRPODS_PRO,
    AIRPODS_PRO_2,
    AIRPODS_MAX,
)
