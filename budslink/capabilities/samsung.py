"""
Samsung Galaxy Buds model capabilities.

Offsets are payload offsets (the message id is not counted). Every model
after the original Galaxy Buds uses the modern 0xFD/0xDD framing and the
split-nibble ear detection byte.
"""

from __future__ import annotations

from typing import Final

from budslink.models.capabilities import SamsungBatteryOffsets, SamsungCapabilities, SamsungModel
from budslink.protocol.samsung_constants import NoiseControlMode as Anc

_STATUS = SamsungBatteryOffsets(left=1, right=2, case=6)
_EXTENDED = SamsungBatteryOffsets(left=2, right=3, case=7)

_BASIC_ANC: Final = (Anc.OFF, Anc.AMBIENT_SOUND, Anc.NOISE_REDUCTION)
_ADAPTIVE_ANC: Final = (Anc.OFF, Anc.AMBIENT_SOUND, Anc.ADAPTIVE, Anc.NOISE_REDUCTION)


def _modern(
    model: SamsungModel,
    name: str,
    anc_modes: tuple[Anc, ...],
    extended_charge_offset: int | None,
) -> SamsungCapabilities:
    return SamsungCapabilities(
        model_id=name,
        name=name,
        model=model,
        anc_modes=anc_modes,
        status_battery=_STATUS,
        status_charge_offset=7 if extended_charge_offset is not None else None,
        extended_battery=_EXTENDED,
        extended_charge_offset=extended_charge_offset,
    )


GALAXY_BUDS: Final = SamsungCapabilities(
    model_id="Galaxy Buds",
    name="Galaxy Buds",
    model=SamsungModel.GALAXY_BUDS,
    legacy_framing=True,
    legacy_ear_detection=True,
    status_battery=SamsungBatteryOffsets(left=1, right=2),
)

GALAXY_BUDS_PLUS: Final = _modern(SamsungModel.GALAXY_BUDS_PLUS, "Galaxy Buds+", (), None)
GALAXY_BUDS_LIVE: Final = _modern(SamsungModel.GALAXY_BUDS_LIVE, "Galaxy Buds Live", (), None)
GALAXY_BUDS_PRO: Final = _modern(SamsungModel.GALAXY_BUDS_PRO, "Galaxy Buds Pro", _BASIC_ANC, 43)
GALAXY_BUDS2: Final = _modern(SamsungModel.GALAXY_BUDS2, "Galaxy Buds 2", _BASIC_ANC, 36)
GALAXY_BUDS2_PRO: Final = _modern(
    SamsungModel.GALAXY_BUDS2_PRO, "Galaxy Buds 2 Pro", _ADAPTIVE_ANC, 43
)
GALAXY_BUDS_FE: Final = _modern(SamsungModel.GALAXY_BUDS_FE, "Galaxy Buds FE", _BASIC_ANC, 43)
GALAXY_BUDS3: Final = _modern(
    SamsungModel.GALAXY_BUDS3, "Galaxy Buds 3", (Anc.OFF, Anc.NOISE_REDUCTION), 42
)
GALAXY_BUDS3_PRO: Final = _modern(
    SamsungModel.GALAXY_BUDS3_PRO, "Galaxy Buds 3 Pro", _ADAPTIVE_ANC, 42
)

SAMSUNG_MODELS: Final[tuple[SamsungCapabilities, ...]] = (
    GALAXY_BUDS,
    GALAXY_BUDS_PLUS,
    GALAXY_BUDS_LIVE,
    GALAXY_BUDS_PRO,
    GALAXY_BUDS2,
    GALAXY_BUDS2_PRO,
    GALAXY_BUDS_FE,
    GALAXY_BUDS3,
    GALAXY_BUDS3_PRO,
)
