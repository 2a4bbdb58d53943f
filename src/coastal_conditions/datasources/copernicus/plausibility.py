"""Plausibility filter for raw marine readings.

Copernicus products mark missing cells with fill values (9999, -32767,
9.96921e36, NaN). Model edges also leak the odd physically impossible value.
Both are treated as absent: the value becomes None, never zero.

Bounds are deployment-tunable. Pass a modified copy of ``DEFAULT_BOUNDS`` to
``is_plausible`` / ``filter_values`` for basins that need wider ranges
(polar brine, hypersaline lagoons).
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import TYPE_CHECKING

from coastal_conditions.datasources.copernicus.models import Variable

if TYPE_CHECKING:
    from collections.abc import Mapping

# Anything larger in magnitude than this is a fill sentinel, not a reading.
FILL_MAGNITUDE = 1000.0


class Family(StrEnum):
    """Variables sharing physical bounds."""

    TEMPERATURE = "temperature"
    SALINITY = "salinity"
    CHLOROPHYLL = "chlorophyll"
    ATTENUATION = "attenuation"
    DISSOLVED = "dissolved"
    NITRATE = "nitrate"
    PHOSPHATE = "phosphate"
    CURRENT = "current"
    WAVE_HEIGHT = "wave_height"
    WAVE_PERIOD = "wave_period"
    DIRECTION = "direction"
    UNBOUNDED = "unbounded"


VARIABLE_FAMILIES: dict[Variable, Family] = {
    Variable.THETAO: Family.TEMPERATURE,
    Variable.BOTTOMT: Family.TEMPERATURE,
    Variable.SO: Family.SALINITY,
    Variable.UO: Family.CURRENT,
    Variable.VO: Family.CURRENT,
    Variable.MLOTST: Family.UNBOUNDED,
    Variable.ZOS: Family.UNBOUNDED,
    Variable.O2: Family.DISSOLVED,
    Variable.CHL: Family.CHLOROPHYLL,
    Variable.KD490: Family.ATTENUATION,
    Variable.NO3: Family.NITRATE,
    Variable.PO4: Family.PHOSPHATE,
    Variable.ZOOC: Family.DISSOLVED,
    Variable.PHYC: Family.DISSOLVED,
    Variable.NPPV: Family.UNBOUNDED,
    Variable.PH: Family.UNBOUNDED,
    Variable.FE: Family.UNBOUNDED,
    Variable.SI: Family.DISSOLVED,
    Variable.VHM0: Family.WAVE_HEIGHT,
    Variable.SWH: Family.WAVE_HEIGHT,
    Variable.VHM0_WW: Family.WAVE_HEIGHT,
    Variable.VHM0_SW1: Family.WAVE_HEIGHT,
    Variable.VTM10: Family.WAVE_PERIOD,
    Variable.VMDR: Family.DIRECTION,
}

# Inclusive (low, high) per family. Currents are bounded per component.
DEFAULT_BOUNDS: dict[Family, tuple[float, float]] = {
    Family.TEMPERATURE: (-5.0, 50.0),  # degC
    Family.SALINITY: (0.0, 50.0),  # PSU
    Family.CHLOROPHYLL: (0.0, 100.0),  # mg/m3
    Family.ATTENUATION: (0.0, 10.0),  # 1/m
    Family.DISSOLVED: (0.0, 500.0),  # mmol/m3
    Family.NITRATE: (0.0, 100.0),  # mmol/m3
    Family.PHOSPHATE: (0.0, 20.0),  # mmol/m3
    Family.CURRENT: (-10.0, 10.0),  # m/s
    Family.WAVE_HEIGHT: (0.0, 30.0),  # m
    Family.WAVE_PERIOD: (0.0, 30.0),  # s
    Family.DIRECTION: (0.0, 360.0),  # deg
}


def is_fill(value: float) -> bool:
    """True for NaN, infinities and large-magnitude placeholders."""
    return not math.isfinite(value) or abs(value) > FILL_MAGNITUDE


def is_plausible(
    variable: Variable,
    value: float | None,
    bounds: Mapping[Family, tuple[float, float]] = DEFAULT_BOUNDS,
) -> bool:
    """Check a single reading against fill sentinels and family bounds."""
    if value is None or is_fill(value):
        return False
    family = VARIABLE_FAMILIES.get(variable, Family.UNBOUNDED)
    limits = bounds.get(family)
    if limits is None:
        return True
    low, high = limits
    return low <= value <= high


def clean(
    variable: Variable,
    value: float | None,
    bounds: Mapping[Family, tuple[float, float]] = DEFAULT_BOUNDS,
) -> float | None:
    """Return the value if plausible, else None."""
    return value if is_plausible(variable, value, bounds) else None


def filter_values(
    values: Mapping[Variable, float | None],
    bounds: Mapping[Family, tuple[float, float]] = DEFAULT_BOUNDS,
) -> dict[Variable, float | None]:
    """Apply ``clean`` to every reading in a record."""
    return {variable: clean(variable, value, bounds) for variable, value in values.items()}
