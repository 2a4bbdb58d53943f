"""Copernicus Marine client constants and shared configuration.

Docs:
  - Toolbox: https://toolbox-docs.marine.copernicus.eu/
  - Products: https://data.marine.copernicus.eu/products

Credentials are read from settings (``COPERNICUSMARINE_SERVICE_USERNAME`` /
``COPERNICUSMARINE_SERVICE_PASSWORD``).
"""

from __future__ import annotations

# Source tags stamped on every time series
SOURCE_COPERNICUS = "copernicus"
SOURCE_MOCK = "mock"

# Temporal relaxation: how many days older than requested a category may be
STABLE_MAX_OFFSET_DAYS = 3  # temperature, salinity, biogeochemistry, transparency
DYNAMIC_MAX_OFFSET_DAYS = 1  # currents, waves

# Spatial relaxation: half-width of the query box in degrees (~28 km)
DEFAULT_PADDINGS: tuple[float, ...] = (0.25,)

# Per-attempt timeouts (seconds). The smallest box is a quick probe.
PROBE_TIMEOUT_S = 90.0
ATTEMPT_TIMEOUT_S = 120.0

# Depth levels kept from 3D products, and the match tolerance (metres)
TARGET_DEPTHS_M: tuple[float, ...] = (0.0, 5.0, 10.0)
DEPTH_TOLERANCE_M = 1.5

# Records at or above this depth count as the surface
SURFACE_DEPTH_M = 1.0

# Dissolved oxygen: mmol/m3 -> mg/L (molar mass of O2 is 32 g/mol)
O2_MMOL_M3_TO_MG_L = 0.032
