"""Marine basin codes and the Copernicus Marine datasets behind each one.

Regional models are preferred over the global one wherever they exist. Some
basins have no regional product for a category (waves in the Baltic, the
whole physics stack on the Northwest Shelf), so each ``DatasetConfig`` names
its sources per category rather than a single product per basin.

Dataset catalogue: https://data.marine.copernicus.eu/products
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from coastal_conditions.reference.geography import BoundingBox


class RegionCode(StrEnum):
    """Copernicus Marine basin identifier."""

    BAL = "BAL"  # Baltic Sea
    MED = "MED"  # Mediterranean Sea
    BLK = "BLK"  # Black Sea
    IBI = "IBI"  # Iberia-Biscay-Ireland
    NWS = "NWS"  # Northwest European Shelf
    ARC = "ARC"  # Arctic
    GLO = "GLO"  # Global fallback


@dataclass(frozen=True)
class DatasetConfig:
    """Per-category dataset ids for one basin.

    ``salinity`` and ``currents`` are optional overrides; when None the
    physics product carries those variables too.
    """

    physics: str
    biogeochemistry: str
    waves: str
    label: str
    coverage: str
    model_name: str
    salinity: str | None = None
    currents: str | None = None
    transparency: str | None = None


# =============================================================================
# Shared global products
# =============================================================================

GLO_TEMPERATURE = "cmems_mod_glo_phy-thetao_anfc_0.083deg_P1D-m"
GLO_SALINITY = "cmems_mod_glo_phy-so_anfc_0.083deg_P1D-m"
GLO_CURRENTS = "cmems_mod_glo_phy-cur_anfc_0.083deg_P1D-m"
GLO_BIOGEOCHEMISTRY = "cmems_mod_glo_bgc-bio_anfc_0.25deg_P1D-m"
GLO_WAVES = "cmems_mod_glo_wav_anfc_0.083deg_PT3H-i"
ATL_TRANSPARENCY = "cmems_obs-oc_atl_bgc-transp_nrt_l3-multi-1km_P1D"

DATASETS: dict[RegionCode, DatasetConfig] = {
    RegionCode.BAL: DatasetConfig(
        physics="cmems_mod_bal_phy_anfc_P1D-m",
        biogeochemistry="cmems_mod_bal_bgc_anfc_P1D-m",
        transparency="cmems_obs-oc_bal_bgc-transp_nrt_l3-olci-300m_P1D",
        waves=GLO_WAVES,
        label="Baltic Sea",
        coverage="High-resolution Baltic Sea model (2km)",
        model_name="BALTICSEA_ANALYSIS_FORECAST",
    ),
    RegionCode.MED: DatasetConfig(
        physics="cmems_mod_med_phy_anfc_4.2km_P1D-m",
        biogeochemistry="cmems_mod_med_bgc-bio_anfc_4.2km_P1D-m",
        transparency="cmems_obs-oc_med_bgc-transp_nrt_l3-multi-1km_P1D",
        waves=GLO_WAVES,
        label="Mediterranean Sea",
        coverage="High-resolution Mediterranean model (4.2km)",
        model_name="MEDSEA_ANALYSIS_FORECAST",
    ),
    RegionCode.BLK: DatasetConfig(
        physics="cmems_mod_blk_phy_anfc_2.5km_P1D-m",
        biogeochemistry="cmems_mod_blk_bgc_anfc_2.5km_P1D-m",
        transparency="cmems_obs-oc_blk_bgc-transp_nrt_l3-multi-1km_P1D",
        waves="cmems_mod_blk_wav_anfc_2.5km_PT1H-i",
        label="Black Sea",
        coverage="High-resolution Black Sea model (2.5km)",
        model_name="BLKSEA_ANALYSIS_FORECAST",
    ),
    RegionCode.IBI: DatasetConfig(
        physics="cmems_mod_ibi_phy_anfc_0.027deg-3D_P1D-m",
        biogeochemistry="cmems_mod_ibi_bgc_anfc_0.027deg-3D_P1D-m",
        transparency=ATL_TRANSPARENCY,
        waves="cmems_mod_ibi_wav_anfc_0.027deg_PT1H-i",
        label="Iberia-Biscay-Ireland",
        coverage="High-resolution Iberia-Biscay-Ireland model (3km)",
        model_name="IBI_ANALYSIS_FORECAST",
    ),
    # No daily regional physics on the shelf; the global split products are
    # used with Atlantic ocean-colour transparency.
    RegionCode.NWS: DatasetConfig(
        physics=GLO_TEMPERATURE,
        salinity=GLO_SALINITY,
        currents=GLO_CURRENTS,
        biogeochemistry=GLO_BIOGEOCHEMISTRY,
        transparency=ATL_TRANSPARENCY,
        waves=GLO_WAVES,
        label="Northwest European Shelf",
        coverage="Global model on the Northwest European Shelf (9km)",
        model_name="GLOBAL_ANALYSIS_FORECAST",
    ),
    RegionCode.ARC: DatasetConfig(
        physics="cmems_mod_arc_phy_anfc_6km_detided_P1D-m",
        biogeochemistry="cmems_mod_arc_bgc_anfc_ecosmo_P1D-m",
        transparency="cmems_obs-oc_arc_bgc-transp_nrt_l4-multi-4km_P1M",
        waves=GLO_WAVES,
        label="Arctic Ocean",
        coverage="Arctic Ocean model (6km)",
        model_name="ARCTIC_ANALYSIS_FORECAST",
    ),
    RegionCode.GLO: DatasetConfig(
        physics=GLO_TEMPERATURE,
        salinity=GLO_SALINITY,
        currents=GLO_CURRENTS,
        biogeochemistry=GLO_BIOGEOCHEMISTRY,
        transparency="cmems_obs-oc_glo_bgc-transp_nrt_l4-gapfree-multi-4km_P1D",
        waves=GLO_WAVES,
        label="Global Ocean",
        coverage="Global ocean model (9km)",
        model_name="GLOBAL_ANALYSIS_FORECAST",
    ),
}


# =============================================================================
# Routing tables
# =============================================================================

# North of this latitude everything is routed to the Arctic model.
POLAR_LATITUDE = 66.0

# Place-name fragments per basin, checked group by group in this order.
# Specific fragments sit in earlier groups than the generic ones they
# contain ("danish baltic" before "danish", "bristol channel" before "channel").
REGION_KEYWORDS: tuple[tuple[RegionCode, tuple[str, ...]], ...] = (
    (
        RegionCode.BAL,
        ("finnish", "swedish baltic", "polish baltic", "danish baltic", "baltic"),
    ),
    (
        RegionCode.MED,
        (
            "mediterranean",
            "adriatic",
            "italian",
            "greek",
            "turkish mediterranean",
            "croatian",
            "albanian",
            "slovenian",
            "montenegrin",
            "french mediterranean",
            "malta",
            "cyprus",
            "sicily",
            "sardinia",
            "corsica",
            "mallorca",
            "menorca",
            "ibiza",
            "crete",
            "rhodes",
            "dodecanese",
            "cyclades",
            "ionian",
            "aegean",
            "corfu",
            "peloponnese",
        ),
    ),
    (
        RegionCode.BLK,
        (
            "black sea",
            "bulgarian",
            "romanian",
            "turkish black",
            "ukrainian",
            "georgian",
            "crimea",
        ),
    ),
    (
        RegionCode.IBI,
        (
            "portuguese",
            "galician",
            "bay of biscay",
            "biscay",
            "irish",
            "ireland",
            "celtic sea",
            "cornwall",
            "devon",
            "bristol channel",
            "pembrokeshire",
            "cardigan",
            "anglesey",
            "wales",
            "merseyside",
            "lancashire",
            "cumbria",
            "hebrides",
            "west of scotland",
        ),
    ),
    (
        RegionCode.NWS,
        (
            "north sea",
            "english channel",
            "channel",
            "dutch",
            "danish",
            "norwegian",
            "scottish",
            "shetland",
            "orkney",
            "dogger",
            "yorkshire",
            "durham",
            "northumberland",
            "lincolnshire",
            "norfolk",
            "suffolk",
            "essex",
            "kent",
            "sussex",
            "hampshire",
            "dorset",
            "thames",
            "belgian",
            "german bight",
        ),
    ),
    (RegionCode.ARC, ("arctic", "svalbard", "barents", "greenland")),
)

# Fallback rectangles, first match wins. The Black Sea box sits inside the
# Mediterranean one, so it goes first.
BASIN_BOXES: tuple[tuple[RegionCode, BoundingBox], ...] = (
    (RegionCode.BLK, BoundingBox(south=40.5, west=27.5, north=47.0, east=42.0)),
    (RegionCode.MED, BoundingBox(south=30.0, west=-6.0, north=46.0, east=36.0)),
    (RegionCode.BAL, BoundingBox(south=53.0, west=10.0, north=66.0, east=30.0)),
    (RegionCode.NWS, BoundingBox(south=48.0, west=-12.0, north=63.0, east=13.0)),
    (RegionCode.IBI, BoundingBox(south=36.0, west=-20.0, north=54.0, east=-5.0)),
)
