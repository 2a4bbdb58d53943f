"""Marine data models: variables, fetch attempts, time series, snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from coastal_conditions.reference.basins import RegionCode
    from coastal_conditions.reference.geography import BoundingBox

# =============================================================================
# Variables
# =============================================================================


class Variable(StrEnum):
    """Closed set of marine variable keys (lowercased provider names)."""

    # Physics
    THETAO = "thetao"  # potential temperature, degC
    SO = "so"  # salinity, PSU
    UO = "uo"  # eastward current, m/s
    VO = "vo"  # northward current, m/s
    MLOTST = "mlotst"  # mixed layer depth, m
    ZOS = "zos"  # sea surface height, m
    BOTTOMT = "bottomt"  # sea floor temperature, degC

    # Biogeochemistry (concentrations in mmol/m3 unless noted)
    O2 = "o2"
    CHL = "chl"  # mg/m3
    KD490 = "kd490"  # light attenuation at 490 nm, 1/m
    NO3 = "no3"
    PO4 = "po4"
    ZOOC = "zooc"
    PHYC = "phyc"
    NPPV = "nppv"  # net primary production, mg C/m3/day
    PH = "ph"
    FE = "fe"
    SI = "si"

    # Waves
    VHM0 = "vhm0"  # significant wave height, m
    SWH = "swh"  # significant wave height (alternate name), m
    VMDR = "vmdr"  # mean wave direction, deg
    VTM10 = "vtm10"  # mean wave period, s
    VHM0_WW = "vhm0_ww"  # wind-sea height, m
    VHM0_SW1 = "vhm0_sw1"  # primary swell height, m


# Provider names that differ from the canonical key
VARIABLE_ALIASES: dict[str, Variable] = {
    "kd": Variable.KD490,
    "chla": Variable.CHL,
}


def parse_variable(name: str) -> Variable | None:
    """Map a provider variable name onto the closed enumeration, or None."""
    key = name.strip().lower()
    if key in VARIABLE_ALIASES:
        return VARIABLE_ALIASES[key]
    try:
        return Variable(key)
    except ValueError:
        return None


# =============================================================================
# Categories
# =============================================================================


class Volatility(StrEnum):
    """How quickly a category goes stale, bounding its date fallback."""

    STABLE = "stable"
    DYNAMIC = "dynamic"


class Category(StrEnum):
    """A group of variables fetched together from one dataset."""

    TEMPERATURE = "temperature"
    SALINITY = "salinity"
    CURRENTS = "currents"
    BIOGEOCHEMISTRY = "biogeochemistry"
    TRANSPARENCY = "transparency"
    WAVES = "waves"


@dataclass(frozen=True)
class CategorySpec:
    """What to request for a category and what makes a response usable.

    A response is usable when at least one ``key_variables`` entry carries a
    plausible value. ``request`` lists provider variable names; None asks the
    dataset for everything it has.
    """

    category: Category
    volatility: Volatility
    key_variables: tuple[Variable, ...]
    request: tuple[str, ...] | None


CATEGORY_SPECS: dict[Category, CategorySpec] = {
    Category.TEMPERATURE: CategorySpec(
        Category.TEMPERATURE, Volatility.STABLE, (Variable.THETAO,), ("thetao",)
    ),
    Category.SALINITY: CategorySpec(
        Category.SALINITY, Volatility.STABLE, (Variable.SO,), ("so",)
    ),
    Category.CURRENTS: CategorySpec(
        Category.CURRENTS, Volatility.DYNAMIC, (Variable.UO, Variable.VO), ("uo", "vo")
    ),
    Category.BIOGEOCHEMISTRY: CategorySpec(
        Category.BIOGEOCHEMISTRY,
        Volatility.STABLE,
        (
            Variable.O2,
            Variable.CHL,
            Variable.NO3,
            Variable.PO4,
            Variable.ZOOC,
            Variable.PHYC,
            Variable.NPPV,
        ),
        None,
    ),
    Category.TRANSPARENCY: CategorySpec(
        Category.TRANSPARENCY, Volatility.STABLE, (Variable.KD490,), ("KD490",)
    ),
    Category.WAVES: CategorySpec(
        Category.WAVES,
        Volatility.DYNAMIC,
        (Variable.VHM0, Variable.SWH),
        ("VHM0", "VMDR", "VTM10", "VHM0_WW", "VHM0_SW1"),
    ),
}


# =============================================================================
# Fetch attempts
# =============================================================================


class AttemptStatus(StrEnum):
    """Outcome of one (offset, padding) trial."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    NO_DATA = "no_data"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class FetchAttempt:
    """One trial against a dataset: how many days back and how wide a box."""

    category: Category
    day_offset: int
    padding: float
    timeout: float


@dataclass(frozen=True)
class AttemptOutcome:
    """What happened when an attempt was evaluated."""

    attempt: FetchAttempt
    dataset_id: str
    status: AttemptStatus
    timeseries: Timeseries | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is AttemptStatus.SUCCESS


@dataclass(frozen=True)
class FetchWindow:
    """Requested reference day (inclusive, UTC)."""

    day: date

    def shifted(self, days_back: int) -> FetchWindow:
        """The window ``days_back`` days earlier."""
        return FetchWindow(date.fromordinal(self.day.toordinal() - days_back))


# =============================================================================
# Time series
# =============================================================================


@dataclass
class TimeSeriesRecord:
    """One reading at (time, depth, lat, lon)."""

    time: datetime
    depth: float
    lat: float
    lon: float
    values: dict[Variable, float | None] = field(default_factory=dict)

    def get(self, variable: Variable) -> float | None:
        return self.values.get(variable)


@dataclass
class Timeseries:
    """Records returned by one dataset query."""

    dataset_id: str
    variables: list[Variable]
    records: list[TimeSeriesRecord]
    source: str

    def has_value(self, variables: tuple[Variable, ...]) -> bool:
        """True if any record holds a value for any of ``variables``."""
        return any(
            record.values.get(v) is not None for record in self.records for v in variables
        )


@dataclass
class MarineBundle:
    """Everything one acquisition returned for a point.

    ``physics`` is mandatory; biogeochemistry and waves are optional.
    """

    physics: Timeseries
    biogeochemical: Timeseries | None = None
    waves: Timeseries | None = None
    region: RegionCode | None = None
    winning_offset: int | None = None
    winning_padding: float | None = None
    attempts: list[AttemptOutcome] = field(default_factory=list)
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def dataset_ids(self) -> list[str]:
        """Contributing dataset ids, physics first, without duplicates."""
        ids: list[str] = []
        for series in (self.physics, self.biogeochemical, self.waves):
            if series is None:
                continue
            for dataset_id in series.dataset_id.split("+"):
                if dataset_id not in ids:
                    ids.append(dataset_id)
        return ids


# =============================================================================
# Snapshots
# =============================================================================


@dataclass
class DepthProfilePoint:
    """Physics and biogeochemistry at one depth."""

    depth: float
    temperature: float | None = None
    salinity: float | None = None
    current_east: float | None = None
    current_north: float | None = None
    dissolved_oxygen: float | None = None
    chlorophyll: float | None = None
    kd490: float | None = None
    nitrate: float | None = None
    phosphate: float | None = None
    zooplankton: float | None = None
    phytoplankton: float | None = None


@dataclass
class Snapshot:
    """One timestamp's merged surface values, derived fields and profile."""

    timestamp: datetime
    temperature_surface: float | None = None
    salinity_surface: float | None = None
    dissolved_oxygen_surface: float | None = None
    chlorophyll_surface: float | None = None
    kd490_surface: float | None = None
    nitrate_surface: float | None = None
    phosphate_surface: float | None = None
    current_east_surface: float | None = None
    current_north_surface: float | None = None
    current_speed_surface: float | None = None
    current_direction_surface: float | None = None
    mixed_layer_depth: float | None = None
    sea_surface_height: float | None = None
    zooplankton_surface: float | None = None
    phytoplankton_surface: float | None = None
    primary_production_surface: float | None = None
    significant_wave_height: float | None = None
    wave_direction: float | None = None
    wave_period: float | None = None
    wind_sea_height: float | None = None
    swell_height: float | None = None
    depth_profile: list[DepthProfilePoint] = field(default_factory=list)


@dataclass
class MarineData:
    """Snapshots for a point plus provenance."""

    lat: float
    lon: float
    snapshots: list[Snapshot]
    datasets: list[str]
    source: str
    generated_at: datetime
    notes: list[str] = field(default_factory=list)


# =============================================================================
# Provider contracts
# =============================================================================


class DatasetFetcher(Protocol):
    """Runs one subset query against one dataset."""

    def fetch(
        self,
        dataset_id: str,
        variables: tuple[str, ...] | None,
        bbox: BoundingBox,
        window: FetchWindow,
    ) -> Timeseries:
        """Return the parsed time series; raise on transport/parse failure."""
        ...


class MarineProvider(Protocol):
    """Fetches a full bundle for a point."""

    def fetch_bundle(self, lat: float, lon: float, window: FetchWindow) -> MarineBundle:
        """Return the bundle or raise ``NoUsableDataError``."""
        ...
