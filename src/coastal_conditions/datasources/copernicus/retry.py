"""
Retry search over (date offset, spatial padding) for regional ocean models.

Regional products often have nothing at the exact point and day asked for:
the point is masked as land, or today's run hasn't been published. The engine
relaxes the query along two axes:

- temporal: stable categories may fall back up to 3 days, dynamic ones 1 day;
- spatial: the query box grows through the configured paddings, smallest first.

Each category's search is an explicit ordered tuple of ``FetchAttempt``
descriptors (offset-major) evaluated with early exit on the first usable
response. Temperature is mandatory and searched first; salinity and currents
reuse its winning (offset, padding) with a single attempt; biogeochemistry,
transparency and waves are searched independently and are optional.

Every attempt runs under its own timeout. A timed-out attempt is abandoned
(its worker thread is left to finish in the background) and the engine moves
on to the next descriptor.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, TypeVar

from coastal_conditions.datasources.copernicus.client import (
    ATTEMPT_TIMEOUT_S,
    DEFAULT_PADDINGS,
    DYNAMIC_MAX_OFFSET_DAYS,
    PROBE_TIMEOUT_S,
    STABLE_MAX_OFFSET_DAYS,
)
from coastal_conditions.datasources.copernicus.models import (
    CATEGORY_SPECS,
    AttemptOutcome,
    AttemptStatus,
    Category,
    FetchAttempt,
    MarineBundle,
    Timeseries,
    TimeSeriesRecord,
    Volatility,
)
from coastal_conditions.datasources.copernicus.plausibility import DEFAULT_BOUNDS, filter_values
from coastal_conditions.datasources.copernicus.transform import merge_series
from coastal_conditions.errors import NoUsableDataError
from coastal_conditions.reference.geography import BoundingBox

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from coastal_conditions.datasources.copernicus.models import DatasetFetcher, FetchWindow
    from coastal_conditions.datasources.copernicus.plausibility import Family
    from coastal_conditions.reference.basins import DatasetConfig, RegionCode

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEPENDENT_CATEGORIES = (Category.SALINITY, Category.CURRENTS)


def max_offset_for(category: Category) -> int:
    """Oldest acceptable data for a category, in days."""
    if CATEGORY_SPECS[category].volatility is Volatility.DYNAMIC:
        return DYNAMIC_MAX_OFFSET_DAYS
    return STABLE_MAX_OFFSET_DAYS


def build_attempt_plan(
    category: Category,
    paddings: Sequence[float] = DEFAULT_PADDINGS,
    max_offset: int | None = None,
    probe_timeout: float = PROBE_TIMEOUT_S,
    attempt_timeout: float = ATTEMPT_TIMEOUT_S,
) -> tuple[FetchAttempt, ...]:
    """
    Ordered attempts for one category.

    Offsets run outward from 0; within an offset, paddings run smallest first.
    Attempts at the smallest padding get the shorter probe timeout.

    Raises:
        ValueError: If no paddings are configured.
    """
    if not paddings:
        msg = "At least one spatial padding is required"
        raise ValueError(msg)
    if max_offset is None:
        max_offset = max_offset_for(category)

    ordered = sorted(set(paddings))
    smallest = ordered[0]
    return tuple(
        FetchAttempt(
            category=category,
            day_offset=offset,
            padding=padding,
            timeout=probe_timeout if padding == smallest else attempt_timeout,
        )
        for offset in range(max_offset + 1)
        for padding in ordered
    )


def run_with_timeout(fn: Callable[[], T], timeout: float) -> T:
    """Run ``fn`` in a worker thread and wait at most ``timeout`` seconds.

    Raises:
        TimeoutError: If ``fn`` did not finish in time. The worker is not
            interrupted; its result is discarded when it completes.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="marine-attempt")
    try:
        future = executor.submit(fn)
        return future.result(timeout=timeout)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def clean_timeseries(
    series: Timeseries,
    bounds: Mapping[Family, tuple[float, float]] = DEFAULT_BOUNDS,
) -> Timeseries:
    """Apply the plausibility filter, dropping records left with no values."""
    records: list[TimeSeriesRecord] = []
    for record in series.records:
        values = filter_values(record.values, bounds)
        if any(v is not None for v in values.values()):
            records.append(
                TimeSeriesRecord(
                    time=record.time,
                    depth=record.depth,
                    lat=record.lat,
                    lon=record.lon,
                    values=values,
                )
            )
    return Timeseries(
        dataset_id=series.dataset_id,
        variables=list(series.variables),
        records=records,
        source=series.source,
    )


class RetryFetchEngine:
    """Fallback search over one basin's datasets for a single point."""

    def __init__(
        self,
        config: DatasetConfig,
        fetcher: DatasetFetcher,
        *,
        region: RegionCode | None = None,
        paddings: Sequence[float] = DEFAULT_PADDINGS,
        probe_timeout: float = PROBE_TIMEOUT_S,
        attempt_timeout: float = ATTEMPT_TIMEOUT_S,
        bounds: Mapping[Family, tuple[float, float]] = DEFAULT_BOUNDS,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.region = region
        self.paddings = tuple(paddings)
        self.probe_timeout = probe_timeout
        self.attempt_timeout = attempt_timeout
        self.bounds = bounds

    def dataset_for(self, category: Category) -> str | None:
        """Dataset id serving a category in this basin."""
        cfg = self.config
        datasets: dict[Category, str | None] = {
            Category.TEMPERATURE: cfg.physics,
            Category.SALINITY: cfg.salinity or cfg.physics,
            Category.CURRENTS: cfg.currents or cfg.physics,
            Category.BIOGEOCHEMISTRY: cfg.biogeochemistry,
            Category.TRANSPARENCY: cfg.transparency,
            Category.WAVES: cfg.waves,
        }
        return datasets[category]

    def plan(self, category: Category) -> tuple[FetchAttempt, ...]:
        """The ordered attempt list this engine would evaluate for a category."""
        return build_attempt_plan(
            category,
            self.paddings,
            probe_timeout=self.probe_timeout,
            attempt_timeout=self.attempt_timeout,
        )

    def evaluate(
        self, attempt: FetchAttempt, lat: float, lon: float, window: FetchWindow
    ) -> AttemptOutcome:
        """Run one attempt. Never raises; failures become the outcome status."""
        dataset_id = self.dataset_for(attempt.category)
        if dataset_id is None:
            return AttemptOutcome(
                attempt, "", AttemptStatus.NO_DATA, detail="no dataset for category"
            )

        spec = CATEGORY_SPECS[attempt.category]
        bbox = BoundingBox.around(lat, lon, attempt.padding)
        day = window.shifted(attempt.day_offset)

        def _query() -> Timeseries:
            return self.fetcher.fetch(dataset_id, spec.request, bbox, day)

        try:
            raw = run_with_timeout(_query, attempt.timeout)
        except TimeoutError:
            logger.info(
                "%s: timeout after %.0fs (%s, d-%d, %.2f deg)",
                attempt.category,
                attempt.timeout,
                dataset_id,
                attempt.day_offset,
                attempt.padding,
            )
            return AttemptOutcome(attempt, dataset_id, AttemptStatus.TIMEOUT)
        except Exception as exc:  # noqa: BLE001
            logger.info(
                "%s: %s failed (d-%d, %.2f deg): %s",
                attempt.category,
                dataset_id,
                attempt.day_offset,
                attempt.padding,
                exc,
            )
            return AttemptOutcome(
                attempt, dataset_id, AttemptStatus.TRANSPORT_ERROR, detail=str(exc)
            )

        series = clean_timeseries(raw, self.bounds)
        if not series.has_value(spec.key_variables):
            logger.debug(
                "%s: no plausible values in %s (d-%d, %.2f deg)",
                attempt.category,
                dataset_id,
                attempt.day_offset,
                attempt.padding,
            )
            return AttemptOutcome(attempt, dataset_id, AttemptStatus.NO_DATA)

        return AttemptOutcome(attempt, dataset_id, AttemptStatus.SUCCESS, timeseries=series)

    def search(
        self,
        attempts: Sequence[FetchAttempt],
        lat: float,
        lon: float,
        window: FetchWindow,
        log: list[AttemptOutcome],
    ) -> AttemptOutcome | None:
        """Evaluate attempts in order, stopping at the first success."""
        for attempt in attempts:
            outcome = self.evaluate(attempt, lat, lon, window)
            log.append(outcome)
            if outcome.ok:
                return outcome
        return None

    def fetch_bundle(self, lat: float, lon: float, window: FetchWindow) -> MarineBundle:
        """
        Acquire physics (mandatory) plus optional biogeochemistry and waves.

        Raises:
            NoUsableDataError: If no temperature attempt yielded usable data.
        """
        log: list[AttemptOutcome] = []

        temperature = self.search(self.plan(Category.TEMPERATURE), lat, lon, window, log)
        if temperature is None or temperature.timeseries is None:
            msg = f"No valid physics data for ({lat:.3f}, {lon:.3f}) after {len(log)} attempts"
            raise NoUsableDataError(msg, attempts=len(log))

        winner = temperature.attempt
        logger.info(
            "Temperature from %s (d-%d, %.2f deg)",
            temperature.dataset_id,
            winner.day_offset,
            winner.padding,
        )
        physics = temperature.timeseries

        for category in DEPENDENT_CATEGORIES:
            attempt = FetchAttempt(
                category=category,
                day_offset=min(winner.day_offset, max_offset_for(category)),
                padding=winner.padding,
                timeout=winner.timeout,
            )
            outcome = self.evaluate(attempt, lat, lon, window)
            log.append(outcome)
            if outcome.ok and outcome.timeseries is not None:
                physics = merge_series(physics, outcome.timeseries)

        bio = self.search(self.plan(Category.BIOGEOCHEMISTRY), lat, lon, window, log)
        transparency = self.search(self.plan(Category.TRANSPARENCY), lat, lon, window, log)
        biogeochemical = bio.timeseries if bio else None
        if transparency is not None and transparency.timeseries is not None:
            biogeochemical = (
                merge_series(biogeochemical, transparency.timeseries)
                if biogeochemical is not None
                else transparency.timeseries
            )

        waves = self.search(self.plan(Category.WAVES), lat, lon, window, log)

        return MarineBundle(
            physics=physics,
            biogeochemical=biogeochemical,
            waves=waves.timeseries if waves else None,
            region=self.region,
            winning_offset=winner.day_offset,
            winning_padding=winner.padding,
            attempts=log,
        )
