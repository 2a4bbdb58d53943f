"""Per-basin provider handles, created once and shared across cells."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from coastal_conditions.datasources.copernicus.models import MarineProvider
    from coastal_conditions.reference.basins import RegionCode

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Lazily builds one provider per RegionCode.

    Owned by whoever runs the batch; not a module-level singleton. Safe to
    call from concurrent cell tasks: the factory runs at most once per code.
    """

    def __init__(self, factory: Callable[[RegionCode], MarineProvider]) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._providers: dict[RegionCode, MarineProvider] = {}

    def get(self, region: RegionCode) -> MarineProvider:
        with self._lock:
            provider = self._providers.get(region)
            if provider is None:
                logger.info("Creating marine provider for %s", region)
                provider = self._factory(region)
                self._providers[region] = provider
            return provider

    def __contains__(self, region: object) -> bool:
        with self._lock:
            return region in self._providers

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)
