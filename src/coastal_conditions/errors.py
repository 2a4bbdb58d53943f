"""Exceptions raised by the acquisition pipeline."""

from __future__ import annotations


class ConditionsError(Exception):
    """Base class for pipeline errors."""


class ProviderError(ConditionsError):
    """A provider call failed (transport error, malformed payload)."""


class NoUsableDataError(ConditionsError):
    """Every fallback combination for the mandatory category came back empty.

    Raised per point/query. Callers record the cell as failed and move on.
    """

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class NoWeatherDataError(ConditionsError):
    """Every applicable weather tier, including the paid one, failed."""
