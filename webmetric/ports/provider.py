"""Metric provider port definition (interface)."""

from __future__ import annotations

from typing import Protocol

from webmetric.ports.measurement import AnalysisRun, Measurement
from webmetric.ports.metric import Metric

__all__ = ["ProviderPort"]


class ProviderPort(Protocol):
    """Contract every metric provider fulfils for the analysis controller."""

    def type(self) -> str:
        """Return the provider type name."""
        ...

    def get_metadata(self, metric: Metric) -> dict[str, str] | None:
        """Return metadata to store alongside the metric result."""
        ...

    async def run(self, run: AnalysisRun, metric: Metric) -> Measurement:
        """Start a new measurement and return it."""
        ...

    def resume(self, run: AnalysisRun, metric: Metric, measurement: Measurement) -> Measurement:
        """Check on a previously started measurement."""
        ...

    def terminate(
        self, run: AnalysisRun, metric: Metric, measurement: Measurement
    ) -> Measurement:
        """Stop an in-flight measurement."""
        ...

    def garbage_collect(self, run: AnalysisRun, metric: Metric, limit: int) -> None:
        """Clean up provider resources older than the given limit."""
        ...
