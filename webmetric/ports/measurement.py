"""Measurement port definition (DTOs exchanged with the analysis controller)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

__all__ = ["AnalysisPhase", "AnalysisRun", "Measurement", "utc_now"]


class AnalysisPhase(str, Enum):
    """Phase of a measurement or analysis run."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCESSFUL = "Successful"
    FAILED = "Failed"
    ERROR = "Error"
    INCONCLUSIVE = "Inconclusive"


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class AnalysisRun:
    """Identity of the analysis run a measurement belongs to.

    Only used to enrich log records.
    """

    name: str
    namespace: str = ""


@dataclass(slots=True)
class Measurement:
    """Result of a single metric measurement.

    Attributes:
        started_at: When the measurement began.
        finished_at: When the measurement completed; None if it errored out.
        value: Canonical JSON string of the extracted value (or raw body).
        phase: Verdict of the measurement.
        message: Error description when phase is Error.
        metadata: Provider metadata, unused by the web provider.
    """

    started_at: datetime | None = None
    finished_at: datetime | None = None
    value: str = ""
    phase: AnalysisPhase | None = None
    message: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
