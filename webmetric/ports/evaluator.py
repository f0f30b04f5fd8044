"""Evaluator port definition (interface)."""

from __future__ import annotations

from typing import Any, Protocol

from webmetric.ports.measurement import AnalysisPhase
from webmetric.ports.metric import Metric

__all__ = ["EvaluatorPort"]


class EvaluatorPort(Protocol):
    """Maps an extracted value to a verdict using the metric's conditions.

    Implementations are supplied by the host; any exception they raise is
    reported as an Error measurement.
    """

    def __call__(self, value: Any, metric: Metric, /) -> AnalysisPhase:
        """Evaluate the value against success/failure conditions.

        Args:
            value: Decoded JSON value selected by the path expression.
            metric: Metric holding the success and failure conditions.

        Returns:
            Successful, Failed or Error.
        """
        ...
