"""Web metric provider: runs one HTTP measurement per invocation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from webmetric.core.errors import WebMetricError
from webmetric.core.request_builder import build_request
from webmetric.core.response import Extractor, WebResponse, parse_response
from webmetric.ports.evaluator import EvaluatorPort
from webmetric.ports.http import OutboundRequest
from webmetric.ports.measurement import AnalysisPhase, AnalysisRun, Measurement, utc_now
from webmetric.ports.metric import Metric
from webmetric.ports.provider import ProviderPort

__all__ = ["PROVIDER_TYPE", "HttpSender", "WebMetricProvider", "mark_measurement_error"]

PROVIDER_TYPE = "Web"

LogContext = logging.Logger | logging.LoggerAdapter


class HttpSender(Protocol):
    """Anything able to send an outbound request (see WebMetricHttpClient)."""

    def send(self, request: OutboundRequest) -> AbstractAsyncContextManager[WebResponse]: ...


def mark_measurement_error(measurement: Measurement, err: BaseException) -> Measurement:
    """Mark a measurement as Error, keeping StartedAt and leaving FinishedAt unset."""
    measurement.phase = AnalysisPhase.ERROR
    measurement.message = str(err)
    return measurement


class WebMetricProvider(ProviderPort):
    """Provider issuing one HTTP request per measurement.

    The client and extractor are built once per metric definition and never
    mutated here, so one provider may serve concurrent invocations.
    """

    def __init__(
        self,
        log_ctx: LogContext,
        client: HttpSender,
        extractor: Extractor,
        evaluator: EvaluatorPort,
        now_fn: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the provider.

        Args:
            log_ctx: Logger (or adapter) carrying the metric context.
            client: Pre-built HTTP client.
            extractor: Pre-compiled path expression.
            evaluator: Maps extracted values to verdicts.
            now_fn: Clock used for measurement timestamps.
        """
        self.log_ctx = log_ctx
        self.client = client
        self.extractor = extractor
        self.evaluator = evaluator
        self._now = now_fn

    def type(self) -> str:
        """Return the provider type."""
        return PROVIDER_TYPE

    def get_metadata(self, metric: Metric) -> dict[str, str] | None:
        """Web metrics carry no extra metadata."""
        return None

    async def run(self, run: AnalysisRun, metric: Metric) -> Measurement:
        """Run one measurement.

        Validate and build the request, send it, check the status, extract the
        value and evaluate it. Any failure yields an Error measurement; nothing
        is raised to the caller.

        Args:
            run: Analysis run the measurement belongs to.
            metric: Metric definition.

        Returns:
            A completed measurement, or an Error measurement with only
            StartedAt set.
        """
        measurement = Measurement(started_at=self._now())

        try:
            request = build_request(metric.provider.web)
            async with self.client.send(request) as response:
                value, phase = await parse_response(
                    response, self.extractor, self.evaluator, metric
                )
        except WebMetricError as e:
            self.log_ctx.warning(f"Measurement for run {run.name!r} failed: {e}")
            return mark_measurement_error(measurement, e)
        except Exception as e:  # noqa: BLE001 - controller must only see measurements
            self.log_ctx.error(
                f"Unexpected error measuring run {run.name!r}: {e}", exc_info=True
            )
            return mark_measurement_error(measurement, e)

        measurement.value = value
        measurement.phase = phase
        measurement.finished_at = self._now()
        self.log_ctx.debug(f"Measurement for run {run.name!r}: value={value} phase={phase.value}")
        return measurement

    def resume(self, run: AnalysisRun, metric: Metric, measurement: Measurement) -> Measurement:
        """No-op: every measurement completes inside run()."""
        self.log_ctx.warning("WebMetric provider should not execute the Resume method")
        return measurement

    def terminate(
        self, run: AnalysisRun, metric: Metric, measurement: Measurement
    ) -> Measurement:
        """No-op: there is never an in-flight measurement to stop."""
        self.log_ctx.warning("WebMetric provider should not execute the Terminate method")
        return measurement

    def garbage_collect(self, run: AnalysisRun, metric: Metric, limit: int) -> None:
        """No-op: the provider owns no persistent resources."""
        return None
