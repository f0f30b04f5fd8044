"""Shared fixtures and fakes for web metric tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import pytest

from webmetric.ports.http import OutboundRequest
from webmetric.ports.measurement import AnalysisPhase, AnalysisRun
from webmetric.ports.metric import Metric

__all__ = []


class FakeResponse:
    """Minimal response exposing status and read()."""

    def __init__(self, status: int = 200, body: bytes = b"", read_error: Exception | None = None):
        self.status = status
        self._body = body
        self._read_error = read_error

    async def read(self) -> bytes:
        """Return the body or raise the configured error."""
        if self._read_error is not None:
            raise self._read_error
        return self._body


class FakeClient:
    """HTTP client double recording every request it is asked to send."""

    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None):
        self.response = response or FakeResponse()
        self.error = error
        self.requests: list[OutboundRequest] = []

    @asynccontextmanager
    async def send(self, request: OutboundRequest) -> AsyncIterator[FakeResponse]:
        """Record the request and yield the canned response."""
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        yield self.response


class RecordingEvaluator:
    """Evaluator double returning a fixed phase and recording its inputs."""

    def __init__(self, phase: AnalysisPhase = AnalysisPhase.SUCCESSFUL) -> None:
        self.phase = phase
        self.calls: list[tuple[Any, Metric]] = []

    def __call__(self, value: Any, metric: Metric) -> AnalysisPhase:
        self.calls.append((value, metric))
        return self.phase


def build_metric(**web: Any) -> Metric:
    """Build a metric with the given web provider fields."""
    web.setdefault("url", "http://metrics.local/api")
    return Metric.model_validate(
        {
            "name": "success-rate",
            "successCondition": "result == 5",
            "provider": {"web": web},
        }
    )


@pytest.fixture
def analysis_run() -> AnalysisRun:
    """Analysis run context used by provider calls."""
    return AnalysisRun(name="rollout-abc-1", namespace="default")


@pytest.fixture
def make_metric() -> Callable[..., Metric]:
    """Factory building metrics from web provider fields."""
    return build_metric


@pytest.fixture
def make_response() -> type[FakeResponse]:
    """Factory for fake HTTP responses."""
    return FakeResponse


@pytest.fixture
def fake_client() -> FakeClient:
    """Fake HTTP client answering 200 with an empty body."""
    return FakeClient()


@pytest.fixture
def evaluator() -> RecordingEvaluator:
    """Evaluator returning Successful unless reconfigured."""
    return RecordingEvaluator()
