"""End-to-end tests for building and running a web metric provider."""

import logging

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as LocalServer

from webmetric.adapters.driven.config.settings import ProviderSettings
from webmetric.core.errors import ConfigurationError
from webmetric.factory import new_web_metric_provider
from webmetric.ports.measurement import AnalysisPhase

__all__ = []


async def metrics_endpoint(request: web.Request) -> web.Response:
    """Serve a small metrics document."""
    return web.json_response({"data": {"ok": True, "rate": 0.99}})


async def query_endpoint(request: web.Request) -> web.Response:
    """Echo the posted JSON query back in a result envelope."""
    query = await request.json()
    return web.json_response({"result": [{"query": query["q"], "value": 42}]})


async def missing_endpoint(request: web.Request) -> web.Response:
    """Always answer 404."""
    return web.Response(status=404, text="nope")


def make_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/metrics", metrics_endpoint)
    app.router.add_post("/query", query_endpoint)
    app.router.add_get("/missing", missing_endpoint)
    return app


@pytest.mark.asyncio
async def test_provider_measures_json_value(analysis_run, make_metric, evaluator) -> None:
    """A provider built from a metric should fetch, extract and evaluate."""
    async with LocalServer(make_app()) as server:
        metric = make_metric(url=str(server.make_url("/metrics")), jsonPath="{$.data.rate}")
        provider = new_web_metric_provider(metric, evaluator)

        measurement = await provider.run(analysis_run, metric)

    assert measurement.phase == AnalysisPhase.SUCCESSFUL
    assert measurement.value == "0.99"
    assert measurement.finished_at is not None
    assert evaluator.calls == [(0.99, metric)]


@pytest.mark.asyncio
async def test_provider_posts_json_body(analysis_run, make_metric, evaluator) -> None:
    """JSON bodies should be posted and the result extracted."""
    evaluator.phase = AnalysisPhase.FAILED
    async with LocalServer(make_app()) as server:
        metric = make_metric(
            url=str(server.make_url("/query")),
            method="POST",
            jsonBody={"q": "error_rate"},
            jsonPath="{.result[0]}",
        )
        provider = new_web_metric_provider(metric, evaluator)

        measurement = await provider.run(analysis_run, metric)

    assert measurement.phase == AnalysisPhase.FAILED
    assert measurement.value == '{"query":"error_rate","value":42}'


@pytest.mark.asyncio
async def test_provider_reports_http_errors(analysis_run, make_metric, evaluator) -> None:
    """Non-2xx responses should become Error measurements."""
    async with LocalServer(make_app()) as server:
        metric = make_metric(url=str(server.make_url("/missing")))
        provider = new_web_metric_provider(metric, evaluator)

        measurement = await provider.run(analysis_run, metric)

    assert measurement.phase == AnalysisPhase.ERROR
    assert measurement.message == "received non 2xx response code: 404"
    assert measurement.finished_at is None


def test_factory_uses_settings_and_metric_logger(make_metric, evaluator) -> None:
    """Settings defaults and the metric name should flow into the provider."""
    provider = new_web_metric_provider(
        make_metric(),
        evaluator,
        log=logging.getLogger("host"),
        settings=ProviderSettings(default_timeout_sec=42),
    )

    assert provider.client.timeout.total == 42
    assert provider.log_ctx.extra == {"metric": "success-rate"}
    assert provider.log_ctx.logger.name == "host"


def test_factory_rejects_invalid_path(make_metric, evaluator) -> None:
    """An unparseable path should fail provider construction."""
    with pytest.raises(ConfigurationError):
        new_web_metric_provider(make_metric(jsonPath="{.a"), evaluator)


def test_factory_rejects_incomplete_oauth2(make_metric, evaluator) -> None:
    """OAuth2 without a secret should fail before any request is made."""
    metric = make_metric(
        authentication={"oauth2": {"tokenUrl": "http://auth/token", "clientId": "id"}}
    )

    with pytest.raises(ConfigurationError, match="OAuth2"):
        new_web_metric_provider(metric, evaluator)
