"""Builds a web metric provider from a metric definition."""

import logging

from webmetric.adapters.driven.config.settings import ProviderSettings
from webmetric.adapters.driven.http.client import new_web_metric_http_client
from webmetric.adapters.driven.jsonpath.extractor import new_json_path_extractor
from webmetric.core.provider import WebMetricProvider
from webmetric.ports.evaluator import EvaluatorPort
from webmetric.ports.metric import Metric

__all__ = ["new_web_metric_provider"]

logger = logging.getLogger(__name__)


def new_web_metric_provider(
    metric: Metric,
    evaluator: EvaluatorPort,
    log: logging.Logger | None = None,
    settings: ProviderSettings | None = None,
) -> WebMetricProvider:
    """Read a metric definition once and build its provider.

    Args:
        metric: Metric definition with a web provider block.
        evaluator: Maps extracted values to verdicts.
        log: Base logger; defaults to the webmetric provider logger.
        settings: Process defaults; built-in defaults when omitted.

    Returns:
        Provider with its HTTP client and path extractor pre-built.

    Raises:
        ConfigurationError: If OAuth2 settings or the path expression are invalid.
    """
    settings = settings or ProviderSettings()
    client = new_web_metric_http_client(metric, default_timeout_sec=settings.default_timeout_sec)
    extractor = new_json_path_extractor(metric)
    log_ctx = logging.LoggerAdapter(
        log or logging.getLogger("webmetric.provider"), {"metric": metric.name}
    )
    logger.debug(f"Built web metric provider for metric {metric.name!r}")
    return WebMetricProvider(
        log_ctx=log_ctx, client=client, extractor=extractor, evaluator=evaluator
    )
