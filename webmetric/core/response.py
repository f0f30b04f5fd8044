"""Response classification: status check, body decoding, extraction, verdict."""

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from webmetric.core.errors import EvaluationError, ExtractionError, ProtocolError, WebMetricError
from webmetric.ports.evaluator import EvaluatorPort
from webmetric.ports.measurement import AnalysisPhase
from webmetric.ports.metric import Metric

__all__ = ["Extractor", "WebResponse", "check_status", "first_value", "parse_response"]

logger = logging.getLogger(__name__)

# Floats at or beyond this magnitude keep exponent notation.
_MAX_PLAIN_FLOAT = 1e21


def _reject_constant(name: str) -> Any:
    """Refuse NaN and Infinity, which are not valid JSON."""
    raise ValueError(f"invalid JSON constant {name}")


def _integral_floats(value: Any) -> Any:
    """Replace integral floats (5.0, 1e2) with ints so they encode as 5 and 100."""
    if isinstance(value, float) and value.is_integer() and abs(value) < _MAX_PLAIN_FLOAT:
        return int(value)
    if isinstance(value, dict):
        return {k: _integral_floats(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_integral_floats(v) for v in value]
    return value


class WebResponse(Protocol):
    """The part of an HTTP response the classifier needs."""

    status: int

    async def read(self) -> bytes: ...


class Extractor(Protocol):
    """Compiled path expression."""

    def find(self, data: Any) -> list[list[Any]]: ...


def check_status(status: int) -> None:
    """Reject responses outside [200, 300).

    Raises:
        ProtocolError: For any non-2xx status.
    """
    if status < 200 or status >= 300:
        raise ProtocolError(f"received non 2xx response code: {status}", status_code=status)


def first_value(match_sets: list[list[Any]]) -> tuple[Any, str]:
    """Pick the first value of the first non-empty match-set.

    Args:
        match_sets: Extraction result, in extraction order.

    Returns:
        The typed value and its canonical JSON string.

    Raises:
        ExtractionError: If no match-set holds a value.
    """
    for matches in match_sets:
        for value in matches:
            value_str = json.dumps(
                _integral_floats(value), separators=(",", ":"), ensure_ascii=False
            )
            return value, value_str
    raise ExtractionError("result of web metric produced no value")


async def parse_response(
    response: WebResponse,
    extractor: Extractor,
    evaluator: EvaluatorPort,
    metric: Metric,
) -> tuple[str, AnalysisPhase]:
    """Turn a completed response into a measurement value and phase.

    Non-JSON bodies are returned verbatim as Successful without extraction.

    Args:
        response: Response whose status has not been checked yet.
        extractor: Compiled path expression of the metric.
        evaluator: Maps the extracted value to a verdict.
        metric: Metric holding the success/failure conditions.

    Returns:
        Canonical value string and the measurement phase.

    Raises:
        ProtocolError: On a non-2xx status.
        ExtractionError: If the body cannot be read or yields no value.
        EvaluationError: If the evaluator fails.
    """
    check_status(response.status)

    try:
        body = await response.read()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise ExtractionError(f"Received no bytes in response: {e}") from e

    try:
        data = json.loads(body, parse_constant=_reject_constant)
    except ValueError:
        logger.debug("Response body is not JSON, using raw body as value")
        return body.decode("utf-8", errors="replace"), AnalysisPhase.SUCCESSFUL

    value, value_str = first_value(extractor.find(data))

    try:
        phase = AnalysisPhase(evaluator(value, metric))
    except WebMetricError:
        raise
    except Exception as e:  # noqa: BLE001 - evaluator is host supplied
        raise EvaluationError(str(e)) from e

    return value_str, phase
