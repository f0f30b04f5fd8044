"""Translation of a web metric definition into an outbound request."""

import json

from webmetric.core.errors import ConfigurationError
from webmetric.ports.http import OutboundRequest
from webmetric.ports.metric import WebMetric, WebMetricMethod

__all__ = ["CONTENT_TYPE_JSON", "CONTENT_TYPE_KEY", "build_request"]

CONTENT_TYPE_KEY = "Content-Type"
CONTENT_TYPE_JSON = "application/json"


def _canonical_header_key(key: str) -> str:
    """Return the MIME canonical form of a header key (content-type -> Content-Type)."""
    return "-".join(part.capitalize() for part in key.split("-"))


def build_request(web: WebMetric) -> OutboundRequest:
    """Build the request described by a web metric.

    Rules:
    1. Body and JSONBody are mutually exclusive.
    2. A body requires POST or PUT.
    3. Body is sent verbatim; JSONBody is serialized to JSON.
    4. Headers are applied in order with set semantics (last one wins).
    5. With JSONBody the content type is forced to application/json.

    No network I/O happens here.

    Args:
        web: Web provider block of the metric.

    Returns:
        The outbound request.

    Raises:
        ConfigurationError: If the body settings are invalid or the JSON body
            cannot be serialized.
    """
    method = web.method or WebMetricMethod.GET
    has_string_body = web.body != ""
    has_json_body = web.json_body is not None

    if has_string_body and has_json_body:
        raise ConfigurationError(
            "use either Body or JSONBody; both cannot exists for WebMetric payload"
        )
    if (has_string_body or has_json_body) and method == WebMetricMethod.GET:
        raise ConfigurationError(
            "Body/JSONBody can only be used with POST or PUT WebMetric Method types"
        )

    body: bytes | None = None
    if has_string_body:
        body = web.body.encode("utf-8")
    elif has_json_body:
        try:
            body = json.dumps(web.json_body, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"could not serialize JSONBody: {e}") from e

    headers: dict[str, str] = {}
    for header in web.headers:
        headers[_canonical_header_key(header.key)] = header.value
    if has_json_body:
        headers[CONTENT_TYPE_KEY] = CONTENT_TYPE_JSON

    return OutboundRequest(method=method, url=web.url, body=body, headers=headers)
