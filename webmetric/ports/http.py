"""HTTP port definition (DTO)."""

from dataclasses import dataclass, field

from webmetric.ports.metric import WebMetricMethod

__all__ = ["OutboundRequest"]


@dataclass(slots=True, frozen=True)
class OutboundRequest:
    """Concrete request derived from a metric definition.

    Built fresh for every invocation and never reused.

    Attributes:
        method: HTTP method.
        url: Target URL.
        body: Encoded body, or None when the request has no body.
        headers: Final header set (keys are unique, last write wins).
    """

    method: WebMetricMethod
    url: str
    body: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)
