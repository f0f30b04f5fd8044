"""Error taxonomy of the web metric pipeline.

Every error raised while producing a measurement derives from
WebMetricError, so the provider can turn any of them into an Error
measurement without inspecting the concrete type.
"""

__all__ = [
    "ConfigurationError",
    "EvaluationError",
    "ExtractionError",
    "ProtocolError",
    "TransportError",
    "WebMetricError",
]


class WebMetricError(Exception):
    """Base class for web metric failures."""


class ConfigurationError(WebMetricError):
    """Invalid metric definition (bodies, method, OAuth2, path expression)."""


class TransportError(WebMetricError):
    """Network level failure: DNS, connection, TLS or timeout."""


class ProtocolError(WebMetricError):
    """Non-2xx HTTP response.

    Attributes:
        status_code: Status received from the server.
    """

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExtractionError(WebMetricError):
    """Response body could not be read or the path produced no value."""


class EvaluationError(WebMetricError):
    """The evaluator failed to produce a verdict."""
