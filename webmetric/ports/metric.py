"""Metric definition port (read-only input from the analysis controller)."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "Metric",
    "MetricProvider",
    "OAuth2Config",
    "WebMetric",
    "WebMetricAuthentication",
    "WebMetricHeader",
    "WebMetricMethod",
]


class WebMetricMethod(str, Enum):
    """HTTP methods a web metric may use."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"


class _ManifestModel(BaseModel):
    """Base model accepting both snake_case names and manifest camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class WebMetricHeader(_ManifestModel):
    """A single header to set on the outbound request."""

    key: str
    value: str


class OAuth2Config(_ManifestModel):
    """Client credentials grant settings.

    Attributes:
        token_url: Token endpoint; OAuth2 is disabled when empty.
        client_id: Client identifier (mandatory when token_url is set).
        client_secret: Client secret (mandatory when token_url is set).
        scopes: Scopes requested with the token.
    """

    token_url: str = Field(default="", alias="tokenUrl")
    client_id: str = Field(default="", alias="clientId")
    client_secret: str = Field(default="", alias="clientSecret")
    scopes: list[str] = Field(default_factory=list)


class WebMetricAuthentication(_ManifestModel):
    """Authentication block of a web metric."""

    oauth2: OAuth2Config = Field(default_factory=OAuth2Config)


class WebMetric(_ManifestModel):
    """Web provider block of a metric.

    Attributes:
        method: HTTP method; empty means GET.
        url: Target URL.
        headers: Ordered headers; later keys overwrite earlier ones.
        body: Raw string body (POST/PUT only).
        json_body: Structured body serialized as JSON (POST/PUT only).
        timeout_seconds: Request timeout; values <= 0 fall back to the default.
        json_path: Path expression selecting the value; empty selects the root.
        insecure: Skip TLS certificate verification.
        authentication: Optional OAuth2 client credentials.
    """

    method: WebMetricMethod | None = None
    url: str
    headers: list[WebMetricHeader] = Field(default_factory=list)
    body: str = ""
    json_body: Any | None = Field(default=None, alias="jsonBody")
    timeout_seconds: int = Field(default=0, alias="timeoutSeconds")
    json_path: str = Field(default="", alias="jsonPath")
    insecure: bool = False
    authentication: WebMetricAuthentication = Field(default_factory=WebMetricAuthentication)

    @field_validator("method", mode="before")
    @classmethod
    def validate_method(cls, v: object) -> object:
        """Normalize the method name; an empty string means unset.

        Args:
            v: Raw method value.

        Returns:
            None for an empty value, the upper-cased name otherwise.
        """
        if v == "":
            return None
        if isinstance(v, str):
            return v.upper()
        return v


class MetricProvider(_ManifestModel):
    """Provider selector; only the web provider is modelled here."""

    web: WebMetric


class Metric(_ManifestModel):
    """A metric of an analysis template.

    Attributes:
        name: Metric name, used for log context.
        success_condition: Expression deciding success, handed to the evaluator.
        failure_condition: Expression deciding failure, handed to the evaluator.
        provider: Provider configuration.
    """

    name: str
    success_condition: str = Field(default="", alias="successCondition")
    failure_condition: str = Field(default="", alias="failureCondition")
    provider: MetricProvider
