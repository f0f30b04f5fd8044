"""HTTP client adapter for web metric requests."""

import asyncio
import functools
import logging
import ssl
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp
from aiohttp import ClientResponse, ClientTimeout

from webmetric.adapters.driven.http.oauth2 import ClientCredentialsTokenSource
from webmetric.core.errors import ConfigurationError, TransportError
from webmetric.ports.http import OutboundRequest
from webmetric.ports.metric import Metric

__all__ = [
    "DEFAULT_TIMEOUT_SEC",
    "WebMetricHttpClient",
    "insecure_ssl_context",
    "new_web_metric_http_client",
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10


@functools.cache
def insecure_ssl_context() -> ssl.SSLContext:
    """Return the process-wide TLS context that skips certificate verification.

    Built on first use and never modified afterwards.
    """
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class WebMetricHttpClient:
    """Immutable HTTP client configured for one metric definition.

    Each request runs in its own short-lived session, so one client can be
    shared by concurrent invocations and across event loops.
    """

    def __init__(
        self,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        ssl_context: ssl.SSLContext | None = None,
        token_source: ClientCredentialsTokenSource | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout_sec: Total timeout per request in seconds.
            ssl_context: Custom TLS context; None uses default verification.
            token_source: Optional OAuth2 token source attaching bearer tokens.
        """
        self.timeout = ClientTimeout(total=timeout_sec)
        self.ssl_context = ssl_context
        self.token_source = token_source

    @property
    def _ssl_option(self) -> ssl.SSLContext | bool:
        return self.ssl_context if self.ssl_context is not None else True

    @asynccontextmanager
    async def send(self, request: OutboundRequest) -> AsyncIterator[ClientResponse]:
        """Send a request and yield the response before its body is read.

        The connection is released when the context exits.

        Args:
            request: Request to send.

        Yields:
            The HTTP response.

        Raises:
            TransportError: On DNS, connection, TLS or timeout failures.
            ProtocolError: If the OAuth2 token endpoint rejects the client.
        """
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            headers = dict(request.headers)
            if self.token_source is not None:
                token = await self.token_source.token(session, self._ssl_option)
                headers["Authorization"] = token.authorization

            # Only the declared headers go out; aiohttp must not add a content type.
            has_content_type = any(key.lower() == "content-type" for key in headers)
            skip_auto_headers = () if has_content_type else ("Content-Type",)

            logger.debug(f"Sending {request.method.value} {request.url}")
            try:
                response = await session.request(
                    request.method.value,
                    request.url,
                    data=request.body,
                    headers=headers,
                    skip_auto_headers=skip_auto_headers,
                    ssl=self._ssl_option,
                )
            except asyncio.TimeoutError as e:
                raise TransportError(
                    f"request to {request.url} timed out after {self.timeout.total}s"
                ) from e
            except aiohttp.ClientError as e:
                raise TransportError(f"request to {request.url} failed: {e}") from e

            async with response:
                yield response


def new_web_metric_http_client(
    metric: Metric, default_timeout_sec: int = DEFAULT_TIMEOUT_SEC
) -> WebMetricHttpClient:
    """Build the HTTP client for a metric definition.

    Args:
        metric: Metric whose web provider configures the client.
        default_timeout_sec: Timeout used when the metric sets none (<= 0).

    Returns:
        Configured client, wrapped with OAuth2 when a token URL is set.

    Raises:
        ConfigurationError: If OAuth2 is enabled without client ID or secret.
    """
    web = metric.provider.web
    timeout_sec = web.timeout_seconds if web.timeout_seconds > 0 else default_timeout_sec
    ssl_context = insecure_ssl_context() if web.insecure else None

    oauth2 = web.authentication.oauth2
    token_source = None
    if oauth2.token_url:
        if not oauth2.client_id or not oauth2.client_secret:
            raise ConfigurationError("missing mandatory parameter in metric for OAuth2 setup")
        token_source = ClientCredentialsTokenSource(
            token_url=oauth2.token_url,
            client_id=oauth2.client_id,
            client_secret=oauth2.client_secret,
            scopes=tuple(oauth2.scopes),
        )

    return WebMetricHttpClient(
        timeout_sec=timeout_sec, ssl_context=ssl_context, token_source=token_source
    )
