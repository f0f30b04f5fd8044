"""OAuth2 client credentials grant (RFC 6749 section 4.4) on aiohttp."""

from __future__ import annotations

import asyncio
import json
import logging
import ssl
import time
from dataclasses import dataclass
from urllib.parse import parse_qsl, quote_plus

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from webmetric.core.errors import ProtocolError, TransportError

__all__ = ["ClientCredentialsTokenSource", "Token", "TokenResponse", "EXPIRY_DELTA_SEC"]

logger = logging.getLogger(__name__)

# Tokens are refreshed this many seconds before they actually expire.
EXPIRY_DELTA_SEC = 10.0


class TokenResponse(BaseModel):
    """Successful token endpoint response body."""

    access_token: str = Field(..., min_length=1)
    token_type: str = "Bearer"
    expires_in: int | None = None


@dataclass(slots=True, frozen=True)
class Token:
    """Access token with its monotonic expiry time (None: never expires)."""

    access_token: str
    token_type: str
    expires_at: float | None = None

    def is_valid(self, now: float) -> bool:
        """Return True if the token can still be used at monotonic time now."""
        return self.expires_at is None or now < self.expires_at - EXPIRY_DELTA_SEC

    @property
    def authorization(self) -> str:
        """Value for the Authorization header."""
        token_type = self.token_type
        if token_type.lower() == "bearer":
            token_type = "Bearer"
        return f"{token_type} {self.access_token}"


class ClientCredentialsTokenSource:
    """Fetches and caches tokens from a token endpoint.

    The cached token is replaced as a whole, never mutated, so concurrent
    callers either see the previous token or the new one. Two callers racing
    on an expired token may both fetch; the last one wins.
    """

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        scopes: tuple[str, ...] = (),
    ) -> None:
        """Initialize the token source.

        Args:
            token_url: Token endpoint URL.
            client_id: OAuth2 client identifier.
            client_secret: OAuth2 client secret.
            scopes: Scopes to request.
        """
        self.token_url = token_url
        self.client_id = client_id
        self._client_secret = client_secret
        self.scopes = scopes
        self._token: Token | None = None

    async def token(
        self, session: aiohttp.ClientSession, ssl_option: ssl.SSLContext | bool = True
    ) -> Token:
        """Return a valid token, fetching a new one when needed.

        Args:
            session: Session used for the token request.
            ssl_option: TLS setting, same as for metric requests.

        Returns:
            A token valid for at least EXPIRY_DELTA_SEC seconds.

        Raises:
            TransportError: If the token endpoint is unreachable.
            ProtocolError: If the token endpoint rejects the request.
        """
        current = self._token
        if current is not None and current.is_valid(time.monotonic()):
            return current

        token = await self._fetch(session, ssl_option)
        self._token = token
        return token

    async def _fetch(self, session: aiohttp.ClientSession, ssl_option: ssl.SSLContext | bool) -> Token:
        """Run one client credentials exchange."""
        form = {"grant_type": "client_credentials"}
        if self.scopes:
            form["scope"] = " ".join(self.scopes)
        auth = aiohttp.BasicAuth(quote_plus(self.client_id), quote_plus(self._client_secret))

        logger.debug(f"Requesting OAuth2 token from {self.token_url}")
        requested_at = time.monotonic()
        try:
            async with session.post(self.token_url, data=form, auth=auth, ssl=ssl_option) as resp:
                body = await resp.read()
                status = resp.status
                content_type = resp.content_type
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"oauth2: cannot fetch token: {e!r}") from e

        if status < 200 or status >= 300:
            raise ProtocolError(
                f"oauth2: cannot fetch token: {status}\nResponse: {body.decode(errors='replace')}",
                status_code=status,
            )

        try:
            if content_type in ("application/x-www-form-urlencoded", "text/plain"):
                payload = dict(parse_qsl(body.decode()))
            else:
                payload = json.loads(body)
            parsed = TokenResponse.model_validate(payload)
        except (ValueError, ValidationError) as e:
            raise ProtocolError(f"oauth2: cannot parse token response: {e}", status_code=status) from e

        expires_at = None
        if parsed.expires_in:
            expires_at = requested_at + parsed.expires_in
        logger.debug(f"Obtained OAuth2 token from {self.token_url} (expires_in={parsed.expires_in})")
        return Token(
            access_token=parsed.access_token,
            token_type=parsed.token_type,
            expires_at=expires_at,
        )
