"""Shared httpx plumbing for provider adapters."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from ...domain.models.errors import (
    AuthenticationError,
    PermanentAPIError,
    RateLimitError,
    TransientNetworkError,
)
from ...domain.models.verification import AuthSession, RawResult, utcnow
from ...domain.ports.provider_adapter import ProviderAdapter
from ...domain.services.resilience import DEFAULT_RETRY_AFTER_SECONDS

logger = logging.getLogger(__name__)


class ProviderConfig(BaseModel):
    """Configuration for an HTTP provider adapter."""

    api_key: str = Field(default="", description="Provider API key")
    base_url: str = Field(..., description="Provider API base URL")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")
    token_ttl_fallback: float = Field(
        default=3600.0,
        description="Token lifetime when the auth response omits expiresIn",
    )


def parse_publish_date(value: Any) -> Optional[datetime]:
    """Parse a provider date string into an aware UTC datetime (None if unusable)."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable publish date: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_retry_after(response: httpx.Response) -> float:
    """Seconds from a Retry-After header, falling back to the default."""
    raw = response.headers.get("retry-after")
    try:
        return float(raw) if raw is not None else DEFAULT_RETRY_AFTER_SECONDS
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS


class HttpProviderAdapter(ProviderAdapter):
    """Base class for providers reached over JSON/HTTP.

    Handles client lifecycle, failure classification, and for
    token-based providers the ``AuthSession``: it is created lazily,
    refreshed under a lock when expired, and re-created exactly once
    when a request is answered with 401.
    """

    provider_id = "unknown"
    requires_auth = False
    auth_path = "/auth"

    def __init__(
        self,
        config: ProviderConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Provider configuration
            client: Pre-built HTTP client (the adapter creates its own when omitted)
        """
        self._config = config
        self._client = client
        self._session: Optional[AuthSession] = None
        self._auth_lock = asyncio.Lock()
        self._initialized = False

    async def initialize(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers={"Content-Type": "application/json"},
            )
        self._initialized = True
        logger.info(f"✅ [{self.provider_id}] provider ready: {self._config.base_url}")

    async def shutdown(self) -> None:
        """Close the HTTP client and drop the session."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._session = None
        self._initialized = False

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or not self._initialized:
            await self.initialize()
        return self._client

    async def authenticate(self) -> None:
        """Exchange the API key for a bearer token (no-op for key-based providers)."""
        if not self.requires_auth:
            return

        client = await self._get_client()
        try:
            response = await client.post(self.auth_path, json={"apiKey": self._config.api_key})
            response.raise_for_status()
            data = response.json()
            token = data["token"]
            expires_in = float(data.get("expiresIn") or self._config.token_ttl_fallback)
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.error(f"❌ [{self.provider_id}] authentication error: {e}")
            raise AuthenticationError(
                f"{self.provider_id} authentication failed: {e}",
                provider=self.provider_id,
            ) from e

        self._session = AuthSession(token=token, expiry=utcnow() + timedelta(seconds=expires_in))
        logger.info(f"🔐 [{self.provider_id}] authenticated, token valid for {expires_in:.0f}s")

    async def _ensure_token(self) -> str:
        session = self._session
        if session is not None and not session.is_expired():
            return session.token

        async with self._auth_lock:
            # Another caller may have refreshed while we waited
            session = self._session
            if session is None or session.is_expired():
                await self.authenticate()
            return self._session.token

    def _invalidate_session(self, token: str) -> None:
        if self._session is not None and self._session.token == token:
            self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            TransientNetworkError: Timeouts, transport errors, 5xx
            RateLimitError: 429
            AuthenticationError: 401 (after one re-authentication when token-based)
            PermanentAPIError: Other 4xx or a malformed body
        """
        client = await self._get_client()
        reauthenticated = False

        while True:
            headers = {}
            token = None
            if self.requires_auth:
                token = await self._ensure_token()
                headers["Authorization"] = f"Bearer {token}"

            try:
                response = await client.request(method, path, params=params, json=json, headers=headers)
            except httpx.TimeoutException as e:
                raise TransientNetworkError(f"{self.provider_id} request timed out", provider=self.provider_id) from e
            except httpx.TransportError as e:
                raise TransientNetworkError(f"{self.provider_id} transport error: {e}", provider=self.provider_id) from e

            if response.status_code == 401 and token is not None and not reauthenticated:
                logger.info(f"🔐 [{self.provider_id}] token rejected, re-authenticating once")
                self._invalidate_session(token)
                reauthenticated = True
                continue

            self._raise_for_status(response)
            try:
                return response.json()
            except ValueError as e:
                raise PermanentAPIError(
                    f"{self.provider_id} returned malformed JSON",
                    status_code=response.status_code,
                    provider=self.provider_id,
                ) from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return
        if status == 429:
            retry_after = parse_retry_after(response)
            logger.warning(f"⚠️ [{self.provider_id}] rate limited, retry after {retry_after}s")
            raise RateLimitError(
                f"{self.provider_id} rate limited",
                retry_after_seconds=retry_after,
                provider=self.provider_id,
            )
        if status == 401:
            raise AuthenticationError(f"{self.provider_id} rejected credentials", provider=self.provider_id)
        if status >= 500:
            raise TransientNetworkError(f"{self.provider_id} server error {status}", provider=self.provider_id)
        raise PermanentAPIError(
            f"{self.provider_id} request rejected with {status}",
            status_code=status,
            provider=self.provider_id,
        )

    def _build_result(self, **fields: Any) -> Optional[RawResult]:
        """Build a RawResult, dropping the whole item if any field is invalid."""
        try:
            return RawResult(source=self.provider_id, **fields)
        except ValidationError as e:
            logger.debug(f"[{self.provider_id}] dropping malformed item: {e.errors()[:1]}")
            return None

    @property
    def is_available(self) -> bool:
        """Check if the provider is available."""
        return self._initialized and self._client is not None

    @property
    def capabilities(self) -> Dict[str, bool]:
        """Get the provider capabilities."""
        return {
            "token_auth": self.requires_auth,
            "retry_on_expiry": self.requires_auth,
            "rating_mapping": True,
        }
