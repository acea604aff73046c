"""Error taxonomy for the verification engine."""

from typing import Optional


class FactCheckError(Exception):
    """Base class for all verification engine errors."""


class ProviderError(FactCheckError):
    """Failure while talking to an external verification provider."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class AuthenticationError(ProviderError):
    """Credential or token failure."""


class TransientNetworkError(ProviderError):
    """Timeouts, connection failures and 5xx responses. Retryable."""


class RateLimitError(ProviderError):
    """429 response; carries the server's retry-after hint."""

    def __init__(
        self,
        message: str,
        retry_after_seconds: float = 60.0,
        provider: Optional[str] = None,
    ):
        super().__init__(message, provider=provider)
        self.retry_after_seconds = retry_after_seconds


class PermanentAPIError(ProviderError):
    """4xx response other than 401/429, or an unusable payload. Not retried."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(message, provider=provider)
        self.status_code = status_code


class IntegrationError(FactCheckError):
    """No usable provider was available to verify a claim."""


class CacheError(FactCheckError):
    """Cache backend failure. Always non-fatal to verification."""
