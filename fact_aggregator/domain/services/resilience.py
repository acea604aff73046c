"""Retry, backoff and fallback policies for provider calls."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, Tuple, TypeVar

from ..models.errors import (
    PermanentAPIError,
    ProviderError,
    RateLimitError,
    TransientNetworkError,
)
from ..ports.provider_adapter import ProviderAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")

FALLBACK_ORDER: Tuple[str, ...] = ("google", "factiverse", "bigkinds")
DEFAULT_RETRY_AFTER_SECONDS = 60.0


class ProviderRegistry(Protocol):
    """Anything that can resolve a provider id to an adapter instance."""

    def get_provider(self, name: str) -> Optional[ProviderAdapter]:
        """Get an active provider instance by name."""
        ...


class ResilienceController:
    """Retry-with-backoff wrapper and cyclic provider fallback selector."""

    def __init__(
        self,
        registry: ProviderRegistry,
        max_retries: int = 3,
        base_delay: float = 1.0,
        attempt_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the controller.

        Args:
            registry: Provider registry used to resolve fallback adapters
            max_retries: Retries after the first attempt
            base_delay: Delay before the first retry in seconds; doubles per retry
            attempt_timeout: Deadline for a single attempt in seconds (None = no deadline)
            sleep: Awaitable sleep used between attempts
        """
        self._registry = registry
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.attempt_timeout = attempt_timeout
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based): base * 2^(attempt-1)."""
        return self.base_delay * (2 ** (attempt - 1))

    async def with_retry(
        self,
        fn: Callable[[], Awaitable[T]],
        max_retries: Optional[int] = None,
        timeout: Optional[float] = None,
        label: str = "call",
    ) -> T:
        """Invoke ``fn`` and retry it with exponential backoff on failure.

        A timed-out attempt is treated as a ``TransientNetworkError``.
        Only ``ProviderError`` failures are retried. ``PermanentAPIError``
        and any other exception are re-raised immediately.

        Args:
            fn: Zero-argument coroutine factory
            max_retries: Override for the configured retry count
            timeout: Override for the configured per-attempt deadline
            label: Name used in log messages

        Returns:
            The first successful result

        Raises:
            Exception: The last error once retries are exhausted
        """
        retries = self.max_retries if max_retries is None else max_retries
        deadline = self.attempt_timeout if timeout is None else timeout
        attempt = 0

        while True:
            try:
                if deadline is not None:
                    return await asyncio.wait_for(fn(), timeout=deadline)
                return await fn()
            except asyncio.TimeoutError as e:
                error: Exception = TransientNetworkError(f"{label} timed out after {deadline}s")
                error.__cause__ = e
            except PermanentAPIError:
                raise
            except ProviderError as e:
                error = e

            attempt += 1
            if attempt > retries:
                logger.error(f"❌ {label} failed after {retries} retries: {error}")
                raise error

            delay = self.backoff_delay(attempt)
            if isinstance(error, RateLimitError):
                logger.warning(
                    f"⏳ {label} rate limited; provider asks for {error.retry_after_seconds}s, "
                    f"backing off {delay}s"
                )
            logger.info(f"🔁 Retry {attempt}/{retries} for {label} in {delay * 1000:.0f}ms: {error}")
            await self._sleep(delay)

    def handle_rate_limiting(self, response: Any) -> float:
        """Extract the retry-after hint from a 429 response.

        Returns:
            Seconds to wait, or 0 if the response is not rate limited
        """
        if getattr(response, "status_code", None) != 429:
            return 0.0

        raw = response.headers.get("retry-after")
        try:
            retry_after = float(raw) if raw is not None else DEFAULT_RETRY_AFTER_SECONDS
        except (TypeError, ValueError):
            retry_after = DEFAULT_RETRY_AFTER_SECONDS

        logger.warning(f"⚠️ API rate limit reached, retry possible in {retry_after}s")
        return retry_after

    @staticmethod
    def fallback_for(failed_id: str) -> str:
        """Next provider id in the cyclic fallback order."""
        if failed_id not in FALLBACK_ORDER:
            return FALLBACK_ORDER[0]
        index = FALLBACK_ORDER.index(failed_id)
        return FALLBACK_ORDER[(index + 1) % len(FALLBACK_ORDER)]

    def activate_fallback(self, failed_id: str) -> Optional[ProviderAdapter]:
        """Resolve the adapter that substitutes for a failed provider.

        Args:
            failed_id: Identifier of the provider that exhausted its retries

        Returns:
            Fallback adapter, or None if it is not registered
        """
        fallback_id = self.fallback_for(failed_id)
        adapter = self._registry.get_provider(fallback_id)
        if adapter is None:
            logger.warning(f"⚠️ Fallback provider {fallback_id} for {failed_id} is not available")
            return None
        logger.info(f"🔀 {failed_id} failed, falling back to {fallback_id}")
        return adapter
