"""Port interface for external claim-verification providers."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from ..models.claim import Claim, VerificationOptions
from ..models.verification import RawResult

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """Abstract interface for fact-checking and search providers.

    Each adapter owns its provider's authentication, request shaping,
    response parsing and rating mapping, and produces normalized
    ``RawResult`` items.

    Two query entry points exist:

    - ``fetch`` is the strict call. It raises the typed provider errors
      and is what the retry loop drives.
    - ``query`` is the boundary call. It never raises: errors are logged
      and an empty list is returned, so a provider outage only removes
      that provider's evidence.
    """

    provider_id: str = "unknown"

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the provider and its resources."""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Clean up resources."""
        pass

    @abstractmethod
    async def authenticate(self) -> None:
        """Establish or refresh the provider session.

        Raises:
            AuthenticationError: If credentials are rejected
        """
        pass

    @abstractmethod
    async def fetch(self, claim: Claim, options: VerificationOptions) -> List[RawResult]:
        """Query the provider and map its payload to raw results.

        Args:
            claim: Claim to verify
            options: Verification options

        Returns:
            Raw results with similarity >= 0.5

        Raises:
            ProviderError: Any classified provider failure
        """
        pass

    async def query(self, claim: Claim, options: VerificationOptions) -> List[RawResult]:
        """Query the provider, returning an empty list on any failure."""
        try:
            return await self.fetch(claim, options)
        except Exception as e:
            logger.error(f"❌ [{self.provider_id}] query failed: {type(e).__name__}: {e}")
            return []

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        return self.provider_id

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is available."""
        pass

    @property
    def capabilities(self) -> Dict[str, bool]:
        """Get the provider capabilities."""
        return {}
