"""Test configuration and common fixtures."""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Union

import pytest

from fact_aggregator.domain.models.claim import Claim, VerificationOptions
from fact_aggregator.domain.models.verification import RawResult, VerificationStatus
from fact_aggregator.domain.ports.provider_adapter import ProviderAdapter
from fact_aggregator.domain.services.fact_checking_service import FactCheckingService
from fact_aggregator.domain.services.resilience import ResilienceController
from fact_aggregator.infrastructure.cache.memory_cache import MemoryCacheAdapter
from fact_aggregator.infrastructure.providers.factory import ProviderFactory

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

Outcome = Union[List[RawResult], Exception]


def make_result(
    source: str = "google",
    trust_score: float = 0.8,
    status: VerificationStatus = VerificationStatus.VERIFIED_TRUE,
    explanation: str = "",
    url: Optional[str] = None,
    publish_date: Optional[datetime] = NOW,
    publisher: str = "",
) -> RawResult:
    """Build a raw result with sensible defaults."""
    return RawResult(
        source=source,
        claim_text="the earth is round",
        similarity=1.0,
        trust_score=trust_score,
        status=status,
        explanation=explanation,
        publisher=publisher,
        publish_date=publish_date,
        url=url,
    )


class FakeProvider(ProviderAdapter):
    """Provider adapter replaying scripted outcomes.

    Each ``fetch`` consumes the next outcome; the last one repeats. An
    exception outcome is raised, a list is returned.
    """

    def __init__(self, provider_id: str, outcomes: Sequence[Outcome] = ((),)):
        self.provider_id = provider_id
        self._outcomes = [list(o) if not isinstance(o, Exception) else o for o in outcomes]
        self.calls: List[str] = []
        self.on_fetch: Optional[Callable] = None

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    async def authenticate(self) -> None:
        pass

    async def fetch(self, claim: Claim, options: VerificationOptions) -> List[RawResult]:
        self.calls.append(claim.text)
        if self.on_fetch is not None:
            await self.on_fetch(claim)
        index = min(len(self.calls), len(self._outcomes)) - 1
        outcome = self._outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)

    @property
    def is_available(self) -> bool:
        return True


async def no_sleep(_delay: float) -> None:
    """Stand-in for asyncio.sleep that returns immediately."""


@pytest.fixture
def make_factory() -> Callable[..., ProviderFactory]:
    """Build a provider factory holding the given fake providers."""

    def build(*providers: ProviderAdapter) -> ProviderFactory:
        factory = ProviderFactory(register_defaults=False)
        for provider in providers:
            factory.add_provider(provider.provider_id, provider)
        return factory

    return build


@pytest.fixture
def make_service() -> Callable[..., FactCheckingService]:
    """Build a verification service over a factory with instant retries."""

    def build(factory: ProviderFactory, cache=None, **kwargs) -> FactCheckingService:
        return FactCheckingService(
            providers=factory,
            cache=cache if cache is not None else MemoryCacheAdapter(),
            resilience=ResilienceController(factory, max_retries=3, base_delay=0.001, sleep=no_sleep),
            **kwargs,
        )

    return build
