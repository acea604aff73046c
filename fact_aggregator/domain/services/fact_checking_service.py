"""Service for coordinating claim verification across multiple providers."""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Protocol, Sequence, Union

from ..models.claim import Claim, VerificationOptions
from ..models.errors import CacheError, IntegrationError
from ..models.verification import (
    IntegratedResult,
    RawResult,
    VerificationRecord,
    VerificationStatus,
    utcnow,
)
from ..ports.cache_provider import CacheProvider, make_cache_key
from ..ports.provider_adapter import ProviderAdapter
from .resilience import ResilienceController
from .result_integrator import ResultIntegrator
from .scoring import format_time_interval

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 24 * 60 * 60


class ProviderCatalog(Protocol):
    """Registry view the service needs: lookup plus registration order."""

    def get_provider(self, name: str) -> Optional[ProviderAdapter]:
        """Get an active provider instance by name."""
        ...

    def active_provider_ids(self) -> List[str]:
        """Ids of all active providers in registration order."""
        ...


class FactCheckingService:
    """Orchestrates cache lookup, provider fan-out, integration and caching.

    ``verify_claim`` and ``verify_claim_batch`` never raise. Unexpected
    failures are turned into an ``ERROR`` record at this boundary.
    """

    def __init__(
        self,
        providers: ProviderCatalog,
        cache: Optional[CacheProvider] = None,
        integrator: Optional[ResultIntegrator] = None,
        resilience: Optional[ResilienceController] = None,
        cache_enabled: bool = True,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        cache_timeout: Optional[float] = 2.0,
        max_concurrent_verifications: int = 5,
        single_flight: bool = False,
        enrich_context: bool = True,
    ):
        """Initialize the service.

        Args:
            providers: Provider registry
            cache: Verification record cache (None disables caching)
            integrator: Result integrator
            resilience: Retry and fallback controller
            cache_enabled: Whether cache reads and writes happen
            cache_ttl: TTL for stored records in seconds
            cache_timeout: Deadline for a single cache operation in seconds
            max_concurrent_verifications: Claims verified at once in a batch
            single_flight: Collapse concurrent identical verifications into one
            enrich_context: Attach context information to integrated results
        """
        self._providers = providers
        self._cache = cache
        self._integrator = integrator or ResultIntegrator()
        self._resilience = resilience or ResilienceController(providers)
        self.cache_enabled = cache_enabled
        self.cache_ttl = cache_ttl
        self.cache_timeout = cache_timeout
        self.max_concurrent_verifications = max(1, max_concurrent_verifications)
        self.single_flight = single_flight
        self.enrich_context = enrich_context
        self._in_flight: Dict[str, asyncio.Future] = {}
        logger.info("🔧 FactCheckingService initialized")

    def configure_cache(
        self,
        enabled: Optional[bool] = None,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """Update caching options at runtime."""
        if enabled is not None:
            self.cache_enabled = enabled
        if ttl_seconds is not None:
            self.cache_ttl = ttl_seconds
        logger.info(f"🔧 Cache options updated: enabled={self.cache_enabled}, ttl={self.cache_ttl}s")

    async def verify_claim(
        self,
        claim: Union[str, Claim],
        options: Optional[VerificationOptions] = None,
    ) -> VerificationRecord:
        """Verify a single claim against all selected providers.

        Args:
            claim: Claim text or Claim
            options: Verification options (defaults apply when omitted)

        Returns:
            Verification record; ``from_cache`` is set on cache hits
        """
        started = time.perf_counter()
        options = options or VerificationOptions()
        claim_text = claim.text if isinstance(claim, Claim) else claim

        try:
            claim_obj = claim if isinstance(claim, Claim) else Claim(text=claim)
            logger.info(f"🔍 Starting verification for claim: {claim_obj.text[:50]}...")
            key = make_cache_key(claim_obj.text, options.language_code)

            if not self.single_flight:
                return await self._verify(claim_obj, options, key, started)

            shared = self._in_flight.get(key)
            if shared is None:
                shared = asyncio.ensure_future(self._verify(claim_obj, options, key, started))
                self._in_flight[key] = shared
                shared.add_done_callback(lambda _: self._in_flight.pop(key, None))
            else:
                logger.debug(f"🔗 Joining in-flight verification for {key}")
            return await asyncio.shield(shared)

        except Exception as e:
            logger.error(f"❌ Verification failed: {type(e).__name__}: {e}", exc_info=True)
            return self._error_record(claim_text, e, started)

    async def verify_claim_batch(
        self,
        claims: Sequence[Union[str, Claim]],
        options: Optional[VerificationOptions] = None,
    ) -> List[VerificationRecord]:
        """Verify several claims concurrently.

        At most ``max_concurrent_verifications`` claims are in progress at
        once. Each claim's failure is isolated and output order matches
        input order.
        """
        if not claims:
            return []

        started = time.perf_counter()
        semaphore = asyncio.Semaphore(self.max_concurrent_verifications)
        logger.info(
            f"📝 Verifying batch of {len(claims)} claims "
            f"(concurrency={self.max_concurrent_verifications})"
        )

        async def run(item: Union[str, Claim]) -> VerificationRecord:
            async with semaphore:
                return await self.verify_claim(item, options)

        outcomes = await asyncio.gather(*(run(item) for item in claims), return_exceptions=True)

        records = []
        for item, outcome in zip(claims, outcomes):
            if isinstance(outcome, VerificationRecord):
                records.append(outcome)
            else:
                text = item.text if isinstance(item, Claim) else item
                records.append(self._error_record(text, outcome, started))
        return records

    async def _verify(
        self,
        claim: Claim,
        options: VerificationOptions,
        key: str,
        started: float,
    ) -> VerificationRecord:
        cached = await self._cache_get(key)
        if cached is not None:
            logger.info(f"💾 Cache hit: {key}")
            return cached.model_copy(
                update={"from_cache": True, "processing_time": self._elapsed(started)}
            )

        logger.debug(f"🔄 QUERYING providers for {key}")
        per_provider = await self._query_providers(claim, options)
        all_results: List[RawResult] = [result for batch in per_provider for result in batch]

        logger.debug(f"🔄 INTEGRATING {len(all_results)} results")
        verification: IntegratedResult = self._integrator.integrate(all_results)
        if self.enrich_context:
            verification = await self._integrator.add_context_information(
                verification, claim.text, all_results
            )

        record = VerificationRecord(
            claim=claim.text,
            verification=verification,
            raw_results=all_results,
            processing_time=self._elapsed(started),
            timestamp=utcnow(),
        )

        logger.debug(f"🔄 CACHING {key}")
        await self._cache_set(key, record)

        logger.info(
            f"✅ Verification complete: status={verification.status.value}, "
            f"score={verification.trust_score:.2f}, results={len(all_results)}"
        )
        return record

    def _select_adapters(self, options: VerificationOptions) -> List[ProviderAdapter]:
        ids = self._providers.active_provider_ids()
        if options.apis is not None:
            ids = [provider_id for provider_id in ids if provider_id in options.apis]

        adapters = []
        for provider_id in ids:
            adapter = self._providers.get_provider(provider_id)
            if adapter is not None:
                adapters.append(adapter)
        return adapters

    async def _query_providers(
        self,
        claim: Claim,
        options: VerificationOptions,
    ) -> List[List[RawResult]]:
        adapters = self._select_adapters(options)
        if not adapters:
            raise IntegrationError("No provider adapters available for this request")

        return list(
            await asyncio.gather(
                *(self._query_with_resilience(adapter, claim, options) for adapter in adapters)
            )
        )

    async def _query_with_resilience(
        self,
        adapter: ProviderAdapter,
        claim: Claim,
        options: VerificationOptions,
    ) -> List[RawResult]:
        try:
            return await self._resilience.with_retry(
                lambda: adapter.fetch(claim, options),
                label=adapter.provider_id,
            )
        except Exception as e:
            logger.error(f"❌ [{adapter.provider_id}] verification failed: {e}")

        fallback = self._resilience.activate_fallback(adapter.provider_id)
        if fallback is None:
            return []
        try:
            return await fallback.query(claim, options)
        except Exception as e:
            logger.error(f"❌ Fallback provider {fallback.provider_id} also failed: {e}")
            return []

    async def _cache_get(self, key: str) -> Optional[VerificationRecord]:
        if not self.cache_enabled or self._cache is None:
            return None
        try:
            return await asyncio.wait_for(self._cache.get(key), timeout=self.cache_timeout)
        except (CacheError, asyncio.TimeoutError) as e:
            logger.warning(f"⚠️ Cache lookup failed, treating as miss: {e!r}")
            return None

    async def _cache_set(self, key: str, record: VerificationRecord) -> None:
        if not self.cache_enabled or self._cache is None:
            return
        try:
            await asyncio.wait_for(
                self._cache.set(key, record, ttl_seconds=self.cache_ttl),
                timeout=self.cache_timeout,
            )
            logger.info(f"💾 Cached verification result: {key}")
        except (CacheError, asyncio.TimeoutError) as e:
            logger.warning(f"⚠️ Cache store failed, continuing without caching: {e!r}")

    @staticmethod
    def _elapsed(started: float) -> str:
        return format_time_interval((time.perf_counter() - started) * 1000)

    def _error_record(self, claim_text: str, error: BaseException, started: float) -> VerificationRecord:
        return VerificationRecord(
            claim=claim_text if isinstance(claim_text, str) else str(claim_text or ""),
            verification=IntegratedResult(
                trust_score=0.5,
                status=VerificationStatus.ERROR,
                explanation=f"Error during verification: {error}",
                sources=[],
            ),
            raw_results=[],
            processing_time=self._elapsed(started),
            timestamp=utcnow(),
        )
