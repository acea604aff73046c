"""Integration tests for the verification workflow over real adapters."""

import httpx
import pytest

from conftest import no_sleep
from fact_aggregator.domain.models.claim import VerificationOptions
from fact_aggregator.domain.models.verification import VerificationStatus
from fact_aggregator.domain.services.fact_checking_service import FactCheckingService
from fact_aggregator.domain.services.resilience import ResilienceController
from fact_aggregator.infrastructure.cache.memory_cache import MemoryCacheAdapter
from fact_aggregator.infrastructure.providers.base import ProviderConfig
from fact_aggregator.infrastructure.providers.bigkinds_adapter import BigKindsAdapter
from fact_aggregator.infrastructure.providers.factiverse_adapter import FactiverseAdapter
from fact_aggregator.infrastructure.providers.factory import ProviderFactory
from fact_aggregator.infrastructure.providers.google_adapter import GoogleFactCheckAdapter

CLAIM = "The earth is round"


class Server:
    """Counts requests per path and answers from a route table."""

    def __init__(self, routes):
        self.routes = routes
        self.hits = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.hits[path] = self.hits.get(path, 0) + 1
        status, body = self.routes[path]
        return httpx.Response(status, json=body)


def google_server(status=200):
    return Server({
        "/claims:search": (
            status,
            {
                "claims": [
                    {
                        "text": CLAIM,
                        "claimReview": [
                            {
                                "publisher": {"name": "Science Checkers"},
                                "url": "https://example.com/round",
                                "textualRating": "True",
                            }
                        ],
                    }
                ]
            },
        ),
    })


def factiverse_server():
    return Server({
        "/auth": (200, {"token": "fv", "expiresIn": 3600}),
        "/check": (
            200,
            {"results": [{"claimText": CLAIM, "truthScore": 40, "sourceUrl": "https://example.com/fv"}]},
        ),
    })


def bigkinds_server():
    return Server({
        "/auth": (200, {"token": "bk"}),
        "/search": (200, {"documents": []}),
    })


def build_service(google, factiverse, bigkinds) -> FactCheckingService:
    """Wire real adapters to mock transports."""
    factory = ProviderFactory()
    for name, adapter_class, server in (
        ("google", GoogleFactCheckAdapter, google),
        ("factiverse", FactiverseAdapter, factiverse),
        ("bigkinds", BigKindsAdapter, bigkinds),
    ):
        base_url = f"https://{name}.test"
        client = httpx.AsyncClient(transport=httpx.MockTransport(server), base_url=base_url)
        factory.add_provider(name, adapter_class(ProviderConfig(api_key="key", base_url=base_url), client))

    return FactCheckingService(
        providers=factory,
        cache=MemoryCacheAdapter(),
        resilience=ResilienceController(factory, max_retries=3, base_delay=0, sleep=no_sleep),
    )


@pytest.mark.asyncio
async def test_complete_verification_workflow():
    """Test all providers contribute and the result is cached."""
    google, factiverse, bigkinds = google_server(), factiverse_server(), bigkinds_server()
    service = build_service(google, factiverse, bigkinds)

    record = await service.verify_claim(CLAIM)

    assert [r.source for r in record.raw_results] == ["google", "factiverse"]
    # (0.9*0.25 + 0.4*0.15) / 0.4 with undated evidence
    assert record.verification.trust_score == pytest.approx(0.7125)
    assert record.verification.status == VerificationStatus.PARTIALLY_TRUE
    assert [s.url for s in record.verification.sources] == [
        "https://example.com/round",
        "https://example.com/fv",
    ]
    assert record.verification.context.provider_breakdown == {"google": 1, "factiverse": 1}

    cached = await service.verify_claim(CLAIM)
    assert cached.from_cache is True
    assert google.hits["/claims:search"] == 1
    assert factiverse.hits["/check"] == 1
    assert bigkinds.hits["/search"] == 1


@pytest.mark.asyncio
async def test_google_outage_falls_back_to_factiverse():
    """Test a persistently failing provider is replaced once by its fallback."""
    google, factiverse, bigkinds = google_server(status=503), factiverse_server(), bigkinds_server()
    service = build_service(google, factiverse, bigkinds)

    record = await service.verify_claim(CLAIM, VerificationOptions(apis={"google"}))

    assert google.hits["/claims:search"] == 4
    assert factiverse.hits["/check"] == 1
    assert factiverse.hits["/auth"] == 1
    assert [r.source for r in record.raw_results] == ["factiverse"]
    assert record.verification.status == VerificationStatus.PARTIALLY_FALSE


@pytest.mark.asyncio
async def test_batch_over_real_adapters():
    """Test batch verification with shared adapters."""
    service = build_service(google_server(), factiverse_server(), bigkinds_server())

    records = await service.verify_claim_batch([CLAIM, "Unrelated words entirely"])

    assert len(records) == 2
    assert records[0].verification.status == VerificationStatus.PARTIALLY_TRUE
    assert records[1].verification.status == VerificationStatus.UNVERIFIED
