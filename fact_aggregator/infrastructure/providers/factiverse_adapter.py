"""Factiverse implementation of the provider interface."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ...domain.models.claim import Claim, VerificationOptions
from ...domain.models.verification import RawResult
from ...domain.services.scoring import (
    SIMILARITY_THRESHOLD,
    calculate_similarity,
    clamp,
    map_score_to_status,
)
from .base import HttpProviderAdapter, ProviderConfig, parse_publish_date

logger = logging.getLogger(__name__)

FACTIVERSE_URL = "https://api.factiverse.com/v1"


class FactiverseAdapter(HttpProviderAdapter):
    """Token-authenticated claim checker reporting 0-100 truth scores."""

    provider_id = "factiverse"
    requires_auth = True

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter."""
        super().__init__(config or ProviderConfig(base_url=FACTIVERSE_URL), client)

    async def fetch(self, claim: Claim, options: VerificationOptions) -> List[RawResult]:
        """Check the claim against Factiverse."""
        data = await self._request(
            "POST",
            "/check",
            json={"claim": claim.text, "language": options.language_code},
        )

        items = (data or {}).get("results")
        if not items:
            logger.info(f"[{self.provider_id}] no results for claim \"{claim.text[:30]}...\"")
            return []

        return self.process_response(items, claim.text)

    def process_response(self, items: List[Dict[str, Any]], original_text: str) -> List[RawResult]:
        """Map the ``results`` array of a check response to raw results."""
        results = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                text = item.get("claimText") or ""
                similarity = calculate_similarity(original_text, text)
                score = float(item["truthScore"])
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.debug(f"[{self.provider_id}] dropping malformed item: {e!r}")
                continue
            if similarity < SIMILARITY_THRESHOLD:
                continue

            result = self._build_result(
                claim_text=text,
                similarity=similarity,
                trust_score=clamp(score / 100),
                status=map_score_to_status(score, scale=100),
                explanation=item.get("explanation") or "",
                publisher=item.get("factChecker") or "",
                publish_date=parse_publish_date(item.get("publishDate")),
                url=item.get("sourceUrl"),
            )
            if result is not None:
                results.append(result)

        return results
