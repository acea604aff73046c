"""Google Fact Check Tools implementation of the provider interface."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ...domain.models.claim import Claim, VerificationOptions
from ...domain.models.verification import RawResult
from ...domain.services.scoring import SIMILARITY_THRESHOLD, calculate_similarity, map_rating
from .base import HttpProviderAdapter, ProviderConfig, parse_publish_date

logger = logging.getLogger(__name__)

GOOGLE_FACTCHECK_URL = "https://factchecktools.googleapis.com/v1alpha1"


class GoogleFactCheckAdapter(HttpProviderAdapter):
    """Key-authenticated search over published ClaimReview fact checks.

    Each ``claimReview`` attached to a sufficiently similar claim becomes
    one raw result; its ``textualRating`` is mapped to a trust score.
    """

    provider_id = "google"
    requires_auth = False

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter."""
        super().__init__(config or ProviderConfig(base_url=GOOGLE_FACTCHECK_URL), client)

    async def fetch(self, claim: Claim, options: VerificationOptions) -> List[RawResult]:
        """Search fact checks matching the claim."""
        data = await self._request(
            "GET",
            "/claims:search",
            params={
                "key": self._config.api_key,
                "query": claim.text,
                "languageCode": options.language_code,
                "maxAgeDays": options.max_age_days,
                "pageSize": options.max_results,
            },
        )

        claims = (data or {}).get("claims") or []
        if not claims:
            logger.info(f"[{self.provider_id}] no results for claim \"{claim.text[:30]}...\"")
            return []

        return self.process_response(claims, claim.text)

    def process_response(self, claims: List[Dict[str, Any]], original_text: str) -> List[RawResult]:
        """Map the ``claims`` array of a search response to raw results.

        A claim or review with unexpected field types is skipped on its own;
        the rest of the response is still used.
        """
        results = []
        for item in claims:
            if not isinstance(item, dict):
                continue
            try:
                text = item.get("text") or ""
                similarity = calculate_similarity(original_text, text)
                reviews = item.get("claimReview") or []
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug(f"[{self.provider_id}] dropping malformed claim: {e}")
                continue
            if similarity < SIMILARITY_THRESHOLD or not isinstance(reviews, list):
                continue

            for review in reviews:
                result = self._review_to_result(review, text, similarity)
                if result is not None:
                    results.append(result)

        return results

    def _review_to_result(self, review: Any, text: str, similarity: float) -> Optional[RawResult]:
        if not isinstance(review, dict):
            return None
        try:
            rating = review.get("textualRating") or ""
            trust_score, status = map_rating(rating)
            publisher = review.get("publisher")
            publisher_name = (publisher.get("name") or "") if isinstance(publisher, dict) else ""
            publish_date = parse_publish_date(review.get("reviewDate"))
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug(f"[{self.provider_id}] dropping malformed review: {e}")
            return None

        return self._build_result(
            claim_text=text,
            similarity=similarity,
            trust_score=trust_score,
            status=status,
            explanation=rating,
            publisher=publisher_name,
            publish_date=publish_date,
            url=review.get("url"),
        )
