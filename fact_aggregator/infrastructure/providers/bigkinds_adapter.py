"""BigKinds news archive implementation of the provider interface."""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

import httpx

from ...domain.models.claim import Claim, VerificationOptions
from ...domain.models.verification import RawResult, utcnow
from ...domain.services.scoring import (
    SIMILARITY_THRESHOLD,
    calculate_similarity,
    map_score_to_status,
)
from .base import HttpProviderAdapter, ProviderConfig, parse_publish_date

logger = logging.getLogger(__name__)

BIGKINDS_URL = "https://API.bigkinds.or.kr"

MAJOR_NEWS_SOURCES = frozenset({"연합뉴스", "중앙일보", "동아일보", "조선일보", "한겨레", "경향신문"})
MAJOR_SOURCE_BONUS = 0.2
SEARCH_WINDOW = timedelta(days=365)
EXPLANATION_LENGTH = 150


class BigKindsAdapter(HttpProviderAdapter):
    """Token-authenticated Korean news search.

    BigKinds returns articles, not verdicts, so the trust score is the
    article's similarity to the claim plus a bonus for major outlets.
    """

    provider_id = "bigkinds"
    requires_auth = True

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter."""
        super().__init__(config or ProviderConfig(base_url=BIGKINDS_URL), client)

    async def fetch(self, claim: Claim, options: VerificationOptions) -> List[RawResult]:
        """Search news articles about the claim from the past year."""
        end = utcnow().date()
        start = end - SEARCH_WINDOW
        data = await self._request(
            "POST",
            "/search",
            json={
                "query": claim.text,
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "size": options.max_results,
            },
        )

        documents = (data or {}).get("documents") or []
        if not documents:
            logger.info(f"[{self.provider_id}] no results for claim \"{claim.text[:30]}...\"")
            return []

        return self.process_response(documents, claim.text)

    def process_response(self, documents: List[Dict[str, Any]], original_text: str) -> List[RawResult]:
        """Map the ``documents`` array of a search response to raw results.

        A document with unexpected field types is skipped on its own; the
        rest of the response is still used.
        """
        results = []
        for doc in documents:
            if not isinstance(doc, dict):
                continue
            try:
                result = self._document_to_result(doc, original_text)
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug(f"[{self.provider_id}] dropping malformed document: {e}")
                continue
            if result is not None:
                results.append(result)

        return results

    def _document_to_result(self, doc: Dict[str, Any], original_text: str) -> Optional[RawResult]:
        title = doc.get("title") or ""
        content = doc.get("content") or ""
        if not isinstance(title, str) or not isinstance(content, str):
            raise TypeError("title and content must be strings")

        similarity = calculate_similarity(original_text, f"{title} {content}")
        if similarity < SIMILARITY_THRESHOLD:
            return None

        trust_score = similarity
        if doc.get("provider") in MAJOR_NEWS_SOURCES:
            trust_score = min(trust_score + MAJOR_SOURCE_BONUS, 1.0)

        return self._build_result(
            claim_text=title,
            similarity=similarity,
            trust_score=trust_score,
            status=map_score_to_status(trust_score),
            explanation=content[:EXPLANATION_LENGTH] + "...",
            publisher=doc.get("provider") or "",
            publish_date=parse_publish_date(doc.get("date")),
            url=doc.get("url"),
        )
