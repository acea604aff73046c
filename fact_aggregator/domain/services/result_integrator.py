"""Combines per-provider raw results into a single verdict."""

import logging
import math
import re
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.verification import (
    ContextInfo,
    IntegratedResult,
    RawResult,
    SourceRef,
    TimeDistribution,
    VerificationStatus,
    utcnow,
)
from .scoring import clamp, map_score_to_status

logger = logging.getLogger(__name__)

SOURCE_WEIGHTS: Dict[str, float] = {
    "google": 0.5,
    "factiverse": 0.3,
    "bigkinds": 0.2,
}
UNKNOWN_SOURCE_WEIGHT = 0.2
MISSING_DATE_WEIGHT = 0.5
NO_RESULTS_EXPLANATION = "No verification results found."

_STOP_WORDS = {
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "of", "in", "on",
    "at", "to", "for", "and", "or", "but", "that", "this", "it", "with", "as", "by",
    "from", "has", "have", "had", "not", "no", "than", "then", "its", "their",
    "은", "는", "이", "가", "을", "를", "의", "에", "와", "과", "도", "로", "으로",
}
_WORD = re.compile(r"\w+")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ResultIntegrator:
    """Source-weighted, time-decayed aggregation of provider results.

    Each result contributes ``trust_score * source_weight * time_weight``.
    The source weight favors curated fact-check databases over news search.
    The time weight decays linearly with the age of the evidence:
    ``1 - days/150`` up to 30 days, then ``0.8 - days/300``.
    """

    def __init__(
        self,
        source_weights: Optional[Dict[str, float]] = None,
        dedupe_sources: bool = False,
        clamp_time_weight: bool = False,
    ):
        """Initialize the integrator.

        Args:
            source_weights: Per-provider base weights
            dedupe_sources: Drop repeated source urls, keeping the first
            clamp_time_weight: Clamp time weights to [0, 1] for very old evidence
        """
        self._source_weights = dict(source_weights or SOURCE_WEIGHTS)
        self.dedupe_sources = dedupe_sources
        self.clamp_time_weight = clamp_time_weight

    def source_weight(self, source: str) -> float:
        """Base weight for a provider id."""
        return self._source_weights.get(source or "unknown", UNKNOWN_SOURCE_WEIGHT)

    def time_weight(self, publish_date: Optional[datetime], now: Optional[datetime] = None) -> float:
        """Recency weight for a publish date (0.5 when the date is unknown)."""
        if publish_date is None:
            return MISSING_DATE_WEIGHT

        now = _as_utc(now or utcnow())
        days = math.floor((now - _as_utc(publish_date)).total_seconds() / 86400)
        weight = 1.0 - days / 150 if days <= 30 else 0.8 - days / 300

        if self.clamp_time_weight:
            weight = clamp(weight)
        return weight

    def integrate(
        self,
        results: Sequence[RawResult],
        now: Optional[datetime] = None,
    ) -> IntegratedResult:
        """Combine raw results into one integrated verdict.

        Args:
            results: Flattened results from all providers, in arrival order
            now: Reference time for the time decay (defaults to the current time)

        Returns:
            Integrated result
        """
        if not results:
            return IntegratedResult(
                trust_score=0.5,
                status=VerificationStatus.UNVERIFIED,
                explanation=NO_RESULTS_EXPLANATION,
                sources=[],
            )

        now = now or utcnow()
        total_score = 0.0
        total_weight = 0.0
        best_explanation = ""
        sources: List[SourceRef] = []
        seen_urls = set()

        for result in results:
            weight = self.source_weight(result.source) * self.time_weight(result.publish_date, now)
            total_score += result.trust_score * weight
            total_weight += weight

            # Strictly longer wins, so ties keep the earliest result
            if result.explanation and len(result.explanation) > len(best_explanation):
                best_explanation = result.explanation

            if result.url:
                if self.dedupe_sources and result.url in seen_urls:
                    continue
                seen_urls.add(result.url)
                sources.append(
                    SourceRef(
                        name=result.publisher or result.source,
                        url=result.url,
                        publish_date=result.publish_date,
                    )
                )

        if total_weight > 0:
            final_score = total_score / total_weight
        else:
            final_score = sum(r.trust_score for r in results) / len(results)
        final_score = clamp(final_score)

        logger.debug(
            f"📊 Integrated {len(results)} results: score={final_score:.3f}, weight={total_weight:.3f}"
        )

        return IntegratedResult(
            trust_score=final_score,
            status=map_score_to_status(final_score),
            explanation=best_explanation
            or f"The trust score for this claim is {round(final_score * 100)}%.",
            sources=sources,
        )

    async def add_context_information(
        self,
        result: IntegratedResult,
        claim_text: str,
        raw_results: Iterable[RawResult] = (),
        now: Optional[datetime] = None,
    ) -> IntegratedResult:
        """Attach contextual metadata to an integrated result.

        Returns the result unchanged if it already carries context or if
        building the context fails.
        """
        if result.context is not None:
            return result

        try:
            raw_results = list(raw_results)
            context = ContextInfo(
                related_topics=self._extract_topics(claim_text),
                provider_breakdown=dict(Counter(r.source for r in raw_results)),
                time_distribution=self._time_distribution(raw_results, now or utcnow()),
                source_count=len(result.sources),
            )
            return result.model_copy(update={"context": context})
        except Exception as e:
            logger.error(f"❌ Failed to collect context information: {e}")
            return result

    @staticmethod
    def _extract_topics(claim_text: str, limit: int = 3) -> List[str]:
        words = [
            word
            for word in _WORD.findall(claim_text.lower())
            if len(word) > 1 and word not in _STOP_WORDS and not word.isdigit()
        ]
        return [word for word, _ in Counter(words).most_common(limit)]

    @staticmethod
    def _time_distribution(raw_results: List[RawResult], now: datetime) -> TimeDistribution:
        now = _as_utc(now)
        ages = [
            (now - _as_utc(r.publish_date)).total_seconds() / 86400
            for r in raw_results
            if r.publish_date is not None
        ]
        return TimeDistribution(
            past_24h=sum(1 for age in ages if age <= 1),
            past_7d=sum(1 for age in ages if age <= 7),
            past_30d=sum(1 for age in ages if age <= 30),
        )
