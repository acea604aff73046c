"""Domain models for verification results and related entities."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class VerificationStatus(str, Enum):
    """Possible verification outcomes."""

    VERIFIED_TRUE = "VERIFIED_TRUE"
    VERIFIED_FALSE = "VERIFIED_FALSE"
    PARTIALLY_TRUE = "PARTIALLY_TRUE"
    PARTIALLY_FALSE = "PARTIALLY_FALSE"
    MIXED = "MIXED"  # Partial rating without a clear direction
    INCONCLUSIVE = "INCONCLUSIVE"  # Evidence found but no verdict
    UNVERIFIED = "UNVERIFIED"  # No evidence found at all
    ERROR = "ERROR"  # Internal failure during verification


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serializing to the camelCase shape of the public API."""

    class Config:
        """Pydantic model configuration."""
        alias_generator = to_camel
        populate_by_name = True


class RawResult(CamelModel):
    """A single normalized result produced by one provider adapter."""

    source: str = Field(..., description="Provider identifier that produced the result")
    claim_text: str = Field(..., description="Claim text as matched by the provider")
    similarity: float = Field(..., ge=0.0, le=1.0, description="Token overlap with the original claim")
    trust_score: float = Field(..., ge=0.0, le=1.0, description="Provider trust score (0-1)")
    status: VerificationStatus = Field(..., description="Provider verdict")
    explanation: str = Field(default="", description="Provider explanation or rating text")
    publisher: str = Field(default="", description="Publisher or fact checker name")
    publish_date: Optional[datetime] = Field(None, description="When the evidence was published")
    url: Optional[str] = Field(None, description="Link to the evidence")


class SourceRef(CamelModel):
    """A citation attached to an integrated result."""

    name: str
    url: str
    publish_date: Optional[datetime] = None


class TimeDistribution(CamelModel):
    """How recent the collected evidence is."""

    past_24h: int = Field(default=0, alias="past24h")
    past_7d: int = Field(default=0, alias="past7d")
    past_30d: int = Field(default=0, alias="past30d")


class ContextInfo(CamelModel):
    """Supplementary metadata attached to an integrated result."""

    related_topics: List[str] = Field(default_factory=list)
    provider_breakdown: Dict[str, int] = Field(default_factory=dict)
    time_distribution: TimeDistribution = Field(default_factory=TimeDistribution)
    source_count: int = 0


class IntegratedResult(CamelModel):
    """Combined verdict over all provider results."""

    trust_score: float = Field(..., ge=0.0, le=1.0, description="Aggregated trust score (0-1)")
    status: VerificationStatus = Field(..., description="Aggregated verdict")
    explanation: str = Field(..., description="Explanation of the verdict")
    sources: List[SourceRef] = Field(default_factory=list, description="Cited sources")
    context: Optional[ContextInfo] = Field(None, description="Optional contextual enrichment")

    class Config:
        """Pydantic model configuration."""
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "trustScore": 0.65,
                "status": "PARTIALLY_TRUE",
                "explanation": "Mostly accurate, but omits context.",
                "sources": [
                    {"name": "Science Fact Check", "url": "https://example.com/evidence", "publishDate": None}
                ],
            }
        }


class VerificationRecord(CamelModel):
    """Full outcome of one verification call; this is what gets cached."""

    claim: str
    verification: IntegratedResult
    raw_results: List[RawResult] = Field(default_factory=list)
    processing_time: str = "0ms"
    timestamp: datetime = Field(default_factory=utcnow)
    from_cache: bool = False

    def to_dict(self) -> dict:
        """Convert the record to the public camelCase dictionary format."""
        return self.model_dump(mode="json", by_alias=True)


class AuthSession(BaseModel):
    """Bearer token held by a token-authenticated provider adapter."""

    token: str
    expiry: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check whether the token must be refreshed."""
        return (now or utcnow()) > self.expiry
