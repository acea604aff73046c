"""Fact-checking API endpoints."""

import logging
from typing import Any, Dict, List, Optional, Set

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ...domain.models.claim import VerificationOptions
from ...domain.services.fact_checking_service import FactCheckingService
from ...infrastructure.dependencies import get_fact_checking_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fact-check", tags=["fact-check"])


class _OptionsRequest(BaseModel):
    """Options shared by single and batch verification requests."""

    language: str = Field(default="ko", description="Language code")
    apis: Optional[Set[str]] = Field(None, description="Provider ids to query (all when omitted)")
    max_age_days: int = Field(default=30, ge=0, description="Maximum age of fact checks in days")
    max_results: int = Field(default=10, ge=1, description="Maximum results per provider")

    class Config:
        """Pydantic model configuration."""
        alias_generator = to_camel
        populate_by_name = True

    def to_options(self) -> VerificationOptions:
        return VerificationOptions(
            language_code=self.language,
            apis=self.apis,
            max_age_days=self.max_age_days,
            max_results=self.max_results,
        )


class VerifyRequest(_OptionsRequest):
    """Request model for single claim verification."""

    claim: Any = Field(None, description="Claim text to verify")


class VerifyBatchRequest(_OptionsRequest):
    """Request model for batch claim verification."""

    claims: List[Any] = Field(default_factory=list, description="Claim texts to verify")


def _require_claim_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise HTTPException(status_code=400, detail="Claim text is required")
    return value


@router.post("/verify")
async def verify_claim(
    request: VerifyRequest,
    service: FactCheckingService = Depends(get_fact_checking_service),
) -> Dict[str, Any]:
    """Verify a single claim across all selected providers.

    Args:
        request: Verification request

    Returns:
        Verification record in camelCase JSON
    """
    claim = _require_claim_text(request.claim)
    logger.info(f"📝 Verify request: {claim[:50]}...")
    record = await service.verify_claim(claim, request.to_options())
    return record.to_dict()


@router.post("/verify-batch")
async def verify_claims_batch(
    request: VerifyBatchRequest,
    service: FactCheckingService = Depends(get_fact_checking_service),
) -> List[Dict[str, Any]]:
    """Verify several claims concurrently.

    Returns:
        One record per claim, in input order
    """
    claims = [_require_claim_text(claim) for claim in request.claims]
    if not claims:
        return []

    logger.info(f"📝 Batch verify request: {len(claims)} claims")
    records = await service.verify_claim_batch(claims, request.to_options())
    return [record.to_dict() for record in records]
