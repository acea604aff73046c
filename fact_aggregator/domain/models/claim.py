"""Domain models for claims and verification options."""

from typing import Optional, Set

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class Claim(BaseModel):
    """Represents a natural-language statement to be verified."""

    text: str = Field(..., description="The actual claim text to be verified")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "text": "지구는 둥글다",
            }
        }

    @field_validator("text")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Claim text cannot be empty")
        return value


class VerificationOptions(BaseModel):
    """Options controlling a single verification call."""

    language_code: str = Field(default="ko", description="Language code passed to providers")
    max_age_days: int = Field(default=30, ge=0, description="Maximum age of fact checks in days")
    max_results: int = Field(default=10, ge=1, description="Maximum results requested per provider")
    apis: Optional[Set[str]] = Field(
        default=None,
        description="Provider identifiers to query (None = all registered providers)",
    )

    class Config:
        """Pydantic model configuration."""
        frozen = True
        alias_generator = to_camel
        populate_by_name = True
