"""Pydantic models for the stored API credential."""

from pydantic import BaseModel, Field


class CredentialUpdate(BaseModel):
    """Request to store the generation API key."""

    api_key: str = Field(..., min_length=1)


class CredentialStatus(BaseModel):
    """Whether a credential is available (the value itself is never returned)."""

    configured: bool
    source: str | None = Field(
        default=None,
        description="'stored' or 'environment' when configured",
    )
