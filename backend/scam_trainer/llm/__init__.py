"""Generation API integration: REST client and model resolution."""

from scam_trainer.llm.gemini_client import (
    CatalogModel,
    CatalogUnavailable,
    GeminiClient,
    GeminiError,
    GenerationRequestFailed,
    MalformedResponse,
    NoCompatibleModel,
)
from scam_trainer.llm.model_resolver import (
    ModelResolver,
    Resolution,
    ResolutionSource,
    SelectionTier,
    select_model,
)

__all__ = [
    # REST client
    "GeminiClient",
    "CatalogModel",
    # Errors
    "GeminiError",
    "CatalogUnavailable",
    "NoCompatibleModel",
    "GenerationRequestFailed",
    "MalformedResponse",
    # Model resolution
    "ModelResolver",
    "Resolution",
    "ResolutionSource",
    "SelectionTier",
    "select_model",
]
