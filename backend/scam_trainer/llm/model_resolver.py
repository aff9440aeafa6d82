"""Model resolution: pick a usable generation endpoint for a credential.

The upstream catalog changes which model names exist without notice, so the
endpoint is discovered lazily from the catalog and memoized for the lifetime
of the owning session. Resolution never fails: when the catalog cannot be
read, or nothing in it is usable, the fixed default endpoint is returned.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from scam_trainer.llm.gemini_client import (
    CatalogModel,
    CatalogUnavailable,
    GeminiClient,
    GeminiError,
    NoCompatibleModel,
)

logger = logging.getLogger(__name__)

# Checked in priority order; the first tier with a match wins.
PREFERRED_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.0-flash",
    "gemini-1.5-flash",
    "gemini-1.5-flash-latest",
]

GENERATION_METHOD = "generateContent"
DEFAULT_MODEL = "models/gemini-pro"
MODEL_PREFIX = "models/"
ANY_TIER_LABEL = "*"


class ResolutionSource(str, Enum):
    """Which branch produced the endpoint."""

    PREFERRED = "preferred"
    ANY_GENERATIVE = "any_generative"
    DEFAULT = "default"


@dataclass(frozen=True)
class SelectionTier:
    """A named predicate over catalog entries."""

    label: str
    matches: Callable[[CatalogModel], bool]


@dataclass(frozen=True)
class Resolution:
    """Outcome of one resolution attempt."""

    endpoint: str
    model_name: str | None
    source: ResolutionSource
    failure: GeminiError | None = None

    @property
    def is_fallback(self) -> bool:
        return self.source == ResolutionSource.DEFAULT


def supports_generation(model: CatalogModel) -> bool:
    return GENERATION_METHOD in model.supported_generation_methods


def _preferred(identifier: str) -> Callable[[CatalogModel], bool]:
    def matches(model: CatalogModel) -> bool:
        return identifier in model.name and supports_generation(model)

    return matches


def build_tiers(preferences: Sequence[str] = PREFERRED_MODELS) -> list[SelectionTier]:
    """One tier per preferred identifier, then a catch-all generative tier."""
    tiers = [SelectionTier(label=pref, matches=_preferred(pref)) for pref in preferences]
    tiers.append(SelectionTier(label=ANY_TIER_LABEL, matches=supports_generation))
    return tiers


DEFAULT_TIERS = build_tiers()


def select_model(
    catalog: Sequence[CatalogModel],
    tiers: Sequence[SelectionTier] = DEFAULT_TIERS,
) -> tuple[CatalogModel, SelectionTier] | None:
    """Return the first catalog entry matching the highest-priority tier.

    Within a tier, catalog order breaks ties.
    """
    for tier in tiers:
        for model in catalog:
            if tier.matches(model):
                return model, tier
    return None


def qualify_model_name(name: str) -> str:
    """Add the ``models/`` namespace if the catalog returned a bare name."""
    return name if name.startswith(MODEL_PREFIX) else f"{MODEL_PREFIX}{name}"


def endpoint_for(base_url: str, model_name: str) -> str:
    return f"{base_url.rstrip('/')}/{qualify_model_name(model_name)}:{GENERATION_METHOD}"


class ModelResolver:
    """Resolves and memoizes the generation endpoint for one session."""

    def __init__(
        self,
        client: GeminiClient,
        tiers: Sequence[SelectionTier] = DEFAULT_TIERS,
    ):
        self._client = client
        self._tiers = list(tiers)
        self._endpoint: str | None = None
        self.last_resolution: Resolution | None = None

    @property
    def default_endpoint(self) -> str:
        return endpoint_for(self._client.base_url, DEFAULT_MODEL)

    @property
    def resolved_endpoint(self) -> str | None:
        """The memoized endpoint, or None before the first resolution."""
        return self._endpoint

    async def resolve_endpoint(self) -> str:
        """Return the memoized endpoint, resolving it from the catalog on first use."""
        if self._endpoint is not None:
            return self._endpoint

        resolution = await self.resolve()
        self.last_resolution = resolution
        self._endpoint = resolution.endpoint
        return self._endpoint

    async def resolve(self) -> Resolution:
        """Run one resolution attempt against the catalog, without memoizing."""
        logger.info("Detecting available models...")
        try:
            catalog = await self._client.list_models()
        except CatalogUnavailable as e:
            return self._fallback(e)

        selected = select_model(catalog, self._tiers)
        if selected is None:
            return self._fallback(
                NoCompatibleModel("No compatible model found for this API key.")
            )

        model, tier = selected
        if tier.label == ANY_TIER_LABEL:
            source = ResolutionSource.ANY_GENERATIVE
        else:
            source = ResolutionSource.PREFERRED
        logger.info(f"Auto-selected model: {model.name} (tier {tier.label})")
        return Resolution(
            endpoint=endpoint_for(self._client.base_url, model.name),
            model_name=qualify_model_name(model.name),
            source=source,
        )

    def reset(self) -> None:
        """Forget the memoized endpoint; the next call re-queries the catalog."""
        self._endpoint = None
        self.last_resolution = None

    def _fallback(self, failure: GeminiError) -> Resolution:
        logger.warning(f"Model resolution failed, using default fallback: {failure}")
        return Resolution(
            endpoint=self.default_endpoint,
            model_name=DEFAULT_MODEL,
            source=ResolutionSource.DEFAULT,
            failure=failure,
        )
