"""Async REST client for the Gemini generation API.

The REST endpoints are called directly over httpx, not through the google-genai
SDK, because model selection needs the raw catalog fields
(``supportedGenerationMethods``) and the raw ``{error: {message}}`` body.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT = 60.0  # seconds

GENERIC_GENERATION_ERROR = "Generation API request failed"


class GeminiError(Exception):
    """Base exception for generation API errors."""

    pass


class CatalogUnavailable(GeminiError):
    """The model listing query failed or returned unusable data."""

    pass


class NoCompatibleModel(GeminiError):
    """The catalog has no entry that satisfies any selection tier."""

    pass


class GenerationRequestFailed(GeminiError):
    """The generation call did not return a success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MalformedResponse(GeminiError):
    """Success status, but the expected candidate/content shape is missing."""

    pass


@dataclass
class CatalogModel:
    """One entry of the upstream model catalog."""

    name: str
    supported_generation_methods: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CatalogModel":
        methods = data.get("supportedGenerationMethods")
        if not isinstance(methods, list):
            methods = []
        return cls(
            name=str(data.get("name", "")),
            supported_generation_methods=[m for m in methods if isinstance(m, str)],
        )


def api_base() -> str:
    """Base URL of the generation API (no trailing slash)."""
    return os.getenv("GEMINI_API_BASE", DEFAULT_API_BASE).rstrip("/")


def extract_text(data: Any) -> str:
    """Pull the first candidate's text out of a generateContent response.

    Raises:
        MalformedResponse: If the candidates/content/parts shape is absent.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponse(f"Unexpected response shape: {e!r}") from e
    if not isinstance(text, str):
        raise MalformedResponse("Candidate text is not a string")
    return text


class GeminiClient:
    """Thin wrapper around the generation REST API.

    The credential travels as the ``key`` query parameter on every call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Credential for the generation API.
            base_url: API base URL. Defaults to GEMINI_API_BASE env var.
            timeout: Request timeout in seconds. Defaults to GEMINI_TIMEOUT_SECONDS.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        if not api_key:
            raise ValueError("An API key is required to call the generation API.")
        self.api_key = api_key
        self.base_url = (base_url or api_base()).rstrip("/")
        if timeout is None:
            timeout = float(os.getenv("GEMINI_TIMEOUT_SECONDS", DEFAULT_TIMEOUT))
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def models_url(self) -> str:
        return f"{self.base_url}/models"

    async def list_models(self) -> list[CatalogModel]:
        """Fetch the catalog of models available to this credential.

        Raises:
            CatalogUnavailable: On network failure, non-success status or a bad body.
        """
        if self._http.is_closed:
            raise CatalogUnavailable("Client is closed")
        try:
            response = await self._http.get(self.models_url, params={"key": self.api_key})
        except httpx.HTTPError as e:
            raise CatalogUnavailable(f"Model listing request failed: {e}") from e

        if not response.is_success:
            raise CatalogUnavailable(f"Model listing returned status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogUnavailable("Model listing returned invalid JSON") from e
        if not isinstance(data, dict):
            raise CatalogUnavailable("Model listing returned an unexpected body")

        entries = data.get("models")
        if entries is None:
            return []
        if not isinstance(entries, list):
            raise CatalogUnavailable("Model listing returned a non-list 'models' field")

        return [CatalogModel.from_api(entry) for entry in entries if isinstance(entry, dict)]

    async def generate_content(self, endpoint: str, contents: list[dict[str, Any]]) -> str:
        """Send a full transcript to an endpoint and return the first candidate's text.

        Args:
            endpoint: Fully-qualified ``...:generateContent`` URL.
            contents: Transcript in wire shape, ``[{role, parts: [{text}]}]``.

        Returns:
            Generated text of the first candidate.

        Raises:
            GenerationRequestFailed: Transport failure or non-success status.
            MalformedResponse: Success status without the expected shape.
        """
        if self._http.is_closed:
            raise GenerationRequestFailed("Client is closed")
        try:
            response = await self._http.post(
                endpoint,
                params={"key": self.api_key},
                json={"contents": contents},
            )
        except httpx.HTTPError as e:
            raise GenerationRequestFailed(f"{GENERIC_GENERATION_ERROR}: {e}") from e

        if not response.is_success:
            message = _error_message(response)
            logger.error(f"Generation API error {response.status_code}: {message}")
            raise GenerationRequestFailed(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse("Generation API returned invalid JSON") from e

        return extract_text(data)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "GeminiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _error_message(response: httpx.Response) -> str:
    """Upstream ``error.message`` if the body carries one, else a generic message."""
    try:
        data = response.json()
    except ValueError:
        return GENERIC_GENERATION_ERROR
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return GENERIC_GENERATION_ERROR
