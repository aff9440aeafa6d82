"""Tests for the generation API REST client."""

import json

import httpx
import pytest

from conftest import API_BASE, FakeGeminiAPI, catalog_entry
from scam_trainer.llm.gemini_client import (
    GENERIC_GENERATION_ERROR,
    CatalogModel,
    CatalogUnavailable,
    GeminiClient,
    GenerationRequestFailed,
    MalformedResponse,
    extract_text,
)

ENDPOINT = f"{API_BASE}/models/gemini-2.5-flash:generateContent"
CONTENTS = [{"role": "user", "parts": [{"text": "hello"}]}]


class TestExtractText:
    """Tests for pulling the reply out of a response body."""

    def test_first_candidate(self):
        data = {
            "candidates": [
                {"content": {"parts": [{"text": "first"}, {"text": "second"}]}},
                {"content": {"parts": [{"text": "other"}]}},
            ]
        }
        assert extract_text(data) == "first"

    def test_no_candidates(self):
        with pytest.raises(MalformedResponse):
            extract_text({"candidates": []})

    def test_missing_content(self):
        with pytest.raises(MalformedResponse):
            extract_text({"candidates": [{"finishReason": "SAFETY"}]})

    def test_non_string_text(self):
        with pytest.raises(MalformedResponse):
            extract_text({"candidates": [{"content": {"parts": [{"text": 3}]}}]})

    def test_not_a_dict(self):
        with pytest.raises(MalformedResponse):
            extract_text(["unexpected"])


class TestClientInit:
    """Tests for client construction."""

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            GeminiClient(api_key="")

    @pytest.mark.asyncio
    async def test_base_url_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GEMINI_API_BASE", "http://localhost:9999/v1/")
        client = GeminiClient(api_key="k")
        try:
            assert client.base_url == "http://localhost:9999/v1"
            assert client.models_url == "http://localhost:9999/v1/models"
        finally:
            await client.aclose()


class TestListModels:
    """Tests for the catalog query."""

    @pytest.mark.asyncio
    async def test_parses_catalog(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.catalog = [
            catalog_entry("models/gemini-2.0-flash"),
            {"name": "models/aqa"},
        ]

        models = await gemini_client.list_models()

        assert models == [
            CatalogModel("models/gemini-2.0-flash", ["generateContent"]),
            CatalogModel("models/aqa", []),
        ]

    @pytest.mark.asyncio
    async def test_sends_key_as_query_param(
        self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI
    ):
        await gemini_client.list_models()

        request = fake_api.catalog_requests[0]
        assert request.url.params["key"] == "test-key"
        assert str(request.url).startswith(f"{API_BASE}/models?")

    @pytest.mark.asyncio
    async def test_missing_models_key(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.catalog_response = httpx.Response(200, json={})
        assert await gemini_client.list_models() == []

    @pytest.mark.asyncio
    async def test_error_status(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.catalog_response = httpx.Response(403, json={"error": {"message": "denied"}})

        with pytest.raises(CatalogUnavailable):
            await gemini_client.list_models()

    @pytest.mark.asyncio
    async def test_network_failure(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.catalog_response = httpx.ConnectError("unreachable")

        with pytest.raises(CatalogUnavailable):
            await gemini_client.list_models()

    @pytest.mark.asyncio
    async def test_invalid_json(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.catalog_response = httpx.Response(200, content=b"<html>")

        with pytest.raises(CatalogUnavailable):
            await gemini_client.list_models()

    @pytest.mark.asyncio
    async def test_models_field_not_a_list(
        self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI
    ):
        fake_api.catalog_response = httpx.Response(200, json={"models": 5})

        with pytest.raises(CatalogUnavailable):
            await gemini_client.list_models()

    @pytest.mark.asyncio
    async def test_bad_methods_field(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.catalog = [
            {"name": "models/a", "supportedGenerationMethods": 7},
            {"name": "models/b", "supportedGenerationMethods": ["generateContent", 3]},
        ]

        models = await gemini_client.list_models()

        assert models == [
            CatalogModel("models/a", []),
            CatalogModel("models/b", ["generateContent"]),
        ]

    @pytest.mark.asyncio
    async def test_non_object_body(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.catalog_response = httpx.Response(200, json=["models"])

        with pytest.raises(CatalogUnavailable):
            await gemini_client.list_models()


class TestGenerateContent:
    """Tests for the generation call."""

    @pytest.mark.asyncio
    async def test_returns_text(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.replies = ["Hi there!"]

        assert await gemini_client.generate_content(ENDPOINT, CONTENTS) == "Hi there!"

    @pytest.mark.asyncio
    async def test_request_shape(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        await gemini_client.generate_content(ENDPOINT, CONTENTS)

        request = fake_api.generate_requests[0]
        assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
        assert request.url.params["key"] == "test-key"
        assert json.loads(request.content) == {"contents": CONTENTS}

    @pytest.mark.asyncio
    async def test_upstream_error_message(
        self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI
    ):
        fake_api.replies = [
            httpx.Response(400, json={"error": {"code": 400, "message": "API key not valid."}})
        ]

        with pytest.raises(GenerationRequestFailed) as exc_info:
            await gemini_client.generate_content(ENDPOINT, CONTENTS)

        assert exc_info.value.message == "API key not valid."
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_generic_error_message(
        self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI
    ):
        fake_api.replies = [httpx.Response(500, content=b"oops")]

        with pytest.raises(GenerationRequestFailed) as exc_info:
            await gemini_client.generate_content(ENDPOINT, CONTENTS)

        assert exc_info.value.message == GENERIC_GENERATION_ERROR
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_network_failure(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.replies = [httpx.ConnectError("unreachable")]

        with pytest.raises(GenerationRequestFailed) as exc_info:
            await gemini_client.generate_content(ENDPOINT, CONTENTS)

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_malformed_success(self, gemini_client: GeminiClient, fake_api: FakeGeminiAPI):
        fake_api.replies = [httpx.Response(200, json={"promptFeedback": {}})]

        with pytest.raises(MalformedResponse):
            await gemini_client.generate_content(ENDPOINT, CONTENTS)

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, fake_api: FakeGeminiAPI):
        async with GeminiClient(api_key="k", transport=fake_api.transport) as client:
            await client.list_models()
        assert client._http.is_closed
