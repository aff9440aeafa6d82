"""Pytest configuration and fixtures."""

import json
import os
import tempfile
from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from scam_trainer.db.database import close_database, init_database
from scam_trainer.db.secrets import reset_cipher
from scam_trainer.llm.chat import manager as manager_module
from scam_trainer.llm.chat.manager import SessionManager
from scam_trainer.llm.gemini_client import GeminiClient
from scam_trainer.main import app

API_BASE = "https://generativelanguage.googleapis.com/v1beta"


def candidate(text: str) -> dict[str, Any]:
    """A successful generateContent body."""
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def catalog_entry(name: str, methods: list[str] | None = None) -> dict[str, Any]:
    return {
        "name": name,
        "supportedGenerationMethods": ["generateContent"] if methods is None else methods,
    }


class FakeGeminiAPI:
    """In-process stand-in for the generation REST API.

    ``replies`` is consumed in order by generateContent calls; each item is
    the reply text, a prepared ``httpx.Response``, or an exception to raise.
    """

    def __init__(self) -> None:
        self.catalog: list[dict[str, Any]] = [
            catalog_entry("models/embedding-001", ["embedContent"]),
            catalog_entry("models/gemini-2.5-flash"),
        ]
        self.catalog_response: httpx.Response | Exception | None = None
        self.replies: list[str | httpx.Response | Exception] = []
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def catalog_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    @property
    def generate_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def generate_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.generate_requests]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "GET" and request.url.path.endswith("/models"):
            if isinstance(self.catalog_response, Exception):
                raise self.catalog_response
            if self.catalog_response is not None:
                return self.catalog_response
            return httpx.Response(200, json={"models": self.catalog})

        if request.method == "POST" and request.url.path.endswith(":generateContent"):
            reply = self.replies.pop(0) if self.replies else "OK"
            if isinstance(reply, Exception):
                raise reply
            if isinstance(reply, httpx.Response):
                return reply
            return httpx.Response(200, json=candidate(reply))

        return httpx.Response(404, json={"error": {"message": "Not found"}})


@pytest.fixture
def fake_api() -> FakeGeminiAPI:
    return FakeGeminiAPI()


@pytest.fixture
async def gemini_client(fake_api: FakeGeminiAPI) -> AsyncGenerator[GeminiClient, None]:
    client = GeminiClient(api_key="test-key", base_url=API_BASE, transport=fake_api.transport)
    yield client
    await client.aclose()


@pytest.fixture
def session_manager(fake_api: FakeGeminiAPI) -> Generator[SessionManager, None, None]:
    """Install a session manager whose clients talk to the fake API."""

    def client_factory(api_key: str) -> GeminiClient:
        return GeminiClient(api_key=api_key, base_url=API_BASE, transport=fake_api.transport)

    manager = SessionManager(session_timeout_minutes=30, client_factory=client_factory)
    manager_module._manager = manager
    yield manager
    manager_module._manager = None


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials and secrets out of the tests."""
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "GEMINI_API_BASE", "SECRETS_KEY"):
        monkeypatch.delenv(name, raising=False)
    reset_cipher()


@pytest.fixture(autouse=True)
async def setup_test_db():
    """Set up a test database for each test."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    await init_database(db_path)

    yield

    await close_database()
    os.unlink(db_path)


@pytest.fixture
async def client(session_manager: SessionManager) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
