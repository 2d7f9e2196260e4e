import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app.deps import get_gateway, get_secret_provider, get_token_verifier
from app.errors import AuthError
from app.llm.gateway import GeminiGateway
from main import app

TEST_API_BASE = "https://gemini.test/v1beta/models"

DEFAULT_DECISION = {
    "mode": "clarify",
    "confidence": 0.0,
    "missingFields": [],
    "clarificationQuestion": None,
    "assistantMessage": None,
    "main": {
        "amount": None,
        "type": None,
        "accountName": None,
        "categoryName": None,
        "dateIso": None,
        "note": None,
    },
    "tour": {
        "amount": None,
        "tourId": None,
        "tourName": None,
        "contributorName": None,
        "sharerNames": [],
        "dateIso": None,
        "note": None,
    },
}


def gemini_envelope(*texts: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}}]}


def make_gateway(handler, models=("model-a", "model-b")) -> GeminiGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiGateway(client=client, models=models, api_base=TEST_API_BASE)


class StaticSecrets:
    def __init__(self, values: dict[str, str]):
        self.values = values

    def get(self, name: str) -> str | None:
        return self.values.get(name)


class FakeVerifier:
    def __init__(self, valid_tokens=("good-token",)):
        self.valid_tokens = set(valid_tokens)
        self.seen: list[str] = []

    async def verify(self, token: str) -> dict:
        self.seen.append(token)
        if token not in self.valid_tokens:
            raise AuthError("bad token")
        return {"sub": "user-1"}


class UpstreamStub:
    """Records calls and answers every model with the same decision JSON."""

    def __init__(self, decision: dict | None = None, status_code: int = 200):
        self.decision = decision or {}
        self.status_code = status_code
        self.raw_text: str | None = None
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream unavailable")
        text = self.raw_text if self.raw_text is not None else json.dumps(self.decision)
        return httpx.Response(200, json=gemini_envelope(text))

    def prompt(self, index: int = 0) -> str:
        body = json.loads(self.requests[index].content)
        return body["contents"][0]["parts"][0]["text"]


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def secrets():
    return StaticSecrets({"GEMINI_API_KEY": "test-key"})


@pytest.fixture
def client(upstream, verifier, secrets):
    app.dependency_overrides[get_gateway] = lambda: make_gateway(upstream)
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    app.dependency_overrides[get_secret_provider] = lambda: secrets
    yield TestClient(app)
    app.dependency_overrides.clear()
