"""
Shared pytest fixtures for the ingredient extractor tests.
"""

import time

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from ingredient_extractor.config import Settings
from ingredient_extractor.main import create_app
from ingredient_extractor.schemas.schemas import ExtractionResult

SECRET = "JWTSECRET"


class FakeExtractor:
    """Stands in for Gemini: records what it was given and answers with a fixed result."""

    def __init__(self, result=None, error=None):
        self.result = result or ExtractionResult(ingredients=[{"name": "Salt", "amount": "5g"}])
        self.error = error
        self.received = []

    def extract(self, sanitized_html):
        self.received.append(sanitized_html)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def settings():
    return Settings(jwt_secret=SECRET, google_ai_api_key="")


@pytest.fixture
def make_token():
    """Returns a function minting HS256 tokens, signed with the test secret by default."""
    def _make(secret=SECRET, expires_in=3600, **claims):
        payload = {"sub": "user-1", "exp": int(time.time()) + expires_in}
        payload.update(claims)
        return jwt.encode(payload, secret, algorithm="HS256")
    return _make


@pytest.fixture
def auth_headers(make_token):
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def client(settings, extractor):
    return TestClient(create_app(settings=settings, extractor=extractor))
