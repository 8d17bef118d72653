"""Tests for the FastAPI example app wiring."""

import importlib.util
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from gsi_verify import UserProfile
from conftest import CLIENT_ID

pytestmark = pytest.mark.asyncio

EXAMPLE = Path(__file__).resolve().parents[1] / "examples" / "fastapi-example" / "main.py"


@pytest.fixture
def example(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLIENT_ID", CLIENT_ID)
    spec = importlib.util.spec_from_file_location("gsi_fastapi_example", EXAMPLE)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def test_configured_from_env(example):
    assert example.gsi.verifier.client_ids == (CLIENT_ID,)


async def test_login_without_credential(example):
    async with _client(example.app) as client:
        resp = await client.post("/login", data={"g_csrf_token": "x"})
    assert resp.status_code == 401
    assert resp.json()["detail"]["error"] == "token_missing"


async def test_login_returns_profile(example):
    profile = UserProfile(user_id="1234567890", email="user@example.com", full_name="Jane Doe")
    example.app.dependency_overrides[example.gsi.current_user] = lambda: profile

    async with _client(example.app) as client:
        resp = await client.post("/login")
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "user@example.com"
    assert resp.json()["message"] == "Signed in as user@example.com"
