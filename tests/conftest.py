import json
import os
import tempfile
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="chatbot-tests-"))

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("BUCKET_NAME", "test-images")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FILE", "")

import httpx
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

import llm.llm as llm_module
import models  # noqa: F401
from core.database import AsyncSessionLocal, Base, engine
from main import app


@pytest.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace the chat model with one answering the given responses in order."""

    def install(*responses):
        model = FakeListChatModel(responses=list(responses))
        monkeypatch.setattr(llm_module, "custom_model", lambda api_identifier: model)
        return model

    return install


@pytest.fixture
def register(client):
    """Register a user and return its bearer headers. Cookies are dropped so
    every request authenticates explicitly."""

    async def _register(email="alice@example.com", password="secret123"):
        response = await client.post("/auth/register", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register


def _parse_sse(body: str):
    return [
        json.loads(line[len("data: "):])
        for line in body.splitlines()
        if line.startswith("data: ")
    ]


@pytest.fixture
def parse_sse():
    return _parse_sse
