"""
Shared pytest fixtures.

Environment is pinned before any application module is imported so that
config.py never reads a developer's .env values for these keys.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="codetutor-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["BLOB_STORAGE_DIR"] = os.path.join(_TMP_DIR, "blobs")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GITHUB_TOKEN"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base
from services.gemini import GeminiClient
from services.github import FetchedRepository, GitHubClient, parse_repo_url
from services.storage import BlobStore


class FakeGemini(GeminiClient):
    """Returns queued responses instead of calling the API."""

    def __init__(self, responses=None):
        super().__init__(api_key="test-key", model="test-model")
        self.responses = list(responses or [])
        self.prompts = []

    def generate_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.responses:
            return self.responses.pop(0)
        return "## 1. APPLICATION SUMMARY\n- A sample app"


class FakeGitHub(GitHubClient):
    """Serves a fixed file set for any valid URL."""

    def __init__(self, files=None):
        super().__init__(token=None)
        self.files = files if files is not None else {
            "src/app.py": "def main():\n    return 1\n",
            "src/auth/login.ts": "export const login = () => true;\n",
            "README.md": "# Sample\n",
        }
        self.calls = []

    async def fetch_repository(self, url: str, branch: str = "main") -> FetchedRepository:
        owner, name = parse_repo_url(url)
        self.calls.append((url, branch))
        return FetchedRepository(
            owner=owner,
            name=name,
            files=dict(self.files),
            total_size=sum(len(content) for content in self.files.values()),
        )


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(tmp_path):
    return BlobStore(tmp_path / "blobs")


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def client(db_session, store, gemini, github):
    from database import get_db
    from main import app
    from services.gemini import get_gemini_client
    from services.github import get_github_client
    from services.storage import get_blob_store

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: store
    app.dependency_overrides[get_gemini_client] = lambda: gemini
    app.dependency_overrides[get_github_client] = lambda: github
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
