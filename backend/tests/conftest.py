"""
Shared fixtures for API tests.

Provides:
- An in-memory SQLite database per test (StaticPool so every session sees it)
- An application instance wired to that database and a stub AI analyst
- Helpers to register users and build auth headers
"""

import os
import sys

# Must be set before backend modules are imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["AI_ENRICH_IN_BACKGROUND"] = "false"

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.database import get_db, init_db, make_engine
from backend.main import create_app
from backend.models_db import User
from ideaengine.analysis import ASSISTANT_FALLBACK

STUB_ANALYSIS = {
    "similarSolutions": ["Notion", "Confluence"],
    "marketOpportunity": {"score": 7, "explanation": "Teams want this"},
    "recommendations": ["Start with one department"],
    "risks": ["Adoption"],
}


class StubAnalyst:
    """Stands in for IdeaAnalyst without touching the network."""

    def __init__(self, analysis=None, answer="Focus on a narrow first customer."):
        self.analysis = STUB_ANALYSIS if analysis is None else analysis
        self.answer = answer
        self.analyze_calls = []
        self.ask_calls = []

    async def analyze_idea(self, title, description, tags=None):
        self.analyze_calls.append((title, description, tags))
        return dict(self.analysis)

    async def ask(self, question, title, description, phase):
        self.ask_calls.append((question, title, description, phase))
        return self.answer or ASSISTANT_FALLBACK


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def analyst():
    return StubAnalyst()


@pytest.fixture
def app_factory(session_factory, analyst):
    """Build an app bound to the test database; keyword args go to create_app."""
    def _build(**kwargs):
        kwargs.setdefault("analyst", analyst)
        app = create_app(session_factory=session_factory, create_tables=False, **kwargs)

        def override_get_db():
            session = session_factory()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = override_get_db
        return app
    return _build


@pytest.fixture
def client(app_factory):
    with TestClient(app_factory()) as c:
        yield c


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, name="Ada", email=None, password="secret123", role=None):
    """Register a user and return (token, user dict)."""
    body = {"name": name, "email": email or f"{name.lower()}@example.com", "password": password}
    if role:
        body["role"] = role
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    data = response.json()
    return data["token"], data["user"]


def make_admin(session_factory, user_id):
    session = session_factory()
    try:
        session.query(User).filter(User.id == user_id).update({User.role: "admin"})
        session.commit()
    finally:
        session.close()


def create_idea(client, token, **fields):
    body = {"title": "Idea", "description": "Something useful"}
    body.update(fields)
    response = client.post("/api/ideas", json=body, headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()["idea"]
