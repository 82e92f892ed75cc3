# tests/conftest.py
import time
import uuid

import pytest
from fastapi.testclient import TestClient

from marketplace import crud
from marketplace.config import Settings
from marketplace.db import Base
from marketplace.errors import AuthenticationError, UpstreamError
from marketplace.identity import Caller, IdentityProvider, SessionTokens
from marketplace.main import create_app
from marketplace.models import Category, Profile


class FakeIdentityProvider(IdentityProvider):
    """In-memory stand-in for the hosted auth service."""

    def __init__(self):
        self.users = {}
        self.tokens = {}

    def register(self, email, password):
        if email in self.users:
            raise UpstreamError("User already registered")
        self.users[email] = (uuid.uuid4(), password)
        return self.establish_session(email, password)

    def establish_session(self, email, password):
        entry = self.users.get(email)
        if entry is None or entry[1] != password:
            raise AuthenticationError("Invalid login credentials")
        token = uuid.uuid4().hex
        caller = Caller(id=entry[0], email=email, token=token)
        self.tokens[token] = caller
        return caller, SessionTokens(
            access_token=token,
            refresh_token=uuid.uuid4().hex,
            expires_in=3600,
            expires_at=int(time.time()) + 3600,
        )

    def authenticate(self, token):
        caller = self.tokens.get(token)
        if caller is None:
            raise AuthenticationError("Invalid or expired token")
        return caller

    def invalidate_session(self, token):
        self.tokens.pop(token, None)


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{tmp_path / 'marketplace.db'}")


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def app(settings, identity):
    app = create_app(settings, identity=identity)
    Base.metadata.create_all(bind=app.state.engine)
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def category(db):
    crud.seed_categories(db)
    return crud.select_one(db, Category, Category.slug == "electronics")


@pytest.fixture
def make_user(db):
    """Create a profile row directly and return its Caller."""
    def _make(email=None):
        user_id = uuid.uuid4()
        email = email or f"{user_id.hex[:8]}@example.com"
        crud.insert(db, Profile, {"id": user_id, "email": email, "full_name": "Test User", "location": "Town"})
        return Caller(id=user_id, email=email, token=None)
    return _make


@pytest.fixture
def signup(client):
    """Register through the API and return (user_id, auth headers)."""
    def _signup(email="seller@example.com", password="secret123"):
        resp = client.post("/api/auth/signup", json={
            "email": email,
            "password": password,
            "full_name": "Seller",
            "location": "Lisbon",
        })
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['session']['access_token']}"}
    return _signup


@pytest.fixture
def listing_payload(category):
    def _payload(**overrides):
        payload = {
            "title": "Chair",
            "description": "Wooden chair",
            "price": 10,
            "category_id": str(category.id),
            "condition": "good",
            "location": "X",
        }
        payload.update(overrides)
        return payload
    return _payload
