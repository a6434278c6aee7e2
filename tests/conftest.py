import mongomock
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from schemas import User
from security import create_access_token


@pytest.fixture
def db():
    return mongomock.MongoClient().devconnector


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(name="Alice", email=None, avatar="//avatar/alice"):
        doc = User(
            name=name,
            email=email or f"{name.lower()}@devconnector.io",
            password="not-a-real-hash",
            avatar=avatar,
        ).to_mongo()
        return str(db["user"].insert_one(doc).inserted_id)
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user_id):
        return {"x-auth-token": create_access_token(user_id)}
    return _headers
