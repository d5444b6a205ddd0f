import os
import sys

# Settings are read on import, so the environment has to be ready first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ.pop("AUTH_JWT_AUDIENCE", None)

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.auth import create_access_token
from app.core.cache import CacheService
from app.core.interfaces import TMDBClientInterface, TMDBResponse
from app.core.services.movie_service import MovieService
from app.core.services.person_service import PersonService
from app.db import Base, get_db
from app.main import app


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def make(email: str, sub: str = "user-id"):
        token = create_access_token({"sub": sub, "email": email})
        return {"Authorization": f"Bearer {token}"}
    return make


class FakeTMDBClient(TMDBClientInterface):
    """Canned TMDB responses keyed by endpoint"""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def make_request(self, endpoint, params=None, localized=True):
        self.calls.append((endpoint, dict(params or {})))
        response = self.responses.get(endpoint)
        if response is None:
            return TMDBResponse({}, 404, False)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, TMDBResponse):
            return response
        return TMDBResponse(response, 200, True)


@pytest.fixture
def fake_tmdb():
    return FakeTMDBClient()


@pytest.fixture
def movie_service(fake_tmdb):
    return MovieService(fake_tmdb, CacheService(enabled=False))


@pytest.fixture
def person_service(fake_tmdb):
    return PersonService(fake_tmdb, CacheService(enabled=False))


def movie_payload(movie_id: int, title: str = None, **extra):
    payload = {
        "id": movie_id,
        "title": title or f"Movie {movie_id}",
        "poster_path": f"/poster{movie_id}.jpg",
        "release_date": "1999-10-15",
        "overview": "Overview",
        "vote_average": 8.4,
        "vote_count": 1000,
    }
    payload.update(extra)
    return payload
