import os
import time

# Settings are read once; point them at SQLite before eventmap is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "eventmap-test-secret-0123456789abcdef")

import httpx
import jwt
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from eventmap.database import Base, get_db
from eventmap.errors import GeocodeError, InsufficientPoints, UpstreamError
from eventmap.services import Coordinate, EventStore, Route

PARIS = Coordinate(latitude=48.8566, longitude=2.3522)
LYON = Coordinate(latitude=45.7640, longitude=4.8357)
MARSEILLE = Coordinate(latitude=43.2965, longitude=5.3698)


class FakeGeocoder:
    """Resolves addresses from a fixed table and records every lookup."""

    def __init__(self, known=None):
        self.known = dict(known or {})
        self.calls = []

    async def resolve(self, address):
        self.calls.append(address)
        if address not in self.known:
            raise GeocodeError("Cannot geocode address", address=address)
        return self.known[address]


class FakeRouter:
    """Returns a canned route and records the requested coordinates."""

    def __init__(self, route=None, error=None):
        self.route_result = route or Route(
            distance=1200.5,
            duration=300.0,
            geometry={"type": "LineString", "coordinates": [[2.35, 48.85], [2.29, 48.86]]},
        )
        self.error = error
        self.calls = []

    async def route(self, coordinates, mode="driving"):
        self.calls.append((list(coordinates), mode))
        if len(coordinates) < 2:
            raise InsufficientPoints("At least 2 points required")
        if self.error:
            raise UpstreamError(self.error)
        return self.route_result


class FakeResponse:
    def __init__(self, status=200, payload=None, text=""):
        self.status = status
        self._payload = payload
        self._text = text

    async def json(self, content_type=None):
        return self._payload

    async def text(self):
        return self._text


class FakeRequest:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error

    async def __aenter__(self):
        if self.error:
            raise self.error
        return self.response

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeHTTPSession:
    """Stands in for aiohttp.ClientSession.get()."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.closed = False
        self.requests = []

    def get(self, url, params=None):
        self.requests.append((url, params))
        return FakeRequest(self.response, self.error)

    async def close(self):
        self.closed = True


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def geocoder():
    return FakeGeocoder({
        "Paris, France": PARIS,
        "Lyon, France": LYON,
        "Marseille, France": MARSEILLE,
    })


@pytest.fixture
def route_provider():
    return FakeRouter()


@pytest.fixture
def store(db, geocoder):
    return EventStore(db, geocoder=geocoder, tolerance_m=0.0)


@pytest.fixture
def event_fields():
    """Builds valid event fields; keyword arguments override them."""
    def build(**overrides):
        fields = {
            "title": "Concert de Jazz",
            "type": "Concert",
            "date": "2025-10-16",
            "address": "Paris, France",
            "description": "<p>Live music</p>",
        }
        fields.update(overrides)
        return fields
    return build


def make_token(role="admin", username="curator", secret=None, expires_in=3600):
    payload = {"username": username, "role": role, "exp": int(time.time()) + expires_in}
    return jwt.encode(payload, secret or os.environ["JWT_SECRET"], algorithm="HS256")


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
async def client(session_factory, geocoder, route_provider):
    from eventmap.dependencies import get_geocoder, get_route_provider
    from eventmap.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    app.dependency_overrides[get_route_provider] = lambda: route_provider

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
