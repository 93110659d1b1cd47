# tests/conftest.py
import httpx
import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Tuple, Union

from mcp_promptgate.oauth.session_store import InMemoryAuthorizationSessionStore
from mcp_promptgate.oauth.token_store import InMemoryTokenStore

REDIRECT_URI = "http://localhost:3000/api/oauth/callback"

Route = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeClock:
    """Deterministic time source for expiry tests."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class MockProvider:
    """
    Routes outbound httpx requests to canned responses and records every
    request. Unrouted requests get a 404.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, url: str, route: Route) -> None:
        self.routes[(method.upper(), url)] = route

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, str(request.url)))
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route

    def requested_urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]

    def requests_to(self, url: str) -> List[httpx.Request]:
        return [request for request in self.requests if str(request.url) == url]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_store(clock) -> InMemoryTokenStore:
    return InMemoryTokenStore(clock=clock)


@pytest.fixture
def session_store(clock) -> InMemoryAuthorizationSessionStore:
    return InMemoryAuthorizationSessionStore(ttl_seconds=600, clock=clock)


@pytest.fixture
def provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
async def http_client(provider):
    client = provider.client()
    yield client
    await client.aclose()
