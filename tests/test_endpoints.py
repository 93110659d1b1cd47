# tests/test_endpoints.py
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from fastapi.testclient import TestClient

from mcp_promptgate.dependencies import (
    get_authorization_decision_engine,
    get_authorization_flow_engine,
)
from mcp_promptgate.authorization.decision import AuthorizationDecisionEngine
from mcp_promptgate.main import app
from mcp_promptgate.oauth.flow import AuthorizationFlowEngine
from mcp_promptgate.oauth.session_store import get_authorization_session_store
from mcp_promptgate.oauth.token_store import get_token_store
from mcp_promptgate.servers.registry import ServerRegistry, get_server_registry
from mcp_promptgate.settings import settings

from .conftest import REDIRECT_URI

TOKEN_URL = "https://auth.example.com/token"

SERVERS = [
    {
        "name": "jira",
        "type": "url",
        "url": "https://mcp.example.com/jira",
        "oauth_provider_configuration": {
            "issuer": "https://auth.example.com",
            "authorization_endpoint": "https://auth.example.com/authorize",
            "token_endpoint": TOKEN_URL,
            "client_id": "client-123",
            "client_type": "public",
        },
    },
    {"name": "linear", "type": "url", "url": "https://mcp.linear.app/sse", "authorization_token": "lin-static"},
    {"name": "undiscoverable", "type": "url", "url": "https://nothing.example.com/mcp"},
]


@pytest.fixture
def environ():
    return {}


@pytest.fixture
def client(provider, session_store, token_store, environ, monkeypatch):
    monkeypatch.setattr(settings, "access_token", None)
    registry = ServerRegistry.from_list(SERVERS)
    http_client = provider.client()

    app.dependency_overrides[get_server_registry] = lambda: registry
    app.dependency_overrides[get_token_store] = lambda: token_store
    app.dependency_overrides[get_authorization_session_store] = lambda: session_store
    app.dependency_overrides[get_authorization_flow_engine] = lambda: AuthorizationFlowEngine(
        http_client, session_store, token_store, redirect_uri=REDIRECT_URI, default_scope="read"
    )
    app.dependency_overrides[get_authorization_decision_engine] = lambda: AuthorizationDecisionEngine(
        token_store, environ=environ
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def _start_flow(client):
    response = client.post("/api/mcp/jira/authorize")
    assert response.status_code == 200
    auth_url = response.json()["authUrl"]
    return parse_qs(urlsplit(auth_url).query)["state"][0]


def test_authorize_returns_auth_url(client):
    response = client.post("/api/mcp/jira/authorize")

    assert response.status_code == 200
    auth_url = response.json()["authUrl"]
    assert auth_url.startswith("https://auth.example.com/authorize?")
    assert "code_challenge_method=S256" in auth_url


def test_authorize_unknown_server(client):
    assert client.post("/api/mcp/ghost/authorize").status_code == 404


def test_authorize_with_static_token_conflicts(client):
    response = client.post("/api/mcp/linear/authorize")
    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "already_authorized"


def test_authorize_discovery_failure_is_bad_gateway(client):
    response = client.post("/api/mcp/undiscoverable/authorize")
    assert response.status_code == 502
    assert response.json()["detail"]["error"] == "discovery_failed"


def test_callback_success(client, provider, token_store):
    provider.add("POST", TOKEN_URL, httpx.Response(200, json={"access_token": "at-1", "expires_in": 3600}))
    state = _start_flow(client)

    response = client.get("/api/oauth/callback", params={"code": "auth-code", "state": state})

    assert response.status_code == 200
    assert "Authorization Successful" in response.text
    assert client.get("/api/mcp/jira/authorization").json()["method"] == "oauth"


def test_callback_provider_error(client, provider):
    state = _start_flow(client)

    response = client.get("/api/oauth/callback", params={
        "error": "access_denied", "error_description": "User said no", "state": state
    })

    assert response.status_code == 400
    assert "OAuth error: User said no" in response.text
    assert provider.requests_to(TOKEN_URL) == []


def test_callback_missing_code(client):
    response = client.get("/api/oauth/callback", params={"state": "abc"})
    assert response.status_code == 400
    assert "Missing authorization code parameter." in response.text


def test_callback_unknown_state(client):
    response = client.get("/api/oauth/callback", params={"code": "auth-code", "state": "forged"})
    assert response.status_code == 400
    assert "Invalid or expired authorization session." in response.text


def test_callback_token_exchange_failure(client, provider, token_store):
    provider.add("POST", TOKEN_URL, httpx.Response(401, json={"error": "invalid_client"}))
    state = _start_flow(client)

    response = client.get("/api/oauth/callback", params={"code": "auth-code", "state": state})

    assert response.status_code == 502
    assert "Token exchange failed: 401" in response.text


def test_list_servers(client, environ):
    environ["MCP_jira_authorization_token"] = "env-token"

    servers = {server["name"]: server for server in client.get("/api/mcp/servers").json()}

    assert set(servers) == {"jira", "linear", "undiscoverable"}
    assert servers["jira"]["authorization"]["method"] == "environment"
    assert servers["linear"]["authorization"]["method"] == "config"
    assert servers["undiscoverable"]["authorization"]["is_authorized"] is False


def test_server_authorization_details(client):
    details = client.get("/api/mcp/linear/authorization").json()
    assert details["is_authorized"] is True
    assert details["has_config_token"] is True
    assert details["env_token_key"] == "MCP_linear_authorization_token"

    assert client.get("/api/mcp/ghost/authorization").status_code == 404


def test_authorization_check(client):
    response = client.post("/api/mcp/authorization-check", json={"servers": ["linear", "jira", "ghost"]})
    assert response.json() == {"authorized": False, "unauthorizedServers": ["jira", "ghost"]}

    response = client.post("/api/mcp/authorization-check", json={"servers": ["linear"]})
    assert response.json() == {"authorized": True, "unauthorizedServers": []}


def test_connections(client):
    body = client.get("/api/connections").json()

    badges = {badge["name"]: badge for badge in body["servers"]}
    assert badges["linear"] == {"name": "linear", "authorized": True, "method": "config"}
    assert {connection["kind"] for connection in body["connections"]} == {"git-credentials", "docker-registry"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestAccessToken:

    @pytest.fixture(autouse=True)
    def protect(self, client, monkeypatch):
        monkeypatch.setattr(settings, "access_token", "s3cret")

    def test_missing_token(self, client):
        assert client.get("/api/mcp/servers").status_code == 401

    def test_wrong_token(self, client):
        response = client.get("/api/mcp/servers", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 403

    def test_bearer_token(self, client):
        response = client.get("/api/mcp/servers", headers={"Authorization": "Bearer s3cret"})
        assert response.status_code == 200

    def test_x_access_token_header(self, client):
        response = client.post("/api/mcp/jira/authorize", headers={"X-Access-Token": "s3cret"})
        assert response.status_code == 200

    def test_callback_is_not_protected(self, client):
        response = client.get("/api/oauth/callback", params={"code": "auth-code", "state": "forged"})
        assert response.status_code == 400
