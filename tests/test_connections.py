# tests/test_connections.py
import pytest

from mcp_promptgate.authorization import connections
from mcp_promptgate.authorization.connections import (
    ConnectionKind,
    candidate_git_homes,
    get_all_connection_statuses,
    is_connection_available,
)


@pytest.fixture(autouse=True)
def no_fallback_homes(monkeypatch):
    # Keep the machine's own home directory out of the checks
    monkeypatch.setattr(connections, "FALLBACK_GIT_HOMES", ())


def test_docker_registry_needs_username_and_password():
    assert not is_connection_available(ConnectionKind.DOCKER_REGISTRY, {"DOCKER_USERNAME": "me"})
    assert is_connection_available(ConnectionKind.DOCKER_REGISTRY, {"DOCKER_USERNAME": "me", "DOCKER_PASSWORD": "pw"})


def test_git_credentials_from_token(tmp_path):
    assert is_connection_available(ConnectionKind.GIT_CREDENTIALS, {"GIT_TOKEN": "ghp_1", "HOME": str(tmp_path)})


def test_git_credentials_from_home(tmp_path):
    environ = {"HOME": str(tmp_path)}
    assert not is_connection_available(ConnectionKind.GIT_CREDENTIALS, environ)

    (tmp_path / ".git-credentials").write_text("x")
    assert is_connection_available(ConnectionKind.GIT_CREDENTIALS, environ)


def test_failing_check_reports_unavailable(monkeypatch):
    def broken(environ):
        raise OSError("permission denied")

    monkeypatch.setitem(connections._CHECKS, ConnectionKind.DOCKER_REGISTRY, broken)
    assert not is_connection_available(ConnectionKind.DOCKER_REGISTRY, {})


def test_all_statuses(tmp_path):
    statuses = get_all_connection_statuses({"HOME": str(tmp_path), "DOCKER_USERNAME": "me", "DOCKER_PASSWORD": "pw"})

    by_kind = {status.kind: status for status in statuses}
    assert set(by_kind) == set(ConnectionKind)
    assert by_kind[ConnectionKind.DOCKER_REGISTRY].available
    assert not by_kind[ConnectionKind.GIT_CREDENTIALS].available


def test_git_credentials_found_in_any_candidate_home(tmp_path):
    git_home = tmp_path / "git-home"
    user_home = tmp_path / "user-home"
    git_home.mkdir()
    user_home.mkdir()
    (user_home / ".git-credentials").write_text("x")

    environ = {"GIT_HOME_DIR": str(git_home), "HOME": str(user_home)}
    assert is_connection_available(ConnectionKind.GIT_CREDENTIALS, environ)


def test_git_credentials_from_ssh_key_in_git_home_dir(tmp_path):
    user_home = tmp_path / "user-home"
    git_home = tmp_path / "git-home"
    user_home.mkdir()
    (git_home / ".ssh").mkdir(parents=True)
    (git_home / ".ssh" / "id_ed25519").write_text("key")

    environ = {"HOME": str(user_home), "GIT_HOME_DIR": str(git_home)}
    assert is_connection_available(ConnectionKind.GIT_CREDENTIALS, environ)


def test_fallback_homes_are_checked(tmp_path, monkeypatch):
    fallback = tmp_path / "appuser"
    fallback.mkdir()
    (fallback / ".git-credentials").write_text("x")
    monkeypatch.setattr(connections, "FALLBACK_GIT_HOMES", (str(fallback),))

    assert is_connection_available(ConnectionKind.GIT_CREDENTIALS, {})


def test_candidate_homes_skip_missing_and_duplicates(tmp_path):
    environ = {"HOME": str(tmp_path), "GIT_HOME_DIR": str(tmp_path), "GIT_TOKEN": ""}
    assert candidate_git_homes(environ) == [tmp_path]
    assert candidate_git_homes({"HOME": str(tmp_path / "missing")}) == []
