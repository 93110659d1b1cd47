# mcp_promptgate/authorization/connections.py
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional, List, Mapping

from pydantic import BaseModel

from .validators import inspect_git_home

logger = logging.getLogger(__name__)

# Checked after the environment-derived homes
FALLBACK_GIT_HOMES = ("~", "/home/appuser")


class ConnectionKind(str, Enum):
    GIT_CREDENTIALS = "git-credentials"
    DOCKER_REGISTRY = "docker-registry"


CONNECTION_DESCRIPTIONS = {
    ConnectionKind.GIT_CREDENTIALS: "Git credentials file, SSH key, or GIT_TOKEN",
    ConnectionKind.DOCKER_REGISTRY: "DOCKER_USERNAME and DOCKER_PASSWORD",
}


class ConnectionStatus(BaseModel):
    kind: ConnectionKind
    available: bool
    description: str


def candidate_git_homes(environ: Mapping[str, str]) -> List[Path]:
    """Every distinct existing home that may hold git credentials, in lookup order."""
    raw = [environ.get("HOME")]
    raw.extend(os.path.expanduser(home) for home in FALLBACK_GIT_HOMES)
    raw.append(environ.get("GIT_HOME_DIR"))

    homes: List[Path] = []
    for candidate in raw:
        if not candidate:
            continue
        path = Path(candidate)
        if path.is_dir() and path not in homes:
            homes.append(path)
    return homes


def _git_credentials_available(environ: Mapping[str, str]) -> bool:
    if environ.get("GIT_TOKEN"):
        return True
    for git_home in candidate_git_homes(environ):
        if inspect_git_home(git_home).has_credentials:
            logger.debug(f"CONNECTIONS: Git credentials found in '{git_home}'.")
            return True
    return False


def _docker_registry_available(environ: Mapping[str, str]) -> bool:
    return bool(environ.get("DOCKER_USERNAME") and environ.get("DOCKER_PASSWORD"))


_CHECKS = {
    ConnectionKind.GIT_CREDENTIALS: _git_credentials_available,
    ConnectionKind.DOCKER_REGISTRY: _docker_registry_available,
}


def is_connection_available(kind: ConnectionKind, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether credentials for a connection kind are present. Never raises."""
    environ = environ if environ is not None else os.environ
    try:
        return _CHECKS[kind](environ)
    except Exception as e:
        logger.error(f"CONNECTIONS: Checking '{kind.value}' failed: {e}", exc_info=True)
        return False


def get_all_connection_statuses(environ: Optional[Mapping[str, str]] = None) -> List[ConnectionStatus]:
    return [
        ConnectionStatus(
            kind=kind,
            available=is_connection_available(kind, environ),
            description=CONNECTION_DESCRIPTIONS[kind],
        )
        for kind in ConnectionKind
    ]
