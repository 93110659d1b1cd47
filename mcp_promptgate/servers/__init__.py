# mcp_promptgate/servers/__init__.py

"""
External tool server configuration.

Service and API endpoints live in `servers.service` and `servers.endpoints`.
"""

from .errors import ServerConfigurationError
from .models import (
    ExternalServerConfig,
    OAuthProviderConfiguration,
    RepositoryConfig,
    ServerAuthorizationConfig,
    SERVER_TYPE_URL,
    SERVER_TYPE_STDIO,
    SERVER_TYPE_GITHUB_REPO,
)
from .registry import ServerRegistry, get_server_registry, reset_server_registry

__all__ = [
    "ServerConfigurationError",
    "ExternalServerConfig",
    "OAuthProviderConfiguration",
    "RepositoryConfig",
    "ServerAuthorizationConfig",
    "SERVER_TYPE_URL",
    "SERVER_TYPE_STDIO",
    "SERVER_TYPE_GITHUB_REPO",
    "ServerRegistry",
    "get_server_registry",
    "reset_server_registry",
]
