# mcp_promptgate/servers/registry.py
import json
import logging
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable

from pydantic import ValidationError

from ..settings import settings as promptgate_global_settings
from .errors import ServerConfigurationError
from .models import ExternalServerConfig

logger = logging.getLogger(__name__)


def _parse_server_source(source: str) -> Any:
    """MCP_SERVERS holds either a JSON array or the path of a JSON file."""
    try:
        return json.loads(source)
    except json.JSONDecodeError as json_error:
        try:
            return json.loads(Path(source).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as file_error:
            raise ServerConfigurationError(
                "MCP_SERVERS is neither valid JSON nor a readable JSON file. "
                f"JSON error: {json_error}. File error: {file_error}"
            ) from file_error


def _validate_server_entry(index: int, raw_server: Any) -> ExternalServerConfig:
    if not isinstance(raw_server, dict):
        raise ServerConfigurationError(f"Server at index {index} must be a JSON object.")

    server_name = raw_server.get("name")
    if not server_name:
        raise ServerConfigurationError(f"Server at index {index} is missing required field 'name'.")
    if not raw_server.get("type"):
        raise ServerConfigurationError(
            f"Server '{server_name}' is missing required field 'type'.",
            server_name=server_name
        )

    try:
        return ExternalServerConfig.model_validate(raw_server)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'server'}: {error['msg']}"
            for error in e.errors()
        )
        raise ServerConfigurationError(
            f"Server '{server_name}' is invalid: {problems}",
            server_name=server_name
        ) from e


class ServerRegistry:
    """Read-only collection of the configured external tool servers, keyed by name."""

    def __init__(self, servers: Iterable[ExternalServerConfig] = ()):
        self._servers: Dict[str, ExternalServerConfig] = {}
        for server in servers:
            if server.name in self._servers:
                raise ServerConfigurationError(
                    f"Duplicate server name '{server.name}'.",
                    server_name=server.name
                )
            self._servers[server.name] = server

    @classmethod
    def from_list(cls, raw_servers: Any) -> "ServerRegistry":
        if not isinstance(raw_servers, list):
            raise ServerConfigurationError("MCP_SERVERS must be a JSON array of server definitions.")
        return cls(_validate_server_entry(index, raw_server) for index, raw_server in enumerate(raw_servers))

    @classmethod
    def load(cls, source: Optional[str]) -> "ServerRegistry":
        """Builds a registry from an MCP_SERVERS value. An empty value yields an empty registry."""
        if not source or not source.strip():
            logger.warning("REGISTRY: MCP_SERVERS is not set. No external servers are configured.")
            return cls()
        registry = cls.from_list(_parse_server_source(source.strip()))
        logger.info(f"REGISTRY: Loaded {len(registry)} external server(s): {registry.names()}")
        return registry

    def get(self, server_name: str) -> Optional[ExternalServerConfig]:
        return self._servers.get(server_name)

    def all(self) -> List[ExternalServerConfig]:
        return list(self._servers.values())

    def names(self) -> List[str]:
        return list(self._servers.keys())

    def __len__(self) -> int:
        return len(self._servers)

    def __contains__(self, server_name: object) -> bool:
        return server_name in self._servers


# Global registry instance for singleton pattern
_server_registry_instance: Optional[ServerRegistry] = None


async def get_server_registry() -> ServerRegistry:
    """
    Factory function to get the server registry, loaded once from the
    MCP_SERVERS setting.
    """
    global _server_registry_instance

    if _server_registry_instance is None:
        _server_registry_instance = ServerRegistry.load(promptgate_global_settings.mcp_servers)

    return _server_registry_instance


def reset_server_registry() -> None:
    """Drops the cached registry so the next access reloads it."""
    global _server_registry_instance
    _server_registry_instance = None
