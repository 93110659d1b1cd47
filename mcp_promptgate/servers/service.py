# mcp_promptgate/servers/service.py
import logging
from typing import List, Dict, Any, Iterable, Optional

from ..authorization.decision import AuthorizationDecisionEngine, AuthorizationDetails
from ..oauth.storage_interfaces import AbstractTokenStore
from .errors import ServerConfigurationError
from .models import ExternalServerConfig, SERVER_TYPE_STDIO
from .registry import ServerRegistry

logger = logging.getLogger(__name__)

DEFAULT_TOOL_CONFIGURATION: Dict[str, Any] = {"enabled": True}


class ExternalServerService:
    """Service layer combining the server registry, the token store and the decision engine."""

    def __init__(
        self,
        registry: ServerRegistry,
        token_store: AbstractTokenStore,
        decision_engine: AuthorizationDecisionEngine,
    ):
        self.registry = registry
        self.token_store = token_store
        self.decision_engine = decision_engine

    def require_server(self, server_name: str) -> ExternalServerConfig:
        server_config = self.registry.get(server_name)
        if server_config is None:
            raise ServerConfigurationError(f"Unknown server '{server_name}'.", server_name=server_name)
        return server_config

    async def get_authorization_details(self, server_name: str) -> AuthorizationDetails:
        server_config = self.require_server(server_name)
        return await self.decision_engine.get_authorization_details(server_name, server_config)

    async def list_authorization_details(self) -> List[AuthorizationDetails]:
        return [
            await self.decision_engine.get_authorization_details(server.name, server)
            for server in self.registry.all()
        ]

    async def find_unauthorized(self, server_names: Iterable[str]) -> List[str]:
        """
        Servers from the list that cannot be used right now. Consulted before
        every tool-enabled execution; unknown servers count as unauthorized.
        """
        unauthorized = []
        for server_name in server_names:
            server_config = self.registry.get(server_name)
            if server_config is None:
                logger.warning(f"Service: Authorization check for unknown server '{server_name}'.")
                unauthorized.append(server_name)
                continue
            if not await self.decision_engine.is_authorized(server_name, server_config):
                unauthorized.append(server_name)
        if unauthorized:
            logger.info(f"Service: Unauthorized servers: {unauthorized}")
        return unauthorized

    async def resolve_token(self, server_config: ExternalServerConfig) -> Optional[str]:
        """Outbound token: static config, then environment override, then the stored OAuth access token."""
        if server_config.authorization_token:
            return server_config.authorization_token
        env_token = self.decision_engine.environment_token(server_config.name)
        if env_token:
            return env_token
        record = await self.token_store.get(server_config.name)
        return record.access_token if record else None

    async def prepare_outbound_servers(self, server_names: Iterable[str]) -> List[Dict[str, Any]]:
        """Server definitions as handed to the model runtime, tokens filled in."""
        prepared = []
        for server_name in server_names:
            server_config = self.require_server(server_name)
            entry: Dict[str, Any] = {
                "type": server_config.type,
                "name": server_config.name,
                "tool_configuration": server_config.tool_configuration or dict(DEFAULT_TOOL_CONFIGURATION),
            }
            if server_config.type == SERVER_TYPE_STDIO:
                entry["command"] = server_config.command
                entry["args"] = list(server_config.args)
                entry["env"] = dict(server_config.env)
            else:
                entry["url"] = server_config.url

            token = await self.resolve_token(server_config)
            if token:
                entry["authorization_token"] = token
            prepared.append(entry)
        return prepared

    async def bearer_headers(self, server_name: str) -> Dict[str, str]:
        """Authorization header for outbound tool calls from the stored OAuth grant."""
        record = await self.token_store.get(server_name)
        if record is None:
            return {}
        return {"Authorization": f"Bearer {record.access_token}"}
