# mcp_promptgate/authorization/decision.py
import logging
import os
from enum import Enum
from typing import Optional, Mapping

from pydantic import BaseModel

from ..oauth.storage_interfaces import AbstractTokenStore
from ..servers.models import ExternalServerConfig
from .validators import (
    CredentialValidatorKind,
    DEFAULT_GITHUB_PROVIDER,
    SERVER_VALIDATOR_KINDS,
    VALIDATORS_BY_KIND,
    Validator,
    ValidatorContext,
    get_validator_kind,
)

logger = logging.getLogger(__name__)


def environment_token_key(server_name: str) -> str:
    """Name of the environment variable that overrides a server's token."""
    return f"MCP_{server_name}_authorization_token"


class AuthorizationMethod(str, Enum):
    CONFIG = "config"
    ENVIRONMENT = "environment"
    OAUTH = "oauth"
    CUSTOM = "custom"
    NONE = "none"


class AuthorizationDetails(BaseModel):
    """Diagnostic view of every authorization tier for one server. Not an access decision."""
    server_name: str
    is_authorized: bool
    method: AuthorizationMethod
    has_config_token: bool
    has_env_token: bool
    has_oauth_token: bool
    has_custom_credentials: bool
    env_token_key: str


class AuthorizationDecisionEngine:
    """
    Decides whether an external server can be used right now.

    Tiers are checked in this order and the first match wins:
    static config token, environment override, stored OAuth token, custom
    credential validator. Config and environment win over a stale OAuth
    token; a completed OAuth flow wins over a filesystem probe.

    The engine never raises: a failing validator counts as "not authorized"
    for its tier. It has no side effects.
    """

    def __init__(
        self,
        token_store: AbstractTokenStore,
        environ: Optional[Mapping[str, str]] = None,
        server_validator_kinds: Optional[Mapping[str, CredentialValidatorKind]] = None,
        validators_by_kind: Optional[Mapping[CredentialValidatorKind, Validator]] = None,
        github_provider_name: str = DEFAULT_GITHUB_PROVIDER,
    ):
        self.token_store = token_store
        self.environ = environ if environ is not None else os.environ
        self.server_validator_kinds = (
            server_validator_kinds if server_validator_kinds is not None else SERVER_VALIDATOR_KINDS
        )
        self.validators_by_kind = validators_by_kind if validators_by_kind is not None else VALIDATORS_BY_KIND
        self.github_provider_name = github_provider_name

    async def is_authorized(self, server_name: str, server_config: Optional[ExternalServerConfig] = None) -> bool:
        server_config = server_config or ExternalServerConfig(name=server_name)

        if self._has_config_token(server_config):
            return True
        if self._has_env_token(server_name):
            return True
        if await self.token_store.is_valid(server_name):
            return True
        return await self._run_custom_validator(server_name, server_config)

    async def get_authorization_details(
        self,
        server_name: str,
        server_config: Optional[ExternalServerConfig] = None,
    ) -> AuthorizationDetails:
        server_config = server_config or ExternalServerConfig(name=server_name)

        has_config_token = self._has_config_token(server_config)
        has_env_token = self._has_env_token(server_name)
        has_oauth_token = await self.token_store.is_valid(server_name)
        has_custom_credentials = await self._run_custom_validator(server_name, server_config)

        if has_config_token:
            method = AuthorizationMethod.CONFIG
        elif has_env_token:
            method = AuthorizationMethod.ENVIRONMENT
        elif has_oauth_token:
            method = AuthorizationMethod.OAUTH
        elif has_custom_credentials:
            method = AuthorizationMethod.CUSTOM
        else:
            method = AuthorizationMethod.NONE

        return AuthorizationDetails(
            server_name=server_name,
            is_authorized=method is not AuthorizationMethod.NONE,
            method=method,
            has_config_token=has_config_token,
            has_env_token=has_env_token,
            has_oauth_token=has_oauth_token,
            has_custom_credentials=has_custom_credentials,
            env_token_key=environment_token_key(server_name),
        )

    def environment_token(self, server_name: str) -> Optional[str]:
        return self.environ.get(environment_token_key(server_name)) or None

    @staticmethod
    def _has_config_token(server_config: ExternalServerConfig) -> bool:
        return bool(server_config.authorization_token)

    def _has_env_token(self, server_name: str) -> bool:
        return self.environment_token(server_name) is not None

    async def _run_custom_validator(self, server_name: str, server_config: ExternalServerConfig) -> bool:
        kind = get_validator_kind(server_name, self.server_validator_kinds)
        if kind is None:
            return False
        validator = self.validators_by_kind.get(kind)
        if validator is None:
            logger.error(f"DECISION: No validator registered for kind '{kind.value}' (server '{server_name}').")
            return False

        context = ValidatorContext(
            environ=self.environ,
            token_store=self.token_store,
            github_provider_name=self.github_provider_name,
        )
        try:
            return bool(await validator(server_config, context))
        except Exception as e:
            logger.error(f"DECISION: Validator '{kind.value}' failed for server '{server_name}': {e}", exc_info=True)
            return False
