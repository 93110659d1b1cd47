# mcp_promptgate/oauth/flow.py
import logging
from typing import Optional, List, Mapping
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

import httpx

from ..settings import settings as promptgate_global_settings
from ..servers.models import ExternalServerConfig, OAuthProviderConfiguration
from .discovery import DiscoveryResolver
from .errors import (
    AlreadyAuthorizedError,
    DiscoveryError,
    InvalidSessionError,
    MissingParameterError,
    ProviderDeniedError,
)
from .models import OAuthClientContext, AuthorizationSession, TokenRecord
from .registration import register_client
from .storage_interfaces import AbstractAuthorizationSessionStore, AbstractTokenStore
from .token_exchange import exchange_authorization_code

logger = logging.getLogger(__name__)


def build_authorization_url(session: AuthorizationSession) -> str:
    """
    Authorization request URL (RFC 6749 - Section 4.1.1) with PKCE parameters.
    Query parameters already present on the endpoint are kept.
    """
    parts = urlsplit(session.client.authorization_endpoint)
    query_params = parse_qsl(parts.query, keep_blank_values=True)
    query_params.extend([
        ("response_type", "code"),
        ("client_id", session.client.client_id),
        ("redirect_uri", session.redirect_uri),
        ("scope", session.scope),
        ("state", session.session_id),
        ("code_challenge", session.code_challenge),
        ("code_challenge_method", session.code_challenge_method),
    ])
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query_params), parts.fragment))


def client_from_provider_configuration(provider_config: OAuthProviderConfiguration) -> OAuthClientContext:
    """Confidential clients authenticate with client_secret_post; public clients carry no secret."""
    if provider_config.client_type == "confidential":
        return OAuthClientContext(
            issuer=provider_config.issuer,
            authorization_endpoint=provider_config.authorization_endpoint,
            token_endpoint=provider_config.token_endpoint,
            client_id=provider_config.client_id,
            client_secret=provider_config.client_secret,
            token_endpoint_auth_method="client_secret_post",
        )
    return OAuthClientContext(
        issuer=provider_config.issuer,
        authorization_endpoint=provider_config.authorization_endpoint,
        token_endpoint=provider_config.token_endpoint,
        client_id=provider_config.client_id,
        token_endpoint_auth_method="none",
    )


class AuthorizationFlowEngine:
    """
    Runs the OAuth authorization code flow with PKCE for external tool servers.

    An attempt starts in `initiate_authorization`, which leaves a session
    awaiting the provider's redirect. `handle_oauth_callback` either completes
    it (token stored) or fails it (nothing stored, session gone).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        session_store: AbstractAuthorizationSessionStore,
        token_store: AbstractTokenStore,
        discovery_resolver: Optional[DiscoveryResolver] = None,
        redirect_uri: Optional[str] = None,
        client_name: Optional[str] = None,
        default_scope: Optional[str] = None,
    ):
        self.http_client = http_client
        self.session_store = session_store
        self.token_store = token_store
        self.discovery_resolver = discovery_resolver or DiscoveryResolver(http_client)
        self.redirect_uri = redirect_uri or promptgate_global_settings.oauth_redirect_uri
        self.client_name = client_name or promptgate_global_settings.oauth_client_name
        self.default_scope = default_scope or promptgate_global_settings.oauth_default_scope

    async def initiate_authorization(self, server_config: ExternalServerConfig) -> str:
        """Starts a flow for the server and returns the URL to send the user's browser to."""
        server_name = server_config.name
        if server_config.authorization_token:
            logger.warning(f"FLOW: Refusing to start authorization for '{server_name}': static token configured.")
            raise AlreadyAuthorizedError(server_name)

        provider_config = server_config.oauth_provider_configuration
        if provider_config is not None:
            logger.info(f"FLOW: Using explicit OAuth configuration for server '{server_name}'.")
            client = client_from_provider_configuration(provider_config)
            scope = self._explicit_scope(server_config, provider_config)
        else:
            logger.info(f"FLOW: No OAuth configuration for server '{server_name}'. Using discovery.")
            client = await self._discover_client(server_config)
            scope = self._join_scopes(server_config.scopes)

        session = await self.session_store.create(server_name, client, self.redirect_uri, scope)
        logger.info(
            f"FLOW: Authorization started for server '{server_name}'. "
            f"Endpoint: '{client.authorization_endpoint}', scope: '{scope}'."
        )
        return build_authorization_url(session)

    async def handle_oauth_callback(self, query: Mapping[str, Optional[str]]) -> TokenRecord:
        """
        Completes a flow from the provider's redirect query parameters and
        stores the resulting token for the session's server.
        """
        provider_error = query.get("error")
        if provider_error:
            logger.warning(
                f"FLOW: Provider returned error '{provider_error}': {query.get('error_description') or ''}"
            )
            raise ProviderDeniedError(provider_error, query.get("error_description"))

        code = query.get("code")
        state = query.get("state")
        if not code:
            raise MissingParameterError("code")
        if not state:
            raise MissingParameterError("state")

        session = await self.session_store.consume(state)
        if session is None:
            logger.warning("SECURITY: OAuth callback with unknown, expired or replayed state parameter.")
            raise InvalidSessionError()

        token_response = await exchange_authorization_code(self.http_client, session, code)
        record = await self.token_store.put(session.server_name, token_response)
        logger.info(f"FLOW: Authorization completed for server '{session.server_name}'.")
        return record

    async def get_tokens(self, server_name: str) -> Optional[TokenRecord]:
        return await self.token_store.get(server_name)

    async def _discover_client(self, server_config: ExternalServerConfig) -> OAuthClientContext:
        if not server_config.url:
            raise DiscoveryError(
                f"Server '{server_config.name}' has no OAuth configuration and no URL to discover it from.",
                server_name=server_config.name
            )
        metadata_url = await self.discovery_resolver.resolve_metadata_url(server_config.url)
        metadata = await self.discovery_resolver.fetch_authorization_server_metadata(metadata_url)
        return await register_client(
            self.http_client,
            metadata,
            client_name=self.client_name,
            redirect_uri=self.redirect_uri,
            server_name=server_config.name,
        )

    def _explicit_scope(self, server_config: ExternalServerConfig, provider_config: OAuthProviderConfiguration) -> str:
        for candidate in (provider_config.default_scopes, provider_config.scopes_supported, server_config.scopes):
            if candidate:
                return " ".join(candidate)
        return self.default_scope

    def _join_scopes(self, scopes: Optional[List[str]]) -> str:
        return " ".join(scopes) if scopes else self.default_scope
