# mcp_promptgate/oauth/__init__.py
# OAuth 2.1 client flows for external tool servers
# The FastAPI router lives in `oauth.endpoints` and is mounted by `main`.

# Core OAuth models and data structures
from .models import (
    OAuthClientContext,
    AuthorizationSession,
    TokenRecord,
    AuthorizationServerMetadata,
    ProtectedResourceMetadata,
    ClientRegistrationRequest,
    ClientRegistrationResponse,
)

# Authorization flow error types
from .errors import (
    AuthorizationFlowError,
    DiscoveryError,
    ClientRegistrationError,
    AlreadyAuthorizedError,
    ProviderDeniedError,
    MissingParameterError,
    InvalidSessionError,
    TokenExchangeError,
)

# PKCE (Proof Key for Code Exchange) utilities
from .pkce import generate_code_verifier, generate_code_challenge, is_valid_code_verifier

# Time source
from .clock import Clock, utc_now

# Abstract storage interfaces for dependency injection
from .storage_interfaces import AbstractAuthorizationSessionStore, AbstractTokenStore

# In-memory storage implementations
from .session_store import (
    InMemoryAuthorizationSessionStore,
    SessionSweeper,
    get_authorization_session_store,
)
from .token_store import InMemoryTokenStore, get_token_store

# Discovery, registration and token exchange
from .discovery import DiscoveryResolver, parse_www_authenticate_resource
from .registration import register_client
from .token_exchange import exchange_authorization_code

# Flow engine
from .flow import AuthorizationFlowEngine, build_authorization_url

__all__ = [
    "OAuthClientContext",
    "AuthorizationSession",
    "TokenRecord",
    "AuthorizationServerMetadata",
    "ProtectedResourceMetadata",
    "ClientRegistrationRequest",
    "ClientRegistrationResponse",
    "AuthorizationFlowError",
    "DiscoveryError",
    "ClientRegistrationError",
    "AlreadyAuthorizedError",
    "ProviderDeniedError",
    "MissingParameterError",
    "InvalidSessionError",
    "TokenExchangeError",
    "generate_code_verifier",
    "generate_code_challenge",
    "is_valid_code_verifier",
    "Clock",
    "utc_now",
    "AbstractAuthorizationSessionStore",
    "AbstractTokenStore",
    "InMemoryAuthorizationSessionStore",
    "SessionSweeper",
    "get_authorization_session_store",
    "InMemoryTokenStore",
    "get_token_store",
    "DiscoveryResolver",
    "parse_www_authenticate_resource",
    "register_client",
    "exchange_authorization_code",
    "AuthorizationFlowEngine",
    "build_authorization_url",
]
