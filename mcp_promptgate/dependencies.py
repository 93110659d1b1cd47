# mcp_promptgate/dependencies.py
import logging
import secrets
from fastapi import HTTPException, status, Header, Depends
from typing import Optional, Annotated

import httpx

from .settings import settings
from .authorization.decision import AuthorizationDecisionEngine
from .oauth.flow import AuthorizationFlowEngine
from .oauth.session_store import get_authorization_session_store
from .oauth.storage_interfaces import AbstractAuthorizationSessionStore, AbstractTokenStore
from .oauth.token_store import get_token_store
from .servers.registry import ServerRegistry, get_server_registry
from .servers.service import ExternalServerService

logger = logging.getLogger(__name__)

_access_token_warning_logged = False


async def require_access_token(
    authorization: Annotated[
        Optional[str],
        Header(description="Bearer token matching the server's ACCESS_TOKEN.")
    ] = None,
    x_access_token: Annotated[
        Optional[str],
        Header(description="Alternative to the Authorization header.")
    ] = None
) -> Optional[str]:
    """
    Validates the static access token protecting the API.

    When ACCESS_TOKEN is not configured the API is open and a warning is
    logged once.
    """
    global _access_token_warning_logged

    if not settings.access_token:
        if not _access_token_warning_logged:
            logger.warning("ACCESS_TOKEN is not configured on the server. API routes are not protected.")
            _access_token_warning_logged = True
        return None

    provided_token = x_access_token
    if authorization and authorization.lower().startswith("bearer "):
        provided_token = authorization[7:].strip()

    if not provided_token:
        logger.warning("API: Missing access token.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated: access token missing.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(provided_token, settings.access_token):
        logger.warning("API: Invalid access token provided.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid access token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return provided_token


# Shared outbound HTTP client, created lazily and closed by the application lifespan
_http_client_instance: Optional[httpx.AsyncClient] = None


async def get_http_client() -> httpx.AsyncClient:
    global _http_client_instance

    if _http_client_instance is None or _http_client_instance.is_closed:
        _http_client_instance = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        logger.info(f"Created shared HTTP client. Timeout: {settings.http_timeout_seconds}s.")
    return _http_client_instance


async def close_http_client() -> None:
    global _http_client_instance

    if _http_client_instance is not None:
        await _http_client_instance.aclose()
        _http_client_instance = None
        logger.info("Closed shared HTTP client.")


async def get_authorization_flow_engine(
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    session_store: Annotated[AbstractAuthorizationSessionStore, Depends(get_authorization_session_store)],
    token_store: Annotated[AbstractTokenStore, Depends(get_token_store)],
) -> AuthorizationFlowEngine:
    """Factory function to create AuthorizationFlowEngine with injected stores."""
    return AuthorizationFlowEngine(http_client, session_store, token_store)


async def get_authorization_decision_engine(
    token_store: Annotated[AbstractTokenStore, Depends(get_token_store)],
) -> AuthorizationDecisionEngine:
    """Factory function to create AuthorizationDecisionEngine reading the process environment."""
    return AuthorizationDecisionEngine(
        token_store,
        github_provider_name=settings.github_provider_server_name,
    )


async def get_external_server_service(
    registry: Annotated[ServerRegistry, Depends(get_server_registry)],
    token_store: Annotated[AbstractTokenStore, Depends(get_token_store)],
    decision_engine: Annotated[AuthorizationDecisionEngine, Depends(get_authorization_decision_engine)],
) -> ExternalServerService:
    """Factory function to create ExternalServerService with injected collaborators."""
    return ExternalServerService(registry, token_store, decision_engine)
