# mcp_promptgate/oauth/endpoints.py
import html
import logging
from fastapi import APIRouter, Depends, HTTPException, Path, Request, status
from fastapi.responses import HTMLResponse
from typing import Annotated, Dict

from ..dependencies import get_authorization_flow_engine, require_access_token
from ..servers.registry import ServerRegistry, get_server_registry
from .errors import AuthorizationFlowError
from .flow import AuthorizationFlowEngine

logger = logging.getLogger(__name__)

oauth_router = APIRouter(tags=["OAuth - External Servers"])


def _callback_page(title: str, message: str) -> str:
    return (
        f"<html><head><title>{html.escape(title)}</title></head>"
        f"<body><h1>{html.escape(title)}</h1><p>{html.escape(message)}</p></body></html>"
    )


@oauth_router.post(
    "/api/mcp/{server_name}/authorize",
    summary="Start the OAuth authorization flow for an external server",
    dependencies=[Depends(require_access_token)]
)
async def authorize_server(
    server_name: Annotated[str, Path(description="Name of the configured external server.")],
    registry: Annotated[ServerRegistry, Depends(get_server_registry)],
    flow_engine: Annotated[AuthorizationFlowEngine, Depends(get_authorization_flow_engine)]
) -> Dict[str, str]:
    """
    Returns the provider authorization URL the user's browser should open.
    404 for unknown servers, 409 when a static token is configured, 502 when
    discovery or client registration fails.
    """
    logger.info(f"API: Authorization requested for server '{server_name}'.")
    server_config = registry.get(server_name)
    if server_config is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Server '{server_name}' is not configured."
        )

    try:
        auth_url = await flow_engine.initiate_authorization(server_config)
    except AuthorizationFlowError as e:
        logger.warning(f"API: Authorization for server '{server_name}' could not start: {e.error_description}")
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"API: Unexpected error starting authorization for '{server_name}': {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not start the authorization flow."
        )
    return {"authUrl": auth_url}


@oauth_router.get("/api/oauth/callback", name="oauth_callback", response_class=HTMLResponse)
async def oauth_callback(
    request: Request,
    flow_engine: Annotated[AuthorizationFlowEngine, Depends(get_authorization_flow_engine)]
):
    """
    Redirect target for every external OAuth provider. Exchanges the code and
    stores the token, then renders a page the user can close.
    """
    query = dict(request.query_params)
    logger.info(
        f"API: OAuth callback received. Code: {'SET' if query.get('code') else 'NOT_SET'}, "
        f"State: {'SET' if query.get('state') else 'NOT_SET'}, Error: {query.get('error') or 'None'}"
    )

    try:
        await flow_engine.handle_oauth_callback(query)
    except AuthorizationFlowError as e:
        logger.error(f"API: OAuth callback failed ({e.error}): {e.error_description}")
        return HTMLResponse(
            _callback_page("Authorization Failed", e.error_description),
            status_code=e.status_code
        )
    except Exception as e:
        logger.error(f"API: Unexpected error in oauth_callback: {e}", exc_info=True)
        return HTMLResponse(
            _callback_page("Authorization Failed", "An unexpected error occurred."),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return HTMLResponse(
        _callback_page(
            "Authorization Successful",
            "The server is now authorized. You can close this window and return to your application."
        )
    )
