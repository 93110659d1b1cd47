# mcp_promptgate/oauth/registration.py
import logging

import httpx
from pydantic import ValidationError

from .errors import ClientRegistrationError
from .models import (
    AuthorizationServerMetadata,
    ClientRegistrationRequest,
    ClientRegistrationResponse,
    OAuthClientContext,
)

logger = logging.getLogger(__name__)


async def register_client(
    http_client: httpx.AsyncClient,
    metadata: AuthorizationServerMetadata,
    client_name: str,
    redirect_uri: str,
    server_name: str,
) -> OAuthClientContext:
    """
    Registers a public PKCE client with the discovered authorization server
    (RFC 7591) and returns the resulting client context. No secret is
    requested; the token endpoint is used without client authentication.
    """
    if not metadata.registration_endpoint:
        raise ClientRegistrationError(
            f"Authorization server '{metadata.issuer or metadata.authorization_endpoint}' "
            "does not advertise a registration_endpoint.",
            server_name=server_name
        )

    registration_request = ClientRegistrationRequest(
        client_name=client_name,
        redirect_uris=[redirect_uri],
        token_endpoint_auth_method="none",
    )
    logger.info(f"REGISTRATION: Registering client for server '{server_name}' at '{metadata.registration_endpoint}'.")

    try:
        response = await http_client.post(
            metadata.registration_endpoint,
            json=registration_request.model_dump(exclude_none=True),
            headers={"Accept": "application/json"}
        )
    except httpx.HTTPError as e:
        logger.error(f"REGISTRATION: Request to '{metadata.registration_endpoint}' failed: {e!r}")
        raise ClientRegistrationError(
            f"Client registration request failed: {e!r}",
            server_name=server_name
        ) from e

    if not response.is_success:
        logger.error(f"REGISTRATION: Registration rejected with {response.status_code}: {response.text!r}")
        raise ClientRegistrationError(
            f"Client registration failed: {response.status_code} - {response.text}",
            server_name=server_name
        )

    try:
        client_information = ClientRegistrationResponse.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise ClientRegistrationError(
            f"Client registration response is not valid client information: {e}",
            server_name=server_name
        ) from e

    logger.info(f"REGISTRATION: Registered client for server '{server_name}'.")
    return OAuthClientContext(
        issuer=metadata.issuer,
        authorization_endpoint=metadata.authorization_endpoint,
        token_endpoint=metadata.token_endpoint,
        client_id=client_information.client_id,
        token_endpoint_auth_method="none",
    )
