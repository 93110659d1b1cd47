# mcp_promptgate/oauth/token_exchange.py
import json
import logging
from typing import Dict, Any
from urllib.parse import parse_qs

import httpx

from .errors import TokenExchangeError
from .models import AuthorizationSession

logger = logging.getLogger(__name__)


def _parse_token_body(response: httpx.Response) -> Dict[str, Any]:
    """Parses a token response body. JSON is expected; form-encoded bodies are tolerated."""
    content_type = response.headers.get("content-type", "").lower()
    raw_text = response.text

    if "application/x-www-form-urlencoded" in content_type:
        parsed: Dict[str, Any] = {}
        for key, values in parse_qs(raw_text).items():
            parsed[key] = values[0] if len(values) == 1 else values
        return parsed

    try:
        parsed_json = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise TokenExchangeError(
            response.status_code, raw_text,
            reason=f"Token endpoint returned a body that is not JSON: {e}"
        ) from e
    if not isinstance(parsed_json, dict):
        raise TokenExchangeError(
            response.status_code, raw_text,
            reason="Token endpoint returned JSON that is not an object."
        )
    return parsed_json


async def exchange_authorization_code(
    http_client: httpx.AsyncClient,
    session: AuthorizationSession,
    code: str,
) -> Dict[str, Any]:
    """
    Exchanges an authorization code at the token endpoint with a direct form
    POST (RFC 6749 - Section 4.1.3, RFC 7636 - Section 4.5).

    Pure OAuth2 responses without an `id_token` are accepted. The parsed body
    is returned unchanged.
    """
    client = session.client
    token_request_data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": session.redirect_uri,
        "client_id": client.client_id,
        "code_verifier": session.code_verifier,
    }
    if client.token_endpoint_auth_method == "client_secret_post" and client.client_secret:
        token_request_data["client_secret"] = client.client_secret

    logger.info(
        f"EXCHANGE: Exchanging code for server '{session.server_name}' at '{client.token_endpoint}'. "
        f"Client auth: {client.token_endpoint_auth_method}."
    )
    try:
        response = await http_client.post(
            client.token_endpoint,
            data=token_request_data,
            headers={"Accept": "application/json"}
        )
    except httpx.HTTPError as e:
        logger.error(f"EXCHANGE: Request to token endpoint '{client.token_endpoint}' failed: {e!r}")
        raise TokenExchangeError(
            0, "", server_name=session.server_name,
            reason=f"Token exchange request failed: {e!r}"
        ) from e

    if not response.is_success:
        logger.error(f"EXCHANGE: Token endpoint returned {response.status_code}: {response.text!r}")
        raise TokenExchangeError(
            response.status_code,
            response.text,
            server_name=session.server_name,
            reason=f"Token exchange failed: {response.status_code} {response.reason_phrase} - {response.text}"
        )

    token_response = _parse_token_body(response)
    if not token_response.get("access_token"):
        raise TokenExchangeError(
            response.status_code, response.text,
            server_name=session.server_name,
            reason="Token endpoint response did not include an access_token."
        )
    return token_response
