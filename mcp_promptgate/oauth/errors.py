# mcp_promptgate/oauth/errors.py
from typing import Optional, Dict, Any


class AuthorizationFlowError(Exception):
    """
    Base class for failures of the external OAuth authorization flow.

    Carries an OAuth-style error code, a human readable description and the
    HTTP status the web layer should answer with.
    """

    status_code: int = 500
    error: str = "authorization_error"

    def __init__(self, error_description: str, server_name: Optional[str] = None):
        self.error_description = error_description
        self.server_name = server_name
        super().__init__(error_description)

    @property
    def detail(self) -> Dict[str, Any]:
        """Structured detail for JSON responses."""
        detail: Dict[str, Any] = {
            "error": self.error,
            "error_description": self.error_description,
        }
        if self.server_name:
            detail["server_name"] = self.server_name
        return detail


class DiscoveryError(AuthorizationFlowError):
    """
    None of the discovery steps (WWW-Authenticate resource hint, OAuth
    authorization server metadata, OpenID configuration) produced a usable
    metadata document for the resource.
    """

    status_code = 502
    error = "discovery_failed"

    def __init__(self, error_description: str, resource_url: Optional[str] = None, server_name: Optional[str] = None):
        self.resource_url = resource_url
        super().__init__(error_description, server_name=server_name)


class ClientRegistrationError(AuthorizationFlowError):
    """Dynamic client registration (RFC 7591) was unavailable or rejected."""

    status_code = 502
    error = "client_registration_failed"


class AlreadyAuthorizedError(AuthorizationFlowError):
    """The server already has a static authorization token configured."""

    status_code = 409
    error = "already_authorized"

    def __init__(self, server_name: str):
        super().__init__(
            f"Server '{server_name}' already has an authorization token configured.",
            server_name=server_name
        )


class ProviderDeniedError(AuthorizationFlowError):
    """
    The provider redirected back with an `error` parameter
    (e.g. the user declined consent). (RFC 6749 - Section 4.1.2.1)
    """

    status_code = 400

    def __init__(self, provider_error: str, provider_error_description: Optional[str] = None):
        self.provider_error = provider_error
        self.provider_error_description = provider_error_description
        self.error = provider_error
        super().__init__(f"OAuth error: {provider_error_description or provider_error}")


class MissingParameterError(AuthorizationFlowError):
    """The callback lacked the authorization `code` or the `state` parameter."""

    status_code = 400
    error = "invalid_request"

    def __init__(self, missing: str):
        self.missing = missing
        super().__init__(f"Missing authorization {missing} parameter.")


class InvalidSessionError(AuthorizationFlowError):
    """
    The `state` did not match any live authorization session. The session
    expired, was already used, or the callback was forged.
    """

    status_code = 400
    error = "invalid_state"

    def __init__(self):
        super().__init__("Invalid or expired authorization session.")


class TokenExchangeError(AuthorizationFlowError):
    """The token endpoint did not return a usable token response."""

    status_code = 502
    error = "token_exchange_failed"

    def __init__(
        self,
        upstream_status: int,
        upstream_body: str,
        server_name: Optional[str] = None,
        reason: Optional[str] = None
    ):
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body
        message = reason or f"Token exchange failed: {upstream_status} - {upstream_body}"
        super().__init__(message, server_name=server_name)

    @property
    def detail(self) -> Dict[str, Any]:
        detail = super().detail
        detail["upstream_status"] = self.upstream_status
        detail["upstream_body"] = self.upstream_body
        return detail
