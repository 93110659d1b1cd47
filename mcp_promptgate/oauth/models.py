# mcp_promptgate/oauth/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime, timedelta
import logging

from .pkce import generate_code_challenge, CODE_CHALLENGE_METHOD

logger = logging.getLogger(__name__)

TokenEndpointAuthMethod = Literal["none", "client_secret_post"]


class OAuthClientContext(BaseModel):
    """
    Resolved OAuth client for one external provider, obtained either from an
    explicit server configuration or from dynamic client registration.
    """
    issuer: Optional[str] = None
    authorization_endpoint: str
    token_endpoint: str
    client_id: str
    client_secret: Optional[str] = Field(
        default=None,
        repr=False,
        description="Only set for confidential clients."
    )
    token_endpoint_auth_method: TokenEndpointAuthMethod = "none"


class AuthorizationSession(BaseModel):
    """
    One in-flight PKCE authorization exchange. The session_id doubles as the
    OAuth `state` parameter.
    """
    session_id: str
    server_name: str
    client: OAuthClientContext
    code_verifier: str = Field(
        repr=False,
        exclude=True,
        description="PKCE verifier. Never sent to the browser or serialized."
    )
    redirect_uri: str
    scope: str
    created_at: datetime

    @property
    def code_challenge(self) -> str:
        return generate_code_challenge(self.code_verifier)

    @property
    def code_challenge_method(self) -> str:
        return CODE_CHALLENGE_METHOD

    def is_expired(self, now: datetime, ttl_seconds: int) -> bool:
        """A session is expired once it is older than the TTL."""
        return now - self.created_at > timedelta(seconds=ttl_seconds)


class TokenRecord(BaseModel):
    """
    A server's current OAuth grant: the token endpoint response as received,
    plus the absolute expiry computed at receipt time.

    Provider fields are kept untyped so the stored record matches the
    response exactly. Only ``expires_at`` belongs to us.
    """
    model_config = ConfigDict(extra="allow")

    access_token: Any
    token_type: Any = None
    scope: Any = None
    refresh_token: Any = None
    expires_in: Any = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_token_response(cls, token_response: Dict[str, Any], received_at: datetime) -> "TokenRecord":
        """Builds a record from the raw token response, keeping provider-specific fields."""
        data = dict(token_response)
        data["expires_at"] = compute_expires_at(data.get("expires_in"), received_at)
        return cls.model_validate(data)

    def is_expired(self, now: datetime) -> bool:
        """Expired when expires_at is reached. Records without expiry never expire."""
        if self.expires_at is None:
            return False
        return self.expires_at <= now


def compute_expires_at(expires_in: Any, received_at: datetime) -> Optional[datetime]:
    if expires_in is None or isinstance(expires_in, bool):
        return None
    try:
        return received_at + timedelta(seconds=float(expires_in))
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Could not convert expires_in value '{expires_in}' to seconds; record has no expiry.")
        return None


class AuthorizationServerMetadata(BaseModel):
    """OAuth 2.0 Authorization Server Metadata (RFC 8414) or OIDC discovery document."""
    model_config = ConfigDict(extra="allow")

    issuer: Optional[str] = None
    authorization_endpoint: str
    token_endpoint: str
    registration_endpoint: Optional[str] = None
    scopes_supported: Optional[List[str]] = None
    response_types_supported: Optional[List[str]] = None
    grant_types_supported: Optional[List[str]] = None
    token_endpoint_auth_methods_supported: Optional[List[str]] = None
    code_challenge_methods_supported: Optional[List[str]] = None


class ProtectedResourceMetadata(BaseModel):
    """OAuth 2.0 Protected Resource Metadata (RFC 9728)."""
    model_config = ConfigDict(extra="allow")

    resource: Optional[str] = None
    authorization_servers: List[str] = Field(default_factory=list)


class ClientRegistrationRequest(BaseModel):
    """RFC 7591 client metadata sent to the registration endpoint."""
    client_name: str
    redirect_uris: List[str]
    grant_types: List[str] = Field(default=["authorization_code"])
    response_types: List[str] = Field(default=["code"])
    token_endpoint_auth_method: TokenEndpointAuthMethod = "none"
    scope: Optional[str] = None


class ClientRegistrationResponse(BaseModel):
    """RFC 7591 registration response (client information plus metadata)."""
    model_config = ConfigDict(extra="allow")

    client_id: str
    client_secret: Optional[str] = None
    client_id_issued_at: Optional[int] = None
    client_secret_expires_at: Optional[int] = None
