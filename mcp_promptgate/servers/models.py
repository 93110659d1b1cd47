# mcp_promptgate/servers/models.py
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any, Literal, Union

SERVER_TYPE_URL = "url"
SERVER_TYPE_STDIO = "stdio"
SERVER_TYPE_GITHUB_REPO = "github-repo"


class OAuthProviderConfiguration(BaseModel):
    """Explicit OAuth provider settings for a server that does not rely on discovery."""
    model_config = ConfigDict(extra="allow")

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: Optional[str] = None
    jwks_uri: Optional[str] = None
    client_id: str
    client_secret: Optional[str] = Field(default=None, repr=False)
    client_type: Literal["public", "confidential"]
    scopes_supported: Optional[List[str]] = None
    default_scopes: Optional[List[str]] = None

    @model_validator(mode="after")
    def _confidential_requires_secret(self) -> "OAuthProviderConfiguration":
        if self.client_type == "confidential" and not self.client_secret:
            raise ValueError("client_secret is required for confidential clients")
        return self


class RepositoryConfig(BaseModel):
    """Repository a github-repo server operates on."""
    model_config = ConfigDict(extra="allow")

    url: str
    branch: Optional[str] = None


class ServerAuthorizationConfig(BaseModel):
    """Which OAuth provider backs a server that has no OAuth flow of its own."""
    model_config = ConfigDict(extra="allow")

    provider: Optional[str] = None


class ExternalServerConfig(BaseModel):
    """
    Definition of one external tool (MCP) server. Unknown fields are kept so
    custom credential validators can read them.
    """
    model_config = ConfigDict(extra="allow")

    name: str
    type: Optional[str] = None
    url: Optional[str] = None
    command: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    description: Optional[str] = None
    scopes: Optional[List[str]] = None
    authorization_token: Optional[str] = Field(default=None, repr=False)
    oauth_provider_configuration: Optional[OAuthProviderConfiguration] = None
    repository: Optional[RepositoryConfig] = None
    authorization: Optional[ServerAuthorizationConfig] = None
    tool_configuration: Optional[Dict[str, Any]] = None

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scope_string(cls, value: Union[str, List[str], None]) -> Optional[List[str]]:
        if isinstance(value, str):
            return [scope for scope in value.replace(",", " ").split() if scope]
        return value

    @model_validator(mode="after")
    def _check_transport_fields(self) -> "ExternalServerConfig":
        if self.type == SERVER_TYPE_URL and not self.url:
            raise ValueError("url is required for servers of type 'url'")
        if self.type == SERVER_TYPE_STDIO and not self.command:
            raise ValueError("command is required for servers of type 'stdio'")
        if self.type == SERVER_TYPE_GITHUB_REPO and self.repository is None:
            raise ValueError("repository.url is required for servers of type 'github-repo'")
        return self
