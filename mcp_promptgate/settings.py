# mcp_promptgate/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
import logging
from pathlib import Path

# Configure logging for settings module
logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s SETTINGS.PY - [%(levelname)s] - %(message)s'
    )

# This settings.py file is at <project>/mcp_promptgate/settings.py
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    logger.info(f"SETTINGS.PY: .env file FOUND at explicit path: {DOTENV_PATH}")
else:
    logger.debug(
        f"SETTINGS.PY: .env file NOT FOUND at explicit path: {DOTENV_PATH}. "
        "Will rely on OS env vars or defaults."
    )


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_name: str = "MCP PromptGate"
    debug_mode: bool = False
    log_level: str = "INFO"

    # OAuth client behaviour for external tool servers
    oauth_redirect_uri: str = Field(
        default="http://localhost:3000/api/oauth/callback",
        description="Redirect URI registered with every external OAuth provider."
    )
    oauth_client_name: str = "MCP PromptGate Client"
    oauth_default_scope: str = Field(
        default="read",
        description="Scope requested when neither the server nor its provider declares one."
    )
    authorization_session_ttl_seconds: int = 600
    session_sweep_interval_seconds: int = 60
    http_timeout_seconds: float = 30.0

    # External tool server definitions: a JSON array or a path to a JSON file
    mcp_servers: Optional[str] = None

    # Name of the server whose OAuth grant backs GitHub repository servers
    github_provider_server_name: str = "github"

    # Security settings
    access_token: Optional[str] = Field(
        default=None,
        description="Static token protecting the API. When unset the API is open."
    )

    model_config = SettingsConfigDict(
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        extra="ignore",
        env_file_encoding='utf-8'
    )


# Initialize settings instance
settings = Settings()

# Log configuration values for debugging (sensitive values are masked)
logger.info(
    f"SETTINGS.PY: debug_mode={settings.debug_mode}, "
    f"oauth_redirect_uri='{settings.oauth_redirect_uri}', "
    f"session_ttl={settings.authorization_session_ttl_seconds}s"
)
logger.info(
    f"SETTINGS.PY: access_token: {'********' if settings.access_token else 'None'}, "
    f"mcp_servers: {'SET' if settings.mcp_servers else 'NOT_SET'}"
)
