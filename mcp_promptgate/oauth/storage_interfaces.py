# mcp_promptgate/oauth/storage_interfaces.py
import logging
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any

from .models import AuthorizationSession, OAuthClientContext, TokenRecord

logger = logging.getLogger(__name__)


class AbstractAuthorizationSessionStore(ABC):
    """Abstract base class for in-flight PKCE authorization sessions."""

    @abstractmethod
    async def create(self, server_name: str, client: OAuthClientContext, redirect_uri: str, scope: str) -> AuthorizationSession:
        """Create a session with a fresh id and code verifier."""
        pass

    @abstractmethod
    async def consume(self, session_id: str) -> Optional[AuthorizationSession]:
        """Fetch and delete a live session. Expired or unknown ids return None."""
        pass

    @abstractmethod
    async def sweep_expired(self) -> int:
        """Remove every expired session and return how many were removed."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up storage resources."""
        pass


class AbstractTokenStore(ABC):
    """Abstract base class for OAuth grants obtained from external providers, one per server."""

    @abstractmethod
    async def get(self, server_name: str) -> Optional[TokenRecord]:
        """Retrieve the token record for a server."""
        pass

    @abstractmethod
    async def put(self, server_name: str, token_response: Dict[str, Any]) -> TokenRecord:
        """Store a token response, replacing any prior record for the server."""
        pass

    @abstractmethod
    async def is_valid(self, server_name: str) -> bool:
        """True if a record exists and has not reached its expiry."""
        pass

    @abstractmethod
    async def delete(self, server_name: str) -> None:
        """Remove the record for a server."""
        pass

    @abstractmethod
    async def list_server_names(self) -> List[str]:
        """Names of every server holding a record."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up storage resources."""
        pass
