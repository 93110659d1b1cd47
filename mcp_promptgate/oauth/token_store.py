# mcp_promptgate/oauth/token_store.py
import logging
from typing import Optional, List, Dict, Any

from .clock import Clock, utc_now
from .models import TokenRecord
from .storage_interfaces import AbstractTokenStore

logger = logging.getLogger(__name__)


class InMemoryTokenStore(AbstractTokenStore):
    """
    Process-local token store keyed by server name.

    Records are always replaced as a whole, so readers never see a mix of old
    and new fields. No refresh is attempted: an expired record is invalid
    even when it carries a refresh_token.
    """

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._records: Dict[str, TokenRecord] = {}

    async def initialize(self) -> None:
        pass

    async def teardown(self) -> None:
        self._records.clear()
        logger.info("InMemoryTokenStore: Cleared.")

    async def get(self, server_name: str) -> Optional[TokenRecord]:
        return self._records.get(server_name)

    async def put(self, server_name: str, token_response: Dict[str, Any]) -> TokenRecord:
        record = TokenRecord.from_token_response(token_response, received_at=self._clock())
        self._records[server_name] = record
        logger.info(
            f"TokenStore: Stored token for server '{server_name}'. "
            f"Expires at: {record.expires_at.isoformat() if record.expires_at else 'never'}, "
            f"refresh_token: {'present' if record.refresh_token else 'absent'}."
        )
        return record

    async def is_valid(self, server_name: str) -> bool:
        record = self._records.get(server_name)
        if record is None:
            return False
        return not record.is_expired(self._clock())

    async def delete(self, server_name: str) -> None:
        if self._records.pop(server_name, None) is not None:
            logger.info(f"TokenStore: Deleted token for server '{server_name}'.")

    async def list_server_names(self) -> List[str]:
        return list(self._records.keys())


# Global store instance for singleton pattern
_token_store_instance: Optional[AbstractTokenStore] = None


async def get_token_store() -> AbstractTokenStore:
    """
    Factory function to get the token store instance.

    Returns a process-wide singleton.
    """
    global _token_store_instance

    if _token_store_instance is None:
        logger.info("Using InMemoryTokenStore for external OAuth tokens.")
        _token_store_instance = InMemoryTokenStore()
        await _token_store_instance.initialize()

    return _token_store_instance
