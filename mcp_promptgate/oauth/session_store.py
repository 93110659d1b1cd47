# mcp_promptgate/oauth/session_store.py
import asyncio
import logging
import secrets
from typing import Optional, Dict

from ..settings import settings as promptgate_global_settings
from .clock import Clock, utc_now
from .models import AuthorizationSession, OAuthClientContext
from .pkce import generate_code_verifier
from .storage_interfaces import AbstractAuthorizationSessionStore

logger = logging.getLogger(__name__)


class InMemoryAuthorizationSessionStore(AbstractAuthorizationSessionStore):
    """
    Process-local store of PKCE authorization sessions.

    Every mutation of the session map completes without awaiting, so a
    coroutine never sees a partially written or partially removed session.
    Sessions are lost on restart.
    """

    def __init__(self, ttl_seconds: Optional[int] = None, clock: Clock = utc_now):
        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None
            else promptgate_global_settings.authorization_session_ttl_seconds
        )
        self._clock = clock
        self._sessions: Dict[str, AuthorizationSession] = {}
        logger.info(f"InMemoryAuthorizationSessionStore initialized. TTL: {self.ttl_seconds}s.")

    async def initialize(self) -> None:
        pass

    async def teardown(self) -> None:
        self._sessions.clear()
        logger.info("InMemoryAuthorizationSessionStore: Cleared.")

    async def create(
        self,
        server_name: str,
        client: OAuthClientContext,
        redirect_uri: str,
        scope: str
    ) -> AuthorizationSession:
        session = AuthorizationSession(
            session_id=secrets.token_urlsafe(32),
            server_name=server_name,
            client=client,
            code_verifier=generate_code_verifier(),
            redirect_uri=redirect_uri,
            scope=scope,
            created_at=self._clock(),
        )
        self._sessions[session.session_id] = session
        logger.debug(f"SessionStore: Created session for server '{server_name}'. Live sessions: {len(self._sessions)}.")
        return session

    async def consume(self, session_id: str) -> Optional[AuthorizationSession]:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        if session.is_expired(self._clock(), self.ttl_seconds):
            logger.info(f"SessionStore: Session for server '{session.server_name}' expired before its callback.")
            return None
        return session

    async def sweep_expired(self) -> int:
        now = self._clock()
        expired_ids = [
            session_id for session_id, session in self._sessions.items()
            if session.is_expired(now, self.ttl_seconds)
        ]
        for session_id in expired_ids:
            del self._sessions[session_id]
        if expired_ids:
            logger.info(f"SessionStore: Swept {len(expired_ids)} expired authorization session(s).")
        return len(expired_ids)

    def __len__(self) -> int:
        return len(self._sessions)


class SessionSweeper:
    """Background task that periodically removes expired authorization sessions."""

    def __init__(self, store: AbstractAuthorizationSessionStore, interval_seconds: Optional[float] = None):
        self.store = store
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None
            else promptgate_global_settings.session_sweep_interval_seconds
        )
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="authorization-session-sweeper")
        logger.info(f"SessionSweeper: Started with interval {self.interval_seconds}s.")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("SessionSweeper: Stopped.")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.store.sweep_expired()
            except Exception as e:
                logger.error(f"SessionSweeper: Sweep failed: {e}", exc_info=True)


# Global store instance for singleton pattern
_session_store_instance: Optional[AbstractAuthorizationSessionStore] = None


async def get_authorization_session_store() -> AbstractAuthorizationSessionStore:
    """
    Factory function to get the authorization session store instance.

    Returns a process-wide singleton.
    """
    global _session_store_instance

    if _session_store_instance is None:
        logger.info("Using InMemoryAuthorizationSessionStore for PKCE authorization sessions.")
        _session_store_instance = InMemoryAuthorizationSessionStore()
        await _session_store_instance.initialize()

    return _session_store_instance
