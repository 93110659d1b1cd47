# mcp_promptgate/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging
from typing import Optional, Dict
from dotenv import load_dotenv
load_dotenv()

from .settings import settings
from .dependencies import get_http_client, close_http_client
from .oauth.endpoints import oauth_router
from .oauth.session_store import SessionSweeper, get_authorization_session_store
from .oauth.token_store import get_token_store
from .servers.endpoints import servers_router
from .servers.registry import get_server_registry
from .authorization.endpoints import connections_router

# Configure logging based on debug mode setting
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level="DEBUG" if settings.debug_mode else settings.log_level.upper(),
        format='%(asctime)s - %(name)s [%(levelname)s] - %(message)s'
    )

logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG if settings.debug_mode else settings.log_level.upper())

# Background sweeper, started during application startup
session_sweeper_instance: Optional[SessionSweeper] = None


@asynccontextmanager
async def promptgate_app_lifespan(app_instance: FastAPI):
    """
    Application lifespan manager: loads the server registry, initializes the
    session and token stores, the shared HTTP client and the session sweeper,
    and tears them down in reverse order on shutdown.
    """
    global session_sweeper_instance

    logger.info("Application startup initiated.")
    initialized_stores = []

    # Invalid server definitions should stop startup rather than surface per request
    registry = await get_server_registry()
    logger.info(f"Server registry ready with {len(registry)} server(s).")

    session_store = await get_authorization_session_store()
    token_store = await get_token_store()
    initialized_stores.extend([session_store, token_store])
    logger.info("Authorization session and token stores initialized.")

    await get_http_client()

    session_sweeper_instance = SessionSweeper(session_store)
    session_sweeper_instance.start()

    yield

    # Cleanup phase - ensure all resources are properly released
    logger.info("Application shutdown initiated.")
    try:
        await session_sweeper_instance.stop()
    except Exception as e_sw:
        logger.error(f"Sweeper shutdown error: {e_sw}", exc_info=True)
    session_sweeper_instance = None

    try:
        await close_http_client()
    except Exception as e_http:
        logger.error(f"HTTP client shutdown error: {e_http}", exc_info=True)

    for store_instance in reversed(initialized_stores):
        try:
            await store_instance.teardown()
        except Exception as e_td:
            logger.error(f"Teardown error: {e_td}", exc_info=True)
    logger.info("All components torn down.")


# FastAPI application setup with lifespan management
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug_mode,
    version="0.1.0",
    lifespan=promptgate_app_lifespan
)


@app.get("/")
async def root_api():
    return {"message": f"Welcome to {settings.app_name}!"}


@app.get("/health")
async def health_api():
    """Health check reporting the state of in-process components."""
    component_statuses: Dict[str, str] = {
        "session_sweeper": "running" if session_sweeper_instance and session_sweeper_instance.running else "stopped",
        "access_token_protection": "enabled" if settings.access_token else "disabled",
    }
    return {
        "status": "healthy",
        "details": component_statuses
    }


# Mount all routers
app.include_router(oauth_router)
app.include_router(servers_router)
app.include_router(connections_router)

logger.info(f"{settings.app_name} initialized. Routers mounted.")
