# mcp_promptgate/authorization/endpoints.py
import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Annotated, List

from ..dependencies import get_external_server_service, require_access_token
from ..servers.service import ExternalServerService
from .connections import ConnectionStatus, get_all_connection_statuses
from .decision import AuthorizationMethod

logger = logging.getLogger(__name__)

connections_router = APIRouter(
    prefix="/api/connections",
    tags=["Connections"],
    dependencies=[Depends(require_access_token)]
)


class ServerConnectionBadge(BaseModel):
    name: str
    authorized: bool
    method: AuthorizationMethod


class ConnectionsOverview(BaseModel):
    servers: List[ServerConnectionBadge]
    connections: List[ConnectionStatus]


@connections_router.get("", response_model=ConnectionsOverview, summary="Authorization badges and credential connections")
async def list_connections(
    service: Annotated[ExternalServerService, Depends(get_external_server_service)]
):
    badges = [
        ServerConnectionBadge(name=details.server_name, authorized=details.is_authorized, method=details.method)
        for details in await service.list_authorization_details()
    ]
    connections = get_all_connection_statuses()
    logger.debug(f"API: {len(badges)} server badge(s), {sum(c.available for c in connections)} connection(s) available.")
    return ConnectionsOverview(servers=badges, connections=connections)
