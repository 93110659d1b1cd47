# mcp_promptgate/servers/endpoints.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, Field
from typing import Annotated, List, Optional

from ..authorization.decision import AuthorizationDetails
from ..dependencies import get_external_server_service, require_access_token
from .errors import ServerConfigurationError
from .service import ExternalServerService

logger = logging.getLogger(__name__)

servers_router = APIRouter(
    prefix="/api/mcp",
    tags=["External Servers"],
    dependencies=[Depends(require_access_token)]
)


class ServerSummary(BaseModel):
    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    authorization: AuthorizationDetails


class AuthorizationCheckRequest(BaseModel):
    servers: List[str] = Field(default_factory=list)


class AuthorizationCheckResponse(BaseModel):
    authorized: bool
    unauthorizedServers: List[str]


@servers_router.get("/servers", response_model=List[ServerSummary], summary="List configured external servers")
async def list_servers(
    service: Annotated[ExternalServerService, Depends(get_external_server_service)]
):
    details_by_name = {details.server_name: details for details in await service.list_authorization_details()}
    return [
        ServerSummary(
            name=server.name,
            type=server.type,
            description=server.description,
            authorization=details_by_name[server.name],
        )
        for server in service.registry.all()
    ]


@servers_router.get(
    "/{server_name}/authorization",
    response_model=AuthorizationDetails,
    summary="Authorization details for one external server"
)
async def get_server_authorization(
    server_name: Annotated[str, Path(description="Name of the configured external server.")],
    service: Annotated[ExternalServerService, Depends(get_external_server_service)]
):
    try:
        return await service.get_authorization_details(server_name)
    except ServerConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@servers_router.post(
    "/authorization-check",
    response_model=AuthorizationCheckResponse,
    summary="Check that every server needed for an execution is authorized"
)
async def check_authorization(
    check_request: AuthorizationCheckRequest,
    service: Annotated[ExternalServerService, Depends(get_external_server_service)]
):
    unauthorized = await service.find_unauthorized(check_request.servers)
    return AuthorizationCheckResponse(authorized=not unauthorized, unauthorizedServers=unauthorized)
