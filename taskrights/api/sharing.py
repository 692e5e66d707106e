from fastapi import APIRouter, Depends, Body

from taskrights.core.actor import Actor
from taskrights.core.dependencies import get_current_actor, get_sharing_service
from taskrights.core.dtos.common import ErrorResponse, MessageResponse
from taskrights.core.dtos.sharing import (
    ShareListResponse,
    ShareResponse,
    TeamShareCreate,
    UserShareCreate,
)
from taskrights.core.resources import project
from taskrights.core.services.sharing_service import SharingService

router = APIRouter(
    prefix="/projects/{project_id}",
    tags=["Sharing"],
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


@router.get("/users", response_model=ShareListResponse)
async def list_user_shares(
    project_id: int,
    s: str = "",
    page: int = 1,
    actor: Actor = Depends(get_current_actor),
    sharing: SharingService = Depends(get_sharing_service)
):
    listing = await sharing.list_user_shares(actor, project(project_id), s, page)
    return ShareListResponse.from_listing(listing)


@router.put("/users", response_model=ShareResponse)
async def share_with_user(
    project_id: int,
    share: UserShareCreate = Body(...),
    actor: Actor = Depends(get_current_actor),
    sharing: SharingService = Depends(get_sharing_service)
):
    grant = await sharing.share_with_user(
        actor, project(project_id), share.user_id, share.right
    )
    return ShareResponse.from_grant(grant)


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def unshare_user(
    project_id: int,
    user_id: int,
    actor: Actor = Depends(get_current_actor),
    sharing: SharingService = Depends(get_sharing_service)
):
    await sharing.unshare_user(actor, project(project_id), user_id)
    return MessageResponse(
        success=True,
        message="The user was successfully removed from the project."
    )


@router.get("/teams", response_model=ShareListResponse)
async def list_team_shares(
    project_id: int,
    s: str = "",
    page: int = 1,
    actor: Actor = Depends(get_current_actor),
    sharing: SharingService = Depends(get_sharing_service)
):
    listing = await sharing.list_team_shares(actor, project(project_id), s, page)
    return ShareListResponse.from_listing(listing)


@router.put("/teams", response_model=ShareResponse)
async def share_with_team(
    project_id: int,
    share: TeamShareCreate = Body(...),
    actor: Actor = Depends(get_current_actor),
    sharing: SharingService = Depends(get_sharing_service)
):
    grant = await sharing.share_with_team(
        actor, project(project_id), share.team_id, share.right
    )
    return ShareResponse.from_grant(grant)


@router.delete("/teams/{team_id}", response_model=MessageResponse)
async def unshare_team(
    project_id: int,
    team_id: int,
    actor: Actor = Depends(get_current_actor),
    sharing: SharingService = Depends(get_sharing_service)
):
    await sharing.unshare_team(actor, project(project_id), team_id)
    return MessageResponse(
        success=True,
        message="The team was successfully removed from the project."
    )
