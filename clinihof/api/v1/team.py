from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.user import RoleUpdate, TeamMemberCreate, TeamMemberCreated, UserResponse
from clinihof.services.team_service import TeamService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_team_service(session: AsyncSession = Depends(get_session)) -> TeamService:
    return TeamService(session)

@router.get("/", response_model=List[UserResponse])
async def read_team(
    ctx: TenantContext = Depends(require_permission("team")),
    service: TeamService = Depends(get_team_service)
):
    return await service.list_members(ctx)

@router.post("/", response_model=TeamMemberCreated, status_code=status.HTTP_201_CREATED)
async def invite_member(
    payload: TeamMemberCreate,
    ctx: TenantContext = Depends(require_permission("team", write=True)),
    service: TeamService = Depends(get_team_service)
):
    return await service.invite_member(ctx, payload)

@router.patch("/{member_id}/role", response_model=UserResponse)
async def change_member_role(
    member_id: UUID,
    payload: RoleUpdate,
    ctx: TenantContext = Depends(require_permission("team", write=True)),
    service: TeamService = Depends(get_team_service)
):
    return await service.change_role(ctx, member_id, payload)

@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    member_id: UUID,
    ctx: TenantContext = Depends(require_permission("team", write=True)),
    service: TeamService = Depends(get_team_service)
):
    await service.remove_member(ctx, member_id)
