from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import get_current_user, get_impersonation, require_master
from clinihof.core.config import settings
from clinihof.db.models import UserRole, WorkspaceStatus
from clinihof.db.session import get_session
from clinihof.schemas.auth import SessionUser
from clinihof.schemas.user import RoleUpdate, UserResponse
from clinihof.schemas.workspace import (
    ImpersonationRequest,
    ImpersonationState,
    ImpersonationStatus,
    MasterStats,
    WorkspaceAdminUpdate,
    WorkspaceDetail,
    WorkspaceListResponse,
    WorkspaceResponse,
)
from clinihof.services.master_service import MasterService

router = APIRouter()

async def get_master_service(session: AsyncSession = Depends(get_session)) -> MasterService:
    return MasterService(session)

@router.get("/stats", response_model=MasterStats)
async def read_stats(
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    return await service.stats()

@router.get("/workspaces", response_model=WorkspaceListResponse)
async def read_workspaces(
    page: int = 1,
    limit: int = 10,
    status: Optional[WorkspaceStatus] = None,
    search: Optional[str] = None,
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    return await service.list_workspaces(page, limit, status, search)

@router.get("/workspaces/{workspace_id}", response_model=WorkspaceDetail)
async def read_workspace(
    workspace_id: UUID,
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    return await service.get_workspace_detail(workspace_id)

@router.patch("/workspaces/{workspace_id}", response_model=WorkspaceResponse)
async def update_workspace(
    workspace_id: UUID,
    payload: WorkspaceAdminUpdate,
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    return await service.update_workspace(master, workspace_id, payload)

@router.delete("/workspaces/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workspace(
    workspace_id: UUID,
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    await service.delete_workspace(master, workspace_id)

@router.get("/users", response_model=List[UserResponse])
async def read_users(
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    return await service.list_users(search, role)

@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: UUID,
    payload: RoleUpdate,
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    return await service.change_user_role(master, user_id, payload.role)

@router.post("/impersonate", response_model=ImpersonationStatus)
async def start_impersonation(
    payload: ImpersonationRequest,
    response: Response,
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    token, workspace = await service.start_impersonation(master, payload.workspace_id)
    response.set_cookie(
        settings.IMPERSONATION_COOKIE_NAME,
        token,
        max_age=settings.IMPERSONATION_TTL_SECONDS,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return ImpersonationStatus(is_impersonating=True, workspace=workspace)

@router.delete("/impersonate", response_model=ImpersonationStatus)
async def stop_impersonation(
    response: Response,
    impersonation: Optional[ImpersonationState] = Depends(get_impersonation),
    master: SessionUser = Depends(require_master),
    service: MasterService = Depends(get_master_service)
):
    await service.stop_impersonation(master, impersonation)
    response.delete_cookie(settings.IMPERSONATION_COOKIE_NAME)
    return ImpersonationStatus(is_impersonating=False, workspace=None)

@router.get("/impersonate", response_model=ImpersonationStatus)
async def read_impersonation(
    impersonation: Optional[ImpersonationState] = Depends(get_impersonation),
    user: SessionUser = Depends(get_current_user)
):
    return MasterService.impersonation_status(user, impersonation)
