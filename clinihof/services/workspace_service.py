from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinihof.db.models import Workspace
from clinihof.schemas.auth import SessionUser
from clinihof.schemas.workspace import ImpersonationState, WorkspaceSettingsUpdate


@dataclass(frozen=True)
class TenantContext:
    """The caller plus the workspace every read and write of the request is scoped to."""
    user: SessionUser
    workspace: Workspace
    impersonating: bool = False

    @property
    def workspace_id(self) -> UUID:
        return self.workspace.id


async def get_owned_workspace(session: AsyncSession, user_id: UUID) -> Optional[Workspace]:
    stmt = select(Workspace).where(Workspace.owner_id == user_id)
    result = await session.execute(stmt)
    return result.scalars().first()


async def resolve_effective_workspace(
    session: AsyncSession,
    user: SessionUser,
    impersonation: Optional[ImpersonationState] = None,
) -> Optional[Workspace]:
    """
    Return the workspace the request operates on, or None.

    A MASTER holding a valid impersonation state gets the impersonated
    workspace, re-read from storage so a deleted workspace yields None.
    Every other caller gets the workspace they own, falling back to the
    workspace they are a team member of. Impersonation is ignored for
    non-MASTER roles.
    """
    if user.is_master and impersonation is not None:
        return await session.get(Workspace, impersonation.workspace_id)

    workspace = await get_owned_workspace(session, user.id)
    if workspace is None and user.workspace_id is not None:
        workspace = await session.get(Workspace, user.workspace_id)
    return workspace


async def resolve_tenant_context(
    session: AsyncSession,
    user: SessionUser,
    impersonation: Optional[ImpersonationState] = None,
) -> TenantContext:
    workspace = await resolve_effective_workspace(session, user, impersonation)
    if workspace is None:
        raise HTTPException(status_code=404, detail="Workspace not found")
    impersonating = user.is_master and impersonation is not None
    return TenantContext(user=user, workspace=workspace, impersonating=impersonating)


class WorkspaceService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def update_settings(self, ctx: TenantContext, data: WorkspaceSettingsUpdate) -> Workspace:
        workspace = await self.session.get(Workspace, ctx.workspace_id)
        if not workspace:
            raise HTTPException(status_code=404, detail="Workspace not found")

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(workspace, key, value)

        self.session.add(workspace)
        await self.session.commit()
        await self.session.refresh(workspace)
        return workspace
