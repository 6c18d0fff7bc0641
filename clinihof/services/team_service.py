from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, or_, select

from clinihof.core.logger import logger
from clinihof.core.permissions import can_manage_team
from clinihof.core.security import get_password_hash
from clinihof.core.utils import generate_password
from clinihof.db.models import User, UserRole
from clinihof.schemas.user import RoleUpdate, TeamMemberCreate, TeamMemberCreated, UserResponse
from clinihof.services.workspace_service import TenantContext

class TeamService:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _members_query(self, ctx: TenantContext):
        return select(User).where(
            or_(User.workspace_id == ctx.workspace_id, User.id == ctx.workspace.owner_id)
        )

    async def list_members(self, ctx: TenantContext) -> List[User]:
        result = await self.session.execute(self._members_query(ctx).order_by(User.name))
        return result.scalars().all()

    async def _get_member(self, ctx: TenantContext, member_id: UUID) -> User:
        result = await self.session.execute(self._members_query(ctx).where(User.id == member_id))
        member = result.scalars().first()
        if not member:
            raise HTTPException(status_code=404, detail="Team member not found")
        return member

    async def invite_member(self, ctx: TenantContext, data: TeamMemberCreate) -> TeamMemberCreated:
        if not can_manage_team(ctx.user.role, data.role):
            raise HTTPException(status_code=403, detail=f"Not allowed to add a {data.role.value} member")
        if data.role == UserRole.MASTER:
            raise HTTPException(status_code=400, detail="MASTER users cannot belong to a workspace")

        count_stmt = select(func.count()).select_from(User).where(User.workspace_id == ctx.workspace_id)
        member_count = (await self.session.execute(count_stmt)).scalar() or 0
        if member_count >= ctx.workspace.max_users:
            raise HTTPException(status_code=400, detail="Workspace user limit reached")

        email = data.email.strip().lower()
        existing = await self.session.execute(select(User).where(User.email == email))
        if existing.scalars().first():
            raise HTTPException(status_code=409, detail="Email already registered")

        temporary_password = None
        password = data.password
        if not password:
            temporary_password = password = generate_password()

        member = User(
            workspace_id=ctx.workspace_id,
            role=data.role,
            name=data.name,
            email=email,
            phone=data.phone,
            password_hash=get_password_hash(password),
        )
        self.session.add(member)
        await self.session.commit()
        await self.session.refresh(member)
        logger.info(f"User {ctx.user.id} added {member.id} to workspace {ctx.workspace_id}")

        return TeamMemberCreated(
            user=UserResponse.model_validate(member),
            temporary_password=temporary_password,
        )

    async def change_role(self, ctx: TenantContext, member_id: UUID, data: RoleUpdate) -> User:
        member = await self._get_member(ctx, member_id)
        if member.id == ctx.workspace.owner_id:
            raise HTTPException(status_code=400, detail="The workspace owner's role cannot be changed")
        if not (can_manage_team(ctx.user.role, member.role) and can_manage_team(ctx.user.role, data.role)):
            raise HTTPException(status_code=403, detail="Not allowed to change this member's role")
        if data.role == UserRole.MASTER:
            raise HTTPException(status_code=400, detail="MASTER users cannot belong to a workspace")

        member.role = data.role
        self.session.add(member)
        await self.session.commit()
        await self.session.refresh(member)
        return member

    async def remove_member(self, ctx: TenantContext, member_id: UUID) -> None:
        member = await self._get_member(ctx, member_id)
        if member.id == ctx.workspace.owner_id:
            raise HTTPException(status_code=400, detail="The workspace owner cannot be removed")
        if member.id == ctx.user.id:
            raise HTTPException(status_code=400, detail="You cannot remove yourself")
        if not can_manage_team(ctx.user.role, member.role):
            raise HTTPException(status_code=403, detail="Not allowed to remove this member")

        member.workspace_id = None
        member.is_active = False
        self.session.add(member)
        await self.session.commit()
