import math
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from sqlmodel import select, func, or_, delete

from clinihof.core.logger import logger
from clinihof.core.security import create_impersonation_token
from clinihof.core.utils import utcnow
from clinihof.db.models import (
    AuditLog,
    CardFeeRule,
    Collaborator,
    Cost,
    CostInstallment,
    Package,
    PackageItem,
    Patient,
    Procedure,
    ProcedureSession,
    Quote,
    QuoteItem,
    Sale,
    Supply,
    User,
    UserRole,
    Workspace,
    WorkspaceStatus,
)
from clinihof.db.models.workspace import WORKSPACE_PLANS
from clinihof.schemas.auth import SessionUser
from clinihof.schemas.workspace import (
    ImpersonatedWorkspace,
    ImpersonationState,
    ImpersonationStatus,
    MasterStats,
    Pagination,
    WorkspaceAdminUpdate,
    WorkspaceDetail,
    WorkspaceListItem,
    WorkspaceListResponse,
    WorkspaceMetrics,
    WorkspaceOwner,
    WorkspaceResponse,
)

class MasterService:
    """Platform-owner console: workspace administration and impersonation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _audit(self, actor: SessionUser, action: str, workspace_id: Optional[UUID] = None, **payload):
        self.session.add(AuditLog(
            actor_id=actor.id,
            workspace_id=workspace_id,
            action=action,
            payload={key: str(value) for key, value in payload.items()} or None,
        ))

    async def _count(self, model, *criteria) -> int:
        stmt = select(func.count()).select_from(model).where(*criteria)
        return (await self.session.execute(stmt)).scalar() or 0

    async def _sum(self, column, *criteria) -> float:
        stmt = select(func.sum(column)).where(*criteria)
        return float((await self.session.execute(stmt)).scalar() or 0)

    async def _get_workspace(self, workspace_id: UUID) -> Workspace:
        workspace = await self.session.get(Workspace, workspace_id)
        if not workspace:
            raise HTTPException(status_code=404, detail="Workspace not found")
        return workspace

    async def _owner(self, workspace: Workspace) -> Optional[WorkspaceOwner]:
        owner = await self.session.get(User, workspace.owner_id)
        return WorkspaceOwner.model_validate(owner) if owner else None

    async def stats(self) -> MasterStats:
        return MasterStats(
            total_workspaces=await self._count(Workspace),
            active_workspaces=await self._count(Workspace, Workspace.status == WorkspaceStatus.ACTIVE),
            suspended_workspaces=await self._count(Workspace, Workspace.status == WorkspaceStatus.SUSPENDED),
            total_users=await self._count(User),
            total_patients=await self._count(Patient),
            total_revenue=await self._sum(Sale.total_amount),
        )

    async def list_workspaces(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[WorkspaceStatus] = None,
        search: Optional[str] = None,
    ) -> WorkspaceListResponse:
        page = max(page, 1)
        limit = min(max(limit, 1), 100)

        stmt = select(Workspace).join(User, User.id == Workspace.owner_id)
        if status:
            stmt = stmt.where(Workspace.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(
                func.lower(Workspace.name).like(pattern),
                func.lower(User.name).like(pattern),
                func.lower(User.email).like(pattern),
            ))

        total = (await self.session.execute(
            select(func.count()).select_from(stmt.subquery())
        )).scalar() or 0

        result = await self.session.execute(
            stmt.order_by(Workspace.created_at.desc()).offset((page - 1) * limit).limit(limit)
        )

        items = []
        for workspace in result.scalars().all():
            members = await self._count(User, User.workspace_id == workspace.id, User.id != workspace.owner_id)
            items.append(WorkspaceListItem(
                **WorkspaceResponse.model_validate(workspace).model_dump(),
                owner=await self._owner(workspace),
                sales_count=await self._count(Sale, Sale.workspace_id == workspace.id),
                user_count=members + 1,
            ))

        return WorkspaceListResponse(
            workspaces=items,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
        )

    async def get_workspace_detail(self, workspace_id: UUID) -> WorkspaceDetail:
        workspace = await self._get_workspace(workspace_id)
        now = utcnow()
        month_start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)

        metrics = WorkspaceMetrics(
            patients=await self._count(Patient, Patient.workspace_id == workspace_id),
            procedures=await self._count(Procedure, Procedure.workspace_id == workspace_id),
            sales=await self._count(Sale, Sale.workspace_id == workspace_id),
            collaborators=await self._count(Collaborator, Collaborator.workspace_id == workspace_id),
            costs=await self._count(Cost, Cost.workspace_id == workspace_id),
            total_revenue=await self._sum(Sale.total_amount, Sale.workspace_id == workspace_id),
            monthly_revenue=await self._sum(
                Sale.total_amount, Sale.workspace_id == workspace_id, Sale.sale_date >= month_start
            ),
            total_costs=await self._sum(Cost.fixed_value, Cost.workspace_id == workspace_id, Cost.is_active == True),
        )
        return WorkspaceDetail(
            **WorkspaceResponse.model_validate(workspace).model_dump(),
            owner=await self._owner(workspace),
            metrics=metrics,
        )

    async def update_workspace(
        self, actor: SessionUser, workspace_id: UUID, data: WorkspaceAdminUpdate
    ) -> Workspace:
        workspace = await self._get_workspace(workspace_id)
        updates = data.model_dump(exclude_unset=True, exclude_none=True)

        if "plan" in updates and updates["plan"] not in WORKSPACE_PLANS:
            raise HTTPException(status_code=400, detail=f"Plan must be one of: {', '.join(WORKSPACE_PLANS)}")
        if not updates:
            raise HTTPException(status_code=400, detail="No valid fields to update")

        for key, value in updates.items():
            setattr(workspace, key, value)
        workspace.updated_at = utcnow()
        self.session.add(workspace)
        await self._audit(actor, "workspace.update", workspace_id, **updates)
        await self.session.commit()
        await self.session.refresh(workspace)
        logger.info(f"MASTER {actor.id} updated workspace {workspace_id}: {updates}")
        return workspace

    async def delete_workspace(self, actor: SessionUser, workspace_id: UUID) -> None:
        """Remove a workspace and everything it owns; members are detached, not deleted."""
        workspace = await self._get_workspace(workspace_id)
        name = workspace.name

        # Child rows first: they only reference the workspace through their parent
        for child, parent_key, parent in (
            (QuoteItem, QuoteItem.quote_id, Quote),
            (PackageItem, PackageItem.package_id, Package),
            (CostInstallment, CostInstallment.cost_id, Cost),
        ):
            parent_ids = select(parent.id).where(parent.workspace_id == workspace_id)
            await self.session.execute(delete(child).where(parent_key.in_(parent_ids)))
        for model in (
            Quote, ProcedureSession, Sale, CardFeeRule, Supply, Package, Cost, Collaborator, Procedure, Patient,
        ):
            await self.session.execute(delete(model).where(model.workspace_id == workspace_id))
        await self.session.execute(
            update(User).where(User.workspace_id == workspace_id).values(workspace_id=None)
        )
        await self.session.execute(delete(Workspace).where(Workspace.id == workspace_id))
        await self._audit(actor, "workspace.delete", workspace_id, name=name)
        await self.session.commit()
        logger.info(f"MASTER {actor.id} deleted workspace {workspace_id} ({name})")

    async def list_users(self, search: Optional[str] = None, role: Optional[UserRole] = None) -> List[User]:
        stmt = select(User)
        if role:
            stmt = stmt.where(User.role == role)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
        result = await self.session.execute(stmt.order_by(User.created_at.desc()))
        return result.scalars().all()

    async def change_user_role(self, actor: SessionUser, user_id: UUID, role: UserRole) -> User:
        user = await self.session.get(User, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        if user.id == actor.id and role != UserRole.MASTER:
            raise HTTPException(status_code=400, detail="You cannot demote yourself")

        previous = user.role
        user.role = role
        self.session.add(user)
        await self._audit(actor, "user.role", user.workspace_id, user_id=user.id, previous=previous.value, role=role.value)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def start_impersonation(self, actor: SessionUser, workspace_id: UUID) -> tuple[str, ImpersonatedWorkspace]:
        """
        Validate the target and sign a new impersonation token.

        Returns the cookie value and the workspace it grants; the caller
        stores the token in the impersonation cookie.
        """
        workspace = await self._get_workspace(workspace_id)
        if workspace.status != WorkspaceStatus.ACTIVE:
            raise HTTPException(status_code=400, detail="Workspace must be active to be impersonated")

        token, expires_at = create_impersonation_token(workspace.id, workspace.name)
        await self._audit(actor, "impersonation.start", workspace.id, name=workspace.name)
        await self.session.commit()
        logger.info(f"MASTER {actor.id} started impersonating workspace {workspace.id}")
        return token, ImpersonatedWorkspace(id=workspace.id, name=workspace.name, expires_at=expires_at)

    async def stop_impersonation(self, actor: SessionUser, state: Optional[ImpersonationState]) -> None:
        if state is not None:
            await self._audit(actor, "impersonation.stop", state.workspace_id, name=state.workspace_name)
            await self.session.commit()
            logger.info(f"MASTER {actor.id} stopped impersonating workspace {state.workspace_id}")

    @staticmethod
    def impersonation_status(user: SessionUser, state: Optional[ImpersonationState]) -> ImpersonationStatus:
        if not user.is_master or state is None:
            return ImpersonationStatus(is_impersonating=False, workspace=None)
        return ImpersonationStatus(
            is_impersonating=True,
            workspace=ImpersonatedWorkspace(
                id=state.workspace_id,
                name=state.workspace_name,
                expires_at=state.expires_at,
            ),
        )
