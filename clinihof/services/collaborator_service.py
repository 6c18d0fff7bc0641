from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_, func

from clinihof.db.models import Collaborator
from clinihof.schemas.collaborator import CollaboratorCreate, CollaboratorStats, CollaboratorUpdate
from clinihof.services.workspace_service import TenantContext

NULLABLE_FIELDS = ("phone", "email", "admission_date")

class CollaboratorService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_collaborators(
        self, ctx: TenantContext, search: Optional[str] = None, include_inactive: bool = False
    ) -> List[Collaborator]:
        stmt = select(Collaborator).where(Collaborator.workspace_id == ctx.workspace_id)
        if not include_inactive:
            stmt = stmt.where(Collaborator.is_active == True)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(
                func.lower(Collaborator.name).like(pattern),
                func.lower(Collaborator.role).like(pattern),
            ))
        result = await self.session.execute(stmt.order_by(Collaborator.name))
        return result.scalars().all()

    async def get_collaborator(self, ctx: TenantContext, collaborator_id: UUID) -> Collaborator:
        stmt = select(Collaborator).where(
            Collaborator.id == collaborator_id,
            Collaborator.workspace_id == ctx.workspace_id,
        )
        result = await self.session.execute(stmt)
        collaborator = result.scalars().first()
        if not collaborator:
            raise HTTPException(status_code=404, detail="Collaborator not found")
        return collaborator

    async def create_collaborator(self, ctx: TenantContext, data: CollaboratorCreate) -> Collaborator:
        collaborator = Collaborator(workspace_id=ctx.workspace_id, **data.model_dump())
        self.session.add(collaborator)
        await self.session.commit()
        await self.session.refresh(collaborator)
        return collaborator

    async def update_collaborator(
        self, ctx: TenantContext, collaborator_id: UUID, data: CollaboratorUpdate
    ) -> Collaborator:
        collaborator = await self.get_collaborator(ctx, collaborator_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key not in NULLABLE_FIELDS:
                continue
            setattr(collaborator, key, value)
        self.session.add(collaborator)
        await self.session.commit()
        await self.session.refresh(collaborator)
        return collaborator

    async def deactivate_collaborator(self, ctx: TenantContext, collaborator_id: UUID) -> None:
        # Sales keep pointing at the collaborator, so it is only deactivated
        collaborator = await self.get_collaborator(ctx, collaborator_id)
        collaborator.is_active = False
        self.session.add(collaborator)
        await self.session.commit()

    async def get_stats(self, ctx: TenantContext) -> CollaboratorStats:
        # Payroll only counts active collaborators
        collaborators = await self.list_collaborators(ctx, include_inactive=True)
        active = [c for c in collaborators if c.is_active]
        return CollaboratorStats(
            total_collaborators=len(collaborators),
            active_collaborators=len(active),
            total_monthly_cost=round(sum(c.base_salary + c.charges for c in active), 2),
        )
