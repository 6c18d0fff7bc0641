from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func, delete

from clinihof.db.models import Package, PackageItem, Procedure, ProcedureSession, QuoteItem
from clinihof.schemas.procedure import ProcedureCreate, ProcedureUpdate
from clinihof.services.workspace_service import TenantContext

class ProcedureService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_procedures(self, ctx: TenantContext) -> List[Procedure]:
        stmt = select(Procedure).where(Procedure.workspace_id == ctx.workspace_id).order_by(Procedure.name)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_procedure(self, ctx: TenantContext, procedure_id: UUID) -> Procedure:
        stmt = select(Procedure).where(
            Procedure.id == procedure_id,
            Procedure.workspace_id == ctx.workspace_id,
        )
        result = await self.session.execute(stmt)
        procedure = result.scalars().first()
        if not procedure:
            raise HTTPException(status_code=404, detail="Procedure not found")
        return procedure

    async def create_procedure(self, ctx: TenantContext, data: ProcedureCreate) -> Procedure:
        procedure = Procedure(workspace_id=ctx.workspace_id, **data.model_dump())
        self.session.add(procedure)
        await self.session.commit()
        await self.session.refresh(procedure)
        return procedure

    async def update_procedure(self, ctx: TenantContext, procedure_id: UUID, data: ProcedureUpdate) -> Procedure:
        procedure = await self.get_procedure(ctx, procedure_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key != "color":
                continue
            setattr(procedure, key, value)
        self.session.add(procedure)
        await self.session.commit()
        await self.session.refresh(procedure)
        return procedure

    async def _count(self, stmt) -> int:
        return (await self.session.execute(stmt)).scalar() or 0

    async def delete_procedure(self, ctx: TenantContext, procedure_id: UUID) -> None:
        procedure = await self.get_procedure(ctx, procedure_id)
        if await self._count(
            select(func.count()).select_from(ProcedureSession).where(ProcedureSession.procedure_id == procedure.id)
        ):
            raise HTTPException(status_code=409, detail="Procedure has sessions and cannot be deleted")
        # Retired packages still hold their items
        in_packages = (
            select(func.count())
            .select_from(PackageItem)
            .join(Package, Package.id == PackageItem.package_id)
            .where(PackageItem.procedure_id == procedure.id, Package.is_active == True)
        )
        in_quotes = select(func.count()).select_from(QuoteItem).where(QuoteItem.procedure_id == procedure.id)
        if await self._count(in_packages) or await self._count(in_quotes):
            raise HTTPException(status_code=409, detail="Procedure is used by packages or quotes and cannot be deleted")
        await self.session.execute(delete(PackageItem).where(PackageItem.procedure_id == procedure.id))
        await self.session.delete(procedure)
        await self.session.commit()
