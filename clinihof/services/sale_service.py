from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from sqlmodel import select, func, delete

from clinihof.core.logger import logger
from clinihof.core.utils import utcnow
from clinihof.db.models import (
    Collaborator,
    Cost,
    CostType,
    Patient,
    Procedure,
    ProcedureSession,
    Quote,
    Sale,
    SessionStatus,
)
from clinihof.schemas.sale import DashboardStats, SaleCreate
from clinihof.services.workspace_service import TenantContext

class SaleService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _ensure_in_workspace(self, model, entity_id: UUID, ctx: TenantContext, label: str):
        stmt = select(model).where(model.id == entity_id, model.workspace_id == ctx.workspace_id)
        result = await self.session.execute(stmt)
        entity = result.scalars().first()
        if not entity:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return entity

    async def list_sales(
        self,
        ctx: TenantContext,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Sale]:
        stmt = select(Sale).where(Sale.workspace_id == ctx.workspace_id)
        if start_date:
            stmt = stmt.where(Sale.sale_date >= start_date)
        if end_date:
            stmt = stmt.where(Sale.sale_date <= end_date)
        result = await self.session.execute(stmt.order_by(Sale.sale_date.desc()))
        return result.scalars().all()

    async def get_sale(self, ctx: TenantContext, sale_id: UUID) -> Sale:
        return await self._ensure_in_workspace(Sale, sale_id, ctx, "Sale")

    async def create_sale(self, ctx: TenantContext, data: SaleCreate) -> Sale:
        # Every referenced entity must belong to the caller's workspace
        await self._ensure_in_workspace(Patient, data.patient_id, ctx, "Patient")
        if data.seller_id:
            await self._ensure_in_workspace(Collaborator, data.seller_id, ctx, "Seller")
        for procedure_id in data.procedure_ids:
            await self._ensure_in_workspace(Procedure, procedure_id, ctx, "Procedure")

        sale = Sale(
            workspace_id=ctx.workspace_id,
            patient_id=data.patient_id,
            seller_id=data.seller_id,
            total_amount=data.total_amount,
            payment_method=data.payment_method,
            sale_date=data.sale_date or utcnow(),
            notes=data.notes,
        )
        self.session.add(sale)
        await self.session.flush()

        for procedure_id in data.procedure_ids:
            self.session.add(ProcedureSession(
                workspace_id=ctx.workspace_id,
                sale_id=sale.id,
                patient_id=data.patient_id,
                procedure_id=procedure_id,
                collaborator_id=data.seller_id,
                status=SessionStatus.PENDING,
            ))

        await self.session.commit()
        await self.session.refresh(sale)
        logger.info(f"Sale {sale.id} created in workspace {ctx.workspace_id}")
        return sale

    async def delete_sale(self, ctx: TenantContext, sale_id: UUID) -> None:
        sale = await self.get_sale(ctx, sale_id)
        await self.session.execute(delete(ProcedureSession).where(ProcedureSession.sale_id == sale.id))
        # The quote stays accepted but can be converted again
        await self.session.execute(update(Quote).where(Quote.sale_id == sale.id).values(sale_id=None))
        await self.session.delete(sale)
        await self.session.commit()

    async def dashboard(self, ctx: TenantContext) -> DashboardStats:
        workspace_id = ctx.workspace_id
        now = utcnow()
        month_start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)

        async def scalar(stmt):
            return (await self.session.execute(stmt)).scalar() or 0

        patients = await scalar(select(func.count()).select_from(Patient).where(Patient.workspace_id == workspace_id))
        sales_count = await scalar(select(func.count()).select_from(Sale).where(Sale.workspace_id == workspace_id))
        total_revenue = await scalar(select(func.sum(Sale.total_amount)).where(Sale.workspace_id == workspace_id))
        monthly_revenue = await scalar(select(func.sum(Sale.total_amount)).where(
            Sale.workspace_id == workspace_id,
            Sale.sale_date >= month_start,
        ))
        pending_sessions = await scalar(select(func.count()).select_from(ProcedureSession).where(
            ProcedureSession.workspace_id == workspace_id,
            ProcedureSession.status.in_([SessionStatus.PENDING, SessionStatus.SCHEDULED]),
        ))
        # Templates only; replicas are the dated copies of the same expense
        monthly_fixed_costs = await scalar(select(func.sum(Cost.fixed_value)).where(
            Cost.workspace_id == workspace_id,
            Cost.is_active == True,
            Cost.cost_type == CostType.FIXED,
            Cost.source_cost_id.is_(None),
        ))

        return DashboardStats(
            patients=patients,
            sales_count=sales_count,
            monthly_revenue=float(monthly_revenue),
            total_revenue=float(total_revenue),
            pending_sessions=pending_sessions,
            monthly_fixed_costs=float(monthly_fixed_costs),
        )
