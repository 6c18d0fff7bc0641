from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinihof.db.models import Collaborator, CommissionType, Patient, Sale
from clinihof.schemas.commission import CommissionItem, CommissionReport, CommissionSummary, SellerTotal
from clinihof.services.workspace_service import TenantContext


def compute_commission(sale_amount: float, commission_type, commission_value: float) -> tuple[float, float]:
    """Return ``(rate_percent, amount)`` for one sale, both rounded to cents."""
    if CommissionType(commission_type) == CommissionType.PERCENTAGE:
        rate = commission_value
        amount = sale_amount * commission_value / 100
    else:
        amount = commission_value
        rate = (commission_value / sale_amount) * 100 if sale_amount else 0.0
    return round(rate, 2), round(amount, 2)


class CommissionService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def report(
        self,
        ctx: TenantContext,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        seller_id: Optional[UUID] = None,
    ) -> CommissionReport:
        stmt = (
            select(Sale, Patient, Collaborator)
            .join(Patient, Patient.id == Sale.patient_id)
            .join(Collaborator, Collaborator.id == Sale.seller_id)
            .where(Sale.workspace_id == ctx.workspace_id, Collaborator.workspace_id == ctx.workspace_id)
        )
        if start_date and end_date:
            stmt = stmt.where(Sale.sale_date >= start_date, Sale.sale_date <= end_date)
        if seller_id:
            stmt = stmt.where(Sale.seller_id == seller_id)
        stmt = stmt.order_by(Sale.sale_date.desc())

        result = await self.session.execute(stmt)

        items = []
        totals: Dict[UUID, SellerTotal] = {}
        for sale, patient, seller in result.all():
            rate, amount = compute_commission(sale.total_amount, seller.commission_type, seller.commission_value)
            items.append(CommissionItem(
                id=sale.id,
                sale_date=sale.sale_date,
                patient_name=patient.name,
                sale_value=sale.total_amount,
                seller_id=seller.id,
                seller_name=seller.name,
                commission_type=seller.commission_type,
                commission_rate=rate,
                commission_amount=amount,
            ))

            total = totals.setdefault(seller.id, SellerTotal(
                seller_id=seller.id, name=seller.name, total_sales=0, total_commission=0, sales_count=0,
            ))
            total.total_sales += sale.total_amount
            total.total_commission = round(total.total_commission + amount, 2)
            total.sales_count += 1

        return CommissionReport(
            commissions=items,
            seller_totals=list(totals.values()),
            summary=CommissionSummary(
                total_sales_value=sum(i.sale_value for i in items),
                total_commission=round(sum(i.commission_amount for i in items), 2),
                sales_count=len(items),
            ),
        )
