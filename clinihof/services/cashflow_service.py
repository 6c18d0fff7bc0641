from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_, and_

from clinihof.db.models import (
    Cost,
    CostCategory,
    CostInstallment,
    CostType,
    Patient,
    RecurrenceType,
    Sale,
)
from clinihof.schemas.cashflow import (
    CashFlowReport,
    CashFlowSummary,
    DailyCashFlow,
    ExpenseItem,
    ReceivableItem,
)
from clinihof.services.workspace_service import TenantContext

MAX_PERIOD_DAYS = 366


class CashFlowService:
    """Money in (sales) against money out (costs) over a date range, day by day."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _receivables(self, ctx: TenantContext, start: datetime, end: datetime) -> List[ReceivableItem]:
        stmt = (
            select(Sale, Patient)
            .join(Patient, Patient.id == Sale.patient_id)
            .where(Sale.workspace_id == ctx.workspace_id, Sale.sale_date >= start, Sale.sale_date <= end)
            .order_by(Sale.sale_date)
        )
        result = await self.session.execute(stmt)
        return [
            ReceivableItem(
                id=sale.id,
                date=sale.sale_date.date(),
                amount=sale.total_amount,
                patient_name=patient.name,
                payment_method=sale.payment_method,
            )
            for sale, patient in result.all()
        ]

    async def _expenses(self, ctx: TenantContext, start_date: date, end_date: date, sales_total: float) -> List[ExpenseItem]:
        stmt = select(Cost).where(
            Cost.workspace_id == ctx.workspace_id,
            Cost.is_active == True,
            # Installment plans are counted through their installments
            Cost.recurrence_type == RecurrenceType.INDEFINITE,
            or_(
                and_(Cost.payment_date >= start_date, Cost.payment_date <= end_date),
                # Undated recurring costs count once, on the first day of the period
                and_(Cost.payment_date.is_(None), Cost.is_recurring == True),
            ),
        ).order_by(Cost.payment_date)
        result = await self.session.execute(stmt)

        expenses = []
        for cost in result.scalars().all():
            if cost.cost_type == CostType.FIXED:
                amount = cost.fixed_value or 0
            else:
                # Percentage costs apply to the revenue of the period
                amount = sales_total * (cost.percentage or 0) / 100
            expenses.append(ExpenseItem(
                id=cost.id,
                date=cost.payment_date or start_date,
                amount=round(amount, 2),
                description=cost.description,
                category=cost.custom_category if cost.category == CostCategory.CUSTOM else cost.category.value,
                is_recurring=cost.is_recurring,
            ))
        expenses.extend(await self._installment_expenses(ctx, start_date, end_date))
        return expenses

    async def _installment_expenses(self, ctx: TenantContext, start_date: date, end_date: date) -> List[ExpenseItem]:
        stmt = (
            select(CostInstallment, Cost)
            .join(Cost, Cost.id == CostInstallment.cost_id)
            .where(
                Cost.workspace_id == ctx.workspace_id,
                Cost.is_active == True,
                CostInstallment.due_date >= start_date,
                CostInstallment.due_date <= end_date,
            )
            .order_by(CostInstallment.due_date)
        )
        result = await self.session.execute(stmt)
        return [
            ExpenseItem(
                id=installment.id,
                date=installment.due_date,
                amount=installment.amount,
                description=f"{cost.description} (Parcela {installment.installment_number}/{cost.total_installments})",
                category=cost.custom_category if cost.category == CostCategory.CUSTOM else cost.category.value,
                is_recurring=True,
            )
            for installment, cost in result.all()
        ]

    async def report(self, ctx: TenantContext, start_date: date, end_date: date) -> CashFlowReport:
        if end_date < start_date:
            raise HTTPException(status_code=400, detail="end_date must not be before start_date")
        if (end_date - start_date).days >= MAX_PERIOD_DAYS:
            raise HTTPException(status_code=400, detail=f"Period cannot exceed {MAX_PERIOD_DAYS} days")

        receivables = await self._receivables(
            ctx,
            datetime.combine(start_date, time.min, tzinfo=timezone.utc),
            datetime.combine(end_date, time.max, tzinfo=timezone.utc),
        )
        total_receivables = round(sum(item.amount for item in receivables), 2)
        expenses = await self._expenses(ctx, start_date, end_date, total_receivables)
        total_expenses = round(sum(item.amount for item in expenses), 2)

        incoming: Dict[date, float] = {}
        outgoing: Dict[date, float] = {}
        for item in receivables:
            incoming[item.date] = incoming.get(item.date, 0) + item.amount
        for item in expenses:
            outgoing[item.date] = outgoing.get(item.date, 0) + item.amount

        daily = []
        day = start_date
        while day <= end_date:
            received = round(incoming.get(day, 0), 2)
            spent = round(outgoing.get(day, 0), 2)
            daily.append(DailyCashFlow(date=day, receivables=received, expenses=spent, net_flow=round(received - spent, 2)))
            day += timedelta(days=1)

        return CashFlowReport(
            start_date=start_date,
            end_date=end_date,
            receivables=receivables,
            expenses=expenses,
            daily=daily,
            summary=CashFlowSummary(
                total_receivables=total_receivables,
                total_expenses=total_expenses,
                net_cash_flow=round(total_receivables - total_expenses, 2),
            ),
        )
