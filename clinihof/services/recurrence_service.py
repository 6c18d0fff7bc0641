"""
Replication of recurring fixed costs.

A recurring cost is a template: when its ``next_recurrence_date`` arrives a
dated copy is created for that period and the template rolls forward by one
period. Replicas keep the recurrence fields for display but point back at the
template through ``source_cost_id`` and are never replicated themselves.
"""

from datetime import date, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinihof.core.logger import logger
from clinihof.db.models import Cost, CostType, RecurrenceFrequency, RecurrenceType
from clinihof.schemas.cost import (
    CostResponse,
    RecurrencePending,
    RecurrenceProcessResult,
    ReplicatedCost,
    ReplicationFailure,
)
from clinihof.services.workspace_service import TenantContext

# relativedelta clamps to the last day of the month: Jan 31 + 1 month = Feb 28/29
FREQUENCY_STEPS = {
    RecurrenceFrequency.MONTHLY: relativedelta(months=1),
    RecurrenceFrequency.QUARTERLY: relativedelta(months=3),
    RecurrenceFrequency.YEARLY: relativedelta(years=1),
}

UPCOMING_WINDOW_DAYS = 7


def advance_recurrence_date(current: date, frequency) -> date:
    return current + FREQUENCY_STEPS[RecurrenceFrequency(frequency)]


class RecurrenceService:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _templates_query(self, workspace_id):
        return select(Cost).where(
            Cost.workspace_id == workspace_id,
            Cost.is_active == True,
            Cost.cost_type == CostType.FIXED,
            Cost.recurrence_frequency.is_not(None),
            Cost.next_recurrence_date.is_not(None),
            Cost.source_cost_id.is_(None),
            # Installment plans are fully scheduled when created
            Cost.recurrence_type == RecurrenceType.INDEFINITE,
        ).order_by(Cost.next_recurrence_date)

    async def list_due(self, ctx: TenantContext, today: Optional[date] = None) -> List[Cost]:
        today = today or date.today()
        stmt = self._templates_query(ctx.workspace_id).where(Cost.next_recurrence_date <= today)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_pending(self, ctx: TenantContext, today: Optional[date] = None) -> RecurrencePending:
        today = today or date.today()
        horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)

        result = await self.session.execute(self._templates_query(ctx.workspace_id))
        all_recurring = result.scalars().all()

        pending = [c for c in all_recurring if c.next_recurrence_date <= today]
        upcoming = [c for c in all_recurring if today < c.next_recurrence_date <= horizon]

        return RecurrencePending(
            pending=[CostResponse.model_validate(c) for c in pending],
            pending_count=len(pending),
            upcoming=[CostResponse.model_validate(c) for c in upcoming],
            upcoming_count=len(upcoming),
            all_recurring=[CostResponse.model_validate(c) for c in all_recurring],
            total_recurring=len(all_recurring),
        )

    async def process(self, ctx: TenantContext, today: Optional[date] = None) -> RecurrenceProcessResult:
        """
        Replicate every due template once. Each template is handled in its
        own savepoint; a failing one is logged and reported while the rest of
        the batch proceeds.
        """
        due = await self.list_due(ctx, today)
        if not due:
            return RecurrenceProcessResult(message="No recurring costs to process", processed_count=0)

        details: List[ReplicatedCost] = []
        failures: List[ReplicationFailure] = []

        for cost in due:
            cost_id, description = cost.id, cost.description
            try:
                async with self.session.begin_nested():
                    period_date = cost.next_recurrence_date
                    next_date = advance_recurrence_date(period_date, cost.recurrence_frequency)

                    replica = Cost(
                        workspace_id=ctx.workspace_id,
                        description=cost.description,
                        category=cost.category,
                        custom_category=cost.custom_category,
                        cost_type=cost.cost_type,
                        fixed_value=cost.fixed_value,
                        percentage=cost.percentage,
                        card_operator=cost.card_operator,
                        receiving_days=cost.receiving_days,
                        payment_date=period_date,
                        recurrence_frequency=cost.recurrence_frequency,
                        next_recurrence_date=next_date,
                        is_recurring=True,
                        is_active=True,
                        source_cost_id=cost.id,
                    )
                    self.session.add(replica)

                    cost.next_recurrence_date = next_date
                    self.session.add(cost)
            except Exception as exc:
                logger.exception(f"Failed to replicate recurring cost {cost_id}")
                failures.append(ReplicationFailure(original_id=cost_id, description=description, error=str(exc)))
                continue

            logger.info(f"Replicated recurring cost {cost_id} as {replica.id}, next on {next_date}")
            details.append(ReplicatedCost(
                original_id=cost_id,
                new_id=replica.id,
                description=description,
                amount=replica.fixed_value,
                next_date=next_date,
            ))

        await self.session.commit()

        return RecurrenceProcessResult(
            message=f"{len(details)} recurring cost(s) replicated",
            processed_count=len(details),
            details=details,
            failures=failures,
        )
