"""
Card operator fee tables. Rules are grouped by operator and card type, one
rule per installment count; a group is replaced as a whole and retired by
soft delete so past fee lookups stay intact.
"""

from typing import List

from fastapi import HTTPException
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinihof.core.logger import logger
from clinihof.db.models import CardFeeRule, CardType, Cost, CostCategory
from clinihof.schemas.card_fee import (
    CardFeeGroupCreate,
    CardFeeGroupResult,
    CardFeeOverview,
    CardFeeRuleResponse,
)
from clinihof.schemas.cost import CostResponse
from clinihof.services.workspace_service import TenantContext


class CardFeeService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def overview(self, ctx: TenantContext) -> CardFeeOverview:
        rules = await self.session.execute(
            select(CardFeeRule).where(
                CardFeeRule.workspace_id == ctx.workspace_id,
                CardFeeRule.is_active == True,
            ).order_by(CardFeeRule.card_operator, CardFeeRule.card_type, CardFeeRule.installment_count)
        )
        costs = await self.session.execute(
            select(Cost).where(
                Cost.workspace_id == ctx.workspace_id,
                Cost.category == CostCategory.CARD,
                Cost.is_active == True,
            ).order_by(Cost.created_at.desc())
        )
        return CardFeeOverview(
            rules=[CardFeeRuleResponse.model_validate(r) for r in rules.scalars().all()],
            card_costs=[CostResponse.model_validate(c) for c in costs.scalars().all()],
        )

    async def _active_counts(self, ctx: TenantContext, operator: str, card_type: CardType) -> set:
        result = await self.session.execute(
            select(CardFeeRule.installment_count).where(
                CardFeeRule.workspace_id == ctx.workspace_id,
                CardFeeRule.card_operator == operator,
                CardFeeRule.card_type == card_type,
                CardFeeRule.is_active == True,
            )
        )
        return set(result.scalars().all())

    async def _deactivate_group(self, ctx: TenantContext, operator: str, card_type: CardType) -> None:
        await self.session.execute(
            update(CardFeeRule).where(
                CardFeeRule.workspace_id == ctx.workspace_id,
                CardFeeRule.card_operator == operator,
                CardFeeRule.card_type == card_type,
                CardFeeRule.is_active == True,
            ).values(is_active=False)
        )

    def _add_rules(self, ctx: TenantContext, data: CardFeeGroupCreate) -> List[CardFeeRule]:
        rules = [
            CardFeeRule(
                workspace_id=ctx.workspace_id,
                card_operator=data.card_operator,
                card_type=data.card_type,
                installment_count=item.count,
                fee_percentage=item.fee_percentage,
                receiving_days=data.receiving_days,
            )
            for item in data.installments
        ]
        self.session.add_all(rules)
        return rules

    @staticmethod
    def _check_unique_counts(data: CardFeeGroupCreate) -> None:
        counts = [item.count for item in data.installments]
        if len(counts) != len(set(counts)):
            raise HTTPException(status_code=400, detail="Installment counts must be unique")

    async def create_group(self, ctx: TenantContext, data: CardFeeGroupCreate) -> CardFeeGroupResult:
        self._check_unique_counts(data)
        taken = await self._active_counts(ctx, data.card_operator, data.card_type)
        clash = sorted(taken.intersection(item.count for item in data.installments))
        if clash:
            raise HTTPException(
                status_code=409,
                detail=f"{data.card_operator} {data.card_type.value} already has rules for installments {clash}",
            )

        rules = self._add_rules(ctx, data)
        await self.session.commit()
        for rule in rules:
            await self.session.refresh(rule)
        logger.info(f"Card fee rules created for {data.card_operator} {data.card_type.value} in {ctx.workspace_id}")
        return CardFeeGroupResult(message="Card fee rules created", rules=[CardFeeRuleResponse.model_validate(r) for r in rules])

    async def replace_group(self, ctx: TenantContext, data: CardFeeGroupCreate) -> CardFeeGroupResult:
        self._check_unique_counts(data)
        await self._deactivate_group(ctx, data.card_operator, data.card_type)
        rules = self._add_rules(ctx, data)
        await self.session.commit()
        for rule in rules:
            await self.session.refresh(rule)
        return CardFeeGroupResult(message="Card fee rules updated", rules=[CardFeeRuleResponse.model_validate(r) for r in rules])

    async def delete_group(self, ctx: TenantContext, operator: str, card_type: CardType) -> None:
        if not await self._active_counts(ctx, operator, card_type):
            raise HTTPException(status_code=404, detail="Card fee rules not found")
        await self._deactivate_group(ctx, operator, card_type)
        await self.session.commit()
