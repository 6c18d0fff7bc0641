"""
Treatment quotes: an itemised price proposal for a patient that can be
tracked through its status and finally converted into a sale.
"""

from typing import Dict, List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, delete

from clinihof.core.logger import logger
from clinihof.core.utils import utcnow
from clinihof.db.models import (
    Collaborator,
    Patient,
    Procedure,
    ProcedureSession,
    Quote,
    QuoteItem,
    QuoteStatus,
    Sale,
    SessionStatus,
)
from clinihof.schemas.quote import (
    LeadSourceStats,
    QuoteConvert,
    QuoteConvertResult,
    QuoteCreate,
    QuoteItemIn,
    QuoteItemResponse,
    QuoteResponse,
    QuoteStats,
    QuoteUpdate,
    QuoteValues,
)
from clinihof.schemas.sale import SaleResponse
from clinihof.services.workspace_service import TenantContext

# Status -> timestamp stamped the first time a quote reaches it
STATUS_DATES = {
    QuoteStatus.SENT: "sent_date",
    QuoteStatus.ACCEPTED: "accepted_date",
    QuoteStatus.REJECTED: "rejected_date",
}
UNKNOWN_LEAD_SOURCE = "Não informado"


def compute_totals(items: List[QuoteItemIn], discount_percent: float, discount_amount: float) -> dict:
    """
    Price a quote. A percentage discount wins over a fixed amount; whichever
    is given, the other one is derived from the item total.
    """
    total = round(sum(item.quantity * item.unit_price for item in items), 2)
    if discount_percent > 0:
        discount_amount = total * discount_percent / 100
    elif discount_amount > 0:
        if discount_amount > total:
            raise HTTPException(status_code=400, detail="Discount cannot exceed the quote total")
        discount_percent = discount_amount / total * 100
    else:
        discount_percent = discount_amount = 0

    return {
        "total_amount": total,
        "discount_percent": round(discount_percent, 2),
        "discount_amount": round(discount_amount, 2),
        "final_amount": round(total - discount_amount, 2),
    }


class QuoteService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _ensure_in_workspace(self, model, entity_id: UUID, ctx: TenantContext, label: str):
        stmt = select(model).where(model.id == entity_id, model.workspace_id == ctx.workspace_id)
        entity = (await self.session.execute(stmt)).scalars().first()
        if not entity:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return entity

    async def _check_items(self, ctx: TenantContext, items: List[QuoteItemIn]) -> None:
        for procedure_id in {item.procedure_id for item in items if item.procedure_id}:
            await self._ensure_in_workspace(Procedure, procedure_id, ctx, "Procedure")

    def _add_items(self, quote_id: UUID, items: List[QuoteItemIn]) -> None:
        self.session.add_all([
            QuoteItem(
                quote_id=quote_id,
                procedure_id=item.procedure_id,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=round(item.quantity * item.unit_price, 2),
            )
            for item in items
        ])

    async def _items_of(self, quote_id: UUID) -> List[QuoteItem]:
        stmt = select(QuoteItem).where(QuoteItem.quote_id == quote_id).order_by(QuoteItem.description)
        return (await self.session.execute(stmt)).scalars().all()

    async def _to_response(self, quote: Quote, patient_name: Optional[str] = None) -> QuoteResponse:
        if patient_name is None:
            patient_name = (await self.session.get(Patient, quote.patient_id)).name
        items = await self._items_of(quote.id)
        return QuoteResponse(
            **quote.model_dump(),
            patient_name=patient_name,
            items=[QuoteItemResponse.model_validate(item) for item in items],
        )

    async def _get(self, ctx: TenantContext, quote_id: UUID) -> Quote:
        return await self._ensure_in_workspace(Quote, quote_id, ctx, "Quote")

    async def list_quotes(self, ctx: TenantContext, status: Optional[QuoteStatus] = None) -> List[QuoteResponse]:
        stmt = (
            select(Quote, Patient.name)
            .join(Patient, Patient.id == Quote.patient_id)
            .where(Quote.workspace_id == ctx.workspace_id)
        )
        if status:
            stmt = stmt.where(Quote.status == status)
        rows = (await self.session.execute(stmt.order_by(Quote.created_at.desc()))).all()
        return [await self._to_response(quote, name) for quote, name in rows]

    async def get_quote(self, ctx: TenantContext, quote_id: UUID) -> QuoteResponse:
        return await self._to_response(await self._get(ctx, quote_id))

    async def create_quote(self, ctx: TenantContext, data: QuoteCreate) -> QuoteResponse:
        patient = await self._ensure_in_workspace(Patient, data.patient_id, ctx, "Patient")
        if data.collaborator_id:
            await self._ensure_in_workspace(Collaborator, data.collaborator_id, ctx, "Collaborator")
        await self._check_items(ctx, data.items)

        quote = Quote(
            workspace_id=ctx.workspace_id,
            patient_id=patient.id,
            collaborator_id=data.collaborator_id,
            title=data.title,
            notes=data.notes,
            lead_source=data.lead_source,
            expiration_date=data.expiration_date,
            **compute_totals(data.items, data.discount_percent, data.discount_amount),
        )
        self.session.add(quote)
        await self.session.flush()
        self._add_items(quote.id, data.items)
        await self.session.commit()
        await self.session.refresh(quote)
        return await self._to_response(quote, patient.name)

    async def update_quote(self, ctx: TenantContext, quote_id: UUID, data: QuoteUpdate) -> QuoteResponse:
        quote = await self._get(ctx, quote_id)
        updates = data.model_dump(exclude_unset=True, exclude={"items", "discount_percent", "discount_amount"})

        if updates.get("collaborator_id"):
            await self._ensure_in_workspace(Collaborator, updates["collaborator_id"], ctx, "Collaborator")
        if updates.get("title") is None:
            updates.pop("title", None)
        if updates.get("status") is None:
            updates.pop("status", None)
        elif updates["status"] != quote.status:
            date_field = STATUS_DATES.get(updates["status"])
            if date_field and getattr(quote, date_field) is None:
                setattr(quote, date_field, utcnow())

        for key, value in updates.items():
            setattr(quote, key, value)

        fields = data.model_fields_set
        if data.items is not None or "discount_percent" in fields or "discount_amount" in fields:
            if data.items is not None:
                await self._check_items(ctx, data.items)
                await self.session.execute(delete(QuoteItem).where(QuoteItem.quote_id == quote.id))
                self._add_items(quote.id, data.items)
                items = data.items
            else:
                items = await self._items_of(quote.id)
            # A newly sent discount replaces the stored one; otherwise the stored one is kept
            if "discount_percent" in fields or "discount_amount" in fields:
                percent, amount = data.discount_percent or 0, data.discount_amount or 0
            else:
                percent, amount = quote.discount_percent, 0
            for key, value in compute_totals(items, percent, amount).items():
                setattr(quote, key, value)

        self.session.add(quote)
        await self.session.commit()
        await self.session.refresh(quote)
        return await self._to_response(quote)

    async def delete_quote(self, ctx: TenantContext, quote_id: UUID) -> None:
        quote = await self._get(ctx, quote_id)
        if quote.status == QuoteStatus.ACCEPTED and quote.sale_id:
            raise HTTPException(status_code=400, detail="A quote converted into a sale cannot be deleted")
        await self.session.execute(delete(QuoteItem).where(QuoteItem.quote_id == quote.id))
        await self.session.delete(quote)
        await self.session.commit()

    async def convert_to_sale(self, ctx: TenantContext, quote_id: UUID, data: QuoteConvert) -> QuoteConvertResult:
        """
        Turn a quote into a sale for its final amount and open one PENDING
        session per procedure unit quoted. The quote ends ACCEPTED and linked
        to the sale.
        """
        quote = await self._get(ctx, quote_id)
        if quote.sale_id:
            raise HTTPException(status_code=400, detail="Quote has already been converted into a sale")
        if quote.final_amount <= 0:
            raise HTTPException(status_code=400, detail="Quote has no value to convert")

        sale = Sale(
            workspace_id=ctx.workspace_id,
            patient_id=quote.patient_id,
            seller_id=quote.collaborator_id,
            total_amount=quote.final_amount,
            payment_method=data.payment_method,
            sale_date=data.sale_date or utcnow(),
            notes=data.notes or quote.notes or f"Convertido do orçamento: {quote.title}",
        )
        self.session.add(sale)
        await self.session.flush()

        sessions_created = 0
        for item in await self._items_of(quote.id):
            if not item.procedure_id:
                continue
            for _ in range(item.quantity):
                self.session.add(ProcedureSession(
                    workspace_id=ctx.workspace_id,
                    sale_id=sale.id,
                    patient_id=quote.patient_id,
                    procedure_id=item.procedure_id,
                    collaborator_id=quote.collaborator_id,
                    status=SessionStatus.PENDING,
                ))
                sessions_created += 1

        quote.status = QuoteStatus.ACCEPTED
        quote.accepted_date = quote.accepted_date or utcnow()
        quote.sale_id = sale.id
        self.session.add(quote)

        await self.session.commit()
        await self.session.refresh(sale)
        await self.session.refresh(quote)
        logger.info(f"Quote {quote.id} converted into sale {sale.id} in workspace {ctx.workspace_id}")
        return QuoteConvertResult(
            message="Quote converted into a sale",
            quote=await self._to_response(quote),
            sale=SaleResponse.model_validate(sale),
            sessions_created=sessions_created,
        )

    async def get_stats(self, ctx: TenantContext) -> QuoteStats:
        quotes = (await self.session.execute(
            select(Quote).where(Quote.workspace_id == ctx.workspace_id)
        )).scalars().all()

        by_status = {status.value: 0 for status in QuoteStatus}
        lead_sources: Dict[str, LeadSourceStats] = {}
        for quote in quotes:
            by_status[quote.status.value] += 1
            source = quote.lead_source or UNKNOWN_LEAD_SOURCE
            stats = lead_sources.setdefault(source, LeadSourceStats(source=source, count=0, value=0, accepted=0))
            stats.count += 1
            stats.value = round(stats.value + quote.final_amount, 2)
            if quote.status == QuoteStatus.ACCEPTED:
                stats.accepted += 1

        def value_of(*statuses) -> float:
            return round(sum(q.final_amount for q in quotes if q.status in statuses), 2)

        answered = [
            (q.accepted_date or q.rejected_date) - q.created_at
            for q in quotes
            if q.status in (QuoteStatus.ACCEPTED, QuoteStatus.REJECTED) and (q.accepted_date or q.rejected_date)
        ]
        avg_days = sum(delta.total_seconds() for delta in answered) / 86400 / len(answered) if answered else 0

        total = len(quotes)
        return QuoteStats(
            total=total,
            by_status=by_status,
            conversion_rate=round(by_status[QuoteStatus.ACCEPTED.value] / total * 100, 2) if total else 0,
            values=QuoteValues(
                total=round(sum(q.final_amount for q in quotes), 2),
                accepted=value_of(QuoteStatus.ACCEPTED),
                pending=value_of(QuoteStatus.PENDING, QuoteStatus.SENT),
                lost=value_of(QuoteStatus.REJECTED, QuoteStatus.EXPIRED),
            ),
            lead_sources=sorted(lead_sources.values(), key=lambda s: s.count, reverse=True),
            avg_response_time_days=round(avg_days, 2),
        )
