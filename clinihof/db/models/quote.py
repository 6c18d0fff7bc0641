from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime, date
from enum import Enum
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class QuoteStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"

class Quote(SQLModel, table=True):
    __tablename__ = "quotes"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    patient_id: UUID = Field(foreign_key="patients.id", index=True)
    collaborator_id: Optional[UUID] = Field(default=None, foreign_key="collaborators.id")
    title: str
    status: QuoteStatus = Field(default=QuoteStatus.PENDING, index=True)
    total_amount: float = Field(default=0)
    discount_percent: float = Field(default=0)
    discount_amount: float = Field(default=0)
    final_amount: float = Field(default=0)
    notes: Optional[str] = None
    lead_source: Optional[str] = None
    expiration_date: Optional[date] = None
    sent_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    accepted_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    rejected_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    # Set once the quote has been converted
    sale_id: Optional[UUID] = Field(default=None, foreign_key="sales.id")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)

class QuoteItem(SQLModel, table=True):
    __tablename__ = "quote_items"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    quote_id: UUID = Field(foreign_key="quotes.id", index=True)
    procedure_id: Optional[UUID] = Field(default=None, foreign_key="procedures.id")
    description: str
    quantity: int = Field(default=1)
    unit_price: float
    total_price: float
