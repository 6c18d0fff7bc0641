from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class CardType(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

class CardFeeRule(SQLModel, table=True):
    """Fee charged by a card operator for a given number of installments."""
    __tablename__ = "card_fee_rules"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    card_operator: str
    card_type: CardType
    installment_count: int = Field(default=1)
    fee_percentage: float
    receiving_days: int = Field(default=30)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
