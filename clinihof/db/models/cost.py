from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint, DateTime
from typing import Optional, TYPE_CHECKING
from datetime import datetime, date
from enum import Enum
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

if TYPE_CHECKING:
    from .workspace import Workspace

class CostCategory(str, Enum):
    OPERATIONAL = "OPERATIONAL"
    TAX = "TAX"
    COMMISSION = "COMMISSION"
    CARD = "CARD"
    CUSTOM = "CUSTOM"

class CostType(str, Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"

class RecurrenceFrequency(str, Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"

class RecurrenceType(str, Enum):
    INDEFINITE = "INDEFINITE"
    INSTALLMENTS = "INSTALLMENTS"

class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"

class Cost(SQLModel, table=True):
    __tablename__ = "costs"
    # One replica per template and period
    __table_args__ = (
        UniqueConstraint("source_cost_id", "payment_date", name="uq_cost_source_payment_date"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    description: str
    category: CostCategory = Field(default=CostCategory.OPERATIONAL)
    custom_category: Optional[str] = None
    cost_type: CostType
    fixed_value: Optional[float] = None
    percentage: Optional[float] = None
    payment_date: Optional[date] = None
    card_operator: Optional[str] = None
    receiving_days: Optional[int] = None
    is_active: bool = Field(default=True)
    is_recurring: bool = Field(default=False)
    recurrence_frequency: Optional[RecurrenceFrequency] = None
    next_recurrence_date: Optional[date] = Field(default=None, index=True)
    recurrence_type: RecurrenceType = Field(default=RecurrenceType.INDEFINITE)
    # Installment plans only: the value is split into total_installments rows
    total_installments: Optional[int] = None
    source_cost_id: Optional[UUID] = Field(default=None, foreign_key="costs.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    workspace: Optional["Workspace"] = Relationship(back_populates="costs")

class CostInstallment(SQLModel, table=True):
    __tablename__ = "cost_installments"
    __table_args__ = (
        UniqueConstraint("cost_id", "installment_number", name="uq_cost_installment_number"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    cost_id: UUID = Field(foreign_key="costs.id", index=True)
    installment_number: int
    amount: float
    due_date: date = Field(index=True)
    status: InstallmentStatus = Field(default=InstallmentStatus.PENDING)
    paid_date: Optional[date] = None
