from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict
from uuid import UUID
from datetime import datetime, date

from clinihof.db.models.cost import (
    CostCategory,
    CostType,
    InstallmentStatus,
    RecurrenceFrequency,
    RecurrenceType,
)

class CostCreate(BaseModel):
    description: str
    cost_type: CostType
    category: CostCategory = CostCategory.OPERATIONAL
    custom_category: Optional[str] = None
    fixed_value: Optional[float] = None
    percentage: Optional[float] = None
    payment_date: Optional[date] = None
    card_operator: Optional[str] = None
    receiving_days: Optional[int] = None
    is_recurring: bool = False
    recurrence_frequency: Optional[RecurrenceFrequency] = None
    next_recurrence_date: Optional[date] = None
    recurrence_type: RecurrenceType = RecurrenceType.INDEFINITE
    total_installments: Optional[int] = None

class CostUpdate(BaseModel):
    description: Optional[str] = None
    cost_type: Optional[CostType] = None
    category: Optional[CostCategory] = None
    custom_category: Optional[str] = None
    fixed_value: Optional[float] = None
    percentage: Optional[float] = None
    payment_date: Optional[date] = None
    card_operator: Optional[str] = None
    receiving_days: Optional[int] = None
    is_active: Optional[bool] = None
    is_recurring: Optional[bool] = None
    recurrence_frequency: Optional[RecurrenceFrequency] = None
    next_recurrence_date: Optional[date] = None
    recurrence_type: Optional[RecurrenceType] = None
    total_installments: Optional[int] = None

class CostResponse(BaseModel):
    id: UUID
    workspace_id: UUID
    description: str
    category: CostCategory
    custom_category: Optional[str]
    cost_type: CostType
    fixed_value: Optional[float]
    percentage: Optional[float]
    payment_date: Optional[date]
    card_operator: Optional[str]
    receiving_days: Optional[int]
    is_active: bool
    is_recurring: bool
    recurrence_frequency: Optional[RecurrenceFrequency]
    next_recurrence_date: Optional[date]
    recurrence_type: RecurrenceType
    total_installments: Optional[int]
    source_cost_id: Optional[UUID]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CostInstallmentResponse(BaseModel):
    id: UUID
    cost_id: UUID
    installment_number: int
    amount: float
    due_date: date
    status: InstallmentStatus
    paid_date: Optional[date]

    model_config = ConfigDict(from_attributes=True)

class CostStats(BaseModel):
    total_fixed: float
    total_percentage: float
    count: int
    by_category: Dict[str, float]

class ReplicatedCost(BaseModel):
    original_id: UUID
    new_id: UUID
    description: str
    amount: Optional[float]
    next_date: date

class ReplicationFailure(BaseModel):
    original_id: UUID
    description: str
    error: str

class RecurrenceProcessResult(BaseModel):
    message: str
    processed_count: int
    details: List[ReplicatedCost] = []
    failures: List[ReplicationFailure] = []

class RecurrencePending(BaseModel):
    pending: List[CostResponse]
    pending_count: int
    upcoming: List[CostResponse]
    upcoming_count: int
    all_recurring: List[CostResponse]
    total_recurring: int
