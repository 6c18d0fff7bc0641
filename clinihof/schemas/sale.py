from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime

class SaleCreate(BaseModel):
    patient_id: UUID
    seller_id: Optional[UUID] = None
    total_amount: float = Field(gt=0)
    payment_method: Optional[str] = None
    sale_date: Optional[datetime] = None
    notes: Optional[str] = None
    # One PENDING session is opened per listed procedure
    procedure_ids: List[UUID] = []

class SaleResponse(BaseModel):
    id: UUID
    workspace_id: UUID
    patient_id: UUID
    seller_id: Optional[UUID]
    total_amount: float
    payment_method: Optional[str]
    sale_date: datetime
    notes: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class DashboardStats(BaseModel):
    patients: int
    sales_count: int
    monthly_revenue: float
    total_revenue: float
    pending_sessions: int
    monthly_fixed_costs: float
