from pydantic import BaseModel
from typing import List
from uuid import UUID
from datetime import datetime

from clinihof.db.models.collaborator import CommissionType

class CommissionItem(BaseModel):
    id: UUID
    sale_date: datetime
    patient_name: str
    sale_value: float
    seller_id: UUID
    seller_name: str
    commission_type: CommissionType
    commission_rate: float
    commission_amount: float

class SellerTotal(BaseModel):
    seller_id: UUID
    name: str
    total_sales: float
    total_commission: float
    sales_count: int

class CommissionSummary(BaseModel):
    total_sales_value: float
    total_commission: float
    sales_count: int

class CommissionReport(BaseModel):
    commissions: List[CommissionItem]
    seller_totals: List[SellerTotal]
    summary: CommissionSummary
