from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime, date

from clinihof.db.models.quote import QuoteStatus
from clinihof.schemas.sale import SaleResponse

class QuoteItemIn(BaseModel):
    procedure_id: Optional[UUID] = None
    description: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    unit_price: float = Field(ge=0)

class QuoteCreate(BaseModel):
    patient_id: UUID
    collaborator_id: Optional[UUID] = None
    title: str = Field(min_length=1)
    items: List[QuoteItemIn] = Field(min_length=1)
    discount_percent: float = Field(default=0, ge=0, le=100)
    discount_amount: float = Field(default=0, ge=0)
    notes: Optional[str] = None
    lead_source: Optional[str] = None
    expiration_date: Optional[date] = None

class QuoteUpdate(BaseModel):
    collaborator_id: Optional[UUID] = None
    title: Optional[str] = Field(default=None, min_length=1)
    status: Optional[QuoteStatus] = None
    items: Optional[List[QuoteItemIn]] = Field(default=None, min_length=1)
    discount_percent: Optional[float] = Field(default=None, ge=0, le=100)
    discount_amount: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    lead_source: Optional[str] = None
    expiration_date: Optional[date] = None

class QuoteItemResponse(BaseModel):
    id: UUID
    procedure_id: Optional[UUID]
    description: str
    quantity: int
    unit_price: float
    total_price: float

    model_config = ConfigDict(from_attributes=True)

class QuoteResponse(BaseModel):
    id: UUID
    workspace_id: UUID
    patient_id: UUID
    patient_name: str
    collaborator_id: Optional[UUID]
    title: str
    status: QuoteStatus
    total_amount: float
    discount_percent: float
    discount_amount: float
    final_amount: float
    notes: Optional[str]
    lead_source: Optional[str]
    expiration_date: Optional[date]
    sent_date: Optional[datetime]
    accepted_date: Optional[datetime]
    rejected_date: Optional[datetime]
    sale_id: Optional[UUID]
    created_at: datetime
    items: List[QuoteItemResponse]

class QuoteConvert(BaseModel):
    payment_method: Optional[str] = None
    sale_date: Optional[datetime] = None
    notes: Optional[str] = None

class QuoteConvertResult(BaseModel):
    message: str
    quote: QuoteResponse
    sale: SaleResponse
    sessions_created: int

class LeadSourceStats(BaseModel):
    source: str
    count: int
    value: float
    accepted: int

class QuoteValues(BaseModel):
    total: float
    accepted: float
    pending: float
    lost: float

class QuoteStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    conversion_rate: float
    values: QuoteValues
    lead_sources: List[LeadSourceStats]
    avg_response_time_days: float
