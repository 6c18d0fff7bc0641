from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime

class PackageItemIn(BaseModel):
    procedure_id: UUID
    quantity: int = Field(default=1, ge=1)

class PackageCreate(BaseModel):
    name: str = Field(min_length=1)
    final_price: float = Field(ge=0)
    discount_percent: float = Field(default=0, ge=0, le=100)
    items: List[PackageItemIn] = Field(min_length=1)

class PackageUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    final_price: Optional[float] = Field(default=None, ge=0)
    discount_percent: Optional[float] = Field(default=None, ge=0, le=100)
    items: Optional[List[PackageItemIn]] = Field(default=None, min_length=1)

class PackageItemResponse(BaseModel):
    id: UUID
    procedure_id: UUID
    procedure_name: str
    unit_price: float
    quantity: int

class PackageResponse(BaseModel):
    id: UUID
    workspace_id: UUID
    name: str
    final_price: float
    discount_percent: float
    is_active: bool
    created_at: datetime
    # Catalogue price of the items before the package discount
    total_value: float
    items: List[PackageItemResponse]
