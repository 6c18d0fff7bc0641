from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

class SupplyBase(BaseModel):
    name: str = Field(min_length=1)
    unit: str = Field(min_length=1)
    cost_per_unit: float = Field(default=0, ge=0)
    stock_qty: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)

class SupplyCreate(SupplyBase):
    pass

class SupplyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    unit: Optional[str] = Field(default=None, min_length=1)
    cost_per_unit: Optional[float] = Field(default=None, ge=0)
    stock_qty: Optional[int] = Field(default=None, ge=0)
    min_stock: Optional[int] = Field(default=None, ge=0)

class SupplyResponse(SupplyBase):
    id: UUID
    workspace_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class SupplyStats(BaseModel):
    total_supplies: int
    total_inventory_value: float
    low_stock_items: int
    out_of_stock_items: int
