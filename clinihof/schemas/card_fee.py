from pydantic import BaseModel, ConfigDict, Field
from typing import List
from uuid import UUID

from clinihof.db.models.card_fee_rule import CardType
from clinihof.schemas.cost import CostResponse

class CardFeeInstallment(BaseModel):
    count: int = Field(ge=1)
    fee_percentage: float = Field(ge=0)

class CardFeeGroupCreate(BaseModel):
    card_operator: str = Field(min_length=1)
    card_type: CardType
    receiving_days: int = Field(default=30, ge=0)
    installments: List[CardFeeInstallment] = Field(min_length=1)

class CardFeeRuleResponse(BaseModel):
    id: UUID
    card_operator: str
    card_type: CardType
    installment_count: int
    fee_percentage: float
    receiving_days: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

class CardFeeOverview(BaseModel):
    rules: List[CardFeeRuleResponse]
    card_costs: List[CostResponse]

class CardFeeGroupResult(BaseModel):
    message: str
    rules: List[CardFeeRuleResponse]
