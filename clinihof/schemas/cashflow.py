from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import date

class ReceivableItem(BaseModel):
    id: UUID
    date: date
    amount: float
    patient_name: str
    payment_method: Optional[str] = None

class ExpenseItem(BaseModel):
    id: UUID
    date: date
    amount: float
    description: str
    category: str
    is_recurring: bool

class DailyCashFlow(BaseModel):
    date: date
    receivables: float
    expenses: float
    net_flow: float

class CashFlowSummary(BaseModel):
    total_receivables: float
    total_expenses: float
    net_cash_flow: float

class CashFlowReport(BaseModel):
    start_date: date
    end_date: date
    receivables: List[ReceivableItem]
    expenses: List[ExpenseItem]
    daily: List[DailyCashFlow]
    summary: CashFlowSummary
