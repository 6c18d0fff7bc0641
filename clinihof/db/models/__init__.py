from sqlmodel import SQLModel
from .user import User, UserRole
from .workspace import Workspace, WorkspaceStatus
from .patient import Patient
from .procedure import Procedure
from .collaborator import Collaborator, CommissionType
from .cost import (
    Cost,
    CostCategory,
    CostInstallment,
    CostType,
    InstallmentStatus,
    RecurrenceFrequency,
    RecurrenceType,
)
from .card_fee_rule import CardFeeRule, CardType
from .supply import Supply
from .package import Package, PackageItem
from .sale import Sale
from .procedure_session import ProcedureSession, SessionStatus
from .quote import Quote, QuoteItem, QuoteStatus
from .audit_log import AuditLog

__all__ = [
    "SQLModel",
    "User",
    "UserRole",
    "Workspace",
    "WorkspaceStatus",
    "Patient",
    "Procedure",
    "Collaborator",
    "CommissionType",
    "Cost",
    "CostCategory",
    "CostInstallment",
    "CostType",
    "InstallmentStatus",
    "RecurrenceFrequency",
    "RecurrenceType",
    "CardFeeRule",
    "CardType",
    "Supply",
    "Package",
    "PackageItem",
    "Sale",
    "ProcedureSession",
    "SessionStatus",
    "Quote",
    "QuoteItem",
    "QuoteStatus",
    "AuditLog",
]
