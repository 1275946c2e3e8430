"""
Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    BalanceStatus,
    DeliveryStatus,
    InvitationRole,
    InvitationStatus,
    PricingTier,
    RetentionPurpose,
    TransactionKind,
    WorkflowKind,
    WorkflowStatus,
)

# Export all entities
from .audit_event import AuditEvent
from .credit_balance import CreditBalance
from .credit_transaction import CreditTransaction
from .invitation_record import InvitationRecord
from .workflow import WorkflowInstance

__all__ = [
    # Enums
    "BalanceStatus",
    "DeliveryStatus",
    "InvitationRole",
    "InvitationStatus",
    "PricingTier",
    "RetentionPurpose",
    "TransactionKind",
    "WorkflowKind",
    "WorkflowStatus",
    # Entities
    "AuditEvent",
    "CreditBalance",
    "CreditTransaction",
    "InvitationRecord",
    "WorkflowInstance",
]
