"""
Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class InvitationStatus(str, Enum):
    """Invitation lifecycle status"""

    pending = "pending"
    redeemed = "redeemed"
    revoked = "revoked"
    expired = "expired"


class InvitationRole(str, Enum):
    """Role granted to the holder of a redeemed invitation"""

    member = "member"
    superuser = "superuser"


class RetentionPurpose(str, Enum):
    """Legal basis for holding a personal-data-bearing record"""

    onboarding = "onboarding"
    offboarding = "offboarding"
    access_grant = "access_grant"
    demo_request = "demo_request"


class DeliveryStatus(str, Enum):
    """Invitation delivery state"""

    pending = "pending"
    sent = "sent"
    retry_scheduled = "retry_scheduled"
    failed = "failed"


class TransactionKind(str, Enum):
    """Credit ledger transaction kind"""

    purchase = "purchase"
    usage = "usage"
    adjustment = "adjustment"


class PricingTier(str, Enum):
    """Bulk purchase pricing tier"""

    individual = "individual"
    bulk_tier_1 = "bulk_tier_1"
    bulk_tier_2 = "bulk_tier_2"


class WorkflowKind(str, Enum):
    """HR lifecycle workflow kind"""

    onboarding = "onboarding"
    offboarding = "offboarding"


class WorkflowStatus(str, Enum):
    """Workflow status"""

    draft = "draft"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class BalanceStatus(str, Enum):
    """Available credits against the alert thresholds"""

    healthy = "healthy"
    low = "low"
    critical = "critical"
