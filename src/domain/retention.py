"""Retention periods per legal basis."""

from datetime import datetime, timedelta

from src.domain.entities.enums import RetentionPurpose

RETENTION_PERIODS = {
    RetentionPurpose.onboarding: timedelta(days=90),
    RetentionPurpose.offboarding: timedelta(days=90),
    RetentionPurpose.access_grant: timedelta(days=30),
    RetentionPurpose.demo_request: timedelta(days=90),
}


def compute_auto_delete_at(
    purpose: RetentionPurpose, created_at: datetime, expires_at: datetime
) -> datetime:
    """Records are never purged before their token could have expired."""
    return max(expires_at, created_at + RETENTION_PERIODS[purpose])
