# app/schemas/subscription_schema.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

DEFAULT_PLAN_NAME = "Your subscription"


class ReminderMessage(BaseModel):
    """Renewal reminder sent while the subscription is still active."""
    subscription_id: Optional[int] = None
    vendor_id: int
    plan_name: str = DEFAULT_PLAN_NAME
    expiry_date: datetime


class WarningMessage(BaseModel):
    """Expiration warning sent once the subscription has been marked EXPIRED."""
    subscription_id: Optional[int] = None
    vendor_id: int
    plan_name: str = DEFAULT_PLAN_NAME


class SubscriptionCandidate(BaseModel):
    id: int
    vendor_id: int
    plan_id: int
    plan_name: str = DEFAULT_PLAN_NAME
    end_date: datetime
    renewal_notification_sent: bool = False

    class Config:
        from_attributes = True


class ExpirationSummary(BaseModel):
    expiring_in_7_days: int = 0
    expiring_in_30_days: int = 0
    already_expired: int = 0


class PassReport(BaseModel):
    pass_name: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    candidates: int = 0
    transitioned: int = 0
    notified: int = 0
    skipped: int = 0
    failed: int = 0
    quota_resets: int = 0
    notification_failures: int = 0
    timed_out: bool = False
    failed_subscription_ids: List[int] = Field(default_factory=list)
