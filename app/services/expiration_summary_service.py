# app/services/expiration_summary_service.py
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import SubscriptionStatus
from app.repository.subscription_repository import subscription_repository
from app.schemas.subscription_schema import ExpirationSummary
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)


class ExpirationSummaryService:
    """Read-only counts for the admin dashboard. Never raises: errors yield zeroed counts."""

    async def get_expiration_summary(self, db: AsyncSession, now: Optional[datetime] = None) -> ExpirationSummary:
        now = now or utc_now()
        try:
            expiring_in_7_days = await subscription_repository.count_expiring_between(
                db, now, now + timedelta(days=7)
            )
            expiring_in_30_days = await subscription_repository.count_expiring_between(
                db, now, now + timedelta(days=30)
            )
            already_expired = await subscription_repository.count_by_status(db, SubscriptionStatus.EXPIRED)
        except Exception as e:
            logger.error("Error getting subscription expiration summary: %s", e)
            return ExpirationSummary()

        return ExpirationSummary(
            expiring_in_7_days=expiring_in_7_days,
            expiring_in_30_days=expiring_in_30_days,
            already_expired=already_expired,
        )


expiration_summary_service = ExpirationSummaryService()
