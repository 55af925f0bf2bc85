# app/repository/subscription_repository.py
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, or_, and_, update, exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models import VendorPlanSubscription, VendorPlan, VendorLeadQuota, SubscriptionStatus
from app.models.lead_quota_model import QUOTA_COUNTER_FIELDS
from app.repository.base_repository import BaseRepository
from app.schemas.subscription_schema import SubscriptionCandidate, DEFAULT_PLAN_NAME

ACTIVE = SubscriptionStatus.ACTIVE.value
EXPIRED = SubscriptionStatus.EXPIRED.value


class SubscriptionRepository(BaseRepository[VendorPlanSubscription]):
    """
    Access to vendor_plan_subscriptions.

    Every state change is a conditional UPDATE guarded by the expected prior
    value; the returned rowcount tells the caller whether it won the row.
    """

    def __init__(self):
        super().__init__(VendorPlanSubscription)

    def _candidate_query(self):
        return (
            select(
                self.model.id,
                self.model.vendor_id,
                self.model.plan_id,
                self.model.end_date,
                self.model.renewal_notification_sent,
                VendorPlan.name.label("plan_name"),
            )
            .outerjoin(VendorPlan, VendorPlan.id == self.model.plan_id)
            .order_by(self.model.end_date.asc(), self.model.id.asc())
        )

    @staticmethod
    def _to_candidates(rows) -> List[SubscriptionCandidate]:
        return [
            SubscriptionCandidate(
                id=row.id,
                vendor_id=row.vendor_id,
                plan_id=row.plan_id,
                plan_name=row.plan_name or DEFAULT_PLAN_NAME,
                end_date=row.end_date,
                renewal_notification_sent=bool(row.renewal_notification_sent),
            )
            for row in rows
        ]

    async def get_reminder_candidates(
        self,
        db: AsyncSession,
        now: datetime,
        window_start: timedelta = timedelta(days=1),
        window_end: timedelta = timedelta(days=7),
    ) -> List[SubscriptionCandidate]:
        """ACTIVE, not yet reminded, ending inside [now + start, now + end], both edges included."""
        stmt = self._candidate_query().where(
            self.model.status == ACTIVE,
            self.model.renewal_notification_sent.is_(False),
            self.model.end_date >= now + window_start,
            self.model.end_date <= now + window_end,
        )
        result = await db.execute(stmt)
        return self._to_candidates(result.all())

    async def get_expired_candidates(self, db: AsyncSession, now: datetime) -> List[SubscriptionCandidate]:
        stmt = self._candidate_query().where(
            self.model.status == ACTIVE,
            self.model.end_date < now,
        )
        result = await db.execute(stmt)
        return self._to_candidates(result.all())

    async def _conditional_update(self, db: AsyncSession, *conditions, **values) -> bool:
        stmt = (
            update(self.model)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    async def claim_renewal_reminder(
        self, db: AsyncSession, subscription_id: int, end_date: datetime, now: datetime, lease: timedelta
    ) -> bool:
        """
        Take the reminder lease for the term ending at ``end_date``.

        False means another pass holds it, the flag is already set, or the term
        was renewed after the row was selected.
        """
        return await self._conditional_update(
            db,
            self.model.id == subscription_id,
            self.model.end_date == end_date,
            self.model.status == ACTIVE,
            self.model.renewal_notification_sent.is_(False),
            or_(
                self.model.renewal_claimed_at.is_(None),
                self.model.renewal_claimed_at < now - lease,
            ),
            renewal_claimed_at=now,
        )

    async def mark_renewal_notified(self, db: AsyncSession, subscription_id: int, now: datetime) -> bool:
        return await self._conditional_update(
            db,
            self.model.id == subscription_id,
            self.model.renewal_notification_sent.is_(False),
            renewal_notification_sent=True,
            renewal_notification_sent_at=now,
            renewal_claimed_at=None,
            updated_at=now,
        )

    async def release_renewal_claim(self, db: AsyncSession, subscription_id: int, claimed_at: datetime) -> bool:
        """Drop our own lease so the next pass can retry; leaves a newer claim untouched."""
        return await self._conditional_update(
            db,
            self.model.id == subscription_id,
            self.model.renewal_notification_sent.is_(False),
            self.model.renewal_claimed_at == claimed_at,
            renewal_claimed_at=None,
        )

    async def mark_expired(self, db: AsyncSession, subscription_id: int, now: datetime) -> bool:
        """Flip to EXPIRED only while the row is still ACTIVE and past its end_date."""
        return await self._conditional_update(
            db,
            self.model.id == subscription_id,
            self.model.status == ACTIVE,
            self.model.end_date < now,
            status=EXPIRED,
            updated_at=now,
        )

    async def has_other_active_subscription(
        self, db: AsyncSession, vendor_id: int, exclude_subscription_id: int, now: datetime
    ) -> bool:
        stmt = select(func.count(self.model.id)).where(
            self.model.vendor_id == vendor_id,
            self.model.id != exclude_subscription_id,
            self.model.status == ACTIVE,
            self.model.end_date >= now,
        )
        return (await db.scalar(stmt) or 0) > 0

    async def count_expiring_between(self, db: AsyncSession, start: datetime, end: datetime) -> int:
        stmt = select(func.count(self.model.id)).where(
            self.model.status == ACTIVE,
            self.model.end_date >= start,
            self.model.end_date <= end,
        )
        return await db.scalar(stmt) or 0

    async def count_by_status(self, db: AsyncSession, status: SubscriptionStatus) -> int:
        stmt = select(func.count(self.model.id)).where(self.model.status == status.value)
        return await db.scalar(stmt) or 0

    async def get_vendors_needing_quota_repair(self, db: AsyncSession, limit: int = 500) -> List[int]:
        """Vendors with an EXPIRED subscription, no ACTIVE one, and quota counters left above zero."""
        other = VendorPlanSubscription.__table__.alias("other_subscription")
        nonzero_quota = or_(*[getattr(VendorLeadQuota, field) != 0 for field in QUOTA_COUNTER_FIELDS])
        stmt = (
            select(VendorLeadQuota.vendor_id)
            .where(
                nonzero_quota,
                exists().where(
                    and_(self.model.vendor_id == VendorLeadQuota.vendor_id, self.model.status == EXPIRED)
                ),
                ~exists().where(
                    and_(other.c.vendor_id == VendorLeadQuota.vendor_id, other.c.status == ACTIVE)
                ),
            )
            .order_by(VendorLeadQuota.vendor_id)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def extend_term(
        self, db: AsyncSession, subscription_id: int, new_end_date: datetime, now: datetime
    ) -> Optional[VendorPlanSubscription]:
        """
        Renewal of a still-ACTIVE subscription: push end_date forward and start a
        fresh reminder lifetime. EXPIRED rows are never revived; returns None for them.
        """
        subscription = await self.get(db, subscription_id)
        if not subscription or subscription.status != ACTIVE:
            return None
        if new_end_date <= subscription.end_date:
            raise ValueError("new_end_date must be later than the current end_date")

        renewed = await self._conditional_update(
            db,
            self.model.id == subscription_id,
            self.model.status == ACTIVE,
            self.model.end_date == subscription.end_date,
            end_date=new_end_date,
            renewal_notification_sent=False,
            renewal_notification_sent_at=None,
            renewal_claimed_at=None,
            updated_at=now,
        )
        if not renewed:
            return None
        await db.refresh(subscription)
        return subscription


subscription_repository = SubscriptionRepository()
