# app/repository/lead_quota_repository.py
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models import VendorLeadQuota
from app.models.lead_quota_model import QUOTA_COUNTER_FIELDS

logger = logging.getLogger(__name__)


class LeadQuotaRepository:
    async def get_by_vendor(self, db: AsyncSession, vendor_id: int) -> Optional[VendorLeadQuota]:
        result = await db.execute(select(VendorLeadQuota).where(VendorLeadQuota.vendor_id == vendor_id))
        return result.scalars().first()

    async def reset_quota_on_expiry(self, db: AsyncSession, vendor_id: int, now: datetime) -> bool:
        """
        Hard stop on expiry: zero every used and limit counter for the vendor.

        Idempotent. A vendor without a quota row has nothing to revoke, which
        counts as success. Datastore errors are logged and reported as False.
        """
        values = {field: 0 for field in QUOTA_COUNTER_FIELDS}
        values["updated_at"] = now
        stmt = (
            update(VendorLeadQuota)
            .where(VendorLeadQuota.vendor_id == vendor_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Error resetting lead quota for vendor %s: %s", vendor_id, e)
            return False

        if result.rowcount == 0:
            logger.info("Vendor %s has no lead quota row; nothing to reset", vendor_id)
        else:
            logger.info("Lead quota reset for vendor %s", vendor_id)
        return True


lead_quota_repository = LeadQuotaRepository()
