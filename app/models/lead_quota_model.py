# app/models/lead_quota_model.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from .base import Base

QUOTA_COUNTER_FIELDS = (
    "daily_used",
    "daily_limit",
    "weekly_used",
    "weekly_limit",
    "yearly_used",
    "yearly_limit",
)


class VendorLeadQuota(Base):
    __tablename__ = "vendor_lead_quota"

    id = Column(Integer, primary_key=True, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, unique=True, index=True)
    plan_id = Column(Integer, ForeignKey("vendor_plans.id"), nullable=True)

    daily_used = Column(Integer, nullable=False, default=0)
    daily_limit = Column(Integer, nullable=False, default=0)
    weekly_used = Column(Integer, nullable=False, default=0)
    weekly_limit = Column(Integer, nullable=False, default=0)
    yearly_used = Column(Integer, nullable=False, default=0)
    yearly_limit = Column(Integer, nullable=False, default=0)

    last_reset_date = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, server_default=func.now())

    vendor = relationship("Vendor", back_populates="lead_quota")

    def is_zeroed(self) -> bool:
        return all((getattr(self, field) or 0) == 0 for field in QUOTA_COUNTER_FIELDS)
