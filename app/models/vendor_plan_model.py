# app/models/vendor_plan_model.py
from sqlalchemy import Column, Integer, String, Boolean, Index, DateTime, func
from .base import Base

class VendorPlan(Base):
    __tablename__ = 'vendor_plans'
    __table_args__ = (
        Index("ix_vendor_plans_is_active", "is_active"),
    )
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    price = Column(Integer, nullable=False, default=0)
    duration_days = Column(Integer, nullable=False, default=365)
    # Entitlements copied into vendor_lead_quota by the purchase flow
    daily_limit = Column(Integer, nullable=False, default=0)
    weekly_limit = Column(Integer, nullable=False, default=0)
    yearly_limit = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
