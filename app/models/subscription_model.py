# app/models/subscription_model.py
import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, CheckConstraint, func
from sqlalchemy.orm import relationship

from .base import Base


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class VendorPlanSubscription(Base):
    __tablename__ = 'vendor_plan_subscriptions'
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_vendor_plan_subscriptions_period"),
        Index("ix_vendor_plan_subscriptions_status_end", "status", "end_date"),
        Index("ix_vendor_plan_subscriptions_vendor_status", "vendor_id", "status"),
    )
    id = Column(Integer, primary_key=True, index=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id'), nullable=False)
    plan_id = Column(Integer, ForeignKey('vendor_plans.id'), nullable=False)

    # ACTIVE -> EXPIRED, EXPIRED is terminal
    status = Column(String, default=SubscriptionStatus.ACTIVE.value, nullable=False)

    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    plan_duration_days = Column(Integer, nullable=True)
    auto_renewal_enabled = Column(Boolean, default=False, nullable=False)

    renewal_notification_sent = Column(Boolean, default=False, nullable=False)
    renewal_notification_sent_at = Column(DateTime, nullable=True)
    # Lease taken by a reminder pass before it talks to the gateway
    renewal_claimed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    vendor = relationship("Vendor", back_populates="subscriptions")
    plan = relationship("VendorPlan")
