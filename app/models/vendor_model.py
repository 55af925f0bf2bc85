# app/models/vendor_model.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship

from .base import Base


class Vendor(Base):
    __tablename__ = "vendors"
    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String(150), nullable=False)
    email = Column(String(150), nullable=True)
    phone = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    subscriptions = relationship("VendorPlanSubscription", back_populates="vendor")
    lead_quota = relationship("VendorLeadQuota", back_populates="vendor", uselist=False)
