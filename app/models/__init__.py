from .vendor_model import Vendor
from .vendor_plan_model import VendorPlan
from .subscription_model import VendorPlanSubscription, SubscriptionStatus
from .lead_quota_model import VendorLeadQuota

__all__ = [
    "Vendor",
    "VendorPlan",
    "VendorPlanSubscription",
    "SubscriptionStatus",
    "VendorLeadQuota",
]
