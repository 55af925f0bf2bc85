from datetime import datetime

from app.models import VendorLeadQuota, VendorPlanSubscription, SubscriptionStatus
from app.models.lead_quota_model import QUOTA_COUNTER_FIELDS
from app.schemas.subscription_schema import ReminderMessage, WarningMessage, PassReport


def test_subscription_model():
    subscription = VendorPlanSubscription(
        vendor_id=1,
        plan_id=2,
        status=SubscriptionStatus.ACTIVE.value,
        start_date=datetime(2025, 10, 19),
        end_date=datetime(2026, 10, 19),
        renewal_notification_sent=False,
    )

    assert subscription.vendor_id == 1
    assert subscription.status == "ACTIVE"
    assert subscription.renewal_notification_sent is False
    assert subscription.renewal_claimed_at is None


def test_lead_quota_is_zeroed():
    quota = VendorLeadQuota(vendor_id=1, **{field: 0 for field in QUOTA_COUNTER_FIELDS})
    assert quota.is_zeroed()

    quota.weekly_limit = 20
    assert not quota.is_zeroed()


def test_quota_counter_fields_cover_all_periods():
    assert QUOTA_COUNTER_FIELDS == (
        "daily_used",
        "daily_limit",
        "weekly_used",
        "weekly_limit",
        "yearly_used",
        "yearly_limit",
    )


def test_message_schemas_default_plan_name():
    reminder = ReminderMessage(vendor_id=1, expiry_date=datetime(2026, 10, 25))
    warning = WarningMessage(vendor_id=1)

    assert reminder.plan_name == "Your subscription"
    assert warning.plan_name == "Your subscription"


def test_pass_report_defaults():
    report = PassReport(pass_name="expiration", started_at=datetime(2026, 10, 19, 3))

    assert report.failed == 0
    assert report.failed_subscription_ids == []
    assert report.timed_out is False
