from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from celery import Celery

from app.core.celery_app import (
    LifecycleSchedule,
    celery_app,
    lifecycle_schedule,
    RENEWAL_REMINDER_TASK,
    EXPIRATION_TASK,
    QUOTA_REPAIR_TASK,
)
from app.schemas.subscription_schema import PassReport
from app.tasks import subscription_tasks


def make_report(name: str) -> PassReport:
    return PassReport(pass_name=name, started_at=datetime(2026, 10, 19, 3, 0), candidates=2, transitioned=2)


@pytest.fixture
def mock_db_manager():
    with patch("app.tasks.subscription_tasks.db_manager") as mock:
        mock.engine.dispose = AsyncMock()
        yield mock


def test_default_schedule_fires_reminders_at_two_and_expiry_at_three_utc():
    schedule = celery_app.conf.beat_schedule

    reminders = schedule["send-renewal-reminders-daily"]
    expiry = schedule["expire-subscriptions-daily"]
    repair = schedule["repair-expired-quotas-daily"]

    assert reminders["task"] == RENEWAL_REMINDER_TASK
    assert reminders["schedule"].hour == {2}
    assert reminders["schedule"].minute == {0}
    assert expiry["task"] == EXPIRATION_TASK
    assert expiry["schedule"].hour == {3}
    assert expiry["schedule"].minute == {0}
    assert repair["task"] == QUOTA_REPAIR_TASK
    assert repair["schedule"].minute == {30}
    assert celery_app.conf.timezone == "UTC"
    assert lifecycle_schedule.installed


def test_schedule_install_and_uninstall():
    app = Celery("test-lifecycle")
    app.conf.beat_schedule = {"unrelated": {"task": "tasks.other", "schedule": 60}}
    schedule = LifecycleSchedule(reminder_at=(5, 15))

    schedule.install(app)
    schedule.install(app)
    assert set(app.conf.beat_schedule) == {
        "unrelated",
        "send-renewal-reminders-daily",
        "expire-subscriptions-daily",
        "repair-expired-quotas-daily",
    }
    assert app.conf.beat_schedule["send-renewal-reminders-daily"]["schedule"].minute == {15}

    schedule.uninstall()
    assert set(app.conf.beat_schedule) == {"unrelated"}
    assert not schedule.installed


def test_renewal_task_runs_reminder_pass(mock_db_manager):
    engine = MagicMock()
    engine.run_renewal_reminder_pass = AsyncMock(return_value=make_report("renewal_reminder"))

    with patch("app.tasks.subscription_tasks.build_engine", return_value=engine):
        result = subscription_tasks.send_renewal_reminders.run()

    engine.run_renewal_reminder_pass.assert_awaited_once()
    assert result["pass_name"] == "renewal_reminder"
    assert result["transitioned"] == 2
    mock_db_manager.engine.dispose.assert_awaited_once()


def test_expiration_task_runs_expiration_pass(mock_db_manager):
    engine = MagicMock()
    engine.run_expiration_pass = AsyncMock(return_value=make_report("expiration"))

    with patch("app.tasks.subscription_tasks.build_engine", return_value=engine):
        result = subscription_tasks.expire_subscriptions.run()

    engine.run_expiration_pass.assert_awaited_once()
    assert result["pass_name"] == "expiration"


def test_quota_repair_task_runs_repair_pass(mock_db_manager):
    engine = MagicMock()
    engine.run_quota_repair_pass = AsyncMock(return_value=make_report("quota_repair"))

    with patch("app.tasks.subscription_tasks.build_engine", return_value=engine):
        result = subscription_tasks.repair_expired_quotas.run()

    assert result["pass_name"] == "quota_repair"


def test_failing_pass_is_logged_and_swallowed(mock_db_manager):
    engine = MagicMock()
    engine.run_expiration_pass = AsyncMock(side_effect=RuntimeError("database unreachable"))

    with patch("app.tasks.subscription_tasks.build_engine", return_value=engine), \
         patch("app.tasks.subscription_tasks.logger") as mock_logger:
        result = subscription_tasks.expire_subscriptions.run()

    assert result is None
    mock_logger.exception.assert_called_once()
    mock_db_manager.engine.dispose.assert_awaited_once()


def test_build_engine_uses_brevo_gateway():
    from app.services.notification_gateway import BrevoNotificationGateway

    engine = subscription_tasks.build_engine()

    assert isinstance(engine.gateway, BrevoNotificationGateway)
