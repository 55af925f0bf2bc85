# app/tasks/subscription_tasks.py
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from app.core.celery_app import celery_app, RENEWAL_REMINDER_TASK, EXPIRATION_TASK, QUOTA_REPAIR_TASK
from app.core.config import settings
from app.core.database import db_manager
from app.schemas.subscription_schema import PassReport
from app.services.notification_gateway import BrevoNotificationGateway
from app.services.reconciliation_engine import ReconciliationEngine

logger = logging.getLogger(__name__)

# Hard ceiling for the worker; the engine's own pass timeout fires first.
TASK_SOFT_TIME_LIMIT = int(settings.LIFECYCLE_PASS_TIMEOUT_SECONDS) + 300


def build_engine() -> ReconciliationEngine:
    return ReconciliationEngine(gateway=BrevoNotificationGateway())


def run_lifecycle_pass(runner: Callable[[ReconciliationEngine], Awaitable[PassReport]]) -> Optional[dict]:
    """
    Runs one pass to completion on a fresh event loop.

    A failing pass is logged and swallowed so the next beat trigger runs normally.
    """
    async def _main() -> PassReport:
        try:
            return await runner(build_engine())
        finally:
            # Pooled connections are bound to this loop; drop them before it closes.
            await db_manager.engine.dispose()

    try:
        report = asyncio.run(_main())
    except Exception as e:
        logger.exception("Subscription lifecycle pass failed: %s", e)
        return None
    return report.model_dump(mode="json")


@celery_app.task(name=RENEWAL_REMINDER_TASK, soft_time_limit=TASK_SOFT_TIME_LIMIT)
def send_renewal_reminders():
    """
    Reminds vendors whose ACTIVE subscription ends within the reminder window.
    """
    logger.info("Running periodic task: renewal reminders")
    return run_lifecycle_pass(lambda engine: engine.run_renewal_reminder_pass())


@celery_app.task(name=EXPIRATION_TASK, soft_time_limit=TASK_SOFT_TIME_LIMIT)
def expire_subscriptions():
    """
    Marks past-due subscriptions EXPIRED, revokes lead quota and warns the vendor.
    """
    logger.info("Running periodic task: subscription expiry")
    return run_lifecycle_pass(lambda engine: engine.run_expiration_pass())


@celery_app.task(name=QUOTA_REPAIR_TASK, soft_time_limit=TASK_SOFT_TIME_LIMIT)
def repair_expired_quotas():
    logger.info("Running periodic task: expired quota repair")
    return run_lifecycle_pass(lambda engine: engine.run_quota_repair_pass())
