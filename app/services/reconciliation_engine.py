# app/services/reconciliation_engine.py
"""
Subscription lifecycle reconciliation.

One engine instance runs three kinds of pass against vendor_plan_subscriptions:

* renewal reminders for ACTIVE subscriptions ending inside the reminder window,
* expiry of ACTIVE subscriptions whose end_date has passed (status flip plus
  quota revocation in one transaction, warning sent after commit),
* quota repair for vendors left with nonzero counters after expiry.

Each candidate is handled in its own unit of work. A failure on one candidate
is logged and counted, and the pass moves on. Retries need no queue: a
candidate whose state was left unchanged is selected again by the next pass,
with no backoff, until it drops out of the selection window.
"""
import asyncio
import logging
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from app.core.config import settings
from app.core.uow import UnitOfWork
from app.repository.lead_quota_repository import LeadQuotaRepository, lead_quota_repository
from app.repository.subscription_repository import SubscriptionRepository, subscription_repository
from app.schemas.subscription_schema import (
    PassReport,
    ReminderMessage,
    SubscriptionCandidate,
    WarningMessage,
)
from app.services.notification_gateway import NotificationGateway
from app.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)

RENEWAL_REMINDER_PASS = "renewal_reminder"
EXPIRATION_PASS = "expiration"
QUOTA_REPAIR_PASS = "quota_repair"


class QuotaResetError(Exception):
    """Raised inside a unit of work to roll back a transition whose quota reset failed."""
    def __init__(self, vendor_id: int):
        self.vendor_id = vendor_id
        self.detail = f"Lead quota reset failed for vendor {vendor_id}"
        super().__init__(self.detail)


class ReconciliationEngine:
    def __init__(
        self,
        gateway: NotificationGateway,
        uow: Optional[UnitOfWork] = None,
        clock: Clock = utc_now,
        subscriptions: SubscriptionRepository = subscription_repository,
        quotas: LeadQuotaRepository = lead_quota_repository,
        reminder_window_start: timedelta = timedelta(days=settings.RENEWAL_WINDOW_START_DAYS),
        reminder_window_end: timedelta = timedelta(days=settings.RENEWAL_WINDOW_END_DAYS),
        claim_lease: timedelta = timedelta(hours=settings.RENEWAL_CLAIM_LEASE_HOURS),
        notification_timeout: Optional[float] = settings.NOTIFICATION_TIMEOUT_SECONDS,
        pass_timeout: Optional[float] = settings.LIFECYCLE_PASS_TIMEOUT_SECONDS,
    ):
        self.gateway = gateway
        self.uow = uow or UnitOfWork()
        self.clock = clock
        self.subscriptions = subscriptions
        self.quotas = quotas
        self.reminder_window_start = reminder_window_start
        self.reminder_window_end = reminder_window_end
        self.claim_lease = claim_lease
        self.notification_timeout = notification_timeout
        self.pass_timeout = pass_timeout

    # --- pass entry points ---

    async def run_renewal_reminder_pass(self) -> PassReport:
        return await self._run_pass(RENEWAL_REMINDER_PASS, self._renewal_reminder_pass)

    async def run_expiration_pass(self) -> PassReport:
        return await self._run_pass(EXPIRATION_PASS, self._expiration_pass)

    async def run_quota_repair_pass(self) -> PassReport:
        return await self._run_pass(QUOTA_REPAIR_PASS, self._quota_repair_pass)

    async def _run_pass(self, name: str, body: Callable[[PassReport], Awaitable[None]]) -> PassReport:
        report = PassReport(pass_name=name, started_at=self.clock())
        logger.info("Starting %s pass", name)
        try:
            if self.pass_timeout:
                await asyncio.wait_for(body(report), timeout=self.pass_timeout)
            else:
                await body(report)
        except asyncio.TimeoutError:
            report.timed_out = True
            logger.error(
                "%s pass timed out after %ss; remaining candidates wait for the next run. Failed so far: %s",
                name,
                self.pass_timeout,
                report.failed_subscription_ids,
            )
        report.finished_at = self.clock()
        logger.info(
            "Finished %s pass: candidates=%s transitioned=%s notified=%s skipped=%s failed=%s quota_resets=%s",
            name,
            report.candidates,
            report.transitioned,
            report.notified,
            report.skipped,
            report.failed,
            report.quota_resets,
        )
        return report

    # --- shared helpers ---

    async def _notify(self, send: Callable[[object], Awaitable[bool]], message) -> bool:
        """Gateway call bounded by the notification timeout. Exceptions count as failed delivery."""
        try:
            if self.notification_timeout:
                return bool(await asyncio.wait_for(send(message), timeout=self.notification_timeout))
            return bool(await send(message))
        except asyncio.TimeoutError:
            logger.error("Notification to vendor %s timed out", message.vendor_id)
        except Exception as e:
            logger.error("Notification to vendor %s failed: %s", message.vendor_id, e)
        return False

    @staticmethod
    def _record_failure(report: PassReport, candidate_id: int) -> None:
        report.failed += 1
        report.failed_subscription_ids.append(candidate_id)

    # --- renewal reminders ---

    async def _renewal_reminder_pass(self, report: PassReport) -> None:
        now = self.clock()
        async with self.uow() as db:
            candidates = await self.subscriptions.get_reminder_candidates(
                db, now, self.reminder_window_start, self.reminder_window_end
            )
        report.candidates = len(candidates)
        if not candidates:
            logger.info("No subscriptions inside the renewal reminder window")
            return

        logger.info("Found %s subscriptions inside the renewal reminder window", len(candidates))
        for candidate in candidates:
            try:
                await self._remind(candidate, now, report)
            except Exception as e:
                logger.exception("Renewal reminder for subscription %s failed: %s", candidate.id, e)
                self._record_failure(report, candidate.id)

    async def _remind(self, candidate: SubscriptionCandidate, now, report: PassReport) -> None:
        # Claim before sending so overlapping passes cannot both notify.
        async with self.uow() as db:
            claimed = await self.subscriptions.claim_renewal_reminder(
                db, candidate.id, candidate.end_date, now, self.claim_lease
            )
        if not claimed:
            logger.info("Subscription %s already claimed, reminded or renewed; skipping", candidate.id)
            report.skipped += 1
            return

        message = ReminderMessage(
            subscription_id=candidate.id,
            vendor_id=candidate.vendor_id,
            plan_name=candidate.plan_name,
            expiry_date=candidate.end_date,
        )
        delivered = await self._notify(self.gateway.send_renewal_reminder, message)

        async with self.uow() as db:
            if delivered:
                await self.subscriptions.mark_renewal_notified(db, candidate.id, now)
            else:
                await self.subscriptions.release_renewal_claim(db, candidate.id, now)

        if delivered:
            report.notified += 1
            report.transitioned += 1
            logger.info("Renewal reminder sent for subscription %s (vendor %s)", candidate.id, candidate.vendor_id)
        else:
            report.notification_failures += 1
            self._record_failure(report, candidate.id)
            logger.warning("Renewal reminder for subscription %s not delivered; will retry next pass", candidate.id)

    # --- expiry ---

    async def _expiration_pass(self, report: PassReport) -> None:
        now = self.clock()
        async with self.uow() as db:
            candidates = await self.subscriptions.get_expired_candidates(db, now)
        report.candidates = len(candidates)
        if not candidates:
            logger.info("No expired subscriptions found")
            return

        logger.info("Found %s expired subscriptions", len(candidates))
        for candidate in candidates:
            try:
                await self._expire(candidate, now, report)
            except Exception as e:
                logger.exception("Expiring subscription %s failed: %s", candidate.id, e)
                self._record_failure(report, candidate.id)

    async def _expire(self, candidate: SubscriptionCandidate, now, report: PassReport) -> None:
        quota_reset = False
        async with self.uow() as db:
            if not await self.subscriptions.mark_expired(db, candidate.id, now):
                logger.info("Subscription %s is no longer ACTIVE and past due; skipping", candidate.id)
                report.skipped += 1
                return

            if await self.subscriptions.has_other_active_subscription(db, candidate.vendor_id, candidate.id, now):
                logger.info(
                    "Vendor %s still holds an active subscription; keeping lead quota", candidate.vendor_id
                )
            else:
                if not await self.quotas.reset_quota_on_expiry(db, candidate.vendor_id, now):
                    raise QuotaResetError(candidate.vendor_id)
                quota_reset = True

        report.transitioned += 1
        if quota_reset:
            report.quota_resets += 1
        logger.info("Subscription %s for vendor %s marked EXPIRED", candidate.id, candidate.vendor_id)

        message = WarningMessage(
            subscription_id=candidate.id,
            vendor_id=candidate.vendor_id,
            plan_name=candidate.plan_name,
        )
        try:
            delivered = await self._notify(self.gateway.send_expiration_warning, message)
        except asyncio.CancelledError:
            # Committed but unannounced; no later pass selects this row again.
            report.notification_failures += 1
            self._record_failure(report, candidate.id)
            logger.error("Pass cancelled before the expiration warning for subscription %s was sent", candidate.id)
            raise
        if delivered:
            report.notified += 1
        else:
            report.notification_failures += 1
            logger.warning("Expiration warning for subscription %s not delivered", candidate.id)

    # --- quota repair ---

    async def _quota_repair_pass(self, report: PassReport) -> None:
        now = self.clock()
        async with self.uow() as db:
            vendor_ids = await self.subscriptions.get_vendors_needing_quota_repair(db)
        report.candidates = len(vendor_ids)
        if not vendor_ids:
            logger.info("No expired vendors with leftover lead quota")
            return

        for vendor_id in vendor_ids:
            try:
                async with self.uow() as db:
                    if not await self.quotas.reset_quota_on_expiry(db, vendor_id, now):
                        raise QuotaResetError(vendor_id)
                report.quota_resets += 1
                report.transitioned += 1
            except Exception as e:
                logger.exception("Quota repair for vendor %s failed: %s", vendor_id, e)
                report.failed += 1
