# app/services/notification_gateway.py
import asyncio
import logging
from typing import Callable, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import db_manager
from app.models import Vendor
from app.repository.vendor_repository import vendor_repository
from app.schemas.subscription_schema import ReminderMessage, WarningMessage
from app.utils.email_sender import send_brevo_email, EmailDeliveryError
from app.utils.sms_sender import send_brevo_sms

logger = logging.getLogger(__name__)


class NotificationGateway(Protocol):
    """Delivery boundary used by the reconciliation engine. Only the boolean outcome matters."""

    async def send_renewal_reminder(self, message: ReminderMessage) -> bool:
        ...

    async def send_expiration_warning(self, message: WarningMessage) -> bool:
        ...


def render_renewal_reminder(message: ReminderMessage, vendor_name: str) -> tuple[str, str, str]:
    expiry = message.expiry_date.strftime("%d %B %Y")
    renew_url = f"{settings.APP_BASE_URL}/vendor/subscriptions"
    subject = f"{message.plan_name} expires on {expiry}"
    html = (
        f"<p>Hello {vendor_name},</p>"
        f"<p>Your <strong>{message.plan_name}</strong> plan expires on <strong>{expiry}</strong>. "
        f"Renew before that date to keep receiving leads.</p>"
        f"<p><a href=\"{renew_url}\">Renew now</a></p>"
    )
    sms = f"{settings.APP_NAME}: your {message.plan_name} plan expires on {expiry}. Renew at {renew_url}"
    return subject, html, sms


def render_expiration_warning(message: WarningMessage, vendor_name: str) -> tuple[str, str, str]:
    renew_url = f"{settings.APP_BASE_URL}/vendor/subscriptions"
    subject = f"{message.plan_name} has expired"
    html = (
        f"<p>Hello {vendor_name},</p>"
        f"<p>Your <strong>{message.plan_name}</strong> plan has expired and lead access is paused.</p>"
        f"<p><a href=\"{renew_url}\">Choose a plan</a> to resume.</p>"
    )
    sms = f"{settings.APP_NAME}: your {message.plan_name} plan has expired. Lead access is paused. {renew_url}"
    return subject, html, sms


class BrevoNotificationGateway:
    """
    Email first, SMS as fallback. Any channel accepting the message counts as delivered.

    Each HTTP call is capped at ``request_timeout``. Both channels together stay
    under the engine's notification timeout, so a send abandoned by the engine
    has normally already failed in its worker thread.
    """

    def __init__(
        self,
        session_factory: Optional[Callable[[], AsyncSession]] = None,
        request_timeout: float = settings.DELIVERY_REQUEST_TIMEOUT_SECONDS,
    ):
        self._session_factory = session_factory or db_manager.async_session_maker
        self.request_timeout = request_timeout

    async def _load_vendor(self, vendor_id: int) -> Optional[Vendor]:
        async with self._session_factory() as db:
            return await vendor_repository.get_vendor(db, vendor_id)

    async def _deliver(self, vendor_id: int, subject: str, html: str, sms: str, vendor: Vendor) -> bool:
        if vendor.email:
            try:
                await send_brevo_email(
                    vendor.email, subject, html, to_name=vendor.company_name, timeout=self.request_timeout
                )
                return True
            except EmailDeliveryError as e:
                logger.warning("Email to vendor %s failed (%s); trying SMS", vendor_id, e.detail)

        if vendor.phone:
            return await asyncio.to_thread(send_brevo_sms, vendor.phone, sms, self.request_timeout)

        logger.error("Vendor %s has no reachable contact channel", vendor_id)
        return False

    async def send_renewal_reminder(self, message: ReminderMessage) -> bool:
        vendor = await self._load_vendor(message.vendor_id)
        if vendor is None:
            logger.error("Cannot send renewal reminder: vendor %s not found", message.vendor_id)
            return False
        subject, html, sms = render_renewal_reminder(message, vendor.company_name)
        return await self._deliver(message.vendor_id, subject, html, sms, vendor)

    async def send_expiration_warning(self, message: WarningMessage) -> bool:
        vendor = await self._load_vendor(message.vendor_id)
        if vendor is None:
            logger.error("Cannot send expiration warning: vendor %s not found", message.vendor_id)
            return False
        subject, html, sms = render_expiration_warning(message, vendor.company_name)
        return await self._deliver(message.vendor_id, subject, html, sms, vendor)
