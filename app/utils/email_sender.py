import asyncio
import logging
import sib_api_v3_sdk
import urllib3
from sib_api_v3_sdk.rest import ApiException

from app.core.config import settings


class EmailDeliveryError(Exception):
    """Raised when Brevo refuses or fails to accept a transactional email."""
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


def _build_transactional_api() -> sib_api_v3_sdk.TransactionalEmailsApi:
    configuration = sib_api_v3_sdk.Configuration()
    configuration.api_key['api-key'] = settings.BREVO_API_KEY
    api_client = sib_api_v3_sdk.ApiClient(configuration)
    return sib_api_v3_sdk.TransactionalEmailsApi(api_client)


async def send_brevo_email(
    to_email: str,
    subject: str,
    html_content: str,
    to_name: str = None,
    timeout: float = settings.DELIVERY_REQUEST_TIMEOUT_SECONDS,
):
    """
    Sends a transactional email using Brevo API.

    The SDK is synchronous, so the call runs in a worker thread. Cancelling the
    awaiting coroutine does not stop that thread, so the request carries its own
    ``timeout`` and a late send cannot outlive it.
    """
    if not settings.BREVO_API_KEY:
        raise EmailDeliveryError("BREVO_API_KEY not set; cannot send email.")

    transactional_api = _build_transactional_api()

    sender_email = settings.DEFAULT_SENDER_EMAIL if settings.DEFAULT_SENDER_EMAIL else "noreply@marketplace.local"
    sender_name = getattr(settings, 'APP_NAME', 'Vendor Marketplace')

    send_smtp_email = sib_api_v3_sdk.SendSmtpEmail(
        to=[{"email": to_email, "name": to_name or to_email}],
        subject=subject,
        html_content=html_content,
        sender={"email": sender_email, "name": sender_name},
    )

    try:
        response = await asyncio.to_thread(
            transactional_api.send_transac_email, send_smtp_email, _request_timeout=timeout
        )
        logging.info(f"Email sent successfully to {to_email}. Response: {response}")
        return response
    except ApiException as e:
        logging.error(f"Exception when calling Brevo API to send email to {to_email}: {e}")
        raise EmailDeliveryError(f"Brevo rejected email: {e.reason}") from e
    except urllib3.exceptions.HTTPError as e:
        logging.error(f"Brevo email request to {to_email} failed: {e}")
        raise EmailDeliveryError(f"Brevo unreachable: {e}") from e
