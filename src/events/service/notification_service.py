"""Buyer notifications over the SMS gateway."""

import requests
import structlog
from django.conf import settings
from django.utils.translation import gettext as _

from events.models import Sale

logger = structlog.get_logger(__name__)


def build_purchase_message(sale: Sale) -> str:
    return _("Congratulations, you bought %(quantity)s ticket(s) for %(event)s. Reference: %(reference)s.") % {
        "quantity": sale.quantity,
        "event": sale.event.name,
        "reference": sale.reference,
    }


def send_sms(phone_number: str, message: str) -> bool:
    """Send a text message. Failures are logged and reported as False, never raised."""
    if not settings.SMS_ENABLED:
        logger.info("sms_disabled", recipient=phone_number)
        return False
    try:
        response = requests.post(
            settings.SMS_API_URL,
            json={"from": settings.SMS_SENDER, "to": phone_number, "text": message},
            headers={
                "accept": "application/json",
                "authorization": settings.SMS_API_AUTHORIZATION,
            },
            timeout=settings.SMS_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("sms_send_failed", recipient=phone_number, error=str(e))
        return False
    logger.info("sms_sent", recipient=phone_number)
    return True


def notify_purchase(sale: Sale) -> bool:
    """Tell the buyer of a paid sale how many tickets they bought."""
    phone_number = sale.buyer.phone_number
    if not phone_number:
        logger.warning("purchase_notification_no_phone", sale_id=str(sale.id))
        return False
    return send_sms(phone_number, build_purchase_message(sale))
