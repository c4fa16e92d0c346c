"""Celery tasks for the ticketing core.

This module contains asynchronous tasks for:
- Rendering the QR images of ticket and access card codes
- Notifying buyers of a confirmed purchase
- Cancelling pending sales whose reservation window has passed
"""

import structlog
from celery import shared_task
from django.core.files.base import ContentFile
from django.db.models import Q

from events.models import AccessCard, Sale, Ticket
from events.service import notification_service, payment_service
from events.utils import render_code

logger = structlog.get_logger(__name__)


@shared_task
def render_ticket_codes(ticket_ids: list[str]) -> int:
    """Render and store the QR image of each ticket's code.

    A failing ticket is logged and skipped; it does not block the rest of the batch.
    """
    rendered = 0
    for ticket in Ticket.objects.filter(Q(code_image="") | Q(code_image__isnull=True), pk__in=ticket_ids):
        try:
            image = render_code(ticket.code)
            ticket.code_image.save(f"{ticket.code}.png", ContentFile(image), save=False)
            Ticket.objects.filter(pk=ticket.pk).update(code_image=ticket.code_image.name)
        except Exception:
            logger.exception("ticket_code_render_failed", ticket_id=str(ticket.id))
            continue
        rendered += 1
    logger.info("ticket_codes_rendered", requested=len(ticket_ids), rendered=rendered)
    return rendered


@shared_task
def render_access_card_code(card_id: str) -> None:
    """Render and store the QR image of an access card's code."""
    card = AccessCard.objects.get(pk=card_id)
    image = render_code(card.code)
    card.code_image.save(f"{card.code}.png", ContentFile(image), save=False)
    AccessCard.objects.filter(pk=card.pk).update(code_image=card.code_image.name)
    logger.info("access_card_code_rendered", card_id=card_id)


@shared_task
def send_purchase_confirmation(sale_id: str) -> bool:
    """Text the buyer of a paid sale."""
    sale = Sale.objects.select_related("event", "buyer").get(pk=sale_id)
    return notification_service.notify_purchase(sale)


@shared_task
def expire_stale_sales() -> int:
    """Periodic sweep releasing the tickets of abandoned reservations."""
    return payment_service.expire_stale_sales()
