"""Turns a buyer's purchase intent into a pending sale."""

import uuid

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.translation import gettext_lazy as _

from accounts.service.buyer_service import find_or_create_buyer
from events.exceptions import NotFoundError
from events.models import Event, Sale, TicketCategory
from events.service import inventory_service

logger = structlog.get_logger(__name__)


@transaction.atomic
def reserve(
    *,
    event_id: uuid.UUID,
    category_id: uuid.UUID,
    phone_number: str,
    first_name: str,
    last_name: str,
    quantity: int,
    email: str | None = None,
) -> Sale:
    """Reserve ``quantity`` tickets of a category for the buyer owning ``phone_number``.

    Buyer resolution, sale creation and the inventory claim share one transaction:
    when the claim fails nothing persists, not even a buyer created for this attempt.
    The returned sale is ``pending`` and its amount is the sum of the claimed ticket
    prices, which is quantity times the unit price of the category.

    Raises:
        ValidationError: If the quantity or the phone number is invalid.
        NotFoundError: If the event or category does not exist.
        InsufficientInventoryError: If not enough tickets are left.
    """
    if quantity < 1:
        raise ValidationError({"quantity": [str(_("At least one ticket must be requested."))]})
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        raise NotFoundError("Event", event_id)
    category = TicketCategory.objects.filter(pk=category_id).first()
    if category is None:
        raise NotFoundError("Ticket category", category_id)

    buyer, created = find_or_create_buyer(phone_number, first_name=first_name, last_name=last_name, email=email)

    sale = Sale(event=event, category=category, buyer=buyer, quantity=quantity)
    sale.save()

    tickets = inventory_service.claim_available(category, quantity, sale=sale, event=event)

    sale.amount = sum((ticket.price for ticket in tickets), start=sale.amount)
    sale.save(update_fields=["amount", "updated_at"])

    logger.info(
        "sale_reserved",
        sale_id=str(sale.id),
        event_id=str(event.id),
        category_id=str(category.id),
        buyer_id=str(buyer.id),
        new_buyer=created,
        quantity=quantity,
        amount=str(sale.amount),
    )
    return sale
