"""Administrative operations on individual tickets."""

import uuid
from decimal import Decimal

import structlog
from django.db import transaction
from django.db.models import QuerySet

from events.exceptions import InvalidStateError, NotFoundError
from events.models import Sale, Ticket
from events.service import update_db_instance

logger = structlog.get_logger(__name__)


def get_ticket(ticket_id: uuid.UUID) -> Ticket:
    """Raises NotFoundError if the ticket does not exist."""
    ticket = Ticket.objects.full().filter(pk=ticket_id).first()
    if ticket is None:
        raise NotFoundError("Ticket", ticket_id)
    return ticket


def list_tickets(
    *,
    event_id: uuid.UUID | None = None,
    category_id: uuid.UUID | None = None,
    status: str | None = None,
) -> QuerySet[Ticket]:
    qs = Ticket.objects.full()
    if event_id:
        qs = qs.filter(event_id=event_id)
    if category_id:
        qs = qs.filter(category_id=category_id)
    if status:
        qs = qs.filter(status=status)
    return qs


@transaction.atomic
def update_price(ticket_id: uuid.UUID, price: Decimal) -> Ticket:
    """Reprice an available ticket. Sold or used tickets keep the price they were sold at."""
    ticket = Ticket.objects.select_for_update().filter(pk=ticket_id).first()
    if ticket is None:
        raise NotFoundError("Ticket", ticket_id)
    if ticket.status != Ticket.TicketStatus.AVAILABLE:
        raise InvalidStateError("ticket", ticket.status)
    ticket = update_db_instance(ticket, price=price)
    logger.info("ticket_repriced", ticket_id=str(ticket.id), price=str(price))
    return ticket


@transaction.atomic
def delete_ticket(ticket_id: uuid.UUID) -> None:
    """Withdraw an available ticket from the inventory."""
    ticket = Ticket.objects.select_for_update().filter(pk=ticket_id).first()
    if ticket is None:
        raise NotFoundError("Ticket", ticket_id)
    if ticket.status != Ticket.TicketStatus.AVAILABLE:
        raise InvalidStateError("ticket", ticket.status)
    ticket.delete()
    logger.info("ticket_deleted", ticket_id=str(ticket_id))


def list_sale_tickets(sale_id: uuid.UUID) -> QuerySet[Ticket]:
    """The tickets bought with a paid sale.

    Raises:
        NotFoundError: If the sale does not exist.
        InvalidStateError: If the sale is not paid.
    """
    sale = Sale.objects.filter(pk=sale_id).first()
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    if sale.status != Sale.SaleStatus.PAID:
        raise InvalidStateError("sale", sale.status)
    return Ticket.objects.full().filter(
        sale=sale, status__in=[Ticket.TicketStatus.SOLD, Ticket.TicketStatus.USED]
    )
