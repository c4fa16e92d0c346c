from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError

from events.models import Event, Sale, Ticket, TicketCategory
from events.models.ticket import derive_ticket_code

pytestmark = pytest.mark.django_db


def test_code_is_derived_on_save(event: Event, category: TicketCategory) -> None:
    ticket = Ticket(event=event, category=category, price=Decimal("1000"))
    ticket.save()

    assert ticket.code == derive_ticket_code(ticket.id)
    assert ticket.code.startswith("TKT-")
    assert ticket.status == Ticket.TicketStatus.AVAILABLE


def test_sold_ticket_requires_a_sale(event: Event, category: TicketCategory) -> None:
    with pytest.raises(ValidationError):
        Ticket(event=event, category=category, price=Decimal("1"), status=Ticket.TicketStatus.SOLD).save()


def test_available_ticket_cannot_hold_a_sale(pending_sale: Sale) -> None:
    ticket = pending_sale.tickets.first()
    assert ticket is not None

    with pytest.raises(IntegrityError):
        Ticket.objects.filter(pk=ticket.pk).update(status=Ticket.TicketStatus.AVAILABLE)


def test_unknown_status_is_rejected_by_the_database(tickets: list[Ticket]) -> None:
    with pytest.raises(IntegrityError):
        Ticket.objects.filter(pk=tickets[0].pk).update(status="refunded")


def test_negative_price(event: Event, category: TicketCategory) -> None:
    with pytest.raises(ValidationError):
        Ticket(event=event, category=category, price=Decimal("-5")).save()


def test_paid_sale_holds_its_quantity_of_tickets(paid_sale: Sale) -> None:
    assert paid_sale.tickets.count() == paid_sale.quantity
    assert Ticket.objects.filter(sale__isnull=False).count() == paid_sale.quantity


def test_cancelled_sale_must_be_voided(pending_sale: Sale) -> None:
    pending_sale.status = Sale.SaleStatus.CANCELLED

    with pytest.raises(ValidationError):
        pending_sale.save()


def test_sale_reference(pending_sale: Sale) -> None:
    assert pending_sale.reference == f"TICKET-{pending_sale.id}"


def test_category_name_is_unique(category: TicketCategory) -> None:
    with pytest.raises(ValidationError):
        TicketCategory(name=category.name).save()
