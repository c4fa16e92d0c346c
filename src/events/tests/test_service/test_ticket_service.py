from decimal import Decimal
from uuid import uuid4

import pytest

from events.exceptions import InvalidStateError, NotFoundError
from events.models import Event, Sale, Ticket, TicketCategory
from events.service import ticket_service

pytestmark = pytest.mark.django_db


def test_list_tickets_filters(
    tickets: list[Ticket], pending_sale: Sale, event: Event, other_event: Event, category: TicketCategory
) -> None:
    assert ticket_service.list_tickets().count() == 5
    assert ticket_service.list_tickets(event_id=event.id, status=Ticket.TicketStatus.SOLD).count() == 3
    assert ticket_service.list_tickets(category_id=category.id, status=Ticket.TicketStatus.AVAILABLE).count() == 2
    assert ticket_service.list_tickets(event_id=other_event.id).count() == 0


def test_get_ticket(tickets: list[Ticket]) -> None:
    assert ticket_service.get_ticket(tickets[0].id) == tickets[0]

    with pytest.raises(NotFoundError):
        ticket_service.get_ticket(uuid4())


class TestUpdatePrice:
    def test_reprices_available_ticket(self, tickets: list[Ticket]) -> None:
        ticket = ticket_service.update_price(tickets[0].id, Decimal("1200"))

        assert ticket.price == Decimal("1200")

    def test_sold_ticket_keeps_its_price(self, pending_sale: Sale) -> None:
        ticket = pending_sale.tickets.first()
        assert ticket is not None

        with pytest.raises(InvalidStateError):
            ticket_service.update_price(ticket.id, Decimal("1"))

        ticket.refresh_from_db()
        assert ticket.price == Decimal("1000")


class TestDeleteTicket:
    def test_deletes_available_ticket(self, tickets: list[Ticket]) -> None:
        ticket_service.delete_ticket(tickets[0].id)

        assert not Ticket.objects.filter(pk=tickets[0].id).exists()

    def test_sold_ticket_cannot_be_deleted(self, pending_sale: Sale) -> None:
        ticket = pending_sale.tickets.first()
        assert ticket is not None

        with pytest.raises(InvalidStateError):
            ticket_service.delete_ticket(ticket.id)

    def test_unknown_ticket(self) -> None:
        with pytest.raises(NotFoundError):
            ticket_service.delete_ticket(uuid4())


class TestListSaleTickets:
    def test_paid_sale(self, paid_sale: Sale) -> None:
        assert ticket_service.list_sale_tickets(paid_sale.id).count() == 3

    def test_pending_sale(self, pending_sale: Sale) -> None:
        with pytest.raises(InvalidStateError):
            ticket_service.list_sale_tickets(pending_sale.id)

    def test_unknown_sale(self) -> None:
        with pytest.raises(NotFoundError):
            ticket_service.list_sale_tickets(uuid4())
