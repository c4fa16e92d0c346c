import typing as t
from collections.abc import Iterator
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from accounts.models import BoxofficeUser
from events.models import Event, Sale, Ticket, TicketCategory
from events.service import inventory_service, payment_service, reservation_service

BUYER = {"phone_number": "+221770000001", "first_name": "Awa", "last_name": "Diop"}


@pytest.fixture
def event() -> Event:
    return Event.objects.create(name="Derby", date=date(2026, 12, 5), venue_name="Stade Léopold Sédar Senghor")


@pytest.fixture
def other_event() -> Event:
    return Event.objects.create(name="Cup final", date=date(2026, 12, 19), venue_name="Stade Demba Diop")


@pytest.fixture
def category() -> TicketCategory:
    return TicketCategory.objects.create(name="Tribune")


@pytest.fixture
def vip_category() -> TicketCategory:
    return TicketCategory.objects.create(name="VIP")


@pytest.fixture
def tickets(event: Event, category: TicketCategory) -> list[Ticket]:
    """Five available tickets at 1000 each."""
    return inventory_service.issue_batch(category.id, event.id, 5, Decimal("1000"))


@pytest.fixture
def buyer_data() -> dict[str, str]:
    return dict(BUYER)


@pytest.fixture
def pending_sale(event: Event, category: TicketCategory, tickets: list[Ticket], buyer_data: dict[str, str]) -> Sale:
    """A pending sale of three tickets, no payment requested yet."""
    return reservation_service.reserve(event_id=event.id, category_id=category.id, quantity=3, **buyer_data)


def make_checkout_session(session_id: str = "cs_test_123", **overrides: t.Any) -> dict[str, t.Any]:
    session = {
        "id": session_id,
        "url": f"https://checkout.stripe.com/c/pay/{session_id}",
        "status": "open",
        "payment_status": "unpaid",
        "metadata": {},
    }
    session.update(overrides)
    return session


@pytest.fixture
def mock_session_create() -> Iterator[MagicMock]:
    with patch("events.service.payment_gateway.Session.create") as mock_create:
        mock_create.return_value = MagicMock(id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123")
        yield mock_create


@pytest.fixture
def mock_session_retrieve() -> Iterator[MagicMock]:
    with patch("events.service.payment_gateway.Session.retrieve") as mock_retrieve:
        mock_retrieve.return_value = make_checkout_session()
        yield mock_retrieve


@pytest.fixture
def mock_session_expire() -> Iterator[MagicMock]:
    with patch("events.service.payment_gateway.Session.expire") as mock_expire:
        yield mock_expire


@pytest.fixture
def requested_sale(pending_sale: Sale, mock_session_create: MagicMock) -> Sale:
    """A pending sale with an open checkout session."""
    payment_service.request_payment(pending_sale.id)
    pending_sale.refresh_from_db()
    return pending_sale


@pytest.fixture
def paid_sale(requested_sale: Sale) -> Sale:
    payment_service.apply_outcome(requested_sale.id, "completed")
    requested_sale.refresh_from_db()
    return requested_sale


@pytest.fixture
def sold_ticket(paid_sale: Sale) -> Ticket:
    return paid_sale.tickets.order_by("created_at", "id").first()  # type: ignore[return-value]


@pytest.fixture
def card_holder(user_factory: t.Any) -> BoxofficeUser:
    return t.cast(BoxofficeUser, user_factory(phone_number="+221770000099"))


@pytest.fixture
def checkout_session() -> t.Callable[..., dict[str, t.Any]]:
    """Build checkout sessions shaped like the provider's."""
    return make_checkout_session
