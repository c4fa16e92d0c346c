from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
import stripe
from django.test.client import Client
from django.urls import reverse

from events.models import Event, Sale, Ticket, TicketCategory

pytestmark = pytest.mark.django_db


@pytest.fixture
def reserve_payload(event: Event, category: TicketCategory) -> dict[str, object]:
    return {
        "event_id": str(event.id),
        "category_id": str(category.id),
        "quantity": 2,
        "phone_number": "77 000 00 01",
        "first_name": "Awa",
        "last_name": "Diop",
    }


class TestReserve:
    def test_anonymous_buyer_reserves(
        self, client: Client, tickets: list[Ticket], reserve_payload: dict[str, object]
    ) -> None:
        response = client.post(reverse("api:reserve"), data=reserve_payload, content_type="application/json")

        assert response.status_code == 201, response.content
        data = response.json()
        assert data["status"] == "pending"
        assert data["quantity"] == 2
        assert Decimal(data["amount"]) == Decimal("2000")
        assert data["currency"] == "XOF"
        sale = Sale.objects.get(pk=data["id"])
        assert sale.buyer.phone_number == "+221770000001"
        assert sale.tickets.count() == 2

    def test_sold_out(self, client: Client, tickets: list[Ticket], reserve_payload: dict[str, object]) -> None:
        reserve_payload["quantity"] = 6

        response = client.post(reverse("api:reserve"), data=reserve_payload, content_type="application/json")

        assert response.status_code == 409
        assert response.json()["available"] == 5
        assert response.json()["requested"] == 6
        assert not Sale.objects.exists()

    def test_invalid_phone(self, client: Client, tickets: list[Ticket], reserve_payload: dict[str, object]) -> None:
        reserve_payload["phone_number"] = "not a phone"

        response = client.post(reverse("api:reserve"), data=reserve_payload, content_type="application/json")

        assert response.status_code == 400
        assert "errors" in response.json()

    def test_unknown_event(self, client: Client, tickets: list[Ticket], reserve_payload: dict[str, object]) -> None:
        reserve_payload["event_id"] = str(uuid4())

        response = client.post(reverse("api:reserve"), data=reserve_payload, content_type="application/json")

        assert response.status_code == 404

    @pytest.mark.parametrize("quantity", [0, 101])
    def test_quantity_bounds(
        self, client: Client, tickets: list[Ticket], reserve_payload: dict[str, object], quantity: int
    ) -> None:
        reserve_payload["quantity"] = quantity

        response = client.post(reverse("api:reserve"), data=reserve_payload, content_type="application/json")

        assert response.status_code == 422


class TestPaymentUrl:
    def test_returns_checkout_url(self, client: Client, pending_sale: Sale, mock_session_create: MagicMock) -> None:
        url = reverse("api:payment_url", kwargs={"sale_id": pending_sale.id})

        response = client.get(url)

        assert response.status_code == 200
        assert response.json() == {
            "sale_id": str(pending_sale.id),
            "payment_url": "https://checkout.stripe.com/c/pay/cs_test_123",
        }

    def test_paid_sale(self, client: Client, paid_sale: Sale) -> None:
        response = client.get(reverse("api:payment_url", kwargs={"sale_id": paid_sale.id}))

        assert response.status_code == 409
        assert response.json()["state"] == "paid"

    def test_provider_down(self, client: Client, pending_sale: Sale, mock_session_create: MagicMock) -> None:
        mock_session_create.side_effect = stripe.APIConnectionError("down")

        response = client.get(reverse("api:payment_url", kwargs={"sale_id": pending_sale.id}))

        assert response.status_code == 502
        assert response.json()["service"] == "payment"

    def test_unknown_sale(self, client: Client) -> None:
        response = client.get(reverse("api:payment_url", kwargs={"sale_id": uuid4()}))

        assert response.status_code == 404


class TestSaleTickets:
    def test_paid_sale_lists_tickets(self, client: Client, paid_sale: Sale) -> None:
        response = client.get(reverse("api:sale_tickets", kwargs={"sale_id": paid_sale.id}))

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 3
        assert {item["sale_id"] for item in data} == {str(paid_sale.id)}
        assert all(item["code"].startswith("TKT-") for item in data)

    def test_pending_sale_hides_tickets(self, client: Client, pending_sale: Sale) -> None:
        response = client.get(reverse("api:sale_tickets", kwargs={"sale_id": pending_sale.id}))

        assert response.status_code == 409


class TestSalesStats:
    def test_manager_sees_stats(self, manager_client: Client, paid_sale: Sale) -> None:
        response = manager_client.get(reverse("api:sales_stats"))

        assert response.status_code == 200
        data = response.json()
        assert data["total_sales"] == 1
        assert data["total_tickets"] == 3
        assert data["sales_by_event"][0]["name"] == "Derby"
        assert data["sales_by_event"][0]["sales_percentage"] == 100.0

    def test_date_range(self, manager_client: Client, paid_sale: Sale) -> None:
        response = manager_client.get(
            reverse("api:sales_stats"), {"start_date": date(2000, 1, 1), "end_date": date(2000, 1, 2)}
        )

        assert response.status_code == 200
        assert response.json()["total_sales"] == 0

    def test_half_open_range_is_rejected(self, manager_client: Client) -> None:
        response = manager_client.get(reverse("api:sales_stats"), {"start_date": "2026-01-01"})

        assert response.status_code == 422

    def test_gatekeeper_is_forbidden(self, gatekeeper_client: Client) -> None:
        assert gatekeeper_client.get(reverse("api:sales_stats")).status_code == 403

    def test_anonymous_is_unauthorized(self, client: Client) -> None:
        assert client.get(reverse("api:sales_stats")).status_code == 401
