from decimal import Decimal
from uuid import uuid4

import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import BoxofficeUser
from events.models import AccessCard
from events.service import access_card_service

pytestmark = pytest.mark.django_db


@pytest.fixture
def card(card_holder: BoxofficeUser) -> AccessCard:
    return access_card_service.generate_access_card(price=Decimal("25000"), holder_id=card_holder.id)


class TestGenerate:
    def test_for_existing_holder(self, manager_client: Client, card_holder: BoxofficeUser) -> None:
        payload = {"price": "25000", "holder_id": str(card_holder.id)}

        response = manager_client.post(
            reverse("api:generate_access_card"), data=payload, content_type="application/json"
        )

        assert response.status_code == 201, response.content
        data = response.json()
        assert data["holder"]["id"] == str(card_holder.id)
        assert data["status"] == "active"
        assert data["is_sold"] is False

    def test_for_new_holder(self, manager_client: Client) -> None:
        payload = {"price": "25000", "phone_number": "+221780000000", "first_name": "Fatou", "last_name": "Ba"}

        response = manager_client.post(
            reverse("api:generate_access_card"), data=payload, content_type="application/json"
        )

        assert response.status_code == 201
        assert BoxofficeUser.objects.filter(phone_number="+221780000000").exists()

    def test_requires_holder_or_phone(self, manager_client: Client) -> None:
        response = manager_client.post(
            reverse("api:generate_access_card"), data={"price": "1"}, content_type="application/json"
        )

        assert response.status_code == 422

    def test_unknown_holder(self, manager_client: Client) -> None:
        payload = {"price": "1", "holder_id": str(uuid4())}

        response = manager_client.post(
            reverse("api:generate_access_card"), data=payload, content_type="application/json"
        )

        assert response.status_code == 404


class TestLifecycle:
    @pytest.mark.parametrize(
        "url_name,expected",
        [
            ("api:block_access_card", "blocked"),
            ("api:deactivate_access_card", "disabled"),
            ("api:activate_access_card", "active"),
        ],
    )
    def test_status_changes(self, manager_client: Client, card: AccessCard, url_name: str, expected: str) -> None:
        response = manager_client.post(reverse(url_name, kwargs={"card_id": card.id}))

        assert response.status_code == 200
        assert response.json()["status"] == expected

    def test_sell_once(self, manager_client: Client, card: AccessCard) -> None:
        url = reverse("api:sell_access_card", kwargs={"card_id": card.id})

        first = manager_client.post(url)
        second = manager_client.post(url)

        assert first.status_code == 200
        assert first.json()["is_sold"] is True
        assert second.status_code == 409

    def test_get_and_list(self, manager_client: Client, card: AccessCard) -> None:
        detail = manager_client.get(reverse("api:get_access_card", kwargs={"card_id": card.id}))
        listing = manager_client.get(reverse("api:list_access_cards"))

        assert detail.json()["card_number"] == card.card_number
        assert listing.json()["count"] == 1

    def test_stats(self, manager_client: Client, card: AccessCard) -> None:
        access_card_service.sell(card.id)

        response = manager_client.get(reverse("api:access_card_stats"))

        assert response.json() == {"total_cards": 1, "sold_cards": 1, "unsold_cards": 0}

    def test_gatekeeper_is_forbidden(self, gatekeeper_client: Client, card: AccessCard) -> None:
        response = gatekeeper_client.post(reverse("api:block_access_card", kwargs={"card_id": card.id}))

        assert response.status_code == 403
        card.refresh_from_db()
        assert card.status == AccessCard.CardStatus.ACTIVE
