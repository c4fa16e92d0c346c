from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from accounts.policy import Action
from common.authentication import I18nJWTAuth
from common.throttling import WriteThrottle
from events import models, schema
from events.service import access_card_service

from .permissions import ActionPermission


@api_controller(
    "/access-cards",
    auth=I18nJWTAuth(),
    tags=["Access cards"],
    permissions=[ActionPermission(Action.MANAGE_ACCESS_CARDS)],
)
class AccessCardController:
    @route.get("/", url_name="list_access_cards", response=PaginatedResponseSchema[schema.AccessCardSchema])
    @paginate(PageNumberPaginationExtra, page_size=50)
    def list_cards(self) -> QuerySet[models.AccessCard]:
        """List access cards, newest first."""
        return access_card_service.list_access_cards()

    @route.post("/", url_name="generate_access_card", response={201: schema.AccessCardSchema}, throttle=WriteThrottle())
    def generate(self, payload: schema.AccessCardCreateSchema) -> tuple[int, models.AccessCard]:
        """Create a card for an existing holder, or for a holder found or created by phone number."""
        card = access_card_service.generate_access_card(
            price=payload.price,
            holder_id=payload.holder_id,
            phone_number=payload.phone_number,
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
        return 201, access_card_service.get_access_card(card.id)

    @route.get("/stats", url_name="access_card_stats", response=schema.AccessCardStatsSchema)
    def stats(self) -> dict[str, int]:
        """Count cards by sold flag."""
        return access_card_service.stats()

    @route.get("/{card_id}", url_name="get_access_card", response=schema.AccessCardSchema)
    def get_card(self, card_id: UUID) -> models.AccessCard:
        return access_card_service.get_access_card(card_id)

    @route.post("/{card_id}/block", url_name="block_access_card", response=schema.AccessCardSchema)
    def block(self, card_id: UUID) -> models.AccessCard:
        access_card_service.block(card_id)
        return access_card_service.get_access_card(card_id)

    @route.post("/{card_id}/deactivate", url_name="deactivate_access_card", response=schema.AccessCardSchema)
    def deactivate(self, card_id: UUID) -> models.AccessCard:
        access_card_service.deactivate(card_id)
        return access_card_service.get_access_card(card_id)

    @route.post("/{card_id}/activate", url_name="activate_access_card", response=schema.AccessCardSchema)
    def activate(self, card_id: UUID) -> models.AccessCard:
        access_card_service.activate(card_id)
        return access_card_service.get_access_card(card_id)

    @route.post("/{card_id}/sell", url_name="sell_access_card", response=schema.AccessCardSchema)
    def sell(self, card_id: UUID) -> models.AccessCard:
        """Mark a card as sold. A card can only be sold once."""
        return access_card_service.sell(card_id)
