"""Administration of access cards."""

import uuid
from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from accounts.models import BoxofficeUser
from accounts.service.buyer_service import find_or_create_buyer
from events.exceptions import InvalidStateError, NotFoundError
from events.models import AccessCard

logger = structlog.get_logger(__name__)


@transaction.atomic
def generate_access_card(
    *,
    price: Decimal,
    holder_id: uuid.UUID | None = None,
    phone_number: str | None = None,
    first_name: str = "",
    last_name: str = "",
) -> AccessCard:
    """Create an active, unsold card for an existing holder or one resolved by phone number.

    Raises:
        ValidationError: If neither a holder nor a phone number is given, or the price is negative.
        NotFoundError: If ``holder_id`` does not exist.
    """
    if price < 0:
        raise ValidationError({"price": [str(_("The price cannot be negative."))]})
    if holder_id is not None:
        holder = BoxofficeUser.objects.filter(pk=holder_id).first()
        if holder is None:
            raise NotFoundError("User", holder_id)
    elif phone_number:
        holder, _created = find_or_create_buyer(phone_number, first_name=first_name, last_name=last_name)
    else:
        raise ValidationError({"holder_id": [str(_("Either a holder or a phone number is required."))]})

    card = AccessCard.objects.create(holder=holder, price=price)
    transaction.on_commit(lambda: _schedule_code_rendering(card.id))
    logger.info("access_card_generated", card_id=str(card.id), holder_id=str(holder.id))
    return card


def _schedule_code_rendering(card_id: uuid.UUID) -> None:
    from events.tasks import render_access_card_code

    render_access_card_code.delay(str(card_id))


def get_access_card(card_id: uuid.UUID) -> AccessCard:
    """Raises NotFoundError if the card does not exist."""
    card = AccessCard.objects.select_related("holder").filter(pk=card_id).first()
    if card is None:
        raise NotFoundError("Access card", card_id)
    return card


def list_access_cards() -> QuerySet[AccessCard]:
    return AccessCard.objects.select_related("holder")


@transaction.atomic
def set_status(card_id: uuid.UUID, status: str) -> AccessCard:
    """Move a card to ``active``, ``blocked`` or ``disabled``. The sold flag is left alone."""
    if status not in AccessCard.CardStatus.values:
        raise ValidationError({"status": [str(_("Unknown card status."))]})
    card = AccessCard.objects.select_for_update().filter(pk=card_id).first()
    if card is None:
        raise NotFoundError("Access card", card_id)
    if card.status != status:
        previous = card.status
        card.status = status
        card.save(update_fields=["status", "updated_at"])
        logger.info("access_card_status_changed", card_id=str(card.id), previous=previous, status=status)
    return card


def block(card_id: uuid.UUID) -> AccessCard:
    return set_status(card_id, AccessCard.CardStatus.BLOCKED)


def deactivate(card_id: uuid.UUID) -> AccessCard:
    return set_status(card_id, AccessCard.CardStatus.DISABLED)


def activate(card_id: uuid.UUID) -> AccessCard:
    return set_status(card_id, AccessCard.CardStatus.ACTIVE)


@transaction.atomic
def sell(card_id: uuid.UUID) -> AccessCard:
    """Latch the sold flag. It never goes back.

    Raises:
        NotFoundError: If the card does not exist.
        InvalidStateError: If the card was already sold.
    """
    if not AccessCard.objects.filter(pk=card_id).exists():
        raise NotFoundError("Access card", card_id)
    latched = AccessCard.objects.filter(pk=card_id, is_sold=False).update(
        is_sold=True, sold_at=timezone.now(), updated_at=timezone.now()
    )
    if not latched:
        raise InvalidStateError("access card", "sold", "This card was already sold.")
    logger.info("access_card_sold", card_id=str(card_id))
    return AccessCard.objects.select_related("holder").get(pk=card_id)


def stats() -> dict[str, int]:
    """Count cards by sold flag."""
    return {
        "total_cards": AccessCard.objects.count(),
        "sold_cards": AccessCard.objects.sold().count(),
        "unsold_cards": AccessCard.objects.unsold().count(),
    }
