"""Gate-side admission of tickets and access cards."""

import typing as t

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from accounts.models import BoxofficeUser
from events.exceptions import NotFoundError, TicketNotAdmissibleError
from events.models import AccessCard, AccessCardEntry, CheckIn, Ticket

logger = structlog.get_logger(__name__)


@transaction.atomic
def check_in(code: str, operator: BoxofficeUser) -> CheckIn:
    """Admit the ticket carrying ``code`` and record the entry.

    Only a ``sold`` ticket is admitted; it becomes ``used`` in the same transaction
    that records the check-in. The status flip is a compare-and-swap on ``sold``,
    so of two scans racing on one ticket exactly one succeeds.

    Raises:
        NotFoundError: If no ticket carries the code.
        TicketNotAdmissibleError: If the ticket is not sold, whether never bought or already used.
    """
    ticket = Ticket.objects.filter(code=code.strip()).first()
    if ticket is None:
        logger.warning("check_in_unknown_code", operator_id=str(operator.id))
        raise NotFoundError("Ticket", code)

    admitted = Ticket.objects.filter(pk=ticket.pk, status=Ticket.TicketStatus.SOLD).update(
        status=Ticket.TicketStatus.USED, updated_at=timezone.now()
    )
    if not admitted:
        logger.warning("check_in_rejected", ticket_id=str(ticket.id), operator_id=str(operator.id))
        raise TicketNotAdmissibleError()

    ticket.refresh_from_db()
    entry = CheckIn.objects.create(ticket=ticket, operator=operator)
    logger.info("ticket_checked_in", ticket_id=str(ticket.id), operator_id=str(operator.id))
    return entry


def list_check_ins_by_operator(operator: BoxofficeUser | t.Any) -> QuerySet[CheckIn]:
    """The check-ins recorded by an operator, oldest first.

    The queryset is lazy; evaluating it again re-reads the table.
    """
    return CheckIn.objects.by_operator(getattr(operator, "pk", operator)).select_related(
        "ticket", "ticket__event", "ticket__category"
    )


@transaction.atomic
def validate_access_card(code: str, operator: BoxofficeUser) -> AccessCardEntry:
    """Admit the holder of an access card and record the entry.

    Only an ``active`` card that was sold is admitted. Cards are reusable, so each
    admission appends a new entry.

    Raises:
        NotFoundError: If no card carries the code.
        TicketNotAdmissibleError: If the card is blocked, disabled or unsold.
    """
    card = AccessCard.objects.select_for_update().filter(code=code.strip()).first()
    if card is None:
        logger.warning("card_check_in_unknown_code", operator_id=str(operator.id))
        raise NotFoundError("Access card", code)
    if card.status != AccessCard.CardStatus.ACTIVE or not card.is_sold:
        logger.warning("card_check_in_rejected", card_id=str(card.id), operator_id=str(operator.id))
        raise TicketNotAdmissibleError()

    entry = AccessCardEntry.objects.create(card=card, operator=operator)
    logger.info("card_checked_in", card_id=str(card.id), operator_id=str(operator.id))
    return entry
