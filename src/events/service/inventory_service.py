"""Ticket inventory: batch issuance, atomic claims and release."""

import typing as t
import uuid
from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from events.exceptions import InsufficientInventoryError, InvalidStateError, NotFoundError
from events.models import Event, Sale, Ticket, TicketCategory
from events.models.ticket import TicketQuerySet, derive_ticket_code

logger = structlog.get_logger(__name__)

MAX_BATCH_SIZE = 10_000


@transaction.atomic
def issue_batch(
    category_id: uuid.UUID,
    event_id: uuid.UUID,
    quantity: int,
    unit_price: Decimal,
    channel: str = Ticket.Channel.ONLINE,
) -> list[Ticket]:
    """Create ``quantity`` available tickets for an event and category.

    Each ticket gets its own code. Once the batch is committed a background task
    renders the QR image of every code.

    Raises:
        ValidationError: If the quantity, price or channel is invalid, or if the
            category or event does not exist.
    """
    errors: dict[str, list[str]] = {}
    if quantity < 1:
        errors["quantity"] = [str(_("At least one ticket must be issued."))]
    elif quantity > MAX_BATCH_SIZE:
        errors["quantity"] = [str(_("At most %(max)s tickets can be issued at once.") % {"max": MAX_BATCH_SIZE})]
    if unit_price < 0:
        errors["unit_price"] = [str(_("The price cannot be negative."))]
    if channel not in Ticket.Channel.values:
        errors["channel"] = [str(_("Unknown sale channel."))]
    category = TicketCategory.objects.filter(pk=category_id).first()
    if category is None:
        errors["category_id"] = [str(_("This ticket category does not exist."))]
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        errors["event_id"] = [str(_("This event does not exist."))]
    if errors:
        raise ValidationError(errors)

    tickets = []
    for _i in range(quantity):
        ticket_id = uuid.uuid4()
        tickets.append(
            Ticket(
                id=ticket_id,
                code=derive_ticket_code(ticket_id),
                event=event,
                category=category,
                price=unit_price,
                channel=channel,
                status=Ticket.TicketStatus.AVAILABLE,
            )
        )
    created = Ticket.objects.bulk_create(tickets)

    ticket_ids = [str(ticket.id) for ticket in created]
    transaction.on_commit(lambda: _schedule_code_rendering(ticket_ids))

    logger.info(
        "tickets_issued",
        event_id=str(event_id),
        category_id=str(category_id),
        quantity=quantity,
        unit_price=str(unit_price),
        channel=channel,
    )
    return created


def _schedule_code_rendering(ticket_ids: list[str]) -> None:
    from events.tasks import render_ticket_codes

    render_ticket_codes.delay(ticket_ids)


def claim_available(
    category: TicketCategory,
    quantity: int,
    *,
    sale: Sale,
    event: Event | None = None,
) -> list[Ticket]:
    """Atomically move exactly ``quantity`` available tickets of a category to ``sold``.

    Oldest tickets are claimed first. Either every requested ticket is claimed and
    attached to ``sale`` or nothing changes at all.

    Rows are locked with ``SELECT ... FOR UPDATE SKIP LOCKED`` where the database
    supports it, and the status flip itself is a compare-and-swap on ``available``,
    so two concurrent claims can never take the same ticket. When the unlocked
    rows fall short while committed inventory would still cover the request, the
    claim waits for the competing claims to finish and looks once more, so a
    competitor that rolls back does not turn into a false sell-out.

    Raises:
        ValidationError: If the quantity is not positive.
        InsufficientInventoryError: If fewer than ``quantity`` tickets are available.
    """
    if quantity < 1:
        raise ValidationError({"quantity": [str(_("At least one ticket must be requested."))]})

    with transaction.atomic():
        available = Ticket.objects.available().for_category(category, event)
        first_pass = transaction.savepoint()
        candidate_ids = _lock_candidates(available, quantity)
        if len(candidate_ids) < quantity and available.count() >= quantity:
            # Drop the partial locks first; waiters then lock in claim order and cannot deadlock.
            transaction.savepoint_rollback(first_pass)
            logger.info("ticket_claim_waiting", category_id=str(category.id), quantity=quantity)
            list(available.in_claim_order().select_for_update().values_list("pk", flat=True))
            candidate_ids = _lock_candidates(available, quantity)
        else:
            transaction.savepoint_commit(first_pass)
        if len(candidate_ids) < quantity:
            raise InsufficientInventoryError(requested=quantity, available=available.count())

        claimed = Ticket.objects.filter(pk__in=candidate_ids, status=Ticket.TicketStatus.AVAILABLE).update(
            status=Ticket.TicketStatus.SOLD, sale=sale, updated_at=timezone.now()
        )
        if claimed != quantity:
            # Another claim won part of the candidates; the atomic block rolls back our share.
            raise InsufficientInventoryError(requested=quantity, available=claimed)

    logger.info(
        "tickets_claimed",
        sale_id=str(sale.id),
        category_id=str(category.id),
        quantity=quantity,
    )
    return list(Ticket.objects.filter(pk__in=candidate_ids).in_claim_order())


def _lock_candidates(available: TicketQuerySet, quantity: int) -> list[uuid.UUID]:
    return list(
        available.in_claim_order().select_for_update(skip_locked=True).values_list("pk", flat=True)[:quantity]
    )


def release(ticket_ids: t.Iterable[uuid.UUID]) -> int:
    """Return sold tickets to the available pool and detach them from their sale.

    Tickets that are already available are left untouched.

    Returns:
        The number of tickets released.

    Raises:
        NotFoundError: If any of the tickets does not exist.
        InvalidStateError: If any of the tickets was already used. Nothing is released then.
    """
    ids = list(dict.fromkeys(uuid.UUID(str(pk)) for pk in ticket_ids))
    if not ids:
        return 0

    with transaction.atomic():
        statuses = dict(Ticket.objects.select_for_update().filter(pk__in=ids).values_list("pk", "status"))
        if missing := [ticket_id for ticket_id in ids if ticket_id not in statuses]:
            raise NotFoundError("Ticket", missing[0])
        if used := [pk for pk, status in statuses.items() if status == Ticket.TicketStatus.USED]:
            raise InvalidStateError("ticket", Ticket.TicketStatus.USED, f"Ticket {used[0]} was already used.")

        released = Ticket.objects.filter(pk__in=ids, status=Ticket.TicketStatus.SOLD).update(
            status=Ticket.TicketStatus.AVAILABLE, sale=None, updated_at=timezone.now()
        )

    logger.info("tickets_released", ticket_ids=[str(pk) for pk in ids], released=released)
    return released
