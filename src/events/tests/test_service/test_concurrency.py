"""Concurrent claims and check-ins against a real database.

These need row locks and independent connections, so they only run on PostgreSQL.
"""

import threading
import time
import typing as t
from decimal import Decimal

import pytest
from django.db import connection, connections, transaction

from accounts.models import BoxofficeUser
from events.exceptions import InsufficientInventoryError, TicketNotAdmissibleError
from events.models import CheckIn, Event, Sale, Ticket, TicketCategory
from events.service import check_in_service, inventory_service, reservation_service

pytestmark = [
    pytest.mark.django_db(transaction=True),
    pytest.mark.skipif(connection.vendor != "postgresql", reason="requires PostgreSQL row locking"),
]


def _run_concurrently(target: t.Callable[[int], None], workers: int) -> None:
    barrier = threading.Barrier(workers)

    def run(index: int) -> None:
        try:
            barrier.wait()
            target(index)
        finally:
            connections.close_all()

    threads = [threading.Thread(target=run, args=(i,)) for i in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


def test_no_ticket_is_sold_twice(event: Event, category: TicketCategory) -> None:
    inventory_service.issue_batch(category.id, event.id, 10, Decimal("1000"))
    results: dict[int, str] = {}

    def buy(index: int) -> None:
        try:
            reservation_service.reserve(
                event_id=event.id,
                category_id=category.id,
                quantity=3,
                phone_number=f"+2217700000{index:02d}",
                first_name="Buyer",
                last_name=str(index),
            )
            results[index] = "ok"
        except InsufficientInventoryError:
            results[index] = "sold_out"

    _run_concurrently(buy, 6)

    successful = [index for index, result in results.items() if result == "ok"]
    assert len(results) == 6
    assert len(successful) == 3
    sold = Ticket.objects.filter(status=Ticket.TicketStatus.SOLD)
    assert sold.count() == 9
    assert sold.values("sale").distinct().count() == 3
    assert Ticket.objects.available().count() == 1
    for sale in Sale.objects.all():
        assert sale.tickets.count() == sale.quantity


def test_one_admission_per_ticket(
    event: Event, category: TicketCategory, gatekeeper: BoxofficeUser, other_gatekeeper: BoxofficeUser
) -> None:
    inventory_service.issue_batch(category.id, event.id, 1, Decimal("1000"))
    sale = reservation_service.reserve(
        event_id=event.id,
        category_id=category.id,
        quantity=1,
        phone_number="+221770000001",
        first_name="Awa",
        last_name="Diop",
    )
    ticket = sale.tickets.get()
    operators = [gatekeeper, other_gatekeeper, gatekeeper, other_gatekeeper]
    rejected: list[int] = []

    def scan(index: int) -> None:
        try:
            check_in_service.check_in(ticket.code, operators[index])
        except TicketNotAdmissibleError:
            rejected.append(index)

    _run_concurrently(scan, len(operators))

    assert CheckIn.objects.filter(ticket=ticket).count() == 1
    assert len(rejected) == len(operators) - 1


def test_claim_survives_a_competitor_that_rolls_back(
    event: Event, category: TicketCategory, supporter: BoxofficeUser
) -> None:
    inventory_service.issue_batch(category.id, event.id, 3, Decimal("1000"))
    first_sale = Sale.objects.create(event=event, category=category, buyer=supporter, quantity=3)
    second_sale = Sale.objects.create(event=event, category=category, buyer=supporter, quantity=3)
    first_holds_rows = threading.Event()
    outcome: dict[str, str] = {}

    def abandoned_claim() -> None:
        try:
            with transaction.atomic():
                inventory_service.claim_available(category, 3, sale=first_sale, event=event)
                first_holds_rows.set()
                time.sleep(0.5)
                raise RuntimeError("buyer went away")
        except RuntimeError:
            outcome["first"] = "rolled_back"
        finally:
            connections.close_all()

    def second_claim() -> None:
        first_holds_rows.wait(timeout=5)
        try:
            inventory_service.claim_available(category, 3, sale=second_sale, event=event)
            outcome["second"] = "ok"
        except InsufficientInventoryError:
            outcome["second"] = "sold_out"
        finally:
            connections.close_all()

    threads = [threading.Thread(target=abandoned_claim), threading.Thread(target=second_claim)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcome == {"first": "rolled_back", "second": "ok"}
    assert Ticket.objects.filter(sale=second_sale).count() == 3
    assert not Ticket.objects.available().exists()
