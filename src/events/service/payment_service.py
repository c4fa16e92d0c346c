"""Payment requests and reconciliation of payment outcomes against sales.

Every provider entry point (webhook, browser callback, expiry sweep) ends in
``apply_outcome``. A sale only ever moves forward, ``pending`` to ``paid`` or
``pending`` to ``cancelled``, so replayed or out-of-order outcomes are no-ops.
"""

import uuid
from datetime import timedelta

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from events.exceptions import ExternalServiceError, InvalidStateError, NoPendingPaymentError, NotFoundError
from events.models import Sale
from events.service import inventory_service
from events.service.payment_gateway import OUTCOME_COMPLETED, OUTCOME_EXPIRED, gateway

logger = structlog.get_logger(__name__)


@transaction.atomic
def request_payment(sale_id: uuid.UUID) -> str:
    """Issue the provider payment for a pending sale and return the checkout URL.

    The payment token is stored once. Asking again while the checkout is still open
    returns the same URL.

    Raises:
        NotFoundError: If the sale does not exist.
        InvalidStateError: If the sale is no longer pending or its checkout has closed.
        ExternalServiceError: If the provider cannot be reached.
    """
    sale = Sale.objects.select_for_update().filter(pk=sale_id).select_related("event", "category", "buyer").first()
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    if sale.status != Sale.SaleStatus.PENDING:
        raise InvalidStateError("sale", sale.status)

    if sale.payment_token:
        session = gateway.retrieve(sale.payment_token)
        if session["status"] != "open":
            raise InvalidStateError("payment", session["status"], "The checkout for this sale is closed.")
        return str(session["url"])

    expires_at = timezone.now() + timedelta(minutes=settings.PAYMENT_DEFAULT_EXPIRY_MINUTES)
    payment = gateway.request_payment(
        amount=sale.amount,
        currency=sale.currency,
        description=f"{sale.quantity} x {sale.category.name} - {sale.event.name}",
        success_url=settings.PAYMENT_SUCCESS_URL.format(sale_id=sale.id),
        failure_url=settings.PAYMENT_FAILURE_URL.format(sale_id=sale.id),
        buyer_email=sale.buyer.email or None,
        reference=sale.reference,
        metadata={"sale_id": str(sale.id), "reference": sale.reference},
        expires_at=expires_at,
    )

    sale.payment_token = payment.token
    sale.payment_requested_at = timezone.now()
    sale.expires_at = expires_at
    sale.save(update_fields=["payment_token", "payment_requested_at", "expires_at", "updated_at"])

    logger.info("payment_requested", sale_id=str(sale.id), amount=str(sale.amount), currency=sale.currency)
    return payment.redirect_url


@transaction.atomic
def apply_outcome(sale_id: uuid.UUID, outcome: str) -> Sale:
    """Apply a payment outcome to a sale, exactly once in effect.

    ``completed`` marks the sale paid and queues the buyer notification; its tickets
    stay sold. Any other outcome cancels the sale: amount zeroed, token cleared and
    tickets returned to the pool. A sale that is already paid or cancelled is left
    as it is, whatever the outcome.

    Raises:
        NotFoundError: If the sale does not exist.
        NoPendingPaymentError: If no payment was ever requested for the sale.
    """
    sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    if sale.payment_requested_at is None:
        logger.warning("payment_outcome_without_payment", sale_id=str(sale_id), outcome=outcome)
        raise NoPendingPaymentError()

    if sale.status != Sale.SaleStatus.PENDING:
        logger.info("payment_outcome_duplicate", sale_id=str(sale.id), outcome=outcome, status=sale.status)
        return sale

    if outcome == OUTCOME_COMPLETED:
        sale.status = Sale.SaleStatus.PAID
        sale.paid_at = timezone.now()
        sale.save(update_fields=["status", "paid_at", "updated_at"])
        transaction.on_commit(lambda: _notify_buyer(sale.id))
        logger.info("sale_paid", sale_id=str(sale.id), amount=str(sale.amount), currency=sale.currency)
    else:
        cancel_sale(sale, reason=outcome)
    return sale


def cancel_sale(sale: Sale, *, reason: str) -> None:
    """Void a locked pending sale and return its tickets to the pool.

    Must be called inside a transaction holding the sale's row lock.
    """
    ticket_ids = list(sale.tickets.values_list("pk", flat=True))
    inventory_service.release(ticket_ids)

    sale.status = Sale.SaleStatus.CANCELLED
    sale.amount = 0
    sale.payment_token = None
    sale.cancelled_at = timezone.now()
    sale.save(update_fields=["status", "amount", "payment_token", "cancelled_at", "updated_at"])
    logger.info("sale_cancelled", sale_id=str(sale.id), reason=reason, released=len(ticket_ids))


def _notify_buyer(sale_id: uuid.UUID) -> None:
    from events.tasks import send_purchase_confirmation

    send_purchase_confirmation.delay(str(sale_id))


def handle_callback(sale_id: uuid.UUID, status: str) -> Sale:
    """Handle the buyer's browser returning from the checkout.

    The status in the redirect is only a hint. A success redirect is confirmed with
    the provider; a failure redirect first closes the checkout so it cannot be paid
    afterwards, then cancels the sale. A checkout the provider reports as paid is
    always applied as completed.

    Raises:
        NotFoundError: If the sale does not exist.
        NoPendingPaymentError: If no payment was ever requested for the sale.
        ExternalServiceError: If the provider cannot be reached.
    """
    sale = Sale.objects.filter(pk=sale_id).first()
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    if sale.payment_requested_at is None:
        raise NoPendingPaymentError()
    if sale.status != Sale.SaleStatus.PENDING or not sale.payment_token:
        return sale

    outcome = gateway.fetch_outcome(sale.payment_token)
    if outcome is None and status != OUTCOME_COMPLETED:
        gateway.expire(sale.payment_token)
        outcome = gateway.fetch_outcome(sale.payment_token) or status
    if outcome is None:
        logger.info("payment_callback_unconfirmed", sale_id=str(sale.id))
        return sale

    logger.info("payment_callback", sale_id=str(sale.id), status=status, outcome=outcome)
    return apply_outcome(sale.id, outcome)


def expire_stale_sales() -> int:
    """Cancel pending sales whose reservation window has passed.

    A sale the provider reports as paid is completed instead. Sales whose provider
    cannot be reached are skipped until the next run. A sale whose ticket was
    admitted while the sweep ran is left pending; one such sale never stops the
    others from being swept.

    Returns:
        The number of sales cancelled.
    """
    cancelled = 0
    for sale_id in list(Sale.objects.stale().values_list("pk", flat=True)):
        try:
            if _expire_sale(sale_id):
                cancelled += 1
        except ExternalServiceError:
            logger.warning("sale_expiry_skipped", sale_id=str(sale_id))
        except InvalidStateError as e:
            logger.warning("sale_cancellation_blocked", sale_id=str(sale_id), reason=str(e))
    if cancelled:
        logger.info("stale_sales_expired", count=cancelled)
    return cancelled


@transaction.atomic
def _expire_sale(sale_id: uuid.UUID) -> bool:
    sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
    if sale is None or sale.status != Sale.SaleStatus.PENDING or sale.expires_at >= timezone.now():
        return False

    if sale.payment_token:
        outcome = gateway.fetch_outcome(sale.payment_token)
        if outcome == OUTCOME_COMPLETED:
            apply_outcome(sale.id, outcome)
            return False
        if outcome is None:
            gateway.expire(sale.payment_token)

    cancel_sale(sale, reason=OUTCOME_EXPIRED)
    return True
