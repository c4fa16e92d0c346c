"""Stripe webhook event handlers."""

import typing as t

import stripe
import structlog

from events.exceptions import InvalidStateError, NoPendingPaymentError, NotFoundError
from events.models import Sale
from events.service import payment_service
from events.service.payment_gateway import (
    OUTCOME_COMPLETED,
    OUTCOME_EXPIRED,
    OUTCOME_FAILED,
    PAID_PAYMENT_STATUSES,
)

logger = structlog.get_logger(__name__)


class StripeEventHandler:
    """Routes Stripe checkout events to payment reconciliation."""

    def __init__(self, event: stripe.Event):
        """Initialize the Stripe event handler."""
        self.event = event

    def handle(self) -> None:
        """Routes the event to the appropriate handler based on its type."""
        event_type = self.event.type
        handler_method = getattr(self, f"handle_{event_type.replace('.', '_')}", self.handle_unknown_event)
        handler_method(self.event)

    def handle_unknown_event(self, event: stripe.Event) -> None:
        """Log unhandled event types."""
        logger.info("stripe_webhook_unhandled_event", event_type=event.type, event_id=event.id)

    def handle_checkout_session_completed(self, event: stripe.Event) -> None:
        """The buyer finished the checkout. Asynchronous payment methods may still be unpaid."""
        session = event.data.object
        if session["payment_status"] not in PAID_PAYMENT_STATUSES:
            logger.warning(
                "stripe_session_unresolved_payment",
                session_id=session["id"],
                payment_status=session["payment_status"],
            )
            return
        self._apply(session, OUTCOME_COMPLETED)

    def handle_checkout_session_async_payment_succeeded(self, event: stripe.Event) -> None:
        """A delayed payment method settled."""
        self._apply(event.data.object, OUTCOME_COMPLETED)

    def handle_checkout_session_async_payment_failed(self, event: stripe.Event) -> None:
        """A delayed payment method failed."""
        self._apply(event.data.object, OUTCOME_FAILED)

    def handle_checkout_session_expired(self, event: stripe.Event) -> None:
        """The checkout was abandoned or expired."""
        self._apply(event.data.object, OUTCOME_EXPIRED)

    def _apply(self, session: t.Any, outcome: str) -> None:
        sale_id = self._resolve_sale_id(session)
        if sale_id is None:
            logger.warning("stripe_session_unknown_sale", session_id=session["id"], outcome=outcome)
            return
        try:
            payment_service.apply_outcome(sale_id, outcome)
        except (NotFoundError, NoPendingPaymentError):
            # Acknowledge so Stripe stops retrying an event we will never be able to apply.
            logger.warning("stripe_webhook_unmatched_sale", session_id=session["id"], sale_id=str(sale_id))
        except InvalidStateError as e:
            # A ticket of the sale was admitted at the gate; the sale cannot be cancelled any more.
            logger.warning(
                "sale_cancellation_blocked",
                session_id=session["id"],
                sale_id=str(sale_id),
                outcome=outcome,
                reason=str(e),
            )

    @staticmethod
    def _resolve_sale_id(session: t.Any) -> t.Any:
        metadata = session.get("metadata") or {}
        if sale_id := metadata.get("sale_id"):
            return sale_id
        return Sale.objects.filter(payment_token=session["id"]).values_list("pk", flat=True).first()
