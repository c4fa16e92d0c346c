"""Stripe Checkout as the payment provider.

The rest of the app only sees ``PaymentSession`` and outcome strings, never
Stripe objects.
"""

import typing as t
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import stripe
import structlog
from django.conf import settings
from stripe.checkout import Session

from events.exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY

OUTCOME_COMPLETED = "completed"
OUTCOME_EXPIRED = "expired"
OUTCOME_FAILED = "failed"

PAID_PAYMENT_STATUSES = {"paid", "no_payment_required"}

# Currencies Stripe expects in whole units rather than cents.
ZERO_DECIMAL_CURRENCIES = {
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga", "pyg",
    "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
}  # fmt: skip


@dataclass(frozen=True)
class PaymentSession:
    token: str
    redirect_url: str


def to_minor_units(amount: Decimal, currency: str) -> int:
    """Convert an amount to the integer unit Stripe expects for the currency."""
    if currency.lower() in ZERO_DECIMAL_CURRENCIES:
        return int(amount)
    return int(amount * 100)


def session_outcome(session: t.Any) -> str | None:
    """Map a checkout session to a payment outcome, or None while it is still open."""
    if session["status"] == "complete" and session["payment_status"] in PAID_PAYMENT_STATUSES:
        return OUTCOME_COMPLETED
    if session["status"] == "expired":
        return OUTCOME_EXPIRED
    return None


class StripeGateway:
    """Thin wrapper over the Stripe Checkout API."""

    def request_payment(
        self,
        *,
        amount: Decimal,
        currency: str,
        description: str,
        success_url: str,
        failure_url: str,
        buyer_email: str | None,
        reference: str,
        metadata: dict[str, str],
        expires_at: datetime,
    ) -> PaymentSession:
        """Open a hosted checkout session for ``amount``."""
        session_data: dict[str, t.Any] = dict(  # noqa: C408
            line_items=[
                {
                    "price_data": {
                        "currency": currency.lower(),
                        "product_data": {"name": description},
                        "unit_amount": to_minor_units(amount, currency),
                    },
                    "quantity": 1,
                }
            ],
            mode="payment",
            success_url=success_url,
            cancel_url=failure_url,
            client_reference_id=reference,
            metadata=metadata,
            expires_at=int(expires_at.timestamp()),
        )
        if buyer_email:
            session_data["customer_email"] = buyer_email
        try:
            session = Session.create(**session_data)
        except stripe.StripeError as e:
            logger.error("stripe_session_create_failed", reference=reference, error=str(e))
            raise ExternalServiceError("payment") from e
        return PaymentSession(token=session.id, redirect_url=t.cast(str, session.url))

    def retrieve(self, token: str) -> Session:
        """Fetch a checkout session."""
        try:
            return Session.retrieve(token)
        except stripe.StripeError as e:
            logger.error("stripe_session_retrieve_failed", session_id=token, error=str(e))
            raise ExternalServiceError("payment") from e

    def fetch_outcome(self, token: str) -> str | None:
        """Ask the provider how a session ended. None means it is still open."""
        return session_outcome(self.retrieve(token))

    def expire(self, token: str) -> None:
        """Close an open session so it can no longer be paid."""
        try:
            Session.expire(token)
        except stripe.InvalidRequestError:
            # Already expired or completed.
            logger.info("stripe_session_not_expirable", session_id=token)
        except stripe.StripeError as e:
            logger.error("stripe_session_expire_failed", session_id=token, error=str(e))
            raise ExternalServiceError("payment") from e


gateway = StripeGateway()
